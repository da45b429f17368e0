from datetime import date

import pytest

from tradedesk.pricing.errors import InvalidPaymentAmount
from tradedesk.services.invoice_service import InvoiceService
from tradedesk.services.quote_service import QuoteService
from tradedesk.storage.errors import RecordNotFound


@pytest.fixture
def invoices(data_dir, settings):
    return InvoiceService(data_dir, settings=settings)


@pytest.fixture
def invoice(invoices, client):
    return invoices.create_invoice(
        client.id, [{"description": "Tub", "quantity": 1, "unit_price": 100}],
        tax_rate=0, on=date(2026, 3, 2),
    )


class TestCreate:

    def test_numbering(self, invoice):
        assert invoice.number == "INV-20260302-0001"
        assert (invoice.status, invoice.balance) == ("unpaid", 100.0)

    def test_shares_counter_with_quotes(self, data_dir, settings, invoices, client):
        QuoteService(data_dir, settings=settings).create_quote(client, on=date(2026, 3, 2))
        inv = invoices.create_invoice(client.id, on=date(2026, 3, 2))
        assert inv.number == "INV-20260302-0002"

    def test_from_quote(self, data_dir, settings, invoices, client, items):
        q = QuoteService(data_dir, settings=settings).create_quote(client, items, tax_rate=0.08, discount=25)
        inv = invoices.create_from_quote(q)
        assert inv.quote_id == q.id
        assert inv.total == q.total == 732.08
        assert [it.id for it in inv.items] == [it.id for it in q.items]
        assert invoices.get_by_quote(q.id).id == inv.id

    def test_list_by_client(self, invoices, invoice, client):
        assert [i.id for i in invoices.list_by_client(client.id)] == [invoice.id]


class TestPayments:

    def test_partial_then_paid(self, invoices, invoice):
        inv = invoices.record_payment(invoice.id, 40, "cash")
        assert (inv.amount_paid, inv.status, inv.balance) == (40.0, "partial", 60.0)
        inv = invoices.record_payment(invoice.id, 60, "check")
        assert (inv.amount_paid, inv.status, inv.balance) == (100.0, "paid", 0.0)
        assert [p.method for p in inv.payments] == ["cash", "check"]

    def test_persisted(self, data_dir, invoices, invoice):
        invoices.record_payment(invoice.id, 25)
        stored = InvoiceService(data_dir).require(invoice.id)
        assert stored.amount_paid == 25.0
        assert stored.status == "partial"
        assert len(stored.payments) == 1

    def test_overpayment(self, invoices, invoice):
        invoices.record_payment(invoice.id, 90)
        inv = invoices.record_payment(invoice.id, 50)
        assert (inv.amount_paid, inv.status, inv.balance) == (140.0, "paid", 0.0)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_invalid_amount_leaves_invoice_untouched(self, invoices, invoice, amount):
        with pytest.raises(InvalidPaymentAmount):
            invoices.record_payment(invoice.id, amount)
        stored = invoices.require(invoice.id)
        assert stored.amount_paid == 0.0
        assert stored.payments == []

    def test_unknown_invoice(self, invoices):
        with pytest.raises(RecordNotFound):
            invoices.record_payment("missing", 10)

    def test_editing_lines_keeps_payments(self, invoices, invoice):
        inv = invoices.record_payment(invoice.id, 100)
        assert inv.status == "paid"
        inv.items[0].quantity = 2
        inv = invoices.save(inv)
        assert inv.total == 200.0
        assert (inv.status, inv.balance) == ("partial", 100.0)
