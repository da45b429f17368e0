import pytest

from tradedesk.models.company import Company, Property
from tradedesk.services.workflow_service import WorkflowService


@pytest.fixture
def wf(data_dir):
    return WorkflowService(data_dir)


@pytest.fixture
def quote(wf, client):
    return wf.quotes.create_quote(client, [{"description": "Tub", "quantity": 1, "unit_price": 100}], tax_rate=0)


class TestClientJob:

    def test_schedule(self, wf, quote, client):
        q = wf.approve_and_schedule(quote.id, "2026-05-04", "9:00 AM")
        assert q.status == "scheduled"
        c = wf.clients.require(client.id)
        assert (c.workflow_status, c.scheduled_date, c.scheduled_time) == ("scheduled", "2026-05-04", "9:00 AM")

    def test_invoice_once(self, wf, quote, client):
        inv = wf.invoice_quote(quote.id)
        assert wf.invoice_quote(quote.id).id == inv.id
        assert wf.quotes.require(quote.id).status == "completed"
        assert wf.clients.require(client.id).workflow_status == "invoiced"

    def test_paid(self, wf, quote, client):
        inv = wf.invoice_quote(quote.id)
        wf.record_payment(inv.id, 50)
        assert wf.clients.require(client.id).workflow_status == "invoiced"
        wf.record_payment(inv.id, 50)
        assert wf.clients.require(client.id).workflow_status == "paid"


class TestPropertyJob:

    def test_property_carries_status(self, wf, quote, client):
        co = wf.companies.add_company(Company(name="Oak Grove Apartments"))
        prop = wf.companies.add_property(Property(company_id=co.id, address="1 Oak Grove", unit="3B", quote_id=quote.id))

        wf.approve_and_schedule(quote.id, "2026-05-06")
        assert wf.companies.require_property(prop.id).workflow_status == "scheduled"

        inv = wf.invoice_quote(quote.id)
        p = wf.companies.require_property(prop.id)
        assert (p.workflow_status, p.invoice_id) == ("invoiced", inv.id)

        wf.record_payment(inv.id, 100)
        assert wf.companies.require_property(prop.id).workflow_status == "paid"
        # the client record is left alone
        assert wf.clients.require(client.id).workflow_status == "new"
