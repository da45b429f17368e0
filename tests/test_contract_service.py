from datetime import date

import pytest

from tradedesk.services.contract_service import ContractService
from tradedesk.services.quote_service import QuoteService


@pytest.fixture
def contracts(data_dir, settings):
    return ContractService(data_dir, settings=settings)


@pytest.fixture
def quote(data_dir, settings, client, items):
    return QuoteService(data_dir, settings=settings).create_quote(client, items, tax_rate=0, on=date(2026, 4, 1))


class TestContracts:

    def test_from_quote(self, contracts, quote):
        c = contracts.create_from_quote(quote, on=date(2026, 4, 2))
        assert c.number == "C-20260402-0002"
        assert c.total_amount == 701.0
        assert c.deposit_amount == 350.5
        assert c.balance_amount == 701.0
        assert "Tile surround (x2)" in c.scope
        assert c.property_address == "12 Main St, Utica, NY 13501"

    def test_deposit_pct_from_settings(self, contracts, settings, quote):
        settings.update(deposit_pct=0.3)
        assert contracts.create_from_quote(quote).deposit_amount == 210.3

    def test_record_amounts(self, contracts, quote):
        c = contracts.create_from_quote(quote)
        c = contracts.record_amounts(c.id, check=300)
        assert c.balance_amount == 401.0
        c = contracts.record_amounts(c.id, cash=500)
        assert c.balance_amount == 0.0

    def test_signing(self, contracts, quote):
        c = contracts.create_from_quote(quote)
        c = contracts.sign(c.id, "client", "Jane Doe", "data:image/png;base64,AAA")
        assert c.status == "draft"
        c = contracts.sign(c.id, "contractor", "Owner", "data:image/png;base64,BBB")
        assert c.status == "signed"
        assert contracts.require(c.id).client_signature.name == "Jane Doe"

    def test_unknown_party(self, contracts, quote):
        c = contracts.create_from_quote(quote)
        with pytest.raises(ValueError):
            contracts.sign(c.id, "witness", "X", "data:")

    def test_render_text(self, contracts, settings, quote, client):
        settings.update(company_name="ReGlaze Co")
        c = contracts.create_from_quote(quote)
        text = contracts.render_text(c, client)
        assert "between ReGlaze Co (\"Contractor\") and Jane Doe" in text
        assert "Total Contract Amount: $701.00" in text
        assert "A deposit of 50% ($350.50)" in text
        assert f"Contract #: {c.number}" in text

    def test_status(self, contracts, quote):
        c = contracts.create_from_quote(quote)
        assert contracts.set_status(c.id, "sent").status == "sent"
        assert [x.id for x in contracts.list_by_client(quote.client_id)] == [c.id]
