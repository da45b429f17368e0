import pytest
from pydantic import ValidationError

from tradedesk.models.client import Client
from tradedesk.models.company import Company, Property
from tradedesk.services.client_service import ClientService
from tradedesk.services.company_service import CompanyService
from tradedesk.storage.errors import RecordNotFound


@pytest.fixture
def clients(data_dir):
    return ClientService(data_dir)


@pytest.fixture
def companies(data_dir):
    return CompanyService(data_dir)


class TestClients:

    def test_search(self, clients, client):
        clients.add_client(Client(name="Bob Smith", phone="555-0199"))
        assert [c.name for c in clients.search("jane")] == ["Jane Doe"]
        assert [c.name for c in clients.search("0199")] == ["Bob Smith"]
        assert [c.name for c in clients.search("example.com")] == ["Jane Doe"]
        assert len(clients.search("")) == 2

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            Client(name="X", email="not-an-email")

    def test_invalid_rows_are_skipped(self, clients, client):
        clients.repo.add({"id": "bad", "email": "x"})
        assert [c.id for c in clients.list_clients()] == [client.id]

    def test_schedule(self, clients, client):
        c = clients.schedule(client.id, "2026-06-01", "8:00 AM")
        assert c.workflow_status == "scheduled"
        assert clients.require(client.id).scheduled_time == "8:00 AM"

    def test_require_missing(self, clients):
        with pytest.raises(RecordNotFound):
            clients.require("nope")


class TestCompanies:

    def test_properties(self, companies):
        co = companies.add_company(Company(name="Oak Grove"))
        other = companies.add_company(Company(name="Elm Court"))
        companies.add_property(Property(company_id=co.id, address="1 Oak Grove", unit="3B"))
        companies.add_property(Property(company_id=other.id, address="9 Elm Ct"))
        props = companies.list_properties(co.id)
        assert [p.display_name() for p in props] == ["1 Oak Grove, 3B"]
        assert len(companies.list_properties()) == 2

    def test_property_needs_company(self, companies):
        with pytest.raises(RecordNotFound):
            companies.add_property(Property(company_id="ghost", address="x"))

    def test_delete_company_cascades(self, companies):
        co = companies.add_company(Company(name="Oak Grove"))
        companies.add_property(Property(company_id=co.id, address="1 Oak Grove"))
        assert companies.delete_company(co.id)
        assert companies.list_properties() == []

    def test_schedule_property(self, companies):
        co = companies.add_company(Company(name="Oak Grove"))
        p = companies.add_property(Property(company_id=co.id, address="1 Oak Grove"))
        p = companies.schedule_property(p.id, "2026-06-02")
        assert (p.workflow_status, p.scheduled_date) == ("scheduled", "2026-06-02")
