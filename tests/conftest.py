import pytest

from tradedesk.models.client import Client
from tradedesk.models.money import LineItem
from tradedesk.services.client_service import ClientService
from tradedesk.services.settings_service import SettingsService


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    d = tmp_path / "data"
    monkeypatch.setenv("TRADEDESK_DATA_DIR", str(d))
    monkeypatch.setenv("TRADEDESK_EXPORTS_DIR", str(tmp_path / "exports"))
    return d


@pytest.fixture
def settings(data_dir):
    return SettingsService(data_dir)


@pytest.fixture
def client(data_dir):
    c = Client(
        name="Jane Doe",
        phone="315-555-0100",
        email="jane@example.com",
        address="12 Main St",
        city="Utica",
        state="NY",
        zip="13501",
    )
    ClientService(data_dir).add_client(c)
    return c


@pytest.fixture
def items():
    return [
        LineItem(description="Tub reglaze", quantity=1, unit_price=450),
        LineItem(description="Tile surround", quantity=2, unit_price=125.5),
    ]
