from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from tradedesk import config
from tradedesk.models.client import WorkflowStatus
from tradedesk.models.company import Company, Property
from tradedesk.storage.errors import RecordNotFound
from tradedesk.storage.json_repo import JsonRepository

log = logging.getLogger(__name__)


class CompanyService:
    """Property management companies and the units (properties) they own."""

    def __init__(self, data_dir: Optional[str | Path] = None):
        base = Path(data_dir) if data_dir else config.data_dir()
        self.companies = JsonRepository(base / "companies.json", entity_name="company", key="id")
        self.properties = JsonRepository(base / "properties.json", entity_name="property", key="id")

    # ----- companies ----- #

    def list_companies(self) -> List[Company]:
        out: List[Company] = []
        for d in self.companies.list_all():
            try:
                out.append(Company(**d))
            except ValidationError as e:
                log.warning("Skipping invalid company %s: %s", d.get("id"), e)
        return out

    def get_company(self, company_id: str) -> Optional[Company]:
        d = self.companies.get_by_id(company_id)
        return Company(**d) if d else None

    def add_company(self, company: Company) -> Company:
        self.companies.add(company)
        return company

    def update_company(self, company: Company) -> Company:
        company.touch()
        self.companies.update(company)
        return company

    def delete_company(self, company_id: str) -> bool:
        """Deletes the company and every property attached to it."""
        for p in self.list_properties(company_id):
            self.properties.delete(p.id)
        return self.companies.delete(company_id)

    # ----- properties ----- #

    def list_properties(self, company_id: Optional[str] = None) -> List[Property]:
        out: List[Property] = []
        for d in self.properties.list_all():
            if company_id and d.get("company_id") != company_id:
                continue
            try:
                out.append(Property(**d))
            except ValidationError as e:
                log.warning("Skipping invalid property %s: %s", d.get("id"), e)
        return out

    def get_property(self, property_id: str) -> Optional[Property]:
        d = self.properties.get_by_id(property_id)
        return Property(**d) if d else None

    def require_property(self, property_id: str) -> Property:
        p = self.get_property(property_id)
        if p is None:
            raise RecordNotFound("property", "id", property_id)
        return p

    def add_property(self, prop: Property) -> Property:
        if self.get_company(prop.company_id) is None:
            raise RecordNotFound("company", "id", prop.company_id)
        self.properties.add(prop)
        return prop

    def update_property(self, prop: Property) -> Property:
        prop.touch()
        self.properties.update(prop)
        return prop

    def delete_property(self, property_id: str) -> bool:
        return self.properties.delete(property_id)

    def set_property_status(self, property_id: str, status: WorkflowStatus) -> Property:
        p = self.require_property(property_id)
        p.workflow_status = status
        return self.update_property(p)

    def schedule_property(self, property_id: str, on: str, at: Optional[str] = None) -> Property:
        p = self.require_property(property_id)
        p.scheduled_date = on
        p.scheduled_time = at
        p.workflow_status = "scheduled"
        return self.update_property(p)

    def find_property_by_link(self, *, quote_id: Optional[str] = None, invoice_id: Optional[str] = None) -> Optional[Property]:
        for p in self.list_properties():
            if quote_id and p.quote_id == quote_id:
                return p
            if invoice_id and p.invoice_id == invoice_id:
                return p
        return None
