from __future__ import annotations
from pydantic import EmailStr, Field
from typing import Optional
from .common import TimeStamped, gen_id
from .client import WorkflowStatus

class Company(TimeStamped):
    """Property management company owning several units."""
    id: str = Field(default_factory=gen_id)
    name: str
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    billing_address: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_zip: Optional[str] = None

    notes: Optional[str] = None

class Property(TimeStamped):
    id: str = Field(default_factory=gen_id)
    company_id: str

    address: str
    unit: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    workflow_status: WorkflowStatus = "new"
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None

    quote_id: Optional[str] = None
    invoice_id: Optional[str] = None
    contract_id: Optional[str] = None

    notes: Optional[str] = None

    def display_name(self) -> str:
        return f"{self.address}, {self.unit}" if self.unit else self.address
