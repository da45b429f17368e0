from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime
from .common import TimeStamped, gen_id, utcnow

ContractStatus = Literal["draft", "sent", "signed", "completed", "canceled"]

class Signature(BaseModel):
    data_url: str
    name: str
    date: datetime = Field(default_factory=utcnow)

class Contract(TimeStamped):
    id: str = Field(default_factory=gen_id)
    number: Optional[str] = None
    client_id: str
    quote_id: Optional[str] = None

    template_id: str = "default"
    terms: str = ""
    scope: str = ""
    warranty: str = ""

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    property_address: Optional[str] = None

    total_amount: float = 0.0
    deposit_amount: float = 0.0
    check_amount: float = 0.0
    cash_amount: float = 0.0
    balance_amount: float = 0.0
    due_terms: Optional[str] = None

    client_signature: Optional[Signature] = None
    contractor_signature: Optional[Signature] = None

    status: ContractStatus = "draft"
    notes: Optional[str] = None

    model_config = {"extra": "ignore"}
