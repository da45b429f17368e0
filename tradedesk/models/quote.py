from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from .common import TimeStamped, gen_id
from .money import LineItem, Totals

QuoteStatus = Literal["pending", "approved", "scheduled", "in_progress", "completed", "canceled"]

class ClientSnapshot(BaseModel):
    """Client details frozen at the time the quote was written."""
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

class Quote(TimeStamped):
    id: str = Field(default_factory=gen_id)
    number: Optional[str] = None
    client_id: str
    client: Optional[ClientSnapshot] = None

    items: List[LineItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0

    status: QuoteStatus = "pending"
    notes: str = ""

    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    due_terms: Optional[str] = None

    model_config = {"extra": "ignore"}  # older JSON rows may carry extra keys

    def apply_totals(self, t: Totals) -> None:
        self.subtotal = t.subtotal
        self.tax_rate = t.tax_rate
        self.tax = t.tax
        self.discount = t.discount
        self.total = t.total
