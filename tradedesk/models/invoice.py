from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from .common import TimeStamped, gen_id, utcnow
from .money import LineItem, PaymentState, PaymentStatus, Totals

class PaymentRecord(BaseModel):
    id: str = Field(default_factory=gen_id)
    amount: float
    method: Optional[str] = None  # cash, check, card, venmo, zelle…
    at: datetime = Field(default_factory=utcnow)

class Invoice(TimeStamped):
    id: str = Field(default_factory=gen_id)
    number: Optional[str] = None
    client_id: str
    quote_id: Optional[str] = None

    items: List[LineItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0

    amount_paid: float = 0.0
    status: PaymentStatus = "unpaid"
    balance: float = 0.0
    payments: List[PaymentRecord] = Field(default_factory=list)

    due_date: Optional[date] = None
    notes: Optional[str] = None

    model_config = {"extra": "ignore"}

    def apply_totals(self, t: Totals) -> None:
        self.subtotal = t.subtotal
        self.tax_rate = t.tax_rate
        self.tax = t.tax
        self.discount = t.discount
        self.total = t.total

    def payment_state(self) -> PaymentState:
        return PaymentState(
            total=self.total, amount_paid=self.amount_paid,
            status=self.status, balance=self.balance,
        )

    def apply_payment_state(self, s: PaymentState) -> None:
        self.amount_paid = s.amount_paid
        self.status = s.status
        self.balance = s.balance
