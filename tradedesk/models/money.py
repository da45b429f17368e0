from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal, Optional
from .common import gen_id

PaymentStatus = Literal["unpaid", "partial", "paid"]

class LineItem(BaseModel):
    id: str = Field(default_factory=gen_id)
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0
    total: float = 0.0  # derived, see pricing.engine.normalize
    warning: Optional[str] = None
    service_description: Optional[str] = None

    model_config = {"extra": "ignore"}

class Totals(BaseModel):
    subtotal: float = 0.0
    tax_rate: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0

class PaymentState(BaseModel):
    total: float = 0.0
    amount_paid: float = 0.0
    status: PaymentStatus = "unpaid"
    balance: float = 0.0
