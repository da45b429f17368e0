from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional

class Settings(BaseModel):
    id: str = "settings"
    company_left_lines: List[str] = Field(default_factory=list)
    company_right_lines: List[str] = Field(default_factory=list)
    company_name: str = "My Company"

    default_tax_rate: float = 0.0
    next_sequence: int = 1

    quote_prefix: str = "Q"
    invoice_prefix: str = "INV"
    contract_prefix: str = "C"

    deposit_pct: float = 0.5
    currency_symbol: str = "$"
    watermark: Optional[str] = None
    wkhtmltopdf_path: Optional[str] = None

    model_config = {"extra": "ignore"}
