from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional
from .common import gen_id

class SubService(BaseModel):
    id: str = Field(default_factory=gen_id)
    name: str
    warning: Optional[str] = None  # copied onto line items built from it
    default_price: float = 0.0

class CatalogEntry(BaseModel):
    id: str = Field(default_factory=gen_id)
    name: str
    subservices: List[SubService] = Field(default_factory=list)
    active: bool = True

    def find_sub(self, sub_id: str) -> Optional[SubService]:
        for s in self.subservices:
            if s.id == sub_id:
                return s
        return None
