from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from tradedesk import config
from tradedesk.models.catalog import CatalogEntry, SubService
from tradedesk.models.money import LineItem
from tradedesk.pricing.engine import normalize
from tradedesk.storage.errors import RecordNotFound
from tradedesk.storage.json_repo import JsonRepository

log = logging.getLogger(__name__)


def parse_amount(val: Any) -> Optional[float]:
    """
    Lenient form-field parsing: "$1,250.50" -> 1250.5, "18.5" -> 18.5,
    12 -> 12.0. Returns None for empty or unreadable input.
    """
    if val is None or val == "":
        return None
    if isinstance(val, (int, float, Decimal)) and not isinstance(val, bool):
        return float(val)
    s = re.sub(r"[^0-9.\-]", "", str(val))
    try:
        return float(Decimal(s))
    except (InvalidOperation, ValueError):
        return None


class CatalogService:
    """
    Service catalog: services made of sub-services.
    - upsert "smart": match by id, then by unique name, else add
    - builds normalized line items from a sub-service, carrying its warning
    """

    def __init__(self, data_dir: Optional[str | Path] = None) -> None:
        base = Path(data_dir) if data_dir else config.data_dir()
        self.repo = JsonRepository(base / "catalog.json", entity_name="service", key="id")

    # ---------- helpers ---------- #

    @staticmethod
    def _find_unique_by_name(rows: List[Dict[str, Any]], name: str) -> Optional[int]:
        idxs = [i for i, r in enumerate(rows) if (r.get("name") or "").strip().casefold() == name.strip().casefold()]
        if len(idxs) == 1:
            return idxs[0]
        return None

    # ---------- services ---------- #

    def list_services(self, active_only: bool = False) -> List[CatalogEntry]:
        out: List[CatalogEntry] = []
        for d in self.repo.list_all():
            try:
                entry = CatalogEntry.model_validate(d)
            except ValidationError as e:
                log.warning("Skipping invalid catalog entry %s: %s", d.get("id"), e)
                continue
            if active_only and not entry.active:
                continue
            out.append(entry)
        return out

    def get_service(self, service_id: str) -> CatalogEntry:
        row = self.repo.get_by_id(service_id)
        if row is None:
            raise RecordNotFound("service", "id", service_id)
        return CatalogEntry.model_validate(row)

    def add_service(self, entry: CatalogEntry) -> CatalogEntry:
        self.repo.add(entry)
        return entry

    def upsert_service(self, entry: CatalogEntry) -> CatalogEntry:
        """Update by id, else by unique name (keeps the stored id), else add."""
        with self.repo.lock:
            if self.repo.get_by_id(entry.id):
                self.repo.update(entry)
                return entry
            rows = self.repo.list_all()
            idx = self._find_unique_by_name(rows, entry.name)
            if idx is not None:
                merged = entry.model_copy(update={"id": rows[idx]["id"]})
                self.repo.update(merged)
                return merged
            self.repo.add(entry)
            return entry

    def delete_service(self, service_id: str) -> bool:
        return self.repo.delete(service_id)

    def add_subservice(self, service_id: str, sub: SubService) -> CatalogEntry:
        entry = self.get_service(service_id)
        entry.subservices.append(sub)
        self.repo.update(entry)
        return entry

    # ---------- line items ---------- #

    def build_line_item(
        self,
        service_id: str,
        subservice_id: str,
        quantity: float = 1.0,
        unit_price: Any = None,
    ) -> LineItem:
        entry = self.get_service(service_id)
        sub = entry.find_sub(subservice_id)
        if sub is None:
            raise RecordNotFound("subservice", "id", subservice_id)
        price = parse_amount(unit_price)
        item = LineItem(
            description=f"{entry.name} - {sub.name}",
            quantity=quantity,
            unit_price=sub.default_price if price is None else price,
            warning=sub.warning,
        )
        return normalize(item)
