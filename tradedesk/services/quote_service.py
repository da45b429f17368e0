from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from tradedesk import config
from tradedesk.models.client import Client
from tradedesk.models.common import today
from tradedesk.models.money import LineItem
from tradedesk.models.quote import ClientSnapshot, Quote, QuoteStatus
from tradedesk.pricing.engine import aggregate, format_id, normalize
from tradedesk.services.settings_service import SettingsService
from tradedesk.storage.errors import RecordNotFound
from tradedesk.storage.json_repo import JsonRepository

log = logging.getLogger(__name__)


def snapshot_client(client: Client) -> ClientSnapshot:
    return ClientSnapshot(
        id=client.id,
        name=client.name,
        phone=client.phone,
        email=client.email,
        address=client.full_address() or None,
    )


class QuoteService:
    def __init__(self, data_dir: Optional[str | Path] = None, settings: Optional[SettingsService] = None) -> None:
        base = Path(data_dir) if data_dir else config.data_dir()
        self.repo = JsonRepository(base / "quotes.json", entity_name="quote", key="id")
        self.settings = settings or SettingsService(base)

    # ----- hydration ----- #

    def _hydrate(self, d: Dict[str, Any]) -> Quote:
        return Quote.model_validate(d)

    def list_quotes(self) -> List[Quote]:
        out: List[Quote] = []
        for d in self.repo.list_all():
            try:
                out.append(self._hydrate(d))
            except ValidationError as e:
                log.warning("Skipping invalid quote %s: %s", d.get("id"), e)
        return sorted(out, key=lambda q: q.created_at, reverse=True)

    def get_by_id(self, quote_id: str) -> Optional[Quote]:
        d = self.repo.get_by_id(quote_id)
        return self._hydrate(d) if d else None

    def require(self, quote_id: str) -> Quote:
        q = self.get_by_id(quote_id)
        if q is None:
            raise RecordNotFound("quote", "id", quote_id)
        return q

    def list_by_client(self, client_id: str) -> List[Quote]:
        return [q for q in self.list_quotes() if q.client_id == client_id]

    # ----- totals ----- #

    @staticmethod
    def recalc(quote: Quote) -> Quote:
        """Re-normalize every line, then re-aggregate with the quote's tax/discount."""
        quote.items = [normalize(it) for it in quote.items]
        quote.apply_totals(aggregate(quote.items, quote.tax_rate, quote.discount))
        return quote

    # ----- CRUD ----- #

    def _next_number(self, on: date) -> str:
        s = self.settings.get()
        return format_id(s.quote_prefix, on, self.settings.next_sequence())

    def create_quote(
        self,
        client: Client,
        items: Iterable[LineItem | Dict[str, Any]] = (),
        *,
        tax_rate: Optional[float] = None,
        discount: float = 0.0,
        notes: str = "",
        due_terms: Optional[str] = None,
        on: Optional[date] = None,
    ) -> Quote:
        created = on or today()
        q = Quote(
            client_id=client.id,
            client=snapshot_client(client),
            items=[it if isinstance(it, LineItem) else LineItem.model_validate(it) for it in items],
            tax_rate=self.settings.get().default_tax_rate if tax_rate is None else tax_rate,
            discount=discount,
            notes=notes,
            due_terms=due_terms,
        )
        q.number = self._next_number(created)
        self.recalc(q)
        self.repo.add(q)
        log.info("Created quote %s for %s, total %.2f", q.number, client.name, q.total)
        return q

    def save(self, quote: Quote) -> Quote:
        self.recalc(quote)
        quote.touch()
        self.repo.upsert(quote)
        return quote

    def delete_quote(self, quote_id: str) -> bool:
        return self.repo.delete(quote_id)

    # ----- line edits ----- #

    def add_item(self, quote_id: str, item: LineItem | Dict[str, Any]) -> Quote:
        q = self.require(quote_id)
        q.items.append(item if isinstance(item, LineItem) else LineItem.model_validate(item))
        return self.save(q)

    def update_item(self, quote_id: str, item_id: str, **changes: Any) -> Quote:
        """Edit description/quantity/unit_price/warning of a line. `total` is always recomputed."""
        changes.pop("total", None)
        q = self.require(quote_id)
        for idx, it in enumerate(q.items):
            if it.id == item_id:
                q.items[idx] = LineItem.model_validate({**it.model_dump(), **changes})
                return self.save(q)
        raise RecordNotFound("line item", "id", item_id)

    def remove_item(self, quote_id: str, item_id: str) -> Quote:
        q = self.require(quote_id)
        kept = [it for it in q.items if it.id != item_id]
        if len(kept) == len(q.items):
            raise RecordNotFound("line item", "id", item_id)
        q.items = kept
        return self.save(q)

    def set_adjustments(self, quote_id: str, *, tax_rate: Optional[float] = None, discount: Optional[float] = None) -> Quote:
        q = self.require(quote_id)
        if tax_rate is not None:
            q.tax_rate = tax_rate
        if discount is not None:
            q.discount = discount
        return self.save(q)

    def set_status(self, quote_id: str, status: QuoteStatus) -> Quote:
        q = self.require(quote_id)
        q.status = status
        return self.save(q)

    def set_appointment(self, quote_id: str, on: Optional[str], at: Optional[str] = None) -> Quote:
        q = self.require(quote_id)
        q.appointment_date = on
        q.appointment_time = at
        return self.save(q)
