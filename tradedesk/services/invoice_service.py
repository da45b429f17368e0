from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from tradedesk import config
from tradedesk.models.common import today
from tradedesk.models.invoice import Invoice, PaymentRecord
from tradedesk.models.money import LineItem
from tradedesk.models.quote import Quote
from tradedesk.pricing.engine import aggregate, apply_payment, format_id, normalize, payment_state
from tradedesk.services.settings_service import SettingsService
from tradedesk.storage.errors import RecordNotFound
from tradedesk.storage.json_repo import JsonRepository

log = logging.getLogger(__name__)


class InvoiceService:
    def __init__(self, data_dir: Optional[str | Path] = None, settings: Optional[SettingsService] = None):
        base = Path(data_dir) if data_dir else config.data_dir()
        self.repo = JsonRepository(base / "invoices.json", entity_name="invoice", key="id")
        self.settings = settings or SettingsService(base)

    # ----------- list / get -----------
    def list_invoices(self) -> List[Invoice]:
        out: List[Invoice] = []
        for d in self.repo.list_all():
            try:
                out.append(Invoice(**d))
            except ValidationError as e:
                log.warning("Skipping invalid invoice %s: %s", d.get("id"), e)
        return out

    def list_by_client(self, client_id: str) -> List[Invoice]:
        return [i for i in self.list_invoices() if i.client_id == client_id]

    def get_by_quote(self, quote_id: str) -> Optional[Invoice]:
        for i in self.list_invoices():
            if i.quote_id == quote_id:
                return i
        return None

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        d = self.repo.get_by_id(invoice_id)
        if d is None:
            return None
        try:
            return Invoice(**d)
        except ValidationError:
            log.warning("Invalid invoice record %s", invoice_id)
            return None

    def require(self, invoice_id: str) -> Invoice:
        inv = self.get_by_id(invoice_id)
        if inv is None:
            raise RecordNotFound("invoice", "id", invoice_id)
        return inv

    def delete_invoice(self, invoice_id: str) -> bool:
        return self.repo.delete(invoice_id)

    # ----------- totals -----------
    @staticmethod
    def recalc(inv: Invoice) -> Invoice:
        """Totals from the lines, then status/balance from the amount already paid."""
        inv.items = [normalize(it) for it in inv.items]
        inv.apply_totals(aggregate(inv.items, inv.tax_rate, inv.discount))
        inv.apply_payment_state(payment_state(inv.total, inv.amount_paid))
        return inv

    def save(self, inv: Invoice) -> Invoice:
        self.recalc(inv)
        inv.touch()
        self.repo.upsert(inv)
        return inv

    # ----------- creation -----------
    def _next_number(self, on: date) -> str:
        s = self.settings.get()
        return format_id(s.invoice_prefix, on, self.settings.next_sequence())

    def create_invoice(
        self,
        client_id: str,
        items: Iterable[LineItem | Dict[str, Any]] = (),
        *,
        tax_rate: Optional[float] = None,
        discount: float = 0.0,
        quote_id: Optional[str] = None,
        due_date: Optional[date] = None,
        notes: Optional[str] = None,
        on: Optional[date] = None,
    ) -> Invoice:
        inv = Invoice(
            client_id=client_id,
            quote_id=quote_id,
            items=[it if isinstance(it, LineItem) else LineItem.model_validate(it) for it in items],
            tax_rate=self.settings.get().default_tax_rate if tax_rate is None else tax_rate,
            discount=discount,
            due_date=due_date,
            notes=notes,
        )
        inv.number = self._next_number(on or today())
        self.recalc(inv)
        self.repo.add(inv)
        log.info("Created invoice %s, total %.2f", inv.number, inv.total)
        return inv

    def create_from_quote(self, quote: Quote, *, due_date: Optional[date] = None, on: Optional[date] = None) -> Invoice:
        """Copies the quote lines, tax rate and discount (line ids are kept)."""
        return self.create_invoice(
            quote.client_id,
            [it.model_copy() for it in quote.items],
            tax_rate=quote.tax_rate,
            discount=quote.discount,
            quote_id=quote.id,
            due_date=due_date,
            notes=quote.notes or None,
            on=on,
        )

    # ----------- payments -----------
    def record_payment(self, invoice_id: str, amount: float, method: Optional[str] = None) -> Invoice:
        """
        Raises InvalidPaymentAmount for amount <= 0. Overpayment is kept
        as-is: status becomes "paid", balance stays at 0.
        """
        with self.repo.lock:
            inv = self.require(invoice_id)
            state = apply_payment(inv.payment_state(), amount)
            inv.apply_payment_state(state)
            inv.payments.append(PaymentRecord(amount=amount, method=method))
            inv.touch()
            self.repo.update(inv)
        if state.amount_paid > state.total:
            log.warning("Invoice %s overpaid: %.2f paid on %.2f", inv.number, state.amount_paid, state.total)
        log.info("Payment of %.2f on invoice %s, now %s", amount, inv.number, inv.status)
        return inv
