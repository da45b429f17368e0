from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import ValidationError

from tradedesk import config
from tradedesk.models.client import Client
from tradedesk.models.common import today
from tradedesk.models.contract import Contract, ContractStatus, Signature
from tradedesk.models.quote import Quote
from tradedesk.pricing.engine import format_id, payment_state, round2
from tradedesk.rendering.contract_template import render_contract_text
from tradedesk.services.settings_service import SettingsService
from tradedesk.storage.errors import RecordNotFound
from tradedesk.storage.json_repo import JsonRepository

log = logging.getLogger(__name__)


def _scope_from_quote(quote: Quote) -> str:
    return "\n".join(f"- {it.description} (x{it.quantity:g})" for it in quote.items)


class ContractService:
    def __init__(self, data_dir: Optional[str | Path] = None, settings: Optional[SettingsService] = None):
        base = Path(data_dir) if data_dir else config.data_dir()
        self.repo = JsonRepository(base / "contracts.json", entity_name="contract", key="id")
        self.settings = settings or SettingsService(base)

    # ----- list / get ----- #

    def list_contracts(self) -> List[Contract]:
        out: List[Contract] = []
        for d in self.repo.list_all():
            try:
                out.append(Contract(**d))
            except ValidationError as e:
                log.warning("Skipping invalid contract %s: %s", d.get("id"), e)
        return out

    def list_by_client(self, client_id: str) -> List[Contract]:
        return [c for c in self.list_contracts() if c.client_id == client_id]

    def get_by_id(self, contract_id: str) -> Optional[Contract]:
        d = self.repo.get_by_id(contract_id)
        return Contract(**d) if d else None

    def require(self, contract_id: str) -> Contract:
        c = self.get_by_id(contract_id)
        if c is None:
            raise RecordNotFound("contract", "id", contract_id)
        return c

    def delete_contract(self, contract_id: str) -> bool:
        return self.repo.delete(contract_id)

    # ----- amounts ----- #

    @staticmethod
    def recalc(contract: Contract) -> Contract:
        """balance = max(0, total - check - cash), through the payment tracker."""
        state = payment_state(contract.total_amount, round2(contract.check_amount + contract.cash_amount))
        contract.balance_amount = state.balance
        return contract

    def save(self, contract: Contract) -> Contract:
        self.recalc(contract)
        contract.touch()
        self.repo.upsert(contract)
        return contract

    # ----- creation ----- #

    def create_from_quote(self, quote: Quote, *, property_address: Optional[str] = None, on: Optional[date] = None) -> Contract:
        s = self.settings.get()
        created = on or today()
        total = quote.total
        c = Contract(
            client_id=quote.client_id,
            quote_id=quote.id,
            scope=_scope_from_quote(quote),
            property_address=property_address or (quote.client.address if quote.client else None),
            start_date=quote.appointment_date,
            total_amount=total,
            deposit_amount=round2(total * s.deposit_pct),
            due_terms=quote.due_terms,
        )
        c.number = format_id(s.contract_prefix, created, self.settings.next_sequence())
        self.recalc(c)
        self.repo.add(c)
        log.info("Created contract %s from quote %s", c.number, quote.number)
        return c

    def record_amounts(self, contract_id: str, *, check: Optional[float] = None, cash: Optional[float] = None) -> Contract:
        c = self.require(contract_id)
        if check is not None:
            c.check_amount = check
        if cash is not None:
            c.cash_amount = cash
        return self.save(c)

    def sign(self, contract_id: str, party: Literal["client", "contractor"], name: str, data_url: str) -> Contract:
        if party not in ("client", "contractor"):
            raise ValueError(f"Unknown signing party {party!r}")
        c = self.require(contract_id)
        sig = Signature(name=name, data_url=data_url)
        if party == "client":
            c.client_signature = sig
        else:
            c.contractor_signature = sig
        if c.client_signature and c.contractor_signature and c.status in ("draft", "sent"):
            c.status = "signed"
        return self.save(c)

    def set_status(self, contract_id: str, status: ContractStatus) -> Contract:
        c = self.require(contract_id)
        c.status = status
        return self.save(c)

    def render_text(self, contract: Contract, client: Optional[Client] = None) -> str:
        return render_contract_text(contract, client, self.settings.get())
