"""Plain-text e-mail bodies for sending documents to a client."""
from __future__ import annotations

from typing import Optional

from tradedesk.models.client import Client
from tradedesk.models.contract import Contract
from tradedesk.models.invoice import Invoice
from tradedesk.models.quote import Quote
from tradedesk.models.settings import Settings
from tradedesk.pricing.engine import payment_state
from tradedesk.rendering.renderer import DocumentRenderer


def _contact(settings: Settings) -> dict:
    lines = settings.company_right_lines
    email = next((ln for ln in lines if "@" in ln), None)
    phone = next((ln for ln in lines if "@" not in ln), None)
    return {"phone": phone, "email": email}


def quote_email(quote: Quote, settings: Settings, client: Optional[Client] = None) -> str:
    name = client.name if client else (quote.client.name if quote.client else "there")
    return DocumentRenderer(settings).render_text(
        "email_quote.txt",
        client_name=name,
        number=quote.number or quote.id,
        total=quote.total,
        due_terms=quote.due_terms,
        **_contact(settings),
    )


def invoice_email(invoice: Invoice, settings: Settings, client: Optional[Client] = None) -> str:
    state = payment_state(invoice.total, invoice.amount_paid)
    return DocumentRenderer(settings).render_text(
        "email_invoice.txt",
        client_name=client.name if client else "there",
        number=invoice.number or invoice.id,
        total=state.total,
        amount_paid=state.amount_paid,
        balance=state.balance,
        due_date=invoice.due_date.isoformat() if invoice.due_date else None,
        **_contact(settings),
    )


def contract_email(contract: Contract, settings: Settings, client: Optional[Client] = None) -> str:
    return DocumentRenderer(settings).render_text(
        "email_contract.txt",
        client_name=client.name if client else "there",
        number=contract.number or contract.id,
        total_amount=contract.total_amount,
        start_date=contract.start_date,
        **_contact(settings),
    )
