"""Service agreement sections. Placeholders are Jinja2 expressions."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from jinja2 import Environment, StrictUndefined

from tradedesk.models.client import Client
from tradedesk.models.contract import Contract
from tradedesk.models.settings import Settings
from tradedesk.rendering.formatting import format_money

TEMPLATE_VERSION = "1.0.0"
TITLE = "Service Agreement & Contract"

SECTIONS: List[Dict[str, str]] = [
    {
        "id": "intro",
        "title": "Agreement",
        "content": 'This Service Agreement ("Agreement") is entered into between {{ company_name }} '
                   '("Contractor") and {{ client_name }} ("Client") on {{ contract_date }}.',
    },
    {
        "id": "scope",
        "title": "Scope of Work",
        "content": "The Contractor agrees to perform the following services at {{ client_address }}:\n\n"
                   "{{ services_list }}\n\n"
                   "Total Contract Amount: {{ total_amount }}",
    },
    {
        "id": "payment",
        "title": "Payment Terms",
        "content": "Payment is due as follows:\n"
                   "- A deposit of {{ deposit_pct }}% ({{ deposit_amount }}) is due upon signing this agreement.\n"
                   "- The remaining balance ({{ balance_amount }}) is due upon completion of work.\n"
                   "- Accepted payment methods: Cash, Check, Credit Card, Venmo, Zelle.",
    },
    {
        "id": "warranty",
        "title": "Warranty",
        "content": "{{ warranty }}",
    },
    {
        "id": "scheduling",
        "title": "Scheduling & Access",
        "content": "- Work will be scheduled for {{ appointment_date }} at {{ appointment_time }}.\n"
                   "- Client agrees to provide reasonable access to the work area.",
    },
    {
        "id": "cancellation",
        "title": "Cancellation Policy",
        "content": "- Cancellations made more than 48 hours before scheduled service will receive a full deposit refund.\n"
                   "- Cancellations within 48 hours of scheduled service forfeit the deposit.",
    },
    {
        "id": "acceptance",
        "title": "Acceptance",
        "content": "By signing below, both parties agree to all terms and conditions stated in this agreement.",
    },
]

DEFAULT_WARRANTY = (
    "Work is warranted for a period of 3 years from the date of completion. "
    "The warranty does not cover damage from impact, abrasive cleaners or improper use."
)

_env = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=False)


def contract_variables(contract: Contract, client: Optional[Client], settings: Settings) -> Dict[str, Any]:
    money = lambda v: format_money(v, settings.currency_symbol)  # noqa: E731
    return {
        "company_name": settings.company_name,
        "client_name": client.name if client else "Client",
        "client_address": contract.property_address or (client.full_address() if client else "") or "the service address",
        "contract_date": contract.created_at.strftime("%Y-%m-%d"),
        "services_list": contract.scope or "As described in the attached quote.",
        "total_amount": money(contract.total_amount),
        "deposit_pct": f"{settings.deposit_pct * 100:g}",
        "deposit_amount": money(contract.deposit_amount),
        "balance_amount": money(contract.balance_amount),
        "warranty": contract.warranty or DEFAULT_WARRANTY,
        "appointment_date": contract.start_date or "a date to be agreed",
        "appointment_time": "a time to be agreed",
    }


def fill_sections(variables: Dict[str, Any]) -> List[Dict[str, str]]:
    return [
        {"id": s["id"], "title": s["title"], "content": _env.from_string(s["content"]).render(**variables)}
        for s in SECTIONS
    ]


def render_contract_text(contract: Contract, client: Optional[Client], settings: Settings) -> str:
    sections = fill_sections(contract_variables(contract, client, settings))
    body = "\n\n".join(f"{s['title'].upper()}\n{s['content']}" for s in sections)
    head = f"{TITLE}\nContract #: {contract.number or contract.id}"
    if contract.terms:
        body += f"\n\nADDITIONAL TERMS\n{contract.terms}"
    return f"{head}\n\n{body}\n"
