"""
Totals & document-ID engine.

Every quote, invoice and contract amount in the app goes through these
functions. They are pure: no I/O, inputs are never mutated, results are new
pydantic value objects.

Rounding policy: half-up to 2 decimals, applied once per computed value
(line total, subtotal, tax, total, amount paid), never on intermediate steps.
"""
from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Iterable, Mapping, Union

from tradedesk.models.money import LineItem, PaymentState, PaymentStatus, Totals
from tradedesk.pricing.errors import InvalidPaymentAmount, InvalidSequence

Number = Union[int, float, Decimal]

_CENT = Decimal("0.01")


def _dec(value: Any) -> Decimal:
    # str() first so that 1.005 stays 1.005 and not 1.00499999...
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value if value is not None else 0))


def _q2(value: Decimal) -> Decimal:
    # quantize needs every integer digit plus two decimals within the context precision
    with localcontext() as ctx:
        ctx.prec = max(28, value.adjusted() + 3)
        return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def round2(value: Number) -> float:
    """Round half-up to 2 decimals (1.005 -> 1.01, -1.005 -> -1.01)."""
    return float(_q2(_dec(value)))


# ---------- Line Item Normalizer ---------- #

def normalize(item: LineItem | Mapping[str, Any]) -> LineItem:
    li = item if isinstance(item, LineItem) else LineItem.model_validate(dict(item))
    total = _q2(_dec(li.quantity) * _dec(li.unit_price))
    return li.model_copy(update={"total": float(total)})


# ---------- Totals Aggregator ---------- #

def _item_total(item: LineItem | Mapping[str, Any]) -> Decimal:
    if isinstance(item, Mapping):
        return _dec(item.get("total") or 0)
    return _dec(item.total)


def aggregate(items: Iterable[LineItem | Mapping[str, Any]], tax_rate: Number = 0, discount: Number = 0) -> Totals:
    """
    subtotal -> tax on subtotal -> minus discount. The order is business
    policy (tax is never applied to the discount) and must stay as is.
    Negative totals are returned as-is.
    """
    subtotal = _q2(sum((_item_total(it) for it in items), Decimal(0)))
    tax = _q2(subtotal * _dec(tax_rate))
    total = _q2(subtotal + tax - _dec(discount))
    return Totals(
        subtotal=float(subtotal),
        tax_rate=float(tax_rate or 0),
        tax=float(tax),
        discount=float(discount or 0),
        total=float(total),
    )


# ---------- Sequential Document ID Formatter ---------- #

def format_id(prefix: str, on: date, sequence: int) -> str:
    """`Q`, 2026-01-15, 7 -> `Q-20260115-0007`."""
    if isinstance(sequence, bool) or not isinstance(sequence, int) or sequence < 1:
        raise InvalidSequence(sequence)
    return f"{prefix}-{on.year:04d}{on.month:02d}{on.day:02d}-{sequence:04d}"


# ---------- Payment/Balance Tracker ---------- #

def classify(total: Number, amount_paid: Number) -> PaymentStatus:
    paid, tot = _dec(amount_paid), _dec(total)
    if paid >= tot:
        return "paid"
    if paid > 0:
        return "partial"
    return "unpaid"


def payment_state(total: Number, amount_paid: Number = 0) -> PaymentState:
    tot, paid = _q2(_dec(total)), _q2(_dec(amount_paid))
    return PaymentState(
        total=float(tot),
        amount_paid=float(paid),
        status=classify(tot, paid),
        balance=float(max(Decimal(0), tot - paid)),
    )


def apply_payment(state: PaymentState | Mapping[str, Any], amount: Number) -> PaymentState:
    """
    Add a payment to the state. Overpayment is accepted: status becomes
    ``paid`` and the balance is floored at 0.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise InvalidPaymentAmount(amount)
    if isinstance(amount, float) and not math.isfinite(amount):
        raise InvalidPaymentAmount(amount)
    if isinstance(amount, Decimal) and not amount.is_finite():
        raise InvalidPaymentAmount(amount)
    if amount <= 0:
        raise InvalidPaymentAmount(amount)

    st = state if isinstance(state, PaymentState) else PaymentState.model_validate(dict(state))
    return payment_state(st.total, _dec(st.amount_paid) + _dec(amount))
