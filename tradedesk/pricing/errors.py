from __future__ import annotations
from typing import Any


class PricingError(ValueError):
    """Base class for errors raised by the totals/ID engine."""


class InvalidSequence(PricingError):
    def __init__(self, sequence: Any) -> None:
        super().__init__(f"Document sequence must be a positive integer, got {sequence!r}")
        self.sequence = sequence


class InvalidPaymentAmount(PricingError):
    def __init__(self, amount: Any) -> None:
        super().__init__(f"Payment amount must be greater than zero, got {amount!r}")
        self.amount = amount
