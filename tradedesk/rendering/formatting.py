from __future__ import annotations
import re
from typing import Any


def format_money(value: Any, symbol: str = "$") -> str:
    """1234.5 -> "$1,234.50", -5 -> "-$5.00"."""
    try:
        v = float(value or 0)
    except (TypeError, ValueError):
        v = 0.0
    sign = "-" if v < 0 else ""
    return f"{sign}{symbol}{abs(v):,.2f}"


def format_rate(rate: Any) -> str:
    """0.08 -> "8.0%"."""
    try:
        return f"{float(rate or 0) * 100:.1f}%"
    except (TypeError, ValueError):
        return "0.0%"


def slug(text: str) -> str:
    text = (text or "").strip()
    text = re.sub(r'[\\/:*?"<>|\n\r\t]', "_", text)
    text = re.sub(r"\s+", " ", text)
    return text or "document"
