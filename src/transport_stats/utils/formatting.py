"""Presentation helpers shared by report builders."""

from __future__ import annotations

_CURRENCY_SYMBOLS = {"USD": "$", "MXN": "$", "EUR": "€"}


def format_currency(amount: float, currency: str = "USD") -> str:
    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
