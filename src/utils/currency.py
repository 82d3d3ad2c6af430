# src/utils/currency.py

"""Rupiah number parsing and display helpers.

Indonesian formatting groups thousands with ``.`` and uses ``,`` as the
decimal separator, so ``Rp 2.943.600.000`` is two billion nine hundred
forty three million six hundred thousand rupiah.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_NON_DIGIT_RE = re.compile(r"\D")


def parse_grouped_number(text: str) -> int:
    """Convert a thousands-grouped numeral like ``2.943.600.000`` to int.

    Grouping separators (``.`` and ``,``) and any other non-digit
    characters are stripped. Raises ``ValueError`` when no digits remain.
    """
    digits = _NON_DIGIT_RE.sub("", text)
    if not digits:
        raise ValueError(f"No digits in {text!r}")
    return int(digits)


def parse_weight(text: str) -> Decimal:
    """Parse a weight token such as ``0,5`` or ``1000`` into a Decimal."""
    try:
        value = Decimal(text.strip().replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid weight {text!r}") from exc
    if not value.is_finite() or value <= 0:
        raise ValueError(f"Weight must be positive, got {text!r}")
    return value


def format_weight(weight: Decimal) -> str:
    """Render a weight without trailing zeros or exponent (``0.5``, ``1000``)."""
    return format(weight.normalize(), "f")


def format_rupiah(amount: int) -> str:
    """Format an integer amount the id-ID way: ``Rp 2.943.600.000``."""
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def price_per_unit(sell_price: int, weight: Decimal | None) -> int:
    """Sell price divided by weight, rounded half-up to an integer.

    Unweighted quotes use a unit weight of 1.
    """
    divisor = weight if weight is not None else Decimal(1)
    quotient = Decimal(sell_price) / divisor
    return int(quotient.to_integral_value(rounding=ROUND_HALF_UP))
