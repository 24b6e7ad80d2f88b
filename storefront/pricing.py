"""
Money helpers: parsing, BRL formatting and discount labels.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

CENTS = Decimal("0.01")
Number = Union[Decimal, float, int, str]


def to_decimal(value: Number) -> Decimal:
    """
    Parse a price into a two-place Decimal.

    Accepts numbers and strings in either ``1234.56`` or Brazilian
    ``R$ 1.234,56`` notation.

    Raises:
        ValueError: if the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError("not a number")
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).replace("R$", "").strip()
        if "," in text:
            text = text.replace(".", "").replace(",", ".")
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"not a number: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"not a number: {value!r}")
    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"amount out of range: {value!r}") from exc


def format_price(value: Optional[Number]) -> str:
    """Render an amount as ``R$ 1.234,56``."""
    if not value:
        return "R$ 0,00"
    amount = to_decimal(value)
    grouped = f"{amount:,.2f}"
    return "R$ " + grouped.replace(",", "_").replace(".", ",").replace("_", ".")


def compute_discount(price: Number, old_price: Optional[Number]) -> Optional[str]:
    """Return e.g. ``"33% OFF"`` when the old price exceeds the price, else None."""
    if old_price is None:
        return None
    price = to_decimal(price)
    old_price = to_decimal(old_price)
    if old_price <= 0 or old_price <= price:
        return None
    percent = ((old_price - price) / old_price * 100).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return f"{percent}% OFF"


def truncate_text(text: Optional[str], max_length: int = 100) -> str:
    if not text:
        return "Produto MJ TECH"
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
