from __future__ import annotations

CURRENCY = "IDR"


def ensure_amount(value: int, field_name: str = "amount") -> int:
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return value


def format_price(amount: int) -> str:
    """Render an IDR amount the way receipts show it, e.g. ``Rp 25.000``."""
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"
