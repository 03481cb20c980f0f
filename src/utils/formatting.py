from __future__ import annotations

from decimal import ROUND_CEILING, Decimal


def format_rate(rate: Decimal) -> str:
    """Render a tax rate as a percentage, e.g. ``0.0012`` -> ``0.12%``."""
    percentage = (rate * 100).normalize()
    if percentage == percentage.to_integral():
        return f"{percentage:.0f}%"
    return f"{format(percentage, 'f')}%"


def format_money(value: int | Decimal, currency_symbol: str = "€") -> str:
    """Render an amount of minor units as ``"€ 1000,00"``.

    Fractional minor units are rounded up, carrying into the whole part when
    they reach a full unit (``199.99`` -> ``"€ 2,00"``).
    """
    cents = Decimal(value).to_integral_value(rounding=ROUND_CEILING)
    whole, fraction = divmod(int(cents), 100)
    return f"{currency_symbol} {whole},{fraction:02d}"
