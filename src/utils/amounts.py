from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

MINOR_UNIT_PRECISION = 2


def decimal_to_minor_units(d: Decimal, precision: int = MINOR_UNIT_PRECISION) -> int:
    return int((d * (Decimal(10) ** precision)).to_integral_value(rounding=ROUND_HALF_UP))
