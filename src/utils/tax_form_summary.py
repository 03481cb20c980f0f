from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from domain.tax import FormRow

from .formatting import format_money, format_rate


def render_tax_form(form: Mapping[Decimal, FormRow], *, currency_symbol: str = "€") -> None:
    rows = sorted(form.items())
    print("Tax on stock exchange transactions:")
    if not rows:
        print("  (no taxable transactions)")
        return

    rate_width = max(len("Rate"), max(len(format_rate(rate)) for rate, _ in rows))
    count_width = max(len("Transactions"), max(len(str(row.quantity)) for _, row in rows))
    taxable_width = max(
        len("Taxable value"), max(len(format_money(row.taxable_value, currency_symbol)) for _, row in rows)
    )
    tax_width = max(len("Tax"), max(len(format_money(row.tax_value, currency_symbol)) for _, row in rows))

    header = (
        f"{'Rate':<{rate_width}} "
        f"{'Transactions':>{count_width}} "
        f"{'Taxable value':>{taxable_width}} "
        f"{'Tax':>{tax_width}}"
    )
    lines = [header, "-" * len(header)]

    for rate, row in rows:
        lines.append(
            f"{format_rate(rate):<{rate_width}} "
            f"{row.quantity:>{count_width}} "
            f"{format_money(row.taxable_value, currency_symbol):>{taxable_width}} "
            f"{format_money(row.tax_value, currency_symbol):>{tax_width}}"
        )

    total_tax = sum((row.tax_value for _, row in rows), Decimal("0"))
    lines.append("-" * len(header))
    lines.append(f"Total tax due: {format_money(total_tax, currency_symbol)}")
    print("\n".join(lines))
