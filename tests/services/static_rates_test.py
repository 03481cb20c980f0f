from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from domain.errors import RateUnavailable
from domain.pricing import CurrencyCode
from services.static_rates import StaticExchangeRates


def test_static_rates_lookup() -> None:
    rates = StaticExchangeRates({(CurrencyCode.USD, date(2022, 2, 25)): Decimal("1.1216")})

    assert rates.exchange_rate(CurrencyCode.USD, date(2022, 2, 25)) == Decimal("1.1216")
    assert rates.exchange_rate(CurrencyCode.EUR, date(2022, 2, 25)) == Decimal("1")


def test_static_rates_do_not_default_missing_days() -> None:
    rates = StaticExchangeRates({(CurrencyCode.USD, date(2022, 2, 25)): Decimal("1.1216")})

    with pytest.raises(RateUnavailable):
        rates.exchange_rate(CurrencyCode.USD, date(2022, 2, 26))


def test_static_rates_from_csv(tmp_path: Path) -> None:
    path = tmp_path / "rates.csv"
    path.write_text("date,currency,rate\n2022-02-25,usd,1.1216\n2022-02-25,GBP,1.19\n", encoding="utf-8")

    rates = StaticExchangeRates.from_csv(path)

    assert rates.exchange_rate(CurrencyCode.USD, date(2022, 2, 25)) == Decimal("1.1216")
    assert rates.exchange_rate(CurrencyCode.GBP, date(2022, 2, 25)) == Decimal("1.19")


@pytest.mark.parametrize("row", ["2022-02-25,USD,abc", "2022-02-30,USD,1.1", "2022-02-25,XYZ,1.1", "2022-02-25,USD,0"])
def test_static_rates_reject_invalid_rows(tmp_path: Path, row: str) -> None:
    path = tmp_path / "rates.csv"
    path.write_text(f"date,currency,rate\n{row}\n", encoding="utf-8")

    with pytest.raises(ValueError, match="rates.csv:2"):
        StaticExchangeRates.from_csv(path)
