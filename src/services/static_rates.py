from __future__ import annotations

from csv import DictReader
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping

from domain.errors import RateUnavailable
from domain.pricing import HOME_CURRENCY, CurrencyCode, ExchangeRateProvider


class StaticExchangeRates(ExchangeRateProvider):
    """Exchange rates from a fixed (currency, date) table."""

    def __init__(
        self,
        rates: Mapping[tuple[CurrencyCode, date], Decimal] | None = None,
        *,
        home_currency: CurrencyCode = HOME_CURRENCY,
    ) -> None:
        self._rates = dict(rates or {})
        self.home_currency = home_currency

    def exchange_rate(self, currency: CurrencyCode, on: date) -> Decimal:
        if currency == self.home_currency:
            return Decimal("1")
        try:
            return self._rates[(currency, on)]
        except KeyError as exc:
            raise RateUnavailable(currency, on) from exc

    @classmethod
    def from_csv(cls, path: Path) -> StaticExchangeRates:
        """Load ``date,currency,rate`` rows; ``rate`` is the home-currency quote, e.g. EURUSD for USD."""
        rates: dict[tuple[CurrencyCode, date], Decimal] = {}
        with path.open("r", encoding="utf-8", newline="") as handle:
            for line_no, row in enumerate(DictReader(handle), start=2):
                try:
                    key = (CurrencyCode(row["currency"].strip().upper()), date.fromisoformat(row["date"].strip()))
                    rate = Decimal(row["rate"].strip())
                except (KeyError, ValueError, InvalidOperation, AttributeError) as exc:
                    msg = f"Invalid exchange rate row at {path}:{line_no}"
                    raise ValueError(msg) from exc
                if rate <= 0:
                    msg = f"Exchange rate must be > 0 at {path}:{line_no}"
                    raise ValueError(msg)
                rates[key] = rate
        return cls(rates)


__all__ = ["StaticExchangeRates"]
