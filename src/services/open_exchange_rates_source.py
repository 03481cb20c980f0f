from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from domain.errors import RateUnavailable
from domain.pricing import HOME_CURRENCY, CurrencyCode, ExchangeRateProvider

from .open_exchange_rates_client import HistoricalRates, OpenExchangeRatesAPIError, OpenExchangeRatesClient

logger = logging.getLogger(__name__)

# Open Exchange Rates answers 400 "not_available" for dates without published rates.
_NOT_PUBLISHED_STATUSES = frozenset({400, 404})


class OpenExchangeRatesProvider(ExchangeRateProvider):
    """Daily home-currency quotes (EURUSD for USD) derived from Open Exchange Rates historical snapshots."""

    def __init__(
        self,
        *,
        client: OpenExchangeRatesClient | None = None,
        home_currency: CurrencyCode = HOME_CURRENCY,
    ) -> None:
        self.client = client or OpenExchangeRatesClient()
        self.home_currency = home_currency

    def exchange_rate(self, currency: CurrencyCode, on: date) -> Decimal:
        if currency == self.home_currency:
            return Decimal("1")

        try:
            snapshot = self.client.get_historical_rates(target_date=on, symbols=(currency, self.home_currency))
        except OpenExchangeRatesAPIError as exc:
            if exc.status_code not in _NOT_PUBLISHED_STATUSES:
                raise
            logger.warning("Open Exchange Rates has no snapshot for %s: %s", on.isoformat(), exc)
            raise RateUnavailable(currency, on) from exc

        return self._compute_rate(snapshot=snapshot, currency=currency, on=on)

    def _compute_rate(self, *, snapshot: HistoricalRates, currency: str, on: date) -> Decimal:
        # Snapshot rates are units of each currency per one unit of the snapshot base;
        # the result is the home-currency quote, e.g. EURUSD for USD.
        currency_rate = self._resolve_rate(snapshot=snapshot, currency=currency, on=on)
        home_rate = self._resolve_rate(snapshot=snapshot, currency=self.home_currency, on=on)
        return currency_rate / home_rate

    @staticmethod
    def _resolve_rate(*, snapshot: HistoricalRates, currency: str, on: date) -> Decimal:
        if currency == snapshot.base:
            return Decimal("1")
        rate = snapshot.rates.get(currency)
        if rate is None or rate == 0:
            raise RateUnavailable(currency, on, f"Currency {currency} not available in Open Exchange Rates data")
        return rate


__all__ = ["OpenExchangeRatesProvider"]
