from __future__ import annotations

import threading
import time
from datetime import date
from decimal import Decimal
from typing import Mapping

from domain.errors import RateUnavailable, UnknownSecurity
from domain.pricing import CurrencyCode
from domain.securities import CountryCode, Security, SecurityClassification

IWDA = "IE00B4L5Y983"
IUSA_DIST = "IE0031442068"
AAPL = "US0378331005"
NESTLE = "CH0038863350"
CH_ETF_ACC = "CH0017142719"
BE_ETF_ACC = "BE0974349814"
BE_ETF_DIST = "BE0948608451"

EURUSD_DATE = date(2022, 2, 25)

DEFAULT_CLASSIFICATIONS: dict[str, SecurityClassification] = {
    IWDA: SecurityClassification(security=Security.etf(accumulating=True), domicile=CountryCode.IRELAND),
    IUSA_DIST: SecurityClassification(security=Security.etf(accumulating=False), domicile=CountryCode.IRELAND),
    AAPL: SecurityClassification(security=Security.stock(), domicile=CountryCode.UNITED_STATES),
    NESTLE: SecurityClassification(security=Security.stock(), domicile=CountryCode.SWITZERLAND),
    CH_ETF_ACC: SecurityClassification(security=Security.etf(accumulating=True), domicile=CountryCode.SWITZERLAND),
    BE_ETF_ACC: SecurityClassification(security=Security.etf(accumulating=True), domicile=CountryCode.BELGIUM),
    BE_ETF_DIST: SecurityClassification(security=Security.etf(accumulating=False), domicile=CountryCode.BELGIUM),
}


class StubClassifier:
    def __init__(
        self,
        classifications: Mapping[str, SecurityClassification] | None = None,
        *,
        delays: Mapping[str, float] | None = None,
    ) -> None:
        self.classifications = dict(DEFAULT_CLASSIFICATIONS if classifications is None else classifications)
        self.delays = dict(delays or {})
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def classify_security(self, isin: str) -> SecurityClassification:
        with self._lock:
            self.calls.append(isin)
        delay = self.delays.get(isin)
        if delay:
            time.sleep(delay)
        try:
            return self.classifications[isin]
        except KeyError as exc:
            raise UnknownSecurity(isin) from exc


class StubExchangeRates:
    def __init__(self, rates: Mapping[tuple[CurrencyCode, date], Decimal] | None = None) -> None:
        self.rates = dict(rates or {})
        self.calls: list[tuple[CurrencyCode, date]] = []
        self._lock = threading.Lock()

    def exchange_rate(self, currency: CurrencyCode, on: date) -> Decimal:
        with self._lock:
            self.calls.append((currency, on))
        try:
            return self.rates[(currency, on)]
        except KeyError as exc:
            raise RateUnavailable(currency, on) from exc
