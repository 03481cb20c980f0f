from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Protocol


class CurrencyCode(StrEnum):
    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"
    CHF = "CHF"
    SEK = "SEK"
    NOK = "NOK"
    DKK = "DKK"
    PLN = "PLN"
    CAD = "CAD"
    JPY = "JPY"


HOME_CURRENCY = CurrencyCode.EUR


class ExchangeRateProvider(Protocol):
    """Lookup interface for the home-currency quote of a currency on a calendar day.

    The quote is expressed like EURUSD for USD (1.1216 on 2022-02-25); amounts are
    converted by multiplying with it.

    Implementations raise ``RateUnavailable`` when nothing is published for the pair.
    """

    def exchange_rate(self, currency: CurrencyCode, on: date) -> Decimal: ...


def convert_to_home(value: int, rate: Decimal) -> Decimal:
    """Convert a minor-unit amount using the quote returned by an ``ExchangeRateProvider``."""
    return Decimal(value) * rate


__all__ = ["HOME_CURRENCY", "CurrencyCode", "ExchangeRateProvider", "convert_to_home"]
