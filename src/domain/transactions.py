from __future__ import annotations

import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, model_validator

from .pricing import CurrencyCode
from .securities import CountryCode, Security


class RawTransaction(BaseModel):
    """A broker transaction as exported, before any lookups.

    ``value`` is expressed in minor units (cents) of ``currency``.
    """

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    isin: str
    currency: CurrencyCode
    value: int

    @model_validator(mode="after")
    def _validate_fields(self) -> RawTransaction:
        if not self.isin:
            raise ValueError("RawTransaction.isin must be non-empty")
        if self.value <= 0:
            raise ValueError("RawTransaction.value must be > 0")
        return self


class TaxableTransaction(BaseModel):
    """Transaction ready for taxation; ``value`` is in home-currency minor units."""

    model_config = ConfigDict(frozen=True)

    value: Decimal
    country_code: CountryCode
    security: Security


__all__ = ["RawTransaction", "TaxableTransaction"]
