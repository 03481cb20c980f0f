from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .securities import Security


class TaxReportError(Exception):
    """Base class for failures that abort a tax report run."""


class UnknownSecurity(TaxReportError):
    def __init__(self, isin: str, message: str | None = None) -> None:
        super().__init__(message or f"Unknown security {isin}")
        self.isin = isin


class RateUnavailable(TaxReportError):
    def __init__(self, currency: str, on: date, message: str | None = None) -> None:
        super().__init__(message or f"No {currency} exchange rate published for {on.isoformat()}")
        self.currency = currency
        self.on = on


class InvalidClassification(TaxReportError):
    def __init__(self, security: Security) -> None:
        super().__init__(f"Inconsistent security classification: {security!r}")
        self.security = security


__all__ = ["InvalidClassification", "RateUnavailable", "TaxReportError", "UnknownSecurity"]
