from __future__ import annotations

from enum import StrEnum
from typing import Protocol

from pydantic import BaseModel, ConfigDict


class SecurityType(StrEnum):
    ETF = "ETF"
    STOCK = "STOCK"


class CountryCode(StrEnum):
    """ISO 3166-1 alpha-2 codes of the jurisdictions securities are domiciled in."""

    AUSTRIA = "AT"
    BELGIUM = "BE"
    BULGARIA = "BG"
    CROATIA = "HR"
    CYPRUS = "CY"
    CZECHIA = "CZ"
    DENMARK = "DK"
    ESTONIA = "EE"
    FINLAND = "FI"
    FRANCE = "FR"
    GERMANY = "DE"
    GREECE = "GR"
    HUNGARY = "HU"
    ICELAND = "IS"
    IRELAND = "IE"
    ITALY = "IT"
    LATVIA = "LV"
    LIECHTENSTEIN = "LI"
    LITHUANIA = "LT"
    LUXEMBOURG = "LU"
    MALTA = "MT"
    NETHERLANDS = "NL"
    NORWAY = "NO"
    POLAND = "PL"
    PORTUGAL = "PT"
    ROMANIA = "RO"
    SLOVAKIA = "SK"
    SLOVENIA = "SI"
    SPAIN = "ES"
    SWEDEN = "SE"
    SWITZERLAND = "CH"
    UNITED_KINGDOM = "GB"
    UNITED_STATES = "US"
    CANADA = "CA"
    JAPAN = "JP"
    AUSTRALIA = "AU"
    CAYMAN_ISLANDS = "KY"
    JERSEY = "JE"
    GUERNSEY = "GG"
    BERMUDA = "BM"


class Security(BaseModel):
    """Tagged security description.

    ``accumulating`` is only meaningful for funds: it is set for ETFs and left
    empty for stocks. Use the ``etf``/``stock`` constructors to build valid values.
    """

    model_config = ConfigDict(frozen=True)

    type: SecurityType
    accumulating: bool | None = None

    @classmethod
    def etf(cls, *, accumulating: bool) -> Security:
        return cls(type=SecurityType.ETF, accumulating=accumulating)

    @classmethod
    def stock(cls) -> Security:
        return cls(type=SecurityType.STOCK)


class SecurityClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    security: Security
    domicile: CountryCode


class SecurityClassifier(Protocol):
    """Lookup interface for ISIN→classification; raises ``UnknownSecurity`` when unresolvable."""

    def classify_security(self, isin: str) -> SecurityClassification: ...


def country_from_isin(isin: str) -> CountryCode | None:
    """Return the country encoded in the ISIN prefix, if it is a known jurisdiction."""
    prefix = isin[:2].upper()
    try:
        return CountryCode(prefix)
    except ValueError:
        return None


__all__ = [
    "CountryCode",
    "Security",
    "SecurityClassification",
    "SecurityClassifier",
    "SecurityType",
    "country_from_isin",
]
