from __future__ import annotations

import logging
import re
from csv import DictReader
from pathlib import Path
from typing import Iterable, Mapping

from pydantic import BaseModel, ValidationError, field_validator

from domain.errors import UnknownSecurity
from domain.securities import (
    CountryCode,
    Security,
    SecurityClassification,
    SecurityClassifier,
    SecurityType,
    country_from_isin,
)

from .openfigi_client import FigiInstrument, OpenFigiClient

logger = logging.getLogger(__name__)

_ETF_SECURITY_TYPES = frozenset({"ETP", "ETF"})
_STOCK_SECURITY_TYPES = frozenset({"COMMON STOCK", "DEPOSITARY RECEIPT", "ADR", "REIT", "PREFERENCE"})
_ACCUMULATING_MARKERS = frozenset({"ACC", "ACCUM", "ACCUMULATING", "CAPITALISATION"})
_DISTRIBUTING_MARKERS = frozenset({"DIST", "DIS", "DISTRIBUTING", "INC", "DISTRIBUTION"})
_NAME_TOKEN = re.compile(r"[A-Z]+")


class SecurityRegistryRow(BaseModel):
    isin: str
    type: SecurityType
    domicile: CountryCode
    accumulating: bool | None = None

    @field_validator("isin", mode="before")
    @classmethod
    def _normalize_isin(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("type", "domicile", mode="before")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("accumulating", mode="before")
    @classmethod
    def _empty_accumulating(cls, value: str | bool | None) -> str | bool | None:
        if value == "":
            return None
        return value

    def to_classification(self) -> SecurityClassification:
        if self.type == SecurityType.ETF:
            if self.accumulating is None:
                msg = f"ETF {self.isin} must declare accumulating"
                raise ValueError(msg)
            security = Security.etf(accumulating=self.accumulating)
        else:
            if self.accumulating is not None:
                msg = f"Stock {self.isin} must not declare accumulating"
                raise ValueError(msg)
            security = Security.stock()
        return SecurityClassification(security=security, domicile=self.domicile)


class SecurityRegistry(SecurityClassifier):
    """In-memory ISIN→classification table, typically loaded from a CSV file."""

    def __init__(self, classifications: Mapping[str, SecurityClassification] | None = None) -> None:
        self._classifications = {isin.upper(): value for isin, value in (classifications or {}).items()}

    def classify_security(self, isin: str) -> SecurityClassification:
        try:
            return self._classifications[isin.upper()]
        except KeyError as exc:
            raise UnknownSecurity(isin) from exc

    @classmethod
    def from_rows(cls, rows: Iterable[SecurityRegistryRow]) -> SecurityRegistry:
        return cls({row.isin: row.to_classification() for row in rows})

    @classmethod
    def from_csv(cls, path: Path) -> SecurityRegistry:
        rows: list[SecurityRegistryRow] = []
        with path.open("r", encoding="utf-8", newline="") as handle:
            for line_no, raw in enumerate(DictReader(handle), start=2):
                try:
                    row = SecurityRegistryRow.model_validate(raw)
                    row.to_classification()
                except (ValidationError, ValueError) as exc:
                    msg = f"Invalid security registry row at {path}:{line_no}"
                    raise ValueError(msg) from exc
                rows.append(row)
        logger.info("Loaded %d securities from %s", len(rows), path)
        return cls.from_rows(rows)


class OpenFigiSecuritySource(SecurityClassifier):
    """Classify securities using OpenFIGI instrument metadata.

    OpenFIGI reports the security type but neither domicile nor distribution
    policy: the domicile is taken from the ISIN country prefix and the policy
    from share-class markers in the instrument name ("ACC", "DIST").
    """

    def __init__(self, *, client: OpenFigiClient | None = None) -> None:
        self.client = client or OpenFigiClient()

    def classify_security(self, isin: str) -> SecurityClassification:
        domicile = country_from_isin(isin)
        if domicile is None:
            raise UnknownSecurity(isin, f"Unsupported ISIN country prefix for {isin}")

        instruments = self.client.map_isin(isin)
        if not instruments:
            raise UnknownSecurity(isin)

        security_type = self._resolve_type(isin, instruments)
        if security_type == SecurityType.STOCK:
            return SecurityClassification(security=Security.stock(), domicile=domicile)

        accumulating = self._resolve_accumulating(isin, instruments)
        return SecurityClassification(security=Security.etf(accumulating=accumulating), domicile=domicile)

    @staticmethod
    def _resolve_type(isin: str, instruments: list[FigiInstrument]) -> SecurityType:
        for instrument in instruments:
            kinds = {(instrument.security_type or "").upper(), (instrument.security_type2 or "").upper()}
            if kinds & _ETF_SECURITY_TYPES:
                return SecurityType.ETF
            if kinds & _STOCK_SECURITY_TYPES:
                return SecurityType.STOCK
        raise UnknownSecurity(isin, f"OpenFIGI security type of {isin} is not an ETF or stock")

    @staticmethod
    def _resolve_accumulating(isin: str, instruments: list[FigiInstrument]) -> bool:
        for instrument in instruments:
            for text in (instrument.name, instrument.security_description):
                tokens = set(_NAME_TOKEN.findall((text or "").upper()))
                if tokens & _ACCUMULATING_MARKERS:
                    return True
                if tokens & _DISTRIBUTING_MARKERS:
                    return False
        raise UnknownSecurity(isin, f"Cannot determine distribution policy of ETF {isin}")


class HybridSecurityClassifier(SecurityClassifier):
    """Consult a local registry first and fall back to a remote source for unknown ISINs."""

    def __init__(self, *, registry: SecurityClassifier, fallback: SecurityClassifier) -> None:
        self.registry = registry
        self.fallback = fallback

    def classify_security(self, isin: str) -> SecurityClassification:
        try:
            return self.registry.classify_security(isin)
        except UnknownSecurity:
            logger.warning("Security %s not in registry, falling back to remote lookup", isin)
            return self.fallback.classify_security(isin)


__all__ = [
    "HybridSecurityClassifier",
    "OpenFigiSecuritySource",
    "SecurityRegistry",
    "SecurityRegistryRow",
]
