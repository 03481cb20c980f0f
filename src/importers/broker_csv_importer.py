from __future__ import annotations

import datetime
import logging
import re
from csv import DictReader
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from domain.pricing import CurrencyCode
from domain.transactions import RawTransaction
from utils.amounts import decimal_to_minor_units

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y")

# Whole part is plain digits or 3-digit groups with one consistent thousands separator;
# a decimal separator needs one or two digits after it and must differ from the thousands one.
AMOUNT_PATTERN = re.compile(
    r"(?P<sign>-?)"
    r"(?P<whole>\d+|[1-9]\d{0,2}(?P<sep>[.,])\d{3}(?:(?P=sep)\d{3})*)"
    r"(?:(?!(?P=sep))[.,](?P<fraction>\d{1,2}))?"
)


class BrokerTransactionRow(BaseModel):
    date: datetime.date
    isin: str
    currency: CurrencyCode
    amount: Decimal

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: str | datetime.date) -> datetime.date:
        if isinstance(value, datetime.date):
            return value
        raw = value.strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.datetime.strptime(raw, fmt).date()
            except ValueError:
                continue
        msg = f"Unsupported date format: {value!r}"
        raise ValueError(msg)

    @field_validator("isin", "currency", mode="before")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: str | Decimal) -> str | Decimal:
        if isinstance(value, str):
            match = AMOUNT_PATTERN.fullmatch(value.strip().replace(" ", ""))
            if match is None:
                msg = f"Malformed or ambiguous amount: {value!r}"
                raise ValueError(msg)
            whole = match["whole"]
            if match["sep"]:
                whole = whole.replace(match["sep"], "")
            return f"{match['sign']}{whole}.{match['fraction'] or '0'}"
        return value

    def to_raw_transaction(self) -> RawTransaction:
        # Sells are exported as negative amounts; the tax applies to the traded value.
        return RawTransaction(
            date=self.date,
            isin=self.isin,
            currency=self.currency,
            value=decimal_to_minor_units(abs(self.amount)),
        )


class BrokerCsvImporter:
    """Load broker transaction exports with ``date,isin,currency,amount`` columns."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load_transactions(self) -> list[RawTransaction]:
        transactions: list[RawTransaction] = []
        with self.path.open("r", encoding="utf-8", newline="") as handle:
            for line_no, raw in enumerate(DictReader(handle), start=2):
                try:
                    row = BrokerTransactionRow.model_validate(raw)
                    transactions.append(row.to_raw_transaction())
                except ValidationError as exc:
                    msg = f"Invalid broker transaction at {self.path}:{line_no}"
                    raise ValueError(msg) from exc
        logger.info("Loaded %d transactions from %s", len(transactions), self.path)
        return transactions


__all__ = ["BrokerCsvImporter", "BrokerTransactionRow"]
