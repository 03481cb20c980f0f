from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from .errors import InvalidClassification
from .securities import CountryCode, SecurityType
from .transactions import TaxableTransaction

LOW_RATE = Decimal("0.0012")
STANDARD_RATE = Decimal("0.0035")
ACCUMULATING_FUND_RATE = Decimal("0.0132")

# EU-27 plus Iceland, Liechtenstein and Norway.
EEA_COUNTRIES: frozenset[CountryCode] = frozenset(
    {
        CountryCode.AUSTRIA,
        CountryCode.BELGIUM,
        CountryCode.BULGARIA,
        CountryCode.CROATIA,
        CountryCode.CYPRUS,
        CountryCode.CZECHIA,
        CountryCode.DENMARK,
        CountryCode.ESTONIA,
        CountryCode.FINLAND,
        CountryCode.FRANCE,
        CountryCode.GERMANY,
        CountryCode.GREECE,
        CountryCode.HUNGARY,
        CountryCode.ICELAND,
        CountryCode.IRELAND,
        CountryCode.ITALY,
        CountryCode.LATVIA,
        CountryCode.LIECHTENSTEIN,
        CountryCode.LITHUANIA,
        CountryCode.LUXEMBOURG,
        CountryCode.MALTA,
        CountryCode.NETHERLANDS,
        CountryCode.NORWAY,
        CountryCode.POLAND,
        CountryCode.PORTUGAL,
        CountryCode.ROMANIA,
        CountryCode.SLOVAKIA,
        CountryCode.SLOVENIA,
        CountryCode.SPAIN,
        CountryCode.SWEDEN,
    }
)


class Jurisdiction(StrEnum):
    BELGIUM = "BELGIUM"
    EEA = "EEA"
    OTHER = "OTHER"


def jurisdiction_of(country: CountryCode) -> Jurisdiction:
    if country == CountryCode.BELGIUM:
        return Jurisdiction.BELGIUM
    if country in EEA_COUNTRIES:
        return Jurisdiction.EEA
    return Jurisdiction.OTHER


def rate_for(transaction: TaxableTransaction) -> Decimal:
    """Resolve the tax rate applying to a single taxable transaction.

    Funds domiciled in Belgium are taxed on their distribution policy: accumulating
    funds carry the highest rate, distributing ones the low rate. Other funds only
    depend on whether they are domiciled inside the EEA. Stocks always use the
    standard rate.
    """
    security = transaction.security
    match (security.type, security.accumulating):
        case (SecurityType.ETF, bool(accumulating)):
            match jurisdiction_of(transaction.country_code):
                case Jurisdiction.BELGIUM:
                    return ACCUMULATING_FUND_RATE if accumulating else LOW_RATE
                case Jurisdiction.EEA:
                    return LOW_RATE
                case Jurisdiction.OTHER:
                    return STANDARD_RATE
        case (SecurityType.STOCK, None):
            return STANDARD_RATE
    raise InvalidClassification(security)


class FormRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int
    taxable_value: Decimal
    tax_value: Decimal


TaxForm = dict[Decimal, FormRow]


def aggregate_tax_form(transactions: Iterable[TaxableTransaction]) -> TaxForm:
    """Group taxable transactions by tax rate and total them per rate."""
    totals: dict[Decimal, tuple[int, Decimal]] = {}
    for transaction in transactions:
        rate = rate_for(transaction)
        count, taxable_total = totals.get(rate, (0, Decimal("0")))
        totals[rate] = (count + 1, taxable_total + transaction.value)

    return {
        rate: FormRow(quantity=count, taxable_value=taxable_total, tax_value=taxable_total * rate)
        for rate, (count, taxable_total) in totals.items()
    }


def merge_tax_forms(first: Mapping[Decimal, FormRow], second: Mapping[Decimal, FormRow]) -> TaxForm:
    merged: TaxForm = dict(first)
    for rate, row in second.items():
        existing = merged.get(rate)
        if existing is None:
            merged[rate] = row
            continue
        taxable_total = existing.taxable_value + row.taxable_value
        merged[rate] = FormRow(
            quantity=existing.quantity + row.quantity,
            taxable_value=taxable_total,
            tax_value=taxable_total * rate,
        )
    return merged


__all__ = [
    "ACCUMULATING_FUND_RATE",
    "EEA_COUNTRIES",
    "LOW_RATE",
    "STANDARD_RATE",
    "FormRow",
    "Jurisdiction",
    "TaxForm",
    "aggregate_tax_form",
    "jurisdiction_of",
    "merge_tax_forms",
    "rate_for",
]
