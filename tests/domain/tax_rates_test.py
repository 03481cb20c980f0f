from __future__ import annotations

from decimal import Decimal

import pytest

from domain.errors import InvalidClassification
from domain.securities import CountryCode, Security, SecurityType
from domain.tax import Jurisdiction, jurisdiction_of, rate_for
from domain.transactions import TaxableTransaction


def _taxable(security: Security, country: CountryCode, value: str = "10000") -> TaxableTransaction:
    return TaxableTransaction(value=Decimal(value), country_code=country, security=security)


@pytest.mark.parametrize(
    ("security", "country", "expected"),
    [
        (Security.etf(accumulating=True), CountryCode.IRELAND, Decimal("0.0012")),
        (Security.etf(accumulating=False), CountryCode.IRELAND, Decimal("0.0012")),
        (Security.etf(accumulating=True), CountryCode.SWITZERLAND, Decimal("0.0035")),
        (Security.etf(accumulating=False), CountryCode.SWITZERLAND, Decimal("0.0035")),
        (Security.etf(accumulating=True), CountryCode.BELGIUM, Decimal("0.0132")),
        (Security.etf(accumulating=False), CountryCode.BELGIUM, Decimal("0.0012")),
        (Security.stock(), CountryCode.UNITED_STATES, Decimal("0.0035")),
    ],
)
def test_rate_table(security: Security, country: CountryCode, expected: Decimal) -> None:
    assert rate_for(_taxable(security, country)) == expected


@pytest.mark.parametrize("country", list(CountryCode))
def test_stock_rate_does_not_depend_on_domicile(country: CountryCode) -> None:
    assert rate_for(_taxable(Security.stock(), country)) == Decimal("0.0035")


@pytest.mark.parametrize("country", [CountryCode.LUXEMBOURG, CountryCode.GERMANY, CountryCode.NORWAY])
@pytest.mark.parametrize("accumulating", [True, False])
def test_eea_funds_use_low_rate(country: CountryCode, accumulating: bool) -> None:
    assert rate_for(_taxable(Security.etf(accumulating=accumulating), country)) == Decimal("0.0012")


@pytest.mark.parametrize("country", [CountryCode.UNITED_KINGDOM, CountryCode.UNITED_STATES, CountryCode.JERSEY])
@pytest.mark.parametrize("accumulating", [True, False])
def test_funds_outside_eea_use_standard_rate(country: CountryCode, accumulating: bool) -> None:
    assert rate_for(_taxable(Security.etf(accumulating=accumulating), country)) == Decimal("0.0035")


def test_rate_ignores_transaction_value() -> None:
    small = _taxable(Security.etf(accumulating=True), CountryCode.BELGIUM, value="1")
    large = _taxable(Security.etf(accumulating=True), CountryCode.BELGIUM, value="123456789.5")

    assert rate_for(small) == rate_for(large) == Decimal("0.0132")


def test_jurisdiction_checks_belgium_before_eea() -> None:
    assert jurisdiction_of(CountryCode.BELGIUM) == Jurisdiction.BELGIUM
    assert jurisdiction_of(CountryCode.IRELAND) == Jurisdiction.EEA
    assert jurisdiction_of(CountryCode.SWITZERLAND) == Jurisdiction.OTHER


def test_fund_without_accumulating_flag_is_rejected() -> None:
    transaction = _taxable(Security(type=SecurityType.ETF), CountryCode.IRELAND)

    with pytest.raises(InvalidClassification) as exc_info:
        rate_for(transaction)

    assert exc_info.value.security == transaction.security


def test_stock_with_accumulating_flag_is_rejected() -> None:
    transaction = _taxable(Security(type=SecurityType.STOCK, accumulating=True), CountryCode.UNITED_STATES)

    with pytest.raises(InvalidClassification):
        rate_for(transaction)
