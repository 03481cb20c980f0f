from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from domain.pricing import CurrencyCode
from domain.securities import CountryCode, country_from_isin
from domain.transactions import RawTransaction


def test_raw_transaction_rejects_non_positive_value() -> None:
    with pytest.raises(ValidationError):
        RawTransaction(date=date(2022, 2, 21), isin="IE00B4L5Y983", currency=CurrencyCode.EUR, value=0)


def test_raw_transaction_rejects_empty_isin() -> None:
    with pytest.raises(ValidationError):
        RawTransaction(date=date(2022, 2, 21), isin="", currency=CurrencyCode.EUR, value=100)


def test_raw_transaction_is_immutable() -> None:
    transaction = RawTransaction(date=date(2022, 2, 21), isin="IE00B4L5Y983", currency=CurrencyCode.EUR, value=100)

    with pytest.raises(ValidationError):
        transaction.value = 200  # type: ignore[misc]


def test_country_from_isin_prefix() -> None:
    assert country_from_isin("IE00B4L5Y983") == CountryCode.IRELAND
    assert country_from_isin("us0378331005") == CountryCode.UNITED_STATES
    assert country_from_isin("XS1234567890") is None
