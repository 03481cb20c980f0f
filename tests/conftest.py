from decimal import Decimal

import pytest

from domain.pricing import CurrencyCode
from tests.helpers.stub_collaborators import EURUSD_DATE, StubClassifier, StubExchangeRates


@pytest.fixture(scope="function")
def classifier() -> StubClassifier:
    return StubClassifier()


@pytest.fixture(scope="function")
def exchange_rates() -> StubExchangeRates:
    return StubExchangeRates({(CurrencyCode.USD, EURUSD_DATE): Decimal("1.1216")})
