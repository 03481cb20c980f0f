from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Generic, Hashable, Sequence, TypeVar

from .errors import TaxReportError
from .pricing import HOME_CURRENCY, CurrencyCode, ExchangeRateProvider, convert_to_home
from .securities import SecurityClassification, SecurityClassifier
from .transactions import RawTransaction, TaxableTransaction

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _LookupMemo(Generic[K, V]):
    """Per-run memo of in-flight lookups for one key family.

    The task is stored before anything is awaited, so the first caller for a key
    owns the lookup and later callers await the same task.
    """

    def __init__(self, name: str, semaphore: asyncio.Semaphore) -> None:
        self._name = name
        self._semaphore = semaphore
        self._tasks: dict[K, asyncio.Task[V]] = {}

    def get(self, key: K, lookup: Callable[[], V]) -> asyncio.Task[V]:
        task = self._tasks.get(key)
        if task is None:
            logger.debug("Lookup cache miss for %s %s", self._name, key)
            task = asyncio.ensure_future(self._run(lookup))
            self._tasks[key] = task
        return task

    async def _run(self, lookup: Callable[[], V]) -> V:
        async with self._semaphore:
            return await asyncio.to_thread(lookup)

    def cancel_pending(self) -> None:
        for task in self._tasks.values():
            if not task.done():
                task.cancel()


@dataclass
class _RunLookups:
    securities: _LookupMemo[str, SecurityClassification]
    rates: _LookupMemo[tuple[CurrencyCode, date], Decimal]

    @classmethod
    def create(cls, max_concurrency: int) -> _RunLookups:
        semaphore = asyncio.Semaphore(max_concurrency)
        return cls(
            securities=_LookupMemo("security", semaphore),
            rates=_LookupMemo("exchange rate", semaphore),
        )

    def cancel_pending(self) -> None:
        self.securities.cancel_pending()
        self.rates.cancel_pending()


class TransactionEnricher:
    """Turn raw broker transactions into taxable transactions.

    Every transaction needs a security classification and, unless it is already
    denominated in the home currency, an exchange rate for its date. Lookups for
    different transactions run concurrently; the result keeps input order.
    """

    def __init__(
        self,
        *,
        classifier: SecurityClassifier,
        exchange_rates: ExchangeRateProvider,
        home_currency: CurrencyCode = HOME_CURRENCY,
        max_concurrency: int = 8,
    ) -> None:
        if max_concurrency <= 0:
            msg = "max_concurrency must be > 0"
            raise ValueError(msg)
        self._classifier = classifier
        self._exchange_rates = exchange_rates
        self._home_currency = home_currency
        self._max_concurrency = max_concurrency

    async def enrich(self, transactions: Sequence[RawTransaction]) -> list[TaxableTransaction]:
        logger.info("Enriching %d transactions", len(transactions))
        lookups = _RunLookups.create(self._max_concurrency)
        tasks = [
            asyncio.ensure_future(self._enrich_one(index, transaction, lookups))
            for index, transaction in enumerate(transactions)
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            _discard(tasks)
            lookups.cancel_pending()
            raise

    async def _enrich_one(self, index: int, transaction: RawTransaction, lookups: _RunLookups) -> TaxableTransaction:
        try:
            classification = await lookups.securities.get(
                transaction.isin,
                lambda: self._classifier.classify_security(transaction.isin),
            )
            value = await self._home_value(transaction, lookups)
        except TaxReportError:
            logger.error(
                "Failed to enrich transaction #%d (%s %s on %s)",
                index,
                transaction.isin,
                transaction.currency,
                transaction.date.isoformat(),
            )
            raise
        return _taxable(classification, value)

    async def _home_value(self, transaction: RawTransaction, lookups: _RunLookups) -> Decimal:
        if transaction.currency == self._home_currency:
            return Decimal(transaction.value)

        rate = await lookups.rates.get(
            (transaction.currency, transaction.date),
            lambda: self._exchange_rates.exchange_rate(transaction.currency, transaction.date),
        )
        return convert_to_home(transaction.value, rate)


def _discard(tasks: list[asyncio.Task[TaxableTransaction]]) -> None:
    # Sibling failures are superseded by the one already propagating.
    for task in tasks:
        if not task.done():
            task.cancel()
        elif not task.cancelled():
            task.exception()


def _taxable(classification: SecurityClassification, value: Decimal) -> TaxableTransaction:
    return TaxableTransaction(
        value=value,
        country_code=classification.domicile,
        security=classification.security,
    )


def enrich_transactions(
    transactions: Sequence[RawTransaction],
    *,
    classifier: SecurityClassifier,
    exchange_rates: ExchangeRateProvider,
    max_concurrency: int = 8,
) -> list[TaxableTransaction]:
    """Synchronous entry point for callers without a running event loop."""
    enricher = TransactionEnricher(
        classifier=classifier,
        exchange_rates=exchange_rates,
        max_concurrency=max_concurrency,
    )
    return asyncio.run(enricher.enrich(transactions))


__all__ = ["TransactionEnricher", "enrich_transactions"]
