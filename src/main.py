from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from config import config
from domain.enricher import TransactionEnricher
from domain.errors import TaxReportError
from domain.pricing import ExchangeRateProvider
from domain.securities import SecurityClassifier
from domain.tax import TaxForm, aggregate_tax_form
from importers.broker_csv_importer import BrokerCsvImporter
from services.open_exchange_rates_source import OpenExchangeRatesProvider
from services.openfigi_client import OpenFigiClient
from services.security_sources import HybridSecurityClassifier, OpenFigiSecuritySource, SecurityRegistry
from services.static_rates import StaticExchangeRates
from utils.tax_form_summary import render_tax_form

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def build_classifier(securities_csv: Path | None, *, remote: bool) -> SecurityClassifier:
    registry = SecurityRegistry.from_csv(securities_csv) if securities_csv is not None else SecurityRegistry()
    if not remote:
        return registry
    fallback = OpenFigiSecuritySource(client=OpenFigiClient(api_key=config().openfigi_api_key))
    return HybridSecurityClassifier(registry=registry, fallback=fallback)


def build_exchange_rates(rates_csv: Path | None) -> ExchangeRateProvider:
    if rates_csv is not None:
        return StaticExchangeRates.from_csv(rates_csv)
    return OpenExchangeRatesProvider()


def run(
    csv_path: Path,
    *,
    securities_csv: Path | None,
    rates_csv: Path | None,
    remote_securities: bool,
) -> TaxForm:
    # Setup components
    importer = BrokerCsvImporter(csv_path)
    enricher = TransactionEnricher(
        classifier=build_classifier(securities_csv, remote=remote_securities),
        exchange_rates=build_exchange_rates(rates_csv),
        max_concurrency=config().max_concurrent_lookups,
    )

    # Get data
    transactions = importer.load_transactions()

    # Process stuff
    taxable_transactions = asyncio.run(enricher.enrich(transactions))
    form = aggregate_tax_form(taxable_transactions)

    # Print summary
    print(f"Imported {len(transactions)} transactions from {csv_path}")
    render_tax_form(form)
    return form


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute the stock exchange transaction tax for a broker export.")
    parser.add_argument("--csv", type=Path, default=PROJECT_ROOT / "data" / "transactions.csv")
    parser.add_argument(
        "--securities-csv", type=Path, default=None, help="ISIN registry (isin,type,domicile,accumulating)."
    )
    parser.add_argument(
        "--rates-csv", type=Path, default=None, help="Exchange rates (date,currency,rate)."
    )
    parser.add_argument(
        "--remote-securities", action="store_true", help="Look up ISINs missing from the registry on OpenFIGI."
    )
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    try:
        run(
            args.csv,
            securities_csv=args.securities_csv,
            rates_csv=args.rates_csv,
            remote_securities=args.remote_securities,
        )
    except TaxReportError as exc:
        logger.error("Tax report aborted: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
