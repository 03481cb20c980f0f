# flake8: noqa E402
# Run via uv to load project deps, e.g.:
# uv run scripts/open_exchange_rates_probe.py --currency USD --date 2022-02-25
from __future__ import annotations

import argparse
import json
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.pricing import HOME_CURRENCY, CurrencyCode
from services.open_exchange_rates_source import OpenExchangeRatesProvider


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch a historical currency→EUR rate from Open Exchange Rates.")
    parser.add_argument("--currency", default="USD", help="Currency code to convert from (default: USD).")
    parser.add_argument(
        "--date",
        default=None,
        help="Historical date (YYYY-MM-DD). Defaults to current UTC date.",
    )
    return parser.parse_args()


def parse_date(raw: str | None) -> date:
    if not raw:
        return datetime.now(timezone.utc).date()
    return datetime.fromisoformat(raw).date()


def main() -> None:
    args = parse_args()

    target_date = parse_date(args.date)
    currency = CurrencyCode(args.currency.upper())
    provider = OpenExchangeRatesProvider()
    rate = provider.exchange_rate(currency, target_date)

    payload: dict[str, Any] = {
        "requested_pair": f"{currency}-{HOME_CURRENCY}",
        "requested_date": target_date.isoformat(),
        "rate": str(rate),
    }
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
