# flake8: noqa E402
# Run via uv to load project deps, e.g.:
# uv run scripts/openfigi_probe.py IE00B4L5Y983 US0378331005
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import config
from domain.errors import UnknownSecurity
from services.openfigi_client import OpenFigiClient
from services.security_sources import OpenFigiSecuritySource


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify ISINs using OpenFIGI metadata.")
    parser.add_argument("isins", nargs="+", help="ISINs to look up.")
    parser.add_argument("--raw", action="store_true", help="Print the raw OpenFIGI listings as well.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    client = OpenFigiClient(api_key=config().openfigi_api_key)
    source = OpenFigiSecuritySource(client=client)

    results: list[dict[str, Any]] = []
    for isin in args.isins:
        entry: dict[str, Any] = {"isin": isin}
        try:
            entry["classification"] = source.classify_security(isin).model_dump(mode="json")
        except UnknownSecurity as exc:
            entry["error"] = str(exc)
        if args.raw:
            entry["listings"] = [asdict(instrument) for instrument in client.map_isin(isin)]
        results.append(entry)

    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
