from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from config import config


# API docs: https://docs.openexchangerates.org/reference/api-introduction
# API keys: https://openexchangerates.org/account/app-ids
class OpenExchangeRatesAPIError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


@dataclass(frozen=True)
class HistoricalRates:
    date: date
    base: str
    rates: dict[str, Decimal]


class OpenExchangeRatesClient:
    def __init__(
        self,
        *,
        app_id: str | None = None,
        base_url: str = "https://openexchangerates.org/api",
        timeout: float = 10.0,
        session: requests.Session | None = None,
        retry_attempts: int = 5,
        retry_backoff_seconds: float = 1,
    ) -> None:
        resolved_app_id = app_id if app_id is not None else config().open_exchange_rates_app_id
        if not resolved_app_id:
            msg = "app_id must be provided"
            raise ValueError(msg)

        self.app_id = resolved_app_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            retries = Retry(
                total=retry_attempts,
                backoff_factor=retry_backoff_seconds,
                status_forcelist=[429],
                allowed_methods=frozenset({"GET"}),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retries)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self._session = session

    def get_historical_rates(self, *, target_date: date, symbols: Iterable[str] | None = None) -> HistoricalRates:
        """Fetch the end-of-day snapshot, optionally limited to the given currency codes."""
        path = f"/historical/{target_date.isoformat()}.json"
        params: dict[str, str] = {}
        if symbols is not None:
            params["symbols"] = ",".join(sorted({code.upper() for code in symbols}))
        payload = self._request("GET", path, params=params)

        base_currency = payload.get("base")
        rates_raw = payload.get("rates")
        if base_currency is None or not isinstance(rates_raw, dict):
            raise OpenExchangeRatesAPIError("Open Exchange Rates payload missing required fields", payload=payload)

        parsed_rates: dict[str, Decimal] = {
            code_raw.upper(): self._to_decimal(rate) for code_raw, rate in rates_raw.items()
        }

        return HistoricalRates(
            date=target_date,
            base=str(base_currency).upper(),
            rates=parsed_rates,
        )

    def _request(self, method: str, path: str, *, params: dict[str, str] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        query = {"app_id": self.app_id, **(params or {})}
        try:
            response = self._session.request(method, url, params=query, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            message, payload = self._extract_error(resp)
            raise OpenExchangeRatesAPIError(message, status_code=status_code, payload=payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise OpenExchangeRatesAPIError("Open Exchange Rates request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise OpenExchangeRatesAPIError("Open Exchange Rates returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise OpenExchangeRatesAPIError("Open Exchange Rates returned unexpected payload type", payload=payload_raw)

        if payload_raw.get("error"):
            message = payload_raw.get("description") or payload_raw.get("message") or "Open Exchange Rates error"
            raise OpenExchangeRatesAPIError(message, status_code=payload_raw.get("status"), payload=payload_raw)

        return payload_raw

    @staticmethod
    def _to_decimal(value: Any) -> Decimal:
        return Decimal(str(value))

    @staticmethod
    def _extract_error(response: Response | None) -> tuple[str, Any | None]:
        message = "Open Exchange Rates request failed"
        payload: Any | None = None
        if response is None:
            return message, payload

        try:
            payload = response.json()
            if isinstance(payload, dict):
                message = payload.get("description") or payload.get("message") or message
        except ValueError:
            payload = response.text
        return message, payload


__all__ = ["HistoricalRates", "OpenExchangeRatesAPIError", "OpenExchangeRatesClient"]
