from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests


# API docs: https://www.openfigi.com/api/documentation
class OpenFigiAPIError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


@dataclass(frozen=True)
class FigiInstrument:
    figi: str
    name: str | None
    ticker: str | None
    exch_code: str | None
    security_type: str | None
    security_type2: str | None
    market_sector: str | None
    security_description: str | None


class OpenFigiClient:
    """Minimal OpenFIGI client covering the ISIN mapping endpoint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str = "https://api.openfigi.com/v3",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def map_isin(self, isin: str) -> list[FigiInstrument]:
        """Return every listing OpenFIGI knows for ``isin``; empty when the ISIN is unknown."""
        if not isin:
            msg = "isin must be provided"
            raise ValueError(msg)

        payload = self._request("POST", "/mapping", body=[{"idType": "ID_ISIN", "idValue": isin}])
        if len(payload) != 1 or not isinstance(payload[0], dict):
            raise OpenFigiAPIError("OpenFIGI returned unexpected mapping payload", payload=payload)

        job = payload[0]
        if job.get("error"):
            raise OpenFigiAPIError(str(job["error"]), payload=job)
        entries = job.get("data") or []
        return [self._parse_instrument(entry) for entry in entries]

    def _request(self, method: str, path: str, *, body: Any) -> list[Any]:
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-OPENFIGI-APIKEY"] = self.api_key
        try:
            response = self._session.request(method, url, json=body, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            error_payload: Any | None = None
            if resp is not None:
                try:
                    error_payload = resp.json()
                except ValueError:
                    error_payload = resp.text
            raise OpenFigiAPIError("OpenFIGI request failed", status_code=status_code, payload=error_payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise OpenFigiAPIError("OpenFIGI request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise OpenFigiAPIError("OpenFIGI returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, list):
            raise OpenFigiAPIError("OpenFIGI returned unexpected payload type", payload=payload_raw)

        return payload_raw

    @staticmethod
    def _parse_instrument(entry: dict[str, Any]) -> FigiInstrument:
        figi = entry.get("figi")
        if not figi:
            raise OpenFigiAPIError("OpenFIGI entry missing figi field", payload=entry)
        return FigiInstrument(
            figi=str(figi),
            name=entry.get("name"),
            ticker=entry.get("ticker"),
            exch_code=entry.get("exchCode"),
            security_type=entry.get("securityType"),
            security_type2=entry.get("securityType2"),
            market_sector=entry.get("marketSector"),
            security_description=entry.get("securityDescription"),
        )


__all__ = ["FigiInstrument", "OpenFigiAPIError", "OpenFigiClient"]
