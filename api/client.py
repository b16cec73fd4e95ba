"""
api/client.py

Thin requests client for the address API used by the Streamlit frontend and
the geocoding script.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from config import get_settings

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason or f"HTTP {resp.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {resp.status_code}"


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout
        self.session = session or requests.Session()

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url] + [quote(p, safe="") for p in parts])

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(str(exc)) from exc
        if not resp.ok:
            raise ApiError(_error_message(resp), status=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError("Antwort ist kein JSON", status=resp.status_code) from exc

    def fetch_table(self, table: str) -> List[Dict[str, Any]]:
        rows = self._request("GET", self._url("data", table))
        if not isinstance(rows, list):
            raise ApiError(f"Unerwartete Antwort für {table}")
        return rows

    def list_tables(self) -> List[str]:
        body = self._request("GET", self._url("tables"))
        return [str(t) for t in body.get("tables", [])]

    def update_coords(
        self,
        table: str,
        plz: str,
        ort: str,
        strasse: str,
        hausnr: str,
        latitude: float,
        longitude: float,
    ) -> int:
        payload = {
            "plz": plz,
            "ort": ort,
            "strasse": strasse,
            "hausnr": hausnr,
            "latitude": latitude,
            "longitude": longitude,
        }
        body = self._request("POST", self._url("update-coords", table), json=payload)
        return int(body.get("updated", 0))
