from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from ..core.constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from ..core.exceptions import DataAccessError

log = logging.getLogger(__name__)


@dataclass
class ApiConfig:
    base_url: str
    timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    token: Optional[str] = None


class ApiClient:
    """JSON client for the clinic server.

    Every call carries a timeout. Transport failures, non-2xx responses and
    `{"success": false}` payloads all surface as DataAccessError.
    """

    def __init__(self, config: ApiConfig, *, session: Optional[requests.Session] = None):
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")
        if config.token:
            self._session.headers["Authorization"] = f"Bearer {config.token}"

    def _url(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def get(self, path: str, *, params: Optional[dict] = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, *, json: Optional[dict] = None) -> Any:
        return self._request("POST", path, json=json)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = self._url(path)
        try:
            resp = self._session.request(method, url, timeout=self._config.timeout, **kwargs)
        except requests.RequestException as e:
            log.warning("%s %s failed: %s", method, url, e)
            raise DataAccessError(f"Could not reach server: {e}") from e

        body = self._decode(resp)
        if not resp.ok:
            message = self._error_message(body) or f"Server responded with status {resp.status_code}"
            log.warning("%s %s -> %s: %s", method, url, resp.status_code, message)
            raise DataAccessError(message, status_code=resp.status_code)

        if isinstance(body, dict) and body.get("success") is False:
            message = self._error_message(body) or "Request was not successful"
            raise DataAccessError(message, status_code=resp.status_code)

        if isinstance(body, dict) and "success" in body and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    @staticmethod
    def _error_message(body: Any) -> Optional[str]:
        if isinstance(body, dict):
            err = body.get("error") or body.get("message")
            return str(err) if err else None
        return None
