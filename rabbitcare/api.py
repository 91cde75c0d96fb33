from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from rabbitcare.constants import API_BASE, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class RemoteError(RuntimeError):
    """Raised internally when the save server answers with an error envelope."""


class RemoteStore:
    """Client for the save server's `/game/{id}` records.

    Public methods never raise: a failure of any kind comes back as
    ``None`` / ``False`` and the game keeps going on local data.
    """

    def __init__(self, base_url: str = API_BASE, timeout: float = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    # ---------- Low-level request wrapper ----------
    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("Remote %s %s", method, url)
        resp = self.session.request(method=method, url=url, timeout=self.timeout, **kwargs)
        try:
            envelope = resp.json()
        except ValueError:
            raise RemoteError(f"{method} {url} returned {resp.status_code} with a non-JSON body")
        if resp.status_code >= 400 or not isinstance(envelope, dict) or not envelope.get("success"):
            error = envelope.get("error") if isinstance(envelope, dict) else None
            raise RemoteError(f"{method} {url} failed ({resp.status_code}): {error or 'unknown error'}")
        return envelope.get("data")

    def _call(self, method: str, path: str, **kwargs):
        try:
            return True, self._request(method, path, **kwargs)
        except (requests.RequestException, RemoteError) as e:
            logger.warning("Remote save server unavailable: %s", e)
            return False, None

    # ---------- Game records ----------
    def load(self, player_id: str) -> Optional[Dict[str, Any]]:
        ok, data = self._call("GET", f"/game/{player_id}")
        if not ok or not isinstance(data, dict):
            return None
        return data

    def save(self, player_id: str, record: Dict[str, Any]) -> bool:
        ok, _ = self._call("POST", f"/game/{player_id}", json=record)
        return ok

    def delete(self, player_id: str) -> bool:
        ok, _ = self._call("DELETE", f"/game/{player_id}")
        return ok

    def health(self) -> bool:
        url = f"{self.base_url}/health"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.info("Save server health check failed: %s", e)
            return False
        return resp.status_code == 200
