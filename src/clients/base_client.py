# src/clients/base_client.py

"""Shared HTTP plumbing for the remote catalog and tracking endpoints."""

import json
import logging
import math
import threading
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings


class RemoteError(Exception):
    """A remote call failed: transport error, bad status, or bad payload."""


def to_number(value: Any) -> float:
    """Coerce a JSON scalar to a finite float.

    Numeric strings are accepted because webhook backends often
    serialise prices as text.  Raises ``ValueError`` otherwise.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {value!r}")
    return number


class BaseClient:
    """Single-attempt JSON client over a browser-impersonating session.

    Every failure surfaces as :class:`RemoteError`; callers never see
    curl_cffi exceptions.  There is deliberately no retry loop: one
    failed attempt ends the user action.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.logger = logging.getLogger(f"price_watch.{name}")
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT
        # curl sessions are not shared safely across worker threads
        self._lock = threading.Lock()

    def _send(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
    ) -> curl_requests.Response:
        """Issue one request and return the 2xx response."""
        if not url:
            raise RemoteError(
                f"[{self.name}] endpoint URL is not configured"
            )
        headers = dict(self.settings.DEFAULT_HEADERS)
        try:
            with self._lock:
                if method == "GET":
                    resp = self.session.get(
                        url,
                        headers=headers,
                        timeout=self._request_timeout,
                    )
                else:
                    resp = self.session.post(
                        url,
                        headers=headers,
                        json=payload,
                        timeout=self._request_timeout,
                    )
        except Exception as exc:
            self.logger.warning(
                "[%s] %s %s failed: %s",
                self.name,
                method,
                url,
                exc,
                exc_info=True,
            )
            raise RemoteError(
                f"[{self.name}] request failed: {exc}"
            ) from exc

        self.logger.debug(
            "[%s] %s %s -> HTTP %d",
            self.name,
            method,
            url,
            resp.status_code,
        )
        if not 200 <= resp.status_code < 300:
            raise RemoteError(
                f"[{self.name}] HTTP {resp.status_code}"
            )
        return resp

    def _decode(self, resp: curl_requests.Response) -> Any:
        """Parse a JSON response body."""
        try:
            return json.loads(resp.text)
        except ValueError as exc:
            raise RemoteError(
                f"[{self.name}] response is not valid JSON"
            ) from exc

    def _get_json(self, url: str) -> Any:
        """GET ``url`` and return the decoded JSON body."""
        return self._decode(self._send("GET", url))

    def _post_json(self, url: str, payload: dict[str, Any]) -> Any:
        """POST ``payload`` to ``url`` and return the decoded JSON body."""
        return self._decode(self._send("POST", url, payload))

    def _post_expect_ok(
        self, url: str, payload: dict[str, Any],
    ) -> None:
        """POST ``payload`` and require exactly HTTP 200."""
        resp = self._send("POST", url, payload)
        if resp.status_code != 200:
            raise RemoteError(
                f"[{self.name}] expected HTTP 200, got "
                f"{resp.status_code}"
            )
