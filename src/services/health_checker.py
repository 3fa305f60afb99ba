# src/services/health_checker.py

"""Connectivity check for the configured remote endpoints."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from src.config.settings import Settings

logger = logging.getLogger("price_watch.health")


@dataclass
class HealthResult:
    """Result of a single endpoint probe."""

    endpoint_id: str
    status: str  # "ok", "slow", "down", "unconfigured"
    latency_ms: float
    message: str


def probe_endpoint(endpoint: dict[str, str]) -> HealthResult:
    """Probe one endpoint without changing anything on the server.

    Only the list endpoint is fetched with GET; the POST endpoints get a
    HEAD request so no item is created or removed.  Any answer below
    HTTP 500 counts as reachable.
    """
    endpoint_id = endpoint["id"]
    url: str = getattr(Settings, endpoint["setting"], "")
    if not url:
        return HealthResult(
            endpoint_id=endpoint_id,
            status="unconfigured",
            latency_ms=0.0,
            message=f"{endpoint['setting']} is not set",
        )

    session = curl_requests.Session(
        impersonate=Settings.IMPERSONATE_BROWSER
    )
    start = time.monotonic()
    try:
        if endpoint.get("probe") == "GET":
            resp = session.get(
                url,
                headers=Settings.DEFAULT_HEADERS,
                timeout=Settings.HEALTH_TIMEOUT,
            )
        else:
            resp = session.head(
                url,
                headers=Settings.DEFAULT_HEADERS,
                timeout=Settings.HEALTH_TIMEOUT,
            )
        elapsed_ms = (time.monotonic() - start) * 1000
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            endpoint_id=endpoint_id,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )
    finally:
        session.close()

    if resp.status_code >= 500:
        return HealthResult(
            endpoint_id=endpoint_id,
            status="down",
            latency_ms=elapsed_ms,
            message=f"HTTP {resp.status_code}",
        )
    if elapsed_ms > Settings.SLOW_THRESHOLD_MS:
        return HealthResult(
            endpoint_id=endpoint_id,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )
    return HealthResult(
        endpoint_id=endpoint_id,
        status="ok",
        latency_ms=elapsed_ms,
        message=f"HTTP {resp.status_code}",
    )


class HealthChecker:
    """Runs concurrent probes against every registered endpoint."""

    def __init__(self) -> None:
        self.endpoints = Settings.ENDPOINTS

    async def check_all(self) -> list[HealthResult]:
        """Probe every endpoint concurrently."""
        tasks = [
            asyncio.to_thread(probe_endpoint, ep)
            for ep in self.endpoints
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.endpoint_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
