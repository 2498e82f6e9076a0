"""HTTP transport implementation for OpenGTS-style GPRMC endpoints."""

from __future__ import annotations

import logging

import requests

from gpsbridge.core.errors import (
    TransportConnectError,
    TransportSendError,
    TransportTimeoutError,
)

LOGGER = logging.getLogger(__name__)


class HTTPTransport:
    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()

    def send(
        self,
        url: str,
        query: str,
        *,
        timeout_s: float = 5.0,
    ) -> str | None:
        # The query is already escaped; passing it as params would encode it twice.
        separator = "&" if "?" in url else "?"
        target = f"{url}{separator}{query}"
        LOGGER.debug("GET %s", target)

        try:
            response = self._session.get(target, timeout=timeout_s)
        except requests.Timeout as exc:
            raise TransportTimeoutError(f"HTTP request to {url} timed out after {timeout_s}s") from exc
        except requests.ConnectionError as exc:
            raise TransportConnectError(f"Could not connect to {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportSendError(f"HTTP request to {url} failed: {exc}") from exc

        if not response.ok:
            raise TransportSendError(f"HTTP request to {url} failed with status {response.status_code}")

        lines = response.text.splitlines()
        return lines[0] if lines else None
