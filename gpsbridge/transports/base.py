"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol


class Transport(Protocol):
    def send(
        self,
        url: str,
        query: str,
        *,
        timeout_s: float = 5.0,
    ) -> str | None:
        """Deliver a query to the upstream server and return its first response line."""
