"""Interpretation of the upstream server's acknowledgement line."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from gpsbridge.core.errors import AckParseError, AckRejectedError

# <device-id or imei> OK|REJECTED
_ACK_RE = re.compile(r"^\s*([0-9A-Za-z]+)\s+(OK|REJECTED)\s*")
NO_VALID_RESPONSE = "no valid response - check connection to HTTP server"
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AckVerdict:
    accepted: bool
    message: str
    device: str | None = None
    status: str | None = None

    @property
    def well_formed(self) -> bool:
        return self.status is not None

    def raise_for_status(self) -> None:
        if self.accepted:
            return
        if not self.well_formed:
            raise AckParseError(self.message)
        raise AckRejectedError(self.message)


def interpret_ack(response: str | None) -> AckVerdict:
    if not response:
        return AckVerdict(accepted=False, message=NO_VALID_RESPONSE)

    match = _ACK_RE.match(response)
    if match is None:
        return AckVerdict(accepted=False, message=NO_VALID_RESPONSE)

    device, status = match.group(1), match.group(2)
    verdict = AckVerdict(
        accepted=status == "OK",
        message=f"device {device} {status}",
        device=device,
        status=status,
    )
    LOGGER.debug(verdict.message)
    return verdict
