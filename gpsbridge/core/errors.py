"""Domain-specific errors for gpsbridge."""


class GpsBridgeError(Exception):
    """Base error for gpsbridge."""


class ConfigurationError(GpsBridgeError):
    """Raised when device patterns cannot be turned into a usable registry."""


class DeviceConfigLoadError(ConfigurationError):
    """Raised when reading a device configuration source fails."""


class DeviceConfigValidationError(ConfigurationError):
    """Raised when a device configuration does not conform to schema or semantics."""


class ClassificationError(GpsBridgeError):
    """Raised when no configured device recognizes a message."""


class AckError(GpsBridgeError):
    """Base error for upstream acknowledgements."""


class AckParseError(AckError):
    """Raised when the upstream response line is missing or malformed."""


class AckRejectedError(AckError):
    """Raised when the upstream server explicitly rejects a report."""


class TransportError(GpsBridgeError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised when the upstream server cannot be reached."""


class TransportSendError(TransportError):
    """Raised when delivering a query fails."""


class TransportTimeoutError(TransportError):
    """Raised when the upstream server does not answer in time."""
