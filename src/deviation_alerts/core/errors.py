# src/deviation_alerts/core/errors.py

from .enums import ErrorKind

UNKNOWN_ERROR_REASON = "unknownErrorReason"


class AlertServiceError(Exception):
    """
    Base class for every error the service classifies.

    Each subclass pins a fixed `kind`, the `reason` string surfaced to clients,
    and the HTTP status used when the error ends a whole request.
    """

    kind: ErrorKind
    reason: str = UNKNOWN_ERROR_REASON
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(AlertServiceError):
    """The inbound request is malformed."""

    kind = ErrorKind.INVALID_REQUEST
    reason = "invalidRequest"
    http_status = 400


class UpstreamError(AlertServiceError):
    """The ticker service was unreachable or answered with an error."""

    kind = ErrorKind.UPSTREAM
    http_status = 502

    REASON_UPSTREAM = "upstream"
    REASON_NETWORK = "network"

    def __init__(self, message: str, reason: str = REASON_UPSTREAM):
        super().__init__(message)
        self.reason = reason


class PriceArithmeticError(AlertServiceError, ArithmeticError):
    """Statistics over a price history could not produce a finite result."""

    kind = ErrorKind.ARITHMETIC
    reason = "arithmeticError"


class StartupError(AlertServiceError):
    """The symbol directory could not be loaded; the service must not start."""

    kind = ErrorKind.STARTUP
    reason = "startupError"
