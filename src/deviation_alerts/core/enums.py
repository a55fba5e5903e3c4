# src/deviation_alerts/core/enums.py

from enum import Enum


class ErrorKind(str, Enum):
    """The fixed set of error categories the service can report."""

    INVALID_REQUEST = "InvalidRequest"
    UPSTREAM = "UpstreamError"
    ARITHMETIC = "ArithmeticError"
    STARTUP = "StartupError"


class AlertLevel(str, Enum):
    INFO = "INFO"
    ERROR = "ERROR"


class PipelineStage(str, Enum):
    """Lifecycle of a single alert request inside the pipeline."""

    RECEIVED = "received"
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    AWAITING = "awaiting"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"
    FAILED = "failed"
