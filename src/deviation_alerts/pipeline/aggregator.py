# src/deviation_alerts/pipeline/aggregator.py

# --- Built Ins ---
from collections.abc import Sequence
from typing import Any, Dict, List, Optional

# --- Local Application Imports ---
from ..core.enums import AlertLevel
from ..core.models import AlertFailure, AlertOutcome
from ..utils.timestamps import iso_timestamp


def _fixed(value: float) -> str:
    return f"{value:.4f}"


def build_alert_record(outcome: AlertOutcome, deviation_threshold: float) -> Dict[str, Any]:
    """Projects one per-symbol outcome onto the externally visible alert record."""
    record: Dict[str, Any] = {
        "timestamp": iso_timestamp(),
        "level": AlertLevel.INFO.value,
        "symbol": outcome.symbol,
    }

    if isinstance(outcome, AlertFailure):
        record["level"] = AlertLevel.ERROR.value
        record["data"] = {
            "result": "error",
            "reason": outcome.reason,
            "message": outcome.message,
        }
        return record

    stats = outcome.stats
    record["exceeded"] = stats.deviation_score > deviation_threshold
    record["data"] = {
        "last_price": outcome.ticker.last_price_text,
        "average": _fixed(stats.mean),
        "sdev": _fixed(stats.deviation_score),
        "change": _fixed(stats.change),
    }
    return record


class ResponseAggregator:
    """
    Collects per-symbol outcomes for one request into fixed slots, one per
    requested position, and assembles them in request order.

    Each slot is written exactly once. Assembly is refused until every slot is
    filled, so a response never carries a partial array.
    """

    def __init__(self, symbols: Sequence[str]):
        self._symbols = list(symbols)
        self._slots: List[Optional[AlertOutcome]] = [None] * len(self._symbols)
        self._pending = len(self._symbols)

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def is_complete(self) -> bool:
        return self._pending == 0

    def record(self, index: int, outcome: AlertOutcome) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexError(f"No slot #{index} in a batch of {len(self._slots)} symbols")
        if self._slots[index] is not None:
            raise ValueError(f"Slot #{index} ({self._symbols[index]}) already holds an outcome")
        if outcome.symbol != self._symbols[index]:
            raise ValueError(
                f"Outcome for {outcome.symbol} does not belong in slot #{index} ({self._symbols[index]})"
            )
        self._slots[index] = outcome
        self._pending -= 1

    def assemble(self, deviation_threshold: float) -> List[Dict[str, Any]]:
        if not self.is_complete:
            raise RuntimeError(f"Cannot assemble alerts with {self._pending} symbol(s) still pending")
        return [build_alert_record(outcome, deviation_threshold) for outcome in self._slots]

