# src/deviation_alerts/core/models.py

from typing import Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class AppBaseModel(BaseModel):
    """Base model for all application data contracts."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


# --- Symbol Directory ---


class SymbolSet(AppBaseModel):
    """
    Immutable snapshot of the tradable symbols known to the ticker service.
    Loaded once at startup and shared read-only by every request.
    """

    model_config = ConfigDict(frozen=True)

    symbols: tuple[str, ...]

    @field_validator("symbols")
    @classmethod
    def _non_empty_and_unique(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("symbol set must contain at least one symbol")
        # Keep upstream order, drop repeats.
        return tuple(dict.fromkeys(value))

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.symbols

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)


# --- Request ---


class AlertRequest(AppBaseModel):
    symbols: list[str]
    deviation_threshold: float = Field(..., ge=0)


# --- Upstream Data ---


class TickerSnapshot(AppBaseModel):
    """
    A Gemini v2 ticker payload. `close` is the last traded price and `changes`
    the recent hourly prices, oldest first. Prices arrive as strings and are
    coerced to floats; the last price is also kept as sent in `close_text`.
    """

    symbol: Optional[str] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: float
    close_text: Optional[str] = None
    changes: list[float]
    bid: Optional[float] = None
    ask: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _keep_close_text(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("close") is not None and data.get("close_text") is None:
            data = {**data, "close_text": str(data["close"])}
        return data

    @property
    def last_price(self) -> float:
        return self.close

    @property
    def last_price_text(self) -> str:
        return self.close_text if self.close_text is not None else str(self.close)

    @property
    def price_history(self) -> list[float]:
        return list(self.changes)


# --- Derived Data ---


class PriceStats(AppBaseModel):
    model_config = ConfigDict(frozen=True)

    mean: float
    change: float
    deviation_score: float


# --- Per-symbol Outcomes ---


class AlertSuccess(AppBaseModel):
    status: Literal["success"] = "success"
    symbol: str
    ticker: TickerSnapshot
    stats: PriceStats


class AlertFailure(AppBaseModel):
    status: Literal["failure"] = "failure"
    symbol: str
    reason: str
    message: str


AlertOutcome = Union[AlertSuccess, AlertFailure]
