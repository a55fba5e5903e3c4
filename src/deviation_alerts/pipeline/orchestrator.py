# src/deviation_alerts/pipeline/orchestrator.py

# --- Built Ins ---
from contextlib import aclosing
from typing import Any, Mapping, Tuple

# --- Installed ---
from loguru import logger as log

# --- Local Application Imports ---
from .aggregator import ResponseAggregator
from .scheduler import BatchScheduler
from ..analytics.statistics import compute_price_stats
from ..core.enums import AlertLevel, PipelineStage
from ..core.errors import (
    UNKNOWN_ERROR_REASON,
    AlertServiceError,
    PriceArithmeticError,
    UpstreamError,
)
from ..core.models import AlertFailure, AlertOutcome, AlertSuccess, SymbolSet
from ..exchanges.public.base import PublicTickerClient
from ..utils.timestamps import iso_timestamp
from ..validation.validator import validate_alert_request

HTTP_OK = 200


def build_error_body(reason: str, message: str) -> dict:
    """Body returned when a whole request fails."""
    return {
        "timestamp": iso_timestamp(),
        "level": AlertLevel.ERROR.value,
        "data": {
            "result": "error",
            "reason": reason,
            "message": message,
        },
    }


class AlertPipeline:
    """
    Runs one alert request end to end:
    validate -> paced fan-out to the ticker service -> per-symbol statistics ->
    ordered assembly.

    The symbol set is an immutable snapshot injected at construction, so any
    number of requests may share a pipeline instance.
    """

    def __init__(
        self,
        symbol_set: SymbolSet,
        ticker_client: PublicTickerClient,
        scheduler: BatchScheduler,
    ):
        self.symbol_set = symbol_set
        self.ticker_client = ticker_client
        self.scheduler = scheduler

    async def resolve_symbol(self, symbol: str) -> AlertOutcome:
        """Fetches and scores one symbol. Classified failures become outcomes."""
        try:
            ticker = await self.ticker_client.get_ticker(symbol)
            stats = compute_price_stats(ticker.price_history, ticker.last_price)
        except (UpstreamError, PriceArithmeticError) as e:
            log.warning(f"[{symbol}] {e.kind.value} ({e.reason}): {e.message}")
            return AlertFailure(symbol=symbol, reason=e.reason, message=e.message)
        return AlertSuccess(symbol=symbol, ticker=ticker, stats=stats)

    async def run(self, method: str, query: Mapping[str, str]) -> list:
        """
        Returns the ordered alert records for a request.

        Raises:
            InvalidRequestError: if validation fails.
        """
        stage = PipelineStage.RECEIVED
        try:
            stage = self._advance(stage, PipelineStage.VALIDATING)
            request = validate_alert_request(method, query, self.symbol_set)

            stage = self._advance(stage, PipelineStage.DISPATCHING)
            aggregator = ResponseAggregator(request.symbols)
            failed = 0
            async with aclosing(self.scheduler.dispatch(request.symbols, self.resolve_symbol)) as results:
                stage = self._advance(stage, PipelineStage.AWAITING)
                async for index, _symbol, outcome in results:
                    aggregator.record(index, outcome)
                    if isinstance(outcome, AlertFailure):
                        failed += 1
                    log.trace(f"{aggregator.pending} symbol(s) pending")

            stage = self._advance(stage, PipelineStage.AGGREGATING)
            records = aggregator.assemble(request.deviation_threshold)
            self._advance(stage, PipelineStage.COMPLETED)
        except Exception:
            self._advance(stage, PipelineStage.FAILED)
            raise

        log.info(
            f"Assembled {len(records)} alert(s) "
            f"({len(records) - failed} ok, {failed} failed) at deviation {request.deviation_threshold}"
        )
        return records

    async def handle(self, method: str, query: Mapping[str, str]) -> Tuple[int, Any]:
        """
        Runs a request and maps any request-level failure to a status and an
        error body. Never raises.
        """
        try:
            return HTTP_OK, await self.run(method, query)
        except AlertServiceError as e:
            log.error(f"Could not handle request: {e.message}")
            return e.http_status, build_error_body(e.reason, e.message)
        except Exception as e:
            log.exception(f"Could not handle request: {e}")
            status = getattr(e, "http_status", None) or 500
            return status, build_error_body(UNKNOWN_ERROR_REASON, str(e) or type(e).__name__)

    @staticmethod
    def _advance(current: PipelineStage, target: PipelineStage) -> PipelineStage:
        log.debug(f"Pipeline stage {current.value} -> {target.value}")
        return target
