# src/deviation_alerts/pipeline/scheduler.py

# --- Built Ins ---
import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import List, Tuple

# --- Installed ---
from loguru import logger as log

# --- Local Application Imports ---
from ..config.models import PacingSettings
from ..core.errors import UNKNOWN_ERROR_REASON
from ..core.models import AlertFailure, AlertOutcome

Resolver = Callable[[str], Awaitable[AlertOutcome]]
DispatchResult = Tuple[int, str, AlertOutcome]


class BatchScheduler:
    """
    Fans a list of symbols out to concurrent resolver calls while pacing the
    dispatch rate for the upstream rate limit.

    Before dispatching every `batch_size`-th symbol (positions 10, 20, ... by
    default) the dispatch loop sleeps for `pacing_delay_s`. The wait only holds
    back new dispatches; calls already in flight keep running. Results stream
    back in completion order, tagged with the symbol's request position.
    """

    def __init__(self, settings: PacingSettings):
        self.batch_size = settings.batch_size
        self.pacing_delay_s = settings.pacing_delay_s

    def _needs_pause(self, index: int) -> bool:
        return (index + 1) % self.batch_size == 0

    def pacing_delays(self, symbol_count: int) -> int:
        """Number of pacing waits a batch of `symbol_count` symbols incurs."""
        return symbol_count // self.batch_size

    @staticmethod
    async def _resolve_isolated(symbol: str, resolve: Resolver) -> AlertOutcome:
        """Runs one resolver call; nothing it raises may reach sibling calls."""
        try:
            return await resolve(symbol)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.exception(f"Unhandled error while resolving {symbol}")
            return AlertFailure(
                symbol=symbol,
                reason=getattr(e, "reason", None) or UNKNOWN_ERROR_REASON,
                message=str(e) or type(e).__name__,
            )

    async def _dispatch_all(
        self,
        symbols: Sequence[str],
        resolve: Resolver,
        results: "asyncio.Queue[DispatchResult]",
        in_flight: List[asyncio.Task],
    ) -> None:
        async def run(index: int, symbol: str) -> None:
            outcome = await self._resolve_isolated(symbol, resolve)
            results.put_nowait((index, symbol, outcome))

        for index, symbol in enumerate(symbols):
            if self._needs_pause(index):
                log.debug(f"Pacing dispatch for {self.pacing_delay_s}s before symbol #{index + 1} ({symbol})")
                await asyncio.sleep(self.pacing_delay_s)
            in_flight.append(asyncio.create_task(run(index, symbol), name=f"resolve:{symbol}"))

    async def dispatch(self, symbols: Sequence[str], resolve: Resolver) -> AsyncIterator[DispatchResult]:
        """
        Dispatches `resolve(symbol)` for every symbol and yields
        `(index, symbol, outcome)` as each call completes.

        The stream ends once every dispatched call has resolved. Closing it
        early cancels the dispatch loop and any outstanding calls.
        """
        results: "asyncio.Queue[DispatchResult]" = asyncio.Queue()
        in_flight: List[asyncio.Task] = []
        dispatcher = asyncio.create_task(
            self._dispatch_all(symbols, resolve, results, in_flight), name="dispatch"
        )

        try:
            for _ in range(len(symbols)):
                yield await results.get()
            await dispatcher
        finally:
            pending = [t for t in (dispatcher, *in_flight) if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                log.warning(f"Cancelling {len(pending)} outstanding dispatch task(s)")
                await asyncio.gather(*pending, return_exceptions=True)
