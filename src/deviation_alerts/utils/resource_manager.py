# src/deviation_alerts/utils/resource_manager.py

# --- Built Ins ---
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator, Iterable
from typing import Any, List

# --- Installed ---
from loguru import logger as log


async def _close_one(resource: Any) -> None:
    closer = getattr(resource, "close", None)
    if callable(closer):
        await closer()
    else:
        log.trace(f"Resource '{type(resource).__name__}' has no close(). Skipping.")


@asynccontextmanager
async def managed_resources(resources: Iterable[Any]) -> AsyncGenerator[None, None]:
    """
    Closes every resource on exit from the `async with` block, clean or not.

    Resources are closed in reverse order, so list dependencies first:
    `[http_session, ticker_client]` closes the client before its session.
    A failure to close one resource is logged and does not stop the rest.
    """
    resource_list: List[Any] = list(resources)
    try:
        yield
    finally:
        log.info(f"Closing {len(resource_list)} managed resources in reverse order...")
        for resource in reversed(resource_list):
            try:
                await _close_one(resource)
            except Exception:
                log.exception(
                    f"A non-critical error occurred while closing resource: '{type(resource).__name__}'"
                )
