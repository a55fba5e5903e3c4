# src/deviation_alerts/exchanges/public/gemini.py

# --- Built Ins ---
import asyncio
from typing import Any, List

# --- Installed ---
import aiohttp
import orjson
from loguru import logger as log
from pydantic import ValidationError

# --- Local Application Imports ---
from .base import PublicTickerClient
from ...config.models import ExchangeSettings
from ...core.errors import StartupError, UpstreamError
from ...core.models import TickerSnapshot


class GeminiPublicClient(PublicTickerClient):
    """
    Client for Gemini's public REST API endpoints.
    The HTTP session is owned by the caller and shared across requests.
    """

    def __init__(self, settings: ExchangeSettings, http_session: aiohttp.ClientSession):
        super().__init__()
        self.base_url = settings.rest_url.rstrip("/")
        self.symbols_url = f"{self.base_url}/v1/symbols"
        self.ticker_url = f"{self.base_url}/v2/ticker"
        self.timeout = aiohttp.ClientTimeout(total=settings.request_timeout_s)
        self.http_session = http_session

    async def close(self):
        """The shared session is managed externally. This method is a no-op."""
        pass

    @staticmethod
    def _extract_error_message(body: bytes, fallback: str) -> str:
        """Gemini error bodies look like {"result": "error", "reason": ..., "message": ...}."""
        try:
            data = orjson.loads(body)
        except orjson.JSONDecodeError:
            return fallback
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return fallback

    async def _get_json(self, url: str) -> Any:
        """
        Performs a single GET and decodes the JSON body.
        Non-2xx answers and transport failures are raised as UpstreamError.
        """
        try:
            async with self.http_session.get(url, timeout=self.timeout) as response:
                body = await response.read()
                if response.status >= 400:
                    fallback = f"HTTP {response.status} {response.reason or ''}".strip()
                    raise UpstreamError(
                        self._extract_error_message(body, fallback),
                        reason=UpstreamError.REASON_UPSTREAM,
                    )
        except asyncio.TimeoutError as e:
            raise UpstreamError(
                f"Timed out after {self.timeout.total}s calling {url}",
                reason=UpstreamError.REASON_NETWORK,
            ) from e
        except aiohttp.ClientError as e:
            raise UpstreamError(
                f"Network failure calling {url}: {e}",
                reason=UpstreamError.REASON_NETWORK,
            ) from e

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise UpstreamError(f"Invalid JSON from {url}: {e}") from e

    async def get_symbols(self) -> List[str]:
        log.info(f"[GeminiPublicClient] Fetching symbol directory from {self.symbols_url}...")
        try:
            data = await self._get_json(self.symbols_url)
        except UpstreamError as e:
            raise StartupError(f"Could not load symbol directory: {e.message}") from e

        if not isinstance(data, list) or not data:
            raise StartupError(f"Symbol directory returned no symbols: {data!r}")

        symbols = [str(s) for s in data]
        log.success(f"[GeminiPublicClient] Total symbols fetched: {len(symbols)}")
        return symbols

    async def get_ticker(self, symbol: str) -> TickerSnapshot:
        data = await self._get_json(f"{self.ticker_url}/{symbol}")
        try:
            return TickerSnapshot.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(
                f"Malformed ticker payload for {symbol}: {e.error_count()} validation error(s)"
            ) from e
