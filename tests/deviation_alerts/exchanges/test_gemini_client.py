# tests/deviation_alerts/exchanges/test_gemini_client.py

import asyncio
from unittest.mock import MagicMock

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from deviation_alerts.config.models import ExchangeSettings
from deviation_alerts.core.errors import StartupError, UpstreamError
from deviation_alerts.exchanges.public.gemini import GeminiPublicClient


def _fake_gemini_app(ticker_payload, symbols=("btcusd", "ethusd")):
    """A stand-in for the Gemini public REST API."""

    async def list_symbols(request):
        return web.json_response(list(symbols))

    async def ticker(request):
        symbol = request.match_info["symbol"]
        if symbol == "badsymbol":
            return web.json_response(
                {"result": "error", "reason": "InvalidSymbol", "message": "Supplied value 'badsymbol' is not a valid symbol"},
                status=400,
            )
        if symbol == "plainerror":
            return web.Response(text="upstream exploded", status=503)
        if symbol == "malformed":
            return web.json_response({"symbol": "MALFORMED", "changes": ["1"]})
        if symbol == "notjson":
            return web.Response(text="<html>", content_type="text/html")
        return web.json_response(ticker_payload(symbol=symbol.upper()))

    app = web.Application()
    app.router.add_get("/v1/symbols", list_symbols)
    app.router.add_get("/v2/ticker/{symbol}", ticker)
    return app


@pytest_asyncio.fixture
async def gemini_client(ticker_payload):
    server = test_utils.TestServer(_fake_gemini_app(ticker_payload))
    await server.start_server()
    async with aiohttp.ClientSession() as session:
        settings = ExchangeSettings(rest_url=str(server.make_url("")).rstrip("/"))
        yield GeminiPublicClient(settings, session)
    await server.close()


@pytest.mark.asyncio
class TestGeminiPublicClient:
    """Tests for the Gemini ticker client against a local fake API."""

    async def test_get_symbols(self, gemini_client):
        assert await gemini_client.get_symbols() == ["btcusd", "ethusd"]

    async def test_get_ticker_parses_snapshot(self, gemini_client):
        ticker = await gemini_client.get_ticker("btcusd")

        assert ticker.symbol == "BTCUSD"
        assert ticker.last_price == 100.0
        assert ticker.price_history == [98.0, 99.0, 101.0]

    async def test_error_body_message_is_surfaced(self, gemini_client):
        with pytest.raises(UpstreamError) as exc_info:
            await gemini_client.get_ticker("badsymbol")

        assert exc_info.value.reason == "upstream"
        assert exc_info.value.message == "Supplied value 'badsymbol' is not a valid symbol"

    async def test_error_without_json_body_uses_status(self, gemini_client):
        with pytest.raises(UpstreamError) as exc_info:
            await gemini_client.get_ticker("plainerror")

        assert exc_info.value.reason == "upstream"
        assert "503" in exc_info.value.message

    async def test_malformed_payload_is_an_upstream_error(self, gemini_client):
        with pytest.raises(UpstreamError, match="Malformed ticker payload"):
            await gemini_client.get_ticker("malformed")

    async def test_non_json_payload_is_an_upstream_error(self, gemini_client):
        with pytest.raises(UpstreamError, match="Invalid JSON"):
            await gemini_client.get_ticker("notjson")

    async def test_close_is_a_noop(self, gemini_client):
        await gemini_client.close()
        assert not gemini_client.http_session.closed


@pytest.mark.asyncio
class TestGeminiPublicClientFailures:
    """Transport failures, using a mocked session."""

    @pytest.fixture
    def mock_session(self):
        return MagicMock(spec=aiohttp.ClientSession)

    async def test_connection_error_is_a_network_failure(self, mock_session):
        # Arrange
        mock_session.get.side_effect = aiohttp.ClientConnectionError("connection refused")
        client = GeminiPublicClient(ExchangeSettings(), mock_session)

        # Act & Assert
        with pytest.raises(UpstreamError) as exc_info:
            await client.get_ticker("btcusd")
        assert exc_info.value.reason == "network"
        assert "connection refused" in exc_info.value.message

    async def test_timeout_is_a_network_failure(self, mock_session):
        mock_session.get.side_effect = asyncio.TimeoutError()
        client = GeminiPublicClient(ExchangeSettings(request_timeout_s=3), mock_session)

        with pytest.raises(UpstreamError, match="Timed out after 3"):
            await client.get_ticker("btcusd")

    async def test_unreachable_symbol_directory_is_a_startup_error(self, mock_session):
        mock_session.get.side_effect = aiohttp.ClientConnectionError("dns failure")
        client = GeminiPublicClient(ExchangeSettings(), mock_session)

        with pytest.raises(StartupError, match="Could not load symbol directory"):
            await client.get_symbols()

    async def test_urls_are_built_from_settings(self, mock_session):
        client = GeminiPublicClient(ExchangeSettings(rest_url="https://api.sandbox.gemini.com/"), mock_session)

        assert client.symbols_url == "https://api.sandbox.gemini.com/v1/symbols"
        assert client.ticker_url == "https://api.sandbox.gemini.com/v2/ticker"


@pytest.mark.asyncio
async def test_empty_symbol_directory_is_a_startup_error(ticker_payload):
    server = test_utils.TestServer(_fake_gemini_app(ticker_payload, symbols=()))
    await server.start_server()
    try:
        async with aiohttp.ClientSession() as session:
            settings = ExchangeSettings(rest_url=str(server.make_url("")).rstrip("/"))
            client = GeminiPublicClient(settings, session)
            with pytest.raises(StartupError, match="no symbols"):
                await client.get_symbols()
    finally:
        await server.close()
