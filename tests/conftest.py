# tests/conftest.py
"""
Pytest configuration and shared fixtures.
"""

import pytest

from deviation_alerts.config.models import PacingSettings
from deviation_alerts.core.errors import UpstreamError
from deviation_alerts.core.models import SymbolSet, TickerSnapshot
from deviation_alerts.exchanges.public.base import PublicTickerClient


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables between tests."""
    import os

    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def symbol_set():
    return SymbolSet(symbols=["BTCUSD", "ETHUSD", "SOLUSD", "LTCUSD"])


@pytest.fixture
def instant_pacing():
    """Pacing settings with no real wait between batches."""
    return PacingSettings(batch_size=10, pacing_delay_s=0)


def make_ticker_payload(close="100", changes=("98", "99", "101"), symbol="BTCUSD"):
    return {
        "symbol": symbol,
        "open": changes[0] if changes else close,
        "high": "102",
        "low": "97",
        "close": close,
        "changes": list(changes),
        "bid": "99.9",
        "ask": "100.1",
    }


class FakeTickerClient(PublicTickerClient):
    """In-memory ticker client. Symbols listed in `failures` raise UpstreamError."""

    def __init__(self, payloads=None, failures=None, symbols=None):
        self.payloads = payloads or {}
        self.failures = failures or {}
        self.symbols = symbols or list(self.payloads)
        self.calls = []

    async def close(self):
        pass

    async def get_symbols(self):
        return list(self.symbols)

    async def get_ticker(self, symbol):
        self.calls.append(symbol)
        if symbol in self.failures:
            raise UpstreamError(self.failures[symbol])
        return TickerSnapshot.model_validate(self.payloads.get(symbol, make_ticker_payload(symbol=symbol)))


@pytest.fixture
def ticker_payload():
    return make_ticker_payload


@pytest.fixture
def fake_ticker_client():
    return FakeTickerClient
