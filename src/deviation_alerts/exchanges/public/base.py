# src/deviation_alerts/exchanges/public/base.py

from abc import ABC, abstractmethod
from typing import List

from ...core.models import TickerSnapshot


class PublicTickerClient(ABC):
    """
    The contract for a public REST client that can list tradable symbols and
    return a ticker snapshot for one of them.
    """

    @abstractmethod
    async def close(self):
        """
        Handles any cleanup for the client. Clients built on a shared HTTP
        session may treat this as a no-op.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_symbols(self) -> List[str]:
        """
        Fetches every tradable symbol from the exchange.
        Implementations raise StartupError when the directory cannot be loaded.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_ticker(self, symbol: str) -> TickerSnapshot:
        """
        Fetches the current ticker for a single symbol, without retry.
        Implementations raise UpstreamError on any failure.
        """
        raise NotImplementedError
