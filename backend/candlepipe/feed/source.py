"""CandleFeed protocol: abstract interface for candle transports.

All feed implementations (Binance, fake) must satisfy this protocol. The
pipeline only consumes what a feed produces: one snapshot, then a serial
stream of updates for a single trading pair.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from candlepipe.market.types import Candle


@runtime_checkable
class CandleFeed(Protocol):
    """Async interface for a single pair's kline snapshot and stream.

    Implementations must support ``async with`` for lifecycle management.
    """

    symbol: str
    interval: str

    async def connect(self) -> None:
        """Open transport resources."""
        ...

    async def disconnect(self) -> None:
        """Unsubscribe and release transport resources."""
        ...

    async def get_snapshot(self) -> list[Candle]:
        """Fetch the initial candle history, ascending by time.

        Raises:
            FeedError: On transport failure or malformed payload.
        """
        ...

    async def subscribe_candles(self) -> AsyncIterator[Candle]:
        """Start streaming candle updates.

        Returns:
            AsyncIterator yielding the in-progress bar on every tick and
            each new bar as it opens. Ends when the feed disconnects.
        """
        ...

    async def __aenter__(self) -> CandleFeed:
        """Connect on context manager entry."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Disconnect on context manager exit."""
        ...
