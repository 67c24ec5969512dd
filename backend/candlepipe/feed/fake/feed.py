"""FakeCandleFeed: in-memory candle feed for testing.

Lightweight implementation of CandleFeed for unit testing the pipeline
and the feed runner without a network.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Self

from candlepipe.market.errors import FeedError
from candlepipe.market.types import Candle

_END = None


class FakeCandleFeed:
    """In-memory CandleFeed.

    Supply a canned snapshot and updates at construction, or push updates
    during tests via push_candle(). finish() ends the stream after the
    queued updates are drained.
    """

    def __init__(
        self,
        snapshot: Sequence[Candle] | None = None,
        updates: Sequence[Candle] | None = None,
        *,
        symbol: str = "BTCUSDT",
        interval: str = "15m",
        snapshot_error: Exception | None = None,
    ) -> None:
        self.symbol = symbol
        self.interval = interval
        self._snapshot = list(snapshot or [])
        self._snapshot_error = snapshot_error
        self._queue: asyncio.Queue[Candle | None] = asyncio.Queue()
        for candle in updates or []:
            self._queue.put_nowait(candle)
        self._connected = False
        self.disconnect_calls = 0

    def push_candle(self, candle: Candle) -> None:
        self._queue.put_nowait(candle)

    def finish(self) -> None:
        self._queue.put_nowait(_END)

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False
        self.disconnect_calls += 1

    async def get_snapshot(self) -> list[Candle]:
        if not self._connected:
            raise FeedError("Feed not connected. Call connect() first.")
        if self._snapshot_error is not None:
            raise self._snapshot_error
        return list(self._snapshot)

    async def subscribe_candles(self) -> AsyncIterator[Candle]:
        return self._candle_iterator()

    async def _candle_iterator(self) -> AsyncIterator[Candle]:
        while self._connected:
            try:
                candle = await asyncio.wait_for(self._queue.get(), timeout=0.1)
            except TimeoutError:
                continue
            if candle is _END:
                return
            yield candle

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        await self.disconnect()
