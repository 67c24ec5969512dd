"""BinanceCandleFeed: Binance spot klines for one pair.

Snapshot via REST (httpx), updates via the public kline WebSocket stream
(websockets). No authentication is needed for market data. There is no
reconnect policy: when the stream drops, iteration ends with FeedError
and the caller decides whether to start a new session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Self

import httpx
import websockets
from websockets.exceptions import ConnectionClosedError, WebSocketException

from candlepipe.config import FeedConfig
from candlepipe.feed.binance.mappers import candles_from_rest, parse_ws_frame
from candlepipe.market.errors import FeedError
from candlepipe.market.types import Candle
from candlepipe.utils.logging import get_logger

logger = get_logger(__name__)

KLINES_PATH = "/api/v3/klines"


class BinanceCandleFeed:
    """CandleFeed over Binance public market data endpoints."""

    def __init__(
        self,
        config: FeedConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self.symbol = config.symbol
        self.interval = config.interval
        self._client = client
        self._owns_client = client is None
        self._ws: Any = None
        self._connected = False

    @property
    def stream_url(self) -> str:
        return f"{self._config.ws_url}/{self.symbol.lower()}@kline_{self.interval}"

    async def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.rest_url,
                timeout=self._config.timeout_s,
            )
        self._connected = True
        logger.info("feed_connected", symbol=self.symbol, interval=self.interval)

    async def disconnect(self) -> None:
        self._connected = False
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        logger.info("feed_disconnected", symbol=self.symbol)

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None or not self._connected:
            raise FeedError("Feed not connected. Call connect() first.")
        return self._client

    async def get_snapshot(self) -> list[Candle]:
        client = self._require_client()
        params = {
            "symbol": self.symbol,
            "interval": self.interval,
            "limit": self._config.snapshot_limit,
        }
        try:
            response = await client.get(KLINES_PATH, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FeedError(
                f"Kline snapshot failed: {e.response.status_code} "
                f"{e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise FeedError(f"Kline snapshot failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise FeedError(f"Kline snapshot is not JSON: {e}") from e
        candles = candles_from_rest(payload)
        logger.info("snapshot_fetched", count=len(candles))
        return candles

    async def subscribe_candles(self) -> AsyncIterator[Candle]:
        self._require_client()
        return self._candle_iterator()

    async def _candle_iterator(self) -> AsyncIterator[Candle]:
        try:
            async with websockets.connect(self.stream_url) as ws:
                self._ws = ws
                logger.info("stream_subscribed", url=self.stream_url)
                async for raw in ws:
                    candle = parse_ws_frame(raw)
                    if candle is not None:
                        yield candle
        except ConnectionClosedError as e:
            if self._connected:
                raise FeedError(f"Kline stream closed: {e}") from e
        except (OSError, WebSocketException) as e:
            raise FeedError(f"Kline stream failed: {e}") from e
        finally:
            self._ws = None

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
