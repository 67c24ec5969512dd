"""Binance spot kline transport."""

from candlepipe.feed.binance.feed import BinanceCandleFeed

__all__ = ["BinanceCandleFeed"]
