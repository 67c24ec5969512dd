"""Binance kline payload to Candle converters.

All str-to-float price conversion happens here. Binance reports kline
open times in milliseconds; candles are keyed in seconds.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from candlepipe.market.errors import FeedError
from candlepipe.market.types import Candle


def _to_float(value: Any, field: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise FeedError(f"Invalid {field}: {value!r}") from e


def _to_seconds(value: Any) -> int:
    try:
        return int(value) // 1000
    except (TypeError, ValueError) as e:
        raise FeedError(f"Invalid open time: {value!r}") from e


def candle_from_rest_row(row: Sequence[Any]) -> Candle:
    """Map a REST /klines row: [openTime, open, high, low, close, ...]."""
    if not isinstance(row, Sequence) or isinstance(row, (str, bytes)):
        raise FeedError(f"Kline row is not an array: {row!r}")
    if len(row) < 5:
        raise FeedError(f"Kline row too short: {row!r}")
    return Candle(
        time=_to_seconds(row[0]),
        open=_to_float(row[1], "open"),
        high=_to_float(row[2], "high"),
        low=_to_float(row[3], "low"),
        close=_to_float(row[4], "close"),
    )


def candles_from_rest(payload: Any) -> list[Candle]:
    """Map a full REST /klines response body."""
    if not isinstance(payload, list):
        raise FeedError(f"Expected kline array, got {type(payload).__name__}")
    return [candle_from_rest_row(row) for row in payload]


def candle_from_ws_message(message: Mapping[str, Any]) -> Candle | None:
    """Map a WebSocket kline event. Returns None for non-kline messages
    (subscription acks, other event types)."""
    if message.get("e") != "kline":
        return None
    k = message.get("k")
    if not isinstance(k, Mapping):
        raise FeedError(f"Kline event without payload: {message!r}")
    try:
        return Candle(
            time=_to_seconds(k["t"]),
            open=_to_float(k["o"], "open"),
            high=_to_float(k["h"], "high"),
            low=_to_float(k["l"], "low"),
            close=_to_float(k["c"], "close"),
        )
    except KeyError as e:
        raise FeedError(f"Kline payload missing {e.args[0]!r}") from e


def parse_ws_frame(raw: str | bytes) -> Candle | None:
    """Decode a raw WebSocket text frame into a Candle, if it is a kline."""
    try:
        message = json.loads(raw)
    except ValueError as e:
        # JSONDecodeError, or UnicodeDecodeError for undecodable bytes.
        raise FeedError(f"Malformed stream frame: {e}") from e
    if not isinstance(message, Mapping):
        return None
    return candle_from_ws_message(message)
