"""Tests for Binance kline payload converters."""

from __future__ import annotations

import json

import pytest

from candlepipe.feed.binance.mappers import (
    candle_from_rest_row,
    candle_from_ws_message,
    candles_from_rest,
    parse_ws_frame,
)
from candlepipe.market.errors import FeedError
from candlepipe.market.types import Candle

REST_ROW = [
    1499040000000,
    "0.01634790",
    "0.80000000",
    "0.01575800",
    "0.01577100",
    "148976.11427815",
    1499644799999,
    "2434.19055334",
    308,
    "1756.87402397",
    "28.46694368",
    "0",
]

WS_MESSAGE = {
    "e": "kline",
    "E": 1672515782136,
    "s": "BTCUSDT",
    "k": {
        "t": 1672515780000,
        "T": 1672515839999,
        "s": "BTCUSDT",
        "i": "1m",
        "o": "16500.10",
        "c": "16510.55",
        "h": "16512.00",
        "l": "16498.20",
        "v": "12.5",
        "x": False,
    },
}


class TestRestRows:
    def test_row_maps_to_candle(self) -> None:
        candle = candle_from_rest_row(REST_ROW)
        assert candle == Candle(
            time=1499040000,
            open=0.0163479,
            high=0.8,
            low=0.015758,
            close=0.015771,
        )

    def test_millis_truncated_to_seconds(self) -> None:
        row = [1499040000999, "1", "1", "1", "1"]
        assert candle_from_rest_row(row).time == 1499040000

    def test_short_row_rejected(self) -> None:
        with pytest.raises(FeedError, match="too short"):
            candle_from_rest_row([1499040000000, "1", "2"])

    def test_bad_price_rejected(self) -> None:
        with pytest.raises(FeedError, match="close"):
            candle_from_rest_row([1499040000000, "1", "2", "0.5", "n/a"])

    def test_full_response(self) -> None:
        second = [1499040900000, "1", "2", "0.5", "1.5"]
        candles = candles_from_rest([REST_ROW, second])
        assert [c.time for c in candles] == [1499040000, 1499040900]

    def test_non_array_response_rejected(self) -> None:
        with pytest.raises(FeedError):
            candles_from_rest({"code": -1121, "msg": "Invalid symbol."})

    def test_non_array_row_rejected(self) -> None:
        with pytest.raises(FeedError, match="not an array"):
            candles_from_rest([5])

    def test_object_row_rejected(self) -> None:
        with pytest.raises(FeedError, match="not an array"):
            candle_from_rest_row({"t": 1, "o": 2, "h": 3, "l": 4, "c": 5})  # type: ignore[arg-type]


class TestWsMessages:
    def test_kline_event_maps_to_candle(self) -> None:
        candle = candle_from_ws_message(WS_MESSAGE)
        assert candle == Candle(
            time=1672515780,
            open=16500.10,
            high=16512.00,
            low=16498.20,
            close=16510.55,
        )

    def test_non_kline_event_ignored(self) -> None:
        assert candle_from_ws_message({"result": None, "id": 1}) is None

    def test_missing_field_rejected(self) -> None:
        broken = {"e": "kline", "k": {"t": 1672515780000, "o": "1"}}
        with pytest.raises(FeedError, match="missing"):
            candle_from_ws_message(broken)

    def test_missing_payload_rejected(self) -> None:
        with pytest.raises(FeedError):
            candle_from_ws_message({"e": "kline"})

    def test_parse_frame(self) -> None:
        assert parse_ws_frame(json.dumps(WS_MESSAGE)) == candle_from_ws_message(
            WS_MESSAGE
        )

    def test_parse_frame_bytes(self) -> None:
        assert parse_ws_frame(json.dumps(WS_MESSAGE).encode()) is not None

    def test_parse_malformed_frame(self) -> None:
        with pytest.raises(FeedError, match="Malformed"):
            parse_ws_frame("{not json")

    def test_parse_undecodable_bytes(self) -> None:
        with pytest.raises(FeedError, match="Malformed"):
            parse_ws_frame(b"\xff\xfe{")

    def test_parse_non_object_frame(self) -> None:
        assert parse_ws_frame("[1, 2, 3]") is None
