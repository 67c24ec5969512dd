"""Tests for run_feed and the in-memory FakeCandleFeed."""

from __future__ import annotations

import pytest

from candlepipe.engine.pipeline import IndicatorPipeline
from candlepipe.feed.fake.feed import FakeCandleFeed
from candlepipe.feed.runner import run_feed
from candlepipe.feed.source import CandleFeed
from candlepipe.market.errors import FeedError, ValidationError
from candlepipe.market.types import Candle, CurrentSignal
from candlepipe.utils.logging import get_correlation_id
from tests.factories import STEP, make_candle, rising


class TestFakeCandleFeed:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(FakeCandleFeed(), CandleFeed)

    async def test_snapshot_requires_connect(self) -> None:
        with pytest.raises(FeedError):
            await FakeCandleFeed().get_snapshot()

    async def test_streams_queued_then_ends(self) -> None:
        updates = rising(3)
        feed = FakeCandleFeed(updates=updates)
        feed.finish()
        async with feed:
            stream = await feed.subscribe_candles()
            received = [c async for c in stream]
        assert received == updates

    async def test_push_candle(self) -> None:
        feed = FakeCandleFeed()
        candle = make_candle(time=1)
        feed.push_candle(candle)
        feed.finish()
        async with feed:
            stream = await feed.subscribe_candles()
            assert [c async for c in stream] == [candle]


class TestRunFeed:
    async def test_snapshot_then_updates(self) -> None:
        snapshot = rising(30)
        last = snapshot[-1]
        updates = [
            make_candle(time=last.time, close=last.close + 0.5),
            make_candle(time=last.time + STEP, close=last.close + 1.0),
        ]
        feed = FakeCandleFeed(snapshot=snapshot, updates=updates)
        feed.finish()
        pipeline = IndicatorPipeline()

        applied = await run_feed(pipeline, feed)

        assert applied == 2
        assert len(pipeline.get_candles()) == 31
        assert pipeline.get_candles()[-1] == updates[-1]
        assert pipeline.get_current_signal() == CurrentSignal.SELL

    async def test_out_of_order_skipped(self) -> None:
        snapshot = rising(20)
        stale = make_candle(time=snapshot[0].time)
        fresh = make_candle(time=snapshot[-1].time + STEP, close=200.0)
        feed = FakeCandleFeed(snapshot=snapshot, updates=[stale, fresh])
        feed.finish()
        pipeline = IndicatorPipeline()

        applied = await run_feed(pipeline, feed)

        assert applied == 1
        assert pipeline.get_candles()[-1] == fresh
        assert pipeline.get_candles()[0] == snapshot[0]

    async def test_callback_sees_updated_state(self) -> None:
        snapshot = rising(20)
        update = make_candle(time=snapshot[-1].time + STEP, close=500.0)
        feed = FakeCandleFeed(snapshot=snapshot, updates=[update])
        feed.finish()
        seen: list[tuple[int, Candle]] = []

        def on_update(p: IndicatorPipeline, candle: Candle) -> None:
            seen.append((len(p.get_candles()), candle))

        await run_feed(IndicatorPipeline(), feed, on_update=on_update)

        assert seen == [(21, update)]

    async def test_max_updates_stops_and_disconnects(self) -> None:
        snapshot = rising(20)
        updates = [
            make_candle(time=snapshot[-1].time + i * STEP, close=150.0)
            for i in range(1, 6)
        ]
        feed = FakeCandleFeed(snapshot=snapshot, updates=updates)

        applied = await run_feed(IndicatorPipeline(), feed, max_updates=2)

        assert applied == 2
        assert feed.disconnect_calls == 1
        assert not feed.is_connected

    async def test_snapshot_failure_disconnects(self) -> None:
        feed = FakeCandleFeed(snapshot_error=FeedError("HTTP 503"))
        with pytest.raises(FeedError):
            await run_feed(IndicatorPipeline(), feed)
        assert feed.disconnect_calls == 1

    async def test_empty_snapshot_rejected(self) -> None:
        feed = FakeCandleFeed(snapshot=[])
        with pytest.raises(ValidationError):
            await run_feed(IndicatorPipeline(), feed)
        assert not feed.is_connected

    async def test_session_correlation_id(self) -> None:
        feed = FakeCandleFeed(snapshot=rising(5), symbol="ETHUSDT")
        feed.finish()
        await run_feed(IndicatorPipeline(), feed)
        assert get_correlation_id().startswith("ethusdt-")
