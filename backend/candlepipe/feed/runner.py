"""Drive an IndicatorPipeline from a CandleFeed.

The snapshot is the only awaited step; every update after it is applied
synchronously, one at a time, in arrival order. Leaving the runner (normal
end, error, or cancellation) disconnects the feed.
"""

from __future__ import annotations

from collections.abc import Callable

from candlepipe.engine.pipeline import IndicatorPipeline
from candlepipe.feed.source import CandleFeed
from candlepipe.market.errors import OutOfOrderUpdateError, ValidationError
from candlepipe.market.types import Candle
from candlepipe.utils.logging import (
    bind_feed_context,
    get_logger,
    new_session_id,
    set_correlation_id,
)

logger = get_logger(__name__)

UpdateCallback = Callable[[IndicatorPipeline, Candle], None]


async def run_feed(
    pipeline: IndicatorPipeline,
    feed: CandleFeed,
    *,
    on_update: UpdateCallback | None = None,
    max_updates: int | None = None,
) -> int:
    """Ingest the feed's snapshot, then apply streamed updates.

    Out-of-order and invalid updates are logged and skipped; the store is
    authoritative and stays as it was. Returns the number of applied
    updates.

    Raises:
        FeedError: If the transport fails.
        ValidationError: If the snapshot is rejected.
    """
    set_correlation_id(new_session_id(feed.symbol))
    bind_feed_context(feed.symbol, feed.interval)

    applied = 0
    async with feed:
        snapshot = await feed.get_snapshot()
        pipeline.on_snapshot(snapshot)

        stream = await feed.subscribe_candles()
        async for candle in stream:
            try:
                pipeline.on_update(candle)
            except OutOfOrderUpdateError as e:
                logger.warning(
                    "update_out_of_order",
                    update_time=e.update_time,
                    last_time=e.last_time,
                )
                continue
            except ValidationError as e:
                logger.warning("update_rejected", error=str(e))
                continue

            applied += 1
            if on_update is not None:
                on_update(pipeline, candle)
            if max_updates is not None and applied >= max_updates:
                break

    logger.info("feed_session_ended", applied=applied)
    return applied
