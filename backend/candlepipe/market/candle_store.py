"""Authoritative ordered candle history.

Populated once via ingest() with a snapshot, then mutated only through
apply_update(). The sequence is always strictly ascending by time.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from candlepipe.market.errors import OutOfOrderUpdateError, ValidationError
from candlepipe.market.types import Candle
from candlepipe.utils.logging import get_logger

logger = get_logger(__name__)


def _check_finite(candle: Candle) -> None:
    for name in ("open", "high", "low", "close"):
        if not math.isfinite(getattr(candle, name)):
            raise ValidationError(
                f"Candle at {candle.time} has non-finite {name}"
            )


class CandleStore:
    """Ordered candle history with in-progress bar merge.

    The last candle is treated as the still-forming bar: an update with
    the same time replaces it, a newer time appends a closed bar.
    """

    def __init__(self) -> None:
        self._candles: list[Candle] = []

    def ingest(self, candles: Sequence[Candle]) -> None:
        """Replace the entire store with a snapshot.

        Validates before mutating, so a rejected snapshot leaves the
        prior contents intact.
        """
        if not candles:
            raise ValidationError("Snapshot is empty")

        prev_time: int | None = None
        for candle in candles:
            _check_finite(candle)
            if prev_time is not None and candle.time <= prev_time:
                raise ValidationError(
                    f"Snapshot not strictly ascending: {candle.time} "
                    f"follows {prev_time}"
                )
            prev_time = candle.time

        self._candles = list(candles)
        logger.info("snapshot_ingested", count=len(self._candles))

    def apply_update(self, candle: Candle) -> bool:
        """Merge an incremental update. Returns True if it appended.

        Raises OutOfOrderUpdateError if the update is older than the last
        stored candle; the store is left unchanged.
        """
        _check_finite(candle)

        if self._candles:
            last_time = self._candles[-1].time
            if candle.time == last_time:
                self._candles[-1] = candle
                logger.debug("update_replaced", time=candle.time)
                return False
            if candle.time < last_time:
                raise OutOfOrderUpdateError(candle.time, last_time)

        self._candles.append(candle)
        logger.debug("update_appended", time=candle.time)
        return True

    def snapshot(self) -> tuple[Candle, ...]:
        """Current ordered series as an immutable view."""
        return tuple(self._candles)

    @property
    def last(self) -> Candle | None:
        """Most recent candle, or None if empty."""
        return self._candles[-1] if self._candles else None

    @property
    def is_empty(self) -> bool:
        return not self._candles

    def __len__(self) -> int:
        return len(self._candles)
