"""Pipeline error hierarchy.

All pipeline exceptions inherit from PipelineError, enabling clean
exception handling at the transport and configuration boundaries.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""


class ValidationError(PipelineError):
    """Candle input rejected: empty, unordered, duplicate or non-finite."""


class OutOfOrderUpdateError(ValidationError):
    """Update older than the last stored candle.

    Stores both times so callers can log the gap.
    """

    def __init__(self, update_time: int, last_time: int) -> None:
        self.update_time = update_time
        self.last_time = last_time
        super().__init__(
            f"Update at {update_time} is older than last candle at {last_time}"
        )


class ConfigError(PipelineError):
    """Indicator or signal configuration rejected at the boundary."""


class FeedError(PipelineError):
    """Transport failure or malformed payload from the candle feed."""
