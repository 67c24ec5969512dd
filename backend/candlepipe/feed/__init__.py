"""Transport layer: candle feed protocol, implementations and runner."""

from candlepipe.feed.runner import run_feed
from candlepipe.feed.source import CandleFeed

__all__ = [
    "CandleFeed",
    "run_feed",
]
