"""Market-data layer.

Re-exports domain types, errors and the candle store for convenient imports:
    from candlepipe.market import Candle, CandleStore, ValidationError
"""

from candlepipe.market.candle_store import CandleStore
from candlepipe.market.errors import (
    ConfigError,
    FeedError,
    OutOfOrderUpdateError,
    PipelineError,
    ValidationError,
)
from candlepipe.market.types import (
    SUB_PANE_KINDS,
    BandSet,
    Candle,
    CurrentSignal,
    HistogramPoint,
    IndicatorKind,
    IndicatorOutput,
    IndicatorPoint,
    IndicatorSeries,
    MacdSet,
    Signal,
    SignalScan,
    SignalSide,
    StrategyMode,
)

__all__ = [
    "SUB_PANE_KINDS",
    "BandSet",
    "Candle",
    "CandleStore",
    "ConfigError",
    "CurrentSignal",
    "FeedError",
    "HistogramPoint",
    "IndicatorKind",
    "IndicatorOutput",
    "IndicatorPoint",
    "IndicatorSeries",
    "MacdSet",
    "OutOfOrderUpdateError",
    "PipelineError",
    "Signal",
    "SignalScan",
    "SignalSide",
    "StrategyMode",
    "ValidationError",
]
