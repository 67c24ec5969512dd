"""Engine layer: indicator calculation, signal scan, pane coordination."""

from candlepipe.engine.indicators import (
    bollinger_bands,
    compute,
    ema,
    ema_values,
    macd,
    rsi,
    sma,
)
from candlepipe.engine.panes import PaneCoordinator
from candlepipe.engine.pipeline import IndicatorPipeline
from candlepipe.engine.signals import SignalGenerator

__all__ = [
    "IndicatorPipeline",
    "PaneCoordinator",
    "SignalGenerator",
    "bollinger_bands",
    "compute",
    "ema",
    "ema_values",
    "macd",
    "rsi",
    "sma",
]
