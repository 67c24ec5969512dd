"""Market-data domain types shared across the pipeline.

Frozen dataclasses for value objects. Prices are float (the pipeline does
numerical work, not accounting); times are unix seconds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class IndicatorKind(str, Enum):
    """Indicators the engine can compute and the chart can display."""

    SMA = "sma"
    EMA = "ema"
    BB = "bb"
    RSI = "rsi"
    MACD = "macd"


# Oscillators live in the shared sub-pane below the price pane.
SUB_PANE_KINDS = frozenset({IndicatorKind.RSI, IndicatorKind.MACD})


class StrategyMode(str, Enum):
    """Which sides the signal generator may emit."""

    LONG_ONLY = "LongOnly"
    SHORT_ONLY = "ShortOnly"
    COMBINED = "Combined"


class SignalSide(str, Enum):
    """Direction of a trade marker."""

    LONG = "long"
    SHORT = "short"


class CurrentSignal(str, Enum):
    """Dashboard summary of the most recently emitted marker."""

    NONE = "none"
    BUY = "buy"
    SELL = "sell"


# --- Value Objects (frozen) ---


@dataclass(frozen=True)
class Candle:
    """OHLC bar keyed by its open time in unix seconds."""

    time: int
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class IndicatorPoint:
    """Single indicator value aligned to a candle time."""

    time: int
    value: float


@dataclass(frozen=True)
class HistogramPoint:
    """MACD histogram bar. sign is +1 for value >= 0, else -1."""

    time: int
    value: float
    sign: int


@dataclass(frozen=True)
class BandSet:
    """Bollinger output: three series sharing identical times."""

    upper: tuple[IndicatorPoint, ...] = ()
    lower: tuple[IndicatorPoint, ...] = ()
    basis: tuple[IndicatorPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.basis)


@dataclass(frozen=True)
class MacdSet:
    """MACD output: macd line, signal line and signed histogram."""

    macd_line: tuple[IndicatorPoint, ...] = ()
    signal_line: tuple[IndicatorPoint, ...] = ()
    histogram: tuple[HistogramPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.macd_line)


@dataclass(frozen=True)
class Signal:
    """Directional trade marker at a candle time."""

    time: int
    side: SignalSide


@dataclass(frozen=True)
class SignalScan:
    """Result of one full signal scan.

    markers are in scan order (ascending time). current reflects the side of
    the last marker emitted, or NONE when nothing qualified.
    """

    markers: tuple[Signal, ...] = ()
    current: CurrentSignal = CurrentSignal.NONE
    mode: StrategyMode = StrategyMode.COMBINED
    scanned: int = field(default=0, compare=False)


IndicatorSeries = tuple[IndicatorPoint, ...]
IndicatorOutput = IndicatorSeries | BandSet | MacdSet
