"""Indicator calculation over a full candle series.

Every function is pure: it takes the current candle snapshot plus its
parameter model and returns fresh output, carrying no state between calls.
Identical input always yields bit-identical output, so the pipeline can
recompute everything on each store mutation.

Warm-up offsets (index of first emitted point):
    SMA, EMA, Bollinger: period - 1
    RSI:                 period
    MACD:                slow
Input shorter than the warm-up yields empty output, never an error.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Callable, Sequence

from candlepipe.config import (
    BollingerParams,
    EMAParams,
    IndicatorConfig,
    MACDParams,
    RSIParams,
    SMAParams,
)
from candlepipe.market.types import (
    BandSet,
    Candle,
    HistogramPoint,
    IndicatorKind,
    IndicatorOutput,
    IndicatorPoint,
    IndicatorSeries,
    MacdSet,
)

RSI_MAX = 100.0
_MAX_CHANGE = sys.float_info.max


def ema_values(values: Sequence[float], period: int) -> list[float]:
    """Exponential smoothing over every value, seeded with the first.

    k = 2 / (period + 1); ema[i] = (v[i] - ema[i-1]) * k + ema[i-1].
    All values are returned; callers decide which to surface.
    """
    if not values:
        return []
    k = 2 / (period + 1)
    ema = values[0]
    out = [ema]
    for v in values[1:]:
        ema = (v - ema) * k + ema
        out.append(ema)
    return out


def sma(candles: Sequence[Candle], params: SMAParams) -> IndicatorSeries:
    """Trailing arithmetic mean of close over ``period`` candles."""
    period = params.period
    closes = [c.close for c in candles]
    return tuple(
        IndicatorPoint(
            time=candles[i].time,
            value=sum(closes[i - period + 1 : i + 1]) / period,
        )
        for i in range(period - 1, len(closes))
    )


def ema(candles: Sequence[Candle], params: EMAParams) -> IndicatorSeries:
    """EMA of close, smoothed from index 0 and surfaced from period - 1."""
    smoothed = ema_values([c.close for c in candles], params.period)
    return tuple(
        IndicatorPoint(time=candles[i].time, value=smoothed[i])
        for i in range(params.period - 1, len(smoothed))
    )


def bollinger_bands(
    candles: Sequence[Candle],
    params: BollingerParams,
) -> BandSet:
    """SMA basis with bands at +/- mult population standard deviations."""
    period = params.period
    closes = [c.close for c in candles]
    upper: list[IndicatorPoint] = []
    lower: list[IndicatorPoint] = []
    basis: list[IndicatorPoint] = []

    for i in range(period - 1, len(closes)):
        window = closes[i - period + 1 : i + 1]
        avg = sum(window) / period
        std_dev = math.sqrt(sum((c - avg) ** 2 for c in window) / period)
        t = candles[i].time
        basis.append(IndicatorPoint(time=t, value=avg))
        upper.append(IndicatorPoint(time=t, value=avg + std_dev * params.mult))
        lower.append(IndicatorPoint(time=t, value=avg - std_dev * params.mult))

    return BandSet(upper=tuple(upper), lower=tuple(lower), basis=tuple(basis))


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    # No losses in the window: the ratio is unbounded, RSI saturates.
    if avg_loss == 0:
        return RSI_MAX
    rs = avg_gain / avg_loss
    return min(max(RSI_MAX - RSI_MAX / (1 + rs), 0.0), RSI_MAX)


def rsi(candles: Sequence[Candle], params: RSIParams) -> IndicatorSeries:
    """Wilder's RSI.

    avg_gain/avg_loss are seeded with the mean of the first ``period``
    changes, then smoothed as (avg * (period - 1) + x) / period. Both are
    kept in the incremental form avg + (x - avg) / n so no intermediate sum
    or product can overflow.
    Changes are capped at the largest finite float so extreme closes keep
    both averages finite.
    """
    period = params.period
    points: list[IndicatorPoint] = []
    avg_gain = 0.0
    avg_loss = 0.0

    for i in range(1, len(candles)):
        change = candles[i].close - candles[i - 1].close
        change = max(-_MAX_CHANGE, min(change, _MAX_CHANGE))
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0

        # Running mean while seeding, Wilder smoothing afterwards.
        n = min(i, period)
        avg_gain += (gain - avg_gain) / n
        avg_loss += (loss - avg_loss) / n

        if i >= period:
            points.append(
                IndicatorPoint(
                    time=candles[i].time,
                    value=_rsi_value(avg_gain, avg_loss),
                )
            )

    return tuple(points)


def macd(candles: Sequence[Candle], params: MACDParams) -> MacdSet:
    """MACD line, signal line and signed histogram.

    Both EMAs and the signal EMA run over the full series; points are
    surfaced from index ``slow`` to skip the seed-dominated region.
    """
    closes = [c.close for c in candles]
    fast = ema_values(closes, params.fast)
    slow = ema_values(closes, params.slow)
    macd_line = [f - s for f, s in zip(fast, slow, strict=True)]
    signal_line = ema_values(macd_line, params.signal)

    line: list[IndicatorPoint] = []
    signal: list[IndicatorPoint] = []
    histogram: list[HistogramPoint] = []
    for i in range(params.slow, len(closes)):
        t = candles[i].time
        diff = macd_line[i] - signal_line[i]
        line.append(IndicatorPoint(time=t, value=macd_line[i]))
        signal.append(IndicatorPoint(time=t, value=signal_line[i]))
        histogram.append(
            HistogramPoint(time=t, value=diff, sign=1 if diff >= 0 else -1)
        )

    return MacdSet(
        macd_line=tuple(line),
        signal_line=tuple(signal),
        histogram=tuple(histogram),
    )


_CALCULATORS: dict[IndicatorKind, Callable[..., IndicatorOutput]] = {
    IndicatorKind.SMA: sma,
    IndicatorKind.EMA: ema,
    IndicatorKind.BB: bollinger_bands,
    IndicatorKind.RSI: rsi,
    IndicatorKind.MACD: macd,
}


def compute(
    kind: IndicatorKind,
    candles: Sequence[Candle],
    config: IndicatorConfig,
) -> IndicatorOutput:
    """Compute one indicator kind with its configured parameters."""
    return _CALCULATORS[kind](candles, config.for_kind(kind))


def empty_output(kind: IndicatorKind) -> IndicatorOutput:
    """The no-data value for a kind, shaped like its normal output."""
    if kind == IndicatorKind.BB:
        return BandSet()
    if kind == IndicatorKind.MACD:
        return MacdSet()
    return ()
