"""RSI threshold signal generator.

Scans the candle series against the RSI series and emits a marker for
every candle past the RSI warm-up whose RSI is beyond a threshold:

    RSI < oversold   -> LONG  (LongOnly, Combined)
    RSI > overbought -> SHORT (ShortOnly, Combined)

There is no crossing detection and no cooldown: consecutive qualifying
candles each get their own marker. At most one marker exists per
(time, side). Every scan replaces the previous markers and summary.
"""

from __future__ import annotations

from collections.abc import Sequence

from candlepipe.config import SignalConfig
from candlepipe.market.types import (
    Candle,
    CurrentSignal,
    IndicatorPoint,
    Signal,
    SignalScan,
    SignalSide,
    StrategyMode,
)

_LONG_MODES = frozenset({StrategyMode.LONG_ONLY, StrategyMode.COMBINED})
_SHORT_MODES = frozenset({StrategyMode.SHORT_ONLY, StrategyMode.COMBINED})

_SUMMARY = {
    SignalSide.LONG: CurrentSignal.BUY,
    SignalSide.SHORT: CurrentSignal.SELL,
}


class SignalGenerator:
    """Turns an RSI series into debounced directional markers.

    Holds only the result of the most recent scan; nothing carries over
    from one scan to the next.
    """

    def __init__(self, config: SignalConfig | None = None) -> None:
        self._config = config or SignalConfig()
        self._last_scan = SignalScan(mode=self._config.mode)

    @property
    def config(self) -> SignalConfig:
        return self._config

    @property
    def mode(self) -> StrategyMode:
        return self._config.mode

    def configure(self, config: SignalConfig) -> None:
        """Swap strategy parameters. Takes effect on the next scan."""
        self._config = config

    def scan(
        self,
        candles: Sequence[Candle],
        rsi_series: Sequence[IndicatorPoint],
    ) -> SignalScan:
        """Full re-scan. Replaces the stored markers and current signal."""
        cfg = self._config
        rsi_by_time = {p.time: p.value for p in rsi_series}
        start = self._warmup_index(candles, rsi_series)

        markers: list[Signal] = []
        seen: set[tuple[int, SignalSide]] = set()
        current = CurrentSignal.NONE

        for candle in candles[start:]:
            value = rsi_by_time.get(candle.time)
            if value is None:
                continue

            sides: list[SignalSide] = []
            if cfg.mode in _LONG_MODES and value < cfg.oversold:
                sides.append(SignalSide.LONG)
            if cfg.mode in _SHORT_MODES and value > cfg.overbought:
                sides.append(SignalSide.SHORT)

            for side in sides:
                key = (candle.time, side)
                if key in seen:
                    continue
                seen.add(key)
                markers.append(Signal(time=candle.time, side=side))
                current = _SUMMARY[side]

        self._last_scan = SignalScan(
            markers=tuple(markers),
            current=current,
            mode=cfg.mode,
            scanned=max(len(candles) - start, 0),
        )
        return self._last_scan

    @staticmethod
    def _warmup_index(
        candles: Sequence[Candle],
        rsi_series: Sequence[IndicatorPoint],
    ) -> int:
        """Index of the candle carrying the first RSI point."""
        if not rsi_series:
            return len(candles)
        first = rsi_series[0].time
        for i, candle in enumerate(candles):
            if candle.time == first:
                return i
        return len(candles)

    @property
    def last_scan(self) -> SignalScan:
        return self._last_scan

    @property
    def markers(self) -> tuple[Signal, ...]:
        return self._last_scan.markers

    @property
    def current_signal(self) -> CurrentSignal:
        return self._last_scan.current
