"""RenderSurface protocol: the seam to the charting library.

The pipeline never draws. It asks a surface for opaque series handles,
pushes computed data into them, and applies pane layouts. Any chart
backend (or the in-memory fake) must satisfy this protocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from candlepipe.market.types import Candle, IndicatorKind, IndicatorOutput, Signal


class Pane(str, Enum):
    """Chart region a series is drawn in."""

    MAIN = "main"
    SUB = "sub"


@dataclass(frozen=True)
class PaneLayout:
    """Main price pane scale margins, as fractions of chart height."""

    top: float
    bottom: float


# Main pane uses the whole chart.
FULL_LAYOUT = PaneLayout(top=0.05, bottom=0.05)
# Main pane leaves the bottom third to the oscillator sub-pane.
SPLIT_LAYOUT = PaneLayout(top=0.05, bottom=0.35)
# Sub-pane scale margins while it is shown.
SUB_PANE_LAYOUT = PaneLayout(top=0.7, bottom=0.0)


@runtime_checkable
class RenderSurface(Protocol):
    """Chart backend interface used by the pane coordinator and pipeline."""

    def add_series(self, kind: IndicatorKind, pane: Pane) -> Any:
        """Create the drawing series for an indicator and return its handle."""
        ...

    def remove_series(self, handle: Any) -> None:
        """Destroy a series previously returned by add_series."""
        ...

    def set_series_data(self, handle: Any, data: IndicatorOutput) -> None:
        """Replace the data drawn by a series."""
        ...

    def set_candles(self, candles: Sequence[Candle]) -> None:
        """Replace the main candlestick series."""
        ...

    def set_markers(self, markers: Sequence[Signal]) -> None:
        """Replace the trade markers drawn on the candlestick series."""
        ...

    def apply_layout(self, main: PaneLayout, sub: PaneLayout | None) -> None:
        """Set main pane margins; sub is None when the sub-pane is hidden."""
        ...


class NullRenderSurface:
    """Headless surface: hands out placeholder handles and draws nothing.

    Used when the pipeline runs without a chart (CLI, services).
    """

    def add_series(self, kind: IndicatorKind, pane: Pane) -> Any:
        return (kind, pane)

    def remove_series(self, handle: Any) -> None:
        pass

    def set_series_data(self, handle: Any, data: IndicatorOutput) -> None:
        pass

    def set_candles(self, candles: Sequence[Candle]) -> None:
        pass

    def set_markers(self, markers: Sequence[Signal]) -> None:
        pass

    def apply_layout(self, main: PaneLayout, sub: PaneLayout | None) -> None:
        pass
