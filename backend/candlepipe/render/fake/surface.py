"""FakeRenderSurface: in-memory chart backend for testing.

Lightweight implementation of RenderSurface that records every handle,
data push and layout change so tests can assert on what would be drawn.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field

from candlepipe.market.types import Candle, IndicatorKind, IndicatorOutput, Signal
from candlepipe.render.surface import FULL_LAYOUT, Pane, PaneLayout


@dataclass
class FakeSeries:
    """Handle returned by FakeRenderSurface.add_series."""

    series_id: int
    kind: IndicatorKind
    pane: Pane
    data: IndicatorOutput | None = None
    removed: bool = False


@dataclass
class FakeRenderSurface:
    """Records chart operations instead of drawing them."""

    candles: tuple[Candle, ...] = ()
    markers: tuple[Signal, ...] = ()
    main_layout: PaneLayout = FULL_LAYOUT
    sub_layout: PaneLayout | None = None
    series: dict[int, FakeSeries] = field(default_factory=dict)
    created: int = 0
    destroyed: int = 0
    layout_history: list[PaneLayout] = field(default_factory=list)
    _ids: itertools.count[int] = field(default_factory=itertools.count)

    def add_series(self, kind: IndicatorKind, pane: Pane) -> FakeSeries:
        handle = FakeSeries(series_id=next(self._ids), kind=kind, pane=pane)
        self.series[handle.series_id] = handle
        self.created += 1
        return handle

    def remove_series(self, handle: FakeSeries) -> None:
        if handle.series_id not in self.series:
            raise KeyError(f"Unknown series {handle.series_id}")
        del self.series[handle.series_id]
        handle.removed = True
        self.destroyed += 1

    def set_series_data(self, handle: FakeSeries, data: IndicatorOutput) -> None:
        if handle.removed:
            raise ValueError(f"Series {handle.series_id} was removed")
        handle.data = data

    def set_candles(self, candles: Sequence[Candle]) -> None:
        self.candles = tuple(candles)

    def set_markers(self, markers: Sequence[Signal]) -> None:
        self.markers = tuple(markers)

    def apply_layout(self, main: PaneLayout, sub: PaneLayout | None) -> None:
        self.main_layout = main
        self.sub_layout = sub
        self.layout_history.append(main)

    def live_kinds(self) -> set[IndicatorKind]:
        """Kinds that currently have a series on the chart."""
        return {s.kind for s in self.series.values()}

    def data_for(self, kind: IndicatorKind) -> IndicatorOutput | None:
        """Data last pushed to the live series of a kind, if any."""
        for s in self.series.values():
            if s.kind == kind:
                return s.data
        return None
