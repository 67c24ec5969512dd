"""Pane/toggle coordinator.

Owns the indicator kind -> series handle map. A handle exists exactly
while its kind is enabled. RSI and MACD share a sub-pane below the price
pane; the main pane is split while either is enabled and restored to full
height when the last one is disabled.
"""

from __future__ import annotations

from typing import Any

from candlepipe.market.types import SUB_PANE_KINDS, IndicatorKind, IndicatorOutput
from candlepipe.render.surface import (
    FULL_LAYOUT,
    SPLIT_LAYOUT,
    SUB_PANE_LAYOUT,
    Pane,
    PaneLayout,
    RenderSurface,
)
from candlepipe.utils.logging import get_logger

logger = get_logger(__name__)


def pane_for(kind: IndicatorKind) -> Pane:
    return Pane.SUB if kind in SUB_PANE_KINDS else Pane.MAIN


class PaneCoordinator:
    """Tracks enabled indicators and their chart handles.

    enable/disable are idempotent: enabling an enabled kind or disabling a
    disabled kind changes nothing and returns False.
    """

    def __init__(self, surface: RenderSurface) -> None:
        self._surface = surface
        self._handles: dict[IndicatorKind, Any] = {}
        self._layout = FULL_LAYOUT
        self._surface.apply_layout(FULL_LAYOUT, None)

    def enable(self, kind: IndicatorKind) -> bool:
        if kind in self._handles:
            return False
        self._handles[kind] = self._surface.add_series(kind, pane_for(kind))
        logger.info("indicator_enabled", kind=kind.value)
        self._sync_layout()
        return True

    def disable(self, kind: IndicatorKind) -> bool:
        handle = self._handles.pop(kind, None)
        if handle is None:
            return False
        self._surface.remove_series(handle)
        logger.info("indicator_disabled", kind=kind.value)
        self._sync_layout()
        return True

    def set_enabled(self, kind: IndicatorKind, enabled: bool) -> bool:
        """Enable or disable a kind. Returns True if state changed."""
        return self.enable(kind) if enabled else self.disable(kind)

    def is_enabled(self, kind: IndicatorKind) -> bool:
        return kind in self._handles

    @property
    def enabled(self) -> frozenset[IndicatorKind]:
        return frozenset(self._handles)

    @property
    def layout(self) -> PaneLayout:
        """Current main pane layout."""
        return self._layout

    @property
    def sub_pane_visible(self) -> bool:
        return any(k in SUB_PANE_KINDS for k in self._handles)

    def handle(self, kind: IndicatorKind) -> Any | None:
        return self._handles.get(kind)

    def render(self, kind: IndicatorKind, data: IndicatorOutput) -> None:
        """Push data to a kind's series. No-op when the kind is disabled."""
        handle = self._handles.get(kind)
        if handle is not None:
            self._surface.set_series_data(handle, data)

    def release_all(self) -> None:
        """Remove every series and restore the full-height layout."""
        for kind in list(self._handles):
            self.disable(kind)

    def _sync_layout(self) -> None:
        layout = SPLIT_LAYOUT if self.sub_pane_visible else FULL_LAYOUT
        if layout == self._layout:
            return
        self._layout = layout
        sub = SUB_PANE_LAYOUT if layout == SPLIT_LAYOUT else None
        self._surface.apply_layout(layout, sub)
