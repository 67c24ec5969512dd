"""Presentation seam: render surface protocol and pane layouts."""

from candlepipe.render.surface import (
    FULL_LAYOUT,
    SPLIT_LAYOUT,
    SUB_PANE_LAYOUT,
    NullRenderSurface,
    Pane,
    PaneLayout,
    RenderSurface,
)

__all__ = [
    "FULL_LAYOUT",
    "SPLIT_LAYOUT",
    "SUB_PANE_LAYOUT",
    "NullRenderSurface",
    "Pane",
    "PaneLayout",
    "RenderSurface",
]
