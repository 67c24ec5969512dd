"""Tests for PaneCoordinator handle lifecycle and sub-pane layout."""

from __future__ import annotations

import pytest

from candlepipe.engine.panes import PaneCoordinator, pane_for
from candlepipe.market.types import IndicatorKind, IndicatorPoint
from candlepipe.render.fake.surface import FakeRenderSurface
from candlepipe.render.surface import (
    FULL_LAYOUT,
    SPLIT_LAYOUT,
    SUB_PANE_LAYOUT,
    Pane,
)


@pytest.fixture
def coordinator(surface: FakeRenderSurface) -> PaneCoordinator:
    return PaneCoordinator(surface)


class TestHandles:
    def test_enable_creates_handle(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        assert coordinator.enable(IndicatorKind.SMA) is True
        assert coordinator.is_enabled(IndicatorKind.SMA)
        assert surface.live_kinds() == {IndicatorKind.SMA}
        assert coordinator.handle(IndicatorKind.SMA) is not None

    def test_enable_twice_is_noop(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        coordinator.enable(IndicatorKind.EMA)
        handle = coordinator.handle(IndicatorKind.EMA)
        assert coordinator.enable(IndicatorKind.EMA) is False
        assert coordinator.handle(IndicatorKind.EMA) is handle
        assert surface.created == 1

    def test_disable_releases_handle(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        coordinator.enable(IndicatorKind.BB)
        handle = coordinator.handle(IndicatorKind.BB)
        assert coordinator.disable(IndicatorKind.BB) is True
        assert coordinator.handle(IndicatorKind.BB) is None
        assert handle.removed is True
        assert surface.destroyed == 1

    def test_disable_disabled_is_noop(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        assert coordinator.disable(IndicatorKind.MACD) is False
        assert surface.destroyed == 0

    def test_set_enabled_dispatches(self, coordinator: PaneCoordinator) -> None:
        assert coordinator.set_enabled(IndicatorKind.RSI, True) is True
        assert coordinator.set_enabled(IndicatorKind.RSI, False) is True
        assert coordinator.enabled == frozenset()

    def test_render_only_reaches_enabled(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        data = (IndicatorPoint(time=1, value=2.0),)
        coordinator.render(IndicatorKind.SMA, data)
        assert surface.series == {}

        coordinator.enable(IndicatorKind.SMA)
        coordinator.render(IndicatorKind.SMA, data)
        assert surface.data_for(IndicatorKind.SMA) == data

    def test_release_all(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        for kind in IndicatorKind:
            coordinator.enable(kind)
        coordinator.release_all()
        assert surface.series == {}
        assert coordinator.layout == FULL_LAYOUT


class TestLayout:
    @pytest.mark.parametrize(
        ("kind", "pane"),
        [
            (IndicatorKind.SMA, Pane.MAIN),
            (IndicatorKind.EMA, Pane.MAIN),
            (IndicatorKind.BB, Pane.MAIN),
            (IndicatorKind.RSI, Pane.SUB),
            (IndicatorKind.MACD, Pane.SUB),
        ],
    )
    def test_pane_assignment(self, kind: IndicatorKind, pane: Pane) -> None:
        assert pane_for(kind) == pane

    def test_starts_full_height(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        assert coordinator.layout == FULL_LAYOUT
        assert surface.main_layout == FULL_LAYOUT
        assert surface.sub_layout is None

    def test_main_pane_indicators_keep_layout(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        for kind in (IndicatorKind.SMA, IndicatorKind.EMA, IndicatorKind.BB):
            coordinator.enable(kind)
        assert coordinator.layout == FULL_LAYOUT
        assert surface.layout_history == [FULL_LAYOUT]

    @pytest.mark.parametrize("kind", [IndicatorKind.RSI, IndicatorKind.MACD])
    def test_oscillator_reserves_sub_pane(
        self,
        coordinator: PaneCoordinator,
        surface: FakeRenderSurface,
        kind: IndicatorKind,
    ) -> None:
        coordinator.enable(kind)
        assert coordinator.layout == SPLIT_LAYOUT
        assert surface.sub_layout == SUB_PANE_LAYOUT

    def test_last_oscillator_restores_full_height(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        before = surface.main_layout
        coordinator.enable(IndicatorKind.RSI)
        coordinator.enable(IndicatorKind.MACD)

        coordinator.disable(IndicatorKind.RSI)
        assert coordinator.layout == SPLIT_LAYOUT

        coordinator.disable(IndicatorKind.MACD)
        assert coordinator.layout == before
        assert surface.main_layout == before
        assert surface.sub_layout is None

    def test_layout_applied_only_on_change(
        self, coordinator: PaneCoordinator, surface: FakeRenderSurface
    ) -> None:
        coordinator.enable(IndicatorKind.RSI)
        coordinator.enable(IndicatorKind.MACD)
        coordinator.disable(IndicatorKind.MACD)
        assert surface.layout_history == [FULL_LAYOUT, SPLIT_LAYOUT]
