"""Shared test fixtures for candlepipe."""

from __future__ import annotations

import pytest
import structlog

from candlepipe.engine.pipeline import IndicatorPipeline
from candlepipe.render.fake.surface import FakeRenderSurface


@pytest.fixture(autouse=True)
def _clear_log_context() -> None:
    """Feed sessions bind symbol/interval into structlog contextvars."""
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def surface() -> FakeRenderSurface:
    return FakeRenderSurface()


@pytest.fixture
def pipeline(surface: FakeRenderSurface) -> IndicatorPipeline:
    return IndicatorPipeline(surface)
