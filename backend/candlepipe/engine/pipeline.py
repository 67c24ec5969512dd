"""Indicator pipeline: candle store -> indicators -> signals -> surface.

Single-threaded and synchronous. Every mutation (snapshot, update,
toggle, config or mode change) recomputes all enabled indicators and the
signal scan before returning, so readers never observe indicators built
from a stale candle series. RSI is always computed because the signal
generator depends on it whether or not it is displayed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pydantic

from candlepipe.config import (
    PARAMS_BY_KIND,
    IndicatorConfig,
    IndicatorParams,
    SignalConfig,
)
from candlepipe.engine.indicators import compute, empty_output
from candlepipe.engine.panes import PaneCoordinator
from candlepipe.engine.signals import SignalGenerator
from candlepipe.market.candle_store import CandleStore
from candlepipe.market.errors import ConfigError
from candlepipe.market.types import (
    Candle,
    CurrentSignal,
    IndicatorKind,
    IndicatorOutput,
    IndicatorPoint,
    Signal,
    StrategyMode,
)
from candlepipe.render.surface import NullRenderSurface, RenderSurface
from candlepipe.utils.logging import get_logger

logger = get_logger(__name__)


class IndicatorPipeline:
    """Owns the candle store and all state derived from it.

    Transport side: on_snapshot() once, then on_update() per tick.
    Presentation side: get_candles(), get_indicator(), get_markers(),
    get_current_signal(), plus the set_* configuration surface.
    """

    def __init__(
        self,
        surface: RenderSurface | None = None,
        *,
        indicator_config: IndicatorConfig | None = None,
        signal_config: SignalConfig | None = None,
        enabled: Iterable[IndicatorKind] = (),
    ) -> None:
        self._surface = surface if surface is not None else NullRenderSurface()
        self._store = CandleStore()
        self._config = indicator_config or IndicatorConfig()
        self._signals = SignalGenerator(signal_config)
        self._panes = PaneCoordinator(self._surface)
        self._outputs: dict[IndicatorKind, IndicatorOutput] = {}
        self._failures: dict[IndicatorKind, str] = {}
        for kind in enabled:
            self._panes.enable(kind)

    # --- Transport side ---

    def on_snapshot(self, candles: Sequence[Candle]) -> None:
        """Replace the candle history. Raises ValidationError if invalid."""
        self._store.ingest(candles)
        self._recompute()

    def on_update(self, candle: Candle) -> None:
        """Merge one streamed candle. Raises OutOfOrderUpdateError if stale."""
        self._store.apply_update(candle)
        self._recompute()

    # --- Presentation side ---

    def get_candles(self) -> tuple[Candle, ...]:
        return self._store.snapshot()

    def get_indicator(
        self,
        kind: IndicatorKind,
        params: IndicatorParams | Mapping[str, Any] | None = None,
    ) -> IndicatorOutput:
        """Indicator output for a kind.

        Without params, returns the current configured output (computed on
        demand for kinds that are not enabled). With params, computes a
        one-off series without touching the stored configuration.
        """
        if params is None:
            cached = self._outputs.get(kind)
            if cached is not None:
                return cached
            return self._safe_compute(kind, self._config)
        config = self._config.with_params(kind, self._validate_params(kind, params))
        return self._safe_compute(kind, config)

    def get_markers(self) -> tuple[Signal, ...]:
        return self._signals.markers

    def get_current_signal(self) -> CurrentSignal:
        return self._signals.current_signal

    @property
    def enabled(self) -> frozenset[IndicatorKind]:
        return self._panes.enabled

    @property
    def indicator_config(self) -> IndicatorConfig:
        return self._config

    @property
    def signal_config(self) -> SignalConfig:
        return self._signals.config

    @property
    def strategy_mode(self) -> StrategyMode:
        return self._signals.mode

    @property
    def panes(self) -> PaneCoordinator:
        return self._panes

    @property
    def failures(self) -> dict[IndicatorKind, str]:
        """Indicators whose last computation failed, with the error text."""
        return dict(self._failures)

    # --- Configuration surface ---

    def set_strategy_mode(self, mode: StrategyMode) -> None:
        """Switch strategy mode and re-scan all markers."""
        mode = StrategyMode(mode)
        if mode == self._signals.mode:
            return
        self._signals.configure(
            self._signals.config.model_copy(update={"mode": mode}),
        )
        logger.info("strategy_mode_changed", mode=mode.value)
        self._recompute()

    def set_signal_config(
        self,
        config: SignalConfig | Mapping[str, Any],
    ) -> None:
        """Replace thresholds and mode. Invalid values raise ConfigError."""
        if not isinstance(config, SignalConfig):
            try:
                config = SignalConfig.model_validate(
                    {**self._signals.config.model_dump(), **config},
                )
            except pydantic.ValidationError as e:
                logger.warning("signal_config_rejected", error=str(e))
                raise ConfigError(str(e)) from e
        self._signals.configure(config)
        self._recompute()

    def set_indicator_enabled(self, kind: IndicatorKind, enabled: bool) -> None:
        """Toggle an indicator. Repeating the current state is a no-op."""
        kind = IndicatorKind(kind)
        if not self._panes.set_enabled(kind, enabled):
            return
        self._recompute()

    def set_indicator_config(
        self,
        kind: IndicatorKind,
        params: IndicatorParams | Mapping[str, Any],
    ) -> None:
        """Override one kind's parameters.

        Raises ConfigError and keeps the last valid configuration if the
        parameters are out of range.
        """
        kind = IndicatorKind(kind)
        validated = self._validate_params(kind, params)
        self._config = self._config.with_params(kind, validated)
        logger.info(
            "indicator_config_changed",
            kind=kind.value,
            params=validated.model_dump(),
        )
        self._recompute()

    def close(self) -> None:
        """Release every chart handle."""
        self._panes.release_all()

    # --- Internals ---

    def _validate_params(
        self,
        kind: IndicatorKind,
        params: IndicatorParams | Mapping[str, Any],
    ) -> IndicatorParams:
        model = PARAMS_BY_KIND[kind]
        if isinstance(params, model):
            return params
        if not isinstance(params, Mapping):
            raise ConfigError(
                f"{kind.value} expects {model.__name__} or a mapping, "
                f"got {type(params).__name__}"
            )
        current = self._config.for_kind(kind).model_dump()
        try:
            validated: IndicatorParams = model.model_validate({**current, **params})  # type: ignore[assignment]
        except pydantic.ValidationError as e:
            logger.warning("indicator_config_rejected", kind=kind.value, error=str(e))
            raise ConfigError(f"Invalid {kind.value} parameters: {e}") from e
        return validated

    def _safe_compute(
        self,
        kind: IndicatorKind,
        config: IndicatorConfig,
    ) -> IndicatorOutput:
        candles = self._store.snapshot()
        try:
            output = compute(kind, candles, config)
        except Exception as e:
            # One broken indicator must not take down the others.
            logger.warning(
                "indicator_failed",
                kind=kind.value,
                error=str(e),
                exc_info=True,
            )
            self._failures[kind] = str(e)
            return empty_output(kind)
        self._failures.pop(kind, None)
        return output

    def _recompute(self) -> None:
        candles = self._store.snapshot()
        self._surface.set_candles(candles)

        kinds = self._panes.enabled | {IndicatorKind.RSI}
        outputs = {kind: self._safe_compute(kind, self._config) for kind in kinds}
        self._outputs = outputs

        for kind in self._panes.enabled:
            self._panes.render(kind, outputs[kind])

        rsi_series: tuple[IndicatorPoint, ...] = outputs[IndicatorKind.RSI]  # type: ignore[assignment]
        previous = self._signals.current_signal
        scan = self._signals.scan(candles, rsi_series)
        self._surface.set_markers(scan.markers)

        if scan.current != previous:
            logger.info(
                "current_signal_changed",
                previous=previous.value,
                current=scan.current.value,
                markers=len(scan.markers),
            )
