"""Click CLI commands for candlepipe."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import click

from candlepipe.config import AppConfig
from candlepipe.engine.pipeline import IndicatorPipeline
from candlepipe.feed.binance.mappers import candle_from_rest_row
from candlepipe.market.errors import PipelineError
from candlepipe.market.types import (
    BandSet,
    Candle,
    IndicatorKind,
    IndicatorOutput,
    MacdSet,
    SignalSide,
    StrategyMode,
)
from candlepipe.utils.logging import setup_logging

_MODE_CHOICE = click.Choice([m.value for m in StrategyMode])


@click.group()
def cli() -> None:
    """candlepipe: candle indicators and RSI signal markers for one pair."""


@cli.command()
def config() -> None:
    """Show current configuration."""
    cfg = AppConfig()

    click.echo("=== candlepipe Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo("")

    click.echo("[Feed]")
    click.echo(f"  Symbol:     {cfg.feed.symbol}")
    click.echo(f"  Interval:   {cfg.feed.interval}")
    click.echo(f"  Snapshot:   {cfg.feed.snapshot_limit} candles")
    click.echo("")

    ind = cfg.indicators
    click.echo("[Indicators]")
    click.echo(f"  SMA:        {ind.sma.period}")
    click.echo(f"  EMA:        {ind.ema.period}")
    click.echo(f"  Bollinger:  {ind.bb.period} x {ind.bb.mult}")
    click.echo(f"  RSI:        {ind.rsi.period}")
    click.echo(f"  MACD:       {ind.macd.fast}/{ind.macd.slow}/{ind.macd.signal}")
    click.echo("")

    click.echo("[Signals]")
    click.echo(f"  Mode:       {cfg.signals.mode.value}")
    click.echo(f"  Oversold:   {cfg.signals.oversold}")
    click.echo(f"  Overbought: {cfg.signals.overbought}")


def _load_candles(path: Path) -> list[Candle]:
    """Read a JSON array of candle objects or raw Binance kline rows."""
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise click.ClickException(f"{path} must contain a JSON array")

    candles: list[Candle] = []
    for item in payload:
        if isinstance(item, list):
            candles.append(candle_from_rest_row(item))
        elif isinstance(item, dict):
            try:
                candles.append(
                    Candle(
                        time=int(item["time"]),
                        open=float(item["open"]),
                        high=float(item["high"]),
                        low=float(item["low"]),
                        close=float(item["close"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise click.ClickException(f"Bad candle {item!r}: {e}") from e
        else:
            raise click.ClickException(f"Bad candle {item!r}")
    return candles


def _last_value(output: IndicatorOutput) -> str:
    if isinstance(output, BandSet):
        if not output.basis:
            return "-"
        return (
            f"{output.lower[-1].value:.2f} / {output.basis[-1].value:.2f} / "
            f"{output.upper[-1].value:.2f}"
        )
    if isinstance(output, MacdSet):
        if not output.macd_line:
            return "-"
        return (
            f"{output.macd_line[-1].value:.4f} "
            f"(signal {output.signal_line[-1].value:.4f}, "
            f"hist {output.histogram[-1].value:+.4f})"
        )
    if not output:
        return "-"
    return f"{output[-1].value:.2f}"


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--mode", type=_MODE_CHOICE, default=None, help="Strategy mode.")
@click.option("--rsi-period", type=int, default=None, help="RSI period override.")
def analyze(path: Path, mode: str | None, rsi_period: int | None) -> None:
    """Compute all indicators and signals for a candle JSON file."""
    cfg = AppConfig()
    setup_logging(level=cfg.log_level, log_format=cfg.log_format)

    pipeline = IndicatorPipeline(
        indicator_config=cfg.indicators,
        signal_config=cfg.signals,
        enabled=list(IndicatorKind),
    )
    try:
        if mode is not None:
            pipeline.set_strategy_mode(StrategyMode(mode))
        if rsi_period is not None:
            pipeline.set_indicator_config(IndicatorKind.RSI, {"period": rsi_period})
        candles = _load_candles(path)
        pipeline.on_snapshot(candles)
    except PipelineError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Candles: {len(candles)}")
    click.echo(f"Last close: {candles[-1].close:.2f}")
    click.echo("")
    labels = {
        IndicatorKind.SMA: "SMA",
        IndicatorKind.EMA: "EMA",
        IndicatorKind.BB: "BB (lo/mid/up)",
        IndicatorKind.RSI: "RSI",
        IndicatorKind.MACD: "MACD",
    }
    for kind, label in labels.items():
        click.echo(f"  {label:<16}{_last_value(pipeline.get_indicator(kind))}")

    markers = pipeline.get_markers()
    longs = sum(1 for m in markers if m.side == SignalSide.LONG)
    click.echo("")
    click.echo(f"Mode:    {pipeline.strategy_mode.value}")
    click.echo(f"Markers: {len(markers)} ({longs} long, {len(markers) - longs} short)")
    click.echo(f"Signal:  {pipeline.get_current_signal().value.upper()}")


@cli.command()
@click.option("--symbol", default=None, help="Trading pair (default from config).")
@click.option("--interval", default=None, help="Kline interval (default from config).")
@click.option("--mode", type=_MODE_CHOICE, default=None, help="Strategy mode.")
@click.option(
    "--max-updates", type=int, default=None, help="Stop after N applied updates."
)
def watch(
    symbol: str | None,
    interval: str | None,
    mode: str | None,
    max_updates: int | None,
) -> None:
    """Stream live klines and report the current signal on each update."""
    from candlepipe.feed.binance.feed import BinanceCandleFeed
    from candlepipe.feed.runner import run_feed

    cfg = AppConfig()
    setup_logging(level=cfg.log_level, log_format=cfg.log_format)

    overrides: dict[str, Any] = {}
    if symbol is not None:
        overrides["symbol"] = symbol
    if interval is not None:
        overrides["interval"] = interval
    try:
        feed_cfg = cfg.feed.model_validate({**cfg.feed.model_dump(), **overrides})
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    signals = cfg.signals
    if mode is not None:
        signals = signals.model_copy(update={"mode": StrategyMode(mode)})

    pipeline = IndicatorPipeline(
        indicator_config=cfg.indicators,
        signal_config=signals,
    )

    def _report(p: IndicatorPipeline, candle: Candle) -> None:
        rsi = p.get_indicator(IndicatorKind.RSI)
        rsi_text = _last_value(rsi)
        click.echo(
            f"{candle.time}  close={candle.close:.2f}  rsi={rsi_text}  "
            f"signal={p.get_current_signal().value.upper()}"
        )

    try:
        asyncio.run(
            run_feed(
                pipeline,
                BinanceCandleFeed(feed_cfg),
                on_update=_report,
                max_updates=max_updates,
            )
        )
    except PipelineError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        click.echo("Stopped.")
    finally:
        pipeline.close()
