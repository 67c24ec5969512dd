"""Pydantic Settings configuration models.

3-tier config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., CANDLEPIPE_INDICATORS__RSI__PERIOD=21)

Indicator and signal parameter models are frozen: the pipeline replaces
them wholesale on reconfiguration instead of mutating them in place.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from candlepipe.market.types import IndicatorKind, StrategyMode

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})
VALID_KLINE_INTERVALS = frozenset(
    {
        "1m", "3m", "5m", "15m", "30m",
        "1h", "2h", "4h", "6h", "8h", "12h",
        "1d", "3d", "1w", "1M",
    }
)


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SMAParams(_Params):
    period: int = Field(default=20, ge=1)


class EMAParams(_Params):
    period: int = Field(default=20, ge=1)


class BollingerParams(_Params):
    period: int = Field(default=20, ge=1)
    mult: float = Field(default=2.0, gt=0.0)


class RSIParams(_Params):
    period: int = Field(default=14, ge=1)


class MACDParams(_Params):
    """MACD periods. Emission starts at index ``slow``."""

    fast: int = Field(default=12, ge=1)
    slow: int = Field(default=26, ge=1)
    signal: int = Field(default=9, ge=1)

    @model_validator(mode="after")
    def validate_fast_below_slow(self) -> MACDParams:
        if self.fast >= self.slow:
            raise ValueError(
                f"MACD fast period must be < slow period, "
                f"got fast={self.fast} slow={self.slow}"
            )
        return self


IndicatorParams = SMAParams | EMAParams | BollingerParams | RSIParams | MACDParams

PARAMS_BY_KIND: dict[IndicatorKind, type[_Params]] = {
    IndicatorKind.SMA: SMAParams,
    IndicatorKind.EMA: EMAParams,
    IndicatorKind.BB: BollingerParams,
    IndicatorKind.RSI: RSIParams,
    IndicatorKind.MACD: MACDParams,
}


class IndicatorConfig(_Params):
    """Per-kind indicator parameters with the stated defaults."""

    sma: SMAParams = SMAParams()
    ema: EMAParams = EMAParams()
    bb: BollingerParams = BollingerParams()
    rsi: RSIParams = RSIParams()
    macd: MACDParams = MACDParams()

    def for_kind(self, kind: IndicatorKind) -> IndicatorParams:
        """Parameters for one indicator kind."""
        params: IndicatorParams = getattr(self, kind.value)
        return params

    def with_params(
        self,
        kind: IndicatorKind,
        params: IndicatorParams,
    ) -> IndicatorConfig:
        """Return a copy with one kind's parameters replaced."""
        expected = PARAMS_BY_KIND[kind]
        if not isinstance(params, expected):
            raise TypeError(
                f"{kind.value} expects {expected.__name__}, "
                f"got {type(params).__name__}"
            )
        return self.model_copy(update={kind.value: params})


class SignalConfig(_Params):
    """RSI threshold strategy parameters."""

    mode: StrategyMode = StrategyMode.COMBINED
    oversold: float = Field(default=30.0, ge=0.0, le=100.0)
    overbought: float = Field(default=70.0, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def validate_threshold_order(self) -> SignalConfig:
        if self.oversold >= self.overbought:
            raise ValueError(
                f"oversold must be < overbought, "
                f"got {self.oversold} >= {self.overbought}"
            )
        return self


class FeedConfig(BaseModel):
    """Candle feed (Binance spot klines) configuration."""

    symbol: str = "BTCUSDT"
    interval: str = "15m"
    snapshot_limit: int = Field(default=300, ge=1, le=1000)
    rest_url: str = "https://api.binance.com"
    ws_url: str = "wss://stream.binance.com:9443/ws"
    timeout_s: float = Field(default=10.0, gt=0.0)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        v = v.upper()
        if not re.match(r"^[A-Z0-9]{5,20}$", v):
            raise ValueError(f"Invalid symbol: {v}")
        return v

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        if v not in VALID_KLINE_INTERVALS:
            raise ValueError(
                f"interval must be one of {sorted(VALID_KLINE_INTERVALS)}, got {v}"
            )
        return v


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Env var examples:
        CANDLEPIPE_LOG_LEVEL=DEBUG
        CANDLEPIPE_FEED__SYMBOL=ETHUSDT
        CANDLEPIPE_INDICATORS__BB__MULT=2.5
        CANDLEPIPE_SIGNALS__MODE=LongOnly
    """

    model_config = SettingsConfigDict(
        env_prefix="CANDLEPIPE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    feed: FeedConfig = FeedConfig()
    indicators: IndicatorConfig = IndicatorConfig()
    signals: SignalConfig = SignalConfig()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v
