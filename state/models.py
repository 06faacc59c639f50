"""
Pydantic models for the records that cross the boundary into the analysis engines.

Inputs arrive already shaped by the provider adapters (tools/) or by the user:
  Candle, EtfHolding / EtfHoldingsResponse, PortfolioHolding, SectorData.
Outputs that leave the engines as plain data (warnings, analyst signals,
consensus) live here too so agents and reports can serialise them.
"""
from __future__ import annotations

import math
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


Sentiment = Literal["bullish", "bearish", "neutral"]
OverallSentiment = Literal["bullish", "bearish", "neutral", "mixed"]
Severity = Literal["high", "medium", "low"]


# ── Market data ───────────────────────────────────────────────────────────────

class Candle(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: Union[int, float, str]     # unix seconds or ISO date string
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    @model_validator(mode="after")
    def _check_range(self) -> "Candle":
        prices = (self.open, self.high, self.low, self.close)
        if not all(math.isfinite(p) for p in prices):
            raise ValueError("OHLC values must be finite")
        if not (self.low <= min(self.open, self.close) and max(self.open, self.close) <= self.high):
            raise ValueError(
                f"candle at {self.time!r} violates low <= open,close <= high"
            )
        return self


# ── ETF holdings ──────────────────────────────────────────────────────────────

class EtfHolding(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    holding_name: str
    holding_percent: float = Field(ge=0.0, le=1.0)   # fraction, 0.07 = 7%


class EtfHoldingsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    holdings: list[EtfHolding] = Field(default_factory=list)   # top holdings only, need not sum to 1


# ── Portfolio ─────────────────────────────────────────────────────────────────

class PortfolioHolding(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    allocation: float = Field(ge=0.0, le=100.0)   # percent of portfolio
    is_etf: bool = False


class SectorData(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    sector: Optional[str] = None   # None when the provider has no classification


# ── Warnings ──────────────────────────────────────────────────────────────────

class DiversificationWarning(BaseModel):
    """Raised by the ETF overlap comparator (fractions, not percents)."""
    type: Literal["single_stock_concentration", "top_n_concentration"]
    message: str
    symbols: list[str]
    value: float


class ConcentrationWarning(BaseModel):
    """Raised by the portfolio X-ray and sector breakdown (percent scale)."""
    type: Literal[
        "single_stock_concentration",
        "top_n_concentration",
        "allocation_mismatch",
        "sector_concentration",
    ]
    severity: Severity
    message: str
    symbols: list[str]
    value: float


# ── Multi-analyst signals ─────────────────────────────────────────────────────

class KeyLevels(BaseModel):
    support: list[float] = Field(default_factory=list)      # descending
    resistance: list[float] = Field(default_factory=list)   # ascending


class PriceTargets(BaseModel):
    upside: Optional[float] = None
    downside: Optional[float] = None


class ExtractedSignals(BaseModel):
    analyst_id: str
    sentiment: Sentiment
    confidence: int = Field(ge=0, le=100)
    patterns: list[str] = Field(default_factory=list)
    key_levels: KeyLevels = Field(default_factory=KeyLevels)
    price_targets: PriceTargets = Field(default_factory=PriceTargets)


class CommonPattern(BaseModel):
    pattern: str
    mentioned_by: list[str]


class ConsensusResult(BaseModel):
    overall_sentiment: OverallSentiment = "neutral"
    agreement_percentage: int = 0
    bullish_count: int = 0
    bearish_count: int = 0
    neutral_count: int = 0
    common_patterns: list[CommonPattern] = Field(default_factory=list)
    key_agreements: list[str] = Field(default_factory=list)
    key_disagreements: list[str] = Field(default_factory=list)
    confidence_score: int = 0
