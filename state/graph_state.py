"""
LangGraph state for the analysis pipeline.
"""
from __future__ import annotations

import operator
from typing import Annotated, Any, Optional
from typing_extensions import TypedDict

from state.models import (
    Candle,
    ConsensusResult,
    EtfHoldingsResponse,
    ExtractedSignals,
    PortfolioHolding,
    SectorData,
)


class AnalysisState(TypedDict, total=False):
    # Input: portfolio file / mock_data, chart symbols, analyst answers
    portfolio: list[PortfolioHolding]
    price_symbols: list[str]
    analyst_texts: dict[str, str]          # analyst id → final response text

    # Data freshness warnings (cache fallbacks, partial failures)
    data_warnings: list[str]

    # Ingestion output: boundary data already shaped to state.models
    etf_holdings: list[EtfHoldingsResponse]
    sector_data: list[SectorData]
    candles: dict[str, list[Candle]]

    # Agent 3 output: dict[symbol, TechnicalSnapshot]
    market_data: Optional[dict[str, Any]]

    # Agent 4 output: WeightedEtfOverlapResult
    etf_overlap: Optional[Any]

    # Agent 6 output: PortfolioXRayResult + SectorBreakdownResult
    xray: Optional[Any]
    sectors: Optional[Any]

    # Agent 8: one entry per finished extraction, merged across parallel branches
    analyst_signals: Annotated[list[ExtractedSignals], operator.add]
    consensus: Optional[ConsensusResult]


class AnalystTextState(TypedDict):
    """Payload of one signal-extraction branch (sent per analyst)."""
    analyst_id: str
    text: str
