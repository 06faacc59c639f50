"""
Agent 3 — Market Data

Fetches daily OHLCV via yfinance (single batch call) for the chart symbols
and computes the chart-preset indicators (SMA 20/50/200, EMA 12/26, RSI 14,
MACD 12/26/9, Bollinger 20/2) for each.

Produces: state["candles"], state["market_data"] = dict[symbol, TechnicalSnapshot]

Design:
  - fetch() is the core logic — testable standalone
  - run()   is the LangGraph node wrapper
  - Pre-seeded candles (--mock) skip the download
"""
from __future__ import annotations

import time

from analysis.technicals import TechnicalSnapshot, compute
from config import PRICE_INTERVAL, PRICE_PERIOD
from state.models import Candle
from tools.yfinance_client import fetch_candles


def fetch(symbols: list[str]) -> tuple[dict[str, list[Candle]], dict[str, TechnicalSnapshot]]:
    """
    Fetch price history + compute technicals for a list of symbols.

    Returns:
        (candles, snapshots)  — only symbols yfinance returned data for
    """
    print(f"\n[Agent 3] Fetching market data for: {symbols}")
    t0 = time.time()

    candles = fetch_candles(symbols, period=PRICE_PERIOD, interval=PRICE_INTERVAL)
    print(f"[Agent 3] Downloaded {len(candles)}/{len(symbols)} symbols "
          f"({time.time() - t0:.1f}s)")

    snapshots = compute(candles)
    print(f"[Agent 3] Technicals computed for {len(snapshots)} symbols")

    return candles, snapshots


def run(state: dict) -> dict:
    """LangGraph node — reads price_symbols (or pre-seeded candles), writes market_data."""
    candles = state.get("candles")
    if candles:
        snapshots = compute(candles)
        print(f"\n[Agent 3] Technicals computed for {len(snapshots)} pre-loaded symbols")
        return {"market_data": snapshots}

    symbols = state.get("price_symbols") or []
    if not symbols:
        return {"candles": {}, "market_data": {}}

    candles, snapshots = fetch(symbols)
    warnings = [f"No price data for {s}." for s in symbols if s.upper() not in candles]
    return {
        "candles": candles,
        "market_data": snapshots,
        "data_warnings": (state.get("data_warnings") or []) + warnings,
    }
