"""
yfinance client — shapes provider data into the records the engines consume.

Design decisions:
- Single yf.download() call for all price symbols (1 API hit, not N)
- Candles use unix-second timestamps; Close is adjusted (auto_adjust=True)
- ETF top holdings come from Ticker.funds_data.top_holdings (fractions already)
- Sector tags come from Ticker.info["sector"]; missing → None
- Per-symbol failures are returned as {"symbol", "error"} dicts, never raised
"""
from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd
import yfinance as yf
from pydantic import ValidationError

from state.models import Candle, EtfHolding, EtfHoldingsResponse, SectorData

logger = logging.getLogger(__name__)

_OHLCV = ["Open", "High", "Low", "Close", "Volume"]


# ── Pure converters (no network) ──────────────────────────────────────────────

def frame_to_candles(df: pd.DataFrame) -> list[Candle]:
    """
    OHLCV DataFrame (DatetimeIndex) → ascending list[Candle].

    Rows with NaN prices or an inconsistent high/low range are dropped.
    """
    if df is None or df.empty:
        return []

    frame = df[~df.index.duplicated(keep="last")].sort_index()
    frame = frame.dropna(subset=["Open", "High", "Low", "Close"])

    candles: list[Candle] = []
    for ts, row in frame.iterrows():
        volume = row.get("Volume")
        try:
            candles.append(Candle(
                time=int(pd.Timestamp(ts).timestamp()),
                open=float(row["Open"]),
                high=float(row["High"]),
                low=float(row["Low"]),
                close=float(row["Close"]),
                volume=None if volume is None or pd.isna(volume) else float(volume),
            ))
        except ValidationError as e:
            logger.warning("dropping candle at %s: %s", ts, e.errors()[0]["msg"])
    return candles


def parse_top_holdings(symbol: str, frame: pd.DataFrame | None) -> EtfHoldingsResponse:
    """
    yfinance funds_data.top_holdings → EtfHoldingsResponse.

    Frame is indexed by holding symbol with columns "Name" and "Holding Percent".
    """
    if frame is None or frame.empty:
        return EtfHoldingsResponse(symbol=symbol, holdings=[])

    holdings = []
    for holding_symbol, row in frame.iterrows():
        pct = row.get("Holding Percent")
        if pct is None or pd.isna(pct):
            continue
        name = row.get("Name")
        holdings.append(EtfHolding(
            symbol=str(holding_symbol).upper(),
            holding_name=str(name) if name and not pd.isna(name) else str(holding_symbol),
            holding_percent=float(pct),
        ))
    return EtfHoldingsResponse(symbol=symbol, holdings=holdings)


def _unique(symbols: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(s.upper() for s in symbols if s))


# ── Fetchers ──────────────────────────────────────────────────────────────────

def fetch_candles(
    symbols: list[str],
    period: str = "1y",
    interval: str = "1d",
) -> dict[str, list[Candle]]:
    """
    Batch-download OHLCV for all symbols in a single API call.

    Returns:
        { "SYMBOL": list[Candle] }  — symbols yfinance couldn't fetch are omitted.
    """
    symbols = _unique(symbols)
    if not symbols:
        return {}

    raw = yf.download(
        symbols,
        period=period,
        interval=interval,
        auto_adjust=True,
        progress=False,
        threads=True,
    )

    result: dict[str, list[Candle]] = {}
    # yfinance 1.x always returns MultiIndex columns: (field, ticker)
    for symbol in symbols:
        try:
            df = raw.xs(symbol, level=1, axis=1)[_OHLCV]
        except KeyError:
            logger.info("no price data for %s", symbol)
            continue
        candles = frame_to_candles(df)
        if candles:
            result[symbol] = candles
    return result


def fetch_etf_holdings(symbols: list[str]) -> tuple[list[EtfHoldingsResponse], list[dict]]:
    """
    Top holdings for each ETF.

    Returns:
        (responses, errors) — errors: [{"symbol": ..., "error": ...}]
    """
    data: list[EtfHoldingsResponse] = []
    errors: list[dict] = []
    for symbol in _unique(symbols):
        try:
            frame = yf.Ticker(symbol).funds_data.top_holdings
            response = parse_top_holdings(symbol, frame)
        except Exception as e:   # yfinance raises a zoo of types for non-funds
            errors.append({"symbol": symbol, "error": str(e)})
            continue
        if not response.holdings:
            errors.append({"symbol": symbol, "error": "No holdings data available"})
            continue
        data.append(response)
    return data, errors


def fetch_sector_data(symbols: list[str]) -> tuple[list[SectorData], list[dict]]:
    """
    Sector classification per symbol (deduplicated).

    Returns:
        (sector_data, errors) — symbols that fail still get SectorData(sector=None)
        so they land in "Unknown/Other" downstream.
    """
    data: list[SectorData] = []
    errors: list[dict] = []
    for symbol in _unique(symbols):
        try:
            sector = yf.Ticker(symbol).info.get("sector")
        except Exception as e:
            errors.append({"symbol": symbol, "error": str(e)})
            sector = None
        data.append(SectorData(symbol=symbol, sector=sector or None))
    return data, errors
