"""
Agent 1 — Portfolio Ingestion

Loads the user's portfolio (symbol, allocation %, is_etf) and resolves the
boundary data the engines need: top holdings for every ETF and a sector tag
for every symbol that can end up in the X-Ray.

Fallback rules:
  - ETF holdings fetch fails for a symbol  → cached snapshot if present
  - Sector fetch fails for a symbol        → cached sector, else "Unknown/Other"
  - Every fallback or gap becomes a human-readable data warning

Produces: state["etf_holdings"], state["sector_data"], state["data_warnings"]
"""
from __future__ import annotations

import json
from pathlib import Path

from cache.holdings_cache import load as cache_load, save as cache_save
from state.models import EtfHoldingsResponse, PortfolioHolding, SectorData
from tools.yfinance_client import fetch_etf_holdings, fetch_sector_data


# ── Portfolio file ────────────────────────────────────────────────────────────

def load_portfolio(path: str | Path) -> list[PortfolioHolding]:
    """
    Read a portfolio JSON file: [{"symbol": "VOO", "allocation": 60, "is_etf": true}, ...]

    Duplicate symbols are merged (allocations summed).
    """
    with open(path) as f:
        raw = json.load(f)

    merged: dict[str, PortfolioHolding] = {}
    for entry in raw:
        h = PortfolioHolding(**{**entry, "symbol": str(entry.get("symbol", "")).upper()})
        if h.symbol in merged:
            prev = merged[h.symbol]
            h = PortfolioHolding(
                symbol=h.symbol,
                allocation=prev.allocation + h.allocation,
                is_etf=prev.is_etf or h.is_etf,
            )
        merged[h.symbol] = h
    return list(merged.values())


# ── ETF holdings ──────────────────────────────────────────────────────────────

def resolve_etf_holdings(etf_symbols: list[str]) -> tuple[list[EtfHoldingsResponse], list[str]]:
    """Live fetch with per-symbol cache fallback. Returns (responses, data_warnings)."""
    if not etf_symbols:
        return [], []

    warnings: list[str] = []
    live, errors = fetch_etf_holdings(etf_symbols)
    if live:
        cache_save("etf_holdings", {r.symbol: r.model_dump() for r in live})

    failed = [e["symbol"] for e in errors]
    if not failed:
        return live, warnings

    cached = cache_load("etf_holdings")
    records, fetched_at = cached if cached else ({}, None)

    for err in errors:
        symbol = err["symbol"]
        if symbol in records:
            live.append(EtfHoldingsResponse(**records[symbol]))
            msg = f"{symbol} holdings from cache (last fetched: {fetched_at}) — live fetch failed."
            print(f"  [FALLBACK] {msg}")
        else:
            msg = f"{symbol} holdings unavailable ({err['error'][:120]}) — ETF excluded from X-Ray."
            print(f"  [WARN] {msg}")
        warnings.append(msg)

    return live, warnings


# ── Sectors ───────────────────────────────────────────────────────────────────

def resolve_sectors(symbols: list[str]) -> tuple[list[SectorData], list[str]]:
    """Sector tags with cache fallback for symbols the provider couldn't classify."""
    if not symbols:
        return [], []

    data, errors = fetch_sector_data(symbols)
    found = {d.symbol: d.model_dump() for d in data if d.sector}
    if found:
        cache_save("sectors", found)

    if not errors:
        return data, []

    cached = cache_load("sectors")
    records = cached[0] if cached else {}
    failed = {e["symbol"] for e in errors}

    resolved = []
    recovered = 0
    for d in data:
        if d.symbol in failed and d.symbol in records:
            resolved.append(SectorData(**records[d.symbol]))
            recovered += 1
        else:
            resolved.append(d)

    warnings = [
        f"Sector lookup failed for {len(failed)} symbols; {recovered} recovered from cache, "
        f"the rest are grouped under Unknown/Other."
    ]
    return resolved, warnings


# ── Main entry point ──────────────────────────────────────────────────────────

def fetch(portfolio: list[PortfolioHolding]) -> tuple[list[EtfHoldingsResponse], list[SectorData], list[str]]:
    """
    Resolve ETF holdings and sector tags for a portfolio.

    Returns:
        (etf_holdings, sector_data, data_warnings)
    """
    etf_symbols = [h.symbol for h in portfolio if h.is_etf]
    print(f"\n[Agent 1] Resolving holdings for {len(etf_symbols)} ETFs: {etf_symbols}")
    etf_holdings, warnings = resolve_etf_holdings(etf_symbols)

    symbols = [h.symbol for h in portfolio if not h.is_etf]
    symbols += [h.symbol for etf in etf_holdings for h in etf.holdings]
    print(f"[Agent 1] Resolving sectors for {len(set(symbols))} symbols")
    sector_data, sector_warnings = resolve_sectors(symbols)

    return etf_holdings, sector_data, warnings + sector_warnings


def run(state: dict) -> dict:
    """
    LangGraph node. Pre-seeded etf_holdings / sector_data (e.g. --mock) are kept.
    """
    if state.get("etf_holdings") is not None and state.get("sector_data") is not None:
        print("\n[Agent 1] Using pre-loaded ETF holdings and sector data")
        return {"data_warnings": state.get("data_warnings") or []}

    etf_holdings, sector_data, warnings = fetch(state["portfolio"])
    return {
        "etf_holdings": etf_holdings,
        "sector_data": sector_data,
        "data_warnings": (state.get("data_warnings") or []) + warnings,
    }
