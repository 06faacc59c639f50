"""
Agent 4 — ETF Overlap

Compares every pair of ETFs in the portfolio, weighted by how much of the
portfolio each ETF takes up.

Produces: state["etf_overlap"] = WeightedEtfOverlapResult (None with < 2 ETFs)
"""
from __future__ import annotations

from analysis.etf_overlap import WeightedEtfOverlapResult, compute_weighted_overlap
from state.models import EtfHoldingsResponse, PortfolioHolding


def fetch(
    portfolio: list[PortfolioHolding],
    etf_holdings: list[EtfHoldingsResponse],
) -> WeightedEtfOverlapResult | None:
    """Overlap across the portfolio's ETFs that have holdings data."""
    weights = {h.symbol: h.allocation for h in portfolio if h.is_etf}
    etf_data = [e for e in etf_holdings if e.symbol in weights]
    if len(etf_data) < 2:
        print(f"[Agent 4] {len(etf_data)} ETF(s) with holdings — nothing to compare")
        return None
    return compute_weighted_overlap(etf_data, weights)


def run(state: dict) -> dict:
    """LangGraph node — adds state["etf_overlap"]."""
    result = fetch(state["portfolio"], state.get("etf_holdings") or [])
    if result is not None:
        print(f"\n[Agent 4] {len(result.pairwise_overlaps)} ETF pairs compared, "
              f"{len(result.overlapping_holdings)} overlapping holdings, "
              f"{len(result.warnings)} warnings")
    return {"etf_overlap": result}
