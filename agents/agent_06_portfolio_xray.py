"""
Agent 6 — Portfolio X-Ray + Sector Breakdown

Flattens ETF positions into per-company exposure, then groups the result by
sector. Sector grouping depends on the X-Ray output, so both run here in order.

Produces: state["xray"] = PortfolioXRayResult, state["sectors"] = SectorBreakdownResult
"""
from __future__ import annotations

from analysis.portfolio_xray import PortfolioXRayResult, calculate_portfolio_exposure
from analysis.sector_breakdown import SectorBreakdownResult, calculate_sector_breakdown
from state.models import EtfHoldingsResponse, PortfolioHolding, SectorData


def fetch(
    portfolio: list[PortfolioHolding],
    etf_holdings: list[EtfHoldingsResponse],
    sector_data: list[SectorData],
) -> tuple[PortfolioXRayResult, SectorBreakdownResult]:
    xray = calculate_portfolio_exposure(portfolio, etf_holdings)
    sectors = calculate_sector_breakdown(xray.exposures, sector_data)
    return xray, sectors


def run(state: dict) -> dict:
    """LangGraph node — adds state["xray"] and state["sectors"]."""
    xray, sectors = fetch(
        state["portfolio"],
        state.get("etf_holdings") or [],
        state.get("sector_data") or [],
    )

    print(f"\n[Agent 6] {len(xray.exposures)} underlying companies, "
          f"{len(sectors.sectors)} sectors, "
          f"{len(xray.warnings) + len(sectors.warnings)} warnings")
    if xray.exposures and sectors.total_categorized < 95:
        print(f"[Agent 6] {100 - sectors.total_categorized:.1f}% of portfolio lacks sector data")

    return {"xray": xray, "sectors": sectors}
