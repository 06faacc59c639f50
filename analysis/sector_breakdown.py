"""
Sector breakdown — Portfolio X-Ray exposures grouped by sector.

Input:  list[ExposureBreakdown] (analysis/portfolio_xray.py)
        list[SectorData]        (tools/yfinance_client.fetch_sector_data)
Output: SectorBreakdownResult

Symbols without a sector land in "Unknown/Other". total_categorized is the
exposure that *did* have a sector, so callers can report how much of the
portfolio lacks classification (100 - total_categorized).

Warnings (Unknown/Other is never flagged):
  - sector_concentration  high   > 40%
  - sector_concentration  medium > 25%
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from analysis.portfolio_xray import ExposureBreakdown
from state.models import ConcentrationWarning, SectorData

UNKNOWN_SECTOR = "Unknown/Other"
FALLBACK_COLOR = "#666666"

HIGH_LIMIT = 40.0
MEDIUM_LIMIT = 25.0

# GICS-style palette, alternating warm/cool so adjacent slices stay distinct
SECTOR_COLORS: dict[str, str] = {
    "Technology":             "#0099ff",
    "Financial Services":     "#00d9ff",
    "Healthcare":             "#00ff88",
    "Consumer Cyclical":      "#ff6b35",
    "Industrials":            "#8b5cf6",
    "Communication Services": "#f43f5e",
    "Consumer Defensive":     "#10b981",
    "Energy":                 "#fbbf24",
    "Basic Materials":        "#ec4899",
    "Real Estate":            "#14b8a6",
    "Utilities":              "#6366f1",
    UNKNOWN_SECTOR:           FALLBACK_COLOR,
}


@dataclass
class SectorCompany:
    symbol: str
    company_name: str
    exposure: float


@dataclass
class SectorExposure:
    sector: str
    total_exposure: float
    companies: list[SectorCompany]
    color: str


@dataclass
class SectorBreakdownResult:
    sectors: list[SectorExposure] = field(default_factory=list)
    warnings: list[ConcentrationWarning] = field(default_factory=list)
    total_categorized: float = 0.0

    def summary(self) -> str:
        """Multi-line text summary suitable for LLM context."""
        if not self.sectors:
            return "Sector breakdown: no exposures."
        lines = ["Sector breakdown:"]
        for s in self.sectors:
            lines.append(f"  {s.sector:<24} {s.total_exposure:>6.2f}%  ({len(s.companies)} companies)")
        for w in self.warnings:
            lines.append(f"  [{w.severity}] {w.message}")
        return "\n".join(lines)


def calculate_sector_breakdown(
    exposures: Sequence[ExposureBreakdown],
    sector_data: Sequence[SectorData],
) -> SectorBreakdownResult:
    """Group exposures by sector, sort sectors by total exposure, flag concentration."""
    sector_of = {d.symbol: d.sector for d in sector_data}

    groups: dict[str, list[SectorCompany]] = {}
    total_categorized = 0.0

    for e in exposures:
        known = sector_of.get(e.symbol)
        sector = known or UNKNOWN_SECTOR
        groups.setdefault(sector, []).append(
            SectorCompany(symbol=e.symbol, company_name=e.company_name, exposure=e.total_exposure)
        )
        if known:
            total_categorized += e.total_exposure

    sectors = []
    for sector, companies in groups.items():
        companies.sort(key=lambda c: c.exposure, reverse=True)
        sectors.append(SectorExposure(
            sector=sector,
            total_exposure=sum(c.exposure for c in companies),
            companies=companies,
            color=SECTOR_COLORS.get(sector, FALLBACK_COLOR),
        ))
    sectors.sort(key=lambda s: s.total_exposure, reverse=True)

    return SectorBreakdownResult(
        sectors=sectors,
        warnings=_sector_warnings(sectors),
        total_categorized=total_categorized,
    )


def _sector_warnings(sectors: list[SectorExposure]) -> list[ConcentrationWarning]:
    warnings = []
    for s in sectors:
        if s.sector == UNKNOWN_SECTOR:
            continue
        if s.total_exposure > HIGH_LIMIT:
            severity, advice = "high", "Consider diversifying across sectors."
        elif s.total_exposure > MEDIUM_LIMIT:
            severity, advice = "medium", "Monitor sector concentration."
        else:
            continue
        warnings.append(ConcentrationWarning(
            type="sector_concentration",
            severity=severity,
            message=f"{s.sector} represents {s.total_exposure:.1f}% of your portfolio. {advice}",
            symbols=[c.symbol for c in s.companies],
            value=s.total_exposure,
        ))
    return warnings
