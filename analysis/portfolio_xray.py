"""
Portfolio X-Ray — real exposure per underlying company, ETFs flattened.

Input:  list[PortfolioHolding]   (allocation in percent, is_etf flag)
        list[EtfHoldingsResponse] for every ETF in the portfolio
Output: PortfolioXRayResult with .summary() for LLM context

Algorithm:
  1. Direct (non-ETF) allocations accumulate per symbol.
  2. Each ETF contributes allocation × holding_percent to every underlying
     position it lists, tagged with the ETF symbol.
  3. total_exposure = direct_allocation + Σ contributions; rows sorted desc.

Warnings (percent scale):
  - single_stock_concentration  (high)    any company > 15%
  - top_n_concentration         (medium)  top 5 > 40% and more than 5 companies
  - allocation_mismatch         (low)     allocations off 100% by more than 0.1pp
    (informational — cash positions are legitimate)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from state.models import ConcentrationWarning, EtfHoldingsResponse, PortfolioHolding

logger = logging.getLogger(__name__)

SINGLE_STOCK_LIMIT = 15.0
TOP_N = 5
TOP_N_LIMIT = 40.0
ALLOCATION_TOLERANCE = 0.1


# ── Dataclasses ────────────────────────────────────────────────────────────────

@dataclass
class EtfContribution:
    etf_symbol: str
    contribution: float   # percent of portfolio


@dataclass
class ExposureBreakdown:
    symbol: str
    company_name: str
    direct_allocation: float
    from_etfs: list[EtfContribution]
    total_exposure: float

    @property
    def etf_exposure(self) -> float:
        return sum(e.contribution for e in self.from_etfs)


@dataclass
class PortfolioXRayResult:
    holdings: list[PortfolioHolding]
    exposures: list[ExposureBreakdown] = field(default_factory=list)
    warnings: list[ConcentrationWarning] = field(default_factory=list)
    total_allocated: float = 0.0

    def summary(self, top: int = 10) -> str:
        """Multi-line text summary suitable for LLM context."""
        if not self.exposures:
            return "Portfolio X-Ray: no exposures calculated."

        lines = [
            f"Portfolio X-Ray ({len(self.exposures)} underlying companies, "
            f"{self.total_allocated:.1f}% allocated):"
        ]
        for e in self.exposures[:top]:
            via = ", ".join(f"{c.etf_symbol} {c.contribution:.2f}%" for c in e.from_etfs)
            detail = f"direct {e.direct_allocation:.2f}%"
            if via:
                detail += f", via {via}"
            lines.append(f"  {e.symbol:<6} {e.total_exposure:>6.2f}%  ({detail})")
        for w in self.warnings:
            lines.append(f"  [{w.severity}] {w.message}")
        return "\n".join(lines)


# ── Core ──────────────────────────────────────────────────────────────────────

def calculate_portfolio_exposure(
    portfolio: Sequence[PortfolioHolding],
    etf_holdings_data: Sequence[EtfHoldingsResponse],
) -> PortfolioXRayResult:
    """
    Flatten direct and ETF-derived exposure per underlying company.

    ETFs without a holdings response contribute nothing (the fetch layer
    reports those separately).
    """
    names: dict[str, str] = {}
    direct: dict[str, float] = {}
    from_etfs: dict[str, list[EtfContribution]] = {}

    def _entry(symbol: str, name: str) -> None:
        if symbol not in names:
            names[symbol] = name
            direct[symbol] = 0.0
            from_etfs[symbol] = []

    for holding in portfolio:
        if holding.is_etf:
            continue
        _entry(holding.symbol, holding.symbol)
        direct[holding.symbol] += holding.allocation

    by_symbol = {e.symbol: e for e in etf_holdings_data}
    for holding in portfolio:
        if not holding.is_etf:
            continue
        etf = by_symbol.get(holding.symbol)
        if etf is None:
            logger.debug("no holdings data for ETF %s", holding.symbol)
            continue
        for h in etf.holdings:
            _entry(h.symbol, h.holding_name or h.symbol)
            from_etfs[h.symbol].append(EtfContribution(
                etf_symbol=holding.symbol,
                contribution=holding.allocation * h.holding_percent,
            ))

    exposures = [
        ExposureBreakdown(
            symbol=symbol,
            company_name=names[symbol],
            direct_allocation=direct[symbol],
            from_etfs=from_etfs[symbol],
            total_exposure=direct[symbol] + sum(c.contribution for c in from_etfs[symbol]),
        )
        for symbol in names
    ]
    exposures.sort(key=lambda e: e.total_exposure, reverse=True)

    total_allocated = sum(h.allocation for h in portfolio)

    return PortfolioXRayResult(
        holdings=list(portfolio),
        exposures=exposures,
        warnings=_concentration_warnings(exposures, total_allocated),
        total_allocated=total_allocated,
    )


def _concentration_warnings(
    exposures: list[ExposureBreakdown],
    total_allocated: float,
) -> list[ConcentrationWarning]:
    warnings: list[ConcentrationWarning] = []

    for e in exposures:
        if e.total_exposure > SINGLE_STOCK_LIMIT:
            warnings.append(ConcentrationWarning(
                type="single_stock_concentration",
                severity="high",
                message=(
                    f"{e.company_name} ({e.symbol}) represents {e.total_exposure:.1f}% "
                    f"of your portfolio. Consider diversifying."
                ),
                symbols=[e.symbol],
                value=e.total_exposure,
            ))

    top = exposures[:TOP_N]
    top_exposure = sum(e.total_exposure for e in top)
    if top_exposure > TOP_N_LIMIT and len(exposures) > TOP_N:
        warnings.append(ConcentrationWarning(
            type="top_n_concentration",
            severity="medium",
            message=(
                f"Your top {TOP_N} holdings account for {top_exposure:.1f}% of your portfolio. "
                f"This may indicate concentration risk."
            ),
            symbols=[e.symbol for e in top],
            value=top_exposure,
        ))

    if abs(total_allocated - 100) > ALLOCATION_TOLERANCE:
        warnings.append(ConcentrationWarning(
            type="allocation_mismatch",
            severity="low",
            message=(
                f"Portfolio allocations sum to {total_allocated:.1f}% instead of 100%. "
                f"This may be intentional (cash position) or an error."
            ),
            symbols=[],
            value=total_allocated,
        ))

    return warnings
