"""
ETF overlap comparator — how much do a set of ETFs really hold in common?

Input:  list[EtfHoldingsResponse]  (top holdings per fund, weights as fractions)
Output: EtfOverlapResult / WeightedEtfOverlapResult

Pairwise overlap(A, B) = Σ over shared symbols of min(weight_A, weight_B).

Holding table: one row per symbol seen in any ETF, sorted by average weight
across the ETFs that hold it. Rows held by 2+ ETFs are "overlapping".

Warnings (fractions, evaluated on holdings present in *every* ETF):
  - single_stock_concentration   average weight > 5%
  - top_n_concentration          smallest top-k prefix whose combined average
                                 weight exceeds 25% (at most one warning)

Weighted mode scales by how much of the portfolio sits in each ETF:
  - weights normalised to sum to 100 (raw values kept when they sum to 0)
  - effective_overlap  = overlap × (w_A/100) × (w_B/100) × 100   [portfolio pp]
  - effective_exposure = Σ holding_weight × w_etf / 100          [fraction]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from state.models import DiversificationWarning, EtfHoldingsResponse

logger = logging.getLogger(__name__)

SINGLE_STOCK_THRESHOLD = 0.05
TOP_N_THRESHOLD = 0.25


# ── Dataclasses ────────────────────────────────────────────────────────────────

@dataclass
class PairwiseOverlap:
    etf_a: str
    etf_b: str
    overlap_percent: float   # fraction, 0.31 = 31%


@dataclass
class WeightedPairwiseOverlap(PairwiseOverlap):
    weight_a: float = 0.0            # portfolio weight of etf_a (0-100)
    weight_b: float = 0.0
    effective_overlap: float = 0.0   # percentage points of the whole portfolio


@dataclass
class OverlapHoldingRow:
    symbol: str
    holding_name: str
    weights: dict[str, float]   # etf symbol → weight in that ETF
    etf_count: int
    average_exposure: float
    effective_exposure: Optional[float] = None


@dataclass
class EtfOverlapResult:
    etfs: list[str]
    pairwise_overlaps: list[PairwiseOverlap] = field(default_factory=list)
    overlapping_holdings: list[OverlapHoldingRow] = field(default_factory=list)
    all_holdings: list[OverlapHoldingRow] = field(default_factory=list)
    warnings: list[DiversificationWarning] = field(default_factory=list)

    def summary(self) -> str:
        """Multi-line text summary suitable for LLM context."""
        if len(self.etfs) < 2:
            return "ETF overlap: need at least two ETFs to compare."

        lines = [f"ETF overlap across {', '.join(self.etfs)}:"]
        for p in self.pairwise_overlaps:
            lines.append(f"  {p.etf_a} / {p.etf_b}: {p.overlap_percent * 100:.1f}% overlap")
        lines.append(
            f"  {len(self.overlapping_holdings)} of {len(self.all_holdings)} holdings appear in 2+ ETFs."
        )
        for w in self.warnings:
            lines.append(f"  [warn] {w.message}")
        return "\n".join(lines)


@dataclass
class WeightedEtfOverlapResult(EtfOverlapResult):
    weights: dict[str, float] = field(default_factory=dict)   # normalised portfolio weights
    weighted_overlaps: list[WeightedPairwiseOverlap] = field(default_factory=list)
    has_weights: bool = False


# ── Core ──────────────────────────────────────────────────────────────────────

def compute_pairwise_overlap(a: EtfHoldingsResponse, b: EtfHoldingsResponse) -> float:
    """Sum of the smaller weight for every symbol both ETFs hold."""
    b_weights = {h.symbol: h.holding_percent for h in b.holdings}
    overlap = 0.0
    for h in a.holdings:
        b_weight = b_weights.get(h.symbol)
        if b_weight is not None:
            overlap += min(h.holding_percent, b_weight)
    return overlap


def _holding_table(etf_data: Sequence[EtfHoldingsResponse]) -> list[OverlapHoldingRow]:
    names: dict[str, str] = {}
    weights: dict[str, dict[str, float]] = {}
    for etf in etf_data:
        for h in etf.holdings:
            names.setdefault(h.symbol, h.holding_name)
            weights.setdefault(h.symbol, {})[etf.symbol] = h.holding_percent

    rows = []
    for symbol, w in weights.items():
        rows.append(OverlapHoldingRow(
            symbol=symbol,
            holding_name=names[symbol],
            weights=w,
            etf_count=len(w),
            average_exposure=sum(w.values()) / len(w),
        ))
    rows.sort(key=lambda r: r.average_exposure, reverse=True)
    return rows


def _diversification_warnings(
    overlapping: list[OverlapHoldingRow],
    etf_count: int,
) -> list[DiversificationWarning]:
    warnings: list[DiversificationWarning] = []

    universal = [h for h in overlapping if h.etf_count == etf_count]

    for h in universal:
        if h.average_exposure > SINGLE_STOCK_THRESHOLD:
            warnings.append(DiversificationWarning(
                type="single_stock_concentration",
                message=(
                    f"{h.holding_name} ({h.symbol}) appears in all {etf_count} ETFs "
                    f"with an average weight of {h.average_exposure * 100:.1f}%."
                ),
                symbols=[h.symbol],
                value=h.average_exposure,
            ))

    cumulative = 0.0
    top: list[str] = []
    for h in sorted(universal, key=lambda r: r.average_exposure, reverse=True):
        cumulative += h.average_exposure
        top.append(h.symbol)
        if cumulative > TOP_N_THRESHOLD:
            warnings.append(DiversificationWarning(
                type="top_n_concentration",
                message=(
                    f"Top {len(top)} overlapping companies account for {cumulative * 100:.1f}% "
                    f"combined average exposure. You may not be as diversified as you think."
                ),
                symbols=list(top),
                value=cumulative,
            ))
            break

    return warnings


def compute_etf_overlap(etf_data: Sequence[EtfHoldingsResponse]) -> EtfOverlapResult:
    """
    Compare every pair of ETFs and build the aggregated holding table.

    Args:
        etf_data: holdings per ETF (output of tools.yfinance_client.fetch_etf_holdings)

    Returns:
        EtfOverlapResult — pairwise overlaps in input pair order, holdings sorted
        by average exposure descending, plus diversification warnings.
    """
    etfs = [e.symbol for e in etf_data]
    logger.debug("computing overlap for %d ETFs", len(etfs))

    pairs = []
    for i in range(len(etf_data)):
        for j in range(i + 1, len(etf_data)):
            pairs.append(PairwiseOverlap(
                etf_a=etf_data[i].symbol,
                etf_b=etf_data[j].symbol,
                overlap_percent=compute_pairwise_overlap(etf_data[i], etf_data[j]),
            ))

    all_holdings = _holding_table(etf_data)
    overlapping = [h for h in all_holdings if h.etf_count >= 2]

    return EtfOverlapResult(
        etfs=etfs,
        pairwise_overlaps=pairs,
        overlapping_holdings=overlapping,
        all_holdings=all_holdings,
        warnings=_diversification_warnings(overlapping, len(etf_data)),
    )


def normalize_weights(weights: dict[str, float]) -> dict[str, float]:
    """
    Scale weights so they sum to 100.

    A zero (or negative) total leaves the raw values untouched.
    """
    total = sum(weights.values())
    if total <= 0:
        return dict(weights)
    return {symbol: w / total * 100 for symbol, w in weights.items()}


def compute_weighted_overlap(
    etf_data: Sequence[EtfHoldingsResponse],
    weights: dict[str, float],
) -> WeightedEtfOverlapResult:
    """
    Overlap scaled by portfolio weights per ETF.

    Args:
        etf_data: holdings per ETF
        weights:  ETF symbol → portfolio weight (any scale; ETFs missing from
                  the map count as weight 0)
    """
    base = compute_etf_overlap(etf_data)
    norm = normalize_weights({e: weights.get(e, 0.0) for e in base.etfs})

    weighted = []
    for p in base.pairwise_overlaps:
        wa, wb = norm.get(p.etf_a, 0.0), norm.get(p.etf_b, 0.0)
        weighted.append(WeightedPairwiseOverlap(
            etf_a=p.etf_a,
            etf_b=p.etf_b,
            overlap_percent=p.overlap_percent,
            weight_a=wa,
            weight_b=wb,
            effective_overlap=p.overlap_percent * (wa / 100) * (wb / 100) * 100,
        ))

    for row in base.all_holdings:
        row.effective_exposure = sum(
            holding_weight * norm.get(etf, 0.0) / 100
            for etf, holding_weight in row.weights.items()
        )

    return WeightedEtfOverlapResult(
        etfs=base.etfs,
        pairwise_overlaps=base.pairwise_overlaps,
        overlapping_holdings=base.overlapping_holdings,
        all_holdings=base.all_holdings,
        warnings=base.warnings,
        weights=norm,
        weighted_overlaps=weighted,
        has_weights=sum(weights.get(e, 0.0) for e in base.etfs) > 0,
    )
