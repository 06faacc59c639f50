"""
Agent 10 — Report Delivery

Renders everything the pipeline produced into one Markdown report and either
prints it or writes it to a file.

Sections (in order, each skipped when its data is absent):
  1. Data notices        (cache fallbacks, missing symbols)
  2. Technicals          (TechnicalSnapshot.summary per symbol)
  3. ETF overlap         (pairwise + weighted overlap, warnings)
  4. Portfolio X-Ray     (top exposures, warnings)
  5. Sector breakdown
  6. Analyst consensus
"""
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from analysis.analysts import display_name
from state.models import ConsensusResult

_SENTIMENT_ICON = {
    "bullish": "▲",
    "bearish": "▼",
    "neutral": "■",
    "mixed":   "◆",
}


def _section(title: str, body: str) -> str:
    return f"## {title}\n\n{body.rstrip()}\n"


def _consensus_block(consensus: ConsensusResult, signals: list) -> str:
    icon = _SENTIMENT_ICON.get(consensus.overall_sentiment, "")
    lines = [
        f"**{icon} {consensus.overall_sentiment.upper()}** — "
        f"{consensus.agreement_percentage}% agreement, confidence {consensus.confidence_score}/100",
        "",
        f"Bullish {consensus.bullish_count} · Bearish {consensus.bearish_count} · "
        f"Neutral {consensus.neutral_count}",
        "",
    ]
    if signals:
        lines.append("| Analyst | Sentiment | Confidence | Support | Resistance |")
        lines.append("|---|---|---|---|---|")
        for s in signals:
            support = ", ".join(f"{v:g}" for v in s.key_levels.support) or "—"
            resistance = ", ".join(f"{v:g}" for v in s.key_levels.resistance) or "—"
            lines.append(
                f"| {display_name(s.analyst_id)} | {s.sentiment} | {s.confidence} | "
                f"{support} | {resistance} |"
            )
        lines.append("")
    if consensus.key_agreements:
        lines.append("Agreements:")
        lines.extend(f"- {a}" for a in consensus.key_agreements)
        lines.append("")
    if consensus.key_disagreements:
        lines.append("Disagreements:")
        lines.extend(f"- {d}" for d in consensus.key_disagreements)
    return "\n".join(lines)


def render(state: dict) -> str:
    """Build the Markdown report from pipeline state."""
    parts = [f"# Portfolio & Chart Analysis — {date.today().strftime('%B %d, %Y')}\n"]

    warnings = state.get("data_warnings") or []
    if warnings:
        parts.append(_section("Data notices", "\n".join(f"- {w}" for w in warnings)))

    market_data = state.get("market_data") or {}
    if market_data:
        parts.append(_section(
            "Technicals",
            "\n\n".join(snap.summary() for snap in market_data.values()),
        ))

    overlap = state.get("etf_overlap")
    if overlap is not None:
        body = [f"```\n{overlap.summary()}\n```"]
        if overlap.has_weights:
            body.append("Weighted by portfolio allocation:")
            for w in overlap.weighted_overlaps:
                body.append(
                    f"- {w.etf_a} ({w.weight_a:.1f}%) / {w.etf_b} ({w.weight_b:.1f}%): "
                    f"{w.effective_overlap:.2f}pp of portfolio"
                )
        parts.append(_section("ETF overlap", "\n".join(body)))

    xray = state.get("xray")
    if xray is not None:
        parts.append(_section("Portfolio X-Ray", f"```\n{xray.summary()}\n```"))

    sectors = state.get("sectors")
    if sectors is not None and sectors.sectors:
        body = f"```\n{sectors.summary()}\n```"
        if sectors.total_categorized < 95:
            body += f"\n\n{100 - sectors.total_categorized:.1f}% of portfolio lacks sector data."
        parts.append(_section("Sector breakdown", body))

    consensus = state.get("consensus")
    if consensus is not None:
        parts.append(_section(
            "Analyst consensus",
            _consensus_block(consensus, state.get("analyst_signals") or []),
        ))

    return "\n".join(parts)


def deliver(report: str, output: Optional[Path] = None) -> None:
    if output is None:
        print("\n" + report)
        return
    output.write_text(report)
    print(f"\n[Agent 10] Report written to {output}")


def run(state: dict, output: Optional[Path] = None) -> dict:
    """LangGraph node — renders and delivers the report; state unchanged."""
    deliver(render(state), output)
    return {}
