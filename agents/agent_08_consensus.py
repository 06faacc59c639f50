"""
Agent 8 — Multi-Analyst Consensus

Each analyst's final answer is reduced to ExtractedSignals in its own graph
branch (one Send per analyst, run in parallel); consensus runs once every
branch of that superstep has finished, so a still-running analyst can never
leak a partial result into the aggregate.

Data pipeline:
  state["analyst_texts"]         →  fan_out()   →  Send("extract_signals", ...)
  analysis/signal_extraction.py  →  extract()   →  state["analyst_signals"] (+= reducer)
  analysis/consensus.py          →  run()       →  state["consensus"]
"""
from __future__ import annotations

from langgraph.types import Send

from analysis.consensus import calculate_consensus
from analysis.signal_extraction import extract_signals_from_text
from state.graph_state import AnalystTextState
from state.models import ConsensusResult, ExtractedSignals

MIN_ANALYSTS = 2


# ── Standalone entry point (testable without LangGraph) ───────────────────────

def fetch(analyst_texts: dict[str, str]) -> tuple[list[ExtractedSignals], ConsensusResult | None]:
    """
    Extract signals for every analyst and aggregate them.

    Returns:
        (signals, consensus) — consensus is None with fewer than 2 analysts
    """
    signals = [extract_signals_from_text(a, text) for a, text in analyst_texts.items()]
    if len(signals) < MIN_ANALYSTS:
        return signals, None
    return signals, calculate_consensus(signals)


# ── LangGraph nodes ───────────────────────────────────────────────────────────

def fan_out(state: dict) -> list[Send] | str:
    """Conditional edge: one extraction branch per analyst, or straight to the join."""
    texts = state.get("analyst_texts") or {}
    if not texts:
        return "agent_08"
    return [
        Send("extract_signals", {"analyst_id": analyst_id, "text": text})
        for analyst_id, text in texts.items()
    ]


def extract(payload: AnalystTextState) -> dict:
    """Branch node — one analyst's text in, one ExtractedSignals out."""
    signals = extract_signals_from_text(payload["analyst_id"], payload["text"])
    print(f"[Agent 8] {payload['analyst_id']}: {signals.sentiment} "
          f"({signals.confidence}), patterns: {', '.join(signals.patterns) or 'none'}")
    return {"analyst_signals": [signals]}


def run(state: dict) -> dict:
    """Join node — aggregates every finished extraction."""
    signals = state.get("analyst_signals") or []
    if len(signals) < MIN_ANALYSTS:
        print(f"\n[Agent 8] {len(signals)} analyst(s) — consensus needs at least {MIN_ANALYSTS}")
        return {"consensus": None}

    consensus = calculate_consensus(signals)
    print(f"\n[Agent 8] Consensus over {len(signals)} analysts: "
          f"{consensus.overall_sentiment.upper()} "
          f"({consensus.agreement_percentage}% agreement, confidence {consensus.confidence_score})")
    return {"consensus": consensus}
