"""
Consensus — aggregate ExtractedSignals from several analysts.

Input:  list[ExtractedSignals]  (one per analyst whose answer has completed)
Output: ConsensusResult

Rules:
  overall_sentiment
    neutral  if the neutral count is strictly the largest
    mixed    if bullish and bearish are within one of each other (both > 0)
    bullish / bearish  if that side reaches 60% of analysts,
    else the larger side if it reaches 50%, else mixed; a tie is neutral

  agreement_percentage  (p = largest count / n × 100)
    unanimous        100
    p >= 80          80 + (p - 80) × 2
    60 <= p < 80     p
    50 <= p < 60     40 + (p - 50) × 2
    p < 50           30 + p / 2
    all rounded half-up

  confidence_score = agreement_percentage
    +10 with 3+ common patterns, +5 with exactly 2
    +10 if any two support (or two resistance) levels are within 2%
    -20 if a bullish AND a bearish analyst both have confidence > 70
    rounded half-up, clamped to [0, 100]

Note the per-analyst tie rule (signal_extraction) yields "neutral" where this
one yields "mixed"; the two are intentionally different.
"""
from __future__ import annotations

import logging
import math
from typing import Sequence

from analysis.analysts import display_name
from state.models import CommonPattern, ConsensusResult, ExtractedSignals, OverallSentiment

logger = logging.getLogger(__name__)

MAJORITY_THRESHOLD = 0.6
PLURALITY_THRESHOLD = 0.5
LEVEL_ALIGNMENT = 0.02
HIGH_CONVICTION = 70

MAX_AGREEMENT_PATTERNS = 3
MAX_UNIQUE_PATTERNS = 2


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


# ── Sentiment ─────────────────────────────────────────────────────────────────

def determine_overall_sentiment(bullish: int, bearish: int, neutral: int, total: int) -> OverallSentiment:
    if neutral > bullish and neutral > bearish:
        return "neutral"

    if abs(bullish - bearish) <= 1 and bullish > 0 and bearish > 0:
        return "mixed"

    majority = total * MAJORITY_THRESHOLD
    if bullish >= majority:
        return "bullish"
    if bearish >= majority:
        return "bearish"

    if bullish > bearish:
        return "bullish" if bullish >= total * PLURALITY_THRESHOLD else "mixed"
    if bearish > bullish:
        return "bearish" if bearish >= total * PLURALITY_THRESHOLD else "mixed"
    return "neutral"


def calculate_agreement_percentage(bullish: int, bearish: int, neutral: int, total: int) -> int:
    if total == 0:
        return 0

    top = max(bullish, bearish, neutral)
    if top == total:
        return 100

    pct = top / total * 100
    if top >= total * 0.8:
        return _round_half_up(80 + (pct - 80) * 2)
    if top >= total * 0.6:
        return _round_half_up(pct)
    if top >= total * 0.5:
        return _round_half_up(40 + (pct - 50) * 2)
    return _round_half_up(30 + pct / 2)


# ── Patterns ──────────────────────────────────────────────────────────────────

def _pattern_mentions(signals: Sequence[ExtractedSignals]) -> dict[str, list[str]]:
    mentions: dict[str, list[str]] = {}
    for s in signals:
        for pattern in s.patterns:
            mentions.setdefault(pattern, []).append(s.analyst_id)
    return mentions


def find_common_patterns(signals: Sequence[ExtractedSignals]) -> list[CommonPattern]:
    """Patterns named by 2+ analysts, most-mentioned first (stable on ties)."""
    common = [
        CommonPattern(pattern=pattern, mentioned_by=analysts)
        for pattern, analysts in _pattern_mentions(signals).items()
        if len(analysts) >= 2
    ]
    common.sort(key=lambda c: len(c.mentioned_by), reverse=True)
    return common


# ── Sentences ─────────────────────────────────────────────────────────────────

def _agreements_and_disagreements(
    signals: Sequence[ExtractedSignals],
    overall: OverallSentiment,
    common: list[CommonPattern],
) -> tuple[list[str], list[str]]:
    n = len(signals)
    bulls = [s for s in signals if s.sentiment == "bullish"]
    bears = [s for s in signals if s.sentiment == "bearish"]
    neutrals = [s for s in signals if s.sentiment == "neutral"]

    agreements: list[str] = []
    disagreements: list[str] = []

    if overall != "mixed":
        top = max(len(bulls), len(bears), len(neutrals))
        pct = _round_half_up(top / n * 100)
        agreements.append(f"{top}/{n} analysts agree on {overall} outlook ({pct}%)")

    for cp in common[:MAX_AGREEMENT_PATTERNS]:
        names = ", ".join(display_name(a) for a in cp.mentioned_by)
        agreements.append(f"{len(cp.mentioned_by)}/{n} analysts identified {cp.pattern} ({names})")

    if bulls and bears:
        bull_names = ", ".join(display_name(s.analyst_id) for s in bulls)
        bear_names = ", ".join(display_name(s.analyst_id) for s in bears)
        disagreements.append(
            f"Directional disagreement: {bull_names} see bullish, {bear_names} see bearish"
        )

    unique = [(p, a) for p, a in _pattern_mentions(signals).items() if len(a) == 1]
    for pattern, analysts in unique[:MAX_UNIQUE_PATTERNS]:
        disagreements.append(f"Only {display_name(analysts[0])} identified {pattern}")

    return agreements, disagreements


# ── Confidence ────────────────────────────────────────────────────────────────

def _has_close_pair(levels: list[float]) -> bool:
    for i in range(len(levels)):
        for j in range(i + 1, len(levels)):
            avg = (levels[i] + levels[j]) / 2
            if avg == 0:
                continue
            if abs(levels[i] - levels[j]) / avg < LEVEL_ALIGNMENT:
                return True
    return False


def levels_align(signals: Sequence[ExtractedSignals]) -> bool:
    """True when any two support (or any two resistance) levels sit within 2%."""
    support = [lvl for s in signals for lvl in s.key_levels.support]
    resistance = [lvl for s in signals for lvl in s.key_levels.resistance]
    return _has_close_pair(support) or _has_close_pair(resistance)


def calculate_confidence_score(
    agreement: int,
    common_count: int,
    signals: Sequence[ExtractedSignals],
) -> int:
    score: float = agreement

    if common_count >= 3:
        score += 10
    elif common_count >= 2:
        score += 5

    if levels_align(signals):
        score += 10

    contradiction = (
        any(s.sentiment == "bullish" and s.confidence > HIGH_CONVICTION for s in signals)
        and any(s.sentiment == "bearish" and s.confidence > HIGH_CONVICTION for s in signals)
    )
    if contradiction:
        score -= 20

    return max(0, min(100, _round_half_up(score)))


# ── Main entry point ──────────────────────────────────────────────────────────

def calculate_consensus(signals: Sequence[ExtractedSignals]) -> ConsensusResult:
    """
    Aggregate analyst signals into a ConsensusResult.

    Callers gate this at 2+ analysts, but any count works; an empty list
    returns the neutral/zero default.
    """
    if not signals:
        return ConsensusResult()

    n = len(signals)
    bullish = sum(1 for s in signals if s.sentiment == "bullish")
    bearish = sum(1 for s in signals if s.sentiment == "bearish")
    neutral = sum(1 for s in signals if s.sentiment == "neutral")

    overall = determine_overall_sentiment(bullish, bearish, neutral, n)
    agreement = calculate_agreement_percentage(bullish, bearish, neutral, n)
    common = find_common_patterns(signals)
    agreements, disagreements = _agreements_and_disagreements(signals, overall, common)

    logger.debug("consensus over %d analysts: %s (%d%% agreement)", n, overall, agreement)

    return ConsensusResult(
        overall_sentiment=overall,
        agreement_percentage=agreement,
        bullish_count=bullish,
        bearish_count=bearish,
        neutral_count=neutral,
        common_patterns=common,
        key_agreements=agreements,
        key_disagreements=disagreements,
        confidence_score=calculate_confidence_score(agreement, len(common), signals),
    )
