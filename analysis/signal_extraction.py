"""
Signal extraction — structured signals from one analyst's free-text answer.

Input:  analyst id + the analyst's last response text
Output: ExtractedSignals (sentiment, confidence, patterns, key levels, targets)

Approach: fixed lexicons and regexes, no model involved.
  - Sentiment: how many bullish / bearish / neutral keywords appear (each
    keyword counts once). Neutral wins if it strictly beats both sides;
    bullish vs bearish within one of each other (both present) is neutral;
    otherwise the larger side wins, a tie is neutral.
  - Confidence: 50, +10 per high-confidence modifier, -10 per low-confidence
    modifier, capped at 60 when neutral, clamped to [0, 100].
  - Patterns: catalogue order, not order of appearance.
  - Key levels: numbers after "support"/"resistance" (optional at/around/near),
    deduplicated; support descending, resistance ascending.
  - Price targets: first number after "upside target" / "target price" /
    "price target" (upside) and after "downside target" (downside).

The lexicons are behaviour: changing any entry changes results.
"""
from __future__ import annotations

import logging
import re

from state.models import ExtractedSignals, KeyLevels, PriceTargets, Sentiment

logger = logging.getLogger(__name__)

# ── Lexicons ───────────────────────────────────────────────────────────────────

CHART_PATTERNS = [
    "head and shoulders",
    "inverse head and shoulders",
    "double top",
    "double bottom",
    "triple top",
    "triple bottom",
    "ascending triangle",
    "descending triangle",
    "symmetrical triangle",
    "rising wedge",
    "falling wedge",
    "bull flag",
    "bear flag",
    "pennant",
    "rectangle",
    "channel",
    "cup and handle",
    "doji",
    "hammer",
    "hanging man",
    "shooting star",
    "inverted hammer",
    "engulfing",
    "morning star",
    "evening star",
    "piercing pattern",
    "dark cloud cover",
    "three white soldiers",
    "three black crows",
    "harami",
    "tweezer",
]

BULLISH_KEYWORDS = [
    "bullish", "buy", "long", "uptrend", "upside", "higher",
    "breakout", "support holding", "accumulation", "positive",
    "strong momentum", "oversold",
]

BEARISH_KEYWORDS = [
    "bearish", "sell", "short", "downtrend", "downside", "lower",
    "breakdown", "resistance holding", "distribution", "negative",
    "weak momentum", "overbought",
]

NEUTRAL_KEYWORDS = [
    "neutral", "sideways", "range-bound", "consolidation",
    "mixed", "uncertain", "wait", "indecision",
]

HIGH_CONFIDENCE = ["strong", "very", "highly", "significant", "clear", "definite"]
LOW_CONFIDENCE  = ["weak", "slight", "minor", "possible", "potential", "uncertain"]

BASE_CONFIDENCE = 50
CONFIDENCE_STEP = 10
NEUTRAL_CONFIDENCE_CAP = 60

# ── Regexes ────────────────────────────────────────────────────────────────────

_NUMBER = r"\$?(\d+\.?\d*)"
_SUPPORT_RE    = re.compile(r"support\s+(?:at\s+|around\s+|near\s+)?" + _NUMBER, re.IGNORECASE)
_RESISTANCE_RE = re.compile(r"resistance\s+(?:at\s+|around\s+|near\s+)?" + _NUMBER, re.IGNORECASE)
_UPSIDE_RE     = re.compile(r"(?:upside\s+target|target\s+price|price\s+target).*?" + _NUMBER, re.IGNORECASE)
_DOWNSIDE_RE   = re.compile(r"downside\s+target.*?" + _NUMBER, re.IGNORECASE)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _count(lower_text: str, keywords: list[str]) -> int:
    return sum(1 for kw in keywords if kw in lower_text)


def extract_sentiment(lower_text: str) -> Sentiment:
    bullish = _count(lower_text, BULLISH_KEYWORDS)
    bearish = _count(lower_text, BEARISH_KEYWORDS)
    neutral = _count(lower_text, NEUTRAL_KEYWORDS)

    if neutral > bullish and neutral > bearish:
        return "neutral"
    if abs(bullish - bearish) <= 1 and bullish > 0 and bearish > 0:
        return "neutral"
    if bullish > bearish:
        return "bullish"
    if bearish > bullish:
        return "bearish"
    return "neutral"


def extract_confidence(lower_text: str, sentiment: Sentiment) -> int:
    confidence = BASE_CONFIDENCE
    confidence += _count(lower_text, HIGH_CONFIDENCE) * CONFIDENCE_STEP
    confidence -= _count(lower_text, LOW_CONFIDENCE) * CONFIDENCE_STEP
    if sentiment == "neutral":
        confidence = min(confidence, NEUTRAL_CONFIDENCE_CAP)
    return max(0, min(100, confidence))


def extract_patterns(lower_text: str) -> list[str]:
    return [p for p in CHART_PATTERNS if p in lower_text]


def extract_key_levels(text: str) -> KeyLevels:
    support = {float(m) for m in _SUPPORT_RE.findall(text)}
    resistance = {float(m) for m in _RESISTANCE_RE.findall(text)}
    return KeyLevels(
        support=sorted(support, reverse=True),
        resistance=sorted(resistance),
    )


def extract_price_targets(text: str) -> PriceTargets:
    upside = _UPSIDE_RE.search(text)
    downside = _DOWNSIDE_RE.search(text)
    return PriceTargets(
        upside=float(upside.group(1)) if upside else None,
        downside=float(downside.group(1)) if downside else None,
    )


# ── Main entry point ───────────────────────────────────────────────────────────

def extract_signals_from_text(analyst_id: str, analysis_text: str) -> ExtractedSignals:
    """Reduce one analyst's text to ExtractedSignals. Empty text → neutral / 50."""
    text = analysis_text or ""
    lower = text.lower()

    sentiment = extract_sentiment(lower)
    signals = ExtractedSignals(
        analyst_id=analyst_id,
        sentiment=sentiment,
        confidence=extract_confidence(lower, sentiment),
        patterns=extract_patterns(lower),
        key_levels=extract_key_levels(text),
        price_targets=extract_price_targets(text),
    )
    logger.debug(
        "extracted %s: %s (%d), %d patterns",
        analyst_id, signals.sentiment, signals.confidence, len(signals.patterns),
    )
    return signals
