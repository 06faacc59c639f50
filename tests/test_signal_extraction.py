# /tests/test_signal_extraction.py

import pytest

from analysis.signal_extraction import (
    extract_confidence,
    extract_key_levels,
    extract_patterns,
    extract_price_targets,
    extract_sentiment,
    extract_signals_from_text,
)


def test_full_extraction():
    text = (
        "Strong bullish breakout above the ascending triangle. "
        "Support at $150.50 and resistance near 160. Price target $175."
    )
    signals = extract_signals_from_text("bulkowski", text)

    assert signals.analyst_id == "bulkowski"
    assert signals.sentiment == "bullish"
    assert signals.confidence == 60
    assert signals.patterns == ["ascending triangle"]
    assert signals.key_levels.support == [150.5]
    assert signals.key_levels.resistance == [160]
    assert signals.price_targets.upside == 175
    assert signals.price_targets.downside is None


def test_bearish_reading():
    text = "Bearish engulfing at the top; I would sell. Expect a move lower toward support at 90."
    signals = extract_signals_from_text("nison", text)

    assert signals.sentiment == "bearish"
    assert signals.confidence == 50
    assert signals.patterns == ["engulfing"]
    assert signals.key_levels.support == [90]


def test_empty_text_is_neutral():
    signals = extract_signals_from_text("pring", "")

    assert signals.sentiment == "neutral"
    assert signals.confidence == 50
    assert signals.patterns == []
    assert signals.key_levels.support == signals.key_levels.resistance == []
    assert signals.price_targets.upside is None


# --- Sentiment ---

@pytest.mark.parametrize("text,expected", [
    ("bullish but also bearish", "neutral"),             # 1 vs 1
    ("buy, go long, though bearish", "neutral"),         # 2 vs 1, within one
    ("buy, go long, move higher, bearish", "bullish"),   # 3 vs 1
    ("sell, short, bullish, lower", "bearish"),          # 3 vs 1
    ("sideways consolidation, slightly bullish", "neutral"),
    ("nothing to see", "neutral"),
])
def test_sentiment_rules(text, expected):
    assert extract_sentiment(text) == expected


def test_repeated_keyword_counts_once():
    assert extract_sentiment("bullish bullish bullish bearish bearish") == "neutral"


# --- Confidence ---

def test_neutral_confidence_is_capped():
    text = "very strong clear sideways consolidation"
    assert extract_confidence(text, "neutral") == 60
    assert extract_confidence(text, "bullish") == 80


def test_confidence_clamped_to_range():
    assert extract_confidence("strong very highly significant clear definite", "bullish") == 100
    assert extract_confidence("weak slight minor possible potential uncertain", "bearish") == 0


# --- Patterns ---

def test_patterns_follow_catalogue_order():
    text = "a hammer, then a doji, then a head and shoulders"
    assert extract_patterns(text) == ["head and shoulders", "doji", "hammer"]


def test_nested_pattern_names_both_match():
    assert extract_patterns("inverse head and shoulders") == [
        "head and shoulders", "inverse head and shoulders",
    ]


# --- Levels / targets ---

def test_key_levels_deduplicated_and_sorted():
    text = (
        "Support at 100, support at 95, Support 100. "
        "Resistance at 120, resistance 110, resistance near $110."
    )
    levels = extract_key_levels(text)

    assert levels.support == [100, 95]
    assert levels.resistance == [110, 120]


def test_price_targets():
    targets = extract_price_targets("Upside target 130 and downside target of $80.")
    assert targets.upside == 130
    assert targets.downside == 80


def test_target_price_phrase():
    assert extract_price_targets("Our target price is $42.5").upside == 42.5
