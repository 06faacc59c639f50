"""
Analyst personas for multi-analyst technical analysis.

Each persona reads the same chart through a different methodology; their
free-text answers are later reduced to ExtractedSignals and a consensus.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalystConfig:
    id: str
    name: str
    short_name: str     # used in consensus sentences
    description: str


ANALYSTS: dict[str, AnalystConfig] = {
    "bulkowski": AnalystConfig(
        id="bulkowski",
        name="Thomas Bulkowski",
        short_name="Bulkowski",
        description="Chart Patterns & Statistics",
    ),
    "murphy": AnalystConfig(
        id="murphy",
        name="John Murphy",
        short_name="Murphy",
        description="Intermarket Analysis & Classic TA",
    ),
    "nison": AnalystConfig(
        id="nison",
        name="Steve Nison",
        short_name="Nison",
        description="Japanese Candlestick Patterns",
    ),
    "pring": AnalystConfig(
        id="pring",
        name="Martin Pring",
        short_name="Pring",
        description="Momentum & Oscillators",
    ),
    "edwards-magee": AnalystConfig(
        id="edwards-magee",
        name="Edwards & Magee",
        short_name="Edwards & Magee",
        description="Classic Chart Patterns & Dow Theory",
    ),
}


def get_analyst(analyst_id: str) -> AnalystConfig:
    return ANALYSTS[analyst_id]


def display_name(analyst_id: str) -> str:
    """Short name for a known analyst; unknown ids are shown as-is."""
    analyst = ANALYSTS.get(analyst_id)
    return analyst.short_name if analyst else analyst_id
