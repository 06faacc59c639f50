# /tests/test_pipeline.py
# End-to-end graph run on mock data; every input is pre-seeded so nothing hits the network.

import pytest

from agents import agent_08_consensus
from main import _mock_state, build_graph
from mock_data import MOCK_ANALYST_TEXTS, MOCK_PORTFOLIO


@pytest.fixture
def final_state(tmp_path):
    app = build_graph(report_path=tmp_path / "report.md")
    state = app.invoke(_mock_state())
    return state, tmp_path / "report.md"


def test_every_stage_produces_output(final_state):
    state, _ = final_state

    assert set(state["market_data"]) == {"VOO", "QQQ", "NVDA", "SNOW"}
    assert state["etf_overlap"].etfs == ["VOO", "QQQ"]
    assert state["xray"].exposures[0].symbol == "NVDA"
    assert state["sectors"].sectors[0].sector == "Technology"
    assert state["consensus"] is not None


def test_one_signal_per_analyst(final_state):
    state, _ = final_state
    assert sorted(s.analyst_id for s in state["analyst_signals"]) == sorted(MOCK_ANALYST_TEXTS)


def test_parallel_consensus_matches_sequential(final_state):
    state, _ = final_state
    _, expected = agent_08_consensus.fetch(MOCK_ANALYST_TEXTS)
    got = state["consensus"]

    assert got.overall_sentiment == expected.overall_sentiment
    assert got.agreement_percentage == expected.agreement_percentage
    assert got.confidence_score == expected.confidence_score
    assert (got.bullish_count, got.bearish_count, got.neutral_count) == (
        expected.bullish_count, expected.bearish_count, expected.neutral_count,
    )


def test_xray_accounts_for_whole_portfolio(final_state):
    state, _ = final_state
    assert state["xray"].total_allocated == pytest.approx(sum(h.allocation for h in MOCK_PORTFOLIO))
    assert not [w for w in state["xray"].warnings if w.type == "allocation_mismatch"]


def test_report_written(final_state):
    _, report_path = final_state
    report = report_path.read_text()

    for heading in ("## Technicals", "## ETF overlap", "## Portfolio X-Ray",
                    "## Sector breakdown", "## Analyst consensus"):
        assert heading in report


def test_no_analysts_skips_consensus(tmp_path):
    state = _mock_state()
    state["analyst_texts"] = {}
    final = build_graph(report_path=tmp_path / "r.md").invoke(state)

    assert final["consensus"] is None
    assert final["analyst_signals"] == []
