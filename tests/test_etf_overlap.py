# /tests/test_etf_overlap.py

import pytest

from analysis.etf_overlap import (
    compute_etf_overlap,
    compute_pairwise_overlap,
    compute_weighted_overlap,
    normalize_weights,
)


@pytest.fixture
def two_etfs(etf):
    a = etf("AAA", [("X", 0.10), ("Y", 0.05), ("Z", 0.02)])
    b = etf("BBB", [("X", 0.08), ("Y", 0.06), ("W", 0.03)])
    return a, b


# --- Pairwise ---

def test_pairwise_overlap_sums_min_of_shared_weights(two_etfs):
    a, b = two_etfs
    assert compute_pairwise_overlap(a, b) == pytest.approx(0.13)


def test_pairwise_overlap_is_symmetric(two_etfs):
    a, b = two_etfs
    assert compute_pairwise_overlap(a, b) == pytest.approx(compute_pairwise_overlap(b, a))


def test_self_overlap_is_total_weight(two_etfs):
    a, _ = two_etfs
    assert compute_pairwise_overlap(a, a) == pytest.approx(0.17)


def test_disjoint_etfs_have_no_overlap(etf):
    a = etf("AAA", [("X", 0.5)])
    b = etf("BBB", [("Y", 0.5)])
    assert compute_pairwise_overlap(a, b) == 0


# --- Aggregate ---

def test_holding_table_sorted_by_average(two_etfs):
    result = compute_etf_overlap(list(two_etfs))

    assert [h.symbol for h in result.all_holdings] == ["X", "Y", "W", "Z"]
    assert result.all_holdings[0].average_exposure == pytest.approx(0.09)
    assert result.all_holdings[0].weights == {"AAA": 0.10, "BBB": 0.08}
    assert [h.symbol for h in result.overlapping_holdings] == ["X", "Y"]
    assert all(h.etf_count >= 2 for h in result.overlapping_holdings)


def test_pairs_follow_input_order(etf):
    etfs = [etf(s, [("X", 0.01)]) for s in ("AAA", "BBB", "CCC")]
    result = compute_etf_overlap(etfs)

    assert [(p.etf_a, p.etf_b) for p in result.pairwise_overlaps] == [
        ("AAA", "BBB"), ("AAA", "CCC"), ("BBB", "CCC"),
    ]


def test_first_seen_name_wins(etf):
    a = etf("AAA", [("X", "Alpha", 0.01)])
    b = etf("BBB", [("X", "Alpha Corp Class A", 0.02)])
    result = compute_etf_overlap([a, b])
    assert result.all_holdings[0].holding_name == "Alpha"


def test_single_stock_warnings(two_etfs):
    result = compute_etf_overlap(list(two_etfs))

    assert [w.type for w in result.warnings] == [
        "single_stock_concentration", "single_stock_concentration",
    ]
    assert result.warnings[0].symbols == ["X"]
    assert result.warnings[0].value == pytest.approx(0.09)
    assert result.warnings[0].message == "X Inc (X) appears in all 2 ETFs with an average weight of 9.0%."


def test_top_n_warning_stops_at_first_crossing(etf):
    a = etf("AAA", [("P", 0.15), ("Q", 0.12), ("R", 0.01)])
    b = etf("BBB", [("P", 0.14), ("Q", 0.13), ("R", 0.01)])
    result = compute_etf_overlap([a, b])

    top = [w for w in result.warnings if w.type == "top_n_concentration"]
    assert len(top) == 1
    assert top[0].symbols == ["P", "Q"]
    assert top[0].value == pytest.approx(0.27)
    assert top[0].message.startswith("Top 2 overlapping companies account for 27.0%")


def test_warnings_only_consider_holdings_in_every_etf(etf):
    a = etf("AAA", [("X", 0.20), ("Y", 0.01)])
    b = etf("BBB", [("X", 0.20), ("Y", 0.01)])
    c = etf("CCC", [("Y", 0.01)])
    result = compute_etf_overlap([a, b, c])

    assert "X" in [h.symbol for h in result.overlapping_holdings]
    assert result.warnings == []


def test_single_etf_has_nothing_to_compare(etf):
    result = compute_etf_overlap([etf("AAA", [("X", 0.5)])])

    assert result.pairwise_overlaps == []
    assert result.overlapping_holdings == []
    assert result.warnings == []
    assert len(result.all_holdings) == 1
    assert "at least two" in result.summary()


def test_summary_lists_pairs(two_etfs):
    text = compute_etf_overlap(list(two_etfs)).summary()
    assert "AAA / BBB: 13.0% overlap" in text
    assert "2 of 4 holdings appear in 2+ ETFs." in text


# --- Weighted ---

def test_normalize_weights():
    assert normalize_weights({"A": 3, "B": 1}) == pytest.approx({"A": 75, "B": 25})


def test_normalize_weights_zero_total_keeps_raw():
    assert normalize_weights({"A": 0, "B": 0}) == {"A": 0, "B": 0}


def test_weighted_overlap_scales_by_portfolio_weight(two_etfs):
    result = compute_weighted_overlap(list(two_etfs), {"AAA": 60, "BBB": 20})

    assert result.has_weights
    assert result.weights == pytest.approx({"AAA": 75, "BBB": 25})
    pair = result.weighted_overlaps[0]
    assert (pair.weight_a, pair.weight_b) == pytest.approx((75, 25))
    assert pair.overlap_percent == pytest.approx(0.13)
    assert pair.effective_overlap == pytest.approx(0.13 * 0.75 * 0.25 * 100)

    x = result.all_holdings[0]
    assert x.symbol == "X"
    assert x.effective_exposure == pytest.approx(0.10 * 0.75 + 0.08 * 0.25)


def test_weighted_overlap_keeps_unweighted_results(two_etfs):
    plain = compute_etf_overlap(list(two_etfs))
    weighted = compute_weighted_overlap(list(two_etfs), {"AAA": 1, "BBB": 1})

    assert [p.overlap_percent for p in weighted.pairwise_overlaps] == pytest.approx(
        [p.overlap_percent for p in plain.pairwise_overlaps]
    )
    assert [w.message for w in weighted.warnings] == [w.message for w in plain.warnings]


def test_weighted_overlap_missing_weights_count_as_zero(two_etfs):
    result = compute_weighted_overlap(list(two_etfs), {"AAA": 50})

    assert result.weights == pytest.approx({"AAA": 100, "BBB": 0})
    assert result.weighted_overlaps[0].effective_overlap == 0


def test_weighted_overlap_all_zero(two_etfs):
    result = compute_weighted_overlap(list(two_etfs), {})

    assert not result.has_weights
    assert result.weighted_overlaps[0].effective_overlap == 0
    assert all(h.effective_exposure == 0 for h in result.all_holdings)


def test_disjoint_etfs_produce_nothing(etf):
    a = etf("AAA", [("X", 0.30), ("Y", 0.20)])
    b = etf("BBB", [("P", 0.30), ("Q", 0.20)])
    result = compute_etf_overlap([a, b])

    assert [p.overlap_percent for p in result.pairwise_overlaps] == [0]
    assert result.overlapping_holdings == []
    assert result.warnings == []
    assert len(result.all_holdings) == 4
