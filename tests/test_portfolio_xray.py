# /tests/test_portfolio_xray.py

import pytest

from analysis.portfolio_xray import calculate_portfolio_exposure
from state.models import PortfolioHolding


def _types(result):
    return [w.type for w in result.warnings]


@pytest.fixture
def core_satellite(etf):
    portfolio = [
        PortfolioHolding(symbol="VOO", allocation=50, is_etf=True),
        PortfolioHolding(symbol="QQQ", allocation=30, is_etf=True),
        PortfolioHolding(symbol="NVDA", allocation=20),
    ]
    holdings = [
        etf("VOO", [("NVDA", "NVIDIA Corp", 0.07), ("MSFT", "Microsoft Corp", 0.06)]),
        etf("QQQ", [("NVDA", "NVIDIA Corp", 0.09), ("AAPL", "Apple Inc", 0.08)]),
    ]
    return portfolio, holdings


def test_direct_and_etf_exposure_are_combined(core_satellite):
    result = calculate_portfolio_exposure(*core_satellite)

    assert [e.symbol for e in result.exposures] == ["NVDA", "MSFT", "AAPL"]
    nvda = result.exposures[0]
    assert nvda.direct_allocation == 20
    assert [c.etf_symbol for c in nvda.from_etfs] == ["VOO", "QQQ"]
    assert [c.contribution for c in nvda.from_etfs] == pytest.approx([3.5, 2.7])
    assert nvda.etf_exposure == pytest.approx(6.2)
    assert nvda.total_exposure == pytest.approx(26.2)


def test_total_equals_direct_plus_contributions(core_satellite):
    result = calculate_portfolio_exposure(*core_satellite)
    for e in result.exposures:
        assert e.total_exposure == pytest.approx(
            e.direct_allocation + sum(c.contribution for c in e.from_etfs)
        )


def test_exposures_sorted_descending(core_satellite):
    result = calculate_portfolio_exposure(*core_satellite)
    totals = [e.total_exposure for e in result.exposures]
    assert totals == sorted(totals, reverse=True)


def test_etf_only_company_uses_holding_name(core_satellite):
    result = calculate_portfolio_exposure(*core_satellite)
    msft = next(e for e in result.exposures if e.symbol == "MSFT")
    assert msft.company_name == "Microsoft Corp"
    assert msft.direct_allocation == 0


def test_single_stock_warning_at_20_percent():
    portfolio = [
        PortfolioHolding(symbol="AAA", allocation=20),
        PortfolioHolding(symbol="BBB", allocation=80),
    ]
    result = calculate_portfolio_exposure(portfolio, [])

    singles = [w for w in result.warnings if w.type == "single_stock_concentration"]
    assert [w.symbols for w in singles] == [["BBB"], ["AAA"]]
    assert all(w.severity == "high" for w in singles)
    assert singles[1].message == "AAA (AAA) represents 20.0% of your portfolio. Consider diversifying."


def test_no_single_stock_warning_at_10_percent():
    portfolio = [PortfolioHolding(symbol=f"S{i}", allocation=10) for i in range(10)]
    result = calculate_portfolio_exposure(portfolio, [])

    assert "single_stock_concentration" not in _types(result)


def test_top_n_warning_needs_more_than_five_companies():
    portfolio = [PortfolioHolding(symbol=f"S{i}", allocation=a)
                 for i, a in enumerate([12, 12, 12, 12, 12, 10, 10, 10, 10])]
    result = calculate_portfolio_exposure(portfolio, [])

    top = [w for w in result.warnings if w.type == "top_n_concentration"]
    assert len(top) == 1
    assert top[0].severity == "medium"
    assert top[0].value == pytest.approx(60)
    assert len(top[0].symbols) == 5

    five = calculate_portfolio_exposure(
        [PortfolioHolding(symbol=f"S{i}", allocation=20) for i in range(5)], []
    )
    assert "top_n_concentration" not in _types(five)


def test_allocation_mismatch_is_informational():
    portfolio = [PortfolioHolding(symbol=f"S{i}", allocation=9) for i in range(10)]
    result = calculate_portfolio_exposure(portfolio, [])

    mismatch = [w for w in result.warnings if w.type == "allocation_mismatch"]
    assert len(mismatch) == 1
    assert mismatch[0].severity == "low"
    assert mismatch[0].value == pytest.approx(90)
    assert mismatch[0].symbols == []
    assert result.total_allocated == pytest.approx(90)


def test_allocation_within_tolerance_is_fine():
    portfolio = [PortfolioHolding(symbol=f"S{i}", allocation=a)
                 for i, a in enumerate([10.05] + [10] * 9)]
    result = calculate_portfolio_exposure(portfolio, [])
    assert "allocation_mismatch" not in _types(result)


def test_etf_without_holdings_contributes_nothing(etf):
    portfolio = [
        PortfolioHolding(symbol="VOO", allocation=50, is_etf=True),
        PortfolioHolding(symbol="ARKK", allocation=50, is_etf=True),
    ]
    result = calculate_portfolio_exposure(portfolio, [etf("VOO", [("NVDA", 0.1)])])

    assert [e.symbol for e in result.exposures] == ["NVDA"]
    assert result.exposures[0].total_exposure == pytest.approx(5)


def test_empty_portfolio():
    result = calculate_portfolio_exposure([], [])
    assert result.exposures == []
    assert _types(result) == ["allocation_mismatch"]
    assert "no exposures" in result.summary()


def test_summary_mentions_top_positions(core_satellite):
    text = calculate_portfolio_exposure(*core_satellite).summary(top=1)
    assert "NVDA" in text and "26.20%" in text
    assert "MSFT" not in text
