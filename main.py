#!/usr/bin/env python3
"""
Portfolio Analysis — Runner
============================
Portfolio file (or --mock)
  → Agent 1  (ETF holdings + sector tags via yfinance, cache fallback)
  → Agent 3  (price history + chart-preset technicals)
  → Agent 4  (ETF overlap, weighted by allocation)
  → Agent 6  (portfolio X-Ray + sector breakdown)
  → Agent 8  (per-analyst signal extraction in parallel → consensus)
  → Agent 10 (Markdown report to stdout or --report)

Usage:
  python main.py --mock
  python main.py --portfolio portfolio.json --symbols NVDA SNOW
  python main.py --portfolio portfolio.json --analysts-dir answers/ --report report.md

portfolio.json: [{"symbol": "VOO", "allocation": 60, "is_etf": true}, ...]
answers/:       one <analyst_id>.txt or .md file per analyst
"""
import argparse
import logging
import time
from functools import partial
from pathlib import Path

from langgraph.graph import END, START, StateGraph

from config import LOG_LEVEL
from state.graph_state import AnalysisState
from agents import (
    agent_01_portfolio_ingestion,
    agent_03_market_data,
    agent_04_etf_overlap,
    agent_06_portfolio_xray,
    agent_08_consensus,
    agent_10_report_delivery,
)

logger = logging.getLogger(__name__)

ANALYST_SUFFIXES = (".txt", ".md")


def build_graph(report_path: Path | None = None):
    report_node = partial(agent_10_report_delivery.run, output=report_path)
    graph = StateGraph(AnalysisState)
    graph.add_node("agent_01", agent_01_portfolio_ingestion.run)
    graph.add_node("agent_03", agent_03_market_data.run)
    graph.add_node("agent_04", agent_04_etf_overlap.run)
    graph.add_node("agent_06", agent_06_portfolio_xray.run)
    graph.add_node("extract_signals", agent_08_consensus.extract)
    graph.add_node("agent_08", agent_08_consensus.run)
    graph.add_node("agent_10", report_node)

    graph.add_edge(START, "agent_01")
    graph.add_edge("agent_01", "agent_03")
    graph.add_edge("agent_03", "agent_04")
    graph.add_edge("agent_04", "agent_06")
    graph.add_conditional_edges("agent_06", agent_08_consensus.fan_out,
                                ["extract_signals", "agent_08"])
    graph.add_edge("extract_signals", "agent_08")
    graph.add_edge("agent_08", "agent_10")
    graph.add_edge("agent_10", END)
    return graph.compile()


def load_analyst_texts(directory: Path) -> dict[str, str]:
    """<analyst_id>.txt / .md → {analyst_id: text}, sorted by file name."""
    texts = {}
    for path in sorted(directory.iterdir()):
        if path.suffix.lower() in ANALYST_SUFFIXES and path.is_file():
            texts[path.stem] = path.read_text()
    return texts


def _mock_state() -> AnalysisState:
    from mock_data import (
        MOCK_ANALYST_TEXTS,
        MOCK_CANDLES,
        MOCK_ETF_HOLDINGS,
        MOCK_PORTFOLIO,
        MOCK_SECTORS,
    )
    return {
        "portfolio": MOCK_PORTFOLIO,
        "price_symbols": list(MOCK_CANDLES),
        "analyst_texts": MOCK_ANALYST_TEXTS,
        "data_warnings": [],
        "etf_holdings": MOCK_ETF_HOLDINGS,
        "sector_data": MOCK_SECTORS,
        "candles": MOCK_CANDLES,
        "analyst_signals": [],
    }


def main():
    parser = argparse.ArgumentParser(description="Portfolio Analysis")
    parser.add_argument("--mock",         action="store_true",
                        help="Use hardcoded mock data instead of yfinance")
    parser.add_argument("--portfolio",    type=Path,
                        help="Portfolio JSON file")
    parser.add_argument("--symbols",      nargs="*", default=None,
                        help="Symbols to compute technicals for (default: direct stock positions)")
    parser.add_argument("--analysts-dir", type=Path,
                        help="Directory of analyst answers for the consensus step")
    parser.add_argument("--report",       type=Path,
                        help="Write the Markdown report here instead of stdout")
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"\n=== Portfolio Analysis ===")
    print(f"Source: {'MOCK' if args.mock else 'LIVE (yfinance)'}  |  "
          f"Report: {args.report or 'stdout'}")

    # ── Build initial state ──────────────────────────────────────────────────
    if args.mock:
        initial_state = _mock_state()
    else:
        if args.portfolio is None:
            parser.error("--portfolio is required unless --mock is given")
        portfolio = agent_01_portfolio_ingestion.load_portfolio(args.portfolio)
        if not portfolio:
            raise RuntimeError(f"No holdings found in {args.portfolio}")
        symbols = args.symbols
        if symbols is None:
            symbols = [h.symbol for h in portfolio if not h.is_etf]
        initial_state = {
            "portfolio": portfolio,
            "price_symbols": [s.upper() for s in symbols],
            "analyst_texts": load_analyst_texts(args.analysts_dir) if args.analysts_dir else {},
            "data_warnings": [],
            "analyst_signals": [],
        }

    portfolio = initial_state["portfolio"]
    total = sum(h.allocation for h in portfolio)
    etfs = [h.symbol for h in portfolio if h.is_etf]
    stocks = [h.symbol for h in portfolio if not h.is_etf]
    print(f"Portfolio: {len(portfolio)} positions  |  Allocated: {total:.1f}%")
    print(f"ETFs:      {', '.join(etfs) or '—'}")
    print(f"Stocks:    {', '.join(stocks) or '—'}")
    print(f"Analysts:  {', '.join(initial_state['analyst_texts']) or '—'}\n")

    # ── Run LangGraph ────────────────────────────────────────────────────────
    t0 = time.time()
    app = build_graph(report_path=args.report)
    app.invoke(initial_state)
    logger.info("pipeline finished in %.1fs", time.time() - t0)


if __name__ == "__main__":
    main()
