"""
Hardcoded mock inputs for offline runs (--mock) and pipeline tests.

Portfolio mirrors a typical core + satellite split:
  VOO 50%, QQQ 30%   — overlapping mega-cap ETFs
  NVDA 10%, SNOW 10% — direct positions (NVDA also sits inside both ETFs)

ETF top holdings are approximate and truncated to the top 10.
"""
from __future__ import annotations

from datetime import date, timedelta

import numpy as np

from state.models import Candle, EtfHolding, EtfHoldingsResponse, PortfolioHolding, SectorData

MOCK_PORTFOLIO: list[PortfolioHolding] = [
    PortfolioHolding(symbol="VOO",  allocation=50.0, is_etf=True),
    PortfolioHolding(symbol="QQQ",  allocation=30.0, is_etf=True),
    PortfolioHolding(symbol="NVDA", allocation=10.0),
    PortfolioHolding(symbol="SNOW", allocation=10.0),
]


def _etf(symbol: str, rows: list[tuple[str, str, float]]) -> EtfHoldingsResponse:
    return EtfHoldingsResponse(
        symbol=symbol,
        holdings=[EtfHolding(symbol=s, holding_name=n, holding_percent=p) for s, n, p in rows],
    )


MOCK_ETF_HOLDINGS: list[EtfHoldingsResponse] = [
    _etf("VOO", [
        ("NVDA",  "NVIDIA Corp",              0.074),
        ("MSFT",  "Microsoft Corp",           0.066),
        ("AAPL",  "Apple Inc",                0.062),
        ("AMZN",  "Amazon.com Inc",           0.039),
        ("META",  "Meta Platforms Inc",       0.029),
        ("AVGO",  "Broadcom Inc",             0.025),
        ("GOOGL", "Alphabet Inc Class A",     0.020),
        ("TSLA",  "Tesla Inc",                0.018),
        ("BRK-B", "Berkshire Hathaway Inc",   0.017),
        ("JPM",   "JPMorgan Chase & Co",      0.015),
    ]),
    _etf("QQQ", [
        ("NVDA",  "NVIDIA Corp",              0.095),
        ("MSFT",  "Microsoft Corp",           0.086),
        ("AAPL",  "Apple Inc",                0.079),
        ("AMZN",  "Amazon.com Inc",           0.055),
        ("AVGO",  "Broadcom Inc",             0.052),
        ("META",  "Meta Platforms Inc",       0.037),
        ("NFLX",  "Netflix Inc",              0.030),
        ("TSLA",  "Tesla Inc",                0.029),
        ("COST",  "Costco Wholesale Corp",    0.026),
        ("GOOGL", "Alphabet Inc Class A",     0.025),
    ]),
]

MOCK_SECTORS: list[SectorData] = [
    SectorData(symbol="NVDA",  sector="Technology"),
    SectorData(symbol="MSFT",  sector="Technology"),
    SectorData(symbol="AAPL",  sector="Technology"),
    SectorData(symbol="AVGO",  sector="Technology"),
    SectorData(symbol="SNOW",  sector="Technology"),
    SectorData(symbol="AMZN",  sector="Consumer Cyclical"),
    SectorData(symbol="TSLA",  sector="Consumer Cyclical"),
    SectorData(symbol="META",  sector="Communication Services"),
    SectorData(symbol="GOOGL", sector="Communication Services"),
    SectorData(symbol="NFLX",  sector="Communication Services"),
    SectorData(symbol="BRK-B", sector="Financial Services"),
    SectorData(symbol="JPM",   sector="Financial Services"),
    SectorData(symbol="COST",  sector="Consumer Defensive"),
]


# ── Synthetic price history ───────────────────────────────────────────────────

def make_candles(start_price: float, days: int = 260, seed: int = 7,
                 drift: float = 0.0004, vol: float = 0.015) -> list[Candle]:
    """Deterministic daily random walk; ISO date times, weekends skipped."""
    rng = np.random.default_rng(seed)
    returns = rng.normal(drift, vol, days)
    closes = start_price * np.cumprod(1 + returns)

    candles: list[Candle] = []
    day = date(2024, 1, 2)
    prev_close = start_price
    for close in closes:
        while day.weekday() >= 5:
            day += timedelta(days=1)
        open_ = prev_close
        wick = abs(rng.normal(0, vol / 2)) * close
        candles.append(Candle(
            time=day.isoformat(),
            open=round(float(open_), 2),
            high=round(float(max(open_, close) + wick), 2),
            low=round(float(min(open_, close) - wick), 2),
            close=round(float(close), 2),
            volume=float(rng.integers(1_000_000, 5_000_000)),
        ))
        prev_close = close
        day += timedelta(days=1)
    return candles


MOCK_CANDLES: dict[str, list[Candle]] = {
    "VOO":  make_candles(430.0, seed=1),
    "QQQ":  make_candles(410.0, seed=2, vol=0.018),
    "NVDA": make_candles(48.0,  seed=3, drift=0.002, vol=0.03),
    "SNOW": make_candles(195.0, seed=4, drift=-0.0008, vol=0.028),
}


# ── Analyst answers (one chart, five readings) ────────────────────────────────

MOCK_ANALYST_TEXTS: dict[str, str] = {
    "bulkowski": (
        "NVDA completed an ascending triangle with a breakout on rising volume. "
        "Historically this pattern resolves upward about 70% of the time. "
        "Support at $118 and resistance at $135. Target of $150 if the breakout holds. "
        "I'm confident the bias stays bullish."
    ),
    "murphy": (
        "The trend is up: price holds above the 50-day moving average and MACD crossed "
        "above its signal line. Support near $117.50, resistance at 136. "
        "This is a bullish continuation setup, a flag after the gap up. "
        "Upside to $148 looks likely."
    ),
    "nison": (
        "A bearish engulfing candle printed at resistance at $135, followed by a doji. "
        "That warns of a reversal. Support at $112. Downside to $110 is possible. "
        "Sentiment turns bearish near term, though it may be early to call."
    ),
    "pring": (
        "Momentum is mixed. RSI sits mid-range with no divergence, and the market is in "
        "consolidation. Support at $118, resistance at $136. Uncertain which way this "
        "resolves; neutral until a close outside the range."
    ),
    "edwards-magee": (
        "The rectangle of the past six weeks looks like accumulation. An ascending triangle "
        "is forming inside it. Support at 118.5 and resistance at 135.5. "
        "Strong odds of an upward breakout; the uptrend remains bullish. Target $152."
    ),
}
