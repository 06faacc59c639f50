"""
Technical indicator calculations — pure numpy/python, no TA-Lib dependency.

Indicators over an ascending candle series:
  - SMA(period)                       running-sum average of close
  - EMA(period)                       k = 2/(period+1), seeded with SMA of first `period` closes
  - Bollinger Bands(period, mult)     middle ± mult × population σ
  - RSI(period)                       Wilder smoothing
  - MACD(fast, slow, signal)          line, signal, histogram aligned by time

Every indicator returns one IndicatorPoint per full window, aligned to the
candle that closes the window. Too little data → empty lists, never an error.
Inputs are never mutated.

compute() wraps the chart presets (SMA 20/50/200, EMA 12/26, BB 20/2, RSI 14,
MACD 12/26/9) into a TechnicalSnapshot of latest values for LLM context.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from state.models import Candle

logger = logging.getLogger(__name__)

Time = Union[int, float, str]

# Chart presets used for snapshots (same periods the chart overlays use)
INDICATOR_PRESETS = {
    "sma_short": 20,
    "sma_mid": 50,
    "sma_long": 200,
    "ema_fast": 12,
    "ema_slow": 26,
    "rsi_period": 14,
    "macd_fast": 12,
    "macd_slow": 26,
    "macd_signal": 9,
    "bbands_period": 20,
    "bbands_std": 2.0,
}


@dataclass(frozen=True)
class IndicatorPoint:
    time: Time
    value: float


@dataclass
class BollingerBands:
    upper:  list[IndicatorPoint] = field(default_factory=list)
    middle: list[IndicatorPoint] = field(default_factory=list)
    lower:  list[IndicatorPoint] = field(default_factory=list)


@dataclass
class MACDResult:
    macd:      list[IndicatorPoint] = field(default_factory=list)
    signal:    list[IndicatorPoint] = field(default_factory=list)
    histogram: list[IndicatorPoint] = field(default_factory=list)


# ── Indicators ────────────────────────────────────────────────────────────────

def calculate_sma(data: Sequence[Candle], period: int) -> list[IndicatorPoint]:
    """Simple moving average of close, updated incrementally (O(n))."""
    if period < 1 or len(data) < period:
        return []

    total = sum(c.close for c in data[:period])
    result = [IndicatorPoint(data[period - 1].time, total / period)]

    for i in range(period, len(data)):
        total += data[i].close - data[i - period].close
        result.append(IndicatorPoint(data[i].time, total / period))

    return result


def _ema_values(values: Sequence[float], period: int) -> list[float]:
    """EMA over raw values; index 0 corresponds to values[period - 1]."""
    if period < 1 or len(values) < period:
        return []

    k = 2 / (period + 1)
    ema = sum(values[:period]) / period
    out = [ema]
    for v in values[period:]:
        ema = v * k + ema * (1 - k)
        out.append(ema)
    return out


def calculate_ema(data: Sequence[Candle], period: int) -> list[IndicatorPoint]:
    """Exponential moving average of close, seeded with the first SMA."""
    values = _ema_values([c.close for c in data], period)
    return [IndicatorPoint(data[period - 1 + i].time, v) for i, v in enumerate(values)]


def calculate_bollinger_bands(
    data: Sequence[Candle],
    period: int,
    std_dev: float,
) -> BollingerBands:
    """Bollinger Bands with population standard deviation (divide by period)."""
    if period < 1 or len(data) < period:
        return BollingerBands()

    closes = np.fromiter((c.close for c in data), dtype=float, count=len(data))
    windows = sliding_window_view(closes, period)
    means = windows.mean(axis=1)
    sigmas = windows.std(axis=1)   # ddof=0

    bands = BollingerBands()
    for i, (mean, sd) in enumerate(zip(means, sigmas)):
        t = data[period - 1 + i].time
        bands.middle.append(IndicatorPoint(t, float(mean)))
        bands.upper.append(IndicatorPoint(t, float(mean + std_dev * sd)))
        bands.lower.append(IndicatorPoint(t, float(mean - std_dev * sd)))
    return bands


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def calculate_rsi(data: Sequence[Candle], period: int) -> list[IndicatorPoint]:
    """Relative Strength Index, Wilder's method. First point aligns to data[period]."""
    if period < 1 or len(data) < period + 1:
        return []

    deltas = np.diff(np.fromiter((c.close for c in data), dtype=float, count=len(data)))
    gains  = np.clip(deltas, 0, None)
    losses = np.clip(-deltas, 0, None)

    avg_gain = float(gains[:period].sum()) / period
    avg_loss = float(losses[:period].sum()) / period
    result = [IndicatorPoint(data[period].time, _rsi_value(avg_gain, avg_loss))]

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + float(gains[i])) / period
        avg_loss = (avg_loss * (period - 1) + float(losses[i])) / period
        result.append(IndicatorPoint(data[i + 1].time, _rsi_value(avg_gain, avg_loss)))

    return result


def calculate_macd(
    data: Sequence[Candle],
    fast: int,
    slow: int,
    signal_period: int,
) -> MACDResult:
    """
    MACD line = EMA(fast) - EMA(slow), aligned by time.

    The fast EMA starts (slow - fast) candles earlier, so fast_ema[i + offset]
    and slow_ema[i] close on the same candle. Signal and histogram start once
    the signal EMA over the MACD values is seeded.
    """
    if fast < 1 or slow < fast or len(data) < slow:
        return MACDResult()

    fast_ema = calculate_ema(data, fast)
    slow_ema = calculate_ema(data, slow)
    offset = slow - fast

    result = MACDResult()
    macd_values: list[float] = []
    for i, slow_point in enumerate(slow_ema):
        value = fast_ema[i + offset].value - slow_point.value
        macd_values.append(value)
        result.macd.append(IndicatorPoint(slow_point.time, value))

    signal_values = _ema_values(macd_values, signal_period)
    start = signal_period - 1
    for j, sig in enumerate(signal_values):
        point = result.macd[start + j]
        result.signal.append(IndicatorPoint(point.time, sig))
        result.histogram.append(IndicatorPoint(point.time, macd_values[start + j] - sig))

    return result


# ── Snapshot ──────────────────────────────────────────────────────────────────

@dataclass
class TechnicalSnapshot:
    symbol: str
    close: float
    prev_close: float

    sma_20:  Optional[float]
    sma_50:  Optional[float]
    sma_200: Optional[float]
    ema_12:  Optional[float]
    ema_26:  Optional[float]

    rsi: Optional[float]

    macd_line:   Optional[float]
    macd_signal: Optional[float]
    macd_hist:   Optional[float]

    bb_upper: Optional[float]
    bb_mid:   Optional[float]
    bb_lower: Optional[float]

    trend: str              # "uptrend" | "downtrend" | "sideways"
    rsi_signal: str         # "overbought" | "oversold" | "neutral"
    macd_signal_str: str    # "bullish" | "bearish" | "neutral"

    @property
    def change_1d(self) -> float:
        if self.prev_close == 0:
            return 0.0
        return (self.close - self.prev_close) / self.prev_close * 100

    def summary(self) -> str:
        """One-paragraph text summary suitable for LLM context."""
        lines = [f"{self.symbol} closed at ${self.close:.2f} ({self.change_1d:+.1f}% 1d)."]
        mas = []
        for label, val in (("SMA20", self.sma_20), ("SMA50", self.sma_50), ("SMA200", self.sma_200),
                           ("EMA12", self.ema_12), ("EMA26", self.ema_26)):
            if val is not None:
                mas.append(f"{label}=${val:.2f}")
        if mas:
            lines.append(f"Moving averages: {', '.join(mas)}. Trend: {self.trend}.")
        if self.rsi is not None:
            lines.append(f"RSI(14)={self.rsi:.1f} ({self.rsi_signal}).")
        if self.macd_line is not None and self.macd_signal is not None:
            lines.append(
                f"MACD: line={self.macd_line:.3f}, signal={self.macd_signal:.3f}, "
                f"hist={self.macd_hist:.3f} ({self.macd_signal_str})."
            )
        if self.bb_mid is not None:
            lines.append(
                f"Bollinger Bands: upper=${self.bb_upper:.2f}, mid=${self.bb_mid:.2f}, "
                f"lower=${self.bb_lower:.2f}."
            )
        return " ".join(lines)


def _last(points: list[IndicatorPoint]) -> Optional[float]:
    return points[-1].value if points else None


def snapshot(symbol: str, candles: Sequence[Candle], presets: Optional[dict] = None) -> TechnicalSnapshot:
    """Latest value of every chart preset for one symbol. `candles` must be non-empty."""
    p = presets or INDICATOR_PRESETS

    close = candles[-1].close
    prev_close = candles[-2].close if len(candles) >= 2 else close

    sma_20  = _last(calculate_sma(candles, p["sma_short"]))
    sma_50  = _last(calculate_sma(candles, p["sma_mid"]))
    sma_200 = _last(calculate_sma(candles, p["sma_long"]))
    ema_12  = _last(calculate_ema(candles, p["ema_fast"]))
    ema_26  = _last(calculate_ema(candles, p["ema_slow"]))
    rsi     = _last(calculate_rsi(candles, p["rsi_period"]))
    macd    = calculate_macd(candles, p["macd_fast"], p["macd_slow"], p["macd_signal"])
    bands   = calculate_bollinger_bands(candles, p["bbands_period"], p["bbands_std"])

    if sma_50 is not None and sma_200 is not None:
        if close > sma_50 > sma_200:
            trend = "uptrend"
        elif close < sma_50 < sma_200:
            trend = "downtrend"
        else:
            trend = "sideways"
    else:
        trend = "sideways"

    if rsi is None:
        rsi_signal = "neutral"
    elif rsi >= 70:
        rsi_signal = "overbought"
    elif rsi <= 30:
        rsi_signal = "oversold"
    else:
        rsi_signal = "neutral"

    macd_line, macd_sig = _last(macd.macd), _last(macd.signal)
    if macd_line is None or macd_sig is None:
        macd_signal_str = "neutral"
    elif macd_line > macd_sig:
        macd_signal_str = "bullish"
    else:
        macd_signal_str = "bearish"

    return TechnicalSnapshot(
        symbol=symbol,
        close=close,
        prev_close=prev_close,
        sma_20=sma_20,
        sma_50=sma_50,
        sma_200=sma_200,
        ema_12=ema_12,
        ema_26=ema_26,
        rsi=rsi,
        macd_line=macd_line,
        macd_signal=macd_sig,
        macd_hist=_last(macd.histogram),
        bb_upper=_last(bands.upper),
        bb_mid=_last(bands.middle),
        bb_lower=_last(bands.lower),
        trend=trend,
        rsi_signal=rsi_signal,
        macd_signal_str=macd_signal_str,
    )


def compute(history: dict[str, list[Candle]]) -> dict[str, TechnicalSnapshot]:
    """
    Compute technical snapshots for each symbol.

    Args:
        history: output of tools.yfinance_client.fetch_candles()

    Returns:
        { symbol: TechnicalSnapshot }  — symbols with no candles are skipped
    """
    result: dict[str, TechnicalSnapshot] = {}
    for symbol, candles in history.items():
        if not candles:
            logger.debug("no candles for %s, skipping snapshot", symbol)
            continue
        result[symbol] = snapshot(symbol, candles)
    return result


# ── LLM context ───────────────────────────────────────────────────────────────

def build_price_table(symbol: str, candles: Sequence[Candle], limit: int = 60) -> str:
    """Render the most recent candles as the OHLC table handed to analysts."""
    recent = list(candles[-limit:]) if limit > 0 else []
    rows = []
    for c in recent:
        if isinstance(c.time, (int, float)):
            t = datetime.fromtimestamp(c.time, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        else:
            t = c.time
        row = f"{t} | O: {c.open:.2f} | H: {c.high:.2f} | L: {c.low:.2f} | C: {c.close:.2f}"
        if c.volume:
            row += f" | V: {c.volume:.0f}"
        rows.append(row)

    header = f"Analyze {symbol} using the following data:\n\n## OHLC Price Data (last {len(recent)} candles):\n\n"
    return header + "\n".join(rows)
