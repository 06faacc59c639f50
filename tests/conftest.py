# /tests/conftest.py

import pytest

from state.models import Candle, EtfHolding, EtfHoldingsResponse


def make_candles(closes, start=1_700_000_000, step=86_400):
    """Flat-bodied candles (open == close) with a 1-point range, unix-second times."""
    return [
        Candle(time=start + i * step, open=c, high=c + 1, low=c - 1, close=c, volume=1000.0)
        for i, c in enumerate(closes)
    ]


def make_etf(symbol, rows):
    """rows: [(symbol, weight)] or [(symbol, name, weight)]"""
    holdings = []
    for row in rows:
        if len(row) == 2:
            s, w = row
            name = f"{s} Inc"
        else:
            s, name, w = row
        holdings.append(EtfHolding(symbol=s, holding_name=name, holding_percent=w))
    return EtfHoldingsResponse(symbol=symbol, holdings=holdings)


@pytest.fixture
def candles():
    return make_candles


@pytest.fixture
def etf():
    return make_etf
