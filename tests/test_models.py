# /tests/test_models.py

import math

import pytest
from pydantic import ValidationError

from state.models import Candle, EtfHolding, PortfolioHolding


def test_candle_range_checked():
    with pytest.raises(ValidationError):
        Candle(time=1, open=10, high=9, low=8, close=9)
    with pytest.raises(ValidationError):
        Candle(time=1, open=10, high=12, low=11, close=11)


def test_candle_rejects_non_finite_prices():
    with pytest.raises(ValidationError):
        Candle(time=1, open=math.nan, high=12, low=8, close=10)


def test_candle_is_immutable():
    c = Candle(time="2024-01-02", open=10, high=12, low=8, close=11)
    with pytest.raises(ValidationError):
        c.close = 5


@pytest.mark.parametrize("pct", [-0.01, 1.01])
def test_holding_percent_is_a_fraction(pct):
    with pytest.raises(ValidationError):
        EtfHolding(symbol="X", holding_name="X", holding_percent=pct)


@pytest.mark.parametrize("allocation", [-1, 100.5])
def test_allocation_is_a_percent(allocation):
    with pytest.raises(ValidationError):
        PortfolioHolding(symbol="X", allocation=allocation)
