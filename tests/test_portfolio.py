from __future__ import annotations

import pytest

from signal_engine.core.trading_strategy import Direction
from signal_engine.data.portfolio import Portfolio


def test_long_round_trip():
    portfolio = Portfolio(100_000)
    assert portfolio.open_position(Direction.LONG, 300.0, "2024-01-02", "entry")
    assert portfolio.position.quantity == 333
    assert portfolio.cash == pytest.approx(100.0)

    record = portfolio.close_position(330.0, "2024-01-10", "exit")

    assert record.profit == pytest.approx(9_990.0)
    assert record.profit_rate == pytest.approx(10.0)
    assert record.is_win
    assert portfolio.cash == pytest.approx(109_990.0)
    assert portfolio.total_profit == pytest.approx(9_990.0)
    assert portfolio.trade_count == 1
    assert not portfolio.position.is_open


def test_rejected_entries():
    portfolio = Portfolio(100_000)
    assert not portfolio.open_position(Direction.LONG, 0.0)
    assert not portfolio.open_position(Direction.LONG, -5.0)
    assert not portfolio.open_position(Direction.LONG, 200_000.0)
    assert portfolio.open_position(Direction.LONG, 100.0)
    assert not portfolio.open_position(Direction.SHORT, 100.0)


def test_short_uses_notional():
    portfolio = Portfolio(100_000)
    assert portfolio.open_position(Direction.SHORT, 100.0)

    record = portfolio.close_position(110.0)

    assert record.side == "short"
    assert record.profit == pytest.approx(-10_000.0)
    assert record.profit_rate == pytest.approx(-10.0)
    assert portfolio.cash == 100_000


def test_mark_to_market_is_not_a_trade():
    portfolio = Portfolio(100_000)
    assert portfolio.mark_to_market(50.0) == 0.0

    portfolio.open_position(Direction.LONG, 100.0)
    assert portfolio.mark_to_market(90.0) == pytest.approx(-10_000.0)
    assert portfolio.total_profit == pytest.approx(-10_000.0)
    assert portfolio.trade_count == 0


def test_close_when_flat():
    assert Portfolio(100_000).close_position(100.0) is None
