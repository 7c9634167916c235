from __future__ import annotations

import pytest

from signal_engine.core.data_provider import Fundamentals
from signal_engine.data.market_snapshot import MarketSnapshot, build_market_snapshot
from signal_engine.indicators.screener import (
    CUSTOM_LIMIT,
    PRESET_LIMIT,
    ScreenFilters,
    count_presets,
    screen,
)


@pytest.fixture
def day_rows():
    return [
        {
            "Code": "2330", "Name": "TSMC", "ClosingPrice": "580.00", "Change": "5.00",
            "TradeVolume": "25000000", "OpeningPrice": "576.00",
            "HighestPrice": "582.00", "LowestPrice": "575.00",
        },
        {"Code": "2317", "Name": "Hon Hai", "ClosingPrice": "105.5", "Change": "-1.5", "TradeVolume": "30000000"},
        {"Code": "00878", "Name": "ETF", "ClosingPrice": "21.3", "Change": "0.1", "TradeVolume": "50000000"},
        {"Code": "9999", "Name": "Halted", "ClosingPrice": "--", "Change": "--", "TradeVolume": ""},
        {"Code": "", "Name": "blank"},
    ]


def test_build_snapshot(day_rows):
    valuation = [
        {"Code": "2330", "PEratio": "14.5", "DividendYield": "4.2", "PBratio": ""},
        {"Code": "1101", "PEratio": "10"},
    ]
    institutional = [
        {"Code": "2330", "ForeignInvestorsNetBuySell": "1234567", "InvestmentTrustNetBuySell": "-2500"},
    ]
    stocks = build_market_snapshot(day_rows, valuation, institutional)

    assert [s.code for s in stocks] == ["2330", "2317", "9999"]
    tsmc = stocks[0]
    assert tsmc.price == 580.0
    assert tsmc.change_percent == 0.87
    assert tsmc.volume == 25_000_000
    assert tsmc.high == 582.0
    assert (tsmc.pe, tsmc.dividend_yield, tsmc.pb) == (14.5, 4.2, 0.0)
    assert tsmc.foreign_net == 1235
    assert tsmc.trust_net == -2

    assert stocks[1].change_percent == pytest.approx(-1.4)
    halted = stocks[2]
    assert halted.price == 0.0
    assert halted.change_percent == 0.0


def test_snapshot_fundamentals():
    stock = MarketSnapshot("2330", pe=14.5, dividend_yield=4.2, pb=5.1, foreign_net=10, trust_net=-3)
    assert stock.fundamentals() == Fundamentals(
        pe=14.5, dividend_yield=4.2, pb=5.1, foreign_net=10, trust_net=-3,
    )


def _stock(code="1000", **fields):
    defaults = dict(
        price=100.0, change=1.0, volume=1_000_000, pe=12.0, dividend_yield=5.5, pb=1.2,
    )
    return MarketSnapshot(code, **{**defaults, **fields})


def test_presets():
    long_pick = _stock("1001", dividend_yield=3.5, pe=20.0, pb=2.0)
    short_pick = _stock("1002", change=-2.0, pe=-5.0)
    value_pick = _stock("1003", change=0.0)
    stocks = [long_pick, short_pick, value_pick]

    assert screen(stocks, preset="long") == [long_pick]
    assert screen(stocks, preset="short") == [short_pick]
    assert screen(stocks, preset="value") == [value_pick]
    assert count_presets(stocks) == {"long": 1, "short": 1, "value": 1}


def test_preset_limit():
    stocks = [_stock(f"{1000 + i}") for i in range(PRESET_LIMIT + 10)]
    assert len(screen(stocks, preset="long")) == PRESET_LIMIT
    assert count_presets(stocks)["long"] == PRESET_LIMIT + 10


def test_unknown_preset():
    with pytest.raises(ValueError, match="알 수 없는 프리셋"):
        screen([], preset="growth")


def test_custom_filters_default():
    passing = _stock("2001")
    stocks = [
        passing,
        _stock("2002", pe=0.0),
        _stock("2003", dividend_yield=1.0),
        _stock("2004", pb=6.0),
        _stock("2005", volume=400_000),
        _stock("2006", price=2500.0),
        _stock("2007", foreign_net=-1),
    ]
    assert screen(stocks) == [passing]


def test_custom_filters_trend():
    up, down = _stock("3001", change=2.0), _stock("3002", change=-2.0)
    assert screen([up, down], filters=ScreenFilters(trend="bullish")) == [up]
    assert screen([up, down], filters=ScreenFilters(trend="bearish")) == [down]
    assert screen([up, down], filters=ScreenFilters(trend="all")) == [up, down]


def test_custom_limit():
    stocks = [_stock(f"{1000 + i}") for i in range(CUSTOM_LIMIT + 5)]
    assert len(screen(stocks, filters=ScreenFilters())) == CUSTOM_LIMIT
