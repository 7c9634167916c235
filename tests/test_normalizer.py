from __future__ import annotations

import dataclasses

import pytest

from signal_engine.core.data_provider import CANDLE_COLUMNS, DOWN_COLOR, UP_COLOR
from signal_engine.data.normalizer import frame_to_candles, normalize, normalize_bar


def test_finmind_fields(price_records_factory):
    records = price_records_factory([100.0, 101.0], spread=2.0, start="2024-01-02")
    frame = normalize(records)

    assert list(frame.columns) == CANDLE_COLUMNS
    assert len(frame) == 2
    first = frame.iloc[0]
    assert first["full_date"] == "2024-01-02"
    assert first["day"] == "01-02"
    assert first["high"] == 102.0
    assert first["low"] == 98.0
    assert first["volume"] == 1500


def test_alternate_aliases():
    candle = normalize_bar({
        "Date": "2024-03-15", "Open": "10", "High": "12",
        "Low": "9", "Close": "11", "Volume": "2000",
    })
    assert candle.full_date == "2024-03-15"
    assert candle.day == "03-15"
    assert (candle.open, candle.high, candle.low, candle.close) == (10.0, 12.0, 9.0, 11.0)
    assert candle.volume == 2
    assert candle.is_up
    assert candle.color == UP_COLOR


def test_twse_aliases():
    candle = normalize_bar({
        "date": "2024-03-15", "OpeningPrice": "580", "HighestPrice": "590",
        "LowestPrice": "570", "ClosingPrice": "575", "TradeVolume": "25000000",
    })
    assert candle.close == 575.0
    assert candle.volume == 25000
    assert not candle.is_up
    assert candle.color == DOWN_COLOR


def test_volume_rounds_half_up_to_lots():
    assert normalize_bar({"date": "2024-01-02", "volume": 2_500}).volume == 3
    assert normalize_bar({"date": "2024-01-02", "volume": 1_499_499}).volume == 1499


def test_unparseable_fields_become_zero():
    candle = normalize_bar({
        "date": "2024-01-02", "open": "--", "max": None, "min": "abc", "close": "12.5",
    })
    assert candle.open == 0.0
    assert candle.high == 0.0
    assert candle.low == 0.0
    assert candle.close == 12.5
    assert candle.volume == 0
    assert candle.is_up


def test_equal_open_close_is_up():
    assert normalize_bar({"date": "2024-01-02", "open": 5, "close": 5}).is_up


def test_order_is_preserved(price_records_factory):
    records = price_records_factory([3.0, 1.0, 2.0])
    frame = normalize(records)
    assert frame["close"].tolist() == [3.0, 1.0, 2.0]
    assert frame["full_date"].tolist() == [r["date"] for r in records]


def test_empty_input_gives_empty_frame():
    for raw in ([], None):
        frame = normalize(raw)
        assert frame.empty
        assert list(frame.columns) == CANDLE_COLUMNS


def test_candles_are_immutable(flat_frame):
    candle = frame_to_candles(flat_frame)[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        candle.close = 99.0
