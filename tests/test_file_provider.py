from __future__ import annotations

import json

import pandas as pd

from signal_engine.core.data_provider import Fundamentals
from signal_engine.data.file_provider import FileDataProvider, read_records
from signal_engine.data.normalizer import normalize


def test_read_json_list_and_envelope(tmp_path, price_records_factory):
    records = price_records_factory([10.0, 11.0])
    plain = tmp_path / "plain.json"
    plain.write_text(json.dumps(records), encoding="utf-8")
    envelope = tmp_path / "envelope.json"
    envelope.write_text(json.dumps({"msg": "success", "data": records}), encoding="utf-8")

    assert read_records(plain) == records
    assert read_records(envelope) == records


def test_read_csv(tmp_path, price_records_factory):
    records = price_records_factory([10.0, 11.0, 12.0])
    path = tmp_path / "prices.csv"
    pd.DataFrame(records).to_csv(path, index=False)

    loaded = read_records(path)
    assert len(loaded) == 3
    frame = normalize(loaded)
    assert frame["close"].tolist() == [10.0, 11.0, 12.0]
    assert frame["full_date"].tolist() == [r["date"] for r in records]
    assert frame["volume"].tolist() == [1500, 1500, 1500]


def test_provider_load_and_get(tmp_path, price_records_factory, chip_records):
    prices = tmp_path / "prices.json"
    prices.write_text(json.dumps(price_records_factory([10.0] * 4)), encoding="utf-8")
    chips = tmp_path / "chips.json"
    chips.write_text(json.dumps({"data": chip_records}), encoding="utf-8")

    provider = FileDataProvider()
    assert provider.load_prices("2330", prices) == 4
    assert provider.load_chips("2330", chips) == len(chip_records)
    provider.set_fundamentals("2330", {"pe": "14.2", "yield": 4.5})

    assert len(provider.get_price_records("2330")) == 4
    assert provider.get_chip_records("2330") == chip_records
    assert provider.get_fundamentals("2330") == Fundamentals(pe=14.2, dividend_yield=4.5)
    assert provider.get_tickers() == ["2330"]


def test_provider_unknown_ticker():
    provider = FileDataProvider()
    assert provider.get_price_records("0050") == []
    assert provider.get_chip_records("0050") == []
    assert provider.get_fundamentals("0050") == Fundamentals()


def test_returned_records_are_copies(price_records_factory):
    provider = FileDataProvider()
    provider.set_prices("2330", price_records_factory([1.0, 2.0]))
    provider.get_price_records("2330").clear()
    assert len(provider.get_price_records("2330")) == 2
