from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from signal_engine.data.normalizer import normalize
from signal_engine.indicators.technical import (
    StochasticState,
    compute_bollinger,
    compute_indicators,
    compute_macd,
    compute_rsi,
    compute_sma,
    compute_stochastic,
)
from signal_engine.utils.config import IndicatorConfig

INDICATOR_COLUMNS = [
    "ma5", "ma20", "ma60", "bb_upper", "bb_middle", "bb_lower",
    "k", "d", "dif", "macd", "osc", "rsi",
]


def _closes_frame(closes, price_records_factory, spread=1.0):
    return normalize(price_records_factory(closes, spread=spread))


def test_flat_five_bars(flat_frame):
    result = compute_indicators(flat_frame)

    assert result["ma5"].iloc[:4].isna().all()
    assert result["ma5"].iloc[4] == 10.0
    assert result["ma20"].isna().all()
    assert (result["k"] == 50.0).all()
    assert (result["d"] == 50.0).all()


def test_sma_warmup_is_nan(random_frame):
    for window in (5, 20, 60):
        ma = compute_sma(random_frame, window)
        assert ma.iloc[:window - 1].isna().all()
        assert ma.iloc[window - 1:].notna().all()


def test_sma_values_are_rounded(price_records_factory):
    frame = _closes_frame([1.0, 1.0, 2.0, 2.0, 2.0], price_records_factory)
    ma = compute_sma(frame, 3)
    assert ma.iloc[2] == 1.33
    assert ma.iloc[3] == 1.67
    assert ma.iloc[4] == 2.0
    assert ma.name == "ma3"


def test_bollinger_known_values(price_records_factory):
    frame = _closes_frame([float(i) for i in range(1, 21)], price_records_factory)
    bands = compute_bollinger(frame, 20, 2.0)

    assert bands.iloc[:19].isna().all().all()
    last = bands.iloc[-1]
    assert last["bb_middle"] == 10.5
    assert last["bb_upper"] == pytest.approx(22.03)
    assert last["bb_lower"] == pytest.approx(-1.03)


def test_bollinger_flat_series_collapses(price_records_factory):
    frame = _closes_frame([10.0] * 25, price_records_factory)
    bands = compute_bollinger(frame)
    last = bands.iloc[-1]
    assert last["bb_upper"] == last["bb_middle"] == last["bb_lower"] == 10.0


def test_stochastic_first_value():
    records = [
        {"date": f"2024-01-{i + 2:02d}", "open": c, "max": 10.0, "min": 0.0, "close": c}
        for i, c in enumerate([5.0] * 8 + [10.0])
    ]
    kd = compute_stochastic(normalize(records), 9)

    assert (kd["k"].iloc[:8] == 50.0).all()
    assert kd["k"].iloc[8] == 66.67
    assert kd["d"].iloc[8] == 55.56


def test_stochastic_zero_range_stays_neutral(price_records_factory):
    frame = _closes_frame([12.0] * 15, price_records_factory, spread=0.0)
    kd = compute_stochastic(frame)
    assert (kd["k"] == 50.0).all()
    assert (kd["d"] == 50.0).all()


def test_stochastic_state_update():
    state = StochasticState().update(100.0)
    assert state.k == pytest.approx(200 / 3)
    assert state.d == pytest.approx(50 * 2 / 3 + (200 / 3) / 3)


def test_stochastic_bounded(random_frame):
    kd = compute_stochastic(random_frame)
    assert kd["k"].between(0, 100).all()
    assert kd["d"].between(0, 100).all()


def test_macd_flat_series_is_zero(price_records_factory):
    frame = _closes_frame([50.0] * 40, price_records_factory)
    macd = compute_macd(frame)
    for column in ("dif", "macd", "osc"):
        assert (macd[column] == 0.0).all()


def test_macd_rising_series_positive(price_records_factory):
    frame = _closes_frame([float(i) for i in range(1, 41)], price_records_factory)
    macd = compute_macd(frame)
    assert macd["dif"].iloc[0] == 0.0
    assert macd["dif"].iloc[-1] > 0
    assert macd["osc"].iloc[5] > 0


def test_rsi_warmup_and_rising(price_records_factory):
    frame = _closes_frame([float(i) for i in range(1, 21)], price_records_factory)
    rsi = compute_rsi(frame, 14)
    assert (rsi.iloc[:14] == 50.0).all()
    assert (rsi.iloc[14:] == 100.0).all()


def test_rsi_falling_series_is_zero(price_records_factory):
    frame = _closes_frame([float(i) for i in range(20, 0, -1)], price_records_factory)
    rsi = compute_rsi(frame, 14)
    assert rsi.iloc[14] == 0.0


def test_rsi_uses_sliding_window(price_records_factory):
    # one 10-point drop, then steady +1 steps
    closes = [100.0, 90.0] + [90.0 + k for k in range(1, 15)]
    frame = _closes_frame(closes, price_records_factory)
    rsi = compute_rsi(frame, 14)

    assert rsi.iloc[14] == pytest.approx(100 - 100 / (1 + 13 / 10))
    # the drop has left the 14-change window
    assert rsi.iloc[15] == 100.0


def test_rsi_bounded(random_frame):
    rsi = compute_rsi(random_frame)
    assert rsi.between(0, 100).all()


def test_compute_indicators_adds_columns_without_mutating(random_frame):
    before = random_frame.copy()
    result = compute_indicators(random_frame)

    pd.testing.assert_frame_equal(random_frame, before)
    for column in INDICATOR_COLUMNS:
        assert column in result.columns
    assert len(result) == len(random_frame)


def test_compute_indicators_is_causal(random_frame):
    full = compute_indicators(random_frame)
    prefix = compute_indicators(random_frame.iloc[:80])
    pd.testing.assert_frame_equal(prefix, full.iloc[:80])


def test_compute_indicators_custom_windows(random_frame):
    config = IndicatorConfig(ma_windows=[10, 30])
    result = compute_indicators(random_frame, config)
    assert "ma10" in result.columns
    assert "ma30" in result.columns
    assert "ma5" not in result.columns


def test_compute_indicators_empty():
    result = compute_indicators(normalize([]))
    assert result.empty
    for column in INDICATOR_COLUMNS:
        assert column in result.columns


def test_indicator_values_are_finite_after_warmup(random_frame):
    result = compute_indicators(random_frame)
    tail = result.iloc[60:][INDICATOR_COLUMNS].to_numpy(dtype=float)
    assert np.isfinite(tail).all()
    assert not math.isnan(result["rsi"].iloc[0])


def test_zero_rsi_column_reads_neutral(price_records_factory):
    frame = _closes_frame([float(i) for i in range(20, 0, -1)], price_records_factory)
    assert compute_rsi(frame).iloc[14] == 0.0

    result = compute_indicators(frame)
    assert (result["rsi"].iloc[14:] == 50.0).all()
