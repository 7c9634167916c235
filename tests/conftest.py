"""Shared fixtures: deterministic synthetic price / chip records."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from signal_engine.data.normalizer import normalize


def make_price_records(
    closes: list[float],
    spread: float = 1.0,
    start: str = "2024-01-01",
    volume: int = 1_500_000,
) -> list[dict]:
    """FinMind-shaped daily records (open == close, high/low = close ± spread)."""
    dates = pd.bdate_range(start=start, periods=len(closes))
    return [
        {
            "date": d.strftime("%Y-%m-%d"),
            "open": float(c),
            "max": float(c) + spread,
            "min": float(c) - spread,
            "close": float(c),
            "Trading_Volume": volume,
        }
        for d, c in zip(dates, closes)
    ]


def make_random_records(n: int, seed: int = 7, start_price: float = 100.0) -> list[dict]:
    """Random-walk bars with low <= open/close <= high."""
    rng = np.random.default_rng(seed)
    closes = start_price * np.cumprod(1 + rng.normal(0.0005, 0.02, n))
    dates = pd.bdate_range(start="2022-01-03", periods=n)
    records = []
    prev = start_price
    for d, close in zip(dates, closes):
        high = max(prev, close) * (1 + abs(rng.normal(0, 0.005)))
        low = min(prev, close) * (1 - abs(rng.normal(0, 0.005)))
        records.append({
            "date": d.strftime("%Y-%m-%d"),
            "open": round(float(prev), 2),
            "max": round(float(high), 2),
            "min": round(float(low), 2),
            "close": round(float(close), 2),
            "Trading_Volume": int(rng.integers(500_000, 5_000_000)),
        })
        prev = close
    return records


@pytest.fixture
def price_records_factory():
    return make_price_records


@pytest.fixture
def random_records():
    return make_random_records(250)


@pytest.fixture
def random_frame(random_records):
    return normalize(random_records)


@pytest.fixture
def flat_frame():
    """5 bars, open = close = 10."""
    return normalize(make_price_records([10.0] * 5, spread=0.0))


@pytest.fixture
def chip_records():
    return [
        {"date": "2024-01-02", "name": "Foreign_Investor", "buy": 5_600_000, "sell": 1_000_000},
        {"date": "2024-01-02", "name": "Foreign_Investor", "buy": 1_500, "sell": 0},
        {"date": "2024-01-02", "name": "Investment_Trust", "buy": 0, "sell": 2_500},
        {"date": "2024-01-02", "name": "Dealer_self", "buy": 9_000_000, "sell": 0},
        {"date": "2024-01-03", "name": "Dealer", "buy": 3_000, "sell": 1_000},
        {"date": "2023-12-29", "name": "Foreign_Investor", "buy": 0, "sell": 7_000},
    ]
