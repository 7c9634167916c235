"""
분봉(장중) 신호 모듈.

[ 역할 ]
    당일 분봉 시퀀스로 거래량 급증과 장중 추세 확률을 계산.

[ 거래량 급증 ]
    최근 3봉 평균 거래량 / 그 이전 20봉 평균 거래량 (24봉 이상일 때만)
    비율 >= 2 → mild, >= 3 → high, >= 4 → extreme

[ 장중 추세 ]
    점수 = 당일 등락률 × 10 + 급증 비율 ± 1 (최근 5봉 방향)
    확률 = 1 / (1 + e^-점수),  > 0.6 → bull, < 0.4 → bear, 그 외 neutral
    6봉 미만이면 neutral / 0.5

[ 호출하는 곳 ]
    - run_analysis.py --intraday
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import pandas as pd

from signal_engine.utils.numeric import round_price, to_float

SPIKE_RECENT_BARS = 3
SPIKE_BASE_BARS = 20


@dataclass(frozen=True)
class VolumeSpike:
    ratio: float     # 소수점 2자리
    level: str       # mild | high | extreme


@dataclass(frozen=True)
class IntradayTrend:
    trend: str = "neutral"    # bull | bear | neutral
    probability: float = 0.5


def _field(record: Any, *names: str) -> Any:
    """names 중 처음으로 값이 있는 필드."""
    for name in names:
        value = record.get(name) if isinstance(record, dict) else getattr(record, name, None)
        if value:
            return value
    return None


def intraday_bars(records: Iterable[Any] | None) -> pd.DataFrame:
    """분봉 원천 레코드 → DataFrame (거래량은 주 단위 그대로)."""
    rows = []
    for record in records or []:
        rows.append({
            "time": _field(record, "time", "date"),
            "open": to_float(_field(record, "open")),
            "high": to_float(_field(record, "max", "high")),
            "low": to_float(_field(record, "min", "low")),
            "close": to_float(_field(record, "close")),
            "volume": to_float(_field(record, "Trading_Volume", "volume")),
        })
    return pd.DataFrame(rows, columns=["time", "open", "high", "low", "close", "volume"])


def detect_volume_spike(bars: pd.DataFrame) -> Optional[VolumeSpike]:
    """거래량 급증 감지. 조건 미달이면 None."""
    if len(bars) <= SPIKE_RECENT_BARS + SPIKE_BASE_BARS:
        return None

    volume = bars["volume"].astype(float)
    recent = volume.iloc[-SPIKE_RECENT_BARS:]
    base = volume.iloc[-(SPIKE_RECENT_BARS + SPIKE_BASE_BARS):-SPIKE_RECENT_BARS]

    avg_base = base.sum() / len(base)
    avg_recent = recent.sum() / len(recent)
    ratio = avg_recent / avg_base if avg_base > 0 else 0.0

    if ratio < 2:
        return None
    if ratio >= 4:
        level = "extreme"
    elif ratio >= 3:
        level = "high"
    else:
        level = "mild"
    return VolumeSpike(ratio=round_price(ratio), level=level)


def intraday_trend(bars: pd.DataFrame, spike: Optional[VolumeSpike] = None) -> IntradayTrend:
    """장중 추세 확률 계산."""
    if len(bars) <= 5:
        return IntradayTrend()

    first_open = float(bars["open"].iloc[0])
    last_close = float(bars["close"].iloc[-1])
    day_change = (last_close - first_open) / first_open if first_open > 0 else 0.0

    points = day_change * 10
    if spike is not None:
        points += spike.ratio

    recent = bars.tail(5)
    short_change = float(recent["close"].iloc[-1]) - float(recent["open"].iloc[0])
    if short_change > 0:
        points += 1
    if short_change < 0:
        points -= 1

    probability = 1 / (1 + math.exp(-points))
    if probability > 0.6:
        trend = "bull"
    elif probability < 0.4:
        trend = "bear"
    else:
        trend = "neutral"
    return IntradayTrend(trend=trend, probability=round_price(probability))
