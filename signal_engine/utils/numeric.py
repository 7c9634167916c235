"""
수치 변환/반올림 유틸.

[ 역할 ]
    원천 데이터의 불안정한 필드 값을 float/int로 강제 변환하고,
    지표 출력값을 소수점 N자리로 반올림한다.

[ 반올림 규칙 ]
    - round_price():   소수점 N자리, 절반은 0에서 먼 쪽으로 (2.675 같은 이진 근사값은 실제 값 기준)
    - round_half_up(): 정수 반올림, 절반은 +∞ 쪽으로 (-2.5 → -2)
    파이썬 내장 round()는 은행가 반올림(2.5 → 2)이므로 사용하지 않는다.

[ 호출하는 곳 ]
    - data/normalizer.py, data/chips.py, data/market_snapshot.py (값 강제 변환, 주→張 환산)
    - indicators/technical.py (지표 반올림)
    - backtest/metrics.py (ROI, 승률 반올림)
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def to_float(value: Any) -> float:
    """숫자로 해석 불가능한 값(None, "", "--", NaN)은 0.0으로."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def to_int(value: Any) -> int:
    """정수 변환. 소수점 이하는 버린다 (parseInt 동작)."""
    return int(to_float(value))


def round_half_up(value: float) -> int:
    """정수 반올림. 절반은 +∞ 방향."""
    return int(math.floor(value + 0.5))


def round_price(value: float, digits: int = 2) -> float:
    """소수점 digits자리 반올림. NaN은 그대로 반환."""
    if value is None or math.isnan(value):
        return float("nan")
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def to_lots(shares: float) -> int:
    """주(株) 단위를 張(1000주) 단위로 환산."""
    return round_half_up(shares / 1000)
