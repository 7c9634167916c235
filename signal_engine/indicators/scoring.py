"""
종합 점수 계산 모듈.

[ 역할 ]
    마지막 봉의 지표값 + 정적 기본 정보(PER, 배당수익률)를 하나의 점수로 축약.

[ 점수 규칙 ] (각 조건은 독립적으로 평가, 순서와 상수 고정)
    기본 60
    +15  0 < PER < 15
    +10  배당수익률 > 4%
    +10  MA5 > MA20
    +10  K > D 이고 K < 80
    + 5  MACD 오실레이터 > 0
    + 5  최근 5일 외국인 순매수 > 0
    + 5  최근 5일 투신 순매수 > 0
    최대 99로 제한 (하한 보정 없음, 감점 조건이 없으므로 실질 최소 60)

[ 호출하는 곳 ]
    - pipeline.py::analyze()에서 LatestIndicators.from_frame() → score()
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from signal_engine.core.data_provider import Fundamentals
from signal_engine.data.chips import ChipDay, trailing_net_flow

BASE_SCORE = 60
MAX_SCORE = 99


@dataclass(frozen=True)
class LatestIndicators:
    """마지막 봉의 지표값 + 최근 법인 순매수. 데이터가 없으면 중립값."""
    ma5: float = 0.0
    ma20: float = 0.0
    ma60: float = 0.0
    k: float = 50.0
    d: float = 50.0
    osc: float = 0.0
    rsi: float = 50.0
    foreign_flow: int = 0   # 최근 5일 외국인 순매수 (張)
    trust_flow: int = 0     # 최근 5일 투신 순매수 (張)

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        chip_days: Optional[list[ChipDay]] = None,
        fundamentals: Optional[Fundamentals] = None,
    ) -> "LatestIndicators":
        """지표 DataFrame의 마지막 행에서 생성.

        법인 데이터가 있으면 최근 5일 합계, 없으면 기본 정보의 당일 순매수를 사용.
        """
        fundamentals = fundamentals or Fundamentals()
        if chip_days:
            foreign_flow, trust_flow = trailing_net_flow(chip_days, days=5)
        else:
            foreign_flow, trust_flow = fundamentals.foreign_net, fundamentals.trust_net

        if frame.empty:
            return cls(foreign_flow=foreign_flow, trust_flow=trust_flow)

        last = frame.iloc[-1]
        defaults = cls()

        def _get(column: str) -> float:
            value: Any = last.get(column, getattr(defaults, column))
            return float(value) if value is not None else math.nan

        return cls(
            ma5=_get("ma5"),
            ma20=_get("ma20"),
            ma60=_get("ma60"),
            k=_get("k"),
            d=_get("d"),
            osc=_get("osc"),
            rsi=_get("rsi"),
            foreign_flow=foreign_flow,
            trust_flow=trust_flow,
        )


def score(latest: LatestIndicators, fundamentals: Fundamentals | None = None) -> int:
    """종합 점수 [60, 99]. NaN이 낀 조건은 거짓으로 처리된다.

    NaN을 0으로 보지 않으므로, 봉이 5~19개라 ma20이 아직 NaN이면
    ma5 > ma20 가점(+10)은 붙지 않는다 (0과 비교해 가점을 주는 방식과 다름).
    """
    fundamentals = fundamentals or Fundamentals()
    total = BASE_SCORE

    if 0 < fundamentals.pe < 15:
        total += 15
    if fundamentals.dividend_yield > 4:
        total += 10
    if latest.ma5 > latest.ma20:
        total += 10
    if latest.k > latest.d and latest.k < 80:
        total += 10
    if latest.osc > 0:
        total += 5
    if latest.foreign_flow > 0:
        total += 5
    if latest.trust_flow > 0:
        total += 5

    return min(MAX_SCORE, total)
