"""
종목 분석 파이프라인.

[ 역할 ]
    원천 가격/법인 레코드 + 기본 정보를 받아
    정규화 → 지표 → 법인 병합 → 점수까지 한 번에 계산.
    백테스트는 같은 history를 받아 별도로 실행한다 (backtest/engine.py).

[ 데이터 흐름 ]
    price_records ──normalize()──▶ 캔들 DataFrame
                  ──compute_indicators()──▶ 지표 DataFrame
    chip_records  ──merge_chips()──▶ 지표 + 법인 DataFrame, 최근 30일 요약
    LatestIndicators.from_frame() + Fundamentals ──score()──▶ 점수

[ 호출하는 곳 ]
    - run_analysis.py
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import pandas as pd

from signal_engine.core.data_provider import Fundamentals
from signal_engine.data.chips import ChipDay, merge_chips
from signal_engine.data.normalizer import normalize
from signal_engine.indicators.scoring import LatestIndicators, score
from signal_engine.indicators.technical import compute_indicators
from signal_engine.utils.config import IndicatorConfig

logger = logging.getLogger("signal_engine.pipeline")

# 표시 기간 → 최근 봉 수 (None = 전체)
TIMEFRAMES: dict[str, Optional[int]] = {
    "3m": 65,
    "6m": 130,
    "1y": 260,
    "5y": None,
}


@dataclass
class StockAnalysis:
    """analyze()의 반환값. 최신 지표 요약 + 전체 history."""
    latest: LatestIndicators
    fundamentals: Fundamentals
    score: int
    history: pd.DataFrame = field(default_factory=pd.DataFrame)
    chip_history: list[ChipDay] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """history를 제외한 요약 딕셔너리."""
        return {
            "ma5": self.latest.ma5,
            "ma20": self.latest.ma20,
            "ma60": self.latest.ma60,
            "k": self.latest.k,
            "d": self.latest.d,
            "osc": self.latest.osc,
            "rsi": self.latest.rsi,
            "foreign_buy": self.latest.foreign_flow,
            "trust_buy": self.latest.trust_flow,
            "score": self.score,
            "bars": len(self.history),
            "chip_history": [c.to_dict() for c in self.chip_history],
        }


def analyze(
    price_records: Iterable[Any] | None,
    chip_records: Iterable[Any] | None = None,
    fundamentals: Fundamentals | None = None,
    config: IndicatorConfig | None = None,
) -> StockAnalysis:
    """종목 1개 분석. 빈 입력이어도 중립값으로 결과를 만든다."""
    fundamentals = fundamentals or Fundamentals()

    candles = normalize(price_records)
    history = compute_indicators(candles, config)
    history, chip_history = merge_chips(history, chip_records)

    latest = LatestIndicators.from_frame(history, chip_history, fundamentals)
    total = score(latest, fundamentals)

    logger.info(f"분석 완료: {len(history)}봉, 법인 {len(chip_history)}일, 점수 {total}")
    return StockAnalysis(
        latest=latest,
        fundamentals=fundamentals,
        score=total,
        history=history,
        chip_history=chip_history,
    )


def slice_timeframe(frame: pd.DataFrame, timeframe: str = "6m") -> pd.DataFrame:
    """표시 기간에 맞게 최근 N봉만 잘라 반환.

    Raises:
        ValueError: 알 수 없는 기간
    """
    if timeframe not in TIMEFRAMES:
        available = ", ".join(TIMEFRAMES)
        raise ValueError(f"알 수 없는 기간: '{timeframe}'. 사용 가능: {available}")
    bars = TIMEFRAMES[timeframe]
    if bars is None:
        return frame.copy()
    return frame.tail(min(len(frame), bars)).copy()
