"""
=============================================================================
주식 지표 & 백테스트 엔진 (Signal Engine)
=============================================================================

[ 시스템 전체 구조 ]

    run_analysis.py (진입점)
         │
         ├── utils/config.py        ← config.yaml 설정 로드
         ├── utils/logger.py        ← 로깅
         ├── data/file_provider.py  ← JSON/CSV 원천 레코드 로드
         │
         ├── pipeline.py            ← 정규화 → 지표 → 법인 병합 → 점수
         │     ├── data/normalizer.py        (원천 레코드 → 캔들)
         │     ├── indicators/technical.py   (MA, 볼린저, KD, MACD, RSI)
         │     ├── data/chips.py             (법인 순매수 집계/병합)
         │     └── indicators/scoring.py     (종합 점수 60~99)
         │
         └── backtest/engine.py     ← 전략 백테스트
               │
               ├── strategies/          ← LONG / SHORT / VALUE 진입·청산 규칙
               ├── data/portfolio.py    ← 포지션/거래기록 관리
               └── backtest/metrics.py  ← ROI, 승률, 거래 수


[ 데이터 흐름 ]

    1. 원천 가격 레코드 (과거 → 최신) → normalize() → 캔들 DataFrame
    2. compute_indicators() → 지표 열 추가 (새 DataFrame, 입력 불변)
    3. merge_chips() → 법인 순매수 열 추가 + 최근 30일 요약
    4. score() 와 backtest() 는 같은 지표 DataFrame을 각자 독립적으로 사용


[ 엔진 밖 (외부 협력자) ]

    시세/법인 데이터 수집, HTTP 처리, 관심종목 저장, 차트 렌더링
"""

from signal_engine.backtest.engine import backtest
from signal_engine.backtest.metrics import BacktestResult
from signal_engine.core.data_provider import Candle, Fundamentals
from signal_engine.core.trading_strategy import StrategyType
from signal_engine.data.chips import ChipDay, merge_chips
from signal_engine.data.normalizer import normalize
from signal_engine.indicators.scoring import LatestIndicators, score
from signal_engine.indicators.technical import compute_indicators
from signal_engine.pipeline import StockAnalysis, analyze, slice_timeframe

__all__ = [
    "BacktestResult",
    "Candle",
    "ChipDay",
    "Fundamentals",
    "LatestIndicators",
    "StockAnalysis",
    "StrategyType",
    "analyze",
    "backtest",
    "compute_indicators",
    "merge_chips",
    "normalize",
    "score",
    "slice_timeframe",
]
