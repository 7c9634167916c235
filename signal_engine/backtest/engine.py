"""
백테스팅 엔진 모듈.

[ 역할 ]
    지표가 붙은 캔들 DataFrame에 전략 규칙을 봉 단위로 재생하여
    가상 매매를 시뮬레이션하고 성과를 측정. 시스템의 핵심 실행 루프를 담당.

[ 실행 흐름 ]
    backtest() 호출 시:
        1. 봉 수가 min_history(60) 미만이면 시뮬레이션 없이 0 결과 반환
        2. warmup_index(20)번째 봉부터 마지막 봉까지 순서대로
           → strategy.generate_signal(today, prev, 보유 여부)
           → ENTER/EXIT이면 portfolio.open_position()/close_position()
           → 해당 봉에 매수/매도 마커(buy_signal/sell_signal) 기록
        3. 끝까지 보유 중이면 마지막 종가로 평가 (마커·거래 수·승수 미반영)
        4. metrics.calculate_result()로 성과 지표 계산

[ 상태 머신 ]
    flat ──진입──▶ in-position ──청산──▶ flat
    포지션은 항상 1개. 순서 의존적 누적이므로 구간 병렬화 불가.

[ 의존성 ]
    - strategies/ (전략 규칙, StrategyType으로 선택)
    - data/portfolio.py::Portfolio (포지션/거래기록 관리)
    - backtest/metrics.py::calculate_result() (성과 계산)

[ 호출하는 곳 ]
    - run_analysis.py
"""

import logging

import numpy as np
import pandas as pd

from signal_engine.backtest.metrics import BacktestResult, calculate_result
from signal_engine.core.trading_strategy import Direction, SignalType, StrategyType
from signal_engine.data.portfolio import Portfolio
from signal_engine.strategies import create_strategy

logger = logging.getLogger("signal_engine.backtest")

INITIAL_CAPITAL = 100_000
MIN_HISTORY = 60
WARMUP_INDEX = 20

# 마커 위치 (표시 전용, 통계에는 영향 없음)
BUY_MARKER_RATIO = 0.96    # 저가 아래
SELL_MARKER_RATIO = 1.04   # 고가 위


def _with_marker_columns(frame: pd.DataFrame) -> pd.DataFrame:
    history = frame.copy()
    history["buy_signal"] = np.nan
    history["sell_signal"] = np.nan
    return history


def backtest(
    frame: pd.DataFrame,
    strategy: StrategyType | str = StrategyType.LONG,
    initial_capital: float = INITIAL_CAPITAL,
    min_history: int = MIN_HISTORY,
    warmup_index: int = WARMUP_INDEX,
    params: dict | None = None,
) -> BacktestResult:
    """전략 백테스트 실행.

    Args:
        frame: compute_indicators() 결과 (ma5, ma20, k, d, rsi 열 필요)
        strategy: StrategyType 또는 이름 ("long", "short", "value")
        initial_capital: 초기 자금 (SHORT 명목 금액, ROI 분모 겸용)
        min_history: 최소 봉 수. 미만이면 0 결과
        warmup_index: 시뮬레이션 시작 봉 인덱스
        params: 전략 파라미터 오버라이드

    Returns:
        BacktestResult: ROI, 승률, 거래 수, 마커가 붙은 history

    Raises:
        ValueError: 알 수 없는 전략 이름
    """
    rule = create_strategy(strategy, params=params)
    history = _with_marker_columns(frame)

    if len(history) < min_history:
        logger.debug(f"데이터 부족 ({len(history)}봉 < {min_history}봉): 백테스트 생략")
        return BacktestResult(history=history)

    portfolio = Portfolio(initial_capital)
    bars = history.to_dict("records")
    buy_markers: dict[int, float] = {}
    sell_markers: dict[int, float] = {}

    for i in range(max(warmup_index, 1), len(bars)):
        today = bars[i]
        prev = bars[i - 1]
        date = str(today.get("full_date", i))

        signal = rule.generate_signal(today, prev, portfolio.position.is_open)

        if signal.signal_type == SignalType.ENTER:
            if portfolio.open_position(rule.direction, float(today["close"]), date, signal.reason):
                if rule.direction is Direction.LONG:
                    buy_markers[i] = today["low"] * BUY_MARKER_RATIO
                else:
                    sell_markers[i] = today["high"] * SELL_MARKER_RATIO
                logger.debug(f"[{date}] {rule.direction.value} 진입 @ {today['close']:,.2f} ({signal.reason})")

        elif signal.signal_type == SignalType.EXIT:
            direction = portfolio.position.direction
            record = portfolio.close_position(float(today["close"]), date, signal.reason)
            if record is not None:
                if direction is Direction.LONG:
                    sell_markers[i] = today["high"] * SELL_MARKER_RATIO
                else:
                    buy_markers[i] = today["low"] * BUY_MARKER_RATIO
                logger.debug(f"[{date}] {record.side} 청산 @ {record.exit_price:,.2f} 손익: {record.profit:,.0f} ({signal.reason})")

    if portfolio.position.is_open:
        last_close = float(bars[-1]["close"])
        profit = portfolio.mark_to_market(last_close)
        logger.debug(f"미청산 포지션 평가 @ {last_close:,.2f} 손익: {profit:,.0f}")

    if buy_markers:
        history.loc[history.index[list(buy_markers)], "buy_signal"] = list(buy_markers.values())
    if sell_markers:
        history.loc[history.index[list(sell_markers)], "sell_signal"] = list(sell_markers.values())

    result = calculate_result(portfolio, history)
    logger.info(
        f"백테스트 완료 [{rule.name}] ROI: {result.roi:.1f}% "
        f"승률: {result.win_rate}% 거래: {result.trade_count}회"
    )
    return result
