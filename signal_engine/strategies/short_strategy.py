"""
추세 추종 공매도(SHORT) 전략 구현.

[ 역할 ]
    long_strategy.py의 조건을 뒤집은 공매도 전략.
    포지션 크기는 주식 수가 아니라 명목 금액(notional) 기준으로 손익을 계산한다.

[ 진입/청산 조건 ]
    진입: MA5 < MA20  그리고  어제 K > D  그리고  오늘 K < D
    청산: 어제 K < D  그리고  오늘 K > D
"""

from typing import Any

from signal_engine.core.trading_strategy import Bar, Direction, RuleStrategy, StrategyType, bar_value
from signal_engine.strategies import register
from signal_engine.strategies.long_strategy import kd_dead_cross, kd_golden_cross


@register(StrategyType.SHORT)
class ShortStrategy(RuleStrategy):
    """MA 역배열 + KD 데드크로스 공매도 전략."""

    direction = Direction.SHORT

    DEFAULT_PARAMS = {
        "fast_ma": "ma5",
        "slow_ma": "ma20",
    }

    def __init__(self, params: dict[str, Any] | None = None):
        merged = {**self.DEFAULT_PARAMS, **(params or {})}
        super().__init__(params=merged)

    def should_enter(self, today: Bar, prev: Bar) -> tuple[bool, str]:
        fast = bar_value(today, self.params["fast_ma"])
        slow = bar_value(today, self.params["slow_ma"])
        if not fast < slow:
            return False, "이평 정배열"
        if not kd_dead_cross(today, prev):
            return False, "KD 데드크로스 없음"
        return True, f"이평 역배열 + KD 데드크로스 (K: {bar_value(today, 'k'):.2f})"

    def should_exit(self, today: Bar, prev: Bar) -> tuple[bool, str]:
        if kd_golden_cross(today, prev):
            return True, f"KD 골든크로스 환매수 (K: {bar_value(today, 'k'):.2f})"
        return False, "홀딩"
