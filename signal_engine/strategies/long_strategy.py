"""
추세 추종 매수(LONG) 전략 구현.

[ 역할 ]
    core/trading_strategy.py::RuleStrategy의 구현체.
    "단기 이평이 장기 이평 위에 있을 때 KD 골든크로스가 나오면 매수,
     KD 데드크로스가 나오면 전량 매도"

[ 진입/청산 조건 ]
    진입: MA5 > MA20  그리고  어제 K < D  그리고  오늘 K > D
    청산: 어제 K > D  그리고  오늘 K < D

[ 파라미터 ]
    fast_ma: 단기 이평 열 이름 (기본 ma5)
    slow_ma: 장기 이평 열 이름 (기본 ma20)
"""

from typing import Any

from signal_engine.core.trading_strategy import Bar, Direction, RuleStrategy, StrategyType, bar_value
from signal_engine.strategies import register


def kd_golden_cross(today: Bar, prev: Bar) -> bool:
    """어제 K < D 에서 오늘 K > D 로 전환."""
    return bar_value(prev, "k") < bar_value(prev, "d") and bar_value(today, "k") > bar_value(today, "d")


def kd_dead_cross(today: Bar, prev: Bar) -> bool:
    """어제 K > D 에서 오늘 K < D 로 전환."""
    return bar_value(prev, "k") > bar_value(prev, "d") and bar_value(today, "k") < bar_value(today, "d")


@register(StrategyType.LONG)
class LongStrategy(RuleStrategy):
    """MA 정배열 + KD 골든크로스 매수 전략."""

    direction = Direction.LONG

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
        if not fast > slow:
            return False, f"이평 역배열 ({self.params['fast_ma']}: {fast:.2f}, {self.params['slow_ma']}: {slow:.2f})"
        if not kd_golden_cross(today, prev):
            return False, "KD 골든크로스 없음"
        return True, f"이평 정배열 + KD 골든크로스 (K: {bar_value(today, 'k'):.2f}, D: {bar_value(today, 'd'):.2f})"

    def should_exit(self, today: Bar, prev: Bar) -> tuple[bool, str]:
        if kd_dead_cross(today, prev):
            return True, f"KD 데드크로스 (K: {bar_value(today, 'k'):.2f}, D: {bar_value(today, 'd'):.2f})"
        return False, "홀딩"
