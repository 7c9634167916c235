"""
RSI 역추세(VALUE) 전략 구현.

[ 역할 ]
    과매도 구간 진입 시 매수, 과매수 구간 진입 시 매도.
    포지션 크기는 LONG 전략과 동일 (가용 자금 전액, 정수 주).

[ 진입/청산 조건 ]
    진입: 어제 RSI >= 30  그리고  오늘 RSI < 30
    청산: 어제 RSI <= 70  그리고  오늘 RSI > 70
    RSI 열이 없거나 값이 NaN 또는 0이면 중립값 50으로 본다.
"""

import math
from typing import Any

from signal_engine.core.trading_strategy import Bar, Direction, RuleStrategy, StrategyType, bar_value
from signal_engine.strategies import register


@register(StrategyType.VALUE)
class ValueStrategy(RuleStrategy):
    """RSI 과매도 매수 / 과매수 매도 전략."""

    direction = Direction.LONG

    DEFAULT_PARAMS = {
        "oversold": 30.0,
        "overbought": 70.0,
    }

    def __init__(self, params: dict[str, Any] | None = None):
        merged = {**self.DEFAULT_PARAMS, **(params or {})}
        super().__init__(params=merged)

    @staticmethod
    def _rsi(bar: Bar) -> float:
        rsi = bar_value(bar, "rsi", default=50.0)
        return 50.0 if math.isnan(rsi) or rsi == 0 else rsi

    def should_enter(self, today: Bar, prev: Bar) -> tuple[bool, str]:
        oversold = float(self.params["oversold"])
        rsi, prev_rsi = self._rsi(today), self._rsi(prev)
        if rsi < oversold and prev_rsi >= oversold:
            return True, f"RSI 과매도 진입 ({prev_rsi:.1f} → {rsi:.1f})"
        return False, f"RSI {rsi:.1f}"

    def should_exit(self, today: Bar, prev: Bar) -> tuple[bool, str]:
        overbought = float(self.params["overbought"])
        rsi, prev_rsi = self._rsi(today), self._rsi(prev)
        if rsi > overbought and prev_rsi <= overbought:
            return True, f"RSI 과매수 진입 ({prev_rsi:.1f} → {rsi:.1f})"
        return False, f"RSI {rsi:.1f}"
