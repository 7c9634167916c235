"""
매매 전략 추상 클래스 정의.

[ 역할 ]
    백테스트용 진입/청산 규칙의 인터페이스를 정의.
    오늘 봉과 어제 봉의 지표값을 받아 진입/청산/홀드 시그널을 생성.

[ 전략 종류 (닫힌 집합) ]
    StrategyType.LONG   → strategies/long_strategy.py  (MA5>MA20 + KD 골든크로스 매수)
    StrategyType.SHORT  → strategies/short_strategy.py (MA5<MA20 + KD 데드크로스 공매도)
    StrategyType.VALUE  → strategies/value_strategy.py (RSI 30 하향 돌파 매수, 70 상향 돌파 매도)

[ 호출하는 곳 ]
    - backtest/engine.py::backtest()에서 봉마다 generate_signal() 호출

[ 데이터 흐름 ]
    today/prev 지표 행(dict) + 보유 여부 → generate_signal() → Signal 반환
    Signal.signal_type이 ENTER/EXIT이면 엔진이 포지션 개시/청산
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

Bar = Mapping[str, Any]


class StrategyType(Enum):
    """백테스트 전략 종류."""
    LONG = "long"
    SHORT = "short"
    VALUE = "value"


class Direction(Enum):
    """포지션 방향. VALUE 전략도 매수(LONG) 방향."""
    LONG = "long"
    SHORT = "short"


class SignalType(Enum):
    """전략이 반환하는 시그널 종류."""
    ENTER = "enter"
    EXIT = "exit"
    HOLD = "hold"


@dataclass
class Signal:
    """generate_signal()의 반환값. 엔진에 전달되어 포지션 변경으로 변환됨."""
    signal_type: SignalType
    reason: str = ""  # 시그널 발생 사유 (로깅용)


def bar_value(bar: Bar, column: str, default: float = math.nan) -> float:
    """지표 행에서 값 읽기. 열이 없거나 None이면 default."""
    value = bar.get(column)
    if value is None:
        return default
    return float(value)


class RuleStrategy(ABC):
    """규칙 기반 전략 추상 클래스.

    새 전략을 만들려면 이 클래스를 상속받아 2개 메서드를 구현하면 된다:
    - should_enter(): 진입 조건 판단
    - should_exit():  청산 조건 판단
    """

    strategy_type: StrategyType
    direction: Direction = Direction.LONG

    def __init__(self, params: dict[str, Any] | None = None):
        self.name = self.strategy_type.value
        self.params = params or {}

    @abstractmethod
    def should_enter(self, today: Bar, prev: Bar) -> tuple[bool, str]:
        """진입 조건 판단.

        Returns:
            (진입 여부, 사유)
        """
        ...

    @abstractmethod
    def should_exit(self, today: Bar, prev: Bar) -> tuple[bool, str]:
        """청산 조건 판단.

        Returns:
            (청산 여부, 사유)
        """
        ...

    def generate_signal(self, today: Bar, prev: Bar, in_position: bool) -> Signal:
        """보유 중이면 청산만, 아니면 진입만 판단."""
        if in_position:
            exit_now, reason = self.should_exit(today, prev)
            if exit_now:
                return Signal(SignalType.EXIT, reason)
            return Signal(SignalType.HOLD, reason)

        enter, reason = self.should_enter(today, prev)
        if enter:
            return Signal(SignalType.ENTER, reason)
        return Signal(SignalType.HOLD, reason)
