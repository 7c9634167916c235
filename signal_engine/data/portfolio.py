"""
시뮬레이션 포트폴리오 관리 모듈.

[ 역할 ]
    현금, 단일 포지션(Position), 청산 거래 기록(TradeRecord)을 통합 관리.
    백테스트 엔진이 진입/청산 시 이 클래스를 통해 상태를 갱신.

[ 포지션 크기 ]
    LONG  - floor(현금 / 진입가) 주 매수, 현금 차감 → 청산 시 주식 수 × 청산가 입금
    SHORT - 명목 금액(initial_capital) 기준. 손익 = 명목 × (진입가 - 청산가) / 진입가
            현금은 건드리지 않고 누적 손익에만 반영

[ 주요 클래스 ]
    Position    - 현재 보유 포지션 (방향/수량/진입가)
    TradeRecord - 청산된 거래 1건 (손익 포함)
    Portfolio   - 현금 + 포지션 + 거래기록 + 누적 손익

[ 호출하는 곳 ]
    - backtest/engine.py::backtest()에서 open_position()/close_position()/mark_to_market()
    - backtest/metrics.py에서 total_profit, trade_history로 성과 계산
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from signal_engine.core.trading_strategy import Direction


@dataclass
class Position:
    """현재 포지션. direction이 None이면 무포지션(flat)."""
    direction: Optional[Direction] = None
    quantity: int = 0           # LONG: 주식 수, SHORT: 1 (명목 포지션)
    entry_price: float = 0.0
    entry_date: str = ""
    entry_reason: str = ""

    @property
    def is_open(self) -> bool:
        return self.direction is not None

    def reset(self) -> None:
        """포지션 초기화."""
        self.direction = None
        self.quantity = 0
        self.entry_price = 0.0
        self.entry_date = ""
        self.entry_reason = ""


@dataclass
class TradeRecord:
    """청산된 거래 1건. metrics.py에서 승률/수익 계산에 사용됨."""
    side: str               # "long" or "short"
    entry_date: str
    exit_date: str
    entry_price: float
    exit_price: float
    quantity: int
    profit: float = 0.0
    profit_rate: float = 0.0  # 수익률 %
    reason: str = ""          # 청산 사유 (로깅용)

    @property
    def is_win(self) -> bool:
        return self.profit > 0


class Portfolio:
    """단일 종목 시뮬레이션 포트폴리오.

    백테스트 1회마다 새로 만들며, 외부와 공유하지 않는다.
    """

    def __init__(self, initial_capital: float):
        self.initial_capital = initial_capital
        self.cash = initial_capital
        self.notional = initial_capital                 # SHORT 명목 금액
        self.position = Position()
        self.trade_history: list[TradeRecord] = []
        self.total_profit: float = 0.0                  # 실현 + 강제청산 평가손익

    @property
    def trade_count(self) -> int:
        return len(self.trade_history)

    def open_position(
        self,
        direction: Direction,
        price: float,
        date: str = "",
        reason: str = "",
    ) -> bool:
        """포지션 개시. 진입가가 0 이하이거나 살 수 있는 주식이 없으면 False."""
        if self.position.is_open or not price > 0:
            return False

        if direction is Direction.LONG:
            quantity = math.floor(self.cash / price)
            if quantity <= 0:
                return False
            self.cash -= quantity * price
        else:
            quantity = 1

        self.position.direction = direction
        self.position.quantity = quantity
        self.position.entry_price = price
        self.position.entry_date = date
        self.position.entry_reason = reason
        return True

    def _profit_at(self, price: float) -> float:
        """현재 포지션을 price에 청산했을 때의 손익."""
        position = self.position
        if position.direction is Direction.SHORT:
            return self.notional * ((position.entry_price - price) / position.entry_price)
        return (price - position.entry_price) * position.quantity

    def close_position(self, price: float, date: str = "", reason: str = "") -> Optional[TradeRecord]:
        """포지션 청산. 거래 기록을 남기고 누적 손익에 반영."""
        position = self.position
        if not position.is_open:
            return None

        profit = self._profit_at(price)
        if position.direction is Direction.LONG:
            self.cash += position.quantity * price
        self.total_profit += profit

        record = TradeRecord(
            side=position.direction.value,
            entry_date=position.entry_date,
            exit_date=date,
            entry_price=position.entry_price,
            exit_price=price,
            quantity=position.quantity,
            profit=profit,
            profit_rate=profit / (position.entry_price * position.quantity) * 100
            if position.direction is Direction.LONG
            else profit / self.notional * 100,
            reason=reason,
        )
        self.trade_history.append(record)
        position.reset()
        return record

    def mark_to_market(self, price: float) -> float:
        """남은 포지션을 price로 평가해 누적 손익에만 반영 (거래 기록/승수 미반영)."""
        if not self.position.is_open:
            return 0.0
        profit = self._profit_at(price)
        self.total_profit += profit
        return profit
