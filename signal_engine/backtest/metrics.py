"""
백테스트 성과 지표 계산 모듈.

[ 역할 ]
    시뮬레이션이 끝난 Portfolio를 받아 성과 지표를 계산.
    calculate_result() 함수가 핵심.

[ 계산하는 지표 ]
    - ROI (%)       : 누적 손익 / 초기 자금 × 100, 소수점 1자리 (강제청산 평가손익 포함)
    - 승률 (%)      : 수익 거래 / 청산 거래 × 100, 정수 (거래 없으면 0)
    - 거래 횟수     : 신호로 청산된 거래 수 (마지막 강제청산은 제외)
    - 평균 수익/손실, 수익 팩터 (참고용)

[ 호출하는 곳 ]
    - backtest/engine.py::backtest() 완료 시 호출
"""

from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd

from signal_engine.data.portfolio import Portfolio, TradeRecord
from signal_engine.utils.numeric import round_half_up, round_price


@dataclass
class BacktestResult:
    """백테스트 결과. 매 실행마다 새로 계산되며 저장하지 않는다."""
    roi: float = 0.0                  # 순수익률 (%), 소수점 1자리
    win_rate: int = 0                 # 승률 (%), 정수
    trade_count: int = 0              # 청산 거래 수
    history: pd.DataFrame = field(default_factory=pd.DataFrame)  # buy_signal/sell_signal 열이 붙은 지표 DataFrame
    total_profit: float = 0.0         # 누적 손익 (원 단위 금액)
    wins: int = 0                     # 수익 거래 수
    trades: list[TradeRecord] = field(default_factory=list)
    avg_profit: float = 0.0           # 수익 거래 평균 이익
    avg_loss: float = 0.0             # 손실 거래 평균 손실
    profit_factor: float = 0.0        # 총이익 / 총손실

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환 (history DataFrame 제외)."""
        return {
            "roi": self.roi,
            "win_rate": self.win_rate,
            "trade_count": self.trade_count,
            "total_profit": self.total_profit,
            "wins": self.wins,
            "avg_profit": self.avg_profit,
            "avg_loss": self.avg_loss,
            "profit_factor": self.profit_factor,
            "trades": [asdict(t) for t in self.trades],
        }

    def summary(self) -> str:
        """성과 요약 문자열."""
        lines = [
            "=" * 50,
            "백테스트 성과 리포트",
            "=" * 50,
            f"순수익률(ROI):   {self.roi:>10.1f}%",
            f"누적 손익:       {self.total_profit:>10,.0f}",
            "-" * 50,
            f"총 거래 횟수:    {self.trade_count:>10d}",
            f"승률:            {self.win_rate:>10d}%",
            f"수익 거래:       {self.wins:>10d}",
            f"평균 수익:       {self.avg_profit:>10,.0f}",
            f"평균 손실:       {self.avg_loss:>10,.0f}",
            f"수익 팩터:       {self.profit_factor:>10.2f}",
            "=" * 50,
        ]
        return "\n".join(lines)


def calculate_result(
    portfolio: Portfolio,
    history: pd.DataFrame,
) -> BacktestResult:
    """성과 지표 계산. engine.py에서 시뮬레이션(강제청산 포함) 완료 후 호출됨."""
    trades = list(portfolio.trade_history)
    result = BacktestResult(history=history, trades=trades)

    result.total_profit = portfolio.total_profit
    result.roi = round_price(portfolio.total_profit / portfolio.initial_capital * 100, 1)
    result.trade_count = portfolio.trade_count
    result.wins = sum(1 for t in trades if t.is_win)

    if trades:
        result.win_rate = round_half_up(result.wins / result.trade_count * 100)

        winners = [t.profit for t in trades if t.profit > 0]
        losers = [t.profit for t in trades if t.profit <= 0]
        if winners:
            result.avg_profit = sum(winners) / len(winners)
        if losers:
            result.avg_loss = sum(losers) / len(losers)

        total_gain = sum(winners)
        total_loss = abs(sum(losers))
        result.profit_factor = total_gain / total_loss if total_loss > 0 else float("inf")

    return result
