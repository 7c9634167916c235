"""
조건 검색(스크리너) 모듈.

[ 역할 ]
    MarketSnapshot 리스트에서 전략별 프리셋 또는 사용자 필터로 종목을 고른다.

[ 프리셋 ] (최대 50종목)
    long  : 등락 > 0, 배당수익률 > 3, 0 < PER < 25
    short : 등락 < 0, PER > 40 또는 PER < 0
    value : 0 < PER < 15, 배당수익률 > 5, PBR < 1.5

[ 사용자 필터 ] (최대 100종목)
    ScreenFilters 참고. 거래량 조건은 張 단위 (volume / 1000).

[ 호출하는 곳 ]
    - run_analysis.py --screen
"""

from dataclasses import dataclass
from typing import Callable

from signal_engine.data.market_snapshot import MarketSnapshot

PRESET_LIMIT = 50
CUSTOM_LIMIT = 100


def is_long_candidate(stock: MarketSnapshot) -> bool:
    return stock.change > 0 and stock.dividend_yield > 3 and 0 < stock.pe < 25


def is_short_candidate(stock: MarketSnapshot) -> bool:
    return stock.change < 0 and (stock.pe > 40 or stock.pe < 0)


def is_value_candidate(stock: MarketSnapshot) -> bool:
    return 0 < stock.pe < 15 and stock.dividend_yield > 5 and stock.pb < 1.5


PRESETS: dict[str, Callable[[MarketSnapshot], bool]] = {
    "long": is_long_candidate,
    "short": is_short_candidate,
    "value": is_value_candidate,
}


@dataclass
class ScreenFilters:
    """사용자 정의 필터. 기본값은 화면 초기값과 동일."""
    max_pe: float = 30
    min_yield: float = 2
    max_pb: float = 5
    min_volume: float = 500      # 張
    min_price: float = 0
    max_price: float = 2000
    trend: str = "all"           # all | bullish | bearish
    min_foreign: int = 0
    min_trust: int = 0

    def matches(self, stock: MarketSnapshot) -> bool:
        if not (0 < stock.pe <= self.max_pe):
            return False
        if stock.dividend_yield < self.min_yield:
            return False
        if not (0 < stock.pb <= self.max_pb):
            return False
        if stock.volume / 1000 < self.min_volume:
            return False
        if not (self.min_price <= stock.price <= self.max_price):
            return False
        if self.trend == "bullish" and not stock.change > 0:
            return False
        if self.trend == "bearish" and not stock.change < 0:
            return False
        return stock.foreign_net >= self.min_foreign and stock.trust_net >= self.min_trust


def screen(
    stocks: list[MarketSnapshot],
    preset: str | None = None,
    filters: ScreenFilters | None = None,
) -> list[MarketSnapshot]:
    """프리셋 이름이 있으면 프리셋, 없으면 사용자 필터로 검색.

    Raises:
        ValueError: 알 수 없는 프리셋 이름
    """
    if preset is not None:
        if preset not in PRESETS:
            available = ", ".join(PRESETS)
            raise ValueError(f"알 수 없는 프리셋: '{preset}'. 사용 가능: {available}")
        return [s for s in stocks if PRESETS[preset](s)][:PRESET_LIMIT]

    filters = filters or ScreenFilters()
    return [s for s in stocks if filters.matches(s)][:CUSTOM_LIMIT]


def count_presets(stocks: list[MarketSnapshot]) -> dict[str, int]:
    """프리셋별 해당 종목 수 (제한 없이)."""
    return {name: sum(1 for s in stocks if rule(s)) for name, rule in PRESETS.items()}
