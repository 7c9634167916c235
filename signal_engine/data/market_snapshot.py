"""
시장 전체 스냅샷 구성 모듈.

[ 역할 ]
    증권거래소 일별 전종목 데이터 3종을 종목코드 기준으로 합쳐
    MarketSnapshot 리스트를 만든다. 네트워크 호출은 하지 않는다 (원천 행은 외부에서 공급).

[ 입력 (TWSE OpenAPI 필드명) ]
    day_rows            STOCK_DAY_ALL : Code, Name, ClosingPrice, Change, TradeVolume,
                                        OpeningPrice, HighestPrice, LowestPrice
    valuation_rows      BWIBBU_ALL    : Code, PEratio, DividendYield, PBratio
    institutional_rows  T86_ALL       : Code, ForeignInvestorsNetBuySell, InvestmentTrustNetBuySell

[ 규칙 ]
    - 숫자가 아닌 값은 0
    - 등락률 = 등락 / (종가 - 등락) × 100 (전일가 > 0일 때만, 소수점 2자리)
    - 법인 순매수는 張 단위로 환산
    - 4자리 종목코드만 남긴다 (ETF 파생상품, 워런트 제외)

[ 호출하는 곳 ]
    - indicators/screener.py (조건 검색)
    - run_analysis.py (기본 정보 → Fundamentals)
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from signal_engine.core.data_provider import Fundamentals
from signal_engine.utils.numeric import round_price, to_float, to_int, to_lots

logger = logging.getLogger("signal_engine.data")


@dataclass
class MarketSnapshot:
    """종목별 당일 시세 + 밸류에이션 + 법인 순매수."""
    code: str
    name: str = ""
    price: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    volume: int = 0          # 주 단위
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    pe: float = 0.0
    dividend_yield: float = 0.0
    pb: float = 0.0
    foreign_net: int = 0     # 張
    trust_net: int = 0       # 張

    def fundamentals(self) -> Fundamentals:
        return Fundamentals(
            pe=self.pe,
            dividend_yield=self.dividend_yield,
            pb=self.pb,
            foreign_net=self.foreign_net,
            trust_net=self.trust_net,
        )


def build_market_snapshot(
    day_rows: Iterable[dict[str, Any]],
    valuation_rows: Iterable[dict[str, Any]] = (),
    institutional_rows: Iterable[dict[str, Any]] = (),
) -> list[MarketSnapshot]:
    """3종 원천 행 → 종목별 MarketSnapshot (입력 순서 유지)."""
    market: dict[str, MarketSnapshot] = {}

    for row in day_rows:
        code = row.get("Code")
        if not code:
            continue
        snapshot = MarketSnapshot(
            code=code,
            name=row.get("Name", ""),
            price=to_float(row.get("ClosingPrice")),
            change=to_float(row.get("Change")),
            volume=to_int(row.get("TradeVolume")),
            open=to_float(row.get("OpeningPrice")),
            high=to_float(row.get("HighestPrice")),
            low=to_float(row.get("LowestPrice")),
        )
        prev_price = snapshot.price - snapshot.change
        if prev_price > 0:
            snapshot.change_percent = round_price(snapshot.change / prev_price * 100)
        market[code] = snapshot

    for row in valuation_rows:
        snapshot = market.get(row.get("Code"))
        if snapshot is None:
            continue
        snapshot.pe = to_float(row.get("PEratio"))
        snapshot.dividend_yield = to_float(row.get("DividendYield"))
        snapshot.pb = to_float(row.get("PBratio"))

    for row in institutional_rows:
        snapshot = market.get(row.get("Code"))
        if snapshot is None:
            continue
        snapshot.foreign_net = to_lots(to_int(row.get("ForeignInvestorsNetBuySell")))
        snapshot.trust_net = to_lots(to_int(row.get("InvestmentTrustNetBuySell")))

    result = [s for s in market.values() if len(s.code) == 4]
    logger.debug(f"스냅샷 {len(market)}종목 중 {len(result)}종목 (4자리 코드)")
    return result
