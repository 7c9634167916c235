"""
주가 데이터 모델 및 데이터 제공 추상 클래스 정의.

[ 역할 ]
    엔진 전체가 공유하는 기본 레코드(Candle, Fundamentals)와
    원천 레코드(가격/법인 매매)를 공급하는 인터페이스를 정의.
    데이터 소스(파일, API, DB 등)에 독립적으로 엔진에 데이터 공급.

[ 구현체 ]
    - data/file_provider.py::FileDataProvider  (JSON/CSV 파일 기반, CLI용)
    - 향후: FinMind / TWSE API 연동 구현체 (엔진 범위 밖)

[ 호출하는 곳 ]
    - data/normalizer.py가 원천 가격 레코드를 Candle로 변환
    - indicators/scoring.py가 Fundamentals로 점수 계산
    - run_analysis.py가 FileDataProvider로 원천 레코드 로드
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping

from signal_engine.utils.numeric import to_float, to_int

UP_COLOR = "#f87171"     # 상승 봉 (대만 시장 관례: 빨강)
DOWN_COLOR = "#34d399"   # 하락 봉 (초록)

CANDLE_COLUMNS = [
    "day", "full_date", "open", "high", "low", "close", "volume", "is_up", "color",
]


@dataclass(frozen=True)
class Candle:
    """단일 봉(캔들) 데이터. 한 번 만들어지면 변경되지 않는다.

    low <= min(open, close) <= max(open, close) <= high 가 정상이지만,
    원천 데이터가 깨져 있어도 보정하지 않고 그대로 전달한다.
    """
    day: str          # 표시용 기간 라벨 (MM-DD)
    full_date: str    # 원천 날짜 문자열 (YYYY-MM-DD)
    open: float       # 시가
    high: float       # 고가
    low: float        # 저가
    close: float      # 종가
    volume: int       # 거래량 (張 = 1000주)
    is_up: bool       # 종가 >= 시가

    @property
    def color(self) -> str:
        return UP_COLOR if self.is_up else DOWN_COLOR

    def to_row(self) -> dict[str, Any]:
        """DataFrame 행으로 변환 (CANDLE_COLUMNS 순서)."""
        return {
            "day": self.day,
            "full_date": self.full_date,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
            "is_up": self.is_up,
            "color": self.color,
        }


@dataclass(frozen=True)
class Fundamentals:
    """종목의 정적 기본 정보. score()의 입력."""
    pe: float = 0.0               # 주가수익비율 (PER)
    dividend_yield: float = 0.0   # 배당 수익률 (%)
    pb: float = 0.0               # 주가순자산비율 (P/B)
    foreign_net: int = 0          # 당일 외국인 순매수 (張) - 법인 데이터가 없을 때 사용
    trust_net: int = 0            # 당일 투신 순매수 (張)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Fundamentals":
        """딕셔너리에서 생성. 'yield' 키도 dividend_yield로 인정."""
        if not data:
            return cls()
        return cls(
            pe=to_float(data.get("pe")),
            dividend_yield=to_float(data.get("dividend_yield", data.get("yield"))),
            pb=to_float(data.get("pb")),
            foreign_net=to_int(data.get("foreign_net")),
            trust_net=to_int(data.get("trust_net")),
        )


class DataProvider(ABC):
    """원천 데이터 제공 추상 클래스.

    모든 데이터 제공자 구현체는 이 클래스를 상속받아 아래 메서드를 구현해야 한다.
    반환값은 가공 전 레코드 그대로이며, 정규화는 엔진이 담당한다.
    """

    @abstractmethod
    def get_price_records(self, ticker: str) -> list[dict[str, Any]]:
        """가격 레코드 조회 (과거 → 최신 순).

        Returns:
            [{date, open, max/high, min/low, close, Trading_Volume/volume}, ...]
        """
        ...

    @abstractmethod
    def get_chip_records(self, ticker: str) -> list[dict[str, Any]]:
        """법인(외국인/투신/자영) 매매 레코드 조회.

        Returns:
            [{date, name, buy, sell}, ...]  (buy/sell 단위: 주)
        """
        ...

    @abstractmethod
    def get_fundamentals(self, ticker: str) -> Fundamentals:
        """기본 재무 정보 조회."""
        ...
