"""
파일 기반 데이터 제공자 구현.

[ 역할 ]
    core/data_provider.py::DataProvider 구현체.
    미리 내려받아 둔 JSON/CSV 파일에서 가격·법인 레코드를 읽어 엔진에 공급.
    (실시간 API 수집은 엔진 범위 밖)

[ 지원 형식 ]
    - JSON: 레코드 리스트, 또는 FinMind 응답 형태 {"data": [...]}
    - CSV : 헤더가 필드명인 표 (date, open, max, min, close, Trading_Volume 등)

[ 사용법 ]
    provider = FileDataProvider()
    provider.load_prices("2330", "data/2330_price.json")
    provider.load_chips("2330", "data/2330_chips.csv")
    provider.set_fundamentals("2330", {"pe": 14.2, "yield": 4.5})
    records = provider.get_price_records("2330")

[ 호출하는 곳 ]
    - run_analysis.py
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

from signal_engine.core.data_provider import DataProvider, Fundamentals

logger = logging.getLogger("signal_engine.data")


def read_records(path: str | Path) -> list[dict[str, Any]]:
    """JSON/CSV 파일 → 레코드 리스트. 확장자로 형식 판단."""
    path = Path(path)
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path)
        return df.to_dict("records")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("data", [])
    return list(data)


class FileDataProvider(DataProvider):
    """파일에서 읽은 레코드를 종목별로 보관하는 제공자."""

    def __init__(self):
        self._prices: dict[str, list[dict[str, Any]]] = {}   # ticker → 가격 레코드
        self._chips: dict[str, list[dict[str, Any]]] = {}    # ticker → 법인 레코드
        self._fundamentals: dict[str, Fundamentals] = {}

    def load_prices(self, ticker: str, path: str | Path) -> int:
        """가격 파일 로드. 읽은 레코드 수 반환."""
        records = read_records(path)
        self._prices[ticker] = records
        logger.info(f"{ticker}: 가격 {len(records)}건 로드 ({path})")
        return len(records)

    def load_chips(self, ticker: str, path: str | Path) -> int:
        """법인 매매 파일 로드. 읽은 레코드 수 반환."""
        records = read_records(path)
        self._chips[ticker] = records
        logger.info(f"{ticker}: 법인 {len(records)}건 로드 ({path})")
        return len(records)

    def set_prices(self, ticker: str, records: list[dict[str, Any]]) -> None:
        """메모리 레코드를 직접 등록 (샘플 데이터/테스트용)."""
        self._prices[ticker] = list(records)

    def set_chips(self, ticker: str, records: list[dict[str, Any]]) -> None:
        self._chips[ticker] = list(records)

    def set_fundamentals(self, ticker: str, data: Fundamentals | Mapping[str, Any]) -> None:
        if not isinstance(data, Fundamentals):
            data = Fundamentals.from_dict(data)
        self._fundamentals[ticker] = data

    def get_price_records(self, ticker: str) -> list[dict[str, Any]]:
        return list(self._prices.get(ticker, []))

    def get_chip_records(self, ticker: str) -> list[dict[str, Any]]:
        return list(self._chips.get(ticker, []))

    def get_fundamentals(self, ticker: str) -> Fundamentals:
        return self._fundamentals.get(ticker, Fundamentals())

    def get_tickers(self) -> list[str]:
        """가격 데이터가 있는 종목 코드 목록."""
        return sorted(self._prices)
