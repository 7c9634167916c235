"""
법인 매매(籌碼) 집계 모듈.

[ 역할 ]
    거래 단위로 흩어진 3대 법인(외국인/투신/자영) 매수·매도 레코드를
    일자별 순매수(張)로 접고, 같은 날짜의 캔들에 병합한다.

[ 집계 규칙 ]
    - 레코드마다 round((buy - sell) / 1000) 후 같은 날짜·같은 구분끼리 합산
    - 알 수 없는 구분(name)은 무시 (오류 아님)
    - 날짜 문자열이 정확히 같은 캔들에만 병합, 캔들이 없는 날짜는 요약에만 남음
    - 요약은 날짜순 최근 30일만 반환 (화면 표시용)

[ 호출하는 곳 ]
    - pipeline.py::analyze()에서 merge_chips() 호출
    - indicators/scoring.py::LatestIndicators.from_frame()이 trailing_net_flow() 사용
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np
import pandas as pd

from signal_engine.utils.numeric import to_float, to_lots

logger = logging.getLogger("signal_engine.data")

# 원천 구분 태그 → ChipDay 필드
INVESTOR_CLASSES = {
    "Foreign_Investor": "foreign",
    "Investment_Trust": "trust",
    "Dealer": "dealer",
}

CHIP_SUMMARY_DAYS = 30


@dataclass
class ChipDay:
    """일자별 법인 순매수 (張)."""
    date: str
    foreign: int = 0
    trust: int = 0
    dealer: int = 0

    @property
    def day(self) -> str:
        """표시용 라벨 (MM-DD)."""
        return self.date[5:]

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "date": self.date,
            "foreign": self.foreign,
            "trust": self.trust,
            "dealer": self.dealer,
        }


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def aggregate_chips(chip_records: Iterable[Any] | None) -> list[ChipDay]:
    """거래 레코드 → 날짜순 ChipDay 리스트 (전체 기간)."""
    by_date: dict[str, ChipDay] = {}
    ignored = 0

    for record in chip_records or []:
        date = str(_field(record, "date") or "")
        chip_day = by_date.setdefault(date, ChipDay(date=date))

        attr = INVESTOR_CLASSES.get(_field(record, "name"))
        if attr is None:
            ignored += 1
            continue

        net_lots = to_lots(to_float(_field(record, "buy")) - to_float(_field(record, "sell")))
        setattr(chip_day, attr, getattr(chip_day, attr) + net_lots)

    if ignored:
        logger.debug(f"알 수 없는 법인 구분 레코드 {ignored}건 무시")

    return [by_date[date] for date in sorted(by_date)]


def merge_chips(
    frame: pd.DataFrame,
    chip_records: Iterable[Any] | None,
) -> tuple[pd.DataFrame, list[ChipDay]]:
    """캔들(지표) DataFrame에 일자별 순매수 열(foreign, trust, dealer)을 병합.

    Returns:
        (병합된 새 DataFrame, 최근 30일 ChipDay 요약)
    """
    chip_days = aggregate_chips(chip_records)
    merged = frame.copy()

    for column in ("foreign", "trust", "dealer"):
        merged[column] = np.nan

    if chip_days and not merged.empty:
        nets = pd.DataFrame(
            [c.to_dict() for c in chip_days],
            columns=["date", "foreign", "trust", "dealer"],
        ).set_index("date")
        matched = merged["full_date"].isin(nets.index)
        for column in ("foreign", "trust", "dealer"):
            merged.loc[matched, column] = (
                merged.loc[matched, "full_date"].map(nets[column]).astype(float)
            )
        logger.debug(f"법인 데이터 {len(chip_days)}일 중 {int(matched.sum())}일 캔들에 병합")

    return merged, chip_days[-CHIP_SUMMARY_DAYS:]


def trailing_net_flow(chip_days: list[ChipDay], days: int = 5) -> tuple[int, int]:
    """최근 days일 외국인/투신 순매수 합계."""
    recent = chip_days[-days:]
    return sum(c.foreign for c in recent), sum(c.trust for c in recent)
