"""
가격 데이터 정규화 모듈.

[ 역할 ]
    제공자마다 필드 이름이 다른 원천 가격 레코드를 표준 Candle로 변환하고,
    엔진 전체가 공유하는 캔들 DataFrame(열 = Candle 필드)을 만든다.

[ 정규화 규칙 ]
    - 입력 순서 그대로 1:1 변환 (과거 → 최신)
    - 거래량: 주 → 張 (1000주 단위, 반올림)
    - 숫자로 해석 불가능한 값은 0으로 강제 (행을 버리지 않아 인덱스 정렬 유지)
    - 입력이 비어 있으면 열만 있는 빈 DataFrame 반환

[ 호출하는 곳 ]
    - pipeline.py::analyze() 첫 단계
    - 테스트에서 합성 데이터 → 캔들 변환
"""

import logging
from typing import Any, Iterable

import pandas as pd

from signal_engine.core.data_provider import CANDLE_COLUMNS, Candle
from signal_engine.utils.numeric import to_float, to_lots

logger = logging.getLogger("signal_engine.data")

# 표준 필드 → 제공자별 별칭 (앞에서부터 우선)
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date", "Date", "time"),
    "open": ("open", "Open", "OpeningPrice"),
    "high": ("high", "max", "High", "HighestPrice"),
    "low": ("low", "min", "Low", "LowestPrice"),
    "close": ("close", "Close", "ClosingPrice"),
    "volume": ("volume", "Trading_Volume", "Volume", "TradeVolume"),
}


def _pick(record: Any, field_name: str) -> Any:
    """별칭 순서대로 첫 번째로 존재하는 값을 찾는다. dict와 객체 모두 지원."""
    for alias in FIELD_ALIASES[field_name]:
        if isinstance(record, dict):
            if alias in record and record[alias] is not None:
                return record[alias]
        elif getattr(record, alias, None) is not None:
            return getattr(record, alias)
    return None


def normalize_bar(record: Any) -> Candle:
    """원천 레코드 1개 → Candle."""
    raw_date = _pick(record, "date")
    full_date = str(raw_date) if raw_date is not None else ""
    open_price = to_float(_pick(record, "open"))
    close = to_float(_pick(record, "close"))

    return Candle(
        day=full_date[5:],
        full_date=full_date,
        open=open_price,
        high=to_float(_pick(record, "high")),
        low=to_float(_pick(record, "low")),
        close=close,
        volume=to_lots(to_float(_pick(record, "volume"))),
        is_up=close >= open_price,
    )


def normalize(raw_bars: Iterable[Any] | None) -> pd.DataFrame:
    """원천 레코드 시퀀스 → 캔들 DataFrame.

    Returns:
        DataFrame with columns: [day, full_date, open, high, low, close, volume, is_up, color]
    """
    candles = [normalize_bar(record) for record in (raw_bars or [])]

    if not candles:
        logger.debug("정규화할 가격 데이터가 없습니다.")
        return candles_to_frame([])

    missing_dates = sum(1 for c in candles if not c.full_date)
    if missing_dates:
        logger.warning(f"날짜가 없는 봉 {missing_dates}개 (칩 데이터 병합에서 제외됨)")

    return candles_to_frame(candles)


def candles_to_frame(candles: list[Candle]) -> pd.DataFrame:
    """Candle 리스트를 DataFrame으로. 빈 리스트도 열 구성은 동일."""
    if not candles:
        frame = pd.DataFrame({column: [] for column in CANDLE_COLUMNS})
        return frame.astype({
            "day": object, "full_date": object,
            "open": float, "high": float, "low": float, "close": float,
            "volume": int, "is_up": bool, "color": object,
        })
    return pd.DataFrame([c.to_row() for c in candles], columns=CANDLE_COLUMNS)


def frame_to_candles(frame: pd.DataFrame) -> list[Candle]:
    """캔들 DataFrame → Candle 리스트 (지표 열은 버린다)."""
    return [
        Candle(
            day=row["day"],
            full_date=row["full_date"],
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=int(row["volume"]),
            is_up=bool(row["is_up"]),
        )
        for row in frame.to_dict("records")
    ]
