"""
기술적 지표 계산 모듈.

[ 역할 ]
    캔들 DataFrame을 받아 같은 길이·같은 인덱스의 지표 시리즈를 계산.
    모든 지표는 인과적(과거 봉만 참조)이며 입력 DataFrame을 변경하지 않는다.

[ 계산하는 지표 ]
    - 이동평균 MA{N}          : 워밍업 전 NaN, 소수점 2자리
    - 볼린저 밴드 (20, 2σ)    : 모표준편차, 워밍업 전 NaN
    - 스토캐스틱 KD (9)       : K/D 상태를 순서대로 누적 (병렬화 불가)
    - MACD (12, 26, 9)        : EMA 3개 상태를 순서대로 누적 (병렬화 불가)
    - RSI (14)                : 구간 단순평균을 봉마다 새로 계산 (Wilder 평활 아님)

[ 상수 ]
    KD 평활 가중치 2/3·1/3은 고정. 기간/스팬은 IndicatorConfig로 바꿀 수 있다.

[ 호출하는 곳 ]
    - pipeline.py::analyze()에서 compute_indicators() 호출
    - backtest/engine.py는 이 모듈의 출력 열(ma5, ma20, k, d, rsi)을 읽음
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from signal_engine.utils.config import IndicatorConfig
from signal_engine.utils.numeric import round_price

logger = logging.getLogger("signal_engine.indicators")

NEUTRAL = 50.0  # KD/RSI 워밍업 구간 기본값


# ─── 누적 상태 ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StochasticState:
    """KD 누적 상태. 첫 봉부터 마지막 봉까지 순서대로 넘겨진다."""
    k: float = NEUTRAL
    d: float = NEUTRAL

    def update(self, rsv: float) -> "StochasticState":
        k = (2 / 3) * self.k + (1 / 3) * rsv
        d = (2 / 3) * self.d + (1 / 3) * k
        return StochasticState(k=k, d=d)


@dataclass(frozen=True)
class MACDState:
    """MACD 누적 상태. signal은 첫 DIF가 나오기 전까지 None."""
    ema_short: float
    ema_long: float
    signal: Optional[float] = None


def ema_step(value: float, prev: float, span: int) -> float:
    """EMA 1스텝. α = 2 / (span + 1)."""
    alpha = 2 / (span + 1)
    return value * alpha + prev * (1 - alpha)


# ─── 개별 지표 ──────────────────────────────────────────────────────────────

def compute_sma(frame: pd.DataFrame, window: int) -> pd.Series:
    """단순 이동평균. index < window-1 구간은 NaN."""
    sma = frame["close"].astype(float).rolling(window=window, min_periods=window).mean()
    return sma.map(round_price, na_action="ignore").astype(float).rename(f"ma{window}")


def compute_bollinger(
    frame: pd.DataFrame,
    period: int = 20,
    multiplier: float = 2.0,
) -> pd.DataFrame:
    """볼린저 밴드 (중심 = 평균, 상/하단 = 평균 ± multiplier·σ).

    Returns:
        DataFrame with columns: [bb_upper, bb_middle, bb_lower]
    """
    close = frame["close"].astype(float)
    mean = close.rolling(window=period, min_periods=period).mean()
    std = close.rolling(window=period, min_periods=period).std(ddof=0)

    bands = {
        "bb_upper": mean + multiplier * std,
        "bb_middle": mean,
        "bb_lower": mean - multiplier * std,
    }
    return pd.DataFrame(
        {name: band.map(round_price, na_action="ignore") for name, band in bands.items()},
        index=frame.index,
        dtype=float,
    )


def compute_stochastic(frame: pd.DataFrame, period: int = 9) -> pd.DataFrame:
    """스토캐스틱 K/D.

    워밍업(index < period-1) 구간은 50/50. 이후 RSV로 K, K로 D를 평활.
    구간 고가 == 저가이면 RSV = 50 (0으로 나누기 방지).

    Returns:
        DataFrame with columns: [k, d]
    """
    highs = frame["high"].astype(float).tolist()
    lows = frame["low"].astype(float).tolist()
    closes = frame["close"].astype(float).tolist()

    state = StochasticState()
    k_values: list[float] = []
    d_values: list[float] = []

    for i, close in enumerate(closes):
        if i < period - 1:
            k_values.append(NEUTRAL)
            d_values.append(NEUTRAL)
            continue

        lowest = min(lows[i - period + 1:i + 1])
        highest = max(highs[i - period + 1:i + 1])
        rsv = NEUTRAL
        if highest != lowest:
            rsv = ((close - lowest) / (highest - lowest)) * 100

        state = state.update(rsv)
        k_values.append(round_price(state.k))
        d_values.append(round_price(state.d))

    return pd.DataFrame({"k": k_values, "d": d_values}, index=frame.index, dtype=float)


def compute_macd(
    frame: pd.DataFrame,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> pd.DataFrame:
    """MACD. 두 EMA는 첫 종가, 시그널은 첫 DIF에서 시작.

    Returns:
        DataFrame with columns: [dif, macd, osc]  (macd = 시그널선)
    """
    closes = frame["close"].astype(float).tolist()
    dif_values: list[float] = []
    signal_values: list[float] = []
    osc_values: list[float] = []

    if closes:
        state = MACDState(ema_short=closes[0], ema_long=closes[0])
        for close in closes:
            ema_short = ema_step(close, state.ema_short, fast)
            ema_long = ema_step(close, state.ema_long, slow)
            dif = ema_short - ema_long
            prev_signal = dif if state.signal is None else state.signal
            state = MACDState(
                ema_short=ema_short,
                ema_long=ema_long,
                signal=ema_step(dif, prev_signal, signal),
            )
            dif_values.append(round_price(dif))
            signal_values.append(round_price(state.signal))
            osc_values.append(round_price(dif - state.signal))

    return pd.DataFrame(
        {"dif": dif_values, "macd": signal_values, "osc": osc_values},
        index=frame.index,
        dtype=float,
    )


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100 - 100 / (1 + avg_gain / avg_loss)


def compute_rsi(frame: pd.DataFrame, period: int = 14) -> pd.Series:
    """RSI (구간 단순평균 방식).

    index < period 는 50. index == period 는 처음 period개 변화량의 평균,
    그 이후는 직전 period개 변화량을 종가에서 직접 다시 합산한다.
    """
    closes = frame["close"].astype(float).tolist()
    values: list[float] = []
    gains = 0.0
    losses = 0.0

    for i in range(len(closes)):
        if i == 0:
            values.append(NEUTRAL)
            continue

        change = closes[i] - closes[i - 1]
        if i <= period:
            gains += change if change > 0 else 0
            losses += -change if change < 0 else 0
            if i == period:
                values.append(_rsi_from_averages(gains / period, losses / period))
            else:
                values.append(NEUTRAL)
            continue

        sum_gain = 0.0
        sum_loss = 0.0
        for j in range(period):
            delta = closes[i - j] - closes[i - j - 1]
            if delta > 0:
                sum_gain += delta
            else:
                sum_loss += abs(delta)
        values.append(_rsi_from_averages(sum_gain / period, sum_loss / period))

    return pd.Series(values, index=frame.index, dtype=float, name="rsi")


# ─── 전체 계산 ──────────────────────────────────────────────────────────────

def compute_indicators(
    frame: pd.DataFrame,
    config: IndicatorConfig | None = None,
) -> pd.DataFrame:
    """캔들 DataFrame에 모든 지표 열을 붙인 새 DataFrame 반환.

    추가 열: ma{N}..., bb_upper, bb_middle, bb_lower, k, d, dif, macd, osc, rsi
    rsi 열에서 0은 50으로 바뀐다 (compute_rsi 자체는 0을 그대로 반환).
    """
    config = config or IndicatorConfig()
    result = frame.copy()

    if len(frame) < max(config.ma_windows, default=0):
        logger.debug(f"데이터 {len(frame)}봉: 일부 이동평균은 워밍업 구간이라 NaN")

    for window in config.ma_windows:
        result[f"ma{window}"] = compute_sma(frame, window)

    kd = compute_stochastic(frame, config.kd_period)
    macd = compute_macd(frame, config.macd_fast, config.macd_slow, config.macd_signal)
    bands = compute_bollinger(frame, config.bb_period, config.bb_multiplier)

    for part in (kd, macd, bands):
        for column in part.columns:
            result[column] = part[column]

    # RSI 0 (14봉 연속 하락)은 중립값으로 읽는다
    result["rsi"] = compute_rsi(frame, config.rsi_period).replace(0.0, NEUTRAL)
    return result
