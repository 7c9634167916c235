"""
설정 관리 모듈.

[ 역할 ]
    config.yaml (또는 .json) 파일을 파싱하여 Config 객체로 변환.
    지표 파라미터, 백테스트 파라미터, 입력 데이터 경로, 로깅 설정 등을 통합 관리.

[ 설정 파일 구조 (config.yaml) ]
    indicators:       → IndicatorConfig (MA/볼린저/KD/MACD/RSI 기간)
    backtest:         → BacktestConfig (전략, 초기 자금, 최소 데이터 길이)
    data:             → DataConfig (가격/법인 데이터 파일 경로, 기본 재무 정보)
    log_level:        → "INFO" / "DEBUG"
    log_dir:          → 로그 디렉토리 경로

[ 호출하는 곳 ]
    - run_analysis.py에서 Config.from_yaml()로 로드
    - pipeline.py::analyze()에 config.indicators 전달
    - backtest/engine.py::backtest()에 config.backtest 값 전달
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class IndicatorConfig:
    """지표 설정. config.yaml의 indicators 섹션에 대응."""
    ma_windows: list[int] = field(default_factory=lambda: [5, 20, 60])
    bb_period: int = 20
    bb_multiplier: float = 2.0
    kd_period: int = 9
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    rsi_period: int = 14


@dataclass
class BacktestConfig:
    """백테스트 설정. config.yaml의 backtest 섹션에 대응."""
    strategy: str = "long"
    initial_capital: float = 100_000
    min_history: int = 60    # 이보다 짧으면 시뮬레이션 생략
    warmup_index: int = 20   # 시뮬레이션 시작 인덱스 (MA20 확정 이후)


@dataclass
class DataConfig:
    """입력 데이터 설정. config.yaml의 data 섹션에 대응."""
    price_path: str = ""
    chip_path: str = ""
    fundamentals: dict[str, float] = field(default_factory=dict)


@dataclass
class Config:
    """전체 설정. from_yaml() 또는 from_json()으로 파일에서 로드."""
    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    backtest: BacktestConfig = field(default_factory=BacktestConfig)
    data: DataConfig = field(default_factory=DataConfig)
    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """YAML 파일에서 설정 로드."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls._from_dict(data or {})

    @classmethod
    def from_json(cls, path: str | Path) -> "Config":
        """JSON 파일에서 설정 로드."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """딕셔너리에서 Config 생성. 알 수 없는 키는 무시."""
        indicators_data = data.get("indicators", {}) or {}
        backtest_data = data.get("backtest", {}) or {}
        data_section = data.get("data", {}) or {}

        indicators = IndicatorConfig(**{
            k: v for k, v in indicators_data.items()
            if k in IndicatorConfig.__dataclass_fields__
        })
        # ma_windows는 YAML에서 "5,20,60" 문자열로 써도 허용
        if isinstance(indicators.ma_windows, str):
            indicators.ma_windows = [int(w) for w in indicators.ma_windows.split(",") if w.strip()]

        backtest = BacktestConfig(**{
            k: v for k, v in backtest_data.items()
            if k in BacktestConfig.__dataclass_fields__
        })
        data_config = DataConfig(**{
            k: v for k, v in data_section.items()
            if k in DataConfig.__dataclass_fields__
        })

        return cls(
            indicators=indicators,
            backtest=backtest,
            data=data_config,
            log_level=data.get("log_level", "INFO"),
            log_dir=data.get("log_dir", "logs"),
        )

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환."""
        return asdict(self)

    def save_yaml(self, path: str | Path) -> None:
        """YAML 파일로 저장."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, allow_unicode=True, default_flow_style=False)
