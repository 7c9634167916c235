"""
전략 모듈.

[ 전략 등록 방식 ]
    @register(StrategyType.XXX) 데코레이터를 붙이면 STRATEGY_REGISTRY에 자동 등록.
    backtest()는 StrategyType(또는 "long" 같은 이름)만으로 전략 클래스를 찾아 생성한다.

[ 새 전략 추가 방법 ]
    1. core/trading_strategy.py::StrategyType에 값 추가
    2. 이 디렉토리에 새 .py 파일 생성
    3. RuleStrategy를 상속받는 클래스 작성 + @register(StrategyType.이름) 추가
    → StrategyType에 값만 있고 등록이 없으면 임포트 시점에 바로 실패한다.
"""

from importlib import import_module
from pathlib import Path
from typing import Any

from signal_engine.core.trading_strategy import RuleStrategy, StrategyType

# 전략 종류 → 전략 클래스 매핑
STRATEGY_REGISTRY: dict[StrategyType, type[RuleStrategy]] = {}


def register(strategy_type: StrategyType):
    """전략 클래스를 STRATEGY_REGISTRY에 등록하는 데코레이터."""
    def decorator(cls: type[RuleStrategy]):
        cls.strategy_type = strategy_type
        STRATEGY_REGISTRY[strategy_type] = cls
        return cls
    return decorator


def resolve_strategy_type(strategy: StrategyType | str) -> StrategyType:
    """StrategyType 또는 이름 문자열을 StrategyType으로.

    Raises:
        ValueError: 알 수 없는 전략 이름
    """
    if isinstance(strategy, StrategyType):
        return strategy
    try:
        return StrategyType(str(strategy).lower())
    except ValueError:
        available = ", ".join(list_strategies())
        raise ValueError(f"알 수 없는 전략: '{strategy}'. 사용 가능: {available}") from None


def create_strategy(strategy: StrategyType | str, params: dict[str, Any] | None = None) -> RuleStrategy:
    """전략 인스턴스를 생성.

    Args:
        strategy: StrategyType 또는 이름 ("long", "short", "value")
        params: 전략 파라미터 (각 전략의 DEFAULT_PARAMS를 오버라이드)

    Raises:
        ValueError: 알 수 없는 전략 이름
    """
    return STRATEGY_REGISTRY[resolve_strategy_type(strategy)](params=params)


def list_strategies() -> list[str]:
    """등록된 전략 이름 목록 반환."""
    return sorted(t.value for t in STRATEGY_REGISTRY)


def _auto_discover():
    """이 디렉토리의 모든 전략 모듈을 자동 임포트하여 @register가 실행되게 한다."""
    strategies_dir = Path(__file__).parent
    for py_file in strategies_dir.glob("*.py"):
        if py_file.name.startswith("_"):
            continue
        module_name = f"signal_engine.strategies.{py_file.stem}"
        import_module(module_name)

    missing = [t.value for t in StrategyType if t not in STRATEGY_REGISTRY]
    if missing:
        raise ImportError(f"등록되지 않은 전략: {', '.join(missing)}")


# 모듈 로드 시 자동 탐색
_auto_discover()
