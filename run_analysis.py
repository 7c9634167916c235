"""
종목 분석 + 백테스트 실행 스크립트 (시스템 진입점).

[ 사용법 ]
    # 샘플 데이터로 분석 + 기본 전략(long) 백테스트
    python run_analysis.py --sample

    # 파일 데이터 사용 (JSON/CSV)
    python run_analysis.py --prices data/2330_price.json --chips data/2330_chips.json

    # 전략 지정
    python run_analysis.py --sample --strategy value

    # 여러 전략 비교
    python run_analysis.py --sample --compare long short value

    # 표시 기간 (최근 N봉 마커만 출력)
    python run_analysis.py --sample --timeframe 3m

    # 등록된 전략 목록 확인
    python run_analysis.py --list

    # 조건 검색 (시장 스냅샷 파일: {"day": [...], "valuation": [...], "institutional": [...]})
    python run_analysis.py --market data/market.json --screen long

    # 분봉 신호 (거래량 급증 + 장중 추세)
    python run_analysis.py --intraday data/2330_1min.json
"""

import argparse
import json
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd

from signal_engine.backtest.engine import backtest
from signal_engine.backtest.metrics import BacktestResult
from signal_engine.data.file_provider import FileDataProvider, read_records
from signal_engine.data.market_snapshot import build_market_snapshot
from signal_engine.indicators.intraday import detect_volume_spike, intraday_bars, intraday_trend
from signal_engine.indicators.screener import ScreenFilters, count_presets, screen
from signal_engine.pipeline import StockAnalysis, analyze, slice_timeframe
from signal_engine.strategies import list_strategies
from signal_engine.utils.config import Config
from signal_engine.utils.logger import setup_logger


def generate_sample_data(
    ticker: str,
    start_date: date,
    end_date: date,
    initial_price: float = 600,
    volatility: float = 0.02,
) -> tuple[list[dict], list[dict]]:
    """분석용 샘플 가격/법인 레코드 생성 (FinMind 필드명)."""
    np.random.seed(sum(ord(c) for c in ticker))

    dates = pd.bdate_range(start=start_date, end=end_date)
    n = len(dates)

    returns = np.random.normal(0.0003, volatility, n)
    prices = initial_price * np.cumprod(1 + returns)

    price_records = []
    chip_records = []
    for i, d in enumerate(dates):
        close = prices[i]
        high = close * (1 + abs(np.random.normal(0, 0.01)))
        low = close * (1 - abs(np.random.normal(0, 0.01)))
        open_price = close * (1 + np.random.normal(0, 0.005))
        day = d.strftime("%Y-%m-%d")

        price_records.append({
            "date": day,
            "open": round(open_price, 1),
            "max": round(max(high, open_price), 1),
            "min": round(min(low, open_price), 1),
            "close": round(close, 1),
            "Trading_Volume": int(np.random.lognormal(16, 0.5)),
        })
        for name in ("Foreign_Investor", "Investment_Trust", "Dealer"):
            chip_records.append({
                "date": day,
                "name": name,
                "buy": int(np.random.lognormal(13, 1)),
                "sell": int(np.random.lognormal(13, 1)),
            })

    return price_records, chip_records


def load_provider(config: Config, args: argparse.Namespace, ticker: str) -> FileDataProvider:
    """인자/설정에 따라 데이터 제공자 구성."""
    provider = FileDataProvider()
    provider.set_fundamentals(ticker, config.data.fundamentals)

    if args.sample:
        print("샘플 데이터 생성 중...")
        prices, chips = generate_sample_data(ticker, date(2021, 1, 1), date(2025, 12, 31))
        provider.set_prices(ticker, prices)
        provider.set_chips(ticker, chips)
        print(f"  {ticker}: {len(prices)}일 데이터")
        return provider

    price_path = args.prices or config.data.price_path
    chip_path = args.chips or config.data.chip_path
    if price_path:
        provider.load_prices(ticker, price_path)
    if chip_path:
        provider.load_chips(ticker, chip_path)
    return provider


def print_analysis(ticker: str, analysis: StockAnalysis) -> None:
    """분석 요약 출력."""
    summary = analysis.to_dict()
    print(f"\n[종목: {ticker}]  점수: {summary['score']}  ({summary['bars']}봉)")
    print(f"  MA5: {summary['ma5']:.2f}  MA20: {summary['ma20']:.2f}  MA60: {summary['ma60']:.2f}")
    print(f"  K: {summary['k']:.2f}  D: {summary['d']:.2f}  OSC: {summary['osc']:.2f}  RSI: {summary['rsi']:.1f}")
    print(f"  외국인 5일: {summary['foreign_buy']:+,}張  투신 5일: {summary['trust_buy']:+,}張")


def print_single_result(strategy_name: str, result: BacktestResult, timeframe: str) -> None:
    """단일 전략 결과 출력."""
    print(f"\n[전략: {strategy_name}]")
    print(result.summary())

    window = slice_timeframe(result.history, timeframe)
    markers = window[window["buy_signal"].notna() | window["sell_signal"].notna()]
    if not markers.empty:
        print(f"\n최근 {timeframe} 매매 마커:")
        for row in markers.to_dict("records"):
            side = "매수" if pd.notna(row["buy_signal"]) else "매도"
            print(f"  [{row['full_date']}] {side} @ {row['close']:,.2f}")


def print_comparison(results: dict[str, BacktestResult]) -> None:
    """여러 전략 비교 결과 출력."""
    names = list(results.keys())
    col_width = max(12, max(len(n) for n in names) + 2)

    print(f"\n{'=' * (16 + col_width * len(names))}")
    print("전략 비교 결과")
    print(f"{'=' * (16 + col_width * len(names))}")

    header = f"{'':>16}" + "".join(f"{n:>{col_width}}" for n in names)
    print(header)
    print("-" * len(header))

    rows = [
        ("ROI", lambda r: f"{r.roi:.1f}%"),
        ("승률", lambda r: f"{r.win_rate}%"),
        ("거래 횟수", lambda r: f"{r.trade_count}"),
        ("누적 손익", lambda r: f"{r.total_profit:,.0f}"),
        ("수익 팩터", lambda r: f"{r.profit_factor:.2f}"),
    ]
    for label, fmt in rows:
        print(f"{label:>16}" + "".join(f"{fmt(results[n]):>{col_width}}" for n in names))

    print(f"{'=' * (16 + col_width * len(names))}")


def run_screen(market_path: str, preset: str) -> None:
    """시장 스냅샷 파일로 조건 검색 실행. preset이 custom이면 기본 사용자 필터."""
    with open(market_path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    stocks = build_market_snapshot(
        raw.get("day", []), raw.get("valuation", []), raw.get("institutional", []),
    )

    counts = count_presets(stocks)
    print(f"\n[조건 검색] 전체 {len(stocks)}종목")
    print("  " + "  ".join(f"{name}: {n}" for name, n in counts.items()))

    if preset == "custom":
        matched = screen(stocks, filters=ScreenFilters())
    else:
        matched = screen(stocks, preset=preset)

    print(f"\n'{preset}' 결과: {len(matched)}종목")
    for s in matched:
        print(
            f"  {s.code} {s.name:<8} {s.price:>9,.2f} ({s.change_percent:+.2f}%)  "
            f"PER {s.pe:.1f}  배당 {s.dividend_yield:.1f}  PBR {s.pb:.2f}"
        )


def run_intraday(path: str) -> None:
    """분봉 파일로 거래량 급증 + 장중 추세 출력."""
    bars = intraday_bars(read_records(path))
    spike = detect_volume_spike(bars)
    trend = intraday_trend(bars, spike)

    print(f"\n[분봉 신호] {len(bars)}봉")
    if spike is None:
        print("  거래량 급증: 없음")
    else:
        print(f"  거래량 급증: {spike.ratio:.2f}배 ({spike.level})")
    print(f"  장중 추세: {trend.trend} (확률 {trend.probability:.2f})")


def main():
    parser = argparse.ArgumentParser(description="주식 지표 분석 및 백테스트 실행")
    parser.add_argument("--config", type=str, default="config.yaml", help="설정 파일 경로")
    parser.add_argument("--ticker", type=str, default="2330", help="종목 코드 (표시용)")
    parser.add_argument("--prices", type=str, default=None, help="가격 레코드 파일 (JSON/CSV)")
    parser.add_argument("--chips", type=str, default=None, help="법인 매매 레코드 파일 (JSON/CSV)")
    parser.add_argument("--sample", action="store_true", help="샘플 데이터로 테스트")
    parser.add_argument("--strategy", type=str, default=None, help="전략 이름 (config.yaml 대신 지정)")
    parser.add_argument("--compare", nargs="+", metavar="STRATEGY", help="여러 전략 비교 (예: --compare long value)")
    parser.add_argument("--timeframe", type=str, default="6m", choices=["3m", "6m", "1y", "5y"], help="마커 출력 기간")
    parser.add_argument("--list", action="store_true", help="등록된 전략 목록 출력")
    parser.add_argument("--market", type=str, default=None, help="시장 스냅샷 파일 (JSON)")
    parser.add_argument("--screen", type=str, default=None, choices=["long", "short", "value", "custom"], help="조건 검색 프리셋")
    parser.add_argument("--intraday", type=str, default=None, help="분봉 레코드 파일 (JSON/CSV)")
    args = parser.parse_args()

    if args.list:
        print("등록된 전략:")
        for name in list_strategies():
            print(f"  - {name}")
        return

    try:
        if args.screen:
            if not args.market:
                print("오류: --screen 은 --market 파일이 필요합니다.")
                return
            run_screen(args.market, args.screen)
            return
        if args.intraday:
            run_intraday(args.intraday)
            return
    except FileNotFoundError as e:
        print(f"오류: 데이터 파일을 찾을 수 없습니다: {e.filename}")
        return

    # 설정 로드
    config_path = Path(args.config)
    if config_path.exists():
        config = Config.from_yaml(config_path)
    else:
        print(f"설정 파일 없음: {config_path}, 기본값 사용")
        config = Config()

    setup_logger(level=config.log_level, log_dir=config.log_dir)

    try:
        provider = load_provider(config, args, args.ticker)
    except FileNotFoundError as e:
        print(f"오류: 데이터 파일을 찾을 수 없습니다: {e.filename}")
        return

    if not provider.get_price_records(args.ticker):
        print("\n오류: 분석할 가격 데이터가 없습니다.")
        print("  1. --prices 옵션으로 파일 지정")
        print("  2. --sample 옵션으로 샘플 데이터 사용")
        return

    analysis = analyze(
        provider.get_price_records(args.ticker),
        provider.get_chip_records(args.ticker),
        provider.get_fundamentals(args.ticker),
        config.indicators,
    )
    print_analysis(args.ticker, analysis)

    bt = config.backtest

    # ─── 비교 모드 ───────────────────────────────────────────────────────
    if args.compare:
        results = {}
        for name in args.compare:
            try:
                results[name] = backtest(
                    analysis.history, name, bt.initial_capital, bt.min_history, bt.warmup_index,
                )
            except ValueError as e:
                print(f"  [SKIP] {e}")
        if results:
            print_comparison(results)
        return

    # ─── 단일 실행 모드 ─────────────────────────────────────────────────
    strategy_name = args.strategy or bt.strategy
    try:
        result = backtest(
            analysis.history, strategy_name, bt.initial_capital, bt.min_history, bt.warmup_index,
        )
    except ValueError as e:
        print(f"오류: {e}")
        return
    print_single_result(strategy_name, result, args.timeframe)


if __name__ == "__main__":
    main()
