#!/usr/bin/env python3
"""
DLMM Backtest Runner

Runs a liquidity strategy backtest against recorded pool data (CSV files laid
out as <data-dir>/<pool>/<interval>.csv) or, when none exists, synthetic data.
Prints headline metrics and the run summary.
"""

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

from loguru import logger
from tqdm import tqdm

from dlmm_backtest.core.enums import BacktestStatus, Interval
from dlmm_backtest.core.models import (
    BacktestConfig,
    BacktestProgress,
    BacktestResult,
    CapitalConfig,
    CostConfig,
    MarketConfig,
    StrategyConfig,
    TimeframeConfig,
)
from dlmm_backtest.engine import (
    BacktestEngine,
    estimate_backtest_duration,
    format_metrics_for_display,
)
from dlmm_backtest.infrastructure.data import (
    CSVMarketDataSource,
    HistoricalDataConfig,
    HistoricalDataService,
)
from dlmm_backtest.strategies import default_registry


def setup_logging(debug: bool = False):
    """Configure logging with loguru."""
    logger.remove()

    level = "DEBUG" if debug else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )


def parse_date(value: str) -> datetime:
    """Parse YYYY-MM-DD as midnight UTC."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=UTC)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}'. Use YYYY-MM-DD format.") from e


def build_config(args: argparse.Namespace) -> BacktestConfig:
    end_date = args.end_date or datetime.now(UTC).replace(minute=0, second=0, microsecond=0)
    start_date = args.start_date or end_date - timedelta(days=args.days)

    parameters: dict[str, float] = {"min_profit_threshold": args.min_profit_threshold}
    if args.rebalance_threshold is not None:
        parameters["rebalance_threshold"] = args.rebalance_threshold

    return BacktestConfig(
        name=args.name or f"{args.strategy} on {args.pool}",
        market=MarketConfig(pool_address=args.pool),
        timeframe=TimeframeConfig(start_date=start_date, end_date=end_date, interval=args.interval),
        capital=CapitalConfig(initial_amount=args.capital),
        strategy=StrategyConfig(id=args.strategy, parameters=parameters),
        costs=CostConfig(
            gas_price=args.gas_price,
            slippage=args.slippage,
            transaction_fee=args.transaction_fee,
        ),
    )


def print_report(result: BacktestResult) -> None:
    print(f"\n=== {result.config.name} ===")
    for label, value in format_metrics_for_display(result.metrics).items():
        print(f"{label:<20} {value}")

    summary = result.summary
    if summary.best_period and summary.worst_period:
        print(
            f"\nBest period:  {summary.best_period.start:%Y-%m-%d %H:%M} -> "
            f"{summary.best_period.end:%Y-%m-%d %H:%M} ({summary.best_period.return_:.2%})"
        )
        print(
            f"Worst period: {summary.worst_period.start:%Y-%m-%d %H:%M} -> "
            f"{summary.worst_period.end:%Y-%m-%d %H:%M} ({summary.worst_period.return_:.2%})"
        )

    if summary.key_insights:
        print("\nInsights:")
        for insight in summary.key_insights:
            print(f"  - {insight}")

    if summary.recommendations:
        print("\nRecommendations:")
        for recommendation in summary.recommendations:
            print(f"  - {recommendation}")


async def run(args: argparse.Namespace) -> BacktestResult:
    data_source = CSVMarketDataSource(args.data_dir) if args.data_dir else None
    data_service = HistoricalDataService(
        config=HistoricalDataConfig(fallback_to_synthetic=not args.no_fallback, seed=args.seed),
        data_source=data_source,
    )
    engine = BacktestEngine(data_service=data_service, seed=args.seed)
    config = build_config(args)

    logger.info(f"Estimated runtime: ~{estimate_backtest_duration(config)}s")

    with tqdm(total=100, desc="Backtest", unit="%") as progress_bar:

        def on_progress(progress: BacktestProgress) -> None:
            progress_bar.set_postfix_str(progress.phase.value)
            progress_bar.update(round(progress.progress * 100) - progress_bar.n)

        return await engine.run(config, on_progress=on_progress)


def main():
    strategy_ids = default_registry().ids()

    parser = argparse.ArgumentParser(
        description="Run a DLMM liquidity strategy backtest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Last 30 days of synthetic hourly data with a passive position
  python run_backtest.py --pool demo-pool --strategy conservative-hold

  # Fixed window, reproducible synthetic data, JSON output
  python run_backtest.py --pool demo-pool --strategy aggressive-rebalancing \\
      --start-date 2025-01-01 --end-date 2025-02-01 --seed 42 --output result.json

  # Recorded data only
  python run_backtest.py --pool SOL-USDC --data-dir data/pools --no-fallback
        """,
    )

    parser.add_argument("--pool", type=str, required=True, help="Pool address or identifier")
    parser.add_argument(
        "--strategy",
        type=str,
        choices=strategy_ids,
        default="conservative-hold",
        help="Strategy to simulate (default: conservative-hold)",
    )
    parser.add_argument("--name", type=str, help="Run name (default: '<strategy> on <pool>')")
    parser.add_argument("--start-date", type=parse_date, help="Start date in YYYY-MM-DD format")
    parser.add_argument("--end-date", type=parse_date, help="End date in YYYY-MM-DD format")
    parser.add_argument(
        "--days", type=int, default=30, help="Days to simulate when no start date is given"
    )
    parser.add_argument(
        "--interval",
        type=str,
        choices=[interval.value for interval in Interval],
        default=Interval.H1.value,
        help="Sampling interval (default: 1h)",
    )
    parser.add_argument("--capital", type=float, default=1000.0, help="Initial capital in USD")
    parser.add_argument("--gas-price", type=float, default=0.001, help="Gas cost per action")
    parser.add_argument("--slippage", type=float, default=0.005, help="Slippage fraction")
    parser.add_argument("--transaction-fee", type=float, default=0.25, help="Fee per action")
    parser.add_argument(
        "--min-profit-threshold",
        type=float,
        default=0.0,
        help="Minimum estimated profit, in percent, for an action to execute",
    )
    parser.add_argument(
        "--rebalance-threshold",
        type=float,
        help="Override the strategy's price deviation threshold (fraction)",
    )
    parser.add_argument("--seed", type=int, help="Seed for synthetic data and value drift")
    parser.add_argument("--data-dir", type=Path, help="Directory with recorded pool CSV files")
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Fail instead of generating synthetic data when no recorded data exists",
    )
    parser.add_argument("--output", type=Path, help="Write the full result as JSON")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()
    setup_logging(args.debug)

    result = asyncio.run(run(args))

    if result.status != BacktestStatus.COMPLETED:
        logger.error(f"Backtest failed: {result.error.message if result.error else 'unknown'}")
        return 1

    print_report(result)

    if args.output:
        args.output.write_text(json.dumps(result.to_dict(), indent=2, default=str))
        logger.success(f"Result written to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
