#!/usr/bin/env python3
"""
CLI tool for comparing the risk-adjusted performance of several assets.
Usage: python -m riskmetrics.analyze_assets PRICES_CSV [options]
"""

import sys
import math
import logging
import argparse
from dataclasses import replace
from pathlib import Path

from riskmetrics.analysis_job import run_analysis_job
from riskmetrics.config import load_config, ConfigError
from riskmetrics.loaders import load_price_csv, LoaderError
from riskmetrics.ranking import POLICIES


def _positive_days(value: str) -> float:
    try:
        days = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number of days: {value!r}")
    if not math.isfinite(days) or days <= 0:
        raise argparse.ArgumentTypeError(f"timeframe must be a positive number of days, got {value}")
    return days


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Compute Sharpe, Sortino, drawdown and beta for assets in a price file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m riskmetrics.analyze_assets prices.csv
  python -m riskmetrics.analyze_assets prices.csv --assets BTC ETH --benchmark-a SPX
  python -m riskmetrics.analyze_assets prices.csv --risk-free-rate 4.5 --ddof 0 --output results.json
        """
    )

    parser.add_argument('prices', help='CSV file with columns date, asset, close')
    parser.add_argument('--assets', nargs='+',
                       help='Assets to analyze (default: every non-benchmark asset in the file)')
    parser.add_argument('--benchmark-a',
                       help='Asset id used for correlation and beta (benchmark A)')
    parser.add_argument('--benchmark-b',
                       help='Asset id used as benchmark B')
    parser.add_argument('--risk-free-rate', type=float,
                       help='Annual risk-free rate in percent (default: $RISK_FREE_RATE_PCT or 4.25)')
    parser.add_argument('--ddof', type=int, choices=[0, 1],
                       help='0 = population, 1 = sample variance (default: 1)')
    parser.add_argument('--timeframe-days', type=_positive_days,
                       help='Calendar days for CAGR (default: derived from dates)')
    parser.add_argument('--ranking', choices=sorted(POLICIES), default='sharpe',
                       help='Ranking policy (default: sharpe)')
    parser.add_argument('--config',
                       help='YAML file with analysis settings')
    parser.add_argument('--output',
                       help='Write results JSON to this path')
    parser.add_argument('--quiet', '-q', action='store_true',
                       help='Minimal output (just success/failure)')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Log progress to stderr')

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s | %(levelname)-7s | %(name)s | %(message)s'
        )

    try:
        config = load_config(args.config)
        overrides = {}
        if args.risk_free_rate is not None:
            overrides['risk_free_rate_pct'] = args.risk_free_rate
        if args.ddof is not None:
            overrides['ddof'] = args.ddof
        config = replace(config, **overrides)
    except ConfigError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        price_df = load_price_csv(Path(args.prices))
    except LoaderError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.ranking == 'sharpe':
        policy = POLICIES['sharpe'](epsilon=config.tie_epsilon)
    else:
        policy = POLICIES[args.ranking]()

    result = run_analysis_job(
        price_df,
        config,
        output_path=Path(args.output) if args.output else None,
        assets=args.assets,
        benchmark_a_id=args.benchmark_a,
        benchmark_b_id=args.benchmark_b,
        policy=policy,
        timeframe=args.timeframe_days
    )

    if result['status'] != 'completed':
        print(f"ERROR: Analysis failed: {result['error_message']}", file=sys.stderr)
        if result['results']:
            _show_failures(result['results']['failures'])
        return 1

    if args.quiet:
        print(f"Analyzed {result['assets_analyzed']} asset(s)"
              + (f": {result['output_path']}" if result['output_path'] else ""))
        return 0

    _show_summary(result['results'])
    _show_failures(result['results']['failures'])

    if result['output_path']:
        print(f"Results saved to: {result['output_path']}")

    return 0


def _show_summary(results: dict):
    """Print one line per asset in ranked order."""
    print(f"Risk-free rate: {results['riskFreeRate']:.2f}%  (ddof={results['ddof']})")
    print()

    by_id = {record['assetId']: record for record in results['assets']}
    ranking = results['ranking']

    for position, asset_id in enumerate(ranking['order'], start=1):
        record = by_id[asset_id]
        if record['sortinoRatio'] is None:
            sortino = 'n/a'
        elif record['sortinoNoDownside']:
            sortino = 'inf'
        else:
            sortino = f"{record['sortinoRatio']:.3f}"
        print(f"{position}. {asset_id:<10} "
              f"return {record['annualizedReturn'] * 100:+.2f}%  "
              f"vol {record['annualizedVolatility'] * 100:.2f}%  "
              f"sharpe {record['sharpeRatio']:.3f}  "
              f"sortino {sortino}  "
              f"max dd {record['maxDrawdown'] * 100:.2f}%")

    print()
    if len(ranking['order']) > 1:
        print(f"Best risk-adjusted performance: {ranking['winner']}")

    comparison = ranking.get('comparison')
    if comparison:
        print(f"   vs {comparison['runnerUpId']}: "
              f"return {comparison['returnDifference'] * 100:+.2f} pts, "
              f"max drawdown {comparison['drawdownDifference'] * 100:+.2f} pts")


def _show_failures(failures: list):
    for failure in failures:
        print(f"WARNING: {failure['assetId']} skipped ({failure['errorType']}): "
              f"{failure['errorMessage']}", file=sys.stderr)


if __name__ == '__main__':
    sys.exit(main())
