"""
Orchestrated analysis job - price frame to ranked results JSON.
Runs the engines for each asset independently, isolates failures, ranks the
assets that succeeded and persists the results file.
"""

import os
import json
import logging
import tempfile
import pandas as pd
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, List

from riskmetrics import __version__
from riskmetrics.config import AnalysisConfig
from riskmetrics.errors import MetricsError
from riskmetrics.guardrails import validate_stats_record
from riskmetrics.loaders import price_series, align_series, timeframe_days, list_assets, LoaderError
from riskmetrics.ranking import RankingPolicy, SharpeSortinoPolicy, rank_records
from riskmetrics.stats_record import AlignedPair, StatsRecord, compute_stats_record

logger = logging.getLogger(__name__)


class AnalysisJobError(Exception):
    """Raised when the analysis job cannot run at all."""
    pass


def analyze_asset(
    price_df: pd.DataFrame,
    asset_id: str,
    config: AnalysisConfig,
    benchmark_a: Optional[pd.Series] = None,
    benchmark_b: Optional[pd.Series] = None,
    timeframe: Optional[float] = None
) -> StatsRecord:
    """
    Compute and validate the StatsRecord for a single asset.

    Args:
        price_df: Long-format price frame (date, asset, close)
        asset_id: Asset to analyze
        config: Analysis settings
        benchmark_a: Benchmark close prices indexed by date
        benchmark_b: Second benchmark close prices indexed by date
        timeframe: Calendar days for CAGR (derived from dates if None)

    Raises:
        MetricsError: If any calculation for this asset fails
    """
    series = price_series(price_df, asset_id)

    pair_a = _align_benchmark(asset_id, 'benchmark A', series, benchmark_a, config)
    pair_b = _align_benchmark(asset_id, 'benchmark B', series, benchmark_b, config)

    if timeframe is None:
        timeframe = timeframe_days(series)

    record = compute_stats_record(
        asset_id,
        series.tolist(),
        config.risk_free_rate_pct,
        ddof=config.ddof,
        policy=config.sampling,
        benchmark_a=pair_a,
        benchmark_b=pair_b,
        timeframe_days=timeframe
    )

    validate_stats_record(record)
    return record


def _align_benchmark(
    asset_id: str,
    label: str,
    series: pd.Series,
    benchmark: Optional[pd.Series],
    config: AnalysisConfig
) -> Optional[AlignedPair]:
    if benchmark is None:
        return None
    try:
        return align_series(series, benchmark, min_points=config.min_aligned_points)
    except LoaderError as e:
        logger.warning(f"Skipping {label} metrics for {asset_id}: {e}")
        return None


def _load_benchmark(price_df: pd.DataFrame, benchmark_id: Optional[str]) -> Optional[pd.Series]:
    if benchmark_id is None:
        return None
    try:
        return price_series(price_df, benchmark_id)
    except MetricsError as e:
        logger.warning(f"Benchmark {benchmark_id} unavailable: {e}")
        return None


def run_analysis(
    price_df: pd.DataFrame,
    config: AnalysisConfig,
    assets: Optional[List[str]] = None,
    benchmark_a_id: Optional[str] = None,
    benchmark_b_id: Optional[str] = None,
    policy: Optional[RankingPolicy] = None,
    timeframe: Optional[float] = None
) -> Dict[str, Any]:
    """
    Analyze several assets and rank the ones that succeed.

    A failure for one asset is recorded and never stops its siblings.

    Args:
        price_df: Long-format price frame (date, asset, close)
        config: Analysis settings
        assets: Assets to analyze (defaults to every asset in the frame
            except the benchmarks)
        benchmark_a_id: Asset id used for correlation/beta (benchmark A)
        benchmark_b_id: Asset id used for benchmark B
        policy: Ranking policy (defaults to SharpeSortinoPolicy with the
            configured epsilon)
        timeframe: Calendar days for CAGR (derived per asset if None)

    Returns:
        Results dictionary: records, failures, ranking and metadata

    Raises:
        AnalysisJobError: If there is nothing to analyze
    """
    if price_df.empty:
        raise AnalysisJobError("Empty price data provided")

    if assets is None:
        benchmarks = {benchmark_a_id, benchmark_b_id}
        assets = [a for a in list_assets(price_df) if a not in benchmarks]

    if not assets:
        raise AnalysisJobError("No assets to analyze")

    if policy is None:
        policy = SharpeSortinoPolicy(epsilon=config.tie_epsilon)

    benchmark_a = _load_benchmark(price_df, benchmark_a_id)
    benchmark_b = _load_benchmark(price_df, benchmark_b_id)

    records = []
    failures = []

    for asset_id in assets:
        try:
            record = analyze_asset(
                price_df,
                asset_id,
                config,
                benchmark_a=benchmark_a,
                benchmark_b=benchmark_b,
                timeframe=timeframe
            )
            records.append(record)
            logger.info(f"Analyzed {asset_id}: sharpe={record.sharpe_ratio:.3f}, "
                        f"max_drawdown={record.max_drawdown:.4f}")
        except MetricsError as e:
            logger.warning(f"Analysis failed for {asset_id}: {e}")
            failures.append({
                'assetId': asset_id,
                'errorType': type(e).__name__,
                'errorMessage': str(e)
            })

    ranking = rank_records(records, policy) if records else None

    return {
        'riskFreeRate': config.risk_free_rate_pct,
        'ddof': config.ddof,
        'periodsPerYear': config.sampling.periods_per_year,
        'rankingPolicy': policy.name,
        'benchmarks': {'a': benchmark_a_id, 'b': benchmark_b_id},
        'assets': [record.to_dict() for record in records],
        'failures': failures,
        'ranking': ranking.to_dict() if ranking is not None else None,
        'metadata': {
            'calculatedAt': datetime.now().isoformat(),
            'calculationVersion': __version__
        }
    }


def write_results_atomic(results: Dict[str, Any], output_path: Path) -> Dict[str, Any]:
    """
    Write results JSON atomically (temp file in the same directory, then rename).

    Returns:
        Dictionary with output path and bytes written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(results, indent=2, default=str)

    temp_fd, temp_path_str = tempfile.mkstemp(
        suffix='.tmp',
        prefix=f'{output_path.stem}_',
        dir=output_path.parent
    )
    temp_path = Path(temp_path_str)

    try:
        with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, output_path)
    except OSError:
        if temp_path.exists():
            temp_path.unlink()
        raise

    return {
        'output_path': str(output_path),
        'bytes_written': len(content.encode('utf-8'))
    }


def run_analysis_job(
    price_df: pd.DataFrame,
    config: AnalysisConfig,
    output_path: Optional[Path] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Run the analysis and optionally persist results.

    Returns:
        Job summary with status, counts and the results dictionary
    """
    start_time = datetime.now()

    try:
        results = run_analysis(price_df, config, **kwargs)
    except AnalysisJobError as e:
        logger.error(f"Analysis job failed: {e}")
        return {
            'status': 'failed',
            'error_message': str(e),
            'output_path': None,
            'assets_analyzed': 0,
            'assets_failed': 0,
            'results': None,
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }

    written_path = None
    if output_path is not None:
        written_path = write_results_atomic(results, output_path)['output_path']

    status = 'completed' if results['assets'] else 'failed'

    return {
        'status': status,
        'error_message': None if results['assets'] else 'No asset could be analyzed',
        'output_path': written_path,
        'assets_analyzed': len(results['assets']),
        'assets_failed': len(results['failures']),
        'results': results,
        'duration_seconds': (datetime.now() - start_time).total_seconds()
    }
