"""
Stats record composer - runs every calculation for one asset.
Pure function that combines Sharpe, Sortino, drawdown and benchmark metrics
into an immutable StatsRecord.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional, Sequence

from riskmetrics.errors import MetricsError, DegenerateSample
from riskmetrics.calculations.returns import simple_returns, validate_prices, period_return, cagr
from riskmetrics.calculations.sampling import SamplingPolicy, DAILY_252
from riskmetrics.calculations.sharpe import sharpe_from_returns
from riskmetrics.calculations.sortino import sortino_from_returns, SortinoResult, SortinoStats
from riskmetrics.calculations.drawdown import max_drawdown, calmar_ratio, recovery_required
from riskmetrics.calculations.correlation import correlation_from_prices, beta_from_prices

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignedPair:
    """Asset and benchmark prices observed on the same dates."""
    asset_prices: Sequence[float]
    benchmark_prices: Sequence[float]


@dataclass(frozen=True)
class PairwiseStats:
    correlation: Optional[float]
    beta: Optional[float]


@dataclass(frozen=True)
class StatsRecord:
    """Risk/return statistics for one asset."""
    asset_id: str
    annualized_return: float
    annualized_volatility: float
    sharpe_ratio: float
    downside_volatility: Optional[float]
    sortino: Optional[SortinoResult]
    max_drawdown: float
    sample_size: int
    period_return: float
    start_price: float
    current_price: float
    low_price: float
    high_price: float
    drawdown_peak_index: int
    drawdown_trough_index: int
    cagr: Optional[float] = None
    calmar_ratio: Optional[float] = None
    correlation_to_benchmark_a: Optional[float] = None
    correlation_to_benchmark_b: Optional[float] = None
    beta: Optional[float] = None
    beta_to_benchmark_b: Optional[float] = None

    @property
    def sortino_ratio(self) -> Optional[float]:
        """Sortino ratio as a finite number (999 when there is no downside, None if undefined)."""
        if self.sortino is None:
            return None
        return self.sortino.display_value

    @property
    def recovery_required(self) -> float:
        """Gain needed from the worst trough to regain the prior peak."""
        return recovery_required(self.max_drawdown)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used in results files."""
        return {
            'assetId': self.asset_id,
            'annualizedReturn': self.annualized_return,
            'annualizedVolatility': self.annualized_volatility,
            'sharpeRatio': self.sharpe_ratio,
            'downsideVolatility': self.downside_volatility,
            'sortinoRatio': self.sortino_ratio,
            'sortinoNoDownside': self.sortino is not None and self.sortino.no_downside,
            'maxDrawdown': self.max_drawdown,
            'recoveryRequired': self.recovery_required,
            'correlationToBenchmarkA': self.correlation_to_benchmark_a,
            'correlationToBenchmarkB': self.correlation_to_benchmark_b,
            'beta': self.beta,
            'betaToBenchmarkB': self.beta_to_benchmark_b,
            'sampleSize': self.sample_size,
            'periodReturn': self.period_return,
            'cagr': self.cagr,
            'calmarRatio': self.calmar_ratio,
            'startPrice': self.start_price,
            'currentPrice': self.current_price,
            'lowPrice': self.low_price,
            'highPrice': self.high_price,
            'drawdownPeakIndex': self.drawdown_peak_index,
            'drawdownTroughIndex': self.drawdown_trough_index
        }


def pairwise_stats(pair: AlignedPair) -> PairwiseStats:
    """
    Correlation and beta of an asset against one benchmark.

    Raises:
        LengthMismatch: If the aligned series differ in length
        InsufficientData: If fewer than 3 aligned prices
        InvalidInput: If either series has a non-positive or non-finite price
    """
    correlation = correlation_from_prices(pair.asset_prices, pair.benchmark_prices)
    beta_value = beta_from_prices(pair.asset_prices, pair.benchmark_prices)
    return PairwiseStats(correlation=correlation, beta=beta_value)


def _optional_pairwise(asset_id: str, label: str, pair: Optional[AlignedPair]) -> PairwiseStats:
    if pair is None:
        return PairwiseStats(correlation=None, beta=None)

    try:
        return pairwise_stats(pair)
    except MetricsError as e:
        # Pairwise failure never blocks the single-asset metrics
        logger.warning(f"Skipping {label} metrics for {asset_id}: {e}")
        return PairwiseStats(correlation=None, beta=None)


def _optional_sortino(
    asset_id: str,
    returns,
    risk_free_rate_pct: float,
    ddof: int,
    policy: SamplingPolicy
) -> Optional[SortinoStats]:
    try:
        return sortino_from_returns(returns, risk_free_rate_pct, ddof=ddof, policy=policy)
    except DegenerateSample as e:
        logger.warning(f"Sortino undefined for {asset_id}: {e}")
        return None


def compute_stats_record(
    asset_id: str,
    prices: Sequence[float],
    risk_free_rate_pct: float,
    *,
    ddof: int,
    policy: SamplingPolicy = DAILY_252,
    benchmark_a: Optional[AlignedPair] = None,
    benchmark_b: Optional[AlignedPair] = None,
    timeframe_days: Optional[float] = None
) -> StatsRecord:
    """
    Compose all statistics for one asset.

    Args:
        asset_id: Identifier carried into the record
        prices: Prices in chronological order
        risk_free_rate_pct: Annual risk-free rate in percent
        ddof: 0 for population, 1 for sample statistics (Sharpe and Sortino)
        policy: Annualization constants
        benchmark_a: Asset/benchmark prices aligned by date (correlation and beta)
        benchmark_b: Second aligned benchmark pair
        timeframe_days: Calendar days spanned, enables CAGR

    Returns:
        StatsRecord

    Raises:
        InsufficientData: If fewer than 2 prices
        InvalidInput: If any price is non-finite or not strictly positive
        DegenerateSample: If the return variance is underdetermined for ddof
            (an underdetermined downside variance leaves the Sortino fields None)
    """
    price_array = validate_prices(prices, min_length=2)
    returns = simple_returns(price_array)

    sharpe = sharpe_from_returns(returns, risk_free_rate_pct, ddof=ddof, policy=policy)
    sortino = _optional_sortino(asset_id, returns, risk_free_rate_pct, ddof, policy)
    drawdown = max_drawdown(price_array)

    cagr_value = None
    if timeframe_days is not None:
        cagr_value = cagr(price_array, timeframe_days, days_per_year=policy.days_per_year)

    pair_a = _optional_pairwise(asset_id, 'benchmark A', benchmark_a)
    pair_b = _optional_pairwise(asset_id, 'benchmark B', benchmark_b)

    return StatsRecord(
        asset_id=asset_id,
        annualized_return=sharpe.annualized_return,
        annualized_volatility=sharpe.annualized_volatility,
        sharpe_ratio=sharpe.sharpe_ratio,
        downside_volatility=sortino.downside_volatility if sortino is not None else None,
        sortino=sortino.sortino if sortino is not None else None,
        max_drawdown=drawdown.max_drawdown,
        sample_size=sharpe.sample_size,
        period_return=period_return(price_array),
        start_price=float(price_array[0]),
        current_price=float(price_array[-1]),
        low_price=float(price_array.min()),
        high_price=float(price_array.max()),
        drawdown_peak_index=drawdown.peak_index,
        drawdown_trough_index=drawdown.trough_index,
        cagr=cagr_value,
        calmar_ratio=calmar_ratio(sharpe.annualized_return, drawdown.max_drawdown),
        correlation_to_benchmark_a=pair_a.correlation,
        correlation_to_benchmark_b=pair_b.correlation,
        beta=pair_a.beta,
        beta_to_benchmark_b=pair_b.beta
    )
