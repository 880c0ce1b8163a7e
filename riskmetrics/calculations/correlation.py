"""
Correlation and beta between two return series.
Alignment of the underlying price series is the caller's responsibility.
"""

import math
import numpy as np
from typing import Optional, Sequence, Tuple

from riskmetrics.errors import LengthMismatch, InsufficientData
from riskmetrics.calculations.returns import simple_returns


def _paired_arrays(
    first: Sequence[float],
    second: Sequence[float]
) -> Tuple[np.ndarray, np.ndarray]:
    if len(first) != len(second):
        raise LengthMismatch(
            f"Series must have same length: {len(first)} vs {len(second)}"
        )

    if len(first) < 2:
        raise InsufficientData("Insufficient data: need at least 2 paired returns")

    return np.asarray(first, dtype=float), np.asarray(second, dtype=float)


def pearson_correlation(returns1: Sequence[float], returns2: Sequence[float]) -> float:
    """
    Pearson correlation coefficient.

    Formula: Σ(d1·d2) / √(Σd1² · Σd2²), d = r - mean(r)

    Returns:
        Correlation in [-1, 1], or 0 if either series is constant

    Raises:
        LengthMismatch: If the series differ in length
        InsufficientData: If fewer than 2 returns
    """
    r1, r2 = _paired_arrays(returns1, returns2)

    d1 = r1 - r1.mean()
    d2 = r2 - r2.mean()

    numerator = float(np.sum(d1 * d2))
    denominator = math.sqrt(float(np.sum(d1 ** 2)) * float(np.sum(d2 ** 2)))

    if denominator == 0:
        return 0.0

    return float(np.clip(numerator / denominator, -1.0, 1.0))


def beta(asset_returns: Sequence[float], benchmark_returns: Sequence[float]) -> Optional[float]:
    """
    Sensitivity of asset returns to benchmark returns.

    Formula: cov(asset, benchmark) / var(benchmark), both with ddof=1

    Returns:
        Beta, or None if the benchmark did not move (zero variance)

    Raises:
        LengthMismatch: If the series differ in length
        InsufficientData: If fewer than 2 returns
    """
    asset, benchmark = _paired_arrays(asset_returns, benchmark_returns)

    n = asset.size
    asset_diff = asset - asset.mean()
    benchmark_diff = benchmark - benchmark.mean()

    covariance = float(np.sum(asset_diff * benchmark_diff)) / (n - 1)
    benchmark_variance = float(np.sum(benchmark_diff ** 2)) / (n - 1)

    if benchmark_variance == 0:
        return None

    return covariance / benchmark_variance


def correlation_from_prices(prices1: Sequence[float], prices2: Sequence[float]) -> float:
    """Pearson correlation of the simple returns of two aligned price series."""
    if len(prices1) != len(prices2):
        raise LengthMismatch(
            f"Price series must have same length: {len(prices1)} vs {len(prices2)}"
        )
    return pearson_correlation(simple_returns(prices1), simple_returns(prices2))


def beta_from_prices(
    asset_prices: Sequence[float],
    benchmark_prices: Sequence[float]
) -> Optional[float]:
    """Beta of the simple returns of two aligned price series."""
    if len(asset_prices) != len(benchmark_prices):
        raise LengthMismatch(
            f"Price series must have same length: {len(asset_prices)} vs {len(benchmark_prices)}"
        )
    return beta(simple_returns(asset_prices), simple_returns(benchmark_prices))
