"""
Sortino ratio calculation.

Only strictly negative returns count as downside: the target threshold is
fixed at 0, not at the risk-free rate.

A series without downside dispersion has no finite Sortino ratio. It is
reported as a tagged SortinoResult with no_downside=True; ranking treats it
as +inf and serialization renders the historical 999 sentinel.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence

from riskmetrics.calculations.returns import simple_returns
from riskmetrics.calculations.dispersion import describe, mean
from riskmetrics.calculations.sampling import SamplingPolicy, DAILY_252


NO_DOWNSIDE_SENTINEL = 999.0
DOWNSIDE_TARGET = 0.0


@dataclass(frozen=True)
class SortinoResult:
    """Either a finite Sortino ratio or the no-downside marker."""
    ratio: Optional[float]
    no_downside: bool = False

    def __post_init__(self):
        if self.no_downside and self.ratio is not None:
            raise ValueError("no-downside result cannot carry a ratio")
        if not self.no_downside and self.ratio is None:
            raise ValueError("finite result requires a ratio")

    @classmethod
    def finite(cls, ratio: float) -> 'SortinoResult':
        return cls(ratio=float(ratio), no_downside=False)

    @classmethod
    def without_downside(cls) -> 'SortinoResult':
        return cls(ratio=None, no_downside=True)

    @property
    def ranking_value(self) -> float:
        """Value for ordering: no downside outranks every finite ratio."""
        return math.inf if self.no_downside else self.ratio

    @property
    def display_value(self) -> float:
        """Finite value for serialization (999 for no downside)."""
        return NO_DOWNSIDE_SENTINEL if self.no_downside else self.ratio


@dataclass(frozen=True)
class SortinoStats:
    """Sortino result with annualized downside volatility."""
    sortino: SortinoResult
    downside_volatility: float
    sample_size: int

    @property
    def sortino_ratio(self) -> float:
        return self.sortino.display_value


def sortino_from_returns(
    returns: Sequence[float],
    risk_free_rate_pct: float,
    *,
    ddof: int,
    policy: SamplingPolicy = DAILY_252
) -> SortinoStats:
    """
    Calculate Sortino statistics from an already derived return series.

    Formula: ((mean - rf_daily) / downside_dev) × √periods_per_year
    where downside_dev is the standard deviation of the negative returns.

    Args:
        returns: Per-period simple returns
        risk_free_rate_pct: Annual risk-free rate in percent
        ddof: 0 for population, 1 for sample downside deviation
        policy: Annualization constants

    Returns:
        SortinoStats

    Raises:
        InsufficientData: If returns is empty
        DegenerateSample: If there are downside returns but fewer than ddof + 1
    """
    returns_array = np.asarray(returns, dtype=float)
    mean_return = mean(returns_array)
    sample_size = int(returns_array.size)

    downside = returns_array[returns_array < DOWNSIDE_TARGET]

    if downside.size == 0:
        return SortinoStats(
            sortino=SortinoResult.without_downside(),
            downside_volatility=0.0,
            sample_size=sample_size
        )

    downside_dev = describe(downside, ddof=ddof).std_dev

    if downside_dev == 0:
        # All downside returns identical
        return SortinoStats(
            sortino=SortinoResult.without_downside(),
            downside_volatility=0.0,
            sample_size=sample_size
        )

    daily_risk_free = policy.daily_risk_free_rate(risk_free_rate_pct)
    ratio = ((mean_return - daily_risk_free) / downside_dev) * policy.sqrt_periods

    return SortinoStats(
        sortino=SortinoResult.finite(ratio),
        downside_volatility=float(downside_dev * policy.sqrt_periods),
        sample_size=sample_size
    )


def sortino_stats(
    prices: Sequence[float],
    risk_free_rate_pct: float,
    *,
    ddof: int,
    policy: SamplingPolicy = DAILY_252
) -> SortinoStats:
    """
    Calculate Sortino statistics for a price series.

    Raises:
        InsufficientData: If fewer than 2 prices
        InvalidInput: If any price is non-finite or not strictly positive
        DegenerateSample: If the downside sample is too small for ddof
    """
    returns = simple_returns(prices)
    return sortino_from_returns(returns, risk_free_rate_pct, ddof=ddof, policy=policy)
