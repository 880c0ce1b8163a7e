"""
Sharpe ratio calculation.
Annualized return, annualized volatility and risk-adjusted excess return.
"""

from dataclasses import dataclass
from typing import Sequence

from riskmetrics.calculations.returns import simple_returns
from riskmetrics.calculations.dispersion import describe
from riskmetrics.calculations.sampling import SamplingPolicy, DAILY_252


@dataclass(frozen=True)
class SharpeStats:
    """Sharpe ratio with its annualized inputs."""
    sharpe_ratio: float
    annualized_return: float
    annualized_volatility: float
    sample_size: int


def sharpe_from_returns(
    returns: Sequence[float],
    risk_free_rate_pct: float,
    *,
    ddof: int,
    policy: SamplingPolicy = DAILY_252
) -> SharpeStats:
    """
    Calculate Sharpe statistics from an already derived return series.

    Formula: ((mean - rf_daily) / std) × √periods_per_year

    Args:
        returns: Per-period simple returns
        risk_free_rate_pct: Annual risk-free rate in percent (4.5 = 4.5%)
        ddof: 0 for population, 1 for sample standard deviation
        policy: Annualization constants

    Returns:
        SharpeStats. A zero-volatility series yields sharpe_ratio = 0.

    Raises:
        InsufficientData: If returns is empty
        DegenerateSample: If len(returns) - ddof <= 0
    """
    stats = describe(returns, ddof=ddof)

    annualized_return = stats.mean * policy.periods_per_year
    annualized_volatility = stats.std_dev * policy.sqrt_periods

    if stats.std_dev == 0 or annualized_volatility == 0:
        # Riskless constant series: no meaningful risk-adjusted excess return
        sharpe_ratio = 0.0
    else:
        daily_risk_free = policy.daily_risk_free_rate(risk_free_rate_pct)
        sharpe_ratio = ((stats.mean - daily_risk_free) / stats.std_dev) * policy.sqrt_periods

    return SharpeStats(
        sharpe_ratio=float(sharpe_ratio),
        annualized_return=float(annualized_return),
        annualized_volatility=float(annualized_volatility),
        sample_size=stats.count
    )


def sharpe_stats(
    prices: Sequence[float],
    risk_free_rate_pct: float,
    *,
    ddof: int,
    policy: SamplingPolicy = DAILY_252
) -> SharpeStats:
    """
    Calculate Sharpe statistics for a price series.

    Args:
        prices: Prices in chronological order
        risk_free_rate_pct: Annual risk-free rate in percent
        ddof: 0 for population, 1 for sample standard deviation
        policy: Annualization constants

    Raises:
        InsufficientData: If fewer than 2 prices
        InvalidInput: If any price is non-finite or not strictly positive
    """
    returns = simple_returns(prices)
    return sharpe_from_returns(returns, risk_free_rate_pct, ddof=ddof, policy=policy)
