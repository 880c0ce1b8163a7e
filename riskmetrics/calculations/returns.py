"""
Returns calculation utilities.
Pure functions for deriving simple returns from a price series.
"""

import math
import numpy as np
from typing import Sequence

from riskmetrics.errors import InvalidInput, InsufficientData


def validate_prices(prices: Sequence[float], min_length: int = 2) -> np.ndarray:
    """
    Check a price series and return it as a float array.

    Args:
        prices: Prices in chronological order
        min_length: Minimum number of observations required

    Returns:
        Numpy array copy of the prices

    Raises:
        InsufficientData: If fewer than min_length prices
        InvalidInput: If any price is non-finite or not strictly positive
    """
    if len(prices) < min_length:
        raise InsufficientData(
            f"Insufficient data: need at least {min_length} prices, have {len(prices)}"
        )

    price_array = np.array(prices, dtype=float)

    if not np.all(np.isfinite(price_array)):
        raise InvalidInput("Non-finite prices not allowed")

    if np.any(price_array <= 0):
        raise InvalidInput("Zero or negative prices not allowed")

    return price_array


def simple_returns(prices: Sequence[float]) -> np.ndarray:
    """
    Calculate consecutive simple returns.

    Formula: r_i = (P_i - P_{i-1}) / P_{i-1}

    Args:
        prices: Prices in chronological order

    Returns:
        Numpy array of returns (length = len(prices) - 1)

    Raises:
        InsufficientData: If fewer than 2 prices
        InvalidInput: If any price is non-finite or not strictly positive

    Example:
        prices = [100, 110, 99] -> [0.10, -0.10]
    """
    price_array = validate_prices(prices, min_length=2)
    return np.diff(price_array) / price_array[:-1]


def period_return(prices: Sequence[float]) -> float:
    """
    Holding-period return from first to last price.

    Formula: (P_last - P_first) / P_first
    """
    price_array = validate_prices(prices, min_length=2)
    return float((price_array[-1] - price_array[0]) / price_array[0])


def cagr(prices: Sequence[float], timeframe_days: float, days_per_year: int = 365) -> float:
    """
    Compound annual growth rate over a calendar timeframe.

    Formula: (P_last / P_first) ^ (1 / years) - 1, years = timeframe_days / days_per_year

    Args:
        prices: Prices in chronological order
        timeframe_days: Calendar days spanned by the series
        days_per_year: Calendar days per year

    Raises:
        InvalidInput: If timeframe_days is not positive
    """
    if not timeframe_days or timeframe_days <= 0 or not math.isfinite(timeframe_days):
        raise InvalidInput("Timeframe must be a positive number of days")

    price_array = validate_prices(prices, min_length=2)
    years = timeframe_days / days_per_year
    growth = price_array[-1] / price_array[0]

    return float(growth ** (1 / years) - 1)
