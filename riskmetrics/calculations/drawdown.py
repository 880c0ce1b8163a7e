"""
Drawdown calculation utilities.
Maximum peak-to-trough decline measured on price levels, not returns.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from riskmetrics.calculations.returns import validate_prices


CALMAR_MIN_DRAWDOWN = 0.0001


@dataclass(frozen=True)
class DrawdownStats:
    """Largest decline from a running peak."""
    max_drawdown: float
    peak_index: int
    trough_index: int

    @property
    def recovery_required(self) -> float:
        """Gain needed from the trough to regain the prior peak."""
        return recovery_required(self.max_drawdown)


def recovery_required(max_drawdown_value: float) -> float:
    """
    Gain needed to get back to the peak after a decline.

    Formula: dd / (1 - dd). A total loss can never be recovered (inf).
    """
    if max_drawdown_value >= 1:
        return math.inf
    return max_drawdown_value / (1 - max_drawdown_value)


def max_drawdown(prices: Sequence[float]) -> DrawdownStats:
    """
    Single pass over prices tracking the running peak.

    Formula: max over t of (peak_t - P_t) / peak_t

    Args:
        prices: Prices in chronological order (at least 1)

    Returns:
        DrawdownStats with max_drawdown in [0, 1) and the indices of the
        peak and trough for that drawdown (both 0 if there is none)

    Raises:
        InsufficientData: If prices is empty
        InvalidInput: If any price is non-finite or not strictly positive
    """
    price_array = validate_prices(prices, min_length=1)

    peak = price_array[0]
    peak_index = 0
    worst = 0.0
    worst_peak_index = 0
    worst_trough_index = 0

    for i, price in enumerate(price_array):
        if price > peak:
            peak = price
            peak_index = i

        drawdown = (peak - price) / peak

        if drawdown > worst:
            worst = float(drawdown)
            worst_peak_index = peak_index
            worst_trough_index = i

    return DrawdownStats(
        max_drawdown=worst,
        peak_index=worst_peak_index,
        trough_index=worst_trough_index
    )


def calmar_ratio(annualized_return: float, max_drawdown_value: float) -> Optional[float]:
    """
    Annualized return per unit of maximum drawdown.

    Returns None when the drawdown is too small to divide by.
    """
    if abs(max_drawdown_value) < CALMAR_MIN_DRAWDOWN:
        return None

    return annualized_return / abs(max_drawdown_value)
