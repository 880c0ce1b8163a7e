"""
Sampling-frequency policy used to annualize per-period statistics.
"""

import math
from dataclasses import dataclass

from riskmetrics.errors import InvalidInput


# Daily observations, 252 trading periods per year, 365 calendar days for
# pro-rating the annual risk-free rate
TRADING_PERIODS_PER_YEAR = 252
CALENDAR_DAYS_PER_YEAR = 365


@dataclass(frozen=True)
class SamplingPolicy:
    """Annualization constants for one sampling frequency."""
    periods_per_year: int = TRADING_PERIODS_PER_YEAR
    days_per_year: int = CALENDAR_DAYS_PER_YEAR

    def __post_init__(self):
        if self.periods_per_year <= 0:
            raise InvalidInput("periods_per_year must be positive")
        if self.days_per_year <= 0:
            raise InvalidInput("days_per_year must be positive")

    @property
    def sqrt_periods(self) -> float:
        """Volatility scaling factor."""
        return math.sqrt(self.periods_per_year)

    def daily_risk_free_rate(self, risk_free_rate_pct: float) -> float:
        """Pro-rate an annual percentage rate to one calendar day."""
        return risk_free_rate_pct / 100 / self.days_per_year


DAILY_252 = SamplingPolicy()
