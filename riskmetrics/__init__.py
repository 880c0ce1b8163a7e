"""
Risk Metrics Engine

Calculates risk-adjusted performance metrics from price series:
- Simple returns and dispersion (population or sample)
- Sharpe and Sortino ratios (annualized)
- Maximum drawdown
- Correlation and beta against benchmarks
- Ranking of several assets by risk-adjusted performance
"""

__version__ = "0.1.0"
