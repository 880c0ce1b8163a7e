"""
Test Suite for riskmetrics

Includes:
- Unit tests for the calculation engines (returns, dispersion, Sharpe,
  Sortino, drawdown, correlation and beta)
- Ranking and guardrail tests
- Integration tests for the analysis job and CLI
- Results contract tests against fixtures/sample_prices.csv
"""
