"""
Tests for guardrails - impossible values in composed records are rejected.
"""

import dataclasses
import math
import pytest

from riskmetrics.guardrails import (
    validate_stats_record,
    collect_problems,
    GuardrailError
)
from riskmetrics.stats_record import compute_stats_record
from riskmetrics.errors import MetricsError


VOLATILE_PRICES = [100.0, 120.0, 80.0, 110.0, 90.0, 130.0, 70.0, 100.0]


@pytest.fixture
def valid_record():
    return compute_stats_record('VOL', VOLATILE_PRICES, 4.5, ddof=1)


class TestValidateStatsRecord:
    """Tests for validate_stats_record."""

    def test_valid_record_passes(self, valid_record):
        validate_stats_record(valid_record)

    def test_no_downside_record_passes(self):
        """The 999 sentinel is finite and allowed."""
        record = compute_stats_record('UP', [100.0, 101.0, 102.0], 4.5, ddof=1)

        validate_stats_record(record)

    def test_undefined_sortino_passes(self):
        """One downside return with ddof=1 leaves the Sortino fields empty."""
        record = compute_stats_record('ONE_DIP', [100.0, 90.0, 100.0, 105.0], 4.5, ddof=1)

        assert record.sortino is None
        validate_stats_record(record)

    def test_nan_sharpe_rejected(self, valid_record):
        bad = dataclasses.replace(valid_record, sharpe_ratio=math.nan)

        with pytest.raises(GuardrailError, match="NaN value found in sharpeRatio"):
            validate_stats_record(bad)

    def test_infinite_return_rejected(self, valid_record):
        bad = dataclasses.replace(valid_record, annualized_return=math.inf)

        with pytest.raises(GuardrailError, match="Infinite value found in annualizedReturn"):
            validate_stats_record(bad)

    def test_drawdown_out_of_bounds(self, valid_record):
        bad = dataclasses.replace(valid_record, max_drawdown=1.0)

        with pytest.raises(GuardrailError, match="maxDrawdown out of bounds"):
            validate_stats_record(bad)

    def test_negative_volatility(self, valid_record):
        bad = dataclasses.replace(valid_record, annualized_volatility=-0.1)

        with pytest.raises(GuardrailError, match="Negative volatility"):
            validate_stats_record(bad)

    def test_correlation_out_of_bounds(self, valid_record):
        bad = dataclasses.replace(valid_record, correlation_to_benchmark_a=1.5)

        with pytest.raises(GuardrailError, match="correlationToBenchmarkA out of bounds"):
            validate_stats_record(bad)

    def test_nan_optional_field_rejected(self, valid_record):
        bad = dataclasses.replace(valid_record, beta=math.nan)

        with pytest.raises(GuardrailError, match="NaN value found in beta"):
            validate_stats_record(bad)

    def test_error_names_asset(self, valid_record):
        bad = dataclasses.replace(valid_record, sharpe_ratio=math.nan)

        with pytest.raises(GuardrailError, match="Invalid statistics for VOL"):
            validate_stats_record(bad)

    def test_guardrail_error_is_metrics_error(self):
        assert issubclass(GuardrailError, MetricsError)


class TestCollectProblems:
    """Tests for collect_problems on serialized records."""

    def test_missing_required_field(self, valid_record):
        data = valid_record.to_dict()
        del data['sharpeRatio']

        problems = collect_problems(data)

        assert "sharpeRatio is missing" in problems

    def test_non_numeric_field(self, valid_record):
        data = valid_record.to_dict()
        data['maxDrawdown'] = '0.2'

        problems = collect_problems(data)

        assert "maxDrawdown is not numeric" in problems

    def test_optional_fields_may_be_none(self, valid_record):
        data = valid_record.to_dict()

        assert data['beta'] is None
        assert collect_problems(data) == []

    def test_multiple_problems_reported(self, valid_record):
        data = valid_record.to_dict()
        data['sharpeRatio'] = math.nan
        data['cagr'] = -math.inf

        problems = collect_problems(data)

        assert len(problems) == 2
