"""
Guardrails for composed statistics - sanity checks on engine output.
A record that fails a check is treated as a failure for that asset rather
than being written out with silently wrong numbers.
"""

import math
from typing import Any, Dict, List

from riskmetrics.errors import MetricsError
from riskmetrics.stats_record import StatsRecord


class GuardrailError(MetricsError):
    """Raised when a composed record contains impossible values."""
    pass


REQUIRED_FINITE_FIELDS = [
    'annualizedReturn',
    'annualizedVolatility',
    'sharpeRatio',
    'maxDrawdown',
    'periodReturn',
]

OPTIONAL_FINITE_FIELDS = [
    'downsideVolatility',
    'sortinoRatio',
    'correlationToBenchmarkA',
    'correlationToBenchmarkB',
    'beta',
    'betaToBenchmarkB',
    'cagr',
    'calmarRatio',
]


def validate_stats_record(record: StatsRecord) -> None:
    """
    Validate that all numeric fields of a record are finite and in range.

    Args:
        record: Composed StatsRecord

    Raises:
        GuardrailError: If NaN, infinite or out-of-range values are found
    """
    data = record.to_dict()
    problems = collect_problems(data)
    if problems:
        raise GuardrailError(f"Invalid statistics for {record.asset_id}: " + "; ".join(problems))


def collect_problems(data: Dict[str, Any]) -> List[str]:
    """Return a description of every invalid field in a serialized record."""
    problems = []

    def check_value(value, path: str, required: bool):
        if value is None:
            if required:
                problems.append(f"{path} is missing")
            return

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            problems.append(f"{path} is not numeric")
            return

        if math.isnan(value):
            problems.append(f"NaN value found in {path}")
        elif math.isinf(value):
            problems.append(f"Infinite value found in {path}")

    for name in REQUIRED_FINITE_FIELDS:
        check_value(data.get(name), name, required=True)

    for name in OPTIONAL_FINITE_FIELDS:
        check_value(data.get(name), name, required=False)

    if problems:
        return problems

    max_dd = data['maxDrawdown']
    if not (0 <= max_dd < 1):
        problems.append(f"maxDrawdown out of bounds: {max_dd}")

    downside_vol = data.get('downsideVolatility')
    if data['annualizedVolatility'] < 0 or (downside_vol is not None and downside_vol < 0):
        problems.append("Negative volatility")

    for name in ('correlationToBenchmarkA', 'correlationToBenchmarkB'):
        value = data.get(name)
        if value is not None and not (-1 <= value <= 1):
            problems.append(f"{name} out of bounds: {value}")

    return problems
