"""
Dispersion statistics over a return sequence.

Variance takes an explicit ddof (delta degrees of freedom):
- ddof=0: population variance, divides by N
- ddof=1: sample variance, divides by N - 1

There is no default; every caller states which estimator it needs.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Sequence

from riskmetrics.errors import InvalidInput, InsufficientData, DegenerateSample


@dataclass(frozen=True)
class DispersionStats:
    """Mean, variance and standard deviation of a sequence."""
    mean: float
    variance: float
    std_dev: float
    count: int
    ddof: int


def _as_array(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise InsufficientData("Insufficient data: empty sequence")
    return arr


def _check_ddof(ddof: int) -> None:
    if ddof not in (0, 1):
        raise InvalidInput(f"ddof must be 0 (population) or 1 (sample), got {ddof}")


def mean(values: Sequence[float]) -> float:
    """Arithmetic average."""
    return float(_as_array(values).mean())


def variance(values: Sequence[float], *, ddof: int) -> float:
    """
    Variance with configurable denominator.

    Formula: sum((r - mean)^2) / (N - ddof)

    Raises:
        DegenerateSample: If N - ddof <= 0
    """
    _check_ddof(ddof)
    arr = _as_array(values)

    if arr.size - ddof <= 0:
        raise DegenerateSample(
            f"Variance undefined for {arr.size} observation(s) with ddof={ddof}"
        )

    return float(np.var(arr, ddof=ddof))


def std_dev(values: Sequence[float], *, ddof: int) -> float:
    """Square root of variance()."""
    return math.sqrt(variance(values, ddof=ddof))


def describe(values: Sequence[float], *, ddof: int) -> DispersionStats:
    """
    Compute all dispersion statistics in one call.

    Args:
        values: Return sequence
        ddof: 0 for population, 1 for sample statistics

    Returns:
        DispersionStats

    Raises:
        InsufficientData: If the sequence is empty
        DegenerateSample: If N - ddof <= 0
    """
    var = variance(values, ddof=ddof)
    return DispersionStats(
        mean=mean(values),
        variance=var,
        std_dev=math.sqrt(var),
        count=len(values),
        ddof=ddof
    )
