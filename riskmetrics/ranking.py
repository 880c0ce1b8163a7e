"""
Ranking of per-asset statistics records.

Ordering is delegated to a RankingPolicy so the criteria can be swapped
without touching the calculation engines. The default policy orders by
Sharpe ratio and treats ratios within an epsilon as tied, falling back to
Sortino and then Calmar.
"""

import math
from dataclasses import dataclass
from functools import cmp_to_key
from typing import List, Optional, Sequence

from riskmetrics.errors import InsufficientData, InvalidInput
from riskmetrics.stats_record import StatsRecord


DEFAULT_TIE_EPSILON = 0.01


def _descending(a: float, b: float) -> int:
    if a > b:
        return -1
    if a < b:
        return 1
    return 0


def _sortino_value(record: StatsRecord) -> float:
    if record.sortino is None:
        return -math.inf
    return record.sortino.ranking_value


def _calmar_value(record: StatsRecord) -> float:
    if record.calmar_ratio is None or not math.isfinite(record.calmar_ratio):
        return -math.inf
    return record.calmar_ratio


class RankingPolicy:
    """Comparison strategy: negative if a ranks before b, positive if after."""

    name = 'base'

    def compare(self, a: StatsRecord, b: StatsRecord) -> int:
        raise NotImplementedError

    def order(self, records: Sequence[StatsRecord]) -> List[StatsRecord]:
        # sorted() is stable: fully tied records keep their input order
        return sorted(records, key=cmp_to_key(self.compare))


class SharpeSortinoPolicy(RankingPolicy):
    """
    Sharpe descending; Sharpe values within epsilon are a near-tie broken by
    Sortino descending, then Calmar descending. An undefined Sortino ranks
    below every finite one.

    The near-tie relation is not transitive: with Sharpe 1.50, 1.495 and
    1.489 and Sortino 1, 2 and 3, each neighbouring pair is a near-tie won
    on Sortino while the outer pair is decided on Sharpe. Such cycles have
    no consistent order, so with three or more records the result can
    depend on input order.
    """

    name = 'sharpe'

    def __init__(self, epsilon: float = DEFAULT_TIE_EPSILON):
        if epsilon < 0:
            raise InvalidInput(f"epsilon must be non-negative, got {epsilon}")
        self.epsilon = epsilon

    def compare(self, a: StatsRecord, b: StatsRecord) -> int:
        if abs(a.sharpe_ratio - b.sharpe_ratio) > self.epsilon:
            return _descending(a.sharpe_ratio, b.sharpe_ratio)

        by_sortino = _descending(_sortino_value(a), _sortino_value(b))
        if by_sortino != 0:
            return by_sortino

        return _descending(_calmar_value(a), _calmar_value(b))


class DrawdownFirstPolicy(RankingPolicy):
    """Smallest maximum drawdown first, then Sharpe descending."""

    name = 'drawdown'

    def compare(self, a: StatsRecord, b: StatsRecord) -> int:
        if a.max_drawdown != b.max_drawdown:
            return -1 if a.max_drawdown < b.max_drawdown else 1
        return _descending(a.sharpe_ratio, b.sharpe_ratio)


POLICIES = {
    SharpeSortinoPolicy.name: SharpeSortinoPolicy,
    DrawdownFirstPolicy.name: DrawdownFirstPolicy,
}


@dataclass(frozen=True)
class WinnerComparison:
    """Differences between the winner and the runner-up (winner minus runner-up)."""
    runner_up_id: str
    return_difference: float
    period_return_difference: float
    drawdown_difference: float


@dataclass(frozen=True)
class RankingResult:
    """Records in ranked order; the first one is the winner."""
    ordered: List[StatsRecord]
    comparison: Optional[WinnerComparison] = None

    @property
    def winner(self) -> StatsRecord:
        return self.ordered[0]

    def to_dict(self):
        comparison = None
        if self.comparison is not None:
            comparison = {
                'runnerUpId': self.comparison.runner_up_id,
                'returnDifference': self.comparison.return_difference,
                'periodReturnDifference': self.comparison.period_return_difference,
                'drawdownDifference': self.comparison.drawdown_difference
            }
        return {
            'winner': self.winner.asset_id,
            'order': [record.asset_id for record in self.ordered],
            'comparison': comparison
        }


def compare_winner(winner: StatsRecord, runner_up: StatsRecord) -> WinnerComparison:
    """Explanatory deltas between two ranked records."""
    return WinnerComparison(
        runner_up_id=runner_up.asset_id,
        return_difference=winner.annualized_return - runner_up.annualized_return,
        period_return_difference=winner.period_return - runner_up.period_return,
        drawdown_difference=winner.max_drawdown - runner_up.max_drawdown
    )


def rank_records(
    records: Sequence[StatsRecord],
    policy: Optional[RankingPolicy] = None
) -> RankingResult:
    """
    Order records and pick a winner.

    Args:
        records: One StatsRecord per analyzed asset
        policy: Comparison strategy (defaults to SharpeSortinoPolicy)

    Returns:
        RankingResult. A comparison is attached only for exactly two records.

    Raises:
        InsufficientData: If records is empty
    """
    if not records:
        raise InsufficientData("Cannot rank an empty list of records")

    if policy is None:
        policy = SharpeSortinoPolicy()

    ordered = policy.order(records)

    comparison = None
    if len(ordered) == 2:
        comparison = compare_winner(ordered[0], ordered[1])

    return RankingResult(ordered=ordered, comparison=comparison)
