"""
Fitness Assignment Module

Turns the selection performance of every evaluated candidate into a
non-negative selection weight. Fitness depends on the whole population and
is recomputed every generation.

Strategies:
- ObjectiveBasedFitness: 1 / (1 + selection performance)
- RankBasedFitness: linear ranking with configurable selective pressure
"""

from typing import List, Sequence

from ga_config import FitnessAssignment
from ga_constants import GAConstants
from evaluation_history import PerformanceRecord


class FitnessAssigner:
    """Base class for fitness assignment strategies."""

    method: FitnessAssignment = None

    def assign(self, records: Sequence[PerformanceRecord]) -> List[float]:
        """Return one non-negative fitness per record, higher meaning fitter."""
        raise NotImplementedError


class ObjectiveBasedFitness(FitnessAssigner):
    """Fitness as a strictly decreasing transform of selection performance."""

    method = FitnessAssignment.OBJECTIVE_BASED

    def assign(self, records: Sequence[PerformanceRecord]) -> List[float]:
        successful = [r.selection_performance for r in records if not r.failed]
        # Negative performances are shifted so the transform stays positive
        offset = min(0.0, min(successful)) if successful else 0.0

        fitness = []
        for record in records:
            if record.failed:
                fitness.append(GAConstants.FAILED_FITNESS)
            else:
                fitness.append(1.0 / (1.0 + record.selection_performance - offset))
        return fitness


class RankBasedFitness(FitnessAssigner):
    """
    Linear ranking.

    Candidates are ordered by selection performance (failed evaluations last,
    ties kept in population order); the worst gets rank 0, the best rank N-1,
    and fitness(r) = 2 - SP + 2 (SP - 1) r / (N - 1). Values that would fall
    below zero (SP > 2) are clipped to zero, so above that pressure the
    fitness values no longer sum to N.
    """

    method = FitnessAssignment.RANK_BASED

    def __init__(self, selective_pressure: float = GAConstants.DEFAULT_SELECTIVE_PRESSURE):
        self.selective_pressure = selective_pressure

    def ranks(self, records: Sequence[PerformanceRecord]) -> List[int]:
        """Rank of each record (N-1 for the best)."""
        n = len(records)
        order = sorted(range(n), key=lambda i: (records[i].failed, records[i].selection_performance))
        ranks = [0] * n
        for position, index in enumerate(order):
            ranks[index] = n - 1 - position
        return ranks

    def assign(self, records: Sequence[PerformanceRecord]) -> List[float]:
        n = len(records)
        if n == 0:
            return []
        if n == 1:
            return [1.0]

        pressure = self.selective_pressure
        return [max(0.0, 2.0 - pressure + 2.0 * (pressure - 1.0) * rank / (n - 1))
                for rank in self.ranks(records)]


def create_fitness_assigner(method: FitnessAssignment, selective_pressure: float) -> FitnessAssigner:
    """Build the fitness strategy chosen in the configuration."""
    if method is FitnessAssignment.OBJECTIVE_BASED:
        return ObjectiveBasedFitness()
    if method is FitnessAssignment.RANK_BASED:
        return RankBasedFitness(selective_pressure)
    raise ValueError(f"Unknown fitness assignment method: {method}")
