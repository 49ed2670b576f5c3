"""
Stopping Criteria

Decides when the inputs selection search ends. Criteria are checked once per
generation, after the generation has been evaluated, in priority order:

1. Selection performance goal reached
2. Maximum number of generations reached
3. Maximum wall-clock time exceeded
4. Maximum consecutive generations without improvement reached
"""

import math
from enum import Enum
from typing import List, Optional, Tuple

from ga_constants import StoppingDefaults


class StoppingCondition(Enum):
    """Criterion that ended a run."""
    SELECTION_PERFORMANCE_GOAL = "SelectionPerformanceGoal"
    MAXIMUM_ITERATIONS = "MaximumIterations"
    MAXIMUM_TIME = "MaximumTime"
    MAXIMUM_SELECTION_FAILURES = "MaximumSelectionFailures"

    def __str__(self):
        return self.value


class StoppingCriteria:
    """
    Stopping criteria for the inputs selection search.

    Tracks the best selection performance seen so far; a generation counts
    as a selection failure when it does not improve on the last improving
    value by more than ``tolerance``.
    """

    def __init__(self, selection_performance_goal: float = StoppingDefaults.SELECTION_PERFORMANCE_GOAL,
                 maximum_iterations_number: int = StoppingDefaults.MAXIMUM_ITERATIONS_NUMBER,
                 maximum_time: float = StoppingDefaults.MAXIMUM_TIME_SECONDS,
                 maximum_selection_failures: int = StoppingDefaults.MAXIMUM_SELECTION_FAILURES,
                 tolerance: float = StoppingDefaults.TOLERANCE):
        """
        Initialize the stopping criteria.

        Args:
            selection_performance_goal: Stop once the best selection performance is at or below this
            maximum_iterations_number: Maximum number of generations
            maximum_time: Maximum wall-clock time in seconds
            maximum_selection_failures: Maximum consecutive generations without improvement
            tolerance: Minimum improvement that resets the failure count
        """
        self.selection_performance_goal = selection_performance_goal
        self.maximum_iterations_number = maximum_iterations_number
        self.maximum_time = maximum_time
        self.maximum_selection_failures = maximum_selection_failures
        self.tolerance = tolerance

        self.optimum_history: List[float] = []
        self.reference_selection = math.inf
        self.selection_failures = 0

    def add_optimum(self, optimum_selection: float) -> None:
        """
        Record the best-ever selection performance after a generation.

        Args:
            optimum_selection: Best selection performance recorded so far
        """
        if not self.optimum_history:
            self.reference_selection = optimum_selection
        elif self.reference_selection - optimum_selection > self.tolerance:
            self.reference_selection = optimum_selection
            self.selection_failures = 0
        else:
            self.selection_failures += 1
        self.optimum_history.append(optimum_selection)

    @property
    def best_selection(self) -> float:
        return min(self.optimum_history) if self.optimum_history else math.inf

    def check(self, generation: int, elapsed_time: float) -> Optional[Tuple[StoppingCondition, str]]:
        """
        Check the stopping criteria in priority order.

        Args:
            generation: Generations executed so far (1-indexed)
            elapsed_time: Seconds since the run started

        Returns:
            Tuple of (condition, reason) for the first criterion met, otherwise None
        """
        if self.best_selection <= self.selection_performance_goal:
            return (StoppingCondition.SELECTION_PERFORMANCE_GOAL,
                    f"Selection performance {self.best_selection:.6g} reached goal "
                    f"{self.selection_performance_goal:.6g}")

        if generation >= self.maximum_iterations_number:
            return (StoppingCondition.MAXIMUM_ITERATIONS,
                    f"Maximum number of generations reached ({self.maximum_iterations_number})")

        if elapsed_time >= self.maximum_time:
            return (StoppingCondition.MAXIMUM_TIME,
                    f"Maximum time reached ({elapsed_time:.2f}s >= {self.maximum_time:.2f}s)")

        if self.selection_failures >= self.maximum_selection_failures:
            return (StoppingCondition.MAXIMUM_SELECTION_FAILURES,
                    f"No improvement above {self.tolerance:g} for {self.selection_failures} generations")

        return None

    def get_statistics(self) -> dict:
        """Get stopping criteria statistics."""
        return {
            'generations_tracked': len(self.optimum_history),
            'best_selection': self.best_selection,
            'selection_failures': self.selection_failures,
            'maximum_selection_failures': self.maximum_selection_failures
        }
