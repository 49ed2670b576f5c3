"""
Selection Methods Module

Implements survivor and parent selection for the inputs selection search.

Features:
- Elitism: the best candidates survive unchanged
- Fitness-proportionate (roulette wheel) parent selection
- Incest prevention through a minimum Hamming distance between mates,
  relaxed after a bounded number of rejected draws
"""

import random
from typing import List, Sequence, Tuple

from ga_constants import GAConstants
from ga_exceptions import SelectionError
from evaluation_history import PerformanceRecord
from inputs_selection.population_management import hamming_distance


class SelectionMethods:
    """
    Collection of selection methods for the genetic algorithm.

    Works on population slot indices so that the caller keeps the candidates,
    their records and their fitness aligned.
    """

    def __init__(self, rng: random.Random, elitism_size: int = GAConstants.DEFAULT_ELITISM_SIZE,
                 incest_prevention_distance: float = GAConstants.DEFAULT_INCEST_PREVENTION_DISTANCE,
                 max_mate_attempts: int = GAConstants.INCEST_PREVENTION_MAX_ATTEMPTS):
        """
        Initialize selection methods.

        Args:
            rng: Seedable generator shared with the other operators
            elitism_size: Number of best candidates copied to the next generation
            incest_prevention_distance: Minimum Hamming distance between mates
            max_mate_attempts: Roulette draws for a second parent before relaxing the distance
        """
        self.rng = rng
        self.elitism_size = elitism_size
        self.incest_prevention_distance = incest_prevention_distance
        self.max_mate_attempts = max(1, max_mate_attempts)

        self.selection_stats = {
            'roulette_draws': 0,
            'elites_preserved': 0,
            'incest_rejections': 0,
            'incest_relaxations': 0
        }

    def select_elites(self, records: Sequence[PerformanceRecord]) -> List[int]:
        """
        Slots of the ``elitism_size`` best candidates by selection performance.

        Failed evaluations never outrank successful ones; ties keep population order.
        """
        order = sorted(range(len(records)),
                       key=lambda i: (records[i].failed, records[i].selection_performance))
        elites = order[:self.elitism_size]
        self.selection_stats['elites_preserved'] += len(elites)
        return elites

    def roulette_wheel(self, fitness: Sequence[float]) -> int:
        """
        Select a slot with probability proportional to its fitness.

        Falls back to a uniform draw when every fitness is zero.
        """
        if not fitness:
            raise SelectionError("Cannot select from an empty population",
                                 population_size=0, selection_type="roulette")

        self.selection_stats['roulette_draws'] += 1
        total_fitness = sum(fitness)
        if total_fitness <= 0:
            return self.rng.randrange(len(fitness))

        selection_point = self.rng.uniform(0, total_fitness)
        cumulative_fitness = 0.0
        for index, value in enumerate(fitness):
            cumulative_fitness += value
            if cumulative_fitness >= selection_point:
                return index

        # Floating point shortfall: last slot with non-zero fitness
        return max(i for i, value in enumerate(fitness) if value > 0)

    def select_mate(self, population: Sequence[Sequence[bool]], fitness: Sequence[float],
                    first: int) -> int:
        """
        Draw a second parent for ``first`` honouring the incest prevention distance.

        After ``max_mate_attempts`` rejected draws the distance is relaxed for
        this pairing and the most distant candidate drawn so far is used.
        """
        best_index = None
        best_distance = -1
        for _ in range(self.max_mate_attempts):
            candidate = self.roulette_wheel(fitness)
            distance = hamming_distance(population[first], population[candidate])
            if distance >= self.incest_prevention_distance:
                return candidate
            self.selection_stats['incest_rejections'] += 1
            if distance > best_distance:
                best_index, best_distance = candidate, distance

        self.selection_stats['incest_relaxations'] += 1
        return best_index

    def select_parents(self, population: Sequence[Sequence[bool]], fitness: Sequence[float],
                       num_pairs: int) -> List[Tuple[int, int]]:
        """
        Select parent pairs for reproduction.

        Args:
            population: Current candidates
            fitness: Fitness of each candidate (selection weights)
            num_pairs: Number of parent pairs to select

        Returns:
            List of (first_slot, second_slot) pairs
        """
        if len(population) != len(fitness):
            raise SelectionError(
                f"Population has {len(population)} candidates but {len(fitness)} fitness values",
                population_size=len(population), selection_type="parents")

        parent_pairs = []
        for _ in range(num_pairs):
            first = self.roulette_wheel(fitness)
            second = self.select_mate(population, fitness, first)
            parent_pairs.append((first, second))
        return parent_pairs

    def get_statistics(self) -> dict:
        """Get selection statistics."""
        return self.selection_stats.copy()
