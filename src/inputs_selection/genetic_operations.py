"""
Genetic Operations Module

Crossover and mutation of input masks.

Features:
- One-point, two-point and uniform crossover with fixed or random cut points
- Per-gene bit-flip mutation
- Zero-input repair of every offspring
"""

import random
from typing import Dict, Sequence, Tuple

from ga_config import CrossoverMethod
from ga_constants import GAConstants
from ga_exceptions import CrossoverError, MutationError
from inputs_selection.population_management import Candidate, repair_candidate


class GeneticOperations:
    """
    Recombination and mutation operators for boolean candidates.

    Cut points of 0 are drawn per pair. A one-point cut ``c`` splits a
    candidate into ``[:c]`` and ``[c:]``; two-point cuts ``a < b`` swap the
    middle segment ``[a:b]``.
    """

    def __init__(self, rng: random.Random, crossover_method: CrossoverMethod = CrossoverMethod.UNIFORM,
                 mutation_rate: float = 0.0, crossover_first_point: int = 0,
                 crossover_second_point: int = 0):
        """
        Initialize genetic operations.

        Args:
            rng: Seedable generator shared with the other operators
            crossover_method: Recombination method
            mutation_rate: Probability of each gene being flipped
            crossover_first_point: Fixed first cut (0 = random per pair)
            crossover_second_point: Fixed second cut for two-point crossover (0 = random per pair)
        """
        if not 0.0 <= mutation_rate <= 1.0:
            raise MutationError(f"Mutation rate ({mutation_rate}) must be between 0.0 and 1.0",
                                mutation_rate=mutation_rate)

        self.rng = rng
        self.crossover_method = crossover_method
        self.mutation_rate = mutation_rate
        self.crossover_first_point = crossover_first_point
        self.crossover_second_point = crossover_second_point

        self.crossover_count = 0
        self.mutation_count = 0
        self.genes_flipped = 0
        self.repairs = 0

    def crossover(self, parent1: Sequence[bool], parent2: Sequence[bool]) -> Tuple[Candidate, Candidate]:
        """
        Recombine two parents with the configured method.

        Returns:
            Two repaired offspring of the parents' length
        """
        if len(parent1) != len(parent2):
            raise CrossoverError(
                f"Parents differ in length ({len(parent1)} != {len(parent2)})",
                parent1=parent1, parent2=parent2)

        if self.crossover_method is CrossoverMethod.ONE_POINT:
            child1, child2 = self.one_point_crossover(parent1, parent2)
        elif self.crossover_method is CrossoverMethod.TWO_POINT:
            child1, child2 = self.two_point_crossover(parent1, parent2)
        elif self.crossover_method is CrossoverMethod.UNIFORM:
            child1, child2 = self.uniform_crossover(parent1, parent2)
        else:
            raise CrossoverError(f"Unknown crossover method: {self.crossover_method}")

        self.crossover_count += 1
        return self._repair(child1), self._repair(child2)

    def one_point_crossover(self, parent1: Sequence[bool], parent2: Sequence[bool],
                            cut: int = None) -> Tuple[Candidate, Candidate]:
        """Swap the suffixes of two parents after a single cut."""
        n = len(parent1)
        if n < 2:
            return tuple(parent1), tuple(parent2)

        if cut is None:
            cut = self.crossover_first_point or self.rng.randint(1, n - 1)
        if not 0 < cut < n:
            raise CrossoverError(f"Cut point {cut} outside candidate of length {n}",
                                 parent1=parent1, parent2=parent2)

        child1 = tuple(parent1[:cut]) + tuple(parent2[cut:])
        child2 = tuple(parent2[:cut]) + tuple(parent1[cut:])
        return child1, child2

    def two_point_crossover(self, parent1: Sequence[bool],
                            parent2: Sequence[bool]) -> Tuple[Candidate, Candidate]:
        """Swap the segment between two cuts; outer segments stay in place."""
        n = len(parent1)
        if n < 3:
            return self.one_point_crossover(parent1, parent2)

        first, second = self._two_point_cuts(n)
        if not 0 < first < second < n:
            raise CrossoverError(f"Cut points ({first}, {second}) outside candidate of length {n}",
                                 parent1=parent1, parent2=parent2)

        child1 = tuple(parent1[:first]) + tuple(parent2[first:second]) + tuple(parent1[second:])
        child2 = tuple(parent2[:first]) + tuple(parent1[first:second]) + tuple(parent2[second:])
        return child1, child2

    def _two_point_cuts(self, n: int) -> Tuple[int, int]:
        first = self.crossover_first_point
        second = self.crossover_second_point

        if first and second:
            return first, second
        if first:
            return first, self.rng.randint(first + 1, n - 1)
        if second:
            return self.rng.randint(1, second - 1), second
        first = self.rng.randint(1, n - 2)
        return first, self.rng.randint(first + 1, n - 1)

    def uniform_crossover(self, parent1: Sequence[bool],
                          parent2: Sequence[bool]) -> Tuple[Candidate, Candidate]:
        """Take each gene from either parent with equal probability."""
        child1 = []
        child2 = []
        for gene1, gene2 in zip(parent1, parent2):
            if self.rng.random() < GAConstants.UNIFORM_CROSSOVER_PROBABILITY:
                child1.append(bool(gene1))
                child2.append(bool(gene2))
            else:
                child1.append(bool(gene2))
                child2.append(bool(gene1))
        return tuple(child1), tuple(child2)

    def mutate(self, candidate: Sequence[bool]) -> Candidate:
        """
        Flip every gene independently with probability ``mutation_rate``.

        Returns:
            The mutated and repaired candidate
        """
        flipped = 0
        mutated = []
        for gene in candidate:
            if self.rng.random() < self.mutation_rate:
                mutated.append(not gene)
                flipped += 1
            else:
                mutated.append(bool(gene))

        if flipped:
            self.mutation_count += 1
            self.genes_flipped += flipped
        return self._repair(mutated)

    def _repair(self, candidate: Sequence[bool]) -> Candidate:
        if not any(candidate):
            self.repairs += 1
        return repair_candidate(candidate, self.rng)

    def get_statistics(self) -> Dict[str, int]:
        """Get statistics about genetic operations performed."""
        return {
            'crossover_count': self.crossover_count,
            'mutation_count': self.mutation_count,
            'genes_flipped': self.genes_flipped,
            'repairs': self.repairs
        }
