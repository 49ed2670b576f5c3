"""
Population Management Module

Handles candidate representation, population initialization and the
population-level utilities used by the inputs selection search.

A candidate is a tuple of booleans, one flag per selectable input variable.
Every candidate handed out by this module selects at least one input.

Features:
- Random population initialization with a configurable marginal probability
- Relevance-weighted population initialization
- Zero-input repair
- Hamming distance and diversity utilities
"""

import math
import random
from typing import Dict, List, Sequence, Tuple

from ga_config import InitializationMethod
from ga_exceptions import MissingCollaboratorError, PopulationError
from ga_logging import get_logger


Candidate = Tuple[bool, ...]


def count_selected(candidate: Sequence[bool]) -> int:
    """Number of inputs a candidate selects."""
    return sum(1 for flag in candidate if flag)


def hamming_distance(first: Sequence[bool], second: Sequence[bool]) -> int:
    """Number of positions where two candidates disagree."""
    if len(first) != len(second):
        raise PopulationError(
            f"Cannot compare candidates of length {len(first)} and {len(second)}")
    return sum(1 for a, b in zip(first, second) if bool(a) != bool(b))


def repair_candidate(candidate: Sequence[bool], rng: random.Random) -> Candidate:
    """
    Return the candidate unchanged if it selects any input, otherwise a copy
    with exactly one randomly chosen input switched on.
    """
    flags = [bool(flag) for flag in candidate]
    if not flags:
        raise PopulationError("Cannot repair an empty candidate")
    if not any(flags):
        flags[rng.randrange(len(flags))] = True
    return tuple(flags)


def selected_indices(candidate: Sequence[bool]) -> List[int]:
    """Indices of the inputs a candidate selects."""
    return [index for index, flag in enumerate(candidate) if flag]


def mask_to_string(candidate: Sequence[bool]) -> str:
    """Compact '0'/'1' rendering of a candidate."""
    return ''.join('1' if flag else '0' for flag in candidate)


class PopulationManager:
    """
    Manages population-level operations for the inputs selection search.

    Builds the initial population and tracks how many candidates needed the
    zero-input repair.
    """

    def __init__(self, inputs_number: int, population_size: int, rng: random.Random,
                 initialization_probability: float = 0.5, relevance_scorer=None):
        """
        Initialize population manager.

        Args:
            inputs_number: Number of selectable input variables (candidate length)
            population_size: Target population size
            rng: Seedable generator shared with the other operators
            initialization_probability: Marginal probability of selecting an input
            relevance_scorer: Optional RelevanceScorer for weighted initialization
        """
        if inputs_number < 1:
            raise PopulationError(f"Candidates need at least one input (got {inputs_number})")

        self.inputs_number = inputs_number
        self.population_size = population_size
        self.rng = rng
        self.initialization_probability = initialization_probability
        self.relevance_scorer = relevance_scorer
        self.logger = get_logger("PopulationManager")

        self.stats = {
            'candidates_created': 0,
            'populations_initialized': 0,
            'repairs': 0
        }

    def initialize_population(self, method: InitializationMethod = InitializationMethod.RANDOM) -> List[Candidate]:
        """
        Create the generation-0 population.

        Returns:
            Exactly ``population_size`` valid candidates (not necessarily distinct)
        """
        if method is InitializationMethod.WEIGHTED:
            probabilities = self.weighted_probabilities()
        else:
            probabilities = [self.initialization_probability] * self.inputs_number

        population = [self._create_candidate(probabilities) for _ in range(self.population_size)]
        self.stats['populations_initialized'] += 1

        self.logger.debug("Population initialized",
                          method=method.value,
                          size=len(population),
                          diversity=f"{self.get_population_diversity(population):.2f}")
        return population

    def weighted_probabilities(self) -> List[float]:
        """
        Per-input inclusion probabilities biased by relevance.

        Probabilities are proportional to the relevance scores and scaled so
        that their mean equals the configured marginal probability (each is
        capped at 1). Negative or non-finite scores count as zero relevance.
        """
        if self.relevance_scorer is None:
            raise MissingCollaboratorError("RelevanceScorer", "weighted initialization needs relevance scores")

        scores = []
        for index in range(self.inputs_number):
            score = float(self.relevance_scorer.score(index))
            scores.append(score if math.isfinite(score) and score > 0 else 0.0)

        total = sum(scores)
        if total <= 0:
            self.logger.warning("All relevance scores are zero, using uniform probabilities")
            return [self.initialization_probability] * self.inputs_number

        scale = self.initialization_probability * self.inputs_number / total
        return [min(1.0, score * scale) for score in scores]

    def _create_candidate(self, probabilities: Sequence[float]) -> Candidate:
        """Draw one candidate flag by flag, repairing it if it selects nothing."""
        flags = tuple(self.rng.random() < probability for probability in probabilities)
        self.stats['candidates_created'] += 1
        return self.repair(flags)

    def repair(self, candidate: Sequence[bool]) -> Candidate:
        """Apply the zero-input repair, counting repairs."""
        if not any(candidate):
            self.stats['repairs'] += 1
        return repair_candidate(candidate, self.rng)

    def validate_population(self, population: Sequence[Sequence[bool]]) -> None:
        """
        Check population size and candidate lengths.

        Raises:
            PopulationError: If the population does not have the configured shape
        """
        if len(population) != self.population_size:
            raise PopulationError(
                f"Population has {len(population)} candidates, expected {self.population_size}")
        for candidate in population:
            if len(candidate) != self.inputs_number:
                raise PopulationError(
                    f"Candidate {mask_to_string(candidate)} has length {len(candidate)}, "
                    f"expected {self.inputs_number}")
            if not any(candidate):
                raise PopulationError(f"Candidate {mask_to_string(candidate)} selects no inputs")

    def get_population_diversity(self, population: Sequence[Sequence[bool]]) -> float:
        """
        Calculate population diversity based on distinct bit-patterns.

        Returns:
            Diversity ratio (0.0 to 1.0)
        """
        if not population:
            return 0.0
        return len({tuple(candidate) for candidate in population}) / len(population)

    def find_duplicates(self, population: Sequence[Sequence[bool]]) -> Dict[str, List[int]]:
        """Map each repeated bit-pattern to the population slots holding it."""
        signature_map: Dict[str, List[int]] = {}
        for i, candidate in enumerate(population):
            signature_map.setdefault(mask_to_string(candidate), []).append(i)
        return {sig: indices for sig, indices in signature_map.items() if len(indices) > 1}

    def get_statistics(self) -> Dict[str, int]:
        """Get population management statistics."""
        return self.stats.copy()
