"""
Test Fixtures and Utilities for Inputs Selection Tests

Provides reusable test data, mock evaluators, and helper functions
for component and integration testing.
"""

import os
import sys
import tempfile
import shutil
from unittest.mock import Mock
from typing import Dict, List, Sequence, Tuple

# Add project root and src to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(PROJECT_ROOT)
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

import numpy as np

from evaluation_history import PerformanceRecord
from ga_config import GAConfig
from ga_exceptions import TrainingFailedError
from genetic_algorithm import GeneticAlgorithm


class TestFixtures:
    """Centralized test fixtures and utilities."""

    @staticmethod
    def get_test_config(**overrides) -> GAConfig:
        """Get test configuration with sensible defaults."""
        options = dict(
            population_size=6,
            maximum_iterations_number=3,
            mutation_rate=0.1,
            elitism_size=1,
            seed=42,
            max_threads=1,
            display=False,
            output_dir="test_output"
        )
        options.update(overrides)
        return GAConfig(**options)

    @staticmethod
    def mask(pattern: str) -> Tuple[bool, ...]:
        """Build a candidate from a '0'/'1' string."""
        return tuple(char == '1' for char in pattern)

    @staticmethod
    def distance_performance(mask: Sequence[bool], target: Sequence[bool]) -> Tuple[float, float]:
        """
        Deterministic performance: selection performance is the Hamming
        distance to ``target`` plus a small size penalty.
        """
        distance = sum(1 for a, b in zip(mask, target) if bool(a) != bool(b))
        selected = sum(1 for flag in mask if flag)
        return 1.0 + distance + 0.01 * selected, 1.0 + distance + 0.01 * selected

    @staticmethod
    def records(*selection_performances: float) -> List[PerformanceRecord]:
        """Successful records with the given selection performances."""
        return [PerformanceRecord(value, value) for value in selection_performances]

    @staticmethod
    def linear_dataset(instances: int = 200, seed: int = 0) -> Tuple[np.ndarray, np.ndarray]:
        """
        Dataset whose target depends on inputs 0 and 2 only; inputs 1 and 3
        are noise.
        """
        rng = np.random.default_rng(seed)
        inputs = rng.normal(size=(instances, 4))
        targets = 3.0 * inputs[:, 0] - 2.0 * inputs[:, 2] + 0.05 * rng.normal(size=instances)
        return inputs, targets.reshape(-1, 1)

    @staticmethod
    def create_temp_test_dir() -> str:
        """Create temporary test directory and return path."""
        return tempfile.mkdtemp(prefix='ga_test_')

    @staticmethod
    def cleanup_path(path: str):
        """Clean up test files or directories."""
        try:
            if os.path.isfile(path):
                os.unlink(path)
            elif os.path.isdir(path):
                shutil.rmtree(path)
        except (OSError, PermissionError):
            pass  # Ignore cleanup errors

    @staticmethod
    def assert_valid_candidate(candidate: Sequence[bool], inputs_number: int):
        """Assert that a candidate is properly formatted and selects an input."""
        assert isinstance(candidate, tuple), "Candidate must be tuple"
        assert len(candidate) == inputs_number, "Candidate length must match inputs number"
        assert all(isinstance(flag, bool) for flag in candidate), "Flags must be booleans"
        assert any(candidate), "Candidate must select at least one input"


class MockEvaluatorFactory:
    """Factory for creating different types of mock model evaluators."""

    @staticmethod
    def create_counting_evaluator(target: Sequence[bool]) -> Mock:
        """Evaluator scoring masks by their distance to ``target``; counts calls."""
        mock = Mock()

        def evaluate(mask):
            training, selection = TestFixtures.distance_performance(mask, target)
            return training, selection, [float(flag) for flag in mask]

        mock.evaluate.side_effect = evaluate
        return mock

    @staticmethod
    def create_table_evaluator(table: Dict[str, float], default: float = 10.0) -> Mock:
        """Evaluator returning the selection performance listed for a '0'/'1' pattern."""
        mock = Mock()

        def evaluate(mask):
            key = ''.join('1' if flag else '0' for flag in mask)
            value = table.get(key, default)
            return value, value, key

        mock.evaluate.side_effect = evaluate
        return mock

    @staticmethod
    def create_failing_evaluator(failing_patterns: Sequence[str], target: Sequence[bool]) -> Mock:
        """Evaluator that signals a training failure for the listed patterns."""
        mock = Mock()
        failing = set(failing_patterns)

        def evaluate(mask):
            key = ''.join('1' if flag else '0' for flag in mask)
            if key in failing:
                raise TrainingFailedError("Simulated training failure", mask)
            training, selection = TestFixtures.distance_performance(mask, target)
            return training, selection, None

        mock.evaluate.side_effect = evaluate
        return mock

    @staticmethod
    def create_always_failing_evaluator(error: Exception = None) -> Mock:
        """Evaluator whose every training fails."""
        mock = Mock()
        mock.evaluate.side_effect = error or TrainingFailedError("Simulated training failure")
        return mock

    @staticmethod
    def create_sequence_evaluator(results: List[Tuple[float, float, object]]) -> Mock:
        """Evaluator returning the given results call after call."""
        mock = Mock()
        mock.evaluate.side_effect = list(results)
        return mock


class ScenarioBuilder:
    """Builder pattern for creating configured search scenarios."""

    def __init__(self, inputs_number: int = 6):
        self.inputs_number = inputs_number
        self.config = TestFixtures.get_test_config()
        self.target = tuple(i % 2 == 0 for i in range(inputs_number))
        self.evaluator = MockEvaluatorFactory.create_counting_evaluator(self.target)
        self.relevance_scorer = None
        self.temp_dirs = []

    def with_config(self, **config_updates) -> 'ScenarioBuilder':
        """Update configuration parameters."""
        self.config = self.config.update(**config_updates)
        return self

    def with_evaluator(self, evaluator) -> 'ScenarioBuilder':
        """Set the model evaluator."""
        self.evaluator = evaluator
        return self

    def with_relevance_scorer(self, relevance_scorer) -> 'ScenarioBuilder':
        """Set the relevance scorer."""
        self.relevance_scorer = relevance_scorer
        return self

    def with_temp_output_dir(self) -> 'ScenarioBuilder':
        """Create temporary output directory and save results into it."""
        temp_dir = TestFixtures.create_temp_test_dir()
        self.temp_dirs.append(temp_dir)
        self.config = self.config.update(output_dir=temp_dir, save_results=True)
        return self

    def build(self) -> GeneticAlgorithm:
        """Build the genetic algorithm."""
        return GeneticAlgorithm(self.inputs_number, self.evaluator, self.config,
                                relevance_scorer=self.relevance_scorer)

    def cleanup(self):
        """Clean up temporary directories."""
        for temp_dir in self.temp_dirs:
            TestFixtures.cleanup_path(temp_dir)
        self.temp_dirs.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()


# Global test constants
DEFAULT_TEST_POPULATION_SIZE = 6
DEFAULT_TEST_GENERATIONS = 3
