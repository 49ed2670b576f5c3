"""
Fitness Assignment and Selection Tests

Tests objective-based and rank-based fitness, elitism, roulette wheel
selection and incest prevention.
"""

import os
import random
import sys
import unittest

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests.test_fixtures import TestFixtures
from evaluation_history import PerformanceRecord
from ga_config import FitnessAssignment
from ga_exceptions import SelectionError
from ga_logging import setup_logging
from inputs_selection.fitness_assignment import (
    ObjectiveBasedFitness, RankBasedFitness, create_fitness_assigner
)
from inputs_selection.selection import SelectionMethods


class TestRankBasedFitness(unittest.TestCase):
    """Test linear ranking."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.records = TestFixtures.records(3.0, 1.0, 5.0, 2.0, 4.0)

    def test_best_candidate_gets_highest_fitness(self):
        fitness = RankBasedFitness(1.5).assign(self.records)

        best = fitness.index(max(fitness))
        self.assertEqual(best, 1)
        self.assertEqual(sorted(fitness).count(max(fitness)), 1)
        self.assertEqual(fitness.index(min(fitness)), 2)

    def test_fitness_values(self):
        fitness = RankBasedFitness(1.5).assign(self.records)
        self.assertEqual([round(f, 6) for f in fitness], [1.0, 1.5, 0.5, 1.25, 0.75])
        self.assertAlmostEqual(sum(fitness), len(self.records))

    def test_selective_pressure_widens_gap(self):
        gaps = []
        for pressure in (1.2, 1.5, 2.0):
            fitness = RankBasedFitness(pressure).assign(self.records)
            gaps.append(max(fitness) - min(fitness))
        self.assertLess(gaps[0], gaps[1])
        self.assertLess(gaps[1], gaps[2])

    def test_unit_pressure_is_uniform(self):
        fitness = RankBasedFitness(1.0).assign(self.records)
        self.assertEqual(fitness, [1.0] * 5)

    def test_fitness_never_negative(self):
        fitness = RankBasedFitness(3.0).assign(self.records)
        self.assertTrue(all(f >= 0.0 for f in fitness))
        self.assertEqual(min(fitness), 0.0)

    def test_ties_keep_population_order(self):
        ranks = RankBasedFitness(1.5).ranks(TestFixtures.records(2.0, 2.0, 1.0))
        self.assertEqual(ranks, [1, 0, 2])

    def test_failed_records_rank_last(self):
        records = [PerformanceRecord.failure()] + TestFixtures.records(9.0, 1.0)
        ranks = RankBasedFitness(1.5).ranks(records)
        self.assertEqual(ranks[0], 0)

    def test_single_candidate(self):
        self.assertEqual(RankBasedFitness(1.5).assign(TestFixtures.records(4.0)), [1.0])


class TestObjectiveBasedFitness(unittest.TestCase):
    """Test objective-based fitness."""

    def test_decreasing_transform(self):
        fitness = ObjectiveBasedFitness().assign(TestFixtures.records(0.0, 1.0, 3.0))
        self.assertEqual(fitness, [1.0, 0.5, 0.25])

    def test_negative_performances_stay_positive(self):
        fitness = ObjectiveBasedFitness().assign(TestFixtures.records(-1.0, 0.0))
        self.assertEqual(fitness, [1.0, 0.5])

    def test_failed_record_gets_zero(self):
        records = TestFixtures.records(1.0) + [PerformanceRecord.failure()]
        self.assertEqual(ObjectiveBasedFitness().assign(records), [0.5, 0.0])

    def test_factory(self):
        self.assertIsInstance(create_fitness_assigner(FitnessAssignment.OBJECTIVE_BASED, 1.5),
                              ObjectiveBasedFitness)
        assigner = create_fitness_assigner(FitnessAssignment.RANK_BASED, 1.8)
        self.assertIsInstance(assigner, RankBasedFitness)
        self.assertEqual(assigner.selective_pressure, 1.8)


class TestSelectionMethods(unittest.TestCase):
    """Test elitism and parent selection."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)
        self.population = [TestFixtures.mask(p) for p in ("1111", "1110", "0001")]

    def test_elites_by_selection_performance(self):
        selection = SelectionMethods(random.Random(0), elitism_size=2)
        records = TestFixtures.records(3.0, 1.0) + [PerformanceRecord.failure()] + TestFixtures.records(2.0)

        self.assertEqual(selection.select_elites(records), [1, 3])
        self.assertEqual(selection.get_statistics()['elites_preserved'], 2)

    def test_no_elitism(self):
        selection = SelectionMethods(random.Random(0), elitism_size=0)
        self.assertEqual(selection.select_elites(TestFixtures.records(1.0, 2.0)), [])

    def test_roulette_follows_weights(self):
        selection = SelectionMethods(random.Random(1))
        for _ in range(50):
            self.assertEqual(selection.roulette_wheel([0.0, 0.0, 2.5]), 2)

    def test_roulette_zero_weights_draws_uniformly(self):
        selection = SelectionMethods(random.Random(1))
        drawn = {selection.roulette_wheel([0.0, 0.0, 0.0]) for _ in range(100)}
        self.assertEqual(drawn, {0, 1, 2})

    def test_roulette_empty_population(self):
        with self.assertRaises(SelectionError):
            SelectionMethods(random.Random(1)).roulette_wheel([])

    def test_incest_prevention_rejects_close_mates(self):
        selection = SelectionMethods(random.Random(2), incest_prevention_distance=3,
                                     max_mate_attempts=200)
        for _ in range(20):
            self.assertEqual(selection.select_mate(self.population, [1.0, 1.0, 1.0], 0), 2)

    def test_incest_prevention_relaxes_after_bounded_attempts(self):
        selection = SelectionMethods(random.Random(3), incest_prevention_distance=3,
                                     max_mate_attempts=20)
        mate = selection.select_mate(self.population, [1.0, 1.0, 0.0], 0)

        # The only distant candidate has no fitness, the most distant one drawn is used
        self.assertEqual(mate, 1)
        stats = selection.get_statistics()
        self.assertEqual(stats['incest_relaxations'], 1)
        self.assertEqual(stats['incest_rejections'], 20)

    def test_select_parents(self):
        selection = SelectionMethods(random.Random(4))
        pairs = selection.select_parents(self.population, [1.0, 1.0, 1.0], 5)

        self.assertEqual(len(pairs), 5)
        for first, second in pairs:
            self.assertIn(first, range(3))
            self.assertIn(second, range(3))

    def test_select_parents_misaligned_fitness(self):
        with self.assertRaises(SelectionError):
            SelectionMethods(random.Random(4)).select_parents(self.population, [1.0], 1)


if __name__ == '__main__':
    unittest.main()
