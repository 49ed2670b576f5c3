"""
Reference Collaborator Tests

Tests the ridge regression model evaluator, the correlation relevance
scorer and the command-line interface built on them.
"""

import contextlib
import io
import os
import sys
import unittest

import numpy as np
import pandas as pd

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests.test_fixtures import TestFixtures
from ga_exceptions import TrainingFailedError
from ga_logging import setup_logging
from genetic_algorithm import GeneticAlgorithm
from inputs_selection.linear_model import LinearModelEvaluator
from inputs_selection.relevance import CorrelationRelevanceScorer


class TestLinearModelEvaluator(unittest.TestCase):
    """Test the ridge regression evaluator."""

    def setUp(self):
        self.inputs, self.targets = TestFixtures.linear_dataset()

    def test_informative_inputs_score_better(self):
        evaluator = LinearModelEvaluator(self.inputs, self.targets, seed=0)
        _, informative, _ = evaluator.evaluate(TestFixtures.mask("1010"))
        _, noise, _ = evaluator.evaluate(TestFixtures.mask("0101"))

        self.assertLess(informative, 0.1)
        self.assertGreater(noise, 1.0)

    def test_parameters_shape(self):
        evaluator = LinearModelEvaluator(self.inputs, self.targets, seed=0)
        _, _, parameters = evaluator.evaluate(TestFixtures.mask("1010"))

        self.assertEqual(parameters.shape, (3, 1))
        self.assertAlmostEqual(parameters[1, 0], 3.0, places=1)
        self.assertAlmostEqual(parameters[2, 0], -2.0, places=1)

    def test_same_seed_same_performance(self):
        first = LinearModelEvaluator(self.inputs, self.targets, seed=5)
        second = LinearModelEvaluator(self.inputs, self.targets, seed=5)
        mask = TestFixtures.mask("1110")

        self.assertEqual(first.evaluate(mask)[:2], second.evaluate(mask)[:2])

    def test_without_bootstrap_training_is_deterministic(self):
        evaluator = LinearModelEvaluator(self.inputs, self.targets, seed=1, bootstrap=False)
        mask = TestFixtures.mask("1011")

        self.assertEqual(evaluator.evaluate(mask)[:2], evaluator.evaluate(mask)[:2])

    def test_invalid_masks(self):
        evaluator = LinearModelEvaluator(self.inputs, self.targets, seed=0)
        with self.assertRaises(TrainingFailedError):
            evaluator.evaluate(TestFixtures.mask("101"))
        with self.assertRaises(TrainingFailedError):
            evaluator.evaluate(TestFixtures.mask("0000"))

    def test_singular_system_fails_training(self):
        inputs = self.inputs.copy()
        inputs[:, 3] = 0.0
        evaluator = LinearModelEvaluator(inputs, self.targets, regularization=0.0, seed=0)

        with self.assertRaises(TrainingFailedError):
            evaluator.evaluate(TestFixtures.mask("0001"))

    def test_split_needs_training_rows(self):
        with self.assertRaises(ValueError):
            LinearModelEvaluator(self.inputs[:2], self.targets[:2])
        with self.assertRaises(ValueError):
            LinearModelEvaluator(self.inputs, self.targets[:10])

    def test_one_dimensional_targets(self):
        evaluator = LinearModelEvaluator(self.inputs, self.targets.ravel(), seed=0)
        self.assertEqual(evaluator.inputs_number, 4)
        self.assertEqual(evaluator.evaluate(TestFixtures.mask("1000"))[2].shape, (2, 1))


class TestCorrelationRelevanceScorer(unittest.TestCase):
    """Test correlation relevance scores."""

    def test_informative_inputs_most_relevant(self):
        inputs, targets = TestFixtures.linear_dataset()
        scorer = CorrelationRelevanceScorer(inputs, targets)

        self.assertEqual(len(scorer), 4)
        for informative in (0, 2):
            for noise in (1, 3):
                self.assertGreater(scorer.score(informative), scorer.score(noise))

    def test_constant_column_scores_zero(self):
        inputs, targets = TestFixtures.linear_dataset()
        inputs[:, 1] = 7.0
        scorer = CorrelationRelevanceScorer(inputs, targets.ravel())

        self.assertEqual(scorer.score(1), 0.0)

    def test_scores_summed_over_targets(self):
        inputs, targets = TestFixtures.linear_dataset()
        single = CorrelationRelevanceScorer(inputs, targets)
        double = CorrelationRelevanceScorer(inputs, np.hstack([targets, targets]))

        self.assertAlmostEqual(double.score(0), 2 * single.score(0))


class TestLinearModelSearch(unittest.TestCase):
    """Test a full search with the reference collaborators."""

    def setUp(self):
        setup_logging(level="ERROR", log_to_file=False)

    def test_search_keeps_informative_inputs(self):
        inputs, targets = TestFixtures.linear_dataset()
        config = TestFixtures.get_test_config(population_size=8, maximum_iterations_number=8,
                                              initialization_method="Weighted")
        algorithm = GeneticAlgorithm(4, LinearModelEvaluator(inputs, targets, seed=3), config,
                                     relevance_scorer=CorrelationRelevanceScorer(inputs, targets))

        results = algorithm.run()

        self.assertTrue(results.optimal_inputs[0])
        self.assertTrue(results.optimal_inputs[2])
        self.assertLess(results.final_selection_performance, 0.1)
        self.assertEqual(np.asarray(results.minimal_parameters).shape[0],
                         len(results.optimal_input_indices) + 1)


class TestCommandLine(unittest.TestCase):
    """Test the command-line entry point."""

    def setUp(self):
        self.temp_dir = TestFixtures.create_temp_test_dir()
        inputs, targets = TestFixtures.linear_dataset(instances=120)
        frame = pd.DataFrame(inputs, columns=["x0", "x1", "x2", "x3"])
        frame["label"] = ["a", "b"] * 60
        frame["y"] = targets.ravel()
        self.data_path = os.path.join(self.temp_dir, "data.csv")
        frame.to_csv(self.data_path, index=False)

    def tearDown(self):
        TestFixtures.cleanup_path(self.temp_dir)
        setup_logging(level="ERROR", log_to_file=False)

    def test_load_dataset(self):
        from main import load_dataset

        inputs, targets = load_dataset(self.data_path, ["y"])
        self.assertEqual(list(inputs.columns), ["x0", "x1", "x2", "x3"])
        self.assertEqual(list(targets.columns), ["y"])

        inputs, _ = load_dataset(self.data_path, ["y"], inputs=["x2", "x0"])
        self.assertEqual(list(inputs.columns), ["x2", "x0"])

    def test_load_dataset_errors(self):
        from main import load_dataset

        with self.assertRaises(FileNotFoundError):
            load_dataset(os.path.join(self.temp_dir, "missing.csv"), ["y"])
        with self.assertRaises(ValueError):
            load_dataset(self.data_path, ["price"])

    def test_main_runs_search_and_plots(self):
        from main import main

        output_dir = os.path.join(self.temp_dir, "results")
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            exit_code = main(["--data", self.data_path, "--target", "y",
                              "--generations", "3", "--population_size", "6",
                              "--seed", "1", "--output_dir", output_dir,
                              "--plot", "--log_level", "ERROR"])

        self.assertEqual(exit_code, 0)
        self.assertIn("% Optimal inputs", stdout.getvalue())
        self.assertIn("generation_statistics.csv", os.listdir(output_dir))
        self.assertTrue(os.path.exists(os.path.join(output_dir, "plots", "selection_performance.png")))

    def run_failing_main(self, *extra):
        from main import main

        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            exit_code = main(["--target", "y", "--log_level", "ERROR", *extra])
        return exit_code, stdout.getvalue()

    def test_main_rejects_invalid_configuration(self):
        exit_code, output = self.run_failing_main("--data", self.data_path, "--population_size", "1")

        self.assertEqual(exit_code, 1)
        self.assertIn("Invalid configuration", output)

    def test_main_reports_missing_dataset(self):
        missing = os.path.join(self.temp_dir, "missing.csv")
        exit_code, output = self.run_failing_main("--data", missing)

        self.assertEqual(exit_code, 1)
        self.assertIn("Could not prepare the dataset", output)

    def test_main_reports_too_few_instances(self):
        small_path = os.path.join(self.temp_dir, "small.csv")
        pd.read_csv(self.data_path).head(2).to_csv(small_path, index=False)

        exit_code, _ = self.run_failing_main("--data", small_path)
        self.assertEqual(exit_code, 1)


if __name__ == '__main__':
    unittest.main()
