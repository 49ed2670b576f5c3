"""
Genetic Algorithm Inputs Selection

This module provides a command-line interface for selecting the input
variables of a predictive model with a genetic algorithm. Candidates are
scored with a ridge regression model trained on a CSV dataset.

Features:
- Random or correlation-weighted initial population
- One-point, two-point and uniform crossover; objective or rank-based fitness
- Configurable stopping criteria, trials and parallel evaluation
- Comprehensive logging, CSV/JSON result reporting and plots

Usage:
    python main.py --data data.csv --target price --generations 50 --save_results --plot
"""

import argparse
import os
import sys
from typing import List, Optional

import pandas as pd

from genetic_algorithm import GeneticAlgorithm
from ga_config import CrossoverMethod, FitnessAssignment, GAConfig, InitializationMethod
from ga_exceptions import GAException
from ga_logging import setup_logging
from inputs_selection.linear_model import LinearModelEvaluator
from inputs_selection.relevance import CorrelationRelevanceScorer


def load_dataset(file_path: str, targets: List[str], inputs: Optional[List[str]] = None):
    """
    Load a CSV dataset and split it into input and target columns.

    Args:
        file_path: CSV file with a header row
        targets: Target column names
        inputs: Input column names (every non-target numeric column if None)

    Returns:
        Tuple of (input DataFrame, target DataFrame)

    Raises:
        FileNotFoundError: If the data file doesn't exist
        ValueError: If a named column is missing
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Data file '{file_path}' not found.")

    data = pd.read_csv(file_path)
    missing = [name for name in targets + (inputs or []) if name not in data.columns]
    if missing:
        raise ValueError(f"Columns not found in '{file_path}': {', '.join(missing)}")

    if inputs is None:
        inputs = [name for name in data.select_dtypes(include="number").columns if name not in targets]
    if not inputs:
        raise ValueError("The dataset has no numeric input columns")

    return data[inputs], data[targets]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Select model inputs with a genetic algorithm.')

    # Dataset
    parser.add_argument('--data', '-d', type=str, required=True, help="CSV file with the dataset")
    parser.add_argument('--target', '-t', type=str, nargs='+', required=True, help="Target column(s)")
    parser.add_argument('--inputs', type=str, nargs='+', help="Candidate input columns (default: all numeric non-target columns)")
    parser.add_argument('--selection_fraction', type=float, default=0.2,
                        help="Share of instances used to compute the selection performance (default: 0.2)")

    # Configuration file; command line options override it
    parser.add_argument('--config', type=str, help="JSON file with GA configuration options")

    # GA parameters
    parser.add_argument('--generations', '-g', type=int, help="Maximum number of generations (default: 100)")
    parser.add_argument('--population_size', '-ps', type=int, help="Population size (default: 10)")
    parser.add_argument('--mutation_rate', '-mr', type=float, help="Mutation rate (default: 1/inputs)")
    parser.add_argument('--elitism_size', '-es', type=int, help="Candidates kept unchanged (default: 2)")
    parser.add_argument('--crossover_method', choices=[m.value for m in CrossoverMethod],
                        help="Crossover method (default: Uniform)")
    parser.add_argument('--fitness_method', choices=[m.value for m in FitnessAssignment],
                        help="Fitness assignment method (default: RankBased)")
    parser.add_argument('--initialization_method', choices=[m.value for m in InitializationMethod],
                        help="Population initialization (default: Random)")
    parser.add_argument('--trials', type=int, help="Trainings per candidate (default: 1)")
    parser.add_argument('--seed', type=int, help="Random seed for a reproducible search")

    # Multithreading
    parser.add_argument('--max_threads', '-mt', type=int, help="Maximum number of evaluation threads (default: 1)")

    # Output
    parser.add_argument('--output_dir', '-o', type=str, help="Folder to store the results (default: 'ga_results')")
    parser.add_argument('--save_results', action='store_true', help="Write generation CSVs and the run summary")
    parser.add_argument('--plot', action='store_true', help="Plot the generation statistics (implies --save_results)")
    parser.add_argument('--log_level', default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Console log level (default: INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the inputs selection system.

    Parses command-line arguments, loads the dataset, configures the genetic
    algorithm, runs the search and prints its report.
    """
    args = build_parser().parse_args(argv)
    if args.plot:
        args.save_results = True

    try:
        config = GAConfig.from_args(args)
    except (GAException, OSError, ValueError) as e:
        setup_logging(level=args.log_level).critical("Invalid configuration", exception=e)
        return 1

    logger = setup_logging(
        level=args.log_level,
        log_to_file=config.save_results,
        output_dir=config.output_dir,
        console_colors=True
    )
    logger.debug(config.summary())

    try:
        inputs, targets = load_dataset(args.data, args.target, args.inputs)
        evaluator = LinearModelEvaluator(inputs.to_numpy(), targets.to_numpy(),
                                         selection_fraction=args.selection_fraction, seed=config.seed)
        relevance_scorer = CorrelationRelevanceScorer(inputs.to_numpy(), targets.to_numpy())
    except (OSError, ValueError) as e:
        logger.critical("Could not prepare the dataset", data=args.data, exception=e)
        return 1
    logger.info("Dataset loaded", instances=len(inputs), inputs=inputs.shape[1], targets=targets.shape[1])

    ga = GeneticAlgorithm(inputs.shape[1], evaluator, config, relevance_scorer=relevance_scorer)

    try:
        results = ga.run()
    except GAException as e:
        logger.critical("Inputs selection failed", exception=e)
        return 1

    selected = [inputs.columns[i] for i in results.optimal_input_indices]
    logger.info(f"Selected inputs: {', '.join(selected)}")
    print(results.to_string())

    if args.plot:
        from plot_history import EvolutionVisualizer
        for path in EvolutionVisualizer(config.output_dir).plot_all():
            logger.info("Plot saved", path=path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
