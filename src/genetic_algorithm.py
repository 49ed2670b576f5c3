import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from evaluation_history import EvaluationHistory, PerformanceRecord
from ga_config import GAConfig, InitializationMethod
from ga_exceptions import MissingCollaboratorError
from ga_logging import get_logger
from inputs_selection.convergence_detection import StoppingCondition, StoppingCriteria
from inputs_selection.evaluation import EvaluationEngine, ModelEvaluator, TrialsModelEvaluator
from inputs_selection.fitness_assignment import create_fitness_assigner
from inputs_selection.genetic_operations import GeneticOperations
from inputs_selection.population_management import (
    Candidate, PopulationManager, mask_to_string, selected_indices
)
from inputs_selection.reporting import GAReporter, GenerationStats, compute_generation_stats
from inputs_selection.selection import SelectionMethods


@dataclass
class InputsSelectionResults:
    """Outcome of an inputs selection run."""
    optimal_inputs: Candidate
    optimal_input_indices: List[int]
    final_performance: float
    final_selection_performance: float
    minimal_parameters: Any
    stopping_condition: StoppingCondition
    iterations_number: int
    elapsed_time: float

    generation_minimum_selection_history: List[float] = field(default_factory=list)
    generation_mean_history: List[float] = field(default_factory=list)
    generation_standard_deviation_history: List[float] = field(default_factory=list)
    generation_optimum_performance_history: List[float] = field(default_factory=list)

    inputs_data: List[Candidate] = field(default_factory=list)
    performance_data: List[float] = field(default_factory=list)
    selection_performance_data: List[float] = field(default_factory=list)
    parameters_data: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary (lists, floats and strings) for serialization."""
        return {
            'optimal_inputs': [bool(flag) for flag in self.optimal_inputs],
            'optimal_input_indices': list(self.optimal_input_indices),
            'final_performance': self.final_performance,
            'final_selection_performance': self.final_selection_performance,
            'minimal_parameters': _plain(self.minimal_parameters),
            'stopping_condition': self.stopping_condition.value,
            'iterations_number': self.iterations_number,
            'elapsed_time': self.elapsed_time,
            'generation_minimum_selection_history': list(self.generation_minimum_selection_history),
            'generation_mean_history': list(self.generation_mean_history),
            'generation_standard_deviation_history': list(self.generation_standard_deviation_history),
            'generation_optimum_performance_history': list(self.generation_optimum_performance_history),
            'inputs_data': [mask_to_string(mask) for mask in self.inputs_data],
            'performance_data': list(self.performance_data),
            'selection_performance_data': list(self.selection_performance_data),
            'parameters_data': [_plain(parameters) for parameters in self.parameters_data]
        }

    def to_string(self) -> str:
        """Text report, one ``% Section`` per result."""
        sections = [
            ("Optimal inputs", mask_to_string(self.optimal_inputs)),
            ("Optimal input indices", " ".join(str(i) for i in self.optimal_input_indices)),
            ("Final performance", f"{self.final_performance:.6g}"),
            ("Final selection performance", f"{self.final_selection_performance:.6g}"),
            ("Stopping condition", self.stopping_condition.value),
            ("Iterations number", str(self.iterations_number)),
            ("Elapsed time", f"{self.elapsed_time:.3f}"),
        ]
        series = [
            ("Generation minimum selection history", self.generation_minimum_selection_history),
            ("Generation mean history", self.generation_mean_history),
            ("Generation standard deviation history", self.generation_standard_deviation_history),
            ("Generation optimum performance history", self.generation_optimum_performance_history),
        ]
        for title, values in series:
            if values:
                sections.append((title, " ".join(f"{value:.6g}" for value in values)))
        if self.minimal_parameters is not None:
            sections.append(("Minimal parameters", str(_plain(self.minimal_parameters))))

        return "\n".join(f"% {title}\n{body}" for title, body in sections) + "\n"


def _plain(value):
    """Convert numpy arrays to lists, leave everything else untouched."""
    return value.tolist() if hasattr(value, 'tolist') else value


class GeneticAlgorithm:
    """
    Genetic algorithm inputs selection.

    Searches the subsets of ``inputs_number`` input variables for the one with
    the lowest selection performance reported by the model evaluator. Every
    generation is evaluated, summarized and checked against the stopping
    criteria; only when none fires is the next generation bred.
    """

    def __init__(self, inputs_number: int, evaluator: Optional[ModelEvaluator],
                 config: GAConfig = None, relevance_scorer=None) -> None:

        self.inputs_number = inputs_number
        self.evaluator = evaluator
        self.config = config or GAConfig()
        self.relevance_scorer = relevance_scorer
        self.logger = get_logger("GeneticAlgorithm")

        # Built at run start
        self.rng: Optional[random.Random] = None
        self.history: Optional[EvaluationHistory] = None
        self.population_manager: Optional[PopulationManager] = None
        self.fitness_assigner = None
        self.selection_methods: Optional[SelectionMethods] = None
        self.genetic_operations: Optional[GeneticOperations] = None
        self.evaluation_engine: Optional[EvaluationEngine] = None
        self.stopping_criteria: Optional[StoppingCriteria] = None
        self.reporter: Optional[GAReporter] = None

        self.population: List[Candidate] = []
        self.generation_stats: List[GenerationStats] = []

    def _check_collaborators(self):
        """Fail fast when the run cannot start."""
        if self.evaluator is None:
            raise MissingCollaboratorError("ModelEvaluator", "no model evaluator attached")
        if (self.config.initialization_method is InitializationMethod.WEIGHTED
                and self.relevance_scorer is None):
            raise MissingCollaboratorError("RelevanceScorer", "weighted initialization needs relevance scores")
        self.config.validate()
        self.config.validate_for_inputs(self.inputs_number)

    def _setup_components(self):
        """Create the run's generator, history and operators from the configuration."""
        config = self.config
        self.rng = random.Random(config.seed)
        self.history = EvaluationHistory()

        self.population_manager = PopulationManager(
            self.inputs_number,
            config.population_size,
            self.rng,
            initialization_probability=config.initialization_probability,
            relevance_scorer=self.relevance_scorer
        )

        self.fitness_assigner = create_fitness_assigner(
            config.fitness_assignment_method,
            config.selective_pressure
        )

        self.selection_methods = SelectionMethods(
            self.rng,
            elitism_size=config.elitism_size,
            incest_prevention_distance=config.incest_prevention_distance
        )

        self.genetic_operations = GeneticOperations(
            self.rng,
            crossover_method=config.crossover_method,
            mutation_rate=config.resolve_mutation_rate(self.inputs_number),
            crossover_first_point=config.crossover_first_point,
            crossover_second_point=config.crossover_second_point
        )

        evaluator = self.evaluator
        if config.trials_number > 1:
            evaluator = TrialsModelEvaluator(evaluator, config.trials_number,
                                             config.performance_calculation_method)

        self.evaluation_engine = EvaluationEngine(
            evaluator,
            self.history,
            max_threads=config.max_threads,
            display=config.display,
            check_time_between_evaluations=config.check_time_between_evaluations
        )

        self.stopping_criteria = StoppingCriteria(
            selection_performance_goal=config.selection_performance_goal,
            maximum_iterations_number=config.maximum_iterations_number,
            maximum_time=config.maximum_time,
            maximum_selection_failures=config.maximum_selection_failures,
            tolerance=config.tolerance
        )

        self.reporter = GAReporter(
            output_dir=config.output_dir,
            experiment_name=f"inputs_selection_{int(time.time())}"
        ) if config.save_results else None

    def run(self) -> InputsSelectionResults:
        """Runs the inputs selection search until a stopping condition fires."""
        self._check_collaborators()
        self._setup_components()

        self.logger.log_config_summary(self.config, self.inputs_number)
        if self.reporter:
            self.reporter.start_run(self.config.to_dict())

        start_time = time.time()
        deadline = start_time + self.config.maximum_time
        self.generation_stats = []
        self.population = self.population_manager.initialize_population(self.config.initialization_method)

        generation = 0
        while True:
            generation += 1
            generation_start = time.time()
            self.logger.log_generation_start(generation, len(self.population))

            records, peak_memory = self.evaluation_engine.evaluate_population(self.population, deadline)
            complete = all(record is not None for record in records)
            fitness = self.fitness_assigner.assign(records) if complete else None

            best = self.history.best()
            stats = compute_generation_stats(generation, records,
                                             best[1].record if best else None,
                                             elapsed_time=time.time() - start_time)
            self.generation_stats.append(stats)
            self.stopping_criteria.add_optimum(stats.optimum_selection)

            if self.reporter:
                self.reporter.save_generation_data(stats, self.population, records, fitness)

            self.logger.log_generation_complete(generation, stats, time.time() - generation_start,
                                                peak_memory, display=self.config.display)
            if best:
                self.logger.debug("Best candidate so far",
                                  inputs=mask_to_string(best[0]),
                                  selection=f"{best[1].record.selection_performance:.6g}")

            stop = self.stopping_criteria.check(generation, time.time() - start_time)
            if stop is None and not complete:
                stop = (StoppingCondition.MAXIMUM_TIME,
                        "Maximum time reached during the evaluation of the generation")
            if stop:
                condition, reason = stop
                self.logger.log_stopping_condition(generation, condition.value, reason)
                break

            self.population = self.next_generation(self.population, records, fitness)

        return self._finalize_run(generation, stop[0], time.time() - start_time)

    def next_generation(self, population: Sequence[Candidate], records: Sequence[PerformanceRecord],
                        fitness: Sequence[float] = None) -> List[Candidate]:
        """
        Breed the next population from an evaluated one.

        Elites are copied unchanged; the remaining slots are filled with the
        mutated offspring of roulette-selected parent pairs.
        """
        if fitness is None:
            fitness = self.fitness_assigner.assign(records)

        elites = [population[i] for i in self.selection_methods.select_elites(records)]
        offspring_needed = len(population) - len(elites)
        num_pairs = (offspring_needed + 1) // 2

        offspring = []
        for first, second in self.selection_methods.select_parents(population, fitness, num_pairs):
            child1, child2 = self.genetic_operations.crossover(population[first], population[second])
            offspring.append(self.genetic_operations.mutate(child1))
            offspring.append(self.genetic_operations.mutate(child2))

        return elites + offspring[:offspring_needed]

    def _finalize_run(self, generation: int, condition: StoppingCondition,
                      elapsed_time: float) -> InputsSelectionResults:
        """Extract the best candidate ever evaluated and assemble the results."""
        config = self.config
        best_mask, best_entry = self.history.best()
        if best_entry.record.failed:
            self.logger.warning("Every evaluation failed, no trained candidate is available")

        history_items = list(self.history.items())
        results = InputsSelectionResults(
            optimal_inputs=best_mask,
            optimal_input_indices=selected_indices(best_mask),
            final_performance=best_entry.record.training_performance,
            final_selection_performance=best_entry.record.selection_performance,
            minimal_parameters=best_entry.parameters if config.reserve_minimal_parameters else None,
            stopping_condition=condition,
            iterations_number=generation,
            elapsed_time=elapsed_time
        )

        if config.reserve_generation_minimum_selection:
            results.generation_minimum_selection_history = [s.minimum_selection for s in self.generation_stats]
        if config.reserve_generation_mean:
            results.generation_mean_history = [s.mean_selection for s in self.generation_stats]
        if config.reserve_generation_standard_deviation:
            results.generation_standard_deviation_history = [
                s.standard_deviation_selection for s in self.generation_stats]
        if config.reserve_generation_optimum_performance:
            results.generation_optimum_performance_history = [s.optimum_selection for s in self.generation_stats]

        if config.reserve_performance_data or config.reserve_selection_performance_data:
            results.inputs_data = [mask for mask, _ in history_items]
        if config.reserve_performance_data:
            results.performance_data = [entry.record.training_performance for _, entry in history_items]
        if config.reserve_selection_performance_data:
            results.selection_performance_data = [entry.record.selection_performance for _, entry in history_items]
        if config.reserve_parameters_data:
            results.parameters_data = [entry.parameters for _, entry in history_items]

        if self.reporter:
            self.reporter.save_run_summary(results.to_dict(), self.get_statistics())

        hits, misses, hit_rate, _ = self.history.get_stats()
        self.logger.log_cache_stats(hits, misses, hit_rate)
        self.logger.info("Inputs selection finished",
                         generations=generation,
                         optimal_inputs=mask_to_string(best_mask),
                         selection=f"{results.final_selection_performance:.6g}",
                         elapsed=f"{elapsed_time:.2f}s")
        return results

    def get_statistics(self) -> Dict[str, Any]:
        """Statistics of the components of the last run."""
        if self.evaluation_engine is None:
            return {}
        return {
            'population_manager': self.population_manager.get_statistics(),
            'selection_methods': self.selection_methods.get_statistics(),
            'genetic_operations': self.genetic_operations.get_statistics(),
            'evaluation_engine': self.evaluation_engine.get_statistics(),
            'stopping_criteria': self.stopping_criteria.get_statistics()
        }
