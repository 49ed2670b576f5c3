"""
Configuration Management for Genetic Algorithm Inputs Selection

Validates and organizes the search options into a clean structure.
Operator methods are closed enumerations chosen once at configuration time.
"""

import json
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional

from ga_constants import GAConstants, StoppingDefaults, EvaluationDefaults
from ga_exceptions import InvalidConfigurationError


class InitializationMethod(Enum):
    """Methods for building the first population."""
    RANDOM = "Random"
    WEIGHTED = "Weighted"


class CrossoverMethod(Enum):
    """Recombination methods."""
    ONE_POINT = "OnePoint"
    TWO_POINT = "TwoPoint"
    UNIFORM = "Uniform"


class FitnessAssignment(Enum):
    """Methods turning selection performance into selection weights."""
    OBJECTIVE_BASED = "ObjectiveBased"
    RANK_BASED = "RankBased"


class PerformanceCalculationMethod(Enum):
    """How repeated training trials of one candidate are resolved."""
    MINIMUM = "Minimum"
    MAXIMUM = "Maximum"
    MEAN = "Mean"


def parse_method(enum_type, value):
    """Resolve an enum member from a member, its value, or its name (case-insensitive)."""
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        wanted = value.replace('_', '').replace('-', '').lower()
        for member in enum_type:
            if wanted in (member.value.lower(), member.name.replace('_', '').lower()):
                return member
    return None


_METHOD_FIELDS = {
    'initialization_method': InitializationMethod,
    'crossover_method': CrossoverMethod,
    'fitness_assignment_method': FitnessAssignment,
    'performance_calculation_method': PerformanceCalculationMethod,
}


@dataclass
class GAConfig:
    """
    Configuration container for the inputs selection genetic algorithm.

    Every rule that can be checked without knowing the number of candidate
    inputs is validated on construction; the rest is checked by
    ``validate_for_inputs`` when a run starts.
    """

    # Population and operators
    population_size: int = GAConstants.DEFAULT_POPULATION_SIZE
    mutation_rate: Optional[float] = None  # None resolves to 1 / inputs_number
    elitism_size: int = GAConstants.DEFAULT_ELITISM_SIZE
    crossover_first_point: int = 0         # 0 draws the cut per pair
    crossover_second_point: int = 0
    selective_pressure: float = GAConstants.DEFAULT_SELECTIVE_PRESSURE
    incest_prevention_distance: float = GAConstants.DEFAULT_INCEST_PREVENTION_DISTANCE
    initialization_method: Any = InitializationMethod.RANDOM
    initialization_probability: float = GAConstants.DEFAULT_INITIALIZATION_PROBABILITY
    crossover_method: Any = CrossoverMethod.UNIFORM
    fitness_assignment_method: Any = FitnessAssignment.RANK_BASED

    # Stopping criteria
    selection_performance_goal: float = StoppingDefaults.SELECTION_PERFORMANCE_GOAL
    maximum_iterations_number: int = StoppingDefaults.MAXIMUM_ITERATIONS_NUMBER
    maximum_time: float = StoppingDefaults.MAXIMUM_TIME_SECONDS
    maximum_selection_failures: int = StoppingDefaults.MAXIMUM_SELECTION_FAILURES
    tolerance: float = StoppingDefaults.TOLERANCE

    # Evaluation
    trials_number: int = EvaluationDefaults.TRIALS_NUMBER
    performance_calculation_method: Any = PerformanceCalculationMethod.MINIMUM
    max_threads: int = EvaluationDefaults.MAX_THREADS
    seed: Optional[int] = None
    check_time_between_evaluations: bool = False

    # History retention
    reserve_generation_mean: bool = True
    reserve_generation_standard_deviation: bool = True
    reserve_generation_minimum_selection: bool = True
    reserve_generation_optimum_performance: bool = True
    reserve_performance_data: bool = True
    reserve_selection_performance_data: bool = True
    reserve_parameters_data: bool = True
    reserve_minimal_parameters: bool = True

    # Output
    output_dir: str = "ga_results"
    save_results: bool = False
    display: bool = True

    def __post_init__(self):
        """Normalize method names and validate options."""
        self.validate()

    def validate(self):
        """Validate every option that does not depend on the candidate length."""
        errors = []

        for field_name, enum_type in _METHOD_FIELDS.items():
            raw_value = getattr(self, field_name)
            member = parse_method(enum_type, raw_value)
            if member is None:
                allowed = [m.value for m in enum_type]
                errors.append(f"{field_name} ({raw_value!r}) must be one of: {allowed}")
            else:
                setattr(self, field_name, member)

        if self.population_size < GAConstants.MIN_POPULATION_SIZE:
            errors.append(f"Population size ({self.population_size}) must be at least "
                          f"{GAConstants.MIN_POPULATION_SIZE}")
        if self.mutation_rate is not None and not 0.0 <= self.mutation_rate <= 1.0:
            errors.append(f"Mutation rate ({self.mutation_rate}) must be between 0.0 and 1.0")
        if self.elitism_size < 0:
            errors.append(f"Elitism size ({self.elitism_size}) cannot be negative")
        if self.elitism_size >= self.population_size:
            errors.append(f"Elitism size ({self.elitism_size}) must be less than "
                          f"population size ({self.population_size})")
        if self.crossover_first_point < 0 or self.crossover_second_point < 0:
            errors.append("Crossover points cannot be negative")
        if (self.crossover_method is CrossoverMethod.TWO_POINT
                and self.crossover_first_point > 0 and self.crossover_second_point > 0
                and self.crossover_first_point >= self.crossover_second_point):
            errors.append(f"Crossover first point ({self.crossover_first_point}) must be lower "
                          f"than second point ({self.crossover_second_point})")
        if self.selective_pressure <= 0:
            errors.append(f"Selective pressure ({self.selective_pressure}) must be positive")
        if self.incest_prevention_distance < 0:
            errors.append(f"Incest prevention distance ({self.incest_prevention_distance}) "
                          f"cannot be negative")
        if not 0.0 < self.initialization_probability <= 1.0:
            errors.append(f"Initialization probability ({self.initialization_probability}) "
                          f"must be in (0.0, 1.0]")

        if self.maximum_iterations_number < 1:
            errors.append(f"Maximum iterations ({self.maximum_iterations_number}) must be positive")
        if self.maximum_time <= 0:
            errors.append(f"Maximum time ({self.maximum_time}) must be positive")
        if self.maximum_selection_failures < 1:
            errors.append(f"Maximum selection failures ({self.maximum_selection_failures}) "
                          f"must be positive")
        if self.tolerance < 0:
            errors.append(f"Tolerance ({self.tolerance}) cannot be negative")

        if self.trials_number < 1:
            errors.append(f"Trials number ({self.trials_number}) must be positive")
        if self.max_threads < 1:
            errors.append(f"Max threads ({self.max_threads}) must be positive")

        if self.save_results and (not self.output_dir or not self.output_dir.strip()):
            errors.append("Output directory cannot be empty when saving results")

        if errors:
            raise InvalidConfigurationError(errors)

    def validate_for_inputs(self, inputs_number: int) -> None:
        """
        Validate options that depend on the number of candidate inputs.

        Raises:
            InvalidConfigurationError: If a cut point does not fit the candidate
        """
        errors = []

        if inputs_number < 1:
            errors.append(f"At least one candidate input is required (got {inputs_number})")
        else:
            last_cut = inputs_number - 1
            if self.crossover_first_point > last_cut:
                errors.append(f"Crossover first point ({self.crossover_first_point}) exceeds "
                              f"candidate length ({inputs_number})")
            if self.crossover_second_point > last_cut:
                errors.append(f"Crossover second point ({self.crossover_second_point}) exceeds "
                              f"candidate length ({inputs_number})")
            if (self.crossover_method is CrossoverMethod.TWO_POINT
                    and self.crossover_first_point > 0 and self.crossover_second_point == 0
                    and self.crossover_first_point >= last_cut):
                errors.append(f"Crossover first point ({self.crossover_first_point}) leaves no "
                              f"room for a second point")
            if (self.crossover_method is CrossoverMethod.TWO_POINT
                    and self.crossover_first_point == 0 and self.crossover_second_point == 1):
                errors.append("Crossover second point (1) leaves no room for a first point")

        if errors:
            raise InvalidConfigurationError(errors)

    def resolve_mutation_rate(self, inputs_number: int) -> float:
        """Mutation rate to use for a candidate of the given length."""
        if self.mutation_rate is not None:
            return self.mutation_rate
        return 1.0 / inputs_number

    @classmethod
    def from_args(cls, args) -> 'GAConfig':
        """
        Create configuration from parsed CLI arguments.

        Options the user did not pass (``None``) keep the config defaults,
        or the values loaded from ``--config`` when given.
        """
        base = cls.from_json_file(args.config).to_dict() if getattr(args, 'config', None) else {}

        overrides = {
            'population_size': args.population_size,
            'maximum_iterations_number': args.generations,
            'mutation_rate': args.mutation_rate,
            'elitism_size': args.elitism_size,
            'crossover_method': args.crossover_method,
            'fitness_assignment_method': args.fitness_method,
            'initialization_method': args.initialization_method,
            'trials_number': args.trials,
            'max_threads': args.max_threads,
            'seed': args.seed,
            'output_dir': args.output_dir,
        }
        base.update({key: value for key, value in overrides.items() if value is not None})
        if getattr(args, 'save_results', False):
            base['save_results'] = True

        return cls.from_dict(base)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'GAConfig':
        """Create config from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise InvalidConfigurationError([f"Unknown configuration option: {key}" for key in unknown])
        return cls(**config_dict)

    @classmethod
    def from_json_file(cls, path: str) -> 'GAConfig':
        """Load configuration from a JSON object of option names to values."""
        with open(path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise InvalidConfigurationError([f"Configuration file '{path}' must hold a JSON object"])
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.value if isinstance(value, Enum) else value
        return result

    def update(self, **kwargs) -> 'GAConfig':
        """Create a new config with updated values."""
        current_config = self.to_dict()
        current_config.update(kwargs)
        return self.from_dict(current_config)

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        mutation = "1/inputs" if self.mutation_rate is None else f"{self.mutation_rate:.3f}"
        return f"""GA Inputs Selection Configuration:
  Population: {self.population_size} (elitism: {self.elitism_size})
  Initialization: {self.initialization_method.value}
  Fitness: {self.fitness_assignment_method.value} (selective pressure {self.selective_pressure})
  Crossover: {self.crossover_method.value} (points {self.crossover_first_point}, {self.crossover_second_point})
  Mutation rate: {mutation}
  Incest prevention distance: {self.incest_prevention_distance}
  Stopping: goal={self.selection_performance_goal}, generations={self.maximum_iterations_number}, time={self.maximum_time}s, failures={self.maximum_selection_failures}
  Trials: {self.trials_number} ({self.performance_calculation_method.value})
  Threads: {self.max_threads}"""

    def __str__(self) -> str:
        return (f"GAConfig(pop={self.population_size}, gen={self.maximum_iterations_number}, "
                f"crossover={self.crossover_method.value}, fitness={self.fitness_assignment_method.value})")

