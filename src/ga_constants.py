"""
Configuration Constants for Genetic Algorithm Inputs Selection

Centralizes all magic numbers and default values for better maintainability.
All constants are organized by category with clear documentation.
"""


class GAConstants:
    """Default values for the genetic algorithm search."""

    # Population defaults
    DEFAULT_POPULATION_SIZE = 10           # Candidates per generation
    MIN_POPULATION_SIZE = 2                # Smallest population that can mate
    DEFAULT_ELITISM_SIZE = 2               # Candidates carried over unchanged
    DEFAULT_INITIALIZATION_PROBABILITY = 0.5  # Marginal probability of selecting an input

    # Operator defaults
    DEFAULT_SELECTIVE_PRESSURE = 1.5       # Linear ranking pressure (1 = uniform)
    DEFAULT_INCEST_PREVENTION_DISTANCE = 0 # Minimum Hamming distance between mates
    INCEST_PREVENTION_MAX_ATTEMPTS = 20    # Roulette draws before relaxing the distance
    UNIFORM_CROSSOVER_PROBABILITY = 0.5    # Probability a gene comes from the first parent

    # Fitness
    FAILED_FITNESS = 0.0                   # Objective fitness of a failed evaluation


class StoppingDefaults:
    """Default stopping criteria."""

    SELECTION_PERFORMANCE_GOAL = 0.0       # Stop once best selection performance reaches this
    MAXIMUM_ITERATIONS_NUMBER = 100        # Maximum generations
    MAXIMUM_TIME_SECONDS = 3600.0          # Maximum wall-clock time
    MAXIMUM_SELECTION_FAILURES = 10        # Consecutive generations without improvement
    TOLERANCE = 1.0e-3                     # Minimum improvement that resets the failure count


class EvaluationDefaults:
    """Model evaluation defaults."""

    TRIALS_NUMBER = 1                      # Trainings per distinct candidate
    MAX_THREADS = 1                        # Parallel evaluation workers
    MEMORY_POLL_INTERVAL = 0.1             # Seconds between RSS samples
    FAILED_PERFORMANCE = float('inf')      # Performance recorded for failed trainings


class LinearModelDefaults:
    """Reference linear model collaborator defaults."""

    SELECTION_FRACTION = 0.2               # Share of instances held out for selection
    REGULARIZATION = 1.0e-6                # Ridge penalty keeping the normal equations solvable
    CONDITION_NUMBER_LIMIT = 1.0e12        # Above this the system is treated as singular


class MemoryConstants:
    """Memory-related configuration constants."""

    BYTES_PER_GB = 1024 ** 3


# Convenient access to commonly used constants
FAILED_PERFORMANCE = EvaluationDefaults.FAILED_PERFORMANCE


def bytes_to_gb(bytes_value: int) -> float:
    """Convert bytes to gigabytes."""
    return bytes_value / MemoryConstants.BYTES_PER_GB
