"""
Custom Exception Classes for Genetic Algorithm Inputs Selection

Provides specific, meaningful exceptions for the different failure modes
of the search, so callers never have to parse generic exceptions.
"""

import math
from typing import List, Optional, Sequence


class GAException(Exception):
    """Base exception for all genetic algorithm related errors."""
    pass


class ConfigurationError(GAException, ValueError):
    """Raised when GA configuration is invalid or inconsistent."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised at run start when one or more configuration rules are violated."""

    def __init__(self, errors: List[str]):
        message = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
        super().__init__(message)
        self.errors = list(errors)


class MissingCollaboratorError(GAException):
    """Raised at run start when a required collaborator is not attached."""

    def __init__(self, collaborator: str, reason: str = None):
        message = f"No {collaborator} attached"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.collaborator = collaborator


class TrainingFailedError(GAException):
    """Raised by a model evaluator when training a candidate fails."""

    def __init__(self, message: str, input_mask: Sequence[bool] = None):
        super().__init__(message)
        self.input_mask = tuple(input_mask) if input_mask is not None else None


class PopulationError(GAException):
    """Raised when population operations fail."""
    pass


class SelectionError(GAException):
    """Raised when selection operations fail."""

    def __init__(self, message: str, population_size: int = None,
                 selection_type: str = None):
        super().__init__(message)
        self.population_size = population_size
        self.selection_type = selection_type


class CrossoverError(GAException):
    """Raised when crossover operations fail."""

    def __init__(self, message: str, parent1: Sequence[bool] = None,
                 parent2: Sequence[bool] = None):
        super().__init__(message)
        self.parent1 = parent1
        self.parent2 = parent2


class MutationError(GAException):
    """Raised when mutation operations fail."""

    def __init__(self, message: str, mutation_rate: float = None):
        super().__init__(message)
        self.mutation_rate = mutation_rate


class ReportingError(GAException):
    """Raised when result reporting/saving fails."""

    def __init__(self, message: str, output_dir: str = None,
                 file_type: str = None):
        super().__init__(message)
        self.output_dir = output_dir
        self.file_type = file_type


def validate_performance(value, name: str, input_mask: Optional[Sequence[bool]] = None) -> float:
    """
    Validate a performance value returned by a model evaluator.

    Args:
        value: Value to validate
        name: Which performance this is (for error context)
        input_mask: Candidate that produced the value

    Returns:
        The value as a float

    Raises:
        TrainingFailedError: If the value is missing, non-numeric or not finite
    """
    if value is None:
        raise TrainingFailedError(f"{name} is None", input_mask)

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise TrainingFailedError(
                f"{name} must be numeric, got {type(value).__name__}", input_mask)

    if not math.isfinite(value):
        raise TrainingFailedError(f"{name} is not finite: {value}", input_mask)

    return float(value)
