"""
Linear Model Evaluator

Reference model collaborator: ridge regression fitted on the training
instances restricted to the selected inputs, scored by mean squared error on
the training and selection instances.
"""

import threading
from typing import Sequence, Tuple

import numpy as np

from ga_constants import LinearModelDefaults
from ga_exceptions import TrainingFailedError
from inputs_selection.evaluation import ModelEvaluator
from inputs_selection.population_management import selected_indices


class LinearModelEvaluator(ModelEvaluator):
    """
    Ridge regression ModelEvaluator.

    Instances are split once into training and selection subsets. Every call
    fits on a bootstrap resample of the training instances, which is the
    evaluator's declared source of randomness. Parameters are returned as an
    array of shape ``(selected_inputs + 1, targets)``, intercept first.
    """

    def __init__(self, inputs, targets,
                 selection_fraction: float = LinearModelDefaults.SELECTION_FRACTION,
                 regularization: float = LinearModelDefaults.REGULARIZATION,
                 seed: int = None, bootstrap: bool = True):
        inputs = np.asarray(inputs, dtype=float)
        targets = np.asarray(targets, dtype=float)
        if targets.ndim == 1:
            targets = targets.reshape(-1, 1)
        if inputs.ndim != 2 or inputs.shape[0] != targets.shape[0]:
            raise ValueError(f"inputs {inputs.shape} and targets {targets.shape} do not share rows")
        if not 0.0 < selection_fraction < 1.0:
            raise ValueError(f"selection_fraction must be in (0, 1) (got {selection_fraction})")

        self.rng = np.random.default_rng(seed)
        self.regularization = regularization
        self.bootstrap = bootstrap
        self._rng_lock = threading.Lock()

        rows = self.rng.permutation(inputs.shape[0])
        selection_count = max(1, int(round(selection_fraction * len(rows))))
        if len(rows) - selection_count < 2:
            raise ValueError(f"Not enough instances ({len(rows)}) for a training/selection split")

        selection_rows = rows[:selection_count]
        training_rows = rows[selection_count:]
        self.training_inputs = inputs[training_rows]
        self.training_targets = targets[training_rows]
        self.selection_inputs = inputs[selection_rows]
        self.selection_targets = targets[selection_rows]

    @property
    def inputs_number(self) -> int:
        return self.training_inputs.shape[1]

    def evaluate(self, input_mask: Sequence[bool]) -> Tuple[float, float, np.ndarray]:
        if len(input_mask) != self.inputs_number:
            raise TrainingFailedError(
                f"Mask has {len(input_mask)} flags for {self.inputs_number} inputs", input_mask)
        columns = selected_indices(input_mask)
        if not columns:
            raise TrainingFailedError("Mask selects no inputs", input_mask)

        rows = np.arange(self.training_inputs.shape[0])
        if self.bootstrap:
            with self._rng_lock:
                rows = self.rng.choice(rows, size=len(rows), replace=True)

        design = self._design(self.training_inputs[rows][:, columns])
        targets = self.training_targets[rows]
        parameters = self._fit(design, targets, input_mask)

        training_error = self._mean_squared_error(design, targets, parameters)
        selection_error = self._mean_squared_error(
            self._design(self.selection_inputs[:, columns]), self.selection_targets, parameters)
        return training_error, selection_error, parameters

    @staticmethod
    def _design(inputs: np.ndarray) -> np.ndarray:
        return np.hstack([np.ones((inputs.shape[0], 1)), inputs])

    def _fit(self, design: np.ndarray, targets: np.ndarray, input_mask) -> np.ndarray:
        penalty = self.regularization * np.eye(design.shape[1])
        penalty[0, 0] = 0.0
        normal_matrix = design.T @ design + penalty

        if np.linalg.cond(normal_matrix) > LinearModelDefaults.CONDITION_NUMBER_LIMIT:
            raise TrainingFailedError("Normal equations are singular", input_mask)
        try:
            return np.linalg.solve(normal_matrix, design.T @ targets)
        except np.linalg.LinAlgError as e:
            raise TrainingFailedError(f"Linear solve failed: {e}", input_mask)

    @staticmethod
    def _mean_squared_error(design: np.ndarray, targets: np.ndarray, parameters: np.ndarray) -> float:
        residuals = design @ parameters - targets
        return float(np.mean(residuals ** 2))
