"""
Relevance scoring of input variables, used by weighted initialization.
"""

import numpy as np


class RelevanceScorer:
    """Interface: ``score(variable_index)`` returns a non-negative relevance."""

    def score(self, variable_index: int) -> float:
        raise NotImplementedError


class CorrelationRelevanceScorer(RelevanceScorer):
    """
    Absolute Pearson correlation of each input column with the targets,
    summed over target columns. Constant columns score 0.
    """

    def __init__(self, inputs, targets):
        inputs = np.asarray(inputs, dtype=float)
        targets = np.asarray(targets, dtype=float)
        if targets.ndim == 1:
            targets = targets.reshape(-1, 1)
        if inputs.ndim != 2 or inputs.shape[0] != targets.shape[0]:
            raise ValueError(f"inputs {inputs.shape} and targets {targets.shape} do not share rows")

        self.scores = self._correlations(inputs, targets)

    @staticmethod
    def _correlations(inputs: np.ndarray, targets: np.ndarray) -> np.ndarray:
        centered_inputs = inputs - inputs.mean(axis=0)
        centered_targets = targets - targets.mean(axis=0)
        input_norms = np.sqrt((centered_inputs ** 2).sum(axis=0))
        target_norms = np.sqrt((centered_targets ** 2).sum(axis=0))

        covariance = centered_inputs.T @ centered_targets
        denominator = np.outer(input_norms, target_norms)
        with np.errstate(divide='ignore', invalid='ignore'):
            correlation = np.where(denominator > 0, covariance / denominator, 0.0)
        return np.abs(correlation).sum(axis=1)

    def score(self, variable_index: int) -> float:
        return float(self.scores[variable_index])

    def __len__(self):
        return len(self.scores)
