"""
Inputs Selection Components

Modular components of the genetic algorithm inputs selection search.
Each component handles a specific aspect of the search:

- PopulationManager: Candidate initialization and zero-input repair
- FitnessAssigner: Objective-based and rank-based fitness
- SelectionMethods: Elitism, roulette wheel and incest prevention
- GeneticOperations: Crossover and mutation operations
- EvaluationEngine: Memoized, optionally parallel candidate evaluation
- StoppingCriteria: Stopping conditions of the search
- GAReporter: Generation statistics and result files

Usage:
    from inputs_selection import PopulationManager, SelectionMethods
    from inputs_selection.linear_model import LinearModelEvaluator
"""

from .population_management import PopulationManager
from .fitness_assignment import (
    FitnessAssigner,
    ObjectiveBasedFitness,
    RankBasedFitness,
    create_fitness_assigner
)
from .selection import SelectionMethods
from .genetic_operations import GeneticOperations
from .evaluation import EvaluationEngine, ModelEvaluator, TrialsModelEvaluator
from .convergence_detection import StoppingCondition, StoppingCriteria
from .reporting import GAReporter, GenerationStats
from .relevance import RelevanceScorer, CorrelationRelevanceScorer

__all__ = [
    'PopulationManager',
    'FitnessAssigner',
    'ObjectiveBasedFitness',
    'RankBasedFitness',
    'create_fitness_assigner',
    'SelectionMethods',
    'GeneticOperations',
    'EvaluationEngine',
    'ModelEvaluator',
    'TrialsModelEvaluator',
    'StoppingCondition',
    'StoppingCriteria',
    'GAReporter',
    'GenerationStats',
    'RelevanceScorer',
    'CorrelationRelevanceScorer'
]

__version__ = '1.0.0'
