"""
Evaluation Module

Handles candidate evaluation with memoization, parallel processing and
memory monitoring for the inputs selection search.

Features:
- Evaluation history lookup before every training (one training per bit-pattern)
- Parallel evaluation using ThreadPoolExecutor, sequential fallback
- Trials resolution (minimum, maximum or mean over repeated trainings)
- Memory usage tracking and evaluation statistics
"""

import concurrent.futures
import threading
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import psutil
from tqdm import tqdm

from evaluation_history import EvaluationHistory, HistoryEntry, PerformanceRecord
from ga_config import PerformanceCalculationMethod
from ga_constants import EvaluationDefaults, bytes_to_gb
from ga_exceptions import MissingCollaboratorError, validate_performance
from ga_logging import get_logger
from inputs_selection.population_management import Candidate, mask_to_string


class ModelEvaluator:
    """
    Interface of the model training collaborator.

    ``evaluate`` trains a model restricted to the inputs selected by the mask
    and returns ``(training_performance, selection_performance, parameters)``,
    lower performance being better. Training failure is signalled by raising
    ``TrainingFailedError``. Implementations used with ``max_threads > 1``
    must be reentrant.
    """

    def evaluate(self, input_mask: Sequence[bool]) -> Tuple[float, float, Any]:
        raise NotImplementedError


class TrialsModelEvaluator(ModelEvaluator):
    """
    Runs a single-trial trainer several times and resolves the results.

    - Minimum: the trial with the lowest selection performance
    - Maximum: the trial with the highest selection performance
    - Mean: both performances averaged, parameters of the first trial

    A failure in any trial fails the whole evaluation.
    """

    def __init__(self, trainer: ModelEvaluator,
                 trials_number: int = EvaluationDefaults.TRIALS_NUMBER,
                 method: PerformanceCalculationMethod = PerformanceCalculationMethod.MINIMUM):
        if trials_number < 1:
            raise ValueError(f"trials_number must be at least 1 (got {trials_number})")
        self.trainer = trainer
        self.trials_number = trials_number
        self.method = method

    def evaluate(self, input_mask: Sequence[bool]) -> Tuple[float, float, Any]:
        trials = []
        for _ in range(self.trials_number):
            training, selection, parameters = self.trainer.evaluate(input_mask)
            trials.append((validate_performance(training, "training_performance", input_mask),
                           validate_performance(selection, "selection_performance", input_mask),
                           parameters))

        if self.method is PerformanceCalculationMethod.MINIMUM:
            return min(trials, key=lambda trial: trial[1])
        if self.method is PerformanceCalculationMethod.MAXIMUM:
            return max(trials, key=lambda trial: trial[1])

        mean_training = sum(trial[0] for trial in trials) / len(trials)
        mean_selection = sum(trial[1] for trial in trials) / len(trials)
        return mean_training, mean_selection, trials[0][2]


class EvaluationEngine:
    """
    Evaluation engine for the inputs selection search.

    Every distinct bit-pattern is handed to the model evaluator at most once
    per run; later requests are answered from the evaluation history. A
    failed training is recorded as a failed PerformanceRecord instead of
    aborting the search.
    """

    def __init__(self, evaluator: ModelEvaluator, history: Optional[EvaluationHistory] = None,
                 max_threads: int = EvaluationDefaults.MAX_THREADS, display: bool = True,
                 check_time_between_evaluations: bool = False):
        """
        Initialize evaluation engine.

        Args:
            evaluator: ModelEvaluator used to train uncached candidates
            history: Evaluation history shared for the run (a new one if omitted)
            max_threads: Parallel evaluation workers (1 = sequential)
            display: Whether to show progress bars
            check_time_between_evaluations: Honour the deadline between single evaluations
        """
        if evaluator is None:
            raise MissingCollaboratorError("ModelEvaluator", "no model evaluator attached")

        self.evaluator = evaluator
        self.history = history if history is not None else EvaluationHistory()
        self.max_threads = max(1, max_threads)
        self.display = display
        self.check_time_between_evaluations = check_time_between_evaluations
        self.logger = get_logger("EvaluationEngine")
        self._stats_lock = threading.Lock()

        # Statistics
        self.stats = {
            'evaluations_performed': 0,
            'evaluation_errors': 0,
            'duplicate_candidates': 0,
            'skipped_by_deadline': 0,
            'parallel_batches': 0,
            'total_evaluation_time': 0.0,
            'peak_memory_usage': 0.0
        }

    def evaluate(self, candidate: Sequence[bool]) -> PerformanceRecord:
        """
        Evaluate a single candidate through the evaluation history.

        Returns:
            The cached record on a hit, the freshly trained record on a miss
        """
        entry = self.history.get(candidate)
        if entry is None:
            entry = self._train(candidate)
        return entry.record

    def _train(self, candidate: Sequence[bool]) -> HistoryEntry:
        """Train an uncached candidate and store the outcome."""
        start_time = time.time()
        try:
            training, selection, parameters = self.evaluator.evaluate(tuple(candidate))
            record = PerformanceRecord(
                validate_performance(training, "training_performance", candidate),
                validate_performance(selection, "selection_performance", candidate))
        except Exception as e:
            self._record_failure(candidate, e)
            record, parameters = PerformanceRecord.failure(), None

        with self._stats_lock:
            self.stats['evaluations_performed'] += 1
            self.stats['total_evaluation_time'] += time.time() - start_time
        return self.history.set(candidate, record, parameters)

    def _record_failure(self, candidate: Sequence[bool], error: Exception) -> None:
        with self._stats_lock:
            self.stats['evaluation_errors'] += 1
        self.logger.log_evaluation_error(mask_to_string(candidate), type(self.evaluator).__name__, error)

    def evaluate_population(self, population: Sequence[Candidate],
                            deadline: Optional[float] = None) -> Tuple[List[Optional[PerformanceRecord]], float]:
        """
        Evaluate a whole population with memory monitoring.

        Distinct uncached patterns are trained once each, in parallel when
        ``max_threads > 1``. When ``deadline`` is given and time checks between
        evaluations are enabled, trainings that have not started by the
        deadline are skipped and their slots come back as ``None``.

        Args:
            population: Candidates of the current generation
            deadline: Absolute ``time.time()`` value ending the run

        Returns:
            Tuple of (records aligned with the population, peak_memory_gb)
        """
        start_time = time.time()

        pending = []
        seen = set()
        for candidate in population:
            key = self.history.key(candidate)
            if key in seen:
                self.stats['duplicate_candidates'] += 1
                continue
            seen.add(key)
            if self.history.get(key) is None:
                pending.append(key)

        peak_memory = 0.0
        if pending:
            peak_memory = self._train_pending(pending, deadline)

        records = []
        for candidate in population:
            entry = self.history.peek(candidate)
            records.append(entry.record if entry is not None else None)

        self.stats['peak_memory_usage'] = max(self.stats['peak_memory_usage'], peak_memory)
        self.logger.debug("Population evaluated",
                          candidates=len(population),
                          trained=len(pending),
                          time_taken=f"{time.time() - start_time:.2f}s")
        return records, peak_memory

    def _train_pending(self, pending: List[Candidate], deadline: Optional[float]) -> float:
        """Train uncached patterns while a background thread samples memory."""
        peak_memory = 0.0
        memory_monitor_active = threading.Event()
        memory_monitor_active.set()

        def track_memory():
            """Background thread to monitor memory usage of this process."""
            nonlocal peak_memory
            process = psutil.Process()
            while memory_monitor_active.is_set():
                try:
                    peak_memory = max(peak_memory, bytes_to_gb(process.memory_info().rss))
                except (psutil.NoSuchProcess, psutil.AccessDenied):
                    break
                time.sleep(EvaluationDefaults.MEMORY_POLL_INTERVAL)

        memory_thread = threading.Thread(target=track_memory, daemon=True)
        memory_thread.start()

        def train_before_deadline(candidate):
            # The first training of a run always happens so a best candidate exists
            if len(self.history) and self._deadline_passed(deadline):
                with self._stats_lock:
                    self.stats['skipped_by_deadline'] += 1
                return None
            return self._train(candidate)

        try:
            if self.max_threads > 1 and len(pending) > 1:
                self._train_parallel(pending, train_before_deadline)
            else:
                for candidate in tqdm(pending, desc="Evaluating Population",
                                      disable=not self.display):
                    train_before_deadline(candidate)
        finally:
            memory_monitor_active.clear()
            if memory_thread.is_alive():
                memory_thread.join(timeout=1)

        return peak_memory

    def _train_parallel(self, pending: List[Candidate], train) -> None:
        start_time = time.time()
        workers = min(self.max_threads, len(pending))
        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                list(tqdm(executor.map(train, pending),
                          total=len(pending),
                          desc=f"Evaluating Population ({workers} workers)",
                          disable=not self.display))
            self.stats['parallel_batches'] += 1
            self.logger.log_parallel_processing(workers, len(pending), time.time() - start_time)
        except Exception as e:
            self.logger.error("Parallel evaluation failed, falling back to sequential",
                              exception=e, workers=workers)
            for candidate in tqdm(pending, desc="Evaluating Population (Sequential)",
                                  disable=not self.display):
                if candidate not in self.history:
                    train(candidate)

    def _deadline_passed(self, deadline: Optional[float]) -> bool:
        return (self.check_time_between_evaluations and deadline is not None
                and time.time() >= deadline)

    def get_statistics(self) -> Dict[str, Any]:
        """Get comprehensive evaluation statistics."""
        stats = self.stats.copy()

        hits, misses, hit_rate, size = self.history.get_stats()
        stats.update({
            'cache_hits': hits,
            'cache_misses': misses,
            'cache_hit_rate': hit_rate,
            'cache_size': size
        })

        if self.stats['evaluations_performed'] > 0:
            stats['avg_evaluation_time'] = self.stats['total_evaluation_time'] / self.stats['evaluations_performed']
            stats['error_rate'] = self.stats['evaluation_errors'] / self.stats['evaluations_performed']
        else:
            stats['avg_evaluation_time'] = 0.0
            stats['error_rate'] = 0.0

        return stats
