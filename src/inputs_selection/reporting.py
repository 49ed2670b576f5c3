"""
Reporting and I/O Module

Generation statistics and persistence of inputs selection runs.

Features:
- Per-generation selection performance statistics
- Per-generation CSV export of candidates, performances and fitness
- Statistics series CSV and JSON run summary
"""

import csv
import json
import math
import os
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from evaluation_history import PerformanceRecord
from ga_exceptions import ReportingError
from ga_logging import get_logger
from inputs_selection.population_management import count_selected, mask_to_string


@dataclass
class GenerationStats:
    """Selection performance statistics of one evaluated generation."""
    generation: int
    minimum_selection: float
    mean_selection: float
    standard_deviation_selection: float
    optimum_selection: float
    optimum_training: float
    failed_evaluations: int = 0
    elapsed_time: float = 0.0


def compute_generation_stats(generation: int, records: Sequence[Optional[PerformanceRecord]],
                             optimum: Optional[PerformanceRecord],
                             elapsed_time: float = 0.0) -> GenerationStats:
    """
    Summarize the evaluated population of a generation.

    Minimum, mean and (population) standard deviation are taken over the
    successful evaluations of this generation; the optimum is the best
    record of the whole run so far.
    """
    evaluated = [record for record in records if record is not None]
    successful = np.array([record.selection_performance for record in evaluated if not record.failed],
                          dtype=float)
    failed = len(evaluated) - successful.size

    if successful.size:
        minimum = float(np.min(successful))
        mean = float(np.mean(successful))
        std = float(np.std(successful))
    else:
        minimum = mean = math.inf
        std = 0.0

    return GenerationStats(
        generation=generation,
        minimum_selection=minimum,
        mean_selection=mean,
        standard_deviation_selection=std,
        optimum_selection=optimum.selection_performance if optimum is not None else math.inf,
        optimum_training=optimum.training_performance if optimum is not None else math.inf,
        failed_evaluations=failed,
        elapsed_time=elapsed_time
    )


class GAReporter:
    """
    Writes the outcome of an inputs selection run to ``output_dir``.

    Files:
    - ``generation_<n>.csv``: one row per population slot
    - ``generation_statistics.csv``: one row per generation
    - ``<experiment>_summary.json``: configuration, statistics and final result
    """

    STATISTICS_FILE = "generation_statistics.csv"

    def __init__(self, output_dir: str = "ga_results", experiment_name: str = None):
        """
        Initialize GA reporter.

        Args:
            output_dir: Directory for output files
            experiment_name: Name of the experiment (auto-generated if None)
        """
        self.output_dir = output_dir
        self.experiment_name = experiment_name or f"inputs_selection_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.logger = get_logger("Reporter")

        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise ReportingError(f"Cannot create output directory: {e}", output_dir=output_dir)

        self.start_time = None
        self.run_config: Dict[str, Any] = {}
        self.generation_stats: List[GenerationStats] = []

    def start_run(self, run_config: Dict[str, Any]):
        """Remember the configuration of the run and start its clock."""
        self.start_time = time.time()
        self.run_config = dict(run_config)
        self.generation_stats = []

    def save_generation_data(self, stats: GenerationStats, population: Sequence[Sequence[bool]],
                             records: Sequence[Optional[PerformanceRecord]],
                             fitness: Sequence[float] = None) -> str:
        """
        Save one generation to CSV and append its statistics to the series.

        Returns:
            Path of the generation CSV
        """
        self.generation_stats.append(stats)
        csv_filename = os.path.join(self.output_dir, f"generation_{stats.generation}.csv")

        try:
            with open(csv_filename, mode='w', newline='') as csv_file:
                writer = csv.writer(csv_file)
                writer.writerow(['Candidate', 'Inputs_Number', 'Training_Performance',
                                 'Selection_Performance', 'Failed', 'Fitness'])
                for i, candidate in enumerate(population):
                    record = records[i] if i < len(records) else None
                    writer.writerow([
                        mask_to_string(candidate),
                        count_selected(candidate),
                        record.training_performance if record is not None else '',
                        record.selection_performance if record is not None else '',
                        record.failed if record is not None else '',
                        fitness[i] if fitness is not None and i < len(fitness) else ''
                    ])
            self._write_statistics()
        except OSError as e:
            raise ReportingError(f"Cannot write generation data: {e}",
                                 output_dir=self.output_dir, file_type="csv")

        return csv_filename

    def _write_statistics(self):
        filename = os.path.join(self.output_dir, self.STATISTICS_FILE)
        with open(filename, mode='w', newline='') as csv_file:
            writer = csv.DictWriter(csv_file, fieldnames=list(GenerationStats.__dataclass_fields__))
            writer.writeheader()
            for stats in self.generation_stats:
                writer.writerow(asdict(stats))

    def save_run_summary(self, final_result: Dict[str, Any],
                         component_stats: Dict[str, Dict[str, Any]] = None) -> str:
        """
        Save the JSON run summary.

        Args:
            final_result: ``InputsSelectionResults.to_dict()`` of the run
            component_stats: Statistics of the search components

        Returns:
            Path of the summary file
        """
        summary_filename = os.path.join(self.output_dir, f"{self.experiment_name}_summary.json")
        summary_data = {
            'experiment_name': self.experiment_name,
            'end_time': datetime.now().isoformat(),
            'total_runtime': time.time() - self.start_time if self.start_time else 0.0,
            'configuration': self.run_config,
            'generation_statistics': [asdict(stats) for stats in self.generation_stats],
            'component_statistics': component_stats or {},
            'final_result': final_result
        }

        try:
            with open(summary_filename, 'w') as f:
                json.dump(summary_data, f, indent=2, default=_json_default)
        except OSError as e:
            raise ReportingError(f"Cannot write run summary: {e}",
                                 output_dir=self.output_dir, file_type="json")

        self.logger.info("Run summary saved", path=summary_filename)
        return summary_filename


def _json_default(value):
    """Serialize numpy values and enums found in results."""
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if hasattr(value, 'value'):
        return value.value
    return str(value)
