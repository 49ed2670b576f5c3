"""
Centralized Logging System for Genetic Algorithm Inputs Selection

Replaces scattered print statements with structured logging.
Provides consistent formatting, log levels, and file output.
"""

import logging
import sys
from datetime import datetime
from typing import Optional
from pathlib import Path


class GAFormatter(logging.Formatter):
    """Custom formatter for GA logging with color support and structured output."""

    # Color codes for console output
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def __init__(self, use_colors: bool = True, include_timestamp: bool = True):
        self.use_colors = use_colors and hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
        self.include_timestamp = include_timestamp

        if include_timestamp:
            fmt = '[%(asctime)s] %(levelname)-8s | %(name)s | %(message)s'
            datefmt = '%H:%M:%S'
        else:
            fmt = '%(levelname)-8s | %(name)s | %(message)s'
            datefmt = None

        super().__init__(fmt, datefmt)

    def format(self, record):
        if self.use_colors:
            color = self.COLORS.get(record.levelname, '')
            reset = self.COLORS['RESET']
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{reset}"

        return super().format(record)


class GALogger:
    """
    Centralized logger for the inputs selection search with console and file output.

    Manages log levels and file output, and provides search-specific logging methods.
    """

    def __init__(self, name: str = "GA", level: str = "INFO",
                 log_to_file: bool = False, output_dir: str = "logs",
                 console_colors: bool = True):
        """
        Initialize GA logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_to_file: Whether to log to file
            output_dir: Directory for log files
            console_colors: Whether to use colors in console output
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False
        self.log_file = None

        self.logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        console_handler.setFormatter(GAFormatter(use_colors=console_colors, include_timestamp=False))
        self.logger.addHandler(console_handler)

        if log_to_file:
            self._setup_file_logging(output_dir)

    def _setup_file_logging(self, output_dir: str):
        """Setup timestamped file logging."""
        log_dir = Path(output_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"inputs_selection_{timestamp}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)  # File gets all levels
        file_handler.setFormatter(GAFormatter(use_colors=False, include_timestamp=True))
        self.logger.addHandler(file_handler)

        self.log_file = str(log_file)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, exception: Exception = None, **kwargs):
        """Log error message with optional exception details."""
        formatted_msg = self._format_message(message, **kwargs)
        if exception:
            formatted_msg += f" | Exception: {type(exception).__name__}: {str(exception)}"
        self.logger.error(formatted_msg)

    def critical(self, message: str, exception: Exception = None, **kwargs):
        """Log critical message with optional exception details."""
        formatted_msg = self._format_message(message, **kwargs)
        if exception:
            formatted_msg += f" | Exception: {type(exception).__name__}: {str(exception)}"
        self.logger.critical(formatted_msg)

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with optional context parameters."""
        if kwargs:
            context = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            return f"{message} | {context}"
        return message

    # Search-specific logging methods
    def log_generation_start(self, generation: int, population_size: int):
        """Log generation start."""
        self.debug(f"Starting generation {generation}",
                   population_size=population_size)

    def log_generation_complete(self, generation: int, stats, time_taken: float,
                                peak_memory: float, display: bool = True):
        """Log generation completion with its selection performance statistics."""
        message = f"Generation {generation} complete"
        context = dict(minimum=f"{stats.minimum_selection:.6g}",
                       mean=f"{stats.mean_selection:.6g}",
                       std=f"{stats.standard_deviation_selection:.6g}",
                       optimum=f"{stats.optimum_selection:.6g}",
                       time_taken=f"{time_taken:.2f}s",
                       peak_memory=f"{peak_memory:.2f}GB")
        if display:
            self.info(message, **context)
        else:
            self.debug(message, **context)

    def log_evaluation_error(self, candidate: str, evaluator_type: str,
                             error: Exception):
        """Log a failed candidate evaluation."""
        self.error(f"Evaluation failed for {candidate}",
                   evaluator=evaluator_type,
                   action="assigning worst fitness",
                   exception=error)

    def log_stopping_condition(self, generation: int, condition: str, reason: str):
        """Log the stopping condition that ended the run."""
        self.info(f"Search stopped at generation {generation}",
                  condition=condition, reason=reason)

    def log_cache_stats(self, hits: int, misses: int, hit_rate: float):
        """Log evaluation history statistics."""
        self.info("Evaluation history performance",
                  hits=hits,
                  misses=misses,
                  hit_rate=f"{hit_rate:.1%}")

    def log_config_summary(self, config, inputs_number: int):
        """Log configuration summary."""
        self.info("GA Configuration loaded",
                  inputs=inputs_number,
                  population=config.population_size,
                  elitism=config.elitism_size,
                  mutation_rate=config.mutation_rate,
                  crossover=config.crossover_method.value,
                  fitness=config.fitness_assignment_method.value,
                  max_generations=config.maximum_iterations_number,
                  threads=config.max_threads)

    def log_parallel_processing(self, worker_count: int, task_count: int,
                                time_taken: float):
        """Log parallel processing performance."""
        self.debug("Parallel processing complete",
                   workers=worker_count,
                   tasks=task_count,
                   time_taken=f"{time_taken:.2f}s",
                   tasks_per_second=f"{task_count / time_taken:.1f}" if time_taken > 0 else "n/a")


# Global logger instance
_global_logger: Optional[GALogger] = None


def get_logger(name: str = "GA") -> GALogger:
    """Get or create global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = GALogger(name)
    return _global_logger


def setup_logging(level: str = "INFO", log_to_file: bool = False,
                  output_dir: str = "logs", console_colors: bool = True) -> GALogger:
    """
    Setup global logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        output_dir: Directory for log files
        console_colors: Whether to use colors in console output

    Returns:
        Configured GALogger instance
    """
    global _global_logger
    _global_logger = GALogger(
        level=level,
        log_to_file=log_to_file,
        output_dir=output_dir,
        console_colors=console_colors
    )
    return _global_logger
