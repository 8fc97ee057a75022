"""
Performance timing utilities for the architect completion report.

Measures and logs how long the major report stages take (inventory query,
aggregation, chart rendering) so slow runs can be traced to a stage.

Usage:
    from performance_timing import timed_operation, PerformanceTimer

    with timed_operation("graphql_query", facets=3):
        data = host.execute_graphql(query, variables)

    timer = PerformanceTimer("report_run").start()
    records = query_subscriptions(host)
    timer.checkpoint("queried", records=len(records))
    timer.stop()

Log Output Format:
    PERF: [operation_name] completed in 1.234s {metadata}
    PERF: [operation_name] checkpoint 'queried' at 0.567s {records=42}
"""

import time
import logging
import functools
from typing import Any, Callable, Dict, Optional, TypeVar
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime

# Logger for performance timing messages
logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


@dataclass
class TimingResult:
    """Result of a timed operation with metadata."""
    operation: str
    duration_seconds: float
    start_time: datetime
    end_time: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)
    checkpoints: Dict[str, float] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000


class PerformanceTimer:
    """
    Manual timer with named checkpoints.

    Example:
        timer = PerformanceTimer("report_run").start()
        records = query_subscriptions(host, selection)
        timer.checkpoint("queried", records=len(records))
        result = aggregate(records)
        timer.checkpoint("aggregated", people=len(result.people))
        timer.stop()
    """

    def __init__(self, operation: str, log_level: int = logging.INFO, **metadata: Any):
        """
        Initialize a performance timer.

        Args:
            operation: Name of the operation being timed.
            log_level: Logging level for timing messages (default: INFO).
            **metadata: Additional key-value pairs to include in log output.
        """
        self.operation = operation
        self.log_level = log_level
        self.metadata = metadata
        self._start_time: Optional[float] = None
        self._start_datetime: Optional[datetime] = None
        self._end_time: Optional[float] = None
        self._checkpoints: Dict[str, float] = {}

    def start(self) -> 'PerformanceTimer':
        """Start the timer. Returns self for method chaining."""
        self._start_time = time.perf_counter()
        self._start_datetime = datetime.now()
        logger.log(self.log_level, f"PERF: [{self.operation}] started")
        return self

    def checkpoint(self, name: str, **checkpoint_metadata: Any) -> float:
        """
        Record a checkpoint with elapsed time from start.

        Returns:
            Elapsed time in seconds since start.
        """
        if self._start_time is None:
            raise RuntimeError(f"Timer '{self.operation}' not started")

        elapsed = time.perf_counter() - self._start_time
        self._checkpoints[name] = elapsed
        logger.log(
            self.log_level,
            f"PERF: [{self.operation}] checkpoint '{name}' at "
            f"{_format_duration(elapsed)}{_format_metadata(checkpoint_metadata)}"
        )
        return elapsed

    def stop(self) -> TimingResult:
        """Stop the timer and log the total duration."""
        if self._start_time is None:
            raise RuntimeError(f"Timer '{self.operation}' not started")

        self._end_time = time.perf_counter()
        duration = self._end_time - self._start_time
        logger.log(
            self.log_level,
            f"PERF: [{self.operation}] completed in "
            f"{_format_duration(duration)}{_format_metadata(self.metadata)}"
        )

        return TimingResult(
            operation=self.operation,
            duration_seconds=duration,
            start_time=self._start_datetime,
            end_time=datetime.now(),
            metadata=self.metadata,
            checkpoints=self._checkpoints.copy()
        )

    @property
    def elapsed(self) -> float:
        """Current elapsed time in seconds (0 before start)."""
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time else time.perf_counter()
        return end - self._start_time


@contextmanager
def timed_operation(operation: str, log_level: int = logging.INFO, **metadata: Any):
    """
    Context manager for timing a block of code.

    Yields:
        PerformanceTimer instance (can be used for checkpoints).

    Example:
        with timed_operation("aggregation", records=len(records)):
            result = aggregate(records)
    """
    timer = PerformanceTimer(operation, log_level=log_level, **metadata)
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()


def timed_function(operation: Optional[str] = None, log_level: int = logging.INFO) -> Callable[[F], F]:
    """
    Decorator for timing function execution.

    Args:
        operation: Name of the operation. If None, uses function name.
        log_level: Logging level for timing messages.
    """
    def decorator(func: F) -> F:
        op_name = operation or func.__name__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with timed_operation(op_name, log_level=log_level):
                return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def _format_duration(seconds: float) -> str:
    """Format duration for log display."""
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds % 60:.1f}s"


def _format_metadata(metadata: Dict[str, Any]) -> str:
    """Format metadata dictionary for log display."""
    if not metadata:
        return ""
    return " {" + ", ".join(f"{k}={v}" for k, v in metadata.items()) + "}"
