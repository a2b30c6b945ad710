"""
Error Handling Utilities for Digital Rain

Every failure that crosses a module boundary goes through handle_error(),
which picks a severity, logs one detailed message and records the error
in a process-wide aggregator. Repeats of the same failure inside the
deduplication window are logged as a single short line.

USAGE:
    from digital_rain.utils.error_handling import (
        handle_error,
        ErrorCategory,
        safe_execute,
    )

    with safe_execute("load_options", ErrorCategory.CONFIG) as result:
        result.value = load()

    try:
        drop.update(...)
    except Exception as e:
        handle_error(e, "update_drop", ErrorCategory.SIMULATION, reraise=True)
"""

import logging
import threading
import time
import traceback
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Which part of the package an error came from."""
    CONFIG = "configuration"      # invalid options or config files
    SIMULATION = "simulation"     # a drop failed while advancing
    RENDER = "render"             # raised by a renderer
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels, lowest first."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"    # field state can't be trusted
    FATAL = "fatal"          # process must stop


_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
    ErrorSeverity.FATAL: logging.CRITICAL,
}


@dataclass
class ErrorContext:
    """A handled error together with where and when it happened."""
    error: BaseException
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    additional_context: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)
    stack_trace: str = ""

    def __post_init__(self):
        if not self.stack_trace and self.error.__traceback__ is not None:
            self.stack_trace = ''.join(traceback.format_exception(
                type(self.error), self.error, self.error.__traceback__
            ))

    @property
    def key(self) -> Tuple[str, str, str]:
        """Identity used for deduplication."""
        return self.category.value, type(self.error).__name__, self.operation

    def format_log_message(self) -> str:
        lines = [
            f"ERROR [{self.severity.value.upper()}] in {self.operation}",
            f"  Category: {self.category.value}",
            f"  {type(self.error).__name__}: {self.error}",
            f"  Thread: {self.thread_name} at {self.timestamp}",
        ]
        if self.additional_context:
            lines.append("  Context:")
            lines.extend(f"    {k}: {v}" for k, v in self.additional_context.items())
        if self.stack_trace:
            lines.append("  Stack Trace:")
            lines.extend(f"    {line}" for line in self.stack_trace.splitlines() if line.strip())
        return '\n'.join(lines)


class ErrorAggregator:
    """
    Thread-safe record of handled errors.

    Keeps at most ``max_errors`` contexts. An error whose key was seen less
    than ``dedup_window_seconds`` ago is only counted, not stored.
    """

    def __init__(self, max_errors: int = 1000, dedup_window_seconds: float = 60):
        self._lock = threading.Lock()
        self._max_errors = max_errors
        self._dedup_window = dedup_window_seconds
        self._errors: List[ErrorContext] = []
        self._counts: Counter = Counter()
        self._last_seen: Dict[Tuple[str, str, str], float] = {}

    def add_error(self, context: ErrorContext) -> bool:
        """Record an error. Returns False when it was deduplicated."""
        now = time.monotonic()
        key = context.key
        with self._lock:
            self._counts[key] += 1
            last = self._last_seen.get(key)
            if last is not None and now - last < self._dedup_window:
                return False
            self._last_seen[key] = now
            self._errors.append(context)
            del self._errors[:-self._max_errors]
            return True

    def get_error_summary(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'total_errors': len(self._errors),
                'by_category': dict(Counter(e.category.value for e in self._errors)),
                'by_severity': dict(Counter(e.severity.value for e in self._errors)),
                'deduplicated_counts': {':'.join(k): n for k, n in self._counts.items()},
            }

    def clear(self):
        with self._lock:
            self._errors.clear()
            self._counts.clear()
            self._last_seen.clear()


_global_aggregator = ErrorAggregator()


def get_error_aggregator() -> ErrorAggregator:
    return _global_aggregator


def determine_severity(error: BaseException, category: ErrorCategory) -> ErrorSeverity:
    """Severity of an error from its type and category."""
    if isinstance(error, (SystemExit, KeyboardInterrupt)):
        return ErrorSeverity.FATAL
    if category == ErrorCategory.SIMULATION:
        # A drop that fails mid-update leaves the field half advanced
        return ErrorSeverity.CRITICAL
    if category == ErrorCategory.RENDER and isinstance(error, OSError):
        # Closed pipes and vanished terminals
        return ErrorSeverity.WARNING
    return ErrorSeverity.ERROR


def handle_error(
    error: BaseException,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    severity: Optional[ErrorSeverity] = None,
    additional_context: Optional[Dict[str, Any]] = None,
    reraise: bool = False,
    log_level: Optional[int] = None,
) -> ErrorContext:
    """
    Log and record an error.

    Args:
        error: The exception that occurred
        operation: Name of the failed operation
        category: Where the error came from
        severity: Overrides determine_severity()
        additional_context: Extra key/value pairs for the log message
        reraise: Re-raise ``error`` after it has been recorded
        log_level: Overrides the level derived from severity

    Returns:
        The recorded ErrorContext
    """
    if severity is None:
        severity = determine_severity(error, category)

    context = ErrorContext(
        error=error,
        category=category,
        severity=severity,
        operation=operation,
        additional_context=additional_context or {},
    )
    if log_level is None:
        log_level = _LOG_LEVELS[severity]

    if _global_aggregator.add_error(context):
        logger.log(log_level, context.format_log_message())
    else:
        logger.log(log_level, f"[DEDUPLICATED] {operation}: {type(error).__name__}: {error}")

    if reraise:
        raise error
    return context


class ExecutionResult:
    """Outcome of a safe_execute block."""

    def __init__(self, default: Any = None):
        self.value = default
        self.error: Optional[ErrorContext] = None

    @property
    def success(self) -> bool:
        return self.error is None


@contextmanager
def safe_execute(
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    default_return: Any = None,
    reraise: bool = False,
    additional_context: Optional[Dict[str, Any]] = None,
    log_level: Optional[int] = None,
):
    """
    Run a block, handling any exception it raises.

    On failure ``result.value`` is reset to ``default_return`` and
    ``result.error`` holds the recorded ErrorContext.
    """
    result = ExecutionResult(default_return)
    try:
        yield result
    except Exception as e:
        result.value = default_return
        result.error = handle_error(
            e,
            operation,
            category=category,
            additional_context=additional_context,
            reraise=reraise,
            log_level=log_level,
        )
