"""Monitoring and observability utilities."""

import logging
import time
from collections.abc import Callable
from contextlib import contextmanager
from functools import wraps
from typing import Literal, Optional

from prometheus_client import Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

AnalysisMode = Literal["detailed", "summary"]


@contextmanager
def track_execution_time(operation_name: str):
    """Context manager to track execution time."""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start_time
        logger.info(f"{operation_name} took {elapsed:.3f}s")


def monitor_function(operation_name: Optional[str] = None):
    """Decorator to log how long a sync or async function takes."""

    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            name = operation_name or func.__name__
            with track_execution_time(name):
                return await func(*args, **kwargs)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            name = operation_name or func.__name__
            with track_execution_time(name):
                return func(*args, **kwargs)

        if hasattr(func, "__code__") and func.__code__.co_flags & 0x80:  # CO_COROUTINE
            return async_wrapper
        return sync_wrapper

    return decorator


# Prometheus metrics
ANALYSES_TOTAL = Counter("slowquery_analyses_total", "Total documents analyzed", ["mode"])
FINDINGS_TOTAL = Counter("slowquery_findings_total", "Total findings reported", ["rule"])
SKIPPED_TOTAL = Counter("slowquery_skipped_documents_total", "Documents skipped as non-SQL")
ERRORS_TOTAL = Counter("slowquery_errors_total", "Total errors occurred", ["type"])
ANALYSIS_LATENCY = Histogram(
    "slowquery_analysis_latency_seconds", "Rule catalog evaluation time in seconds", ["mode"]
)


class MetricsCollector:
    """Collect application metrics."""

    def __init__(self):
        self.metrics = {
            "documents_analyzed": 0,
            "summaries_generated": 0,
            "findings_reported": 0,
            "documents_skipped": 0,
            "errors_occurred": 0,
            "average_analysis_time": 0.0,
        }
        self._analysis_times = []

    def record_analysis(self, duration: float, mode: AnalysisMode, rule_hits: list[str]):
        """Record one catalog evaluation and the rules that fired."""
        if mode == "summary":
            self.metrics["summaries_generated"] += 1
        else:
            self.metrics["documents_analyzed"] += 1
        self.metrics["findings_reported"] += len(rule_hits)

        self._analysis_times.append(duration)
        if len(self._analysis_times) > 100:
            self._analysis_times.pop(0)
        self.metrics["average_analysis_time"] = sum(self._analysis_times) / len(
            self._analysis_times
        )

        ANALYSES_TOTAL.labels(mode=mode).inc()
        ANALYSIS_LATENCY.labels(mode=mode).observe(duration)
        for rule in rule_hits:
            FINDINGS_TOTAL.labels(rule=rule).inc()

    def record_skip(self):
        """Record a document that was not analyzed because it is not SQL."""
        self.metrics["documents_skipped"] += 1
        SKIPPED_TOTAL.inc()

    def record_error(self, error_type: str = "generic"):
        """Record an error."""
        self.metrics["errors_occurred"] += 1
        ERRORS_TOTAL.labels(type=error_type).inc()

    def get_metrics(self) -> dict:
        """Get current metrics."""
        return self.metrics.copy()

    def get_prometheus_data(self) -> str:
        """Get metrics in Prometheus format."""
        return generate_latest().decode("utf-8")


# Global metrics collector
metrics = MetricsCollector()
