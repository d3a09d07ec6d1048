"""Timing utilities for DepBatcher scans."""

import functools
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, TypeVar

from rich.console import Console
from rich.table import Table

from .logging import get_logger

F = TypeVar('F', bound=Callable[..., Any])

BENCHMARK_ENV_VAR = "DEPBATCHER_VERBOSE_BENCHMARK"


@dataclass
class PerformanceMetrics:
    """Timing for one named stage of a scan."""

    stage: str
    execution_time: float


class PerformanceMonitor:
    """Collects stage timings for a scan.

    Stage timings measured in worker threads are handed back with the
    worker's result and recorded here after the join, so the monitor is
    only ever written from the orchestrating thread.
    """

    def __init__(self) -> None:
        self.metrics: List[PerformanceMetrics] = []

    def record(self, stage: str, execution_time: float) -> None:
        self.metrics.append(PerformanceMetrics(stage=stage, execution_time=execution_time))

    @contextmanager
    def measure(self, stage: str) -> Iterator[None]:
        """Context manager for measuring a stage.

        Args:
            stage: Name of the stage being measured
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.record(stage, time.perf_counter() - start_time)

    def get_summary(self) -> Dict[str, Any]:
        """Get timing summary.

        Returns:
            Dictionary with totals and per-stage metrics; empty if nothing ran
        """
        if not self.metrics:
            return {}

        total_time = sum(m.execution_time for m in self.metrics)
        return {
            "total_stages": len(self.metrics),
            "total_time": total_time,
            "slowest_stage": max(self.metrics, key=lambda m: m.execution_time).stage,
            "metrics": self.metrics,
        }

    def print_summary(self, console: Console) -> None:
        """Print timing summary to the console."""
        if not self.metrics:
            return

        table = Table(title="Stage Timings")
        table.add_column("Stage", style="cyan")
        table.add_column("Time", style="green", justify="right")

        for metric in self.metrics:
            table.add_row(metric.stage, f"{metric.execution_time * 1000:.2f} ms")

        console.print(table)


def benchmark(func: F) -> F:
    """Log how long ``func`` took when DEPBATCHER_VERBOSE_BENCHMARK is set.

    Args:
        func: Function to benchmark

    Returns:
        Wrapped function with timing
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time

        if os.environ.get(BENCHMARK_ENV_VAR):
            # The variable alone enables these lines, whatever the configured level
            get_logger("performance", logging.INFO).info(f"{func.__name__} took {elapsed:.4f} seconds")
        return result
    return wrapper  # type: ignore[return-value]
