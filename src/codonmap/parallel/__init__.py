"""Parallelization utilities for codonmap.

Transcripts are independent units of work; the executor fans them out
over threads or processes and collects per-item outcomes.

Example:
    >>> from codonmap.parallel import ParallelExecutor
    >>> executor = ParallelExecutor(n_workers=4, backend="threads")
    >>> results, stats = executor.map_items(func, items)
"""

from codonmap.parallel.executor import (
    ExecutionStats,
    ExecutorBackend,
    ParallelExecutor,
    TaskResult,
    get_optimal_workers,
)

__all__ = [
    "ExecutionStats",
    "ExecutorBackend",
    "ParallelExecutor",
    "TaskResult",
    "get_optimal_workers",
]
