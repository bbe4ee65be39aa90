"""Local parallel execution of per-transcript work.

Items are independent, so they can be processed serially, on a thread
pool (suited to I/O-bound sequence fetching) or on a process pool. A
failing item is recorded in its TaskResult and never aborts its
siblings. Results always come back in submission order.

Example:
    >>> from codonmap.parallel.executor import ParallelExecutor
    >>> executor = ParallelExecutor(n_workers=8, backend="threads")
    >>> results, stats = executor.map_items(process, items, ids)
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import (
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from enum import Enum
from typing import Any, Callable, Sequence, TypeVar

import attrs

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# =============================================================================
# Enums
# =============================================================================


class ExecutorBackend(Enum):
    """Available execution backends."""

    SERIAL = "serial"
    THREADS = "threads"
    PROCESSES = "processes"


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(slots=True)
class TaskResult:
    """Result from a single task."""

    item_id: str
    success: bool
    result: Any | None = None
    error: str | None = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "item_id": self.item_id,
            "success": self.success,
            "error": self.error,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@attrs.define(slots=True)
class ExecutionStats:
    """Statistics from parallel execution."""

    total_tasks: int
    successful: int
    failed: int
    total_duration: float
    mean_task_duration: float
    max_task_duration: float

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_tasks": self.total_tasks,
            "successful": self.successful,
            "failed": self.failed,
            "total_duration": round(self.total_duration, 3),
            "mean_task_duration": round(self.mean_task_duration, 3),
            "max_task_duration": round(self.max_task_duration, 3),
        }


def _run_task(func: Callable[[T], R], item_id: str, item: T) -> TaskResult:
    """Run one task, capturing its outcome.

    Defined at module level so the process backend can pickle it.
    """
    start_time = time.time()
    try:
        result = func(item)
    except Exception as e:
        return TaskResult(
            item_id=item_id,
            success=False,
            error=f"{type(e).__name__}: {e}",
            duration_seconds=time.time() - start_time,
        )
    return TaskResult(
        item_id=item_id,
        success=True,
        result=result,
        duration_seconds=time.time() - start_time,
    )


# =============================================================================
# Parallel Executor
# =============================================================================


class ParallelExecutor:
    """Apply a function to independent items.

    Example:
        >>> executor = ParallelExecutor(n_workers=4, backend="processes")
        >>> results, stats = executor.map_items(func, items, ids)
        >>> print(f"Processed {stats.successful}/{stats.total_tasks} items")
    """

    def __init__(
        self,
        n_workers: int = 1,
        backend: ExecutorBackend | str = ExecutorBackend.THREADS,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            n_workers: Number of parallel workers (1 = serial).
            backend: Execution backend.
            progress_callback: Called with (completed, total, item_id).
        """
        self.n_workers = max(1, n_workers)
        self.backend = (
            ExecutorBackend(backend) if isinstance(backend, str) else backend
        )
        self.progress_callback = progress_callback

        # Auto-select serial if n_workers=1
        if self.n_workers == 1:
            self.backend = ExecutorBackend.SERIAL

    def map_items(
        self,
        func: Callable[[T], R],
        items: Sequence[T],
        item_ids: Sequence[str] | None = None,
    ) -> tuple[list[TaskResult], ExecutionStats]:
        """Apply function to each item.

        Args:
            func: Function to apply. Must be picklable for the process backend.
            items: Items to process.
            item_ids: Identifier per item used in results and progress.

        Returns:
            Tuple of (results in submission order, execution stats).
        """
        if item_ids is None:
            item_ids = [f"item_{i:06d}" for i in range(len(items))]
        if len(item_ids) != len(items):
            raise ValueError("item_ids must have the same length as items")

        if not items:
            return [], ExecutionStats(
                total_tasks=0,
                successful=0,
                failed=0,
                total_duration=0.0,
                mean_task_duration=0.0,
                max_task_duration=0.0,
            )

        logger.debug(
            f"Processing {len(items)} items with {self.n_workers} workers "
            f"(backend={self.backend.value})"
        )

        start_time = time.time()

        if self.backend == ExecutorBackend.SERIAL:
            results = self._execute_serial(func, items, item_ids)
        elif self.backend == ExecutorBackend.THREADS:
            results = self._execute_pool(ThreadPoolExecutor, func, items, item_ids)
        else:
            results = self._execute_pool(ProcessPoolExecutor, func, items, item_ids)

        total_duration = time.time() - start_time
        successful = sum(1 for r in results if r.success)
        durations = [r.duration_seconds for r in results]

        stats = ExecutionStats(
            total_tasks=len(results),
            successful=successful,
            failed=len(results) - successful,
            total_duration=total_duration,
            mean_task_duration=sum(durations) / len(durations),
            max_task_duration=max(durations),
        )

        logger.debug(
            f"Completed: {successful}/{len(items)} items, "
            f"duration={total_duration:.1f}s"
        )

        return results, stats

    def _execute_serial(
        self,
        func: Callable,
        items: Sequence,
        item_ids: Sequence[str],
    ) -> list[TaskResult]:
        """Serial execution with progress tracking."""
        results = []
        total = len(items)

        for i, (item_id, item) in enumerate(zip(item_ids, items)):
            task_result = _run_task(func, item_id, item)
            results.append(task_result)
            self._report_failure(task_result)

            if self.progress_callback:
                self.progress_callback(i + 1, total, item_id)

        return results

    def _execute_pool(
        self,
        pool_class: type[ThreadPoolExecutor] | type[ProcessPoolExecutor],
        func: Callable,
        items: Sequence,
        item_ids: Sequence[str],
    ) -> list[TaskResult]:
        """Pooled execution; results are reordered to submission order."""
        total = len(items)
        completed = 0
        ordered: list[TaskResult | None] = [None] * total

        with pool_class(max_workers=self.n_workers) as executor:
            futures: dict[Future, int] = {
                executor.submit(_run_task, func, item_id, item): position
                for position, (item_id, item) in enumerate(zip(item_ids, items))
            }

            for future in as_completed(futures):
                position = futures[future]
                completed += 1
                try:
                    task_result = future.result()
                except Exception as e:
                    # Worker died or the task could not be pickled
                    task_result = TaskResult(
                        item_id=item_ids[position],
                        success=False,
                        error=f"{type(e).__name__}: {e}",
                    )
                ordered[position] = task_result
                self._report_failure(task_result)

                if self.progress_callback:
                    self.progress_callback(completed, total, task_result.item_id)

        return [r for r in ordered if r is not None]

    @staticmethod
    def _report_failure(task_result: TaskResult) -> None:
        if not task_result.success:
            logger.warning(f"Task {task_result.item_id} failed: {task_result.error}")


# =============================================================================
# Utility Functions
# =============================================================================


def get_optimal_workers(max_workers: int | None = None) -> int:
    """Determine a worker count bounded by the CPU count.

    Args:
        max_workers: Maximum workers (defaults to CPU count).

    Returns:
        Number of workers, at least 1.
    """
    cpu_count = os.cpu_count() or 1
    if max_workers is None:
        max_workers = cpu_count
    return max(1, min(max_workers, cpu_count))
