"""Logging configuration for codonmap.

Console logging goes through rich; a file handler can be added for
debugging. Progress reporting is handed to the orchestrator as an
explicit callback whose lifetime is one ``with`` block.

Example:
    >>> from codonmap.utils.logging import setup_logging, progress_bar
    >>> setup_logging(verbosity=2)
    >>> with progress_bar(total=100) as callback:
    ...     result = locate_codons(exons, genome, progress_callback=callback)
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

# =============================================================================
# Constants
# =============================================================================

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

RICH_FORMAT = "%(message)s"

VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}

ProgressCallback = Callable[[int, int, str], None]


# =============================================================================
# Setup Functions
# =============================================================================


def setup_logging(
    verbosity: int = 1,
    log_file: Path | str | None = None,
    use_rich: bool = True,
) -> None:
    """Configure logging for codonmap.

    Args:
        verbosity: Verbosity level (0=warning, 1=info, 2=debug).
        log_file: Optional file to log to.
        use_rich: Use rich for console output.
    """
    level = VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)

    logger = logging.getLogger("codonmap")
    logger.setLevel(level)
    logger.handlers.clear()

    if use_rich:
        from rich.logging import RichHandler

        console_handler: logging.Handler = RichHandler(
            rich_tracebacks=True,
            show_time=False,
            show_path=False,
        )
        console_handler.setFormatter(logging.Formatter(RICH_FORMAT))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        file_handler.setLevel(logging.DEBUG)  # Always log debug to file
        logger.addHandler(file_handler)


# =============================================================================
# Progress Reporting
# =============================================================================


def no_progress(completed: int, total: int, item_id: str) -> None:
    """Progress callback that does nothing."""


@contextmanager
def progress_bar(
    total: int,
    description: str = "Locating codons",
    enabled: bool = True,
) -> Iterator[ProgressCallback]:
    """Scoped rich progress bar exposed as a progress callback.

    The bar is started on entry and stopped on exit, so its state never
    outlives the orchestrator call that uses it.

    Args:
        total: Number of items that will be reported.
        description: Label shown next to the bar.
        enabled: If False, yield a no-op callback instead.

    Yields:
        Callback taking (completed, total, item_id).
    """
    if not enabled:
        yield no_progress
        return

    from rich.progress import (
        BarColumn,
        MofNCompleteColumn,
        Progress,
        SpinnerColumn,
        TextColumn,
        TimeElapsedColumn,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        transient=True,
    )
    task_id = progress.add_task(description, total=total)

    def callback(completed: int, total: int, item_id: str) -> None:
        progress.update(task_id, completed=completed, total=total)

    progress.start()
    try:
        yield callback
    finally:
        progress.stop()
