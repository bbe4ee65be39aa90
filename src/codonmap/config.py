"""Configuration management for codonmap.

Settings come from defaults, an optional TOML file and command-line
arguments (applied by the CLI on top of the file).

Example TOML:

    [locate]
    codons = ["CAA", "CAG", "CGA", "TGG", "TGG"]
    positions = [1, 1, 1, 2, 3]
    switch_strand = [false, false, false, true, true]
    workers = 4
    backend = "threads"

Example:
    >>> from codonmap.config import LocateConfig
    >>> config = LocateConfig.load("codonmap.toml")
    >>> config.codon_specs()[0].codon
    'CAA'
"""

import tomllib
from pathlib import Path
from typing import Any, Callable

import attrs

from codonmap.core.models import (
    DEFAULT_CODONS,
    DEFAULT_POSITIONS,
    DEFAULT_SWITCH_STRAND,
    CodonSpec,
    codon_specs,
)
from codonmap.parallel.executor import ExecutorBackend

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_WORKERS = 1
DEFAULT_BACKEND = ExecutorBackend.THREADS.value


# =============================================================================
# Configuration Classes
# =============================================================================


def _list_of(member_type: type) -> Callable[[Any, Any, Any], None]:
    """Validator for a list whose items are all ``member_type``."""

    def check(instance: Any, attribute: Any, value: Any) -> None:
        if not isinstance(value, list) or not all(
            isinstance(item, member_type) for item in value
        ):
            raise ValueError(
                f"{attribute.name} must be a list of {member_type.__name__}, got {value!r}"
            )

    return check


@attrs.define
class LocateConfig:
    """Configuration for codon location.

    Attributes:
        codons: Codons to search for.
        positions: Targeted base within each codon (1-3).
        switch_strand: Whether each codon is targeted on the opposite strand.
        workers: Number of parallel workers.
        backend: Executor backend name (serial, threads, processes).
    """

    codons: list[str] = attrs.field(
        factory=lambda: list(DEFAULT_CODONS), validator=_list_of(str)
    )
    positions: list[int] = attrs.field(
        factory=lambda: list(DEFAULT_POSITIONS), validator=_list_of(int)
    )
    switch_strand: list[bool] = attrs.field(
        factory=lambda: list(DEFAULT_SWITCH_STRAND), validator=_list_of(bool)
    )
    workers: int = attrs.field(default=DEFAULT_WORKERS)
    backend: str = attrs.field(default=DEFAULT_BACKEND)

    @workers.validator
    def _check_workers(self, attribute: Any, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"workers must be an integer, got {value!r}")
        if value < 1:
            raise ValueError(f"workers must be >= 1, got {value}")

    @backend.validator
    def _check_backend(self, attribute: Any, value: str) -> None:
        if not isinstance(value, str):
            raise ValueError(f"backend must be a string, got {value!r}")
        ExecutorBackend(value)

    def codon_specs(self) -> tuple[CodonSpec, ...]:
        """Build validated codon specifications."""
        return codon_specs(self.codons, self.positions, self.switch_strand)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "LocateConfig":
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file. If None, returns defaults.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "rb") as handle:
            try:
                data = tomllib.load(handle)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        section = data.get("locate", {})
        if not isinstance(section, dict):
            raise ValueError(f"Invalid configuration file {path}: [locate] must be a table")
        unknown = set(section) - {f.name for f in attrs.fields(cls)}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        return cls(**section)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return attrs.asdict(self)
