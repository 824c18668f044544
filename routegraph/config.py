"""Configuration classes for RouteGraph components."""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CircuitSearchConfig:
    """Policy knobs for the brute-force optimal-circuit search."""

    # Largest accepted mandatory-stop count (max_stops! orderings are searched)
    max_stops: int = 8

    # Wall-clock budget in seconds; None means no deadline
    deadline: Optional[float] = None

    # Maximum number of stop orderings to evaluate; None means all of them
    max_iterations: Optional[int] = None

    # Worker processes for permutation evaluation; 1 runs in-process
    workers: int = 1

    # Orderings handed to a worker per task
    chunk_size: int = 256

    def __post_init__(self) -> None:
        if self.max_stops is None or self.max_stops < 0:
            raise ValueError("max_stops must be a nonnegative integer")
        if self.deadline is not None and self.deadline < 0:
            raise ValueError("deadline must be nonnegative")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CircuitSearchConfig":
        """Build a config from a mapping, rejecting unknown keys.

        Raises:
            ValueError: If ``data`` contains keys that are not config fields.
        """
        allowed = {f.name for f in fields(cls)}
        extra = set(data) - allowed
        if extra:
            raise ValueError(
                f"Unrecognized search option(s): {', '.join(sorted(extra))}. "
                f"Allowed options are {sorted(allowed)}"
            )
        return cls(**data)

    def with_overrides(self, **overrides: Any) -> "CircuitSearchConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


# Global configuration instance
SEARCH_CONFIG = CircuitSearchConfig()
