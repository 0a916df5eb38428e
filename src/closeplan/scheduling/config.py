"""Configuration classes for the scheduling core."""

from enum import Enum

from pydantic import BaseModel


class DependencyPolicy(str, Enum):
    """What to do with a dependency that has no execution to schedule against."""

    SKIP = "skip"  # Treat as already satisfied
    ERROR = "error"  # Raise UnresolvedDependencyError for in-set dependencies


class SchedulingConfig(BaseModel):
    """Configuration for date propagation."""

    missing_dependencies: DependencyPolicy = DependencyPolicy.SKIP
