"""Custom exceptions for closeplan."""

from __future__ import annotations


class CloseplanError(Exception):
    """Base exception for all closeplan errors."""

    pass


class ValidationError(CloseplanError):
    """Raised when validation fails."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when task definitions depend on each other in a loop.

    The offending ids are available as ``cycle``, closed by repeating the
    first id (e.g. ``["a", "b", "a"]``).
    """

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.cycle)}")


class MissingReferenceError(ValidationError):
    """Raised when a referenced ID does not exist."""

    pass


class UnresolvedDependencyError(ValidationError):
    """Raised when a dependency in the working set has no computed execution."""

    def __init__(self, definition_id: str, dependency_id: str):
        self.definition_id = definition_id
        self.dependency_id = dependency_id
        super().__init__(
            f"Task '{definition_id}' depends on '{dependency_id}', "
            "which has no execution to schedule against"
        )


class ParseError(CloseplanError):
    """Raised when workspace YAML parsing fails."""

    pass
