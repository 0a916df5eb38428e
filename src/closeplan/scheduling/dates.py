"""Calendar date propagation along the dependency graph."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from closeplan.exceptions import UnresolvedDependencyError

from .config import DependencyPolicy

if TYPE_CHECKING:
    from closeplan.models import TaskDefinition, TaskExecution

DEFAULT_WARNING_DAYS = 3


class DateStatus(str, Enum):
    """How an execution's end date relates to today."""

    NONE = "none"  # Completed, or no end date to compare against
    ON_TIME = "on-time"
    WARNING = "warning"  # Due within the warning window
    OVERDUE = "overdue"


def get_cycle_dates(year: int, month: int) -> tuple[date, date]:
    """Get the calendar window of a monthly cycle.

    Returns:
        Tuple of (first day of the month, first day of the next month).
        The end is exclusive.
    """
    start = date(year, month, 1)
    if month == 12:  # noqa: PLR2004 - December rolls over the year
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end


def calculate_start_date(
    definition: TaskDefinition,
    all_definitions: Sequence[TaskDefinition],
    execution_map: Mapping[str, TaskExecution],
    cycle_start_date: date,
    *,
    missing_dependencies: DependencyPolicy = DependencyPolicy.SKIP,
) -> date:
    """Compute the earliest day a task can start.

    A task without dependencies starts on the first day of the cycle. Otherwise
    it starts the day after the latest end date among dependencies that have
    an execution in ``execution_map`` (keyed by definition id), and never before
    the cycle starts.

    Dependencies without an execution are skipped. With
    ``DependencyPolicy.ERROR``, a dependency that is part of ``all_definitions``
    but has no execution raises instead; dependencies outside that working set
    (e.g. owned by another board) are always skipped.

    Raises:
        UnresolvedDependencyError: Under the ERROR policy, see above.
    """
    if not definition.dependencies:
        return cycle_start_date

    latest_end: date | None = None

    for dep_id in definition.dependencies:
        dep_execution = execution_map.get(dep_id)
        if dep_execution is None:
            if missing_dependencies == DependencyPolicy.ERROR and any(
                d.id == dep_id for d in all_definitions
            ):
                raise UnresolvedDependencyError(definition.id, dep_id)
            continue
        if latest_end is None or dep_execution.end_date > latest_end:
            latest_end = dep_execution.end_date

    if latest_end is None:
        return cycle_start_date

    return max(cycle_start_date, latest_end + timedelta(days=1))


def calculate_end_date(start_date: date, duration_days: int) -> date:
    """Compute the last day of a task; durations of 0 and 1 both end on the start day."""
    return start_date + timedelta(days=max(0, duration_days - 1))


def span_days(start_date: date, end_date: date) -> int:
    """Inclusive number of calendar days between two dates."""
    return (end_date - start_date).days + 1


def date_status(
    end_date: date | None,
    completed: bool,
    today: date,
    warning_days: int = DEFAULT_WARNING_DAYS,
) -> DateStatus:
    """Classify an end date against today."""
    if end_date is None or completed:
        return DateStatus.NONE

    days_until_due = (end_date - today).days
    if days_until_due < 0:
        return DateStatus.OVERDUE
    if days_until_due <= warning_days:
        return DateStatus.WARNING
    return DateStatus.ON_TIME
