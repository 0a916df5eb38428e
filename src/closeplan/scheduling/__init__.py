"""Scheduling core for recurring closing checklists.

Leaves first:
- graph: cycle detection and topological ordering of task definitions
- dates: start/end date propagation along dependencies
- factory: execution creation for new cycles and schedule recalculation
- stats: per-cycle progress summaries

All functions are pure over in-memory records; "now" and "today" can be
passed explicitly for deterministic results.
"""

from .config import DependencyPolicy, SchedulingConfig
from .dates import (
    DateStatus,
    calculate_end_date,
    calculate_start_date,
    date_status,
    get_cycle_dates,
    span_days,
)
from .factory import (
    create_cycle,
    create_executions_for_cycle,
    current_year_month,
    format_cycle_name,
    generate_id,
    recalculate_schedule,
    should_create_new_cycle,
)
from .graph import detect_circular_dependencies, topological_sort, validate_dependencies
from .stats import CycleStats, calculate_cycle_stats

__all__ = [
    # Configuration
    "DependencyPolicy",
    "SchedulingConfig",
    # Graph
    "detect_circular_dependencies",
    "topological_sort",
    "validate_dependencies",
    # Dates
    "DateStatus",
    "calculate_start_date",
    "calculate_end_date",
    "date_status",
    "get_cycle_dates",
    "span_days",
    # Factory
    "create_cycle",
    "create_executions_for_cycle",
    "current_year_month",
    "format_cycle_name",
    "generate_id",
    "recalculate_schedule",
    "should_create_new_cycle",
    # Statistics
    "CycleStats",
    "calculate_cycle_stats",
]
