"""
Weekly Shift Roster Engine

Modules:
- schedule_config: Days, shifts, workday cap, ranking weights
- config: Roster / leave / shift-hour loading, fairness seed persistence
- fairness: Per-staff fairness counters (FairnessTracker)
- engine: Feasibility check, ranking, relaxation ladder, weekly assembly, derived stats
- constraints: Post-run hard/soft constraint audit
- exporter: CSV, Excel and fairness report output
- notifications: Per-staff roster messages
- weekly_run: End-to-end orchestration and CLI
"""

from .config import (
    UnavailabilitySet,
    load_roster,
    load_leave_map,
    load_fairness_seed,
    save_fairness_seed,
    merge_unavailability,
    parse_staff_text,
    parse_unavailable_days,
    parse_shift_hours,
)

from .engine import (
    RandomSource,
    SystemRandomSource,
    check_feasibility,
    rank_candidates,
    fill_slot,
    generate_weekly_schedule,
    compute_work_stats,
    compute_off_by_day,
    calculate_fairness_metrics,
)

from .exceptions import (
    SchedulingError,
    InsufficientStaffError,
    InfeasiblePolicyError,
    InsufficientCandidatesError,
    ConfigError,
    RosterError,
)

from .fairness import FairnessTracker

from .schedule_config import DAYS, SHIFTS, DEFAULT_SHIFT_HOURS

__all__ = [
    "UnavailabilitySet",
    "load_roster",
    "load_leave_map",
    "load_fairness_seed",
    "save_fairness_seed",
    "merge_unavailability",
    "parse_staff_text",
    "parse_unavailable_days",
    "parse_shift_hours",
    "RandomSource",
    "SystemRandomSource",
    "check_feasibility",
    "rank_candidates",
    "fill_slot",
    "generate_weekly_schedule",
    "compute_work_stats",
    "compute_off_by_day",
    "calculate_fairness_metrics",
    "SchedulingError",
    "InsufficientStaffError",
    "InfeasiblePolicyError",
    "InsufficientCandidatesError",
    "ConfigError",
    "RosterError",
    "FairnessTracker",
    "DAYS",
    "SHIFTS",
    "DEFAULT_SHIFT_HOURS",
]
