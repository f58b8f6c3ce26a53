"""
engine.py — Weekly Shift Roster Engine

Core algorithm: randomized greedy fill with tiered constraint relaxation
and cross-week fairness memory.

  For each day Mon → Sun:
    order = fresh shuffle of all staff
    For each shift Morning → Day → Night:
      pool = order − assigned today − at 5 workdays − unavailable today
                   − (Sat/Sun) people who worked Night on Thu AND Fri
      Tier A: last shift ≠ this shift and no Night → Night     → rank
      Tier B: no Night → Night                                 → rank
      Tier C: pool as-is                                       → rank
              still short + ad hoc leave that day → add back the
              weekend-rest exclusions                          → rank
      take the first staff_per_shift; record in the FairnessTracker

  rank: ascending  weekly_assigned + 0.6 × shift_history + U[0, 0.2)

No backtracking: an early choice is never undone. A slot that cannot be
filled aborts the whole run (InsufficientCandidatesError).

See schedule_config.py for constants and weights.
"""

import logging
import math
import random
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Set, Tuple, Union

from shift_roster.config import UnavailabilitySet
from shift_roster.exceptions import (
    InfeasiblePolicyError,
    InsufficientCandidatesError,
    InsufficientStaffError,
)
from shift_roster.fairness import FairnessSeed, FairnessTracker
from shift_roster.schedule_config import (
    DAYS,
    DAYS_PER_WEEK,
    DEFAULT_SHIFT_HOURS,
    DOUBLE_NIGHT_LOOKBACK,
    MAX_WORKDAYS_PER_WEEK,
    NIGHT_SHIFT,
    SCORE_WEIGHTS,
    SHIFTS,
    TIER_FULL,
    TIER_PREFERRED,
    TIER_RELAXED,
    TIER_WEEKEND_OVERRIDE,
    WEEKEND_DAYS,
)

logger = logging.getLogger(__name__)

# Type alias
Schedule = Dict[str, Dict[str, List[str]]]   # day → shift → [names]


# ---------------------------------------------------------------------------
# Random source
# ---------------------------------------------------------------------------

class RandomSource(Protocol):
    def next(self) -> float:
        """Return a float in [0, 1)."""
        ...


class SystemRandomSource:
    """random.Random-backed source. seed=None gives a non-reproducible run."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def next(self) -> float:
        return self._rng.random()


def shuffle(items: Sequence[str], rng: RandomSource) -> List[str]:
    """Fisher–Yates shuffle drawing from rng. Returns a new list."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(math.floor(rng.next() * (i + 1)))
        out[i], out[j] = out[j], out[i]
    return out


# ---------------------------------------------------------------------------
# Feasibility
# ---------------------------------------------------------------------------

def check_feasibility(
    staff_count: int,
    staff_per_shift: int,
    shift_count: int = len(SHIFTS),
) -> Dict[str, int]:
    """
    Capacity arithmetic run before any assignment.

    Raises:
        InsufficientStaffError: fewer staff than one day needs.
        InfeasiblePolicyError:  5-workday cap cannot cover the week.

    Returns:
        {required_per_day, weekly_slots, max_capacity, min_staff_needed}
    """
    required_per_day = shift_count * staff_per_shift
    if staff_count < required_per_day:
        raise InsufficientStaffError(staff_count, required_per_day, staff_per_shift, shift_count)

    weekly_slots = shift_count * DAYS_PER_WEEK * staff_per_shift
    max_capacity = staff_count * MAX_WORKDAYS_PER_WEEK
    min_staff_needed = math.ceil(weekly_slots / MAX_WORKDAYS_PER_WEEK)
    if max_capacity < weekly_slots:
        raise InfeasiblePolicyError(
            staff_count, weekly_slots, max_capacity, min_staff_needed, staff_per_shift
        )

    return {
        "required_per_day": required_per_day,
        "weekly_slots": weekly_slots,
        "max_capacity": max_capacity,
        "min_staff_needed": min_staff_needed,
    }


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def fairness_score(name: str, shift: str, tracker: FairnessTracker, rng: RandomSource) -> float:
    return (
        tracker.weekly_assigned(name) * SCORE_WEIGHTS["weekly_load"]
        + tracker.shift_count(name, shift) * SCORE_WEIGHTS["shift_history"]
        + rng.next() * SCORE_WEIGHTS["jitter"]
    )


def rank_candidates(
    candidates: Sequence[str],
    shift: str,
    tracker: FairnessTracker,
    rng: RandomSource,
) -> List[str]:
    """
    Order candidates by ascending fairness score.

    Jitter is drawn once per candidate in input order; the sort is stable so
    exact score ties keep input order.
    """
    scored = [(fairness_score(name, shift, tracker, rng), name) for name in candidates]
    scored.sort(key=lambda x: x[0])
    return [name for _, name in scored]


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------

def base_pool(
    order: Sequence[str],
    day: str,
    assigned_today: Set[str],
    tracker: FairnessTracker,
    unavailability: UnavailabilitySet,
) -> List[str]:
    """Hard filters: one shift per day, 5-workday cap, unavailability."""
    return [
        name for name in order
        if name not in assigned_today
        and tracker.weekly_assigned(name) < MAX_WORKDAYS_PER_WEEK
        and not unavailability.is_unavailable(name, day)
    ]


def weekend_night_excluded(name: str, day: str, schedule: Schedule) -> bool:
    """True if name worked Night on both Thu and Fri and day is Sat/Sun."""
    if day not in WEEKEND_DAYS:
        return False
    return all(
        name in schedule.get(prev, {}).get(NIGHT_SHIFT, [])
        for prev in DOUBLE_NIGHT_LOOKBACK
    )


def _is_night_after_night(last: Optional[str], shift: str) -> bool:
    return last == NIGHT_SHIFT and shift == NIGHT_SHIFT


def fill_slot(
    day: str,
    shift: str,
    order: Sequence[str],
    staff_per_shift: int,
    tracker: FairnessTracker,
    unavailability: UnavailabilitySet,
    assigned_today: Set[str],
    schedule: Schedule,
    rng: RandomSource,
) -> Tuple[List[str], str]:
    """
    Pick staff_per_shift people for (day, shift) via the relaxation ladder.

    Does not mutate tracker/assigned_today; the caller commits the picks.

    Returns:
        (selected_names, tier_used)
    """
    eligible = base_pool(order, day, assigned_today, tracker, unavailability)
    excluded = [n for n in eligible if weekend_night_excluded(n, day, schedule)]
    pool = [n for n in eligible if n not in excluded]

    preferred = [
        n for n in pool
        if tracker.last_shift(n) != shift
        and not _is_night_after_night(tracker.last_shift(n), shift)
    ]
    ranked = rank_candidates(preferred, shift, tracker, rng)
    tier = TIER_PREFERRED

    if len(ranked) < staff_per_shift:
        relaxed = [n for n in pool if not _is_night_after_night(tracker.last_shift(n), shift)]
        ranked = rank_candidates(relaxed, shift, tracker, rng)
        tier = TIER_RELAXED
        logger.debug(f"{day} {shift}: relaxed shift-rotation rule ({len(ranked)} candidates)")

    if len(ranked) < staff_per_shift:
        ranked = rank_candidates(pool, shift, tracker, rng)
        tier = TIER_FULL
        logger.warning(f"{day} {shift}: all soft rules relaxed ({len(ranked)} candidates)")

        if len(ranked) < staff_per_shift and excluded and unavailability.has_leave_on(day):
            expanded = [n for n in order if n in pool or n in excluded]
            ranked = rank_candidates(expanded, shift, tracker, rng)
            tier = TIER_WEEKEND_OVERRIDE
            logger.warning(
                f"{day} {shift}: ad hoc leave present — weekend rest overridden for "
                f"{', '.join(excluded)}"
            )

    if len(ranked) < staff_per_shift:
        logger.error(f"Could not fill {shift} on {day}: {len(ranked)}/{staff_per_shift}")
        raise InsufficientCandidatesError(day, shift, staff_per_shift, len(ranked))

    return ranked[:staff_per_shift], tier


# ---------------------------------------------------------------------------
# Core: weekly assembly
# ---------------------------------------------------------------------------

def generate_weekly_schedule(
    staff: Sequence[str],
    staff_per_shift: int,
    prior_week_stats: Optional[FairnessSeed] = None,
    unavailability: Union[UnavailabilitySet, Mapping[str, Iterable[str]], None] = None,
    rng: Optional[RandomSource] = None,
) -> Dict[str, Any]:
    """
    Build one week's roster.

    Args:
        staff:            Ordered, unique staff names.
        staff_per_shift:  Headcount per (day, shift).
        prior_week_stats: Seed from a previous run's "stats"; only
                          shift_type_counts is reused.
        unavailability:   Merged UnavailabilitySet (or plain {name: days}).
        rng:              RandomSource; defaults to an unseeded SystemRandomSource.

    Returns:
        {
          schedule:    {day: {shift: [names]}},
          stats:       {weekly_counts, shift_type_counts}   (next week's seed),
          relaxations: [(day, shift, tier), ...] for slots filled below tier A,
        }

    Raises:
        InsufficientStaffError, InfeasiblePolicyError, InsufficientCandidatesError
    """
    staff = list(staff)
    if len(set(staff)) != len(staff):
        raise ValueError("staff list contains duplicate names — de-duplicate before scheduling")
    if staff_per_shift < 1:
        raise ValueError(f"staff_per_shift must be a positive integer (got {staff_per_shift})")

    check_feasibility(len(staff), staff_per_shift)

    unavail = UnavailabilitySet.coerce(unavailability)
    rng = rng or SystemRandomSource()
    tracker = FairnessTracker(staff, prior_week_stats)

    schedule: Schedule = {}
    relaxations: List[Tuple[str, str, str]] = []

    for day in DAYS:
        schedule[day] = {}
        assigned_today: Set[str] = set()
        order = shuffle(staff, rng)

        for shift in SHIFTS:
            selected, tier = fill_slot(
                day=day,
                shift=shift,
                order=order,
                staff_per_shift=staff_per_shift,
                tracker=tracker,
                unavailability=unavail,
                assigned_today=assigned_today,
                schedule=schedule,
                rng=rng,
            )
            for name in selected:
                tracker.record_assignment(name, shift)
                assigned_today.add(name)
            schedule[day][shift] = selected
            if tier != TIER_PREFERRED:
                relaxations.append((day, shift, tier))
            logger.debug(f"{day} {shift} → {', '.join(selected)} [{tier}]")

    logger.info(
        f"Weekly schedule built: {len(staff)} staff, {staff_per_shift}/shift, "
        f"{len(relaxations)} relaxed slots"
    )
    return {
        "schedule": schedule,
        "stats": tracker.to_seed(),
        "relaxations": relaxations,
    }


# ---------------------------------------------------------------------------
# Derived stats
# ---------------------------------------------------------------------------

def _names_in(schedule: Schedule) -> List[str]:
    seen: List[str] = []
    for day in DAYS:
        for shift in SHIFTS:
            for name in schedule.get(day, {}).get(shift, []):
                if name not in seen:
                    seen.append(name)
    return seen


def compute_work_stats(
    schedule: Schedule,
    all_staff: Iterable[str],
    shift_hours: Optional[Mapping[str, int]] = None,
) -> Dict[str, Dict[str, int]]:
    """
    Per-staff days worked, hours worked and days off.

    Staff with no assignments are included. Names present in the schedule
    but missing from all_staff are appended after them.

    Returns: {name: {days_worked, hours_worked, days_off}}
    """
    hours = dict(shift_hours) if shift_hours is not None else dict(DEFAULT_SHIFT_HOURS)
    stats: Dict[str, Dict[str, int]] = {}
    for name in list(all_staff) + _names_in(schedule):
        if name not in stats:
            stats[name] = {"days_worked": 0, "hours_worked": 0, "days_off": 0}

    for day in DAYS:
        for shift in SHIFTS:
            for name in schedule.get(day, {}).get(shift, []):
                stats[name]["days_worked"] += 1
                stats[name]["hours_worked"] += hours.get(shift, 0)

    for entry in stats.values():
        entry["days_off"] = max(0, DAYS_PER_WEEK - entry["days_worked"])
    return stats


def compute_off_by_day(schedule: Schedule, all_staff: Iterable[str]) -> Dict[str, List[str]]:
    """{day: sorted names with no shift that day}."""
    everyone = list(dict.fromkeys(all_staff))
    off: Dict[str, List[str]] = {}
    for day in DAYS:
        working = {
            name
            for shift in SHIFTS
            for name in schedule.get(day, {}).get(shift, [])
        }
        off[day] = sorted(n for n in everyone if n not in working)
    return off


# ---------------------------------------------------------------------------
# Fairness Metrics
# ---------------------------------------------------------------------------

def _cv(values: List[float]) -> Tuple[float, float, float]:
    mean_val = sum(values) / len(values) if values else 0.0
    variance = sum((v - mean_val) ** 2 for v in values) / len(values) if values else 0.0
    std_val = math.sqrt(variance)
    cv = (std_val / mean_val * 100) if mean_val > 0 else 0.0
    return mean_val, std_val, cv


def calculate_fairness_metrics(
    schedule: Schedule,
    staff: Iterable[str],
    shift_hours: Optional[Mapping[str, int]] = None,
) -> Dict[str, Any]:
    """
    Workload spread across staff for one week.

    Returns:
        {
          hours_mean, hours_std, hours_cv, min, max,
          hours_counts: {name: int},
          counts:       {name: int},
          per_shift:    {shift: {name: int}},
          per_shift_cv: {shift: float},
        }
    """
    work = compute_work_stats(schedule, staff, shift_hours)
    names = list(work.keys())

    per_shift: Dict[str, Dict[str, int]] = {s: {n: 0 for n in names} for s in SHIFTS}
    for day in DAYS:
        for shift in SHIFTS:
            for name in schedule.get(day, {}).get(shift, []):
                per_shift[shift][name] += 1

    hours_counts = {n: work[n]["hours_worked"] for n in names}
    counts = {n: work[n]["days_worked"] for n in names}
    hours_mean, hours_std, hours_cv = _cv([float(v) for v in hours_counts.values()])

    per_shift_cv = {
        shift: _cv([float(v) for v in per_name.values()])[2]
        for shift, per_name in per_shift.items()
    }

    return {
        "hours_mean": hours_mean,
        "hours_std": hours_std,
        "hours_cv": hours_cv,
        "min": min(hours_counts.values()) if hours_counts else 0,
        "max": max(hours_counts.values()) if hours_counts else 0,
        "hours_counts": hours_counts,
        "counts": counts,
        "per_shift": per_shift,
        "per_shift_cv": per_shift_cv,
    }
