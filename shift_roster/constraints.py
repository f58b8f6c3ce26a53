"""
constraints.py — Constraint audit for a finished weekly roster

Hard constraints (a successful run never violates these):
  - UNAVAILABLE:    No assignment on a day the person is unavailable
  - DOUBLE_BOOKING: No person on two shifts in one day
  - HEADCOUNT:      Every (day, shift) holds exactly staff_per_shift names
  - WORKDAY_CAP:    No person works more than 5 days
  - UNKNOWN_STAFF:  Only roster names appear

Soft constraints (relaxed by the engine when a slot is short):
  - CONSECUTIVE_NIGHT:          Night on two consecutive days
  - REPEATED_SHIFT:             Same shift type on two consecutive days
  - WEEKEND_AFTER_DOUBLE_NIGHT: Sat/Sun shift after Night on Thu and Fri

Usage:
  checker = ConstraintChecker(staff, unavailability, staff_per_shift=1)
  hard, soft = checker.check_all(schedule)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from shift_roster.config import UnavailabilitySet
from shift_roster.engine import Schedule, weekend_night_excluded
from shift_roster.schedule_config import (
    DAYS,
    MAX_WORKDAYS_PER_WEEK,
    NIGHT_SHIFT,
    SHIFTS,
    WEEKEND_DAYS,
)

logger = logging.getLogger(__name__)


class ConstraintSeverity(Enum):
    HARD = "hard"
    SOFT = "soft"


@dataclass
class ConstraintViolation:
    severity: ConstraintSeverity
    constraint_type: str
    description: str
    day: Optional[str] = None
    staff: Optional[str] = None
    shift: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.severity.value.upper()}] {self.constraint_type}"]
        if self.day:
            parts.append(f"day={self.day}")
        if self.staff:
            parts.append(f"staff={self.staff}")
        if self.shift:
            parts.append(f"shift={self.shift}")
        parts.append(f"→ {self.description}")
        return " | ".join(parts)


def _day_shift_of(schedule: Schedule, day: str) -> Dict[str, str]:
    """{name: shift} for one day (first shift wins on double booking)."""
    out: Dict[str, str] = {}
    for shift in SHIFTS:
        for name in schedule.get(day, {}).get(shift, []):
            out.setdefault(name, shift)
    return out


class ConstraintChecker:
    """
    Validates a weekly roster against hard and soft constraints.

    Accepts the standard schedule format:
        {day: {shift: [names]}}
    """

    def __init__(
        self,
        staff: Iterable[str],
        unavailability: Union[UnavailabilitySet, Mapping[str, Iterable[str]], None] = None,
        staff_per_shift: int = 1,
    ):
        self.staff: List[str] = list(staff)
        self.unavailability = UnavailabilitySet.coerce(unavailability)
        self.staff_per_shift = staff_per_shift
        self._known: Set[str] = set(self.staff)

    # -----------------------------------------------------------------------
    # HARD
    # -----------------------------------------------------------------------

    def check_unavailability(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: No assignment on an unavailable day."""
        violations = []
        for day in DAYS:
            for shift in SHIFTS:
                for name in schedule.get(day, {}).get(shift, []):
                    if self.unavailability.is_unavailable(name, day):
                        violations.append(ConstraintViolation(
                            severity=ConstraintSeverity.HARD,
                            constraint_type="UNAVAILABLE",
                            description=f"{name} is unavailable on {day} but was assigned {shift}",
                            day=day,
                            staff=name,
                            shift=shift,
                        ))
        return violations

    def check_double_booking(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: No person assigned more than once on the same day."""
        violations = []
        for day in DAYS:
            seen: Dict[str, str] = {}  # name → first shift
            for shift in SHIFTS:
                for name in schedule.get(day, {}).get(shift, []):
                    if name in seen:
                        violations.append(ConstraintViolation(
                            severity=ConstraintSeverity.HARD,
                            constraint_type="DOUBLE_BOOKING",
                            description=f"{name} assigned to both {seen[name]} and {shift} on {day}",
                            day=day,
                            staff=name,
                            shift=shift,
                            details={"first_shift": seen[name]},
                        ))
                    else:
                        seen[name] = shift
        return violations

    def check_headcount(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: Every cell holds exactly staff_per_shift people."""
        violations = []
        for day in DAYS:
            for shift in SHIFTS:
                size = len(schedule.get(day, {}).get(shift, []))
                if size != self.staff_per_shift:
                    violations.append(ConstraintViolation(
                        severity=ConstraintSeverity.HARD,
                        constraint_type="HEADCOUNT",
                        description=f"{shift} on {day} has {size} staff, expected {self.staff_per_shift}",
                        day=day,
                        shift=shift,
                        details={"size": size, "expected": self.staff_per_shift},
                    ))
        return violations

    def check_workday_cap(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: At least two days off per person."""
        worked: Dict[str, int] = {}
        for day in DAYS:
            for name in _day_shift_of(schedule, day):
                worked[name] = worked.get(name, 0) + 1
        return [
            ConstraintViolation(
                severity=ConstraintSeverity.HARD,
                constraint_type="WORKDAY_CAP",
                description=f"{name} works {count} days (max {MAX_WORKDAYS_PER_WEEK})",
                staff=name,
                details={"days_worked": count},
            )
            for name, count in worked.items()
            if count > MAX_WORKDAYS_PER_WEEK
        ]

    def check_unknown_staff(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: Only roster names may be assigned."""
        violations = []
        for day in DAYS:
            for shift in SHIFTS:
                for name in schedule.get(day, {}).get(shift, []):
                    if name not in self._known:
                        violations.append(ConstraintViolation(
                            severity=ConstraintSeverity.HARD,
                            constraint_type="UNKNOWN_STAFF",
                            description=f"{name} is not on the roster",
                            day=day,
                            staff=name,
                            shift=shift,
                        ))
        return violations

    # -----------------------------------------------------------------------
    # SOFT
    # -----------------------------------------------------------------------

    def check_consecutive_shifts(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Soft: Night→Night and same-shift repeats on consecutive days."""
        violations = []
        for prev_day, day in zip(DAYS, DAYS[1:]):
            prev = _day_shift_of(schedule, prev_day)
            cur = _day_shift_of(schedule, day)
            for name, shift in cur.items():
                if prev.get(name) != shift:
                    continue
                kind = "CONSECUTIVE_NIGHT" if shift == NIGHT_SHIFT else "REPEATED_SHIFT"
                violations.append(ConstraintViolation(
                    severity=ConstraintSeverity.SOFT,
                    constraint_type=kind,
                    description=f"{name} works {shift} on both {prev_day} and {day}",
                    day=day,
                    staff=name,
                    shift=shift,
                ))
        return violations

    def check_weekend_rest(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Soft: Thu+Fri Night should be followed by a free weekend."""
        violations = []
        for day in WEEKEND_DAYS:
            for name, shift in _day_shift_of(schedule, day).items():
                if weekend_night_excluded(name, day, schedule):
                    violations.append(ConstraintViolation(
                        severity=ConstraintSeverity.SOFT,
                        constraint_type="WEEKEND_AFTER_DOUBLE_NIGHT",
                        description=f"{name} works {shift} on {day} after Night on Thu and Fri",
                        day=day,
                        staff=name,
                        shift=shift,
                        details={"leave_on_day": self.unavailability.has_leave_on(day)},
                    ))
        return violations

    # -----------------------------------------------------------------------
    # Run all checks
    # -----------------------------------------------------------------------

    def check_all(
        self,
        schedule: Schedule,
    ) -> Tuple[List[ConstraintViolation], List[ConstraintViolation]]:
        """
        Run all hard and soft constraint checks.

        Returns:
            (hard_violations, soft_violations)
        """
        hard: List[ConstraintViolation] = []
        soft: List[ConstraintViolation] = []

        hard.extend(self.check_unavailability(schedule))
        hard.extend(self.check_double_booking(schedule))
        hard.extend(self.check_headcount(schedule))
        hard.extend(self.check_workday_cap(schedule))
        hard.extend(self.check_unknown_staff(schedule))

        soft.extend(self.check_consecutive_shifts(schedule))
        soft.extend(self.check_weekend_rest(schedule))

        if hard:
            logger.warning(f"{len(hard)} hard constraint violations")
        return hard, soft

    # -----------------------------------------------------------------------
    # Input validation
    # -----------------------------------------------------------------------

    def validate_roster(self) -> Tuple[List[str], List[str]]:
        """
        Validate roster for structural integrity.

        Returns:
            (errors, warnings) as lists of strings
        """
        errors = []
        warnings = []

        dupes = sorted({n for n in self.staff if self.staff.count(n) > 1})
        if dupes:
            errors.append(f"Duplicate names in roster: {', '.join(dupes)}")

        blanks = [n for n in self.staff if not n.strip()]
        if blanks:
            errors.append(f"{len(blanks)} blank name(s) in roster")

        required = len(SHIFTS) * self.staff_per_shift
        for day in DAYS:
            available = [n for n in self.staff if not self.unavailability.is_unavailable(n, day)]
            if len(available) < required:
                warnings.append(
                    f"{day}: only {len(available)} staff available, {required} needed"
                )

        unknown = sorted(set(self.unavailability.days_by_staff) - self._known)
        if unknown:
            warnings.append(f"Unavailability listed for staff not on roster: {', '.join(unknown)}")

        return errors, warnings
