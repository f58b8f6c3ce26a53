"""
schedule_config.py — Week, Shift & Policy Configuration

WEEK
────
  Days run Mon → Sun. Each day has three shifts, filled in order
  Morning → Day → Night. A (day, shift) cell is a "slot".

POLICY
──────
  • Every person gets at least two days off per week (max 5 workdays).
  • A person works at most one shift per day.
  • Explicit unavailability (base + ad hoc leave) is never relaxed.
  • Soft rules (relaxed in tiers when a slot cannot be filled):
      - prefer a different shift type than the person's previous shift
      - no Night → Night on consecutive days
      - Sat/Sun rest after Night on both Thu and Fri

RANKING
───────
  score = weekly_assigned × 1.0
        + shift_type_history[shift] × 0.6
        + uniform[0, 0.2)
  Lowest score is picked first.
"""

from typing import Dict, Tuple

DAYS: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
SHIFTS: Tuple[str, ...] = ("Morning", "Day", "Night")

NIGHT_SHIFT = "Night"

# Hours per shift; overridden per run (CLI --hours-*)
DEFAULT_SHIFT_HOURS: Dict[str, int] = {"Morning": 8, "Day": 8, "Night": 8}

MAX_WORKDAYS_PER_WEEK = 5
DAYS_PER_WEEK = len(DAYS)

WEEKEND_DAYS: Tuple[str, ...] = ("Sat", "Sun")
# Night on both of these days blocks the following weekend (soft)
DOUBLE_NIGHT_LOOKBACK: Tuple[str, ...] = ("Thu", "Fri")

SCORE_WEIGHTS: Dict[str, float] = {
    "weekly_load":   1.0,
    "shift_history": 0.6,
    "jitter":        0.2,
}

# Relaxation tiers, strictest first
TIER_PREFERRED = "preferred"
TIER_RELAXED = "relaxed"
TIER_FULL = "fully_relaxed"
TIER_WEEKEND_OVERRIDE = "weekend_override"

DAY_ALIASES: Dict[str, str] = {d[:3].lower(): d for d in DAYS}


def empty_shift_counts() -> Dict[str, int]:
    """Return a zeroed {shift: count} map in shift order."""
    return {s: 0 for s in SHIFTS}
