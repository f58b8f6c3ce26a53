"""
fairness.py — Per-staff fairness counters for one generation run

Tracks, per person:
  - weekly_assigned:  shifts assigned this week (resets every run)
  - shift_counts:     per-shift-type history, optionally seeded from the
                      prior week so rotation carries across weeks
  - last_shift:       most recent shift type assigned (None before any)

Only the schedule assembler writes to a tracker (record_assignment).
A tracker is never shared between runs.

Seed format (persisted by config.save_fairness_seed):
    {
      "weekly_counts":     {name: int},          # informational only
      "shift_type_counts": {name: {shift: int}},
    }

Seeds written by the older browser tool use weeklyCounts / shiftTypeCounts;
normalize_seed accepts both spellings.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from shift_roster.exceptions import ConfigError
from shift_roster.schedule_config import SHIFTS, empty_shift_counts

logger = logging.getLogger(__name__)

FairnessSeed = Dict[str, Dict[str, Any]]

_SEED_KEYS = {
    "weekly_counts": ("weekly_counts", "weeklyCounts"),
    "shift_type_counts": ("shift_type_counts", "shiftTypeCounts"),
}


def _pick(data: Mapping[str, Any], keys: Tuple[str, ...]) -> Any:
    for k in keys:
        if k in data:
            return data[k]
    return None


def normalize_seed(data: Mapping[str, Any]) -> FairnessSeed:
    """
    Coerce a prior-week seed into {"weekly_counts", "shift_type_counts"}.

    Accepts snake_case and camelCase keys. Shift counts are filled out to
    every shift type. Raises ConfigError on an unrecognised or malformed seed.
    """
    if not isinstance(data, Mapping):
        raise ConfigError("Fairness seed must be a mapping")
    known = [k for keys in _SEED_KEYS.values() for k in keys]
    if not any(k in data for k in known):
        raise ConfigError(f"Fairness seed has no count maps (expected one of {', '.join(known)})")

    raw_shift = _pick(data, _SEED_KEYS["shift_type_counts"]) or {}
    raw_weekly = _pick(data, _SEED_KEYS["weekly_counts"]) or {}
    if not isinstance(raw_shift, Mapping) or not isinstance(raw_weekly, Mapping):
        raise ConfigError("Fairness seed has malformed count maps")

    shift_type_counts: Dict[str, Dict[str, int]] = {}
    for name, counts in raw_shift.items():
        if not isinstance(counts, Mapping):
            raise ConfigError(f"Fairness seed entry for {name!r} must be a mapping")
        try:
            shift_type_counts[name] = {s: int(counts.get(s, 0)) for s in SHIFTS}
        except (TypeError, ValueError):
            raise ConfigError(f"Fairness seed entry for {name!r} has non-integer counts")

    try:
        weekly_counts = {name: int(v) for name, v in raw_weekly.items()}
    except (TypeError, ValueError):
        raise ConfigError("Fairness seed weekly counts must be integers")

    return {"weekly_counts": weekly_counts, "shift_type_counts": shift_type_counts}


@dataclass
class StaffFairness:
    weekly_assigned: int = 0
    shift_counts: Dict[str, int] = field(default_factory=empty_shift_counts)
    last_shift: Optional[str] = None


class FairnessTracker:
    """Mutable fairness accumulator for a single weekly run."""

    def __init__(self, staff: Iterable[str], prior_seed: Optional[FairnessSeed] = None):
        self.staff: List[str] = list(staff)
        self._state: Dict[str, StaffFairness] = {name: StaffFairness() for name in self.staff}
        if prior_seed:
            self._apply_seed(prior_seed)

    def _apply_seed(self, seed: FairnessSeed) -> None:
        # Only the shift-type distribution carries over; weekly totals start at 0
        prior_counts = normalize_seed(seed)["shift_type_counts"]
        seeded = 0
        for name in self.staff:
            if name not in prior_counts:
                continue
            self._state[name].shift_counts = dict(prior_counts[name])
            seeded += 1
        logger.info(f"Seeded shift-type history for {seeded}/{len(self.staff)} staff")

    def __contains__(self, name: str) -> bool:
        return name in self._state

    def __getitem__(self, name: str) -> StaffFairness:
        return self._state[name]

    def weekly_assigned(self, name: str) -> int:
        return self._state[name].weekly_assigned

    def shift_count(self, name: str, shift: str) -> int:
        return self._state[name].shift_counts.get(shift, 0)

    def last_shift(self, name: str) -> Optional[str]:
        return self._state[name].last_shift

    def record_assignment(self, name: str, shift: str) -> None:
        entry = self._state[name]
        entry.weekly_assigned += 1
        entry.shift_counts[shift] = entry.shift_counts.get(shift, 0) + 1
        entry.last_shift = shift

    def to_seed(self) -> FairnessSeed:
        """Snapshot the counters in the persisted seed format."""
        return {
            "weekly_counts": {n: s.weekly_assigned for n, s in self._state.items()},
            "shift_type_counts": {n: dict(s.shift_counts) for n, s in self._state.items()},
        }
