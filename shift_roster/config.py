"""
config.py — Input loading for the weekly shift roster

Loads the staff roster, ad hoc leave, shift hours and the prior-week
fairness seed. Produces the single merged UnavailabilitySet a run uses.

Roster files (CSV or Excel, first sheet) are header-sniffed:
  - first non-empty row is the header
  - name column:           first header containing "name" (else column 1)
  - unavailability column: first header containing "unavailable"/"availability"
  - staff-per-shift:       first header containing "pershift" (optional)

Unavailable days are free text: "Mon, Wed", "sat;sun", "Tuesday Friday".
Only the first three letters of each token matter.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Union

from shift_roster.exceptions import ConfigError, RosterError
from shift_roster.fairness import normalize_seed
from shift_roster.schedule_config import DAY_ALIASES, DAYS, SHIFTS

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_ROSTER_PATH = DEFAULT_CONFIG_DIR / "staff_roster.csv"
DEFAULT_LEAVE_PATH  = DEFAULT_CONFIG_DIR / "adhoc_leave.csv"
DEFAULT_SEED_PATH   = DEFAULT_CONFIG_DIR / "last_week_stats.json"

_TOKEN_SPLIT = re.compile(r"[;,\s]+")


# ---------------------------------------------------------------------------
# Merged unavailability
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnavailabilitySet:
    """
    Read-only unavailability for one run.

    days_by_staff: {name: frozenset(days)} — base unavailability plus ad hoc leave.
    leave_days:    days on which at least one ad hoc leave exists.
    """
    days_by_staff: Mapping[str, FrozenSet[str]] = field(default_factory=lambda: MappingProxyType({}))
    leave_days: FrozenSet[str] = frozenset()

    def is_unavailable(self, name: str, day: str) -> bool:
        return day in self.days_by_staff.get(name, frozenset())

    def has_leave_on(self, day: str) -> bool:
        return day in self.leave_days

    def days_for(self, name: str) -> FrozenSet[str]:
        return self.days_by_staff.get(name, frozenset())

    @classmethod
    def coerce(
        cls,
        value: Union["UnavailabilitySet", Mapping[str, Iterable[str]], None],
    ) -> "UnavailabilitySet":
        """Accept an UnavailabilitySet, a plain {name: days} map, or None."""
        if isinstance(value, cls):
            return value
        return merge_unavailability(value, None)


def _normalize_day(token: str) -> str:
    key = str(token).strip()[:3].lower()
    if key not in DAY_ALIASES:
        raise ConfigError(f"Unknown day '{token}'. Expected one of {', '.join(DAYS)}")
    return DAY_ALIASES[key]


def merge_unavailability(
    base: Optional[Mapping[str, Iterable[str]]],
    leave: Optional[Mapping[str, Iterable[str]]],
) -> UnavailabilitySet:
    """
    Merge base unavailability and ad hoc leave into one immutable set.

    This is the only place leave is folded in, so a fresh generate and a
    regenerate-after-leave see identical inputs.
    """
    merged: Dict[str, Set[str]] = {}
    for name, days in (base or {}).items():
        merged.setdefault(name.strip(), set()).update(_normalize_day(d) for d in days)

    leave_days: Set[str] = set()
    for name, days in (leave or {}).items():
        norm = {_normalize_day(d) for d in days}
        if not norm:
            continue
        merged.setdefault(name.strip(), set()).update(norm)
        leave_days.update(norm)

    frozen = {name: frozenset(days) for name, days in merged.items() if days}
    if leave_days:
        logger.info(f"Ad hoc leave on: {', '.join(d for d in DAYS if d in leave_days)}")
    return UnavailabilitySet(
        days_by_staff=MappingProxyType(frozen),
        leave_days=frozenset(leave_days),
    )


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def parse_staff_text(text: str) -> List[str]:
    """One name per line; trims, drops blanks, de-duplicates keeping first order."""
    seen: Set[str] = set()
    names: List[str] = []
    for line in (text or "").splitlines():
        name = line.strip()
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names


def parse_unavailable_days(raw: Any) -> Set[str]:
    """Parse 'Mon, Wed' / 'sat;sun' / 'Tuesday Friday' into a set of days."""
    if raw is None or (isinstance(raw, float) and raw != raw):
        return set()
    days: Set[str] = set()
    for token in _TOKEN_SPLIT.split(str(raw)):
        key = token.strip()[:3].lower()
        if key in DAY_ALIASES:
            days.add(DAY_ALIASES[key])
    return days


def normalize_header(value: Any) -> str:
    return re.sub(r"\s+", "", str(value or "").strip().lower())


def parse_shift_hours(
    morning: Any = 8,
    day: Any = 8,
    night: Any = 8,
) -> Dict[str, int]:
    """Validate shift durations (positive integers) → {shift: hours}."""
    hours: Dict[str, int] = {}
    for shift, raw in zip(SHIFTS, (morning, day, night)):
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise ConfigError(f"Shift hours must be positive integers (got {shift}={raw!r})")
        if value <= 0:
            raise ConfigError(f"Shift hours must be positive integers (got {shift}={value})")
        hours[shift] = value
    return hours


def parse_staff_per_shift(raw: Any) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"Staff per shift must be a positive integer (got {raw!r})")
    if value < 1:
        raise ConfigError(f"Staff per shift must be a positive integer (got {value})")
    return value


# ---------------------------------------------------------------------------
# Roster loader
# ---------------------------------------------------------------------------

@dataclass
class Roster:
    staff: List[str]
    unavailability: Dict[str, Set[str]] = field(default_factory=dict)
    staff_per_shift: Optional[int] = None


def _read_rows(path: Path) -> List[List[str]]:
    import pandas as pd

    try:
        if path.suffix.lower() in (".xlsx", ".xlsm", ".xls"):
            df = pd.read_excel(path, sheet_name=0, header=None, dtype=str)
        else:
            with open(path, newline="", encoding="utf-8-sig") as f:
                lines = f.read().splitlines()
            if not any(line.strip() for line in lines):
                raise RosterError(f"No rows found in {path}")
            # Rows may be ragged ("Bob,Mon, Wed"); the widest line bounds the field count
            width = max(line.count(",") + 1 for line in lines)
            df = pd.read_csv(
                path,
                header=None,
                names=list(range(width)),
                dtype=str,
                skip_blank_lines=False,
                encoding="utf-8-sig",
            )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise RosterError(f"Could not read roster {path}: {e}")
    df = df.fillna("")
    return [[str(c) for c in row] for row in df.itertuples(index=False, name=None)]


def _find_column(headers: List[str], *needles: str) -> Optional[int]:
    for idx, h in enumerate(headers):
        if any(n in h for n in needles):
            return idx
    return None


def load_roster(roster_path: Optional[Path] = None) -> Roster:
    """
    Load staff names, base unavailability and an optional staff-per-shift
    value from a CSV/Excel roster.
    """
    path = Path(roster_path) if roster_path else DEFAULT_ROSTER_PATH
    if not path.exists():
        raise FileNotFoundError(f"Roster file not found: {path}")

    rows = _read_rows(path)
    non_empty = [i for i, r in enumerate(rows) if any(c.strip() for c in r)]
    if not non_empty:
        raise RosterError(f"No rows found in {path}")

    header_idx = non_empty[0]
    headers = [normalize_header(h) for h in rows[header_idx]]
    name_idx = _find_column(headers, "name")
    if name_idx is None:
        name_idx = 0
    unavail_idx = _find_column(headers, "unavailable", "availability")
    per_shift_idx = _find_column(headers, "staffpershift", "pershift")
    last_header_idx = max(i for i, h in enumerate(headers) if h)

    staff: List[str] = []
    unavailability: Dict[str, Set[str]] = {}
    staff_per_shift: Optional[int] = None

    for row in rows[header_idx + 1:]:
        name = row[name_idx].strip() if name_idx < len(row) else ""
        if not name:
            continue
        if name not in staff:
            staff.append(name)
        if unavail_idx is not None and unavail_idx < len(row):
            raw_days = row[unavail_idx]
            if unavail_idx == last_header_idx:
                # unquoted "Mon, Wed" spills into cells past the last header
                raw_days = ",".join(row[unavail_idx:])
            unavailability[name] = parse_unavailable_days(raw_days)
        if per_shift_idx is not None and staff_per_shift is None and per_shift_idx < len(row):
            try:
                staff_per_shift = parse_staff_per_shift(row[per_shift_idx])
            except ConfigError as e:
                logger.debug(f"Ignoring staff-per-shift value in {path}: {e}")

    if not staff:
        raise RosterError(
            f"Could not find any staff names in {path}. Ensure the sheet has a Name column."
        )

    logger.info(f"Loaded {len(staff)} staff from {path}")
    return Roster(staff=staff, unavailability=unavailability, staff_per_shift=staff_per_shift)


# ---------------------------------------------------------------------------
# Ad hoc leave loader
# ---------------------------------------------------------------------------

def load_leave_map(leave_path: Optional[Path] = None) -> Dict[str, Set[str]]:
    """
    Load ad hoc leave from CSV with columns: name, days.

    Returns: {name: {days}}. Missing file → empty map.
    """
    import pandas as pd

    path = Path(leave_path) if leave_path else DEFAULT_LEAVE_PATH
    if not path.exists():
        logger.warning(f"Leave file not found: {path}. Returning empty map.")
        return {}

    df = pd.read_csv(path, dtype=str).fillna("")
    df.columns = [normalize_header(c) for c in df.columns]
    if "name" not in df.columns or "days" not in df.columns:
        raise ConfigError(f"Leave file {path} needs 'name' and 'days' columns")

    leave: Dict[str, Set[str]] = {}
    for _, row in df.iterrows():
        name = str(row["name"]).strip()
        if not name:
            continue
        leave.setdefault(name, set()).update(parse_unavailable_days(row["days"]))

    logger.info(f"Loaded ad hoc leave for {len(leave)} staff from {path}")
    return leave


# ---------------------------------------------------------------------------
# Fairness seed (prior-week stats)
# ---------------------------------------------------------------------------

def load_fairness_seed(seed_path: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """Load the prior-week seed from JSON. Returns None if the file is missing."""
    path = Path(seed_path) if seed_path else DEFAULT_SEED_PATH
    if not path.exists():
        logger.warning(f"Fairness seed not found: {path}. Starting without rotation bias.")
        return None
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Fairness seed {path} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"Fairness seed {path} must be a JSON object")

    try:
        seed = normalize_seed(data)
    except ConfigError as e:
        raise ConfigError(f"Fairness seed {path}: {e}")
    logger.info(f"Loaded fairness seed for {len(seed['shift_type_counts'])} staff from {path}")
    return seed


def save_fairness_seed(
    seed: Dict[str, Any],
    seed_path: Optional[Path] = None,
) -> None:
    """Persist the fairness seed to JSON with a last_updated stamp."""
    path = Path(seed_path) if seed_path else DEFAULT_SEED_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "weekly_counts": seed.get("weekly_counts", {}),
        "shift_type_counts": seed.get("shift_type_counts", {}),
        "last_updated": date.today().isoformat(),
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    logger.info(f"Fairness seed saved to {path}")
