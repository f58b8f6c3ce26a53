"""
notifications.py — Per-staff roster messages

Builds the text each person receives for the week. Delivery (mail, chat,
copy-paste link) is handled outside this package.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from shift_roster.engine import Schedule
from shift_roster.schedule_config import DAYS, SHIFTS

logger = logging.getLogger(__name__)


def assignments_for(name: str, schedule: Schedule) -> List[Tuple[str, str]]:
    """[(day, shift), ...] for name in Mon..Sun order."""
    return [
        (day, shift)
        for day in DAYS
        for shift in SHIFTS
        if name in schedule.get(day, {}).get(shift, [])
    ]


def build_staff_message(
    name: str,
    schedule: Schedule,
    week_label: Optional[str] = None,
    shift_hours: Optional[Dict[str, int]] = None,
) -> str:
    week = f" for {week_label}" if week_label else " this week"
    pairs = assignments_for(name, schedule)
    if not pairs:
        return f"Hi {name}, you have no shifts{week}."

    lines = [f"Hi {name}, your shifts{week}:"]
    for day, shift in pairs:
        hours = f" ({shift_hours[shift]}h)" if shift_hours and shift in shift_hours else ""
        lines.append(f"  - {day}: {shift}{hours}")
    return "\n".join(lines)


def build_all_messages(
    schedule: Schedule,
    staff: Iterable[str],
    week_label: Optional[str] = None,
    shift_hours: Optional[Dict[str, int]] = None,
) -> Dict[str, str]:
    return {
        name: build_staff_message(name, schedule, week_label, shift_hours)
        for name in staff
    }


def export_messages(messages: Dict[str, str], output_path: Path) -> None:
    """Write all messages to one text file, separated by blank lines."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write("\n\n".join(messages.values()))
        f.write("\n")
    logger.info(f"Notifications exported → {output_path} ({len(messages)} staff)")
