"""
exporter.py — Export Layer for the Weekly Shift Roster

Outputs:
  - CSV: schedule (Day, Shift, Assigned), work stats, off days
  - Excel (.xlsx): Shift × Day grid plus Work Stats / Off Days sheets
  - Fairness audit report (.txt): hours CV, per-staff load, per-shift counts

Multi-name cells are joined with " | ".

Usage:
  from shift_roster.exporter import export_schedule_csv, export_to_excel
"""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from shift_roster.engine import Schedule
from shift_roster.schedule_config import DAYS, SHIFTS

logger = logging.getLogger(__name__)

NAME_SEPARATOR = " | "

WorkStats = Dict[str, Dict[str, int]]
OffByDay = Dict[str, List[str]]


# ---------------------------------------------------------------------------
# Row builders (shared by CSV and Excel)
# ---------------------------------------------------------------------------

def schedule_rows(schedule: Schedule) -> List[Dict[str, str]]:
    return [
        {
            "Day": day,
            "Shift": shift,
            "Assigned": NAME_SEPARATOR.join(schedule.get(day, {}).get(shift, [])),
        }
        for day in DAYS
        for shift in SHIFTS
    ]


def work_stats_rows(stats: WorkStats) -> List[Dict[str, Any]]:
    return [
        {
            "Staff": name,
            "DaysWorked": entry.get("days_worked", 0),
            "DaysOff": entry.get("days_off", 0),
            "HoursWorked": entry.get("hours_worked", 0),
        }
        for name, entry in stats.items()
    ]


def off_days_rows(off_map: OffByDay) -> List[Dict[str, str]]:
    return [
        {"Day": day, "OffStaff": NAME_SEPARATOR.join(off_map.get(day, []))}
        for day in DAYS
    ]


def _write_csv(rows: List[Dict[str, Any]], fieldnames: List[str], output_path: Path) -> None:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


# ---------------------------------------------------------------------------
# CSV Export
# ---------------------------------------------------------------------------

def export_schedule_csv(schedule: Schedule, output_path: Path) -> None:
    """Export schedule to CSV: Day, Shift, Assigned (Mon..Sun × Morning..Night)."""
    _write_csv(schedule_rows(schedule), ["Day", "Shift", "Assigned"], output_path)
    logger.info(f"Schedule CSV exported → {output_path}")


def export_work_stats_csv(stats: WorkStats, output_path: Path) -> None:
    """Export per-staff work stats: Staff, DaysWorked, DaysOff, HoursWorked."""
    _write_csv(work_stats_rows(stats), ["Staff", "DaysWorked", "DaysOff", "HoursWorked"], output_path)
    logger.info(f"Work stats CSV exported → {output_path}")


def export_off_days_csv(off_map: OffByDay, output_path: Path) -> None:
    """Export who is off each day: Day, OffStaff."""
    _write_csv(off_days_rows(off_map), ["Day", "OffStaff"], output_path)
    logger.info(f"Off days CSV exported → {output_path}")


# ---------------------------------------------------------------------------
# Excel Export
# ---------------------------------------------------------------------------

def schedule_grid(schedule: Schedule):
    """Shift × Day DataFrame, cells are joined names."""
    import pandas as pd

    grid = pd.DataFrame(
        [
            [NAME_SEPARATOR.join(schedule.get(day, {}).get(shift, [])) for day in DAYS]
            for shift in SHIFTS
        ],
        index=list(SHIFTS),
        columns=list(DAYS),
    )
    grid.index.name = "Shift"
    return grid


def export_to_excel(
    schedule: Schedule,
    output_path: Path,
    work_stats: Optional[WorkStats] = None,
    off_map: Optional[OffByDay] = None,
) -> None:
    """
    Export the week to a formatted workbook.

    Sheets:
      Schedule:   rows=shift, columns=day, cells=staff names
      Work Stats: one row per staff member (if work_stats given)
      Off Days:   one row per day (if off_map given)
    """
    import pandas as pd

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        grid = schedule_grid(schedule)
        grid.to_excel(writer, sheet_name="Schedule")
        _format_excel_sheet(writer, "Schedule")

        if work_stats is not None:
            pd.DataFrame(work_stats_rows(work_stats)).to_excel(writer, sheet_name="Work Stats", index=False)
            _format_excel_sheet(writer, "Work Stats")

        if off_map is not None:
            pd.DataFrame(off_days_rows(off_map)).to_excel(writer, sheet_name="Off Days", index=False)
            _format_excel_sheet(writer, "Off Days")

    logger.info(f"Excel exported → {output_path}")


def _format_excel_sheet(writer: Any, sheet_name: str) -> None:
    """Apply basic formatting: column widths, bold header, alternate shading."""
    from openpyxl.styles import Alignment, Font, PatternFill

    ws = writer.sheets[sheet_name]
    header_fill = PatternFill("solid", fgColor="1F4E79")
    header_font = Font(bold=True, color="FFFFFF")

    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")

    for col in ws.columns:
        max_len = max((len(str(c.value)) for c in col if c.value), default=8)
        ws.column_dimensions[col[0].column_letter].width = min(max_len + 2, 40)

    alt = PatternFill("solid", fgColor="EBF3FB")
    for i, row in enumerate(ws.iter_rows(min_row=2), start=2):
        if i % 2 == 0:
            for cell in row:
                cell.fill = alt


# ---------------------------------------------------------------------------
# Fairness Report
# ---------------------------------------------------------------------------

def export_fairness_report(
    metrics: Dict[str, Any],
    output_path: Path,
    work_stats: Optional[WorkStats] = None,
    week_label: str = "",
    target_cv: float = 10.0,
) -> str:
    """
    Export a plain-text fairness audit.

    Args:
        metrics:     Output of engine.calculate_fairness_metrics()
        output_path: .txt file path
        work_stats:  Output of engine.compute_work_stats() (days off column)
        week_label:  Label shown in the title
        target_cv:   Hours CV target in percent

    Returns the report text.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    hc = metrics.get("hours_counts", {})
    rc = metrics.get("counts", {})
    per_shift = metrics.get("per_shift", {})
    per_shift_cv = metrics.get("per_shift_cv", {})
    hours_mean = metrics.get("hours_mean", 0)
    hours_cv = metrics.get("hours_cv", 0)
    work_stats = work_stats or {}

    sorted_names = sorted(hc.keys(), key=lambda n: (-hc.get(n, 0), n))
    pass_fail = "✓ PASS" if hours_cv < target_cv else "✗ FAIL"
    sep = "=" * 70

    lines = [
        sep,
        f"  FAIRNESS AUDIT REPORT{(' — ' + week_label) if week_label else ''}",
        sep,
        "",
        f"  Hours Worked CV:       {hours_cv:.2f}%  (target <{target_cv:.0f}%)  {pass_fail}",
        f"  Mean hours:            {hours_mean:.2f}",
        f"  Std Dev:               {metrics.get('hours_std', 0):.2f}",
        f"  Min / Max:             {metrics.get('min', 0)} / {metrics.get('max', 0)}",
        "",
        "─" * 70,
        "  Per-Staff Load",
        "─" * 70,
        f"  {'Name':<24} {'Days':>5} {'Off':>5} {'Hours':>7} " + " ".join(f"{s:>8}" for s in SHIFTS),
    ]

    for name in sorted_names:
        days_off = work_stats.get(name, {}).get("days_off", 7 - rc.get(name, 0))
        shift_cols = " ".join(f"{per_shift.get(s, {}).get(name, 0):>8d}" for s in SHIFTS)
        lines.append(
            f"  {name:<24} {rc.get(name, 0):>5d} {days_off:>5d} {hc.get(name, 0):>7d} {shift_cols}"
        )

    lines += [
        "",
        "─" * 70,
        "  Per-Shift CV Breakdown",
        "─" * 70,
    ]
    for shift in SHIFTS:
        cv_val = per_shift_cv.get(shift, 0.0)
        lines.append(f"  {shift:<16} CV={cv_val:6.2f}%")

    lines.append("")
    lines.append(sep)

    report_text = "\n".join(lines)
    with open(output_path, "w") as f:
        f.write(report_text)

    logger.info(f"Fairness report exported → {output_path}")
    return report_text
