"""
Tests for CSV / Excel / report export
"""

import csv

import pytest
from openpyxl import load_workbook

from shift_roster.engine import calculate_fairness_metrics, compute_off_by_day, compute_work_stats
from shift_roster.exporter import (
    export_fairness_report,
    export_off_days_csv,
    export_schedule_csv,
    export_to_excel,
    export_work_stats_csv,
)
from shift_roster.schedule_config import DAYS, SHIFTS

STAFF = ["Alice", "Bob", "Carol", "Dan"]


@pytest.fixture
def schedule():
    sched = {d: {s: [] for s in SHIFTS} for d in DAYS}
    sched["Mon"] = {"Morning": ["Alice", "Dan"], "Day": ["Bob"], "Night": ["Carol"]}
    return sched


def _read(path):
    with open(path, newline="") as f:
        return list(csv.DictReader(f))


class TestCsvExport:

    def test_schedule_csv(self, tmp_path, schedule):
        path = tmp_path / "out" / "schedule.csv"
        export_schedule_csv(schedule, path)
        rows = _read(path)
        assert len(rows) == 21
        assert rows[0] == {"Day": "Mon", "Shift": "Morning", "Assigned": "Alice | Dan"}
        assert rows[3] == {"Day": "Tue", "Shift": "Morning", "Assigned": ""}

    def test_work_stats_csv(self, tmp_path, schedule):
        path = tmp_path / "stats.csv"
        export_work_stats_csv(compute_work_stats(schedule, STAFF), path)
        rows = _read(path)
        assert rows[0] == {"Staff": "Alice", "DaysWorked": "1", "DaysOff": "6", "HoursWorked": "8"}
        assert [r["Staff"] for r in rows] == STAFF

    def test_off_days_csv(self, tmp_path, schedule):
        path = tmp_path / "off.csv"
        export_off_days_csv(compute_off_by_day(schedule, STAFF), path)
        rows = _read(path)
        assert rows[0] == {"Day": "Mon", "OffStaff": ""}
        assert rows[1] == {"Day": "Tue", "OffStaff": "Alice | Bob | Carol | Dan"}


class TestExcelExport:

    def test_sheets_and_grid(self, tmp_path, schedule):
        path = tmp_path / "roster.xlsx"
        export_to_excel(
            schedule, path,
            work_stats=compute_work_stats(schedule, STAFF),
            off_map=compute_off_by_day(schedule, STAFF),
        )
        wb = load_workbook(path)
        assert wb.sheetnames == ["Schedule", "Work Stats", "Off Days"]
        ws = wb["Schedule"]
        assert [c.value for c in ws[1]] == ["Shift"] + list(DAYS)
        assert ws["A2"].value == "Morning"
        assert ws["B2"].value == "Alice | Dan"

    def test_schedule_only(self, tmp_path, schedule):
        path = tmp_path / "roster.xlsx"
        export_to_excel(schedule, path)
        assert load_workbook(path).sheetnames == ["Schedule"]


class TestFairnessReport:

    def test_report(self, tmp_path, schedule):
        metrics = calculate_fairness_metrics(schedule, STAFF)
        path = tmp_path / "report.txt"
        text = export_fairness_report(metrics, path, compute_work_stats(schedule, STAFF), week_label="W1")
        assert path.read_text() == text
        assert "FAIRNESS AUDIT REPORT — W1" in text
        for name in STAFF:
            assert name in text
        for shift in SHIFTS:
            assert f"{shift:<16} CV=" in text
