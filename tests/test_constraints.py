"""
Tests for the post-run constraint audit
"""

import pytest

from shift_roster.config import merge_unavailability
from shift_roster.constraints import ConstraintChecker, ConstraintSeverity
from shift_roster.schedule_config import DAYS, SHIFTS

STAFF = ["A", "B", "C", "D", "E", "F"]


def _rotation_schedule():
    """Valid 1-per-shift week over six people, nobody over 5 days."""
    rotation = [
        ("A", "B", "C"), ("D", "E", "F"), ("B", "C", "A"), ("E", "F", "D"),
        ("C", "A", "B"), ("F", "D", "E"), ("A", "B", "C"),
    ]
    return {day: {s: [n] for s, n in zip(SHIFTS, names)} for day, names in zip(DAYS, rotation)}


@pytest.fixture
def checker():
    return ConstraintChecker(STAFF, None, staff_per_shift=1)


def _types(violations):
    return [v.constraint_type for v in violations]


class TestHardConstraints:

    def test_valid_schedule_has_no_hard_violations(self, checker):
        hard, _soft = checker.check_all(_rotation_schedule())
        assert hard == []

    def test_unavailable(self):
        checker = ConstraintChecker(STAFF, merge_unavailability({"A": ["Mon"]}, None))
        hard, _ = checker.check_all(_rotation_schedule())
        assert _types(hard) == ["UNAVAILABLE"]
        assert hard[0].day == "Mon"
        assert hard[0].severity == ConstraintSeverity.HARD

    def test_double_booking(self, checker):
        schedule = _rotation_schedule()
        schedule["Tue"]["Night"] = ["D"]
        hard, _ = checker.check_all(schedule)
        assert "DOUBLE_BOOKING" in _types(hard)

    def test_headcount(self):
        checker = ConstraintChecker(STAFF, None, staff_per_shift=2)
        hard, _ = checker.check_all(_rotation_schedule())
        assert _types(hard).count("HEADCOUNT") == 21

    def test_workday_cap(self, checker):
        schedule = _rotation_schedule()
        for day in DAYS:
            schedule[day]["Morning"] = ["A"] if day != "Mon" else schedule[day]["Morning"]
        hard, _ = checker.check_all(schedule)
        assert "WORKDAY_CAP" in _types(hard)

    def test_unknown_staff(self, checker):
        schedule = _rotation_schedule()
        schedule["Wed"]["Day"] = ["Zed"]
        hard, _ = checker.check_all(schedule)
        assert "UNKNOWN_STAFF" in _types(hard)

    def test_violation_str(self, checker):
        schedule = _rotation_schedule()
        schedule["Wed"]["Day"] = ["Zed"]
        hard, _ = checker.check_all(schedule)
        text = str(hard[0])
        assert text.startswith("[HARD] UNKNOWN_STAFF")
        assert "day=Wed" in text


class TestSoftConstraints:

    def test_repeated_and_night(self, checker):
        schedule = _rotation_schedule()
        schedule["Tue"] = {"Morning": ["A"], "Day": ["B"], "Night": ["C"]}
        _, soft = checker.check_all(schedule)
        assert _types(soft).count("REPEATED_SHIFT") == 2
        assert _types(soft).count("CONSECUTIVE_NIGHT") == 1

    def test_weekend_after_double_night(self, checker):
        schedule = _rotation_schedule()
        schedule["Thu"]["Night"] = ["A"]
        schedule["Fri"] = {"Morning": ["F"], "Day": ["D"], "Night": ["A"]}
        schedule["Sat"] = {"Morning": ["A"], "Day": ["B"], "Night": ["C"]}
        schedule["Sun"] = {"Morning": ["B"], "Day": ["C"], "Night": ["E"]}
        _, soft = checker.check_all(schedule)
        weekend = [v for v in soft if v.constraint_type == "WEEKEND_AFTER_DOUBLE_NIGHT"]
        assert [v.staff for v in weekend] == ["A"]
        assert weekend[0].details["leave_on_day"] is False


class TestValidateRoster:

    def test_duplicates_and_blanks(self):
        errors, _ = ConstraintChecker(["A", "B", "A", " "]).validate_roster()
        assert any("Duplicate" in e for e in errors)
        assert any("blank" in e for e in errors)

    def test_day_shortfall_warning(self):
        unavail = merge_unavailability({n: ["Sun"] for n in STAFF[:4]}, None)
        errors, warnings = ConstraintChecker(STAFF, unavail, staff_per_shift=1).validate_roster()
        assert errors == []
        assert any(w.startswith("Sun:") for w in warnings)

    def test_unknown_unavailability_warning(self):
        _, warnings = ConstraintChecker(STAFF, {"Zed": ["Mon"]}).validate_roster()
        assert any("Zed" in w for w in warnings)
