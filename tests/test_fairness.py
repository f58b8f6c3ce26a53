"""
Tests for FairnessTracker (seeding, recording, seed snapshot)
"""

import pytest

from shift_roster.exceptions import ConfigError
from shift_roster.fairness import FairnessTracker, normalize_seed
from shift_roster.schedule_config import SHIFTS


class TestFairnessTracker:

    @pytest.fixture
    def tracker(self):
        return FairnessTracker(["Alice", "Bob"])

    def test_starts_at_zero(self, tracker):
        for name in ("Alice", "Bob"):
            assert tracker.weekly_assigned(name) == 0
            assert tracker.last_shift(name) is None
            assert all(tracker.shift_count(name, s) == 0 for s in SHIFTS)

    def test_record_assignment(self, tracker):
        tracker.record_assignment("Alice", "Night")
        tracker.record_assignment("Alice", "Morning")
        assert tracker.weekly_assigned("Alice") == 2
        assert tracker.shift_count("Alice", "Night") == 1
        assert tracker.shift_count("Alice", "Morning") == 1
        assert tracker.last_shift("Alice") == "Morning"
        assert tracker.weekly_assigned("Bob") == 0

    def test_membership(self, tracker):
        assert "Alice" in tracker
        assert "Zed" not in tracker


class TestSeeding:

    def test_shift_counts_copied_weekly_not(self):
        seed = {
            "weekly_counts": {"Alice": 5},
            "shift_type_counts": {"Alice": {"Morning": 1, "Day": 2, "Night": 2}},
        }
        tracker = FairnessTracker(["Alice", "Bob"], seed)
        assert tracker.weekly_assigned("Alice") == 0
        assert tracker.shift_count("Alice", "Day") == 2
        assert tracker.last_shift("Alice") is None
        assert tracker.shift_count("Bob", "Day") == 0

    def test_missing_shift_keys_default_zero(self):
        tracker = FairnessTracker(["Alice"], {"shift_type_counts": {"Alice": {"Night": 3}}})
        assert tracker["Alice"].shift_counts == {"Morning": 0, "Day": 0, "Night": 3}

    def test_unknown_staff_in_seed_ignored(self):
        tracker = FairnessTracker(["Alice"], {"shift_type_counts": {"Gone": {"Night": 3}}})
        assert "Gone" not in tracker
        assert tracker.to_seed()["shift_type_counts"] == {"Alice": {"Morning": 0, "Day": 0, "Night": 0}}

    def test_seed_not_mutated(self):
        prior = {"shift_type_counts": {"Alice": {"Morning": 1, "Day": 0, "Night": 0}}}
        tracker = FairnessTracker(["Alice"], prior)
        tracker.record_assignment("Alice", "Morning")
        assert prior["shift_type_counts"]["Alice"]["Morning"] == 1
        assert tracker.shift_count("Alice", "Morning") == 2

    def test_camel_case_seed(self):
        seed = {"weeklyCounts": {"Alice": 4}, "shiftTypeCounts": {"Alice": {"Night": 4}}}
        tracker = FairnessTracker(["Alice", "Bob"], seed)
        assert tracker["Alice"].shift_counts == {"Morning": 0, "Day": 0, "Night": 4}
        assert tracker.weekly_assigned("Alice") == 0

    @pytest.mark.parametrize("seed", [
        {"counts": {"Alice": {"Night": 1}}},
        {"shift_type_counts": {"Alice": 3}},
        {"shiftTypeCounts": {"Alice": {"Night": "lots"}}},
        {"shift_type_counts": ["Alice"]},
    ])
    def test_bad_seed_rejected(self, seed):
        with pytest.raises(ConfigError):
            FairnessTracker(["Alice"], seed)


class TestNormalizeSeed:

    def test_both_spellings_agree(self):
        snake = {"weekly_counts": {"Bob": 2}, "shift_type_counts": {"Bob": {"Day": 2}}}
        camel = {"weeklyCounts": {"Bob": 2}, "shiftTypeCounts": {"Bob": {"Day": 2}}}
        assert normalize_seed(snake) == normalize_seed(camel) == {
            "weekly_counts": {"Bob": 2},
            "shift_type_counts": {"Bob": {"Morning": 0, "Day": 2, "Night": 0}},
        }

    def test_snake_case_wins(self):
        seed = {"shift_type_counts": {"Bob": {"Day": 1}}, "shiftTypeCounts": {"Bob": {"Day": 9}}}
        assert normalize_seed(seed)["shift_type_counts"]["Bob"]["Day"] == 1


class TestToSeed:

    def test_snapshot_is_independent(self):
        tracker = FairnessTracker(["Alice"])
        tracker.record_assignment("Alice", "Day")
        snap = tracker.to_seed()
        tracker.record_assignment("Alice", "Day")
        assert snap == {
            "weekly_counts": {"Alice": 1},
            "shift_type_counts": {"Alice": {"Morning": 0, "Day": 1, "Night": 0}},
        }
