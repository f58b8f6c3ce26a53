"""
End-to-end tests for run_week / CLI
"""

import json

import pytest

from conftest import STAFF_14
from shift_roster.engine import SystemRandomSource
from shift_roster.exceptions import InfeasiblePolicyError
from shift_roster.weekly_run import main, run_week


@pytest.fixture
def roster_csv(tmp_path):
    path = tmp_path / "staff.csv"
    lines = ["Name,Unavailable Days"] + [f"{n}," for n in STAFF_14]
    lines[1] = "Alice,Mon;Tue"
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def leave_csv(tmp_path):
    path = tmp_path / "leave.csv"
    path.write_text("name,days\nBob,Sat\n")
    return path


class TestRunWeek:

    def test_full_run(self, tmp_path, roster_csv, leave_csv):
        out = tmp_path / "out"
        seed_path = tmp_path / "seed.json"
        result = run_week(
            roster_path=roster_csv,
            staff_per_shift=1,
            leave_path=leave_csv,
            shift_hours={"Morning": 6, "Day": 8, "Night": 10},
            seed_path=seed_path,
            save_seed=True,
            output_dir=out,
            rng=SystemRandomSource(7),
            week_label="wk1",
        )
        assert result["hard_violations"] == []
        for path in result["outputs"].values():
            assert path.exists(), path
        assert all(
            "Alice" not in result["schedule"][d][s]
            for d in ("Mon", "Tue") for s in ("Morning", "Day", "Night")
        )
        assert all("Bob" not in names for names in result["schedule"]["Sat"].values())
        assert sum(e["days_worked"] for e in result["work_stats"].values()) == 21

        saved = json.loads(seed_path.read_text())
        assert saved["shift_type_counts"] == result["stats"]["shift_type_counts"]

        # next week: seeded from the saved stats
        second = run_week(
            roster_path=roster_csv,
            staff_per_shift=1,
            use_rotation_bias=True,
            seed_path=seed_path,
            output_dir=out,
            rng=SystemRandomSource(8),
        )
        total = sum(sum(c.values()) for c in second["stats"]["shift_type_counts"].values())
        assert total == 42

    def test_infeasible_roster_raises(self, tmp_path):
        path = tmp_path / "staff.csv"
        path.write_text("Name\nA\nB\nC\nD\n")
        with pytest.raises(InfeasiblePolicyError):
            run_week(roster_path=path, staff_per_shift=1, output_dir=tmp_path / "out")


class TestMain:

    def test_main_success(self, tmp_path, roster_csv):
        code = main([
            "--roster", str(roster_csv),
            "--staff-per-shift", "1",
            "--seed", "3",
            "--output-dir", str(tmp_path / "out"),
            "--seed-file", str(tmp_path / "seed.json"),
            "--save-seed",
        ])
        assert code == 0
        assert (tmp_path / "seed.json").exists()

    def test_main_reports_errors(self, tmp_path, capsys):
        path = tmp_path / "staff.csv"
        path.write_text("Name\nA\nB\n")
        code = main(["--roster", str(path), "--output-dir", str(tmp_path / "out")])
        assert code == 1
        assert "Not enough staff" in capsys.readouterr().out

    def test_main_reports_empty_roster(self, tmp_path, capsys):
        path = tmp_path / "staff.csv"
        path.write_text("")
        code = main(["--roster", str(path), "--output-dir", str(tmp_path / "out")])
        assert code == 1
        assert "No rows found" in capsys.readouterr().out

    def test_main_accepts_unquoted_day_lists(self, tmp_path, roster_csv):
        lines = roster_csv.read_text().splitlines()
        lines[2] = "Bob,Sat, Sun"
        roster_csv.write_text("\n".join(lines) + "\n")
        out = tmp_path / "out"
        code = main(["--roster", str(roster_csv), "--seed", "5", "--output-dir", str(out)])
        assert code == 0
        schedule_csv = (out / "roster_schedule.csv").read_text().splitlines()
        weekend = [row for row in schedule_csv if row.startswith(("Sat,", "Sun,"))]
        assert len(weekend) == 6
        assert not any("Bob" in row for row in weekend)

    def test_main_rejects_bad_hours(self, tmp_path, roster_csv):
        code = main(["--roster", str(roster_csv), "--hours-night", "0", "--output-dir", str(tmp_path)])
        assert code == 1
