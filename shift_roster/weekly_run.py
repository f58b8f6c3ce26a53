"""
weekly_run.py — Generate one week's roster end to end

Full orchestration:
  1. Load roster, ad hoc leave, shift hours, prior-week seed
  2. Merge unavailability + validate roster
  3. Generate the weekly schedule
  4. Check constraints (hard + soft)
  5. Compute work stats, off days, fairness metrics
  6. Export CSV, Excel, fairness report, notifications
  7. Optionally persist the fairness seed for next week

Usage:
  python -m shift_roster.weekly_run --roster config/staff_roster.csv --staff-per-shift 1
  python -m shift_roster.weekly_run --roster staff.xlsx --next-week --save-seed
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from shift_roster.config import (
    DEFAULT_ROSTER_PATH,
    DEFAULT_SEED_PATH,
    load_fairness_seed,
    load_leave_map,
    load_roster,
    merge_unavailability,
    parse_shift_hours,
    parse_staff_per_shift,
    save_fairness_seed,
)
from shift_roster.constraints import ConstraintChecker
from shift_roster.engine import (
    RandomSource,
    SystemRandomSource,
    calculate_fairness_metrics,
    compute_off_by_day,
    compute_work_stats,
    generate_weekly_schedule,
)
from shift_roster.exceptions import ConfigError, RosterError, SchedulingError
from shift_roster.exporter import (
    export_fairness_report,
    export_off_days_csv,
    export_schedule_csv,
    export_to_excel,
    export_work_stats_csv,
)
from shift_roster.notifications import build_all_messages, export_messages
from shift_roster.schedule_config import DAYS, DEFAULT_SHIFT_HOURS, SHIFTS

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
OUTPUTS_DIR = PROJECT_ROOT / "outputs"


# ---------------------------------------------------------------------------
# Visual analysis (matplotlib, optional extra)
# ---------------------------------------------------------------------------

def _generate_visual_analysis(
    metrics: Dict[str, Any],
    output_dir: Path,
    prefix: str,
) -> None:
    """Hours-per-staff bar chart and stacked per-shift breakdown."""
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        logger.warning("matplotlib not installed — skip visual analysis. Install with: pip install shift-roster[viz]")
        return

    hc = metrics.get("hours_counts", {})
    per_shift = metrics.get("per_shift", {})
    hours_mean = metrics.get("hours_mean", 0)
    names = sorted(hc.keys(), key=lambda n: hc[n], reverse=True)
    x = range(len(names))

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.bar(x, [hc[n] for n in names], color="#2e8b57", alpha=0.85, width=0.65)
    ax.axhline(hours_mean, color="crimson", linewidth=1.8, linestyle="--", label=f"Mean: {hours_mean:.1f} hrs")
    ax.set_xticks(list(x))
    ax.set_xticklabels(names, rotation=40, ha="right", fontsize=9)
    ax.set_ylabel("Hours Worked")
    ax.set_title(f"Hours by Staff\nCV = {metrics.get('hours_cv', 0):.1f}%", fontsize=13, fontweight="bold")
    ax.legend()
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(output_dir / f"{prefix}_hours_distribution.png", dpi=150)
    plt.close(fig)

    fig, ax = plt.subplots(figsize=(12, 5))
    bottom = [0] * len(names)
    for shift, color in zip(SHIFTS, ("#f4a261", "#4a90d9", "#1a3d7c")):
        vals = [per_shift.get(shift, {}).get(n, 0) for n in names]
        ax.bar(x, vals, bottom=bottom, color=color, width=0.65, label=shift)
        bottom = [b + v for b, v in zip(bottom, vals)]
    ax.set_xticks(list(x))
    ax.set_xticklabels(names, rotation=40, ha="right", fontsize=9)
    ax.set_ylabel("Shifts")
    ax.set_title("Shift Types by Staff", fontsize=13, fontweight="bold")
    ax.legend()
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    fig.savefig(output_dir / f"{prefix}_shift_breakdown.png", dpi=150)
    plt.close(fig)
    print(f"  ✓ Visual  → {prefix}_hours_distribution.png, {prefix}_shift_breakdown.png")


def _print_grid(schedule: Dict[str, Dict[str, List[str]]]) -> None:
    width = 16
    print("  " + f"{'Shift':<10}" + "".join(f"{d:<{width}}" for d in DAYS))
    for shift in SHIFTS:
        cells = [", ".join(schedule[d][shift])[: width - 1] for d in DAYS]
        print("  " + f"{shift:<10}" + "".join(f"{c:<{width}}" for c in cells))


# ---------------------------------------------------------------------------
# Main orchestrator
# ---------------------------------------------------------------------------

def run_week(
    roster_path: Optional[Path] = None,
    staff_per_shift: Optional[int] = None,
    leave_path: Optional[Path] = None,
    shift_hours: Optional[Dict[str, int]] = None,
    use_rotation_bias: bool = False,
    seed_path: Optional[Path] = None,
    save_seed: bool = False,
    output_dir: Path = OUTPUTS_DIR,
    rng: Optional[RandomSource] = None,
    week_label: str = "",
    visual: bool = False,
) -> Dict[str, Any]:
    """
    Generate, audit and export one weekly roster.

    Args:
        roster_path:       CSV/Excel roster (name + optional unavailable days).
        staff_per_shift:   Overrides the roster's staff-per-shift column (default 1).
        leave_path:        Ad hoc leave CSV (name, days).
        shift_hours:       {shift: hours}; defaults to 8/8/8.
        use_rotation_bias: Seed shift-type history from seed_path.
        seed_path:         Fairness seed JSON.
        save_seed:         Persist this run's stats to seed_path.
        output_dir:        Directory for output files.
        rng:               RandomSource for reproducible runs.

    Returns:
        Dict with schedule, stats, work_stats, off_by_day, metrics,
        violations, messages, output paths.

    Raises:
        SchedulingError subclasses, ConfigError, RosterError, FileNotFoundError
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    seed_path = Path(seed_path) if seed_path else DEFAULT_SEED_PATH
    hours = dict(shift_hours or DEFAULT_SHIFT_HOURS)
    prefix = f"roster_{week_label}" if week_label else "roster"
    sep = "=" * 70

    print(f"\n{sep}")
    print(f"  WEEKLY ROSTER{(' — ' + week_label) if week_label else ''}")
    print(f"{sep}\n")

    # ── 1. Load inputs ─────────────────────────────────────────────────────
    print("Step 1/6: Loading inputs...")
    roster = load_roster(roster_path)
    per_shift = staff_per_shift or roster.staff_per_shift or 1
    leave = load_leave_map(leave_path) if leave_path else {}
    prior = load_fairness_seed(seed_path) if use_rotation_bias else None
    print(
        f"  ✓ {len(roster.staff)} staff | {per_shift} per shift | "
        f"{len(leave)} on ad hoc leave | rotation bias: {'on' if prior else 'off'}"
    )

    # ── 2. Merge + validate ────────────────────────────────────────────────
    print("\nStep 2/6: Validating inputs...")
    unavailability = merge_unavailability(roster.unavailability, leave)
    checker = ConstraintChecker(roster.staff, unavailability, staff_per_shift=per_shift)
    errors, warnings = checker.validate_roster()
    for err in errors:
        print(f"  ✗ ROSTER ERROR: {err}")
    for w in warnings:
        print(f"  ⚠ WARNING: {w}")
    if errors:
        raise RosterError("; ".join(errors))
    if not warnings:
        print("  ✓ Roster valid")

    # ── 3. Generate ────────────────────────────────────────────────────────
    print("\nStep 3/6: Generating schedule...")
    result = generate_weekly_schedule(
        roster.staff,
        per_shift,
        prior_week_stats=prior,
        unavailability=unavailability,
        rng=rng,
    )
    schedule = result["schedule"]
    print(f"  ✓ {len(DAYS) * len(SHIFTS)} slots filled | {len(result['relaxations'])} relaxed")
    for day, shift, tier in result["relaxations"]:
        print(f"    {day} {shift}: {tier}")

    # ── 4. Constraints ─────────────────────────────────────────────────────
    print("\nStep 4/6: Checking constraints...")
    hard, soft = checker.check_all(schedule)
    status = "✓" if not hard else "✗"
    print(f"  {status} Hard violations: {len(hard)}")
    print(f"    Soft violations: {len(soft)}")

    # ── 5. Stats ───────────────────────────────────────────────────────────
    print("\nStep 5/6: Computing stats...")
    work_stats = compute_work_stats(schedule, roster.staff, hours)
    off_by_day = compute_off_by_day(schedule, roster.staff)
    metrics = calculate_fairness_metrics(schedule, roster.staff, hours)
    print(f"  ✓ Hours CV: {metrics['hours_cv']:.2f}% | mean {metrics['hours_mean']:.1f}h")

    # ── 6. Export ──────────────────────────────────────────────────────────
    print("\nStep 6/6: Exporting outputs...")
    outputs = {
        "schedule_csv":   output_dir / f"{prefix}_schedule.csv",
        "work_stats_csv": output_dir / f"{prefix}_work_stats.csv",
        "off_days_csv":   output_dir / f"{prefix}_off_days.csv",
        "excel":          output_dir / f"{prefix}.xlsx",
        "report":         output_dir / f"{prefix}_fairness_report.txt",
        "violations":     output_dir / f"{prefix}_violations.txt",
        "messages":       output_dir / f"{prefix}_messages.txt",
    }
    export_schedule_csv(schedule, outputs["schedule_csv"])
    export_work_stats_csv(work_stats, outputs["work_stats_csv"])
    export_off_days_csv(off_by_day, outputs["off_days_csv"])
    export_to_excel(schedule, outputs["excel"], work_stats=work_stats, off_map=off_by_day)
    export_fairness_report(metrics, outputs["report"], work_stats=work_stats, week_label=week_label)

    messages = build_all_messages(schedule, roster.staff, week_label or None, hours)
    export_messages(messages, outputs["messages"])

    with open(outputs["violations"], "w") as f:
        f.write("=== Constraint Violations ===\n\n")
        f.write(f"HARD ({len(hard)}):\n")
        for v in hard:
            f.write(f"  {v}\n")
        f.write(f"\nSOFT ({len(soft)}):\n")
        for v in soft:
            f.write(f"  {v}\n")

    for key, path in outputs.items():
        print(f"  ✓ {key:<15} {path.name}")

    if save_seed:
        save_fairness_seed(result["stats"], seed_path)
        print(f"  ✓ Seed saved: {seed_path}")

    # ── Summary ────────────────────────────────────────────────────────────
    print(f"\n{sep}")
    print("  SCHEDULE")
    print(f"{sep}")
    _print_grid(schedule)

    if visual:
        _generate_visual_analysis(metrics, output_dir, prefix)

    print(f"\n{sep}\n")

    return {
        "schedule":        schedule,
        "stats":           result["stats"],
        "relaxations":     result["relaxations"],
        "work_stats":      work_stats,
        "off_by_day":      off_by_day,
        "metrics":         metrics,
        "hard_violations": hard,
        "soft_violations": soft,
        "messages":        messages,
        "outputs":         outputs,
    }


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a fair weekly Morning/Day/Night roster"
    )
    parser.add_argument("--roster",          default=None, help=f"Roster CSV/Excel (default: {DEFAULT_ROSTER_PATH.name})")
    parser.add_argument("--staff-per-shift", default=None, help="Staff per shift (overrides roster column)")
    parser.add_argument("--leave",           default=None, help="Ad hoc leave CSV (name, days)")
    parser.add_argument("--hours-morning",   default=DEFAULT_SHIFT_HOURS["Morning"], help="Morning shift hours")
    parser.add_argument("--hours-day",       default=DEFAULT_SHIFT_HOURS["Day"],     help="Day shift hours")
    parser.add_argument("--hours-night",     default=DEFAULT_SHIFT_HOURS["Night"],   help="Night shift hours")
    parser.add_argument("--next-week",       action="store_true", help="Bias rotation using the saved seed")
    parser.add_argument("--seed-file",       default=None, help=f"Fairness seed JSON (default: {DEFAULT_SEED_PATH.name})")
    parser.add_argument("--save-seed",       action="store_true", help="Persist this week's stats as next week's seed")
    parser.add_argument("--seed",            type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument("--week-label",      default="", help="Label used in file names and messages")
    parser.add_argument("--output-dir",      default=None, help="Output directory (default: outputs/)")
    parser.add_argument("--visual",          action="store_true", help="Generate matplotlib charts")
    parser.add_argument("--verbose", "-v",   action="store_true", help="Debug logging (per-slot decisions)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        hours = parse_shift_hours(args.hours_morning, args.hours_day, args.hours_night)
        per_shift = parse_staff_per_shift(args.staff_per_shift) if args.staff_per_shift else None
        run_week(
            roster_path=Path(args.roster) if args.roster else None,
            staff_per_shift=per_shift,
            leave_path=Path(args.leave) if args.leave else None,
            shift_hours=hours,
            use_rotation_bias=args.next_week,
            seed_path=Path(args.seed_file) if args.seed_file else None,
            save_seed=args.save_seed,
            output_dir=Path(args.output_dir) if args.output_dir else OUTPUTS_DIR,
            rng=SystemRandomSource(args.seed),
            week_label=args.week_label,
            visual=args.visual,
        )
    except (SchedulingError, ConfigError, RosterError, FileNotFoundError) as e:
        print(f"\n  ✗ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
