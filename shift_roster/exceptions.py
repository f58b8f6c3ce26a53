class SchedulingError(Exception):
    """Base class for failures of a weekly generation run. Runs are all-or-nothing."""

    pass


class InsufficientStaffError(SchedulingError):
    """Raised when the roster cannot cover one day without double shifts."""

    def __init__(self, staff_count: int, required_per_day: int, staff_per_shift: int, shift_count: int):
        self.staff_count = staff_count
        self.required_per_day = required_per_day
        self.staff_per_shift = staff_per_shift
        super().__init__(
            f"Not enough staff. Need at least {required_per_day} for "
            f"{shift_count} shifts x {staff_per_shift} per shift per day "
            f"(have {staff_count})."
        )


class InfeasiblePolicyError(SchedulingError):
    """Raised when the weekly slot demand exceeds the 5-workday cap capacity."""

    def __init__(self, staff_count: int, weekly_slots: int, max_capacity: int, min_staff_needed: int, staff_per_shift: int):
        self.staff_count = staff_count
        self.weekly_slots = weekly_slots
        self.max_capacity = max_capacity
        self.min_staff_needed = min_staff_needed
        super().__init__(
            f"Schedule not feasible with 2 off-days policy. Need at least "
            f"{min_staff_needed} staff for {staff_per_shift} per shift "
            f"(have {staff_count})."
        )


class InsufficientCandidatesError(SchedulingError):
    """Raised when a (day, shift) slot cannot be filled even after full relaxation."""

    def __init__(self, day: str, shift: str, needed: int, available: int):
        self.day = day
        self.shift = shift
        self.needed = needed
        self.available = available
        super().__init__(
            f"Insufficient candidates for {shift} on {day} "
            f"({available} eligible, {needed} needed). "
            "Increase staff list or reduce staff per shift."
        )


class ConfigError(Exception):
    """Raised when a configuration value or persisted seed is invalid."""

    pass


class RosterError(Exception):
    """Raised when a roster file has no usable staff names."""

    pass
