"""Shared fixtures: rosters and deterministic random sources."""

import sys
from pathlib import Path
from typing import List, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


class ConstantSource:
    """RandomSource that always returns the same value."""

    def __init__(self, value: float = 0.0):
        self.value = value
        self.calls = 0

    def next(self) -> float:
        self.calls += 1
        return self.value


class SequenceSource:
    """RandomSource that cycles through fixed values."""

    def __init__(self, values: Sequence[float]):
        self.values = list(values)
        self.i = 0

    def next(self) -> float:
        v = self.values[self.i % len(self.values)]
        self.i += 1
        return v


STAFF_14: List[str] = [
    "Alice", "Bob", "Charlie", "David", "Eve", "Frank", "Grace",
    "Heidi", "Ivan", "Judy", "Mallory", "Niaj", "Olivia", "Peggy",
]


@pytest.fixture
def staff14() -> List[str]:
    return list(STAFF_14)


@pytest.fixture
def zero_rng() -> ConstantSource:
    return ConstantSource(0.0)
