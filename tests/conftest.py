# tests/conftest.py
"""Shared test fixtures.

Fixtures:
- registry: a fresh JobRegistry per test (DEFAULT_REGISTRY is never touched)
- notices / deprecation: a DeprecationState whose behavior records notices
- runner: an IterationRunner wired to both
- clock: a ManualClock for runtime budgets

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from dataclasses import dataclass, field
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from resumer.core.cursor import DeprecationState
from resumer.engine import IterationRunner
from resumer.jobs import JobRegistry

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@dataclass
class Notice:
    """One deprecation notice as received by the behavior callable."""

    message: str
    callstack: list[Any]
    horizon: str
    source_name: str


@dataclass
class NoticeRecorder:
    notices: list[Notice] = field(default_factory=list)

    def __call__(self, message: str, callstack: list[Any], horizon: str, source_name: str) -> None:
        self.notices.append(Notice(message, callstack, horizon, source_name))

    def __len__(self) -> int:
        return len(self.notices)


class ManualClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        assert seconds >= 0, "monotonic time never goes backwards"
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def registry() -> JobRegistry:
    return JobRegistry()


@pytest.fixture
def notices() -> NoticeRecorder:
    return NoticeRecorder()


@pytest.fixture
def deprecation(notices: NoticeRecorder) -> DeprecationState:
    return DeprecationState(behavior=notices)


@pytest.fixture
def runner(registry: JobRegistry, deprecation: DeprecationState) -> IterationRunner:
    return IterationRunner(registry=registry, deprecation=deprecation)
