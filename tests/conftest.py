"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from supermorse.drill import (  # noqa: E402
    ConfusionPair,
    DrillSettings,
    ManualClock,
    MemoryBlobStore,
    ProgressionScheduler,
    ProgressionState,
    Stage,
)
from supermorse.drill.snapshot import (  # noqa: E402
    LEARNING_STATE_KEY,
    SETTINGS_KEY,
    encode_settings,
    encode_state,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class StubCurriculum:
    """Curriculum with explicit per-stage orders; missing stages are empty."""

    def __init__(self, orders=None, curricula=("x", "y")):
        self.orders = orders or {}
        self.curricula = curricula
        self.calls = []

    def ordered_symbols(self, curriculum_id, stage):
        self.calls.append((curriculum_id, stage))
        order = self.orders.get(curriculum_id, self.orders)
        if isinstance(order, dict) and stage in order:
            return order[stage]
        return []

    def curriculum_ids(self):
        return list(self.curricula)


class StubConfusions:
    """Fixed confusion ranking."""

    def __init__(self, pairs=None):
        self.pairs = list(pairs or [])

    def ranked_confusion_pairs(self):
        return list(self.pairs)


@pytest.fixture
def clock():
    return ManualClock(start=1_000.0)


@pytest.fixture
def store():
    return MemoryBlobStore()


@pytest.fixture
def curriculum():
    """Curriculum 'x' with Core a-d, no Regional, one prosign and one special."""
    return StubCurriculum(
        {
            "x": {
                Stage.CORE: ["a", "b", "c", "d"],
                Stage.PROSIGNS: ["AR"],
                Stage.SPECIAL: ["?"],
            },
            "y": {
                Stage.CORE: ["p", "q", "r"],
            },
        }
    )


@pytest.fixture
def confusions():
    return StubConfusions()


@pytest.fixture
def make_scheduler(clock, store, curriculum, confusions):
    """Factory for schedulers sharing the fixture collaborators."""

    def factory(**overrides):
        options = {
            "curriculum": curriculum,
            "confusions": confusions,
            "store": store,
            "clock": clock,
            "settings": DrillSettings(curriculum="x", session_duration=600, break_duration=3600),
            "rng": random.Random(7),
        }
        options.update(overrides)
        return ProgressionScheduler(**options)

    return factory


@pytest.fixture
def scheduler(make_scheduler):
    """Initialized scheduler on curriculum 'x'."""
    sched = make_scheduler()
    sched.initialize()
    yield sched
    sched.close()


@pytest.fixture
def seed(store):
    """Write a saved snapshot so ``initialize`` restores it."""

    def writer(mastery, stage=Stage.CORE, current=None, settings=None):
        known = list(mastery)
        state = ProgressionState(
            stage=stage,
            known_symbols=known,
            current_symbol=current if current is not None else (known[-1] if known else None),
            mastery=dict(mastery),
        )
        store.put(LEARNING_STATE_KEY, encode_state(state))
        store.put(
            SETTINGS_KEY,
            encode_settings(settings or DrillSettings(curriculum="x", session_duration=600, break_duration=3600)),
        )
        return state

    return writer


@pytest.fixture
def seeded(make_scheduler, seed):
    """Factory: seed a snapshot, then build and initialize a scheduler on it."""
    built = []

    def factory(mastery, stage=Stage.CORE, current=None, settings=None, **overrides):
        seed(mastery, stage=stage, current=current, settings=settings)
        sched = make_scheduler(**overrides)
        sched.initialize()
        built.append(sched)
        return sched

    yield factory
    for sched in built:
        sched.close()


@pytest.fixture
def confusion_pair():
    return ConfusionPair(expected="S", observed="H")
