"""
Domain models for the drill scheduler.

- Stage: ordered curriculum phases
- ProgressionState: the scheduler-owned learning state
- DrillSettings: learner-facing settings with clamping validation
- ConfusionPair: one ranked (expected, observed) mistake
"""

from __future__ import annotations

import copy
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError, field_validator

# =============================================================================
# Stages
# =============================================================================


class Stage(str, Enum):
    """Curriculum stage, in teaching order."""

    CORE = "core"
    REGIONAL = "regional"
    PROSIGNS = "prosigns"
    SPECIAL = "special"
    REMEDIAL = "remedial"  # Terminal: only a reset leaves it

    def next(self) -> Stage:
        """The following stage; REMEDIAL maps to itself."""
        order = list(Stage)
        index = order.index(self)
        return order[min(index + 1, len(order) - 1)]


# =============================================================================
# Progression State
# =============================================================================


@dataclass(frozen=True)
class SessionWindow:
    """Start and end of a drill session (clock seconds)."""

    start: float
    end: float


@dataclass
class ProgressionState:
    """Learning state owned and mutated only by the scheduler."""

    stage: Stage = Stage.CORE
    known_symbols: list[str] = field(default_factory=list)
    current_symbol: str | None = None
    mastery: dict[str, float] = field(default_factory=dict)
    session_window: SessionWindow | None = None
    break_until: float | None = None
    in_session: bool = False

    def add_symbol(self, symbol: str) -> None:
        """Introduce a symbol at zero mastery and make it current."""
        if symbol not in self.mastery:
            self.known_symbols.append(symbol)
            self.mastery[symbol] = 0.0
        self.current_symbol = symbol

    def all_mastered(self, threshold: float) -> bool:
        """Whether every known symbol has reached the threshold."""
        return all(self.mastery.get(symbol, 0.0) >= threshold for symbol in self.known_symbols)

    def copy(self) -> ProgressionState:
        return copy.deepcopy(self)


# =============================================================================
# Settings
# =============================================================================

MIN_WPM = 5
MAX_WPM = 60
MIN_SESSION_SECONDS = 1.0


def _finite(value: float) -> float:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("must be a finite number")
    return value


class DrillSettings(BaseModel):
    """
    Learner settings.

    Out-of-range values are clamped. Values that cannot be coerced at all, and
    thresholds of 0 or below, are dropped by ``apply`` and the previous value
    is kept. Curriculum ids are stored as given; the scheduler resolves them
    against its curriculum provider.
    """

    curriculum: str = "international"
    wpm: int = 12
    farnsworth_spacing: bool = True
    mastery_threshold: float = 0.9
    session_duration: float = 30 * 60.0
    break_duration: float = 60 * 60.0

    @field_validator("curriculum")
    @classmethod
    def _strip_curriculum(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("curriculum id cannot be empty")
        return value

    @field_validator("wpm")
    @classmethod
    def _clamp_wpm(cls, value: int) -> int:
        return max(MIN_WPM, min(MAX_WPM, value))

    @field_validator("mastery_threshold")
    @classmethod
    def _clamp_threshold(cls, value: float) -> float:
        if _finite(value) <= 0:
            raise ValueError("mastery threshold must be above 0")
        return min(1.0, value)

    @field_validator("session_duration")
    @classmethod
    def _clamp_session(cls, value: float) -> float:
        return max(MIN_SESSION_SECONDS, _finite(value))

    @field_validator("break_duration")
    @classmethod
    def _clamp_break(cls, value: float) -> float:
        return max(0.0, _finite(value))

    @classmethod
    def from_config(cls, config: Any | None = None) -> DrillSettings:
        """Build defaults from application settings."""
        if config is None:
            from supermorse.config import get_settings

            config = get_settings()
        return cls().apply(config.get_drill_defaults())

    def apply(self, changes: Mapping[str, Any]) -> DrillSettings:
        """
        Return a copy with the given fields changed.

        Unknown fields, ``None`` values and values that fail validation are
        skipped with a warning.

        Args:
            changes: Field name to new value

        Returns:
            New DrillSettings instance
        """
        data = self.model_dump()
        for name, value in changes.items():
            if value is None:
                continue
            if name not in type(self).model_fields:
                logger.warning(f"Ignoring unknown setting {name!r}")
                continue
            try:
                data = type(self).model_validate({**data, name: value}).model_dump()
            except ValidationError as exc:
                logger.warning(f"Ignoring invalid setting {name}={value!r}: {exc.errors()[0]['msg']}")
        return type(self).model_validate(data)


# =============================================================================
# Confusions
# =============================================================================


@dataclass(frozen=True)
class ConfusionPair:
    """A symbol that was expected and what was produced instead."""

    expected: str
    observed: str
    count: int = 1
