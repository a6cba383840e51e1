"""
Serialization contract for saved progress.

Two blobs are written, each under its own key:
- the learning snapshot: stage, known symbols, current symbol, mastery
- the settings record

Session and break timers are never saved.
"""

from __future__ import annotations

import json
import math
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from .models import DrillSettings, ProgressionState, Stage

SNAPSHOT_VERSION = 1

LEARNING_STATE_KEY = "supermorse_learning_state"
SETTINGS_KEY = "supermorse_settings"

# Integer stage encoding written by earlier releases
_LEGACY_STAGES = {1: Stage.CORE, 2: Stage.REGIONAL, 3: Stage.PROSIGNS, 4: Stage.SPECIAL, 5: Stage.REMEDIAL}


class SnapshotError(ValueError):
    """A stored blob is absent, malformed or from an unknown schema."""


class LearningSnapshot(BaseModel):
    """Validated on-disk form of ProgressionState."""

    version: int = SNAPSHOT_VERSION
    stage: Stage
    known_symbols: list[str]
    current_symbol: str | None = None
    mastery: dict[str, float]

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if value != SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version {value}")
        return value

    @field_validator("stage", mode="before")
    @classmethod
    def _legacy_stage(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            if value not in _LEGACY_STAGES:
                raise ValueError(f"unknown stage {value}")
            return _LEGACY_STAGES[value]
        return value

    @field_validator("mastery")
    @classmethod
    def _clamp_mastery(cls, value: dict[str, float]) -> dict[str, float]:
        if any(math.isnan(score) for score in value.values()):
            raise ValueError("mastery scores must be numbers")
        return {symbol: max(0.0, min(1.0, score)) for symbol, score in value.items()}

    @model_validator(mode="after")
    def _check_known_set(self) -> LearningSnapshot:
        if len(set(self.known_symbols)) != len(self.known_symbols):
            raise ValueError("known_symbols contains duplicates")
        if set(self.mastery) != set(self.known_symbols):
            raise ValueError("mastery keys do not match known_symbols")
        return self


def encode_state(state: ProgressionState) -> str:
    """Serialize the persistent part of a ProgressionState."""
    snapshot = LearningSnapshot(
        stage=state.stage,
        known_symbols=list(state.known_symbols),
        current_symbol=state.current_symbol,
        mastery={symbol: state.mastery[symbol] for symbol in state.known_symbols},
    )
    return snapshot.model_dump_json()


def decode_state(blob: str | None) -> ProgressionState:
    """
    Parse a learning snapshot blob.

    Raises:
        SnapshotError: if the blob is missing or invalid
    """
    if blob is None:
        raise SnapshotError("no saved learning state")
    try:
        snapshot = LearningSnapshot.model_validate_json(blob)
    except ValidationError as exc:
        raise SnapshotError(f"invalid learning state: {exc.errors()[0]['msg']}") from exc
    return ProgressionState(
        stage=snapshot.stage,
        known_symbols=list(snapshot.known_symbols),
        current_symbol=snapshot.current_symbol,
        mastery=dict(snapshot.mastery),
    )


def encode_settings(settings: DrillSettings) -> str:
    return settings.model_dump_json()


def decode_settings(blob: str | None) -> DrillSettings:
    """
    Parse a settings blob.

    Raises:
        SnapshotError: if the blob is missing or invalid
    """
    if blob is None:
        raise SnapshotError("no saved settings")
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"settings are not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise SnapshotError("settings must be a JSON object")
    try:
        return DrillSettings.model_validate(data)
    except ValidationError as exc:
        raise SnapshotError(f"invalid settings: {exc.errors()[0]['msg']}") from exc
