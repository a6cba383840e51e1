"""
SuperMorse drill scheduling.

Components:
- ProgressionScheduler: mastery smoothing, promotion, remedial mode, session timing
- MorseCurriculum: symbol tables and per-stage learning orders
- InputChecker: practice scoring and confusion ranking
- SQLiteBlobStore / MemoryBlobStore: saved progress
- SystemClock / ManualClock: time source and session timer
"""

from .alphabets import (
    CurriculumProvider,
    MorseCurriculum,
    decode_keyed,
    morse_to_symbol,
    read_typed,
    symbol_to_morse,
)
from .clock import Clock, ManualClock, SystemClock
from .input_checker import InputChecker, PracticeResult, score_sequence
from .models import ConfusionPair, DrillSettings, ProgressionState, SessionWindow, Stage
from .scheduler import ProgressionScheduler
from .snapshot import SnapshotError
from .state_store import BlobStore, MemoryBlobStore, SQLiteBlobStore

__all__ = [
    # Scheduling
    "ProgressionScheduler",
    "ProgressionState",
    "SessionWindow",
    "Stage",
    "DrillSettings",
    # Curriculum
    "CurriculumProvider",
    "MorseCurriculum",
    "symbol_to_morse",
    "morse_to_symbol",
    "decode_keyed",
    "read_typed",
    # Practice
    "InputChecker",
    "PracticeResult",
    "ConfusionPair",
    "score_sequence",
    # Persistence
    "BlobStore",
    "MemoryBlobStore",
    "SQLiteBlobStore",
    "SnapshotError",
    # Time
    "Clock",
    "SystemClock",
    "ManualClock",
]
