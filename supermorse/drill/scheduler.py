"""
Progression Scheduler.

Turns per-symbol accuracy reports into an evolving known set:
- Exponentially smoothed mastery per known symbol
- Promotion: introduce one new symbol once every known symbol is mastered,
  cascading through empty stages within a single update
- Remedial mode once the curriculum is exhausted
- Timed sessions followed by a recommended break

Stage order: core -> regional -> prosigns -> special -> remedial
"""

from __future__ import annotations

import math
import random
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from loguru import logger

from .alphabets import CurriculumProvider, MorseCurriculum
from .clock import Cancellable, Clock, SystemClock
from .events import EventHook
from .input_checker import InputChecker, PracticeResult
from .models import DrillSettings, ProgressionState, SessionWindow, Stage
from .snapshot import (
    LEARNING_STATE_KEY,
    SETTINGS_KEY,
    SnapshotError,
    decode_settings,
    decode_state,
    encode_settings,
    encode_state,
)
from .state_store import BlobStore, MemoryBlobStore

# Weight kept from the previous score; the new observation gets the rest.
SMOOTHING = 0.7
BOOTSTRAP_SYMBOLS = 2
HIGHER_SPEED_MASTERY = 1.0


class ProgressionScheduler:
    """
    Adaptive drill scheduler for one learner.

    All public methods are synchronous, run under one re-entrant lock and
    never raise. Persistence happens after each mutation; observers are
    notified last, domain events before ``state_updated``.
    """

    def __init__(
        self,
        curriculum: CurriculumProvider | None = None,
        confusions: Any | None = None,
        store: BlobStore | None = None,
        clock: Clock | None = None,
        settings: DrillSettings | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            curriculum: Ordered symbols per stage (built-in Morse curricula if None)
            confusions: Anything with ``ranked_confusion_pairs()`` (empty ranking if None)
            store: Blob store for saved progress (in-memory if None)
            clock: Time source and timer factory (wall clock if None)
            settings: Initial settings, overridden by saved ones on initialize
            rng: Random source for practice sequences
        """
        self.curriculum = curriculum or MorseCurriculum()
        self.confusions = confusions if confusions is not None else InputChecker()
        self.store = store if store is not None else MemoryBlobStore()
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()

        self._settings = settings or DrillSettings()
        self._state = ProgressionState()
        self._lock = threading.RLock()
        self._timer: Cancellable | None = None
        self._timer_generation = 0
        self._closed = False

        self.state_updated: EventHook[ProgressionState] = EventHook("state_updated")
        self.symbol_introduced: EventHook[str] = EventHook("symbol_introduced")
        self.session_ended: EventHook[ProgressionState] = EventHook("session_ended")

    # =========================================================================
    # Observers
    # =========================================================================

    def on_state_updated(self, callback: Callable[[ProgressionState], None]) -> Callable[[], None]:
        return self.state_updated.subscribe(callback)

    def on_symbol_introduced(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self.symbol_introduced.subscribe(callback)

    def on_session_ended(self, callback: Callable[[ProgressionState], None]) -> Callable[[], None]:
        return self.session_ended.subscribe(callback)

    @property
    def state(self) -> ProgressionState:
        """Copy of the current state with ``in_session`` evaluated against the clock."""
        with self._lock:
            snapshot = self._state.copy()
            window = snapshot.session_window
            snapshot.in_session = (
                self._state.in_session and window is not None and self.clock.now() < window.end
            )
            return snapshot

    # =========================================================================
    # Initialization
    # =========================================================================

    def initialize(self, **options: Any) -> ProgressionState:
        """
        Restore saved progress or bootstrap a fresh learner.

        Explicit options win over restored settings. An explicit curriculum
        that differs from the saved one discards the saved progress.

        Args:
            **options: DrillSettings fields (``curriculum``, ``wpm``, ...)

        Returns:
            The resulting state
        """
        with self._lock:
            changes = self._checked_changes(options)
            if self._restore():
                previous = self._settings
                self._settings = previous.apply(changes)
                if self._settings.curriculum != previous.curriculum:
                    logger.info(
                        f"Saved progress is for {previous.curriculum!r}, "
                        f"starting fresh on {self._settings.curriculum!r}"
                    )
                    self._bootstrap()
                else:
                    logger.info(
                        f"Restored progress: stage={self._state.stage.value}, "
                        f"{len(self._state.known_symbols)} known symbols"
                    )
            else:
                resolved = self._checked_changes({"curriculum": self._settings.curriculum})
                self._settings = self._settings.apply({**resolved, **changes})
                self._bootstrap()
                logger.info(f"Bootstrapped {self._settings.curriculum!r} with {self._state.known_symbols}")

            self._notify()
            return self.state

    def _bootstrap(self) -> None:
        """Reset to the first symbols of the Core stage; cancels any session."""
        self._cancel_timer()
        self._state = ProgressionState()
        for symbol in self._ordered_symbols(Stage.CORE):
            if len(self._state.known_symbols) >= BOOTSTRAP_SYMBOLS:
                break
            if symbol not in self._state.mastery:
                self._state.known_symbols.append(symbol)
                self._state.mastery[symbol] = 0.0
        self._state.current_symbol = self._state.known_symbols[0] if self._state.known_symbols else None

    def _restore(self) -> bool:
        """Install the saved snapshot and settings; session timing is kept."""
        try:
            restored = decode_state(self.store.get(LEARNING_STATE_KEY))
            settings = decode_settings(self.store.get(SETTINGS_KEY))
        except SnapshotError as exc:
            logger.info(f"No usable saved progress: {exc}")
            return False
        except Exception:
            logger.exception("Failed to read saved progress")
            return False

        restored.session_window = self._state.session_window
        restored.break_until = self._state.break_until
        restored.in_session = self._state.in_session
        self._state = restored
        self._settings = settings
        return True

    # =========================================================================
    # Sessions
    # =========================================================================

    def start_session(self) -> float:
        """
        Open a timed session and schedule its end.

        A session already in progress is restarted with a fresh deadline; the
        previous timer is cancelled so only one is ever live.

        Returns:
            Seconds of recommended break that were skipped (0.0 if none)
        """
        with self._lock:
            now = self.clock.now()
            skipped = self.get_break_time_remaining()
            if skipped > 0:
                logger.warning(f"Starting session during recommended break ({skipped:.0f}s remaining)")
            if self._state.in_session:
                logger.warning("Session already active, restarting it")

            self._cancel_timer()
            window = SessionWindow(start=now, end=now + self._settings.session_duration)
            self._state.session_window = window
            self._state.in_session = True
            self._state.break_until = None
            self._schedule_timer(window.end - now)

            logger.info(f"Session started for {self._settings.session_duration:.0f}s")
            self._notify()
            return skipped

    def end_session(self) -> bool:
        """
        Close the active session and start the recommended break.

        Returns:
            False if no session was active (nothing changes)
        """
        with self._lock:
            if not self._state.in_session or self._state.session_window is None:
                logger.debug("end_session ignored: no active session")
                return False

            self._cancel_timer()
            now = self.clock.now()
            self._state.session_window = SessionWindow(start=self._state.session_window.start, end=now)
            self._state.in_session = False
            self._state.break_until = now + self._settings.break_duration

            self.save_progress()
            logger.info(f"Session ended, break for {self._settings.break_duration:.0f}s")
            self.session_ended.emit(self.state)
            self._notify()
            return True

    def get_session_time_remaining(self) -> float:
        """Seconds left in the active session, 0 when idle."""
        with self._lock:
            window = self._state.session_window
            if not self._state.in_session or window is None:
                return 0.0
            return max(0.0, window.end - self.clock.now())

    def get_break_time_remaining(self) -> float:
        """Seconds left of the recommended break, 0 when none is pending."""
        with self._lock:
            if self._state.break_until is None:
                return 0.0
            return max(0.0, self._state.break_until - self.clock.now())

    def _schedule_timer(self, delay: float) -> None:
        self._timer_generation += 1
        generation = self._timer_generation
        self._timer = self.clock.call_later(delay, lambda: self._on_session_timer(generation))
        logger.debug(f"Session timer {generation} scheduled in {delay:.0f}s")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._timer_generation += 1

    def _on_session_timer(self, generation: int) -> None:
        with self._lock:
            if self._closed or generation != self._timer_generation:
                logger.debug(f"Ignoring stale session timer {generation}")
                return
            self._timer = None
            self.end_session()

    def close(self) -> None:
        """Cancel the outstanding session timer; later timer callbacks are ignored."""
        with self._lock:
            self._closed = True
            self._cancel_timer()

    def __enter__(self) -> ProgressionScheduler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # Progress
    # =========================================================================

    def update_progress(self, report: Mapping[str, float] | PracticeResult | None) -> str | None:
        """
        Smooth mastery with a practice report, then evaluate promotion.

        ``mastery = 0.7 * mastery + 0.3 * accuracy`` for every reported symbol
        that is already known; other symbols are ignored.

        Args:
            report: Symbol to accuracy in [0, 1], or a PracticeResult

        Returns:
            The newly introduced symbol, if promotion introduced one
        """
        with self._lock:
            for symbol, accuracy in self._observations(report).items():
                previous = self._state.mastery.get(symbol)
                if previous is None:
                    continue
                score = SMOOTHING * previous + (1 - SMOOTHING) * accuracy
                self._state.mastery[symbol] = max(0.0, min(1.0, score))
                logger.debug(f"Mastery {symbol!r}: {previous:.3f} -> {self._state.mastery[symbol]:.3f}")

            introduced = None
            if self._state.stage is not Stage.REMEDIAL:
                introduced = self._evaluate_promotion()

            self.save_progress()
            if introduced is not None:
                self.symbol_introduced.emit(introduced)
            self._notify()
            return introduced

    def _observations(self, report: Mapping[str, float] | PracticeResult | None) -> dict[str, float]:
        if report is None:
            return {}
        if isinstance(report, PracticeResult):
            report = report.symbol_accuracy
        if not isinstance(report, Mapping):
            logger.warning(f"Ignoring progress report of type {type(report).__name__}")
            return {}

        observations: dict[str, float] = {}
        for symbol, accuracy in report.items():
            try:
                value = float(accuracy)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric accuracy for {symbol!r}: {accuracy!r}")
                continue
            if math.isnan(value):
                logger.warning(f"Ignoring NaN accuracy for {symbol!r}")
                continue
            observations[symbol] = max(0.0, min(1.0, value))
        return observations

    def _evaluate_promotion(self) -> str | None:
        """
        Introduce the next symbol if every known symbol is mastered.

        Empty stages are skipped in the same call. The walk is bounded by the
        number of stages, so an empty curriculum lands in remedial mode.
        """
        if not self._state.all_mastered(self._settings.mastery_threshold):
            return None

        stage = self._state.stage
        for _ in range(len(Stage)):
            if stage is Stage.REMEDIAL:
                break
            symbol = self._next_symbol(stage)
            if symbol is not None:
                self._state.stage = stage
                self._state.add_symbol(symbol)
                logger.info(f"Introduced {symbol!r} ({stage.value} stage)")
                return symbol
            stage = stage.next()
            logger.info(f"Stage exhausted, advancing to {stage.value}")

        self._enter_remedial()
        return None

    def _next_symbol(self, stage: Stage) -> str | None:
        known = set(self._state.known_symbols)
        for symbol in self._ordered_symbols(stage):
            if symbol not in known:
                return symbol
        return None

    def _enter_remedial(self) -> None:
        """Switch to remedial mode, focusing on the most confused known symbol."""
        self._state.stage = Stage.REMEDIAL
        focus = None
        try:
            pairs = list(self.confusions.ranked_confusion_pairs())
        except Exception:
            logger.exception("Confusion ranking failed")
            pairs = []
        known = set(self._state.known_symbols)
        for pair in pairs:
            expected = pair.get("expected") if isinstance(pair, Mapping) else getattr(pair, "expected", None)
            if expected in known:
                focus = expected
                break
        if focus is None and self._state.known_symbols:
            focus = self._state.known_symbols[0]
        self._state.current_symbol = focus
        logger.info(f"Entered remedial mode focusing on {focus!r}")

    def _ordered_symbols(self, stage: Stage) -> Sequence[str]:
        try:
            return self.curriculum.ordered_symbols(self._settings.curriculum, stage)
        except Exception:
            logger.exception(f"Curriculum lookup failed for {stage.value}")
            return ()

    # =========================================================================
    # Practice
    # =========================================================================

    def generate_practice_sequence(self, length: int = 5) -> list[str]:
        """
        Draw symbols uniformly with replacement from the known set.

        Returns:
            ``length`` symbols, or an empty list if nothing is known yet
        """
        with self._lock:
            try:
                count = int(length)
            except (TypeError, ValueError):
                logger.warning(f"Invalid practice length {length!r}")
                return []
            known = list(self._state.known_symbols)
            if not known or count <= 0:
                return []
            return [self.rng.choice(known) for _ in range(count)]

    def is_ready_for_higher_speed(self) -> bool:
        """Whether every Core symbol has reached full mastery."""
        with self._lock:
            return all(
                self._state.mastery.get(symbol, 0.0) >= HIGHER_SPEED_MASTERY
                for symbol in self._ordered_symbols(Stage.CORE)
            )

    # =========================================================================
    # Settings
    # =========================================================================

    def get_settings(self) -> DrillSettings:
        with self._lock:
            return self._settings.model_copy()

    def update_settings(self, changes: Mapping[str, Any] | None = None, **kwargs: Any) -> DrillSettings:
        """
        Apply the supplied settings, leaving the others untouched.

        Switching curriculum discards progression and bootstraps the new
        curriculum's Core stage.

        Returns:
            The updated settings
        """
        with self._lock:
            previous = self._settings
            self._settings = previous.apply(self._checked_changes({**(changes or {}), **kwargs}))
            if self._settings.curriculum != previous.curriculum:
                logger.info(f"Curriculum changed to {self._settings.curriculum!r}, resetting progress")
                self._bootstrap()

            self.save_progress()
            self._notify()
            return self._settings.model_copy()

    def _checked_changes(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Map curriculum ids to the provider's own spelling; drop ids it does not know."""
        checked = dict(changes)
        curriculum = checked.get("curriculum")
        if curriculum is None:
            return checked
        try:
            known_ids = {str(cid).lower(): cid for cid in self.curriculum.curriculum_ids()}
        except Exception:
            logger.exception("Curriculum listing failed")
            known_ids = {}
        resolved = known_ids.get(str(curriculum).strip().lower())
        if resolved is None:
            logger.warning(f"Ignoring unknown curriculum {curriculum!r}")
            del checked["curriculum"]
        else:
            checked["curriculum"] = resolved
        return checked

    # =========================================================================
    # Persistence
    # =========================================================================

    def save_progress(self) -> bool:
        """
        Write the learning snapshot and settings to the store.

        Returns:
            False if either write failed (state stays in memory)
        """
        with self._lock:
            try:
                saved_state = self.store.put(LEARNING_STATE_KEY, encode_state(self._state))
                saved_settings = self.store.put(SETTINGS_KEY, encode_settings(self._settings))
            except Exception:
                logger.exception("Failed to save progress")
                return False
            if not (saved_state and saved_settings):
                logger.warning("Progress not saved, keeping it in memory only")
                return False
            return True

    def load_progress(self) -> bool:
        """
        Replace the in-memory state with the saved one.

        Returns:
            False if nothing usable was saved (state unchanged)
        """
        with self._lock:
            if not self._restore():
                return False
            self._notify()
            return True

    def delete_progress(self) -> bool:
        """
        Remove saved progress and restart from the bootstrap state.

        Settings are kept in memory.

        Returns:
            False if the store failed to delete
        """
        with self._lock:
            deleted = True
            for key in (LEARNING_STATE_KEY, SETTINGS_KEY):
                try:
                    self.store.delete(key)
                except Exception:
                    logger.exception(f"Failed to delete {key!r}")
                    deleted = False
            self._bootstrap()
            logger.info("Progress deleted")
            self._notify()
            return deleted

    def _notify(self) -> None:
        self.state_updated.emit(self.state)
