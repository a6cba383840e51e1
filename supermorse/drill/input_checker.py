"""
Practice Input Checker.

Scores a practiced sequence against what was expected:
- Overall and per-symbol accuracy for the scheduler's mastery update
- Confusion tracking (expected vs. produced) for remedial ranking
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from .models import ConfusionPair

# =============================================================================
# Practice Result
# =============================================================================


@dataclass
class PracticeResult:
    """Outcome of one practice round."""

    expected: list[str]
    produced: list[str]
    symbol_accuracy: dict[str, float] = field(default_factory=dict)
    mistakes: list[tuple[str, str]] = field(default_factory=list)

    @property
    def correct_count(self) -> int:
        return sum(1 for want, got in zip(self.expected, self.produced) if want == got)

    @property
    def accuracy(self) -> float:
        """Fraction of positions produced correctly."""
        if not self.expected:
            return 0.0
        return self.correct_count / len(self.expected)


def score_sequence(expected: Sequence[str], produced: Sequence[str]) -> PracticeResult:
    """
    Score produced symbols position by position.

    Missing positions count as wrong; extra produced symbols are ignored.

    Args:
        expected: Symbols that were played
        produced: Symbols the learner keyed

    Returns:
        PracticeResult with per-symbol accuracy over the expected symbols
    """
    totals: dict[str, int] = {}
    correct: dict[str, int] = {}
    mistakes: list[tuple[str, str]] = []

    for index, want in enumerate(expected):
        got = produced[index] if index < len(produced) else ""
        totals[want] = totals.get(want, 0) + 1
        if got == want:
            correct[want] = correct.get(want, 0) + 1
        else:
            mistakes.append((want, got))

    return PracticeResult(
        expected=list(expected),
        produced=list(produced[: len(expected)]),
        symbol_accuracy={symbol: correct.get(symbol, 0) / total for symbol, total in totals.items()},
        mistakes=mistakes,
    )


# =============================================================================
# Input Checker
# =============================================================================


class InputChecker:
    """
    Tracks the practice round in progress and accumulated confusions.

    Implements the scheduler's confusion-ranking collaborator.
    """

    def __init__(self):
        self.expected: list[str] = []
        self.produced: list[str] = []
        self.active = False
        self._confusions: dict[tuple[str, str], int] = {}

    def start(self, expected: Sequence[str]) -> None:
        """Begin a practice round for the given sequence."""
        self.expected = list(expected)
        self.produced = []
        self.active = bool(self.expected)

    def process(self, symbol: str) -> PracticeResult | None:
        """
        Record one produced symbol.

        Returns:
            The PracticeResult when this symbol completes the round, else None
        """
        if not self.active:
            logger.debug(f"Ignoring {symbol!r}: no practice round in progress")
            return None
        self.produced.append(symbol)
        if len(self.produced) < len(self.expected):
            return None
        return self.finish()

    def finish(self) -> PracticeResult:
        """Score the round (missing symbols count as wrong) and record confusions."""
        result = score_sequence(self.expected, self.produced)
        for want, got in result.mistakes:
            if got:
                self.record_confusion(want, got)
        self.active = False
        logger.debug(f"Practice round scored {result.accuracy:.0%} over {len(result.expected)} symbols")
        return result

    def record_confusion(self, expected: str, observed: str) -> None:
        key = (expected, observed)
        self._confusions[key] = self._confusions.get(key, 0) + 1

    def clear_confusions(self) -> None:
        """Forget all recorded confusions, e.g. after switching curriculum."""
        self._confusions.clear()

    def ranked_confusion_pairs(self) -> list[ConfusionPair]:
        """Confusions, most frequent first (ties keep first-seen order)."""
        ranked = sorted(
            enumerate(self._confusions.items()),
            key=lambda item: (-item[1][1], item[0]),
        )
        return [ConfusionPair(expected, observed, count) for _, ((expected, observed), count) in ranked]

    # =========================================================================
    # Persistence
    # =========================================================================

    def to_dict(self) -> dict:
        """Confusion counts in first-seen order."""
        return {
            "confusions": [
                {"expected": expected, "observed": observed, "count": count}
                for (expected, observed), count in self._confusions.items()
            ]
        }

    @classmethod
    def from_dict(cls, data: dict) -> InputChecker:
        """Restore counts written by ``to_dict``; malformed entries are skipped."""
        checker = cls()
        for entry in data.get("confusions", []):
            try:
                key = (str(entry["expected"]), str(entry["observed"]))
                count = int(entry["count"])
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed confusion entry {entry!r}")
                continue
            if count > 0:
                checker._confusions[key] = checker._confusions.get(key, 0) + count
        return checker
