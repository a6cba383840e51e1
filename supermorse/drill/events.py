"""Observer lists for scheduler notifications."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")


class EventHook(Generic[T]):
    """
    Ordered list of callbacks for one event.

    A failing observer is logged and skipped; the remaining observers still run.
    """

    def __init__(self, name: str):
        self.name = name
        self._callbacks: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a callback.

        Returns:
            A function that removes the callback again
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def emit(self, payload: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(payload)
            except Exception:
                logger.exception(f"Observer for {self.name} failed")

    def __len__(self) -> int:
        return len(self._callbacks)
