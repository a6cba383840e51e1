"""
Unit tests for observer hooks.
"""

from supermorse.drill.events import EventHook


def test_callbacks_run_in_subscription_order():
    hook = EventHook("test")
    calls = []
    hook.subscribe(lambda value: calls.append(("first", value)))
    hook.subscribe(lambda value: calls.append(("second", value)))

    hook.emit(3)

    assert calls == [("first", 3), ("second", 3)]


def test_failing_callback_is_skipped():
    hook = EventHook("test")
    calls = []

    def broken(value):
        raise ValueError(value)

    hook.subscribe(broken)
    hook.subscribe(calls.append)

    hook.emit("x")

    assert calls == ["x"]


def test_unsubscribe_is_idempotent():
    hook = EventHook("test")
    unsubscribe = hook.subscribe(print)
    assert len(hook) == 1
    unsubscribe()
    unsubscribe()
    assert len(hook) == 0
