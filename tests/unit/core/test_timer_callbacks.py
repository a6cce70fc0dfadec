# tests/unit/core/test_timer_callbacks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import Mock

import pytest

from clockmaker.core.timer import Timer


def completions(handler: Mock) -> list:
    """Completion callbacks handed to a callback-style handler, in call order."""
    return [invocation.args[-1] for invocation in handler.call_args_list]


# -----------------------------------------------------------------------------
# FIXTURES
# -----------------------------------------------------------------------------
@pytest.fixture
def callback_handler() -> Mock:
    return Mock(return_value=None)


@pytest.fixture
def async_timer(callback_handler: Mock, scheduler) -> Timer:
    """Repeating callback-style timer with a one second delay."""
    timer = Timer(callback_handler, 1000, repeat=True, asynchronous=True, scheduler=scheduler)
    yield timer
    timer.stop()


# -----------------------------------------------------------------------------
# COMPLETION SIGNALLING
# -----------------------------------------------------------------------------
def test_waits_for_callback(async_timer: Timer, callback_handler: Mock, scheduler) -> None:
    async_timer.start()

    scheduler.advance(1001)
    assert callback_handler.call_count == 1
    assert async_timer.is_running
    assert not async_timer.is_pending

    scheduler.advance(5000)
    assert callback_handler.call_count == 1


def test_reschedules_after_callback(async_timer: Timer, callback_handler: Mock, scheduler) -> None:
    callback_handler.side_effect = lambda done: scheduler.schedule_once(done, 10000)

    async_timer.start()

    scheduler.advance(1001)
    assert callback_handler.call_count == 1

    scheduler.advance(10001)
    assert callback_handler.call_count == 1
    assert async_timer.is_pending

    scheduler.advance(1001)
    assert callback_handler.call_count == 2


def test_callback_invoked_synchronously(async_timer: Timer, callback_handler: Mock, scheduler) -> None:
    callback_handler.side_effect = lambda done: done()

    async_timer.start()
    scheduler.advance(3000)

    assert callback_handler.call_count == 3


def test_one_shot_async_timer_stops_after_callback(callback_handler: Mock, scheduler) -> None:
    timer = Timer(callback_handler, 1000, asynchronous=True, scheduler=scheduler).start()

    scheduler.advance(1000)
    assert not timer.is_stopped()

    completions(callback_handler)[0]()
    assert timer.is_stopped()


def test_handler_context(callback_handler: Mock, scheduler) -> None:
    context = object()
    timer = Timer(callback_handler, 1000, {"this": context, "async": True}, scheduler=scheduler)

    timer.start()
    scheduler.advance(1001)

    callback_handler.assert_called_once()
    assert callback_handler.call_args.args[:-1] == (context,)


# -----------------------------------------------------------------------------
# STOP / START WHILE A TICK IS IN FLIGHT
# -----------------------------------------------------------------------------
def test_stop_during_tick_suppresses_reschedule(
    async_timer: Timer, callback_handler: Mock, scheduler
) -> None:
    async_timer.start()
    scheduler.advance(1000)

    async_timer.stop()
    completions(callback_handler)[0]()

    assert async_timer.is_stopped()
    assert scheduler.pending == 0
    scheduler.advance(5000)
    assert callback_handler.call_count == 1


def test_restart_during_tick_never_overlaps(
    async_timer: Timer, callback_handler: Mock, scheduler
) -> None:
    async_timer.start()
    scheduler.advance(1000)

    async_timer.stop().start()
    async_timer.synchronize()
    assert not async_timer.is_pending

    scheduler.advance(5000)
    assert callback_handler.call_count == 1

    completions(callback_handler)[0]()
    assert async_timer.is_pending

    scheduler.advance(1000)
    assert callback_handler.call_count == 2


# -----------------------------------------------------------------------------
# ERROR HANDLING
# -----------------------------------------------------------------------------
@pytest.fixture
def failing_timer(callback_handler: Mock, on_error, scheduler) -> Timer:
    return Timer(callback_handler, 1000, asynchronous=True, on_error=on_error, scheduler=scheduler)


def test_error_outside_callback(failing_timer: Timer, callback_handler: Mock, on_error, scheduler) -> None:
    error = ValueError("blah")

    callback_handler.side_effect = error
    failing_timer.start()
    scheduler.advance(1001)

    on_error.assert_called_once_with(error)
    assert failing_timer.is_stopped()


def test_error_inside_callback(failing_timer: Timer, callback_handler: Mock, on_error, scheduler) -> None:
    error = ValueError("blah")
    callback_handler.side_effect = lambda done: done(error)

    failing_timer.start()
    scheduler.advance(1001)

    on_error.assert_called_once_with(error)


def test_first_completion_signal_wins(
    failing_timer: Timer, callback_handler: Mock, on_error, scheduler
) -> None:
    first = ValueError("first")

    def signal_then_raise(done):
        done(first)
        raise RuntimeError("second")

    callback_handler.side_effect = signal_then_raise
    failing_timer.start()
    scheduler.advance(1001)

    on_error.assert_called_once_with(first)


def test_late_callback_after_raise_is_ignored(callback_handler: Mock, on_error, scheduler) -> None:
    error = ValueError("raised")

    callback_handler.side_effect = error
    timer = Timer(callback_handler, 1000, repeat=True, asynchronous=True, on_error=on_error, scheduler=scheduler)
    timer.start()
    scheduler.advance(1000)

    completions(callback_handler)[0](RuntimeError("late"))
    completions(callback_handler)[0]()

    on_error.assert_called_once_with(error)
    assert scheduler.pending == 1
    timer.stop()


def test_coroutine_callback_handler_without_loop_reports_error(on_error, scheduler) -> None:
    async def handler(done):
        done()

    timer = Timer(handler, 10, asynchronous=True, on_error=on_error, scheduler=scheduler).start()
    scheduler.advance(10)

    on_error.assert_called_once()
    assert isinstance(on_error.call_args.args[0], RuntimeError)
    assert timer.is_stopped()
