# clockmaker/core/timer.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import types
from enum import Enum
from typing import Any, Callable, Optional

from clockmaker.core.errors import TimerConfigurationError
from clockmaker.core.options import ErrorHandler, TimerOptions, validate_delay
from clockmaker.runtime.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)


class TimerState(Enum):
    """Lifecycle states of a Timer."""

    STOPPED = "stopped"
    STARTED = "started"


class _TickCompletion:
    """
    One-shot completion signal handed to callback-style handlers.

    Only the first call has an effect; later calls are ignored.
    """

    __slots__ = ("_timer", "_signalled")

    def __init__(self, timer: "Timer") -> None:
        self._timer = timer
        self._signalled = False

    @property
    def signalled(self) -> bool:
        return self._signalled

    def __call__(self, error: Optional[BaseException] = None) -> None:
        if self._signalled:
            return
        self._signalled = True
        self._timer._after_tick(error)


def _task_error(task: "asyncio.Future[Any]") -> Optional[BaseException]:
    if task.cancelled():
        return asyncio.CancelledError()
    return task.exception()


class Timer:
    """
    A cancellable, optionally repeating, delay-based callback.

    The timer schedules its own ticks through a Scheduler. Each tick runs the
    handler, waits for it to complete, reports the outcome to the error handler
    and then decides whether to schedule the next tick. At most one tick is
    pending or in flight at any time.

    Handler failures never propagate out of the timer. They are passed to
    ``on_error`` when one is configured and discarded otherwise.

    Example::

        scheduler = VirtualScheduler()
        timer = Timer(poll, 1000, repeat=True, scheduler=scheduler).start()
        scheduler.advance(3000)  # poll() ran three times
        timer.stop()
    """

    def __init__(
        self,
        handler: Callable[..., Any],
        delay: float,
        options: Any = None,
        *,
        scheduler: Optional[Scheduler] = None,
        **kwargs: Any,
    ) -> None:
        """
        :param handler: Callable run on every tick. Called with no arguments, or
                        with a completion callback when ``asynchronous`` is set.
        :param delay: Milliseconds to wait before each tick.
        :param options: TimerOptions instance or mapping of options.
        :param scheduler: Host scheduler. Defaults to an AsyncioScheduler.
        :param kwargs: Individual option overrides (``repeat=True`` etc.).
        :raises TimerConfigurationError: If the handler, delay or options are invalid.
        """
        if not callable(handler):
            raise TimerConfigurationError("Timer handler must be callable", {"handler": handler})

        self._handler = handler
        self._delay = validate_delay(delay)
        self._options = TimerOptions.coerce(options, **kwargs)
        self._scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()

        if self._options.context is not None:
            self._bound_handler = types.MethodType(handler, self._options.context)
        else:
            self._bound_handler = handler

        self._state = TimerState.STOPPED
        self._pending: Any = None
        self._tick_count = 0
        self._running = False
        self._task: Optional[asyncio.Future[Any]] = None

    def __repr__(self) -> str:
        return (
            f"<Timer handler={getattr(self._handler, '__qualname__', self._handler)!s} "
            f"delay={self._delay} state={self._state.value} ticks={self._tick_count}>"
        )

    # -------------------------------------------------------------------------
    # Read-only attributes
    # -------------------------------------------------------------------------
    @property
    def handler(self) -> Callable[..., Any]:
        return self._handler

    @property
    def delay(self) -> float:
        """Delay in milliseconds used for the next scheduling decision."""
        return self._delay

    @property
    def context(self) -> Any:
        """The receiver the handler is invoked against; the handler itself if unset."""
        if self._options.context is not None:
            return self._options.context
        return self._handler

    @property
    def repeat(self) -> bool:
        return self._options.repeat

    @property
    def asynchronous(self) -> bool:
        return self._options.asynchronous

    @property
    def on_error(self) -> Optional[ErrorHandler]:
        return self._options.on_error

    @property
    def options(self) -> TimerOptions:
        return self._options

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def tick_count(self) -> int:
        """Number of ticks scheduled so far, including one that is pending."""
        return self._tick_count

    @property
    def is_pending(self) -> bool:
        """True while a future tick is scheduled."""
        return self._pending is not None

    @property
    def is_running(self) -> bool:
        """True while a tick has begun and not yet completed."""
        return self._running

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------
    def start(self) -> "Timer":
        """
        Start the timer. Calling start() on a started timer does nothing.

        A one-shot timer that has already scheduled its tick stays stopped,
        even if it was stopped before that tick fired.

        :return: self
        """
        if self._state is TimerState.STARTED:
            return self

        self._state = TimerState.STARTED
        logger.debug("Starting %r", self)
        self._schedule_next_tick()
        return self

    def stop(self) -> "Timer":
        """
        Stop the timer, cancelling any pending tick. Safe to call repeatedly.

        A handler that is already running is not interrupted, but no further
        tick is scheduled once it completes.

        :return: self
        """
        self._cancel_pending()
        if self._state is TimerState.STARTED:
            logger.debug("Stopping %r", self)
        self._state = TimerState.STOPPED
        return self

    def set_delay(self, delay: float) -> "Timer":
        """
        Change the delay used for subsequently scheduled ticks. A tick that is
        already pending keeps its original due time.

        :param delay: New delay in milliseconds.
        :return: self
        """
        self._delay = validate_delay(delay)
        return self

    def synchronize(self) -> "Timer":
        """
        Restart the wait for the pending tick from now, using the current delay,
        without running the handler. Does nothing when stopped or while a tick
        is running.

        :return: self
        """
        if self._state is TimerState.STARTED and self._cancel_pending():
            logger.debug("Synchronizing %r", self)
            self._schedule_once()
        return self

    def is_stopped(self) -> bool:
        return self._state is TimerState.STOPPED

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _cancel_pending(self) -> bool:
        if self._pending is None:
            return False
        self._scheduler.cancel(self._pending)
        self._pending = None
        return True

    def _schedule_once(self) -> None:
        try:
            self._pending = self._scheduler.schedule_once(self._tick, self._delay)
        except Exception:
            self._state = TimerState.STOPPED
            raise
        logger.debug("Scheduled tick %d of %r in %sms", self._tick_count, self, self._delay)

    def _schedule_next_tick(self) -> None:
        """
        Single place deciding whether another tick gets scheduled. Runs after
        start() and every completed tick.
        """
        if self._state is TimerState.STOPPED:
            return

        if self._tick_count > 0 and not self._options.repeat:
            logger.debug("One-shot %r has used its tick, stopping for good", self)
            self._state = TimerState.STOPPED
            return

        # The running tick reschedules itself on completion
        if self._running:
            return

        self._tick_count += 1
        self._schedule_once()

    def _tick(self) -> None:
        self._pending = None
        self._running = True
        completion = _TickCompletion(self)

        try:
            if self._options.asynchronous:
                result = self._bound_handler(completion)
            else:
                result = self._bound_handler()
        except Exception as error:
            completion(error)
            return

        if inspect.isawaitable(result):
            # Callback-style handlers report success through the callback
            self._await_result(result, completion, signal_success=not self._options.asynchronous)
        elif not self._options.asynchronous:
            completion()

    def _await_result(self, awaitable: Any, completion: _TickCompletion, signal_success: bool) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as error:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            completion(error)
            return

        self._task = asyncio.ensure_future(awaitable, loop=loop)
        self._task.add_done_callback(functools.partial(self._task_done, completion, signal_success))

    def _task_done(self, completion: _TickCompletion, signal_success: bool, task: "asyncio.Future[Any]") -> None:
        if self._task is task:
            self._task = None
        error = _task_error(task)
        if error is not None or signal_success:
            completion(error)

    def _after_tick(self, error: Optional[BaseException]) -> None:
        try:
            if self._options.on_error is not None:
                self._options.on_error(error)
        finally:
            self._pending = None
            self._running = False
            self._schedule_next_tick()
