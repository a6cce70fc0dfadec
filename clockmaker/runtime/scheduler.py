# clockmaker/runtime/scheduler.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from clockmaker.core.errors import SchedulerError


@runtime_checkable
class Scheduler(Protocol):
    """
    Host primitive used by timers to run a callback once after a delay.

    Methods:
        schedule_once(callback, delay_ms): Arrange for callback to run no earlier
            than delay_ms milliseconds from now. Returns a handle.
        cancel(handle): Prevent a scheduled callback from running.

    Runtime Invariants:
    - Each scheduled callback runs at most once.
    - Callbacks run on the scheduler's single thread of control.

    Error Handling:
    - cancel() on a handle that already fired or was already cancelled is a
      no-op and must not raise.
    """

    def schedule_once(self, callback: Callable[[], None], delay_ms: float) -> Any:
        """Schedule callback after delay_ms milliseconds and return a handle."""
        ...

    def cancel(self, handle: Any) -> None:
        """Cancel a handle returned by schedule_once."""
        ...


class AsyncioScheduler:
    """
    Scheduler backed by an asyncio event loop's ``call_later``.

    If no loop is given, the loop running at scheduling time is used, so a
    single instance can be created outside of a coroutine and used later from
    inside one.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        :param loop: Event loop to schedule on. Defaults to the running loop.
        """
        self._loop = loop

    @property
    def loop(self) -> Optional[asyncio.AbstractEventLoop]:
        """The loop bound at construction, if any."""
        return self._loop

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise SchedulerError("No running event loop to schedule on") from exc

    def schedule_once(self, callback: Callable[[], None], delay_ms: float) -> asyncio.TimerHandle:
        """
        Schedule callback on the event loop.

        :param callback: Zero-argument callable.
        :param delay_ms: Delay in milliseconds.
        :return: The loop's TimerHandle.
        :raises SchedulerError: If no loop was given and none is running.
        """
        return self._resolve_loop().call_later(delay_ms / 1000.0, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        # TimerHandle.cancel() is already idempotent
        handle.cancel()
