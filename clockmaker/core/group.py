# clockmaker/core/group.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, List, Optional, Tuple

from clockmaker.core.timer import Timer
from clockmaker.runtime.scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)


class TimerGroup:
    """
    Creates timers and starts or stops them together.

    Only timers created through create() belong to the group. Members are kept
    in creation order for the lifetime of the group.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None) -> None:
        """
        :param scheduler: Scheduler shared by every timer the group creates.
                          Defaults to an AsyncioScheduler.
        """
        self._scheduler: Scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self._timers: List[Timer] = []

    def __len__(self) -> int:
        return len(self._timers)

    def __iter__(self) -> Iterator[Timer]:
        return iter(list(self._timers))

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def timers(self) -> Tuple[Timer, ...]:
        return tuple(self._timers)

    def create(self, handler: Callable[..., Any], delay: float, options: Any = None, **kwargs: Any) -> Timer:
        """
        Create a timer on the group's scheduler and register it. The timer is
        returned stopped.

        :param handler: Timer handler, see Timer.
        :param delay: Delay in milliseconds.
        :param options: TimerOptions or mapping of options.
        :return: The new Timer.
        """
        timer = Timer(handler, delay, options, scheduler=self._scheduler, **kwargs)
        self._timers.append(timer)
        return timer

    def start_all(self) -> "TimerGroup":
        """Start every member in creation order."""
        self._apply(lambda timer: timer.start())
        return self

    def stop_all(self) -> "TimerGroup":
        """Stop every member in creation order."""
        self._apply(lambda timer: timer.stop())
        return self

    def _apply(self, operation: Callable[[Timer], Any]) -> None:
        # Visit every member even if one fails, then surface the first failure
        first_error: Optional[Exception] = None
        for timer in list(self._timers):
            try:
                operation(timer)
            except Exception as error:
                logger.debug("Group operation failed for %r: %s", timer, error)
                if first_error is None:
                    first_error = error
        if first_error is not None:
            raise first_error
