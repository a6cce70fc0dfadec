# clockmaker/runtime/virtual.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Callable, List

from clockmaker.core.errors import SchedulerError


@dataclass(order=True)
class VirtualHandle:
    """
    Entry in the virtual scheduler's queue. Ordered by due time, then by
    scheduling order so equal due times fire first-in first-out.
    """

    due: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class VirtualScheduler:
    """
    Deterministic scheduler driven by an explicit virtual clock.

    Nothing runs until advance() or run_pending() is called. Useful for tests
    and for simulations that step time manually.
    """

    def __init__(self, start_ms: float = 0) -> None:
        """
        :param start_ms: Initial value of the virtual clock, in milliseconds.
        """
        self._now = start_ms
        self._counter = 0
        self._heap: List[VirtualHandle] = []

    @property
    def now(self) -> float:
        """Current virtual time in milliseconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have neither fired nor been cancelled."""
        return sum(1 for handle in self._heap if handle.active)

    def schedule_once(self, callback: Callable[[], None], delay_ms: float) -> VirtualHandle:
        handle = VirtualHandle(due=self._now + max(delay_ms, 0), sequence=self._counter, callback=callback)
        self._counter += 1
        heapq.heappush(self._heap, handle)
        return handle

    def cancel(self, handle: VirtualHandle) -> None:
        handle.cancelled = True

    def advance(self, ms: float) -> int:
        """
        Move the clock forward, firing every callback that falls due on the way.

        Callbacks scheduled while advancing are fired too if their due time is
        inside the window. The clock reads each callback's due time while it
        runs, and the final target afterwards.

        :param ms: Milliseconds to advance by.
        :return: Number of callbacks fired.
        :raises SchedulerError: If ms is negative.
        """
        if ms < 0:
            raise SchedulerError("Cannot advance a virtual clock backwards", {"ms": ms})
        target = self._now + ms
        fired = 0
        while self._heap and self._heap[0].due <= target:
            handle = heapq.heappop(self._heap)
            if not handle.active:
                continue
            self._now = handle.due
            handle.fired = True
            fired += 1
            handle.callback()
        self._now = target
        return fired

    def run_pending(self) -> int:
        """Advance to the latest scheduled due time, firing everything on the way."""
        live = [handle.due for handle in self._heap if handle.active]
        if not live:
            return 0
        return self.advance(max(live) - self._now)
