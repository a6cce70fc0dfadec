"""clockmaker: start/stop timers with live delay changes and error capture

This package wraps a host "run this callback once after a delay" primitive in a
small timer state machine.

Responsibilities:
    - One-shot and repeating timers with explicit start/stop control
    - Delay changes that apply to the next scheduled tick
    - Synchronous, callback-style and coroutine handlers
    - Per-timer error routing that never breaks the scheduling loop
    - Bulk control over groups of timers

Interactions:
    - Client code through the public API re-exported here
    - asyncio event loops through AsyncioScheduler
    - Tests and simulations through VirtualScheduler

Cross-cutting Concerns:
    Concurrency:
        - Single-threaded cooperative model; timers hold no locks
        - At most one tick pending or in flight per timer

    Error Handling:
        - Handler failures go to the timer's on_error, or are discarded
        - API misuse raises ClockmakerError subclasses

    Logging:
        - DEBUG lifecycle records under the "clockmaker" logger
        - No handlers installed by the library
"""

from clockmaker.core import (
    ClockmakerError,
    SchedulerError,
    Timer,
    TimerConfigurationError,
    TimerGroup,
    TimerOptions,
    TimerState,
)
from clockmaker.runtime import AsyncioScheduler, Scheduler, VirtualScheduler

__version__ = "0.1.0"

__all__ = [
    "Timer",
    "TimerState",
    "TimerOptions",
    "TimerGroup",
    "Scheduler",
    "AsyncioScheduler",
    "VirtualScheduler",
    "ClockmakerError",
    "TimerConfigurationError",
    "SchedulerError",
]
