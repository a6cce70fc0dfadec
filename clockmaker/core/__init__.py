"""
Core package providing timers and timer groups.

Architecture:
- Timer owns one handler, one delay and one state machine
- TimerGroup creates timers and forwards bulk start/stop calls
- TimerOptions holds the per-timer flags fixed at construction

Cross-cutting:
- Errors from handlers are routed, never raised
- Configuration errors raised at construction
"""

# Import order matters to avoid circular dependencies
from .errors import ClockmakerError, SchedulerError, TimerConfigurationError
from .options import TimerOptions
from .timer import Timer, TimerState
from .group import TimerGroup

__all__ = [
    # Errors
    "ClockmakerError",
    "TimerConfigurationError",
    "SchedulerError",
    # Timers
    "TimerOptions",
    "Timer",
    "TimerState",
    "TimerGroup",
]
