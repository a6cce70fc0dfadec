"""
Runtime package providing the host schedulers timers run on.

Architecture:
- Scheduler protocol: schedule_once/cancel
- AsyncioScheduler for asyncio event loops
- VirtualScheduler for manually stepped virtual time
"""

from .scheduler import AsyncioScheduler, Scheduler
from .virtual import VirtualHandle, VirtualScheduler

__all__ = ["Scheduler", "AsyncioScheduler", "VirtualScheduler", "VirtualHandle"]
