# clockmaker/core/options.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import dataclasses
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from clockmaker.core.errors import TimerConfigurationError

ErrorHandler = Callable[[Optional[BaseException]], None]

# Option keys accepted from plain mappings, including the camel-cased
# spellings used by callers porting option bags from other runtimes.
_KEY_ALIASES = {
    "context": "context",
    "this": "context",
    "repeat": "repeat",
    "asynchronous": "asynchronous",
    "async": "asynchronous",
    "on_error": "on_error",
    "onError": "on_error",
}


def validate_delay(delay: Any) -> float:
    """
    Check that a delay is a non-negative real number of milliseconds.

    :param delay: The candidate delay.
    :return: The delay, unchanged.
    :raises TimerConfigurationError: If the delay is not usable.
    """
    if isinstance(delay, bool) or not isinstance(delay, numbers.Real):
        raise TimerConfigurationError("Delay must be a number of milliseconds", {"delay": delay})
    if delay != delay or delay < 0:
        raise TimerConfigurationError("Delay must be non-negative", {"delay": delay})
    return delay


@dataclass(frozen=True)
class TimerOptions:
    """
    Behaviour flags for a Timer, fixed at construction time.

    :param context: Object the handler is bound to when invoked. None means the
                    handler is called as-is.
    :param repeat: Keep rescheduling after every completed tick until stopped.
    :param asynchronous: The handler takes a completion callback and signals the
                         end of its tick by calling it.
    :param on_error: Called after every completed tick with the tick's error, or
                     None when the tick succeeded.
    """

    context: Any = None
    repeat: bool = False
    asynchronous: bool = False
    on_error: Optional[ErrorHandler] = None

    def __post_init__(self) -> None:
        if self.on_error is not None and not callable(self.on_error):
            raise TimerConfigurationError("on_error must be callable", {"on_error": self.on_error})
        # Coerce truthy flags the same way option bags are usually treated
        object.__setattr__(self, "repeat", bool(self.repeat))
        object.__setattr__(self, "asynchronous", bool(self.asynchronous))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TimerOptions":
        """
        Build options from a plain mapping.

        Both the Python field names and the aliases ``this``, ``async`` and
        ``onError`` are accepted. Unknown keys are rejected.
        """
        values = {}
        for key, value in mapping.items():
            field_name = _KEY_ALIASES.get(key)
            if field_name is None:
                raise TimerConfigurationError(f"Unknown timer option '{key}'", {"option": key})
            values[field_name] = value
        return cls(**values)

    @classmethod
    def coerce(cls, options: Any = None, **overrides: Any) -> "TimerOptions":
        """Normalize None, a mapping or a TimerOptions instance, then apply overrides."""
        if options is None:
            resolved = cls()
        elif isinstance(options, TimerOptions):
            resolved = options
        elif isinstance(options, Mapping):
            resolved = cls.from_mapping(options)
        else:
            raise TimerConfigurationError(
                "Options must be a TimerOptions instance or a mapping",
                {"options_type": type(options).__name__},
            )
        if overrides:
            resolved = resolved.merge(**overrides)
        return resolved

    def merge(self, **overrides: Any) -> "TimerOptions":
        """Return a copy with the given fields replaced."""
        changes = {}
        for key, value in overrides.items():
            field_name = _KEY_ALIASES.get(key)
            if field_name is None:
                raise TimerConfigurationError(f"Unknown timer option '{key}'", {"option": key})
            changes[field_name] = value
        return dataclasses.replace(self, **changes)
