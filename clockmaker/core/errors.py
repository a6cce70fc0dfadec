# clockmaker/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Dict, Optional


class ClockmakerError(Exception):
    """
    Base exception class for errors raised by the clockmaker library.

    Handler failures are never wrapped in this hierarchy; they are routed to the
    timer's error handler untouched. These errors only report misuse of the API.

    :param message: Human readable description.
    :param details: Optional structured context about the failure.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class TimerConfigurationError(ClockmakerError, ValueError):
    """
    Raised when a timer is constructed or reconfigured with invalid values,
    such as a negative delay or a non-callable handler.
    """


class SchedulerError(ClockmakerError):
    """
    Raised when a scheduler cannot perform a request, e.g. no event loop is
    available or a virtual clock is moved backwards.
    """
