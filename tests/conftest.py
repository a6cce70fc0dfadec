# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import Mock

import pytest


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")
    config.addinivalue_line("markers", "integration: mark test as running on a real event loop")


@pytest.fixture
def scheduler():
    """A fresh virtual scheduler starting at time zero."""
    from clockmaker.runtime.virtual import VirtualScheduler

    return VirtualScheduler()


@pytest.fixture
def handler() -> Mock:
    """A synchronous handler mock returning None."""
    return Mock(return_value=None)


@pytest.fixture
def on_error() -> Mock:
    """An error handler mock."""
    return Mock(return_value=None)
