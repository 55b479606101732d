"""Shared pytest fixtures for lazylode tests."""

from __future__ import annotations

import os
import tempfile

# Keep tests away from the real ~/.config/lazylode.
os.environ.setdefault("LAZYLODE_CONFIG_DIR", tempfile.mkdtemp(prefix="lazylode-test-"))

import pytest

from lazylode.backends.mock import MockBackend
from lazylode.core.dispatch import InputDispatcher
from lazylode.shared.debug_events import get_recorder
from lazylode.stores.settings import SettingsStore


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the settings singleton and debug history between tests."""
    SettingsStore.reset_instance()
    recorder = get_recorder()
    recorder.set_enabled(False)
    recorder.clear()
    yield
    SettingsStore.reset_instance()
    recorder.set_enabled(False)
    recorder.clear()


@pytest.fixture
def dispatcher() -> InputDispatcher:
    return InputDispatcher()


@pytest.fixture
def mock_backend() -> MockBackend:
    return MockBackend("shop")


@pytest.fixture
def connected(mock_backend: MockBackend) -> InputDispatcher:
    """Dispatcher with the shop mock attached; requests run inline."""
    dispatcher = InputDispatcher()
    dispatcher.attach_backend(mock_backend)
    return dispatcher
