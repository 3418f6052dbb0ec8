"""Test configuration and fixtures."""

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Ensure the src/ directory is on sys.path so `import serialog` works without installation.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH.exists():
    sys.path.insert(0, str(SRC_PATH))

from serialog.config import reset_settings  # noqa: E402
from serialog.events import context as ndc  # noqa: E402
from serialog.events.models import LoggingEvent  # noqa: E402

EVENT_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


@pytest.fixture
def make_event():
    """Factory for logging events with fixed, known fields."""

    def _make(message="hello", **overrides):
        values = {
            "rendered_message": message,
            "timestamp": EVENT_TIME,
            "level": "INFO",
            "logger_name": "app.module.worker",
            "thread_name": "MainThread",
        }
        values.update(overrides)
        return LoggingEvent(**values)

    return _make


@pytest.fixture
def event(make_event):
    """A plain INFO event saying hello."""
    return make_event()


@pytest.fixture(autouse=True)
def clean_state():
    """Keep the diagnostic context and cached settings from leaking between tests."""
    ndc.clear()
    reset_settings()
    yield
    ndc.clear()
    reset_settings()
