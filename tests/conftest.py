"""Shared fixtures for ODIN Navigator tests."""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from odin_navigator.autonomy.governor import AutonomyGovernor
from odin_navigator.common.config.settings import Config, reset_config


class FakeClock:
    """Manually advanced, timezone-aware clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    """Clock pinned to a fixed mission time."""
    return FakeClock(datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def config():
    """Config built from a clean environment."""
    reset_config()
    with patch.dict(os.environ, {}, clear=True):
        yield Config()
    reset_config()


@pytest.fixture
def governor(config, clock):
    """Governor with the seed boundary table and the fake clock."""
    return AutonomyGovernor(config=config, clock=clock)
