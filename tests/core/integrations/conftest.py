"""Shared fixtures for integration executor tests.

Provides a recording observer, a fake sleep that records requested delays,
a seeded RNG and a minimal platform adapter.
"""

import random

import pytest

from adbridge.core.integrations.adapters.base import AdapterConfig
from tests.core.integrations.scripted import (
    RecordingObserver,
    SleepRecorder,
    make_adapter,
)


@pytest.fixture
def fake_sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def adapter() -> AdapterConfig:
    return make_adapter()
