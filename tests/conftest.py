"""Shared fixtures: a scripted CodeForge API behind httpx.MockTransport."""

import pytest

from tests.helpers import FakeApi, SleepRecorder


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def sleeper():
    return SleepRecorder()
