import asyncio

import pytest

from telemetry import TelemetryFeed


class FakeWebcam:
    """Webcam double that records calls and optionally waits before answering."""

    def __init__(self, feed=None, grant=True, error=None):
        self.feed = feed
        self.grant = grant
        self.error = error
        self.acquire_calls = 0
        self.release_calls = 0
        self.gate = None

    async def acquire(self):
        self.acquire_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if self.grant and self.feed is not None:
            self.feed.set_camera_state(ready=True, facing_camera=True)
        return self.grant

    def release(self):
        self.release_calls += 1
        if self.feed is not None:
            self.feed.set_camera_state(ready=False)


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class LastChoice:
    """Deterministic stand-in for random.Random."""

    def choice(self, seq):
        return seq[-1]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def feed():
    return TelemetryFeed()


@pytest.fixture
def live_feed():
    feed = TelemetryFeed()
    feed.set_camera_state(ready=True, facing_camera=True)
    return feed


@pytest.fixture
def clock():
    return FakeClock()
