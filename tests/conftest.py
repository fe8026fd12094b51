"""
Pytest Configuration
Provides fake upstream connections, deterministic time, and metrics isolation.
"""

import asyncio
import pytest
from typing import Callable, List, Optional

from ticker.observability.metrics import get_metrics_registry
from ticker.schemas.feed import ConnectionState, FeedStatus
from ticker.util.async_tools import get_deterministic_clock

TEST_URL = "ws://feed.test/?client=guest:guest"
TEST_TOPIC = "EURUSD:CUR"

_CLOSE = object()


class FakeConnection:
    """In-memory stand-in for an upstream WebSocket connection."""

    def __init__(self):
        self.sent: List[str] = []
        self.closed = False
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def send(self, message: str) -> None:
        self.sent.append(message)

    def push(self, frame) -> None:
        """Deliver one inbound frame."""
        self._inbox.put_nowait(frame)

    def drop(self) -> None:
        """Simulate the peer closing the connection."""
        self._inbox.put_nowait(_CLOSE)

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self._inbox.get()
        if frame is _CLOSE:
            raise StopAsyncIteration
        return frame

    async def close(self) -> None:
        self.closed = True
        self._inbox.put_nowait(_CLOSE)


class FakeConnector:
    """Connector returning FakeConnections; can be told to fail the next opens."""

    def __init__(self):
        self.urls: List[str] = []
        self.connections: List[FakeConnection] = []
        self.failures = 0

    async def __call__(self, url: str) -> FakeConnection:
        self.urls.append(url)
        if self.failures:
            self.failures -= 1
            raise OSError("connection refused")
        conn = FakeConnection()
        self.connections.append(conn)
        return conn

    @property
    def latest(self) -> Optional[FakeConnection]:
        return self.connections[-1] if self.connections else None


class StaticFeed:
    """LiveFeed that serves a fixed snapshot to the presentation layer."""

    def __init__(self, state: Optional[ConnectionState] = None):
        self.snapshot = state or ConnectionState(subscription_topic=TEST_TOPIC)
        self.topic = self.snapshot.subscription_topic
        self.listeners: List[Callable[[ConnectionState], None]] = []
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    def subscribe(self, listener):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def is_connected(self) -> bool:
        return self.snapshot.status == FeedStatus.CONNECTED

    def get_health_metrics(self):
        return {"status": self.snapshot.status.value, "topic": self.topic, "reconnects": 0}


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def deterministic_time():
    """Provide deterministic time for tests."""
    clock = get_deterministic_clock()
    clock.freeze()

    yield clock

    clock.unfreeze()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Each test starts with an empty metrics registry."""
    get_metrics_registry().reset()
    yield
