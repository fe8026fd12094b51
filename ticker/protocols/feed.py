"""
Live feed protocol interfaces.
Defines what the presentation layer may read from a feed, and what the feed
needs from an upstream connection.
"""

from typing import Any, AsyncIterator, Callable, Dict, Protocol, Union

from ticker.schemas.feed import ConnectionState

Frame = Union[str, bytes]


class FeedConnection(Protocol):
    """An open upstream streaming connection."""

    async def send(self, message: str) -> None:
        """Send one text frame."""
        ...

    def __aiter__(self) -> AsyncIterator[Frame]:
        """Iterate inbound frames until the connection closes."""
        ...

    async def close(self) -> None:
        """Close the connection."""
        ...


class LiveFeed(Protocol):
    """A live feed as seen by the app: lifecycle plus read-only state."""

    async def start(self) -> None:
        """Start the feed."""
        ...

    async def stop(self) -> None:
        """Stop the feed."""
        ...

    @property
    def snapshot(self) -> ConnectionState:
        """Current immutable feed state."""
        ...

    def subscribe(self, listener: Callable[[ConnectionState], None]) -> Callable[[], None]:
        """Register a change listener; returns the matching unsubscribe."""
        ...

    def is_connected(self) -> bool:
        """Check if feed is connected."""
        ...

    def get_health_metrics(self) -> Dict[str, Any]:
        """Get health metrics."""
        ...
