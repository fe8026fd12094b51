"""
Feed state schemas using Pydantic for validation and serialization.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

# Upstream timestamps are kept verbatim: epoch numbers or ISO-like strings
Timestamp = Union[int, float, str]


class FeedStatus(str, Enum):
    """Connection status of the live feed."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERRORING = "erroring"


class ConnectionState(BaseModel):
    """Immutable point-in-time copy of the feed state."""
    model_config = ConfigDict(frozen=True)

    status: FeedStatus = FeedStatus.DISCONNECTED
    last_error: Optional[str] = None
    latest_price: Optional[float] = None
    latest_timestamp: Optional[Timestamp] = None
    subscription_topic: str

    def evolve(self, **delta) -> "ConnectionState":
        """Return a new snapshot with ``delta`` applied on top of this one."""
        return self.model_copy(update=delta)


class PriceUpdate(BaseModel):
    """Normalized price/timestamp record extracted from one inbound frame."""
    model_config = ConfigDict(frozen=True)

    price: Optional[float] = None
    timestamp: Optional[Timestamp] = None

    @property
    def is_empty(self) -> bool:
        return self.price is None and self.timestamp is None


class SubscribeRequest(BaseModel):
    """Subscribe frame sent right after the connection opens."""
    topic: str = "subscribe"
    to: str


class FeedView(BaseModel):
    """Display-ready feed snapshot for the login page."""
    status: FeedStatus
    connected: bool
    badge: str                 # "Error" | "Connected" | "Connecting"
    dot_class: str             # CSS class of the status dot
    price_text: str
    local_time: str
    error: Optional[str] = None
    topic: str
