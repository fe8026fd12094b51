"""
Feed view model for the login page ticker card.
"""

from ticker.formatting import PLACEHOLDER, format_price, format_timestamp
from ticker.schemas.feed import ConnectionState, FeedStatus, FeedView

DOT_ERROR = "status-dot err"
DOT_CONNECTED = "status-dot on"
DOT_IDLE = "status-dot"


def build_feed_view(state: ConnectionState) -> FeedView:
    """Derive the display snapshot. An error wins over connected, else connecting."""
    connected = state.status == FeedStatus.CONNECTED
    if state.last_error:
        badge, dot_class = "Error", DOT_ERROR
    elif connected:
        badge, dot_class = "Connected", DOT_CONNECTED
    else:
        badge, dot_class = "Connecting", DOT_IDLE

    return FeedView(
        status=state.status,
        connected=connected,
        badge=badge,
        dot_class=dot_class,
        price_text=format_price(state.latest_price),
        local_time=format_timestamp(state.latest_timestamp) if state.latest_timestamp else PLACEHOLDER,
        error=state.last_error,
        topic=state.subscription_topic,
    )
