"""
Protocols
Lightweight Protocols for interface clarity and decoupling.
"""

from .feed import FeedConnection, LiveFeed

__all__ = [
    "FeedConnection",
    "LiveFeed",
]
