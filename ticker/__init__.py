"""ORTEX login page prototype with a live EUR/USD ticker."""

__version__ = "1.0.0"
