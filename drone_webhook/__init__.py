"""Signed webhook delivery for Drone events."""

__version__ = "0.1.0"
