"""
Connection configuration for Waypoint contexts.
"""

from .connection import ConnectionConfig, SSLConfig, create_engine

__all__ = ["ConnectionConfig", "SSLConfig", "create_engine"]
