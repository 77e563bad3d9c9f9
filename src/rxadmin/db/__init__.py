"""Database clients and utilities."""

from .mongo import ensure_indexes, get_database, ping_database

__all__ = ["get_database", "ensure_indexes", "ping_database"]
