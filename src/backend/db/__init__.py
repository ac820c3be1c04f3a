"""Database module."""

from db.cosmos_session import close_cosmos, get_database, init_cosmos

__all__ = ["get_database", "init_cosmos", "close_cosmos"]
