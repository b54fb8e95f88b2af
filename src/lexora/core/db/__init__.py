"""Database utilities - engine and session."""

from src.lexora.core.db.engine import dispose_engine, get_engine
from src.lexora.core.db.session import get_session

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
]
