"""
Database Infrastructure Package for GradHelper

Exports database utilities for the database storage backend.
"""

from gradhelper.infrastructure.db.database import (
    DatabaseManager,
    get_db_manager,
    get_session_context,
    init_db,
    close_db,
)


__all__ = [
    "DatabaseManager",
    "get_db_manager",
    "get_session_context",
    "init_db",
    "close_db",
]
