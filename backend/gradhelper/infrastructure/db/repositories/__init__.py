"""
Repository Layer for GradHelper
"""

from gradhelper.infrastructure.db.repositories.message_repository import (
    MessageRepository,
)


__all__ = [
    "MessageRepository",
]
