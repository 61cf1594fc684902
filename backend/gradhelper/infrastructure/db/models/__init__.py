"""
SQLModel ORM Models for GradHelper

Import models here to register them with SQLModel.metadata.
"""

from gradhelper.infrastructure.db.models.message import MessageRecord


__all__ = [
    "MessageRecord",
]
