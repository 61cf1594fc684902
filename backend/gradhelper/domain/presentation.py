"""
Badge mappings for message status and priority.

Every enum member must have an entry; a missing one fails at import time
instead of falling through to a default color.
"""

from enum import Enum
from typing import Dict, Type

from gradhelper.domain.messaging import MessageStatus, Priority


STATUS_BADGE_COLORS: Dict[MessageStatus, str] = {
    MessageStatus.SENT: "gray",
    MessageStatus.DELIVERED: "blue",
    MessageStatus.READ: "green",
    MessageStatus.REPLIED: "purple",
}

PRIORITY_BADGE_COLORS: Dict[Priority, str] = {
    Priority.LOW: "gray",
    Priority.NORMAL: "blue",
    Priority.HIGH: "orange",
    Priority.URGENT: "red",
}


def _check_exhaustive(enum_cls: Type[Enum], mapping: Dict) -> None:
    missing = [member.value for member in enum_cls if member not in mapping]
    if missing:
        raise RuntimeError(
            f"No badge color for {enum_cls.__name__} values: {', '.join(missing)}"
        )


_check_exhaustive(MessageStatus, STATUS_BADGE_COLORS)
_check_exhaustive(Priority, PRIORITY_BADGE_COLORS)


def status_badge(status: MessageStatus) -> str:
    """Badge color for a message status."""
    return STATUS_BADGE_COLORS[status]


def priority_badge(priority: Priority) -> str:
    """Badge color for a message priority."""
    return PRIORITY_BADGE_COLORS[priority]
