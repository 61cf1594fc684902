"""
Read-State Updater for GradHelper

Status and flag transitions applied to every message of a thread.

Starring and archiving are thread-level concepts stored on each message.
These functions are the only writers of those flags: they set the flag on
all members so the "any starred" / "all archived" read rules stay
consistent without a separate thread table.
"""

import logging
from typing import List

from gradhelper.domain.composer import Clock, utc_now
from gradhelper.domain.messaging import Message, MessageStatus, STATUS_RANK
from gradhelper.domain.store import MessageStore
from gradhelper.infrastructure.exceptions import ErrorKind, NotFoundError


logger = logging.getLogger(__name__)


def _thread_members(store: MessageStore, thread_id: str) -> List[Message]:
    members = store.for_thread(thread_id)
    if not members:
        logger.warning("Thread %s not found", thread_id)
        raise NotFoundError(
            f"Thread {thread_id} not found",
            kind=ErrorKind.THREAD_NOT_FOUND,
            thread_id=thread_id,
        )
    return members


def _advance(message: Message, status: MessageStatus) -> bool:
    """Move a message forward to status; never moves it backwards."""
    if STATUS_RANK[message.status] >= STATUS_RANK[status]:
        return False
    message.status = status
    return True


def mark_thread_read(
    store: MessageStore,
    thread_id: str,
    viewer_id: str,
    *,
    clock: Clock = utc_now,
) -> int:
    """
    Mark every unread message addressed to the viewer in a thread as read.

    Messages the viewer sent are left alone. Calling this twice in a row
    updates nothing the second time.

    Returns:
        Number of messages updated

    Raises:
        NotFoundError: no message carries thread_id
    """
    members = _thread_members(store, thread_id)
    now = clock()
    updated = 0
    for message in members:
        if not message.is_addressed_to(viewer_id):
            continue
        if _advance(message, MessageStatus.READ):
            if message.read_at is None:
                message.read_at = now
            updated += 1

    logger.debug("Marked %d messages read in thread %s", updated, thread_id)
    return updated


def mark_thread_delivered(store: MessageStore, thread_id: str, viewer_id: str) -> int:
    """Advance sent messages addressed to the viewer to delivered."""
    members = _thread_members(store, thread_id)
    updated = 0
    for message in members:
        if message.is_addressed_to(viewer_id) and _advance(message, MessageStatus.DELIVERED):
            updated += 1
    return updated


def toggle_thread_star(store: MessageStore, thread_id: str, new_state: bool) -> None:
    """Set is_starred on every message of the thread."""
    for message in _thread_members(store, thread_id):
        message.is_starred = new_state


def toggle_thread_archive(store: MessageStore, thread_id: str, new_state: bool) -> None:
    """Set is_archived on every message of the thread."""
    for message in _thread_members(store, thread_id):
        message.is_archived = new_state
