"""
Thread Derivation for GradHelper

Builds conversation threads from a flat message list. Derivation is a pure
function of (messages, viewer): it is recomputed in full after every
mutation instead of being maintained incrementally, so callers only ever
depend on derive_threads() and never on how it is computed.
"""

import logging
from typing import Dict, Iterable, List

from gradhelper.domain.messaging import (
    Message,
    Participant,
    Thread,
    REPLY_PREFIX,
)


logger = logging.getLogger(__name__)


def strip_reply_prefix(subject: str) -> str:
    """Remove any leading "Re: " prefixes (case-insensitive)."""
    prefix = REPLY_PREFIX.lower()
    while subject.lower().startswith(prefix):
        subject = subject[len(prefix):]
    return subject


def _earliest(messages: List[Message]) -> Message:
    # First of the minimal created_at values, in store order
    earliest = messages[0]
    for message in messages[1:]:
        if message.created_at < earliest.created_at:
            earliest = message
    return earliest


def _latest(messages: List[Message]) -> Message:
    # Last of the maximal created_at values, in store order
    latest = messages[0]
    for message in messages[1:]:
        if message.created_at >= latest.created_at:
            latest = message
    return latest


def _participants(messages: List[Message]) -> List[Participant]:
    seen: Dict[str, Participant] = {}
    for m in messages:
        if m.sender_id not in seen:
            seen[m.sender_id] = Participant(
                id=m.sender_id,
                name=m.sender_name,
                role=m.sender_role,
                avatar=m.sender_avatar,
            )
        if m.recipient_id not in seen:
            seen[m.recipient_id] = Participant(
                id=m.recipient_id,
                name=m.recipient_name,
                role=m.recipient_role,
                avatar=m.recipient_avatar,
            )
    return list(seen.values())


def _build_thread(thread_id: str, messages: List[Message], viewer_id: str) -> Thread:
    first = _earliest(messages)
    last = _latest(messages)
    unread = sum(
        1 for m in messages
        if m.is_addressed_to(viewer_id) and not m.has_been_read
    )
    return Thread(
        id=thread_id,
        subject=strip_reply_prefix(first.subject),
        participants=_participants(messages),
        last_message=last,
        message_count=len(messages),
        unread_count=unread,
        priority=last.priority,
        category=last.category,
        is_starred=any(m.is_starred for m in messages),
        is_archived=all(m.is_archived for m in messages),
        created_at=first.created_at,
        updated_at=last.created_at,
    )


def derive_threads(messages: Iterable[Message], viewer_id: str) -> List[Thread]:
    """
    Group messages into threads for one viewer.

    Args:
        messages: Full message list in store order
        viewer_id: Identity used to compute unread counts

    Returns:
        Threads ordered by most recent activity first. Ties keep the order
        in which each thread first appeared in the message list.
    """
    groups: Dict[str, List[Message]] = {}
    for message in messages:
        groups.setdefault(message.thread_id, []).append(message)

    threads = [
        _build_thread(thread_id, members, viewer_id)
        for thread_id, members in groups.items()
    ]
    # sorted() is stable, so first-occurrence order breaks ties
    threads = sorted(threads, key=lambda t: t.updated_at, reverse=True)

    logger.debug("Derived %d threads for viewer %s", len(threads), viewer_id)
    return threads


def thread_messages(messages: Iterable[Message], thread_id: str) -> List[Message]:
    """Messages of one thread in chronological order (conversation view)."""
    members = [m for m in messages if m.thread_id == thread_id]
    return sorted(members, key=lambda m: m.created_at)


def total_unread(threads: Iterable[Thread]) -> int:
    """Sum of unread counts across threads, for the notification badge."""
    return sum(t.unread_count for t in threads)
