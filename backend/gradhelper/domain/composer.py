"""
Message Composer for GradHelper

Validates a draft and appends the resulting message to the store.
Re-deriving threads afterwards is the caller's job.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from gradhelper.domain.messaging import (
    DraftMessage,
    Message,
    MessageStatus,
    Role,
    REPLY_PREFIX,
    STATUS_RANK,
)
from gradhelper.domain.store import MessageStore
from gradhelper.infrastructure.exceptions import ErrorKind, ValidationError


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


def reply_subject(subject: str) -> str:
    """Prefix with "Re: " unless the subject already carries it."""
    if subject.lower().startswith(REPLY_PREFIX.lower()):
        return subject
    return f"{REPLY_PREFIX}{subject}"


def _validate(draft: DraftMessage) -> None:
    if not draft.subject.strip():
        raise ValidationError(
            "Subject is required",
            kind=ErrorKind.MISSING_REQUIRED_FIELD,
            field="subject",
        )
    if not draft.content.strip():
        raise ValidationError(
            "Message content is required",
            kind=ErrorKind.MISSING_REQUIRED_FIELD,
            field="content",
        )


def _reply_target(
    store: MessageStore,
    message_id: str,
    thread_id: str,
    viewer_id: str,
) -> Optional[Message]:
    """
    Resolve the message a reply answers.

    Only a message in the reply's own thread that was addressed to the
    sender can be answered; anything else is logged and ignored.
    """
    original = store.get(message_id)
    if original is None:
        logger.warning("Reply references unknown message %s", message_id)
        return None
    if original.thread_id != thread_id:
        logger.warning(
            "Reply in thread %s references message %s from thread %s",
            thread_id, message_id, original.thread_id,
        )
        return None
    if not original.is_addressed_to(viewer_id):
        logger.warning(
            "Reply by %s references message %s addressed to %s",
            viewer_id, message_id, original.recipient_id,
        )
        return None
    return original


def _mark_replied(original: Message, now: datetime) -> None:
    if original.replied_at is None:
        original.replied_at = now
    if STATUS_RANK[original.status] < STATUS_RANK[MessageStatus.REPLIED]:
        original.status = MessageStatus.REPLIED


def send_message(
    store: MessageStore,
    draft: DraftMessage,
    viewer_id: str,
    viewer_name: str,
    viewer_role: Role,
    *,
    viewer_avatar: Optional[str] = None,
    clock: Clock = utc_now,
) -> Message:
    """
    Create a message from a draft and append it to the store.

    Replies (drafts carrying a thread_id) stay in that thread and get an
    idempotent "Re: " subject prefix; other drafts start a new thread.
    A reply_to_id is honoured only for a message of the same thread that
    was addressed to the sender; otherwise it is dropped.

    Args:
        store: Message store to append to
        draft: Composed message
        viewer_id: Sender identity
        viewer_name: Sender display name
        viewer_role: Sender role
        viewer_avatar: Optional sender avatar URL
        clock: Source of the creation timestamp

    Returns:
        The stored message

    Raises:
        ValidationError: subject or content is empty; the store is unchanged
    """
    _validate(draft)

    now = clock()
    if draft.is_reply:
        thread_id = draft.thread_id
        subject = reply_subject(draft.subject)
    else:
        thread_id = new_id()
        subject = draft.subject

    target = None
    if draft.reply_to_id:
        target = _reply_target(store, draft.reply_to_id, thread_id, viewer_id)

    message = Message(
        id=new_id(),
        thread_id=thread_id,
        sender_id=viewer_id,
        sender_name=viewer_name,
        sender_role=viewer_role,
        sender_avatar=viewer_avatar,
        recipient_id=draft.recipient_id,
        recipient_name=draft.recipient_name,
        recipient_role=draft.recipient_role,
        recipient_avatar=draft.recipient_avatar,
        subject=subject,
        content=draft.content,
        attachments=list(draft.attachments),
        priority=draft.priority,
        category=draft.category,
        status=MessageStatus.SENT,
        created_at=now,
        reply_to_id=target.id if target else None,
    )

    if target is not None:
        _mark_replied(target, now)

    store.append(message)
    logger.info(
        "Message %s sent by %s to %s in thread %s",
        message.id, viewer_id, draft.recipient_id, thread_id,
    )
    return message
