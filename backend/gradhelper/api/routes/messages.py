"""
Message Routes for GradHelper

API endpoints for conversation threads and messages between students and
administrators.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from gradhelper.api.dependencies import get_current_viewer, get_messaging_service
from gradhelper.domain.messaging import (
    ALL_CATEGORIES,
    Attachment,
    Category,
    DraftMessage,
    FilterOptions,
    Message,
    Priority,
    Role,
    StatusFilter,
    Thread,
    Viewer,
)
from gradhelper.domain.presentation import priority_badge, status_badge
from gradhelper.infrastructure.services.messaging_service import MessagingService


router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class MessageResponse(BaseModel):
    """Response model for a message."""
    id: str
    thread_id: str
    sender_id: str
    sender_name: str
    sender_role: str
    sender_avatar: Optional[str] = None
    recipient_id: str
    recipient_name: str
    recipient_role: str
    subject: str
    content: str
    attachments: List[Attachment] = Field(default_factory=list)
    priority: str
    priority_badge: str
    category: str
    status: str
    status_badge: str
    is_starred: bool
    is_archived: bool
    reply_to_id: Optional[str] = None
    created_at: str
    read_at: Optional[str] = None
    replied_at: Optional[str] = None


class ParticipantResponse(BaseModel):
    """Response model for a thread participant."""
    id: str
    name: str
    role: str
    avatar: Optional[str] = None


class ThreadResponse(BaseModel):
    """Response model for a derived thread."""
    id: str
    subject: str
    participants: List[ParticipantResponse]
    last_message: MessageResponse
    message_count: int
    unread_count: int
    priority: str
    category: str
    is_starred: bool
    is_archived: bool
    created_at: str
    updated_at: str


class ThreadListResponse(BaseModel):
    """Response model for the filtered thread list."""
    threads: List[ThreadResponse]
    total: int
    unread_total: int


class MessageListResponse(BaseModel):
    """Response model for the messages of one thread."""
    messages: List[MessageResponse]
    thread_id: str


class SendMessageRequest(BaseModel):
    """Request to send a message or reply."""
    recipient_id: str = Field(..., min_length=1)
    recipient_name: str = Field(..., min_length=1)
    recipient_role: Role
    recipient_avatar: Optional[str] = None
    subject: str = ""
    content: str = ""
    attachments: List[Attachment] = Field(default_factory=list)
    priority: Priority = Priority.NORMAL
    category: Category = Category.GENERAL
    thread_id: Optional[str] = None
    reply_to_id: Optional[str] = None


class FlagRequest(BaseModel):
    """Request to set a thread-level flag."""
    value: bool


class UpdatedCountResponse(BaseModel):
    """Number of messages a transition changed."""
    thread_id: str
    updated: int


# ============================================================================
# Converters
# ============================================================================

def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _message_to_response(message: Message) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        thread_id=message.thread_id,
        sender_id=message.sender_id,
        sender_name=message.sender_name,
        sender_role=message.sender_role.value,
        sender_avatar=message.sender_avatar,
        recipient_id=message.recipient_id,
        recipient_name=message.recipient_name,
        recipient_role=message.recipient_role.value,
        subject=message.subject,
        content=message.content,
        attachments=message.attachments,
        priority=message.priority.value,
        priority_badge=priority_badge(message.priority),
        category=message.category.value,
        status=message.status.value,
        status_badge=status_badge(message.status),
        is_starred=message.is_starred,
        is_archived=message.is_archived,
        reply_to_id=message.reply_to_id,
        created_at=message.created_at.isoformat(),
        read_at=_iso(message.read_at),
        replied_at=_iso(message.replied_at),
    )


def _thread_to_response(thread: Thread) -> ThreadResponse:
    return ThreadResponse(
        id=thread.id,
        subject=thread.subject,
        participants=[
            ParticipantResponse(
                id=p.id,
                name=p.name,
                role=p.role.value,
                avatar=p.avatar,
            )
            for p in thread.participants
        ],
        last_message=_message_to_response(thread.last_message),
        message_count=thread.message_count,
        unread_count=thread.unread_count,
        priority=thread.priority.value,
        category=thread.category.value,
        is_starred=thread.is_starred,
        is_archived=thread.is_archived,
        created_at=thread.created_at.isoformat(),
        updated_at=thread.updated_at.isoformat(),
    )


def _parse_category(category: str) -> Optional[Category]:
    if category == ALL_CATEGORIES:
        return None
    try:
        return Category(category)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown category: {category}")


# ============================================================================
# Thread Endpoints
# ============================================================================

@router.get("/messages/threads", response_model=ThreadListResponse)
async def list_threads(
    status: StatusFilter = StatusFilter.ALL,
    category: str = ALL_CATEGORIES,
    search: str = Query("", max_length=200),
    viewer: Viewer = Depends(get_current_viewer),
    service: MessagingService = Depends(get_messaging_service),
):
    """
    List conversation threads for the current user.

    Returns threads ordered by most recent activity.
    """
    options = FilterOptions(
        status=status,
        category=_parse_category(category),
        search_term=search,
    )
    threads, unread_total = await service.list_threads(viewer, options)

    return ThreadListResponse(
        threads=[_thread_to_response(t) for t in threads],
        total=len(threads),
        unread_total=unread_total,
    )


@router.get("/messages/threads/{thread_id}", response_model=MessageListResponse)
async def get_thread_messages(
    thread_id: str,
    viewer: Viewer = Depends(get_current_viewer),
    service: MessagingService = Depends(get_messaging_service),
):
    """Get all messages in a thread, oldest first."""
    messages = await service.get_thread_messages(viewer, thread_id)
    return MessageListResponse(
        messages=[_message_to_response(m) for m in messages],
        thread_id=thread_id,
    )


@router.post(
    "/messages/threads/{thread_id}/read",
    response_model=UpdatedCountResponse,
)
async def mark_thread_read(
    thread_id: str,
    viewer: Viewer = Depends(get_current_viewer),
    service: MessagingService = Depends(get_messaging_service),
):
    """Mark every message addressed to the current user as read."""
    updated = await service.mark_read(viewer, thread_id)
    return UpdatedCountResponse(thread_id=thread_id, updated=updated)


@router.post(
    "/messages/threads/{thread_id}/delivered",
    response_model=UpdatedCountResponse,
)
async def mark_thread_delivered(
    thread_id: str,
    viewer: Viewer = Depends(get_current_viewer),
    service: MessagingService = Depends(get_messaging_service),
):
    """Acknowledge delivery of messages addressed to the current user."""
    updated = await service.mark_delivered(viewer, thread_id)
    return UpdatedCountResponse(thread_id=thread_id, updated=updated)


@router.put("/messages/threads/{thread_id}/star", response_model=ThreadResponse)
async def star_thread(
    thread_id: str,
    request: FlagRequest,
    viewer: Viewer = Depends(get_current_viewer),
    service: MessagingService = Depends(get_messaging_service),
):
    """Star or unstar a thread."""
    thread = await service.set_starred(viewer, thread_id, request.value)
    return _thread_to_response(thread)


@router.put("/messages/threads/{thread_id}/archive", response_model=ThreadResponse)
async def archive_thread(
    thread_id: str,
    request: FlagRequest,
    viewer: Viewer = Depends(get_current_viewer),
    service: MessagingService = Depends(get_messaging_service),
):
    """Archive or unarchive a thread."""
    thread = await service.set_archived(viewer, thread_id, request.value)
    return _thread_to_response(thread)


# ============================================================================
# Message Endpoints
# ============================================================================

@router.post("/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    request: SendMessageRequest,
    viewer: Viewer = Depends(get_current_viewer),
    service: MessagingService = Depends(get_messaging_service),
):
    """
    Send a message.

    Without a thread_id this starts a new conversation; with one it replies
    in that thread and the subject gets a "Re: " prefix.
    """
    draft = DraftMessage(**request.model_dump())
    message = await service.send(viewer, draft)
    return _message_to_response(message)
