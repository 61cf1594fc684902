"""
Messaging Domain Models for GradHelper

Pure Python/Pydantic models for messages and derived conversation threads.
Threads are projections over messages and are never persisted.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Role of a message participant."""
    STUDENT = "student"
    ADMIN = "admin"


class MessageStatus(str, Enum):
    """Delivery state of a message from the recipient's perspective."""
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    REPLIED = "replied"


class Priority(str, Enum):
    """Message priority."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class Category(str, Enum):
    """Message category."""
    GENERAL = "general"
    ACADEMIC = "academic"
    PAYMENT = "payment"
    TECHNICAL = "technical"
    URGENT = "urgent"


class StatusFilter(str, Enum):
    """Thread list status filter."""
    ALL = "all"
    UNREAD = "unread"
    STARRED = "starred"
    ARCHIVED = "archived"


ALL_CATEGORIES = "all"

# Ranks drive monotonic status advancement; transitions may skip but never regress
STATUS_RANK = {
    MessageStatus.SENT: 0,
    MessageStatus.DELIVERED: 1,
    MessageStatus.READ: 2,
    MessageStatus.REPLIED: 3,
}

REPLY_PREFIX = "Re: "


class Attachment(BaseModel):
    """File attached to a message."""
    id: str
    name: str
    mime_type: str
    size_bytes: int = Field(..., ge=0)
    url: str


class Message(BaseModel):
    """
    One directed communication between two parties.

    Only ``status``, ``read_at``, ``replied_at``, ``is_starred`` and
    ``is_archived`` change after creation.
    """
    id: str
    thread_id: str
    sender_id: str
    sender_name: str
    sender_role: Role
    sender_avatar: Optional[str] = None
    recipient_id: str
    recipient_name: str
    recipient_role: Role
    recipient_avatar: Optional[str] = None
    subject: str
    content: str = Field(..., min_length=1)
    attachments: List[Attachment] = Field(default_factory=list)
    priority: Priority = Priority.NORMAL
    category: Category = Category.GENERAL
    status: MessageStatus = MessageStatus.SENT
    is_starred: bool = False
    is_archived: bool = False
    created_at: datetime
    read_at: Optional[datetime] = None
    replied_at: Optional[datetime] = None
    reply_to_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    @property
    def has_been_read(self) -> bool:
        """True once the recipient has read the message (or replied to it)."""
        # Status never regresses, so a replied message stays read rather
        # than counting as unread again under a plain status != read rule.
        return STATUS_RANK[self.status] >= STATUS_RANK[MessageStatus.READ]

    def is_addressed_to(self, user_id: str) -> bool:
        return self.recipient_id == user_id


class Participant(BaseModel):
    """An identity appearing as sender or recipient in a thread."""
    id: str
    name: str
    role: Role
    avatar: Optional[str] = None


class Viewer(BaseModel):
    """Identity of the current session, as supplied by the caller."""
    id: str
    name: str
    role: Role
    avatar: Optional[str] = None


class Thread(BaseModel):
    """Conversation thread derived from messages sharing a thread_id."""
    id: str
    subject: str
    participants: List[Participant] = Field(default_factory=list)
    last_message: Message
    message_count: int
    unread_count: int
    priority: Priority
    category: Category
    is_starred: bool
    is_archived: bool
    created_at: datetime
    updated_at: datetime

    @property
    def participant_ids(self) -> List[str]:
        return [p.id for p in self.participants]

    @property
    def participant_names(self) -> List[str]:
        return [p.name for p in self.participants]

    @property
    def participant_roles(self) -> List[Role]:
        return [p.role for p in self.participants]

    @property
    def participant_avatars(self) -> List[Optional[str]]:
        return [p.avatar for p in self.participants]


class DraftMessage(BaseModel):
    """
    Message as composed by the viewer, before the composer assigns
    identity, thread and timestamps.

    Subject and content are checked by the composer rather than here so
    that empty values surface as a domain ValidationError.
    """
    recipient_id: str
    recipient_name: str
    recipient_role: Role
    recipient_avatar: Optional[str] = None
    subject: str = ""
    content: str = ""
    attachments: List[Attachment] = Field(default_factory=list)
    priority: Priority = Priority.NORMAL
    category: Category = Category.GENERAL
    thread_id: Optional[str] = None
    reply_to_id: Optional[str] = None

    @property
    def is_reply(self) -> bool:
        return self.thread_id is not None


class FilterOptions(BaseModel):
    """Status, category and text filters applied to the thread list."""
    status: StatusFilter = StatusFilter.ALL
    category: Optional[Category] = None
    search_term: str = ""

    @property
    def all_categories(self) -> bool:
        return self.category is None
