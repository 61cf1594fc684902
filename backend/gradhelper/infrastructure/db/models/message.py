"""
Message SQLModel for GradHelper

Database model for messages. Threads are derived from these rows and have
no table of their own.
"""

from datetime import datetime
from typing import Optional, List

from sqlalchemy import Column, DateTime, JSON, String, Text
from sqlmodel import Field, SQLModel

from gradhelper.domain.messaging import Message


class MessageRecord(SQLModel, table=True):
    """
    Message database table model.

    Enum fields are stored as their string values.
    """

    __tablename__ = "messages"

    id: str = Field(
        ...,
        primary_key=True,
        max_length=64,
        description="Unique message identifier"
    )

    thread_id: str = Field(
        ...,
        index=True,
        max_length=64,
        description="Conversation the message belongs to"
    )

    # Sender
    sender_id: str = Field(..., index=True, max_length=64)
    sender_name: str = Field(..., max_length=255)
    sender_role: str = Field(..., max_length=20)
    sender_avatar: Optional[str] = Field(default=None, max_length=1024)

    # Recipient
    recipient_id: str = Field(..., index=True, max_length=64)
    recipient_name: str = Field(..., max_length=255)
    recipient_role: str = Field(..., max_length=20)
    recipient_avatar: Optional[str] = Field(default=None, max_length=1024)

    # Content
    subject: str = Field(
        ...,
        sa_column=Column(String(500), nullable=False),
    )
    content: str = Field(
        ...,
        sa_column=Column(Text, nullable=False),
    )
    attachments: Optional[List[dict]] = Field(
        default=None,
        sa_column=Column(JSON),
        description="Attachment metadata: id, name, mime_type, size_bytes, url"
    )

    priority: str = Field(default="normal", max_length=20)
    category: str = Field(default="general", max_length=20)
    status: str = Field(default="sent", max_length=20)
    is_starred: bool = Field(default=False, nullable=False)
    is_archived: bool = Field(default=False, nullable=False)
    reply_to_id: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(
        ...,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    read_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )
    replied_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )

    @classmethod
    def from_domain(cls, message: Message) -> "MessageRecord":
        """Build a row from a domain message."""
        return cls(
            id=message.id,
            thread_id=message.thread_id,
            sender_id=message.sender_id,
            sender_name=message.sender_name,
            sender_role=message.sender_role.value,
            sender_avatar=message.sender_avatar,
            recipient_id=message.recipient_id,
            recipient_name=message.recipient_name,
            recipient_role=message.recipient_role.value,
            recipient_avatar=message.recipient_avatar,
            subject=message.subject,
            content=message.content,
            attachments=[a.model_dump() for a in message.attachments] or None,
            priority=message.priority.value,
            category=message.category.value,
            status=message.status.value,
            is_starred=message.is_starred,
            is_archived=message.is_archived,
            reply_to_id=message.reply_to_id,
            created_at=message.created_at,
            read_at=message.read_at,
            replied_at=message.replied_at,
        )

    def to_domain(self) -> Message:
        """Convert the row back into a domain message."""
        return Message(
            id=self.id,
            thread_id=self.thread_id,
            sender_id=self.sender_id,
            sender_name=self.sender_name,
            sender_role=self.sender_role,
            sender_avatar=self.sender_avatar,
            recipient_id=self.recipient_id,
            recipient_name=self.recipient_name,
            recipient_role=self.recipient_role,
            recipient_avatar=self.recipient_avatar,
            subject=self.subject,
            content=self.content,
            attachments=self.attachments or [],
            priority=self.priority,
            category=self.category,
            status=self.status,
            is_starred=self.is_starred,
            is_archived=self.is_archived,
            reply_to_id=self.reply_to_id,
            created_at=self.created_at,
            read_at=self.read_at,
            replied_at=self.replied_at,
        )
