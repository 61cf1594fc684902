"""
Message Repository for GradHelper

Persistence collaborator backed by the messages table. Loads the full
message list and upserts the messages an engine call changed; the engine
itself never touches the session.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gradhelper.domain.messaging import Message
from gradhelper.infrastructure.db.models.message import MessageRecord


class MessageRepository:
    """
    Repository for message database operations.

    Messages are never deleted here; saving upserts each given message by id.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def load_messages(self) -> List[Message]:
        """
        Load all messages in creation order.

        Returns:
            List of domain messages
        """
        stmt = select(MessageRecord).order_by(
            MessageRecord.created_at.asc(),
            MessageRecord.id.asc(),
        )
        result = await self._session.execute(stmt)
        return [record.to_domain() for record in result.scalars().all()]

    async def save_messages(self, messages: List[Message]) -> None:
        """
        Upsert the given messages.

        Args:
            messages: New or modified messages
        """
        for message in messages:
            await self._session.merge(MessageRecord.from_domain(message))
        await self._session.flush()

    async def reset(self) -> None:
        """
        Roll back the session after a failed statement.

        A session whose flush or execute raised stays unusable until
        rolled back, so this must run before the call is retried.
        """
        await self._session.rollback()
