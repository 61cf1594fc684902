"""
Unit tests for the persistence collaborators.

The database repository is exercised with a mocked AsyncSession.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from gradhelper.domain.messaging import Attachment, MessageStatus, Role
from gradhelper.infrastructure.db.database import normalize_database_url
from gradhelper.infrastructure.db.models.message import MessageRecord
from gradhelper.infrastructure.db.repositories.message_repository import MessageRepository
from gradhelper.infrastructure.memory_repository import InMemoryMessageRepository


class TestMessageRecord:
    """Conversion between rows and domain messages."""

    def test_enums_stored_as_strings(self, message_factory):
        message = message_factory("m1", "t1", status=MessageStatus.READ)
        record = MessageRecord.from_domain(message)

        assert record.sender_role == "student"
        assert record.recipient_role == "admin"
        assert record.status == "read"
        assert record.attachments is None

    def test_to_domain_restores_message(self, message_factory):
        attachment = Attachment(
            id="f1", name="notes.txt", mime_type="text/plain", size_bytes=12,
            url="https://files/notes.txt",
        )
        message = message_factory("m1", "t1", attachments=[attachment], is_starred=True)

        restored = MessageRecord.from_domain(message).to_domain()

        assert restored == message
        assert restored.sender_role is Role.STUDENT


class TestMessageRepository:
    """Tests for the SQLModel-backed repository."""

    @pytest.mark.asyncio
    async def test_load_converts_rows(self, message_factory):
        rows = [MessageRecord.from_domain(message_factory("m1", "t1"))]
        result = MagicMock()
        result.scalars.return_value.all.return_value = rows
        session = AsyncMock()
        session.execute.return_value = result

        messages = await MessageRepository(session).load_messages()

        assert [m.id for m in messages] == ["m1"]
        session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_save_merges_every_message(self, sample_messages):
        session = AsyncMock()

        await MessageRepository(session).save_messages(sample_messages)

        assert session.merge.await_count == len(sample_messages)
        merged_ids = [call.args[0].id for call in session.merge.await_args_list]
        assert merged_ids == ["m1", "m2", "m3"]
        session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reset_rolls_back_session(self):
        session = AsyncMock()

        await MessageRepository(session).reset()

        session.rollback.assert_awaited_once()


class TestInMemoryRepository:
    """Tests for the process-local repository."""

    @pytest.mark.asyncio
    async def test_load_returns_copies(self, sample_messages):
        repo = InMemoryMessageRepository(sample_messages)

        loaded = await repo.load_messages()
        loaded[0].is_starred = True

        assert (await repo.load_messages())[0].is_starred is False

    @pytest.mark.asyncio
    async def test_save_upserts_by_id(self, sample_messages, message_factory):
        repo = InMemoryMessageRepository(sample_messages)
        changed = sample_messages[2].model_copy(update={"status": MessageStatus.READ})
        added = message_factory("m4", "t3", minutes=20)

        await repo.save_messages([changed, added])

        stored = await repo.load_messages()
        assert [m.id for m in stored] == ["m1", "m2", "m3", "m4"]
        assert stored[2].status == MessageStatus.READ

        repo.clear()
        assert await repo.load_messages() == []


class TestDatabaseUrl:
    """asyncpg driver is forced on PostgreSQL URLs."""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgresql://u:p@db/gh", "postgresql+asyncpg://u:p@db/gh"),
            ("postgres://u:p@db/gh", "postgresql+asyncpg://u:p@db/gh"),
            ("postgresql+asyncpg://u:p@db/gh", "postgresql+asyncpg://u:p@db/gh"),
        ],
    )
    def test_normalize(self, url, expected):
        assert normalize_database_url(url) == expected
