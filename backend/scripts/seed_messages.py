#!/usr/bin/env python3
"""
Seed script to populate the messages table with demo conversations.

Messages are created through the composer so thread ids, reply subjects
and statuses follow the same rules as the API.

Run: python scripts/seed_messages.py
"""

import asyncio
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gradhelper.domain.composer import send_message
from gradhelper.domain.messaging import Category, DraftMessage, Priority, Role
from gradhelper.domain.read_state import mark_thread_read
from gradhelper.domain.store import MessageStore
from gradhelper.infrastructure.db.database import get_db_manager, get_session_context
from gradhelper.infrastructure.db.repositories.message_repository import MessageRepository


ADMIN = ("admin-1", "Admin Support", Role.ADMIN)
STUDENTS = [
    ("student-1", "John Smith"),
    ("student-2", "Maria Garcia"),
]

# (student index, subject, opening message, admin reply or None, category, priority)
CONVERSATIONS = [
    (
        0,
        "ML research paper deliverable",
        "Could you confirm the deadline for the ML research paper?",
        "Your ML research paper deliverable has been approved.",
        Category.ACADEMIC,
        Priority.HIGH,
    ),
    (
        1,
        "Invoice question",
        "I was charged twice for the statistics assignment.",
        None,
        Category.PAYMENT,
        Priority.URGENT,
    ),
]


async def main():
    """Create tables if needed and insert demo conversations."""
    await get_db_manager().create_tables()

    async with get_session_context() as session:
        repo = MessageRepository(session)
        store = MessageStore(await repo.load_messages())
        before = len(store)

        for student_idx, subject, opening, reply, category, priority in CONVERSATIONS:
            student_id, student_name = STUDENTS[student_idx]
            first = send_message(
                store,
                DraftMessage(
                    recipient_id=ADMIN[0],
                    recipient_name=ADMIN[1],
                    recipient_role=ADMIN[2],
                    subject=subject,
                    content=opening,
                    category=category,
                    priority=priority,
                ),
                student_id,
                student_name,
                Role.STUDENT,
            )
            if reply is None:
                continue

            mark_thread_read(store, first.thread_id, ADMIN[0])
            send_message(
                store,
                DraftMessage(
                    recipient_id=student_id,
                    recipient_name=student_name,
                    recipient_role=Role.STUDENT,
                    subject=subject,
                    content=reply,
                    category=category,
                    thread_id=first.thread_id,
                    reply_to_id=first.id,
                ),
                *ADMIN,
            )

        await repo.save_messages(store.changed())
        print(f"Seeded {len(store) - before} messages.")

    await get_db_manager().close()


if __name__ == "__main__":
    asyncio.run(main())
