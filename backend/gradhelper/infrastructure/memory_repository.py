"""
In-memory message repository.

Process-local persistence collaborator used when STORAGE_BACKEND=memory.
Contents are lost on restart. Messages are copied on load and save so a
store only changes what is persisted through save_messages().
"""

from typing import List, Optional

from gradhelper.domain.messaging import Message


class InMemoryMessageRepository:
    """Keeps the whole message list in a single process-local blob."""

    def __init__(self, messages: Optional[List[Message]] = None):
        self._messages: List[Message] = [
            m.model_copy(deep=True) for m in (messages or [])
        ]

    async def load_messages(self) -> List[Message]:
        return [m.model_copy(deep=True) for m in self._messages]

    async def save_messages(self, messages: List[Message]) -> None:
        """Upsert by id; unknown messages are appended in the given order."""
        positions = {m.id: i for i, m in enumerate(self._messages)}
        for message in messages:
            copy = message.model_copy(deep=True)
            if message.id in positions:
                self._messages[positions[message.id]] = copy
            else:
                positions[message.id] = len(self._messages)
                self._messages.append(copy)

    async def reset(self) -> None:
        """Nothing to roll back between attempts."""

    def clear(self) -> None:
        self._messages = []
