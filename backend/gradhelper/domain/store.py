"""
In-memory message store.

Holds the canonical message list for one engine call. Loading and saving
belong to the persistence collaborator; the store only keeps messages in
arrival order and remembers what they looked like when it was built, so
only messages touched by the engine call need to be written back.
"""

from typing import Dict, Iterable, Iterator, List, Optional

from gradhelper.domain.messaging import Message


class MessageStore:
    """Append-only list of messages in store order."""

    def __init__(self, messages: Optional[Iterable[Message]] = None):
        self._messages: List[Message] = list(messages or [])
        self._loaded: Dict[str, Message] = {
            m.id: m.model_copy(deep=True) for m in self._messages
        }

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    @property
    def messages(self) -> List[Message]:
        """Snapshot of the messages in store order."""
        return list(self._messages)

    def changed(self) -> List[Message]:
        """Messages appended or modified since the store was built."""
        return [m for m in self._messages if self._loaded.get(m.id) != m]

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def get(self, message_id: str) -> Optional[Message]:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def for_thread(self, thread_id: str) -> List[Message]:
        """Members of one thread, in store order."""
        return [m for m in self._messages if m.thread_id == thread_id]

    def has_thread(self, thread_id: str) -> bool:
        return any(m.thread_id == thread_id for m in self._messages)
