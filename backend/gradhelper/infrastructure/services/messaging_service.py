"""
Messaging Service for GradHelper

Integrates the threading engine with a persistence collaborator.
Each operation loads the full message list, runs one engine call, saves
the result and re-derives threads for the viewer.

Persistence I/O is retried with exponential backoff; the engine calls in
between are synchronous and never retried.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Protocol, Tuple, TypeVar

from sqlalchemy.exc import DBAPIError

from gradhelper.config.settings import Settings, get_settings
from gradhelper.domain.composer import send_message
from gradhelper.domain.conversations import derive_threads, thread_messages, total_unread
from gradhelper.domain.filtering import is_participant, visible_threads
from gradhelper.domain.messaging import (
    DraftMessage,
    FilterOptions,
    Message,
    Thread,
    Viewer,
)
from gradhelper.domain.read_state import (
    mark_thread_delivered,
    mark_thread_read,
    toggle_thread_archive,
    toggle_thread_star,
)
from gradhelper.domain.store import MessageStore
from gradhelper.infrastructure.exceptions import (
    ErrorKind,
    NotFoundError,
    PersistenceError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures worth retrying at the persistence boundary
TRANSIENT_ERRORS = (DBAPIError, OSError, asyncio.TimeoutError)


class MessagePersistence(Protocol):
    """Consumed interface: whole-list load, upsert of changed messages."""

    async def load_messages(self) -> List[Message]: ...

    async def save_messages(self, messages: List[Message]) -> None: ...

    async def reset(self) -> None: ...


class MessagingService:
    """
    Service for messaging business logic.

    Implements:
    - Thread listing with visibility, status, category and search filters
    - Sending messages and replies
    - Read, delivered, star and archive transitions on whole threads

    Mutations hold the write lock from load to save. Services created per
    request must be given the same lock to be serialized against each
    other.
    """

    def __init__(
        self,
        repository: MessagePersistence,
        settings: Optional[Settings] = None,
        lock: Optional[asyncio.Lock] = None,
    ):
        self._repository = repository
        self._settings = settings or get_settings()
        self._lock = lock or asyncio.Lock()

    # =========================================================================
    # Persistence boundary
    # =========================================================================

    async def _retry_with_backoff(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str,
    ) -> T:
        """Execute a persistence call with timeout and exponential backoff."""
        max_retries = self._settings.max_retries
        last_exception: Optional[Exception] = None

        for attempt in range(max_retries):
            try:
                return await asyncio.wait_for(
                    operation(), timeout=self._settings.persistence_timeout
                )
            except TRANSIENT_ERRORS as e:
                last_exception = e
                await self._reset_repository(operation_name)
                if attempt + 1 >= max_retries:
                    break
                delay = min(
                    self._settings.retry_base_delay * (2 ** attempt),
                    self._settings.retry_max_delay,
                )
                logger.warning(
                    "%s failed (%s). Attempt %d/%d. Retrying in %.1fs",
                    operation_name, e, attempt + 1, max_retries, delay,
                )
                await asyncio.sleep(delay)

        raise PersistenceError(
            f"{operation_name} failed after {max_retries} attempts",
            operation=operation_name,
            retry_count=max_retries,
            original_error=last_exception,
        )

    async def _reset_repository(self, operation_name: str) -> None:
        """Return the repository to a usable state after a failed call."""
        try:
            await self._repository.reset()
        except TRANSIENT_ERRORS as e:
            # The next attempt fails the same way and is counted there
            logger.warning("Reset after %s failed: %s", operation_name, e)

    async def _load_store(self) -> MessageStore:
        messages = await self._retry_with_backoff(
            self._repository.load_messages, "Load messages"
        )
        return MessageStore(messages)

    async def _save_store(self, store: MessageStore) -> None:
        """Write back only what this call changed."""
        messages = store.changed()
        if not messages:
            return
        await self._retry_with_backoff(
            lambda: self._repository.save_messages(messages), "Save messages"
        )

    def _require_participant(
        self,
        store: MessageStore,
        thread_id: str,
        viewer: Viewer,
    ) -> None:
        """Unknown threads and threads the viewer is not part of look the same."""
        for thread in derive_threads(store.for_thread(thread_id), viewer.id):
            if is_participant(thread, viewer.id):
                return
        logger.warning("Thread %s not visible to %s", thread_id, viewer.id)
        raise NotFoundError(
            f"Thread {thread_id} not found",
            kind=ErrorKind.THREAD_NOT_FOUND,
            thread_id=thread_id,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    async def list_threads(
        self,
        viewer: Viewer,
        options: FilterOptions,
    ) -> Tuple[List[Thread], int]:
        """
        List the threads visible to a viewer.

        Args:
            viewer: Current session identity
            options: Status, category and search filters

        Returns:
            Tuple of (filtered threads, unread total across all of the
            viewer's threads)
        """
        store = await self._load_store()
        threads = derive_threads(store, viewer.id)
        mine = [t for t in threads if is_participant(t, viewer.id)]
        visible = visible_threads(
            threads,
            viewer.id,
            options,
            search_min_length=self._settings.search_min_length,
        )
        return visible, total_unread(mine)

    async def get_thread_messages(self, viewer: Viewer, thread_id: str) -> List[Message]:
        """Messages of one thread in chronological order."""
        store = await self._load_store()
        self._require_participant(store, thread_id, viewer)
        return thread_messages(store, thread_id)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def send(self, viewer: Viewer, draft: DraftMessage) -> Message:
        """
        Send a new message or a reply.

        Replying into an existing thread requires the viewer to be one of
        its participants.
        """
        async with self._lock:
            store = await self._load_store()
            if draft.thread_id and store.has_thread(draft.thread_id):
                self._require_participant(store, draft.thread_id, viewer)
            message = send_message(
                store,
                draft,
                viewer.id,
                viewer.name,
                viewer.role,
                viewer_avatar=viewer.avatar,
            )
            await self._save_store(store)
        return message

    async def mark_read(self, viewer: Viewer, thread_id: str) -> int:
        """Mark the viewer's unread messages in a thread as read."""
        async with self._lock:
            store = await self._load_store()
            self._require_participant(store, thread_id, viewer)
            updated = mark_thread_read(store, thread_id, viewer.id)
            if updated:
                await self._save_store(store)
        return updated

    async def mark_delivered(self, viewer: Viewer, thread_id: str) -> int:
        """Mark the viewer's sent messages in a thread as delivered."""
        async with self._lock:
            store = await self._load_store()
            self._require_participant(store, thread_id, viewer)
            updated = mark_thread_delivered(store, thread_id, viewer.id)
            if updated:
                await self._save_store(store)
        return updated

    async def set_starred(self, viewer: Viewer, thread_id: str, value: bool) -> Thread:
        """Star or unstar a whole thread."""
        return await self._toggle(viewer, thread_id, value, toggle_thread_star)

    async def set_archived(self, viewer: Viewer, thread_id: str, value: bool) -> Thread:
        """Archive or unarchive a whole thread."""
        return await self._toggle(viewer, thread_id, value, toggle_thread_archive)

    async def _toggle(
        self,
        viewer: Viewer,
        thread_id: str,
        value: bool,
        toggle: Callable[[MessageStore, str, bool], None],
    ) -> Thread:
        async with self._lock:
            store = await self._load_store()
            self._require_participant(store, thread_id, viewer)
            toggle(store, thread_id, value)
            await self._save_store(store)
        return derive_threads(store.for_thread(thread_id), viewer.id)[0]
