"""
Unit tests for read-state, star and archive transitions.
"""

import pytest

from gradhelper.domain.conversations import derive_threads
from gradhelper.domain.messaging import MessageStatus
from gradhelper.domain.read_state import (
    mark_thread_delivered,
    mark_thread_read,
    toggle_thread_archive,
    toggle_thread_star,
)
from gradhelper.domain.store import MessageStore
from gradhelper.infrastructure.exceptions import ErrorKind, NotFoundError


class TestMarkThreadRead:
    """Tests for mark_thread_read."""

    def test_admin_reads_delivered_message(self, message_factory, fixed_clock):
        """Admin receives a delivered message, reads it, unread drops to zero."""
        store = MessageStore([
            message_factory(
                "m1", "t2", "student-1", "admin-1",
                status=MessageStatus.DELIVERED,
            ),
        ])

        assert mark_thread_read(store, "t2", "admin-1", clock=fixed_clock) == 1

        thread = derive_threads(store, "admin-1")[0]
        assert thread.unread_count == 0
        assert store.get("m1").status == MessageStatus.READ
        assert store.get("m1").read_at == fixed_clock()

    def test_idempotent(self, store, fixed_clock):
        """Second call in a row updates nothing."""
        assert mark_thread_read(store, "t1", "admin-1", clock=fixed_clock) == 1
        assert mark_thread_read(store, "t1", "admin-1", clock=fixed_clock) == 0

    def test_sender_messages_untouched(self, store, fixed_clock):
        """Marking read as admin does not touch the admin's own reply."""
        mark_thread_read(store, "t1", "admin-1", clock=fixed_clock)

        assert store.get("m1").status == MessageStatus.READ
        assert store.get("m2").status == MessageStatus.SENT
        assert store.get("m2").read_at is None

    def test_other_threads_untouched(self, store, fixed_clock):
        mark_thread_read(store, "t1", "admin-1", clock=fixed_clock)
        assert store.get("m3").status == MessageStatus.DELIVERED

    def test_replied_is_never_downgraded(self, message_factory, fixed_clock):
        store = MessageStore([
            message_factory("m1", "t1", status=MessageStatus.REPLIED),
        ])
        assert mark_thread_read(store, "t1", "admin-1", clock=fixed_clock) == 0
        assert store.get("m1").status == MessageStatus.REPLIED

    def test_read_at_set_only_once(self, message_factory, fixed_clock, store):
        earlier = store.get("m1").created_at
        store.get("m1").read_at = earlier
        mark_thread_read(store, "t1", "admin-1", clock=fixed_clock)
        assert store.get("m1").read_at == earlier

    def test_unknown_thread(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            mark_thread_read(store, "missing", "admin-1")

        assert exc_info.value.kind == ErrorKind.THREAD_NOT_FOUND
        assert exc_info.value.thread_id == "missing"


class TestMarkThreadDelivered:
    """Tests for mark_thread_delivered."""

    def test_advances_sent_only(self, store):
        assert mark_thread_delivered(store, "t1", "admin-1") == 1
        assert store.get("m1").status == MessageStatus.DELIVERED
        assert mark_thread_delivered(store, "t1", "admin-1") == 0

    def test_read_not_regressed(self, store, fixed_clock):
        mark_thread_read(store, "t1", "admin-1", clock=fixed_clock)
        assert mark_thread_delivered(store, "t1", "admin-1") == 0
        assert store.get("m1").status == MessageStatus.READ


class TestToggles:
    """Star and archive flags are written on every member."""

    def test_star_sets_every_message(self, store):
        toggle_thread_star(store, "t1", True)

        assert all(m.is_starred for m in store.for_thread("t1"))
        assert store.get("m3").is_starred is False
        threads = {t.id: t for t in derive_threads(store, "admin-1")}
        assert threads["t1"].is_starred is True

    def test_unstar(self, store):
        toggle_thread_star(store, "t1", True)
        toggle_thread_star(store, "t1", False)

        threads = {t.id: t for t in derive_threads(store, "admin-1")}
        assert threads["t1"].is_starred is False

    def test_archive_whole_thread(self, store):
        toggle_thread_archive(store, "t1", True)

        threads = {t.id: t for t in derive_threads(store, "admin-1")}
        assert threads["t1"].is_archived is True
        assert threads["t2"].is_archived is False

    @pytest.mark.parametrize("toggle", [toggle_thread_star, toggle_thread_archive])
    def test_unknown_thread(self, store, toggle):
        with pytest.raises(NotFoundError):
            toggle(store, "missing", True)


class TestChangedMessages:
    """The store reports exactly what a transition touched."""

    def test_fresh_store_has_no_changes(self, store):
        assert store.changed() == []

    def test_read_touches_only_thread_members(self, store, fixed_clock, message_factory):
        mark_thread_read(store, "t2", "admin-1", clock=fixed_clock)
        store.append(message_factory("m4", "t3", minutes=30))

        assert [m.id for m in store.changed()] == ["m3", "m4"]
