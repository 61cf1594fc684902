"""
Thread Filter/Search for GradHelper

Selects which derived threads a viewer sees. The participant check is an
authorization boundary and runs before every other filter.
"""

from typing import Callable, Iterable, List

from gradhelper.domain.messaging import FilterOptions, StatusFilter, Thread


ThreadPredicate = Callable[[Thread], bool]


def is_participant(thread: Thread, viewer_id: str) -> bool:
    return viewer_id in thread.participant_ids


def _status_predicate(status: StatusFilter) -> ThreadPredicate:
    if status is StatusFilter.ALL:
        return lambda t: True
    if status is StatusFilter.UNREAD:
        return lambda t: t.unread_count > 0
    if status is StatusFilter.STARRED:
        return lambda t: t.is_starred
    if status is StatusFilter.ARCHIVED:
        return lambda t: t.is_archived
    raise ValueError(f"Unhandled status filter: {status!r}")


def _category_predicate(options: FilterOptions) -> ThreadPredicate:
    if options.all_categories:
        return lambda t: True
    return lambda t: t.category == options.category


def _search_predicate(search_term: str) -> ThreadPredicate:
    term = search_term.strip().lower()
    if not term:
        return lambda t: True

    def matches(thread: Thread) -> bool:
        haystacks = [thread.subject, thread.last_message.content]
        haystacks.extend(thread.participant_names)
        return any(term in text.lower() for text in haystacks)

    return matches


def visible_threads(
    threads: Iterable[Thread],
    viewer_id: str,
    options: FilterOptions,
    search_min_length: int = 0,
) -> List[Thread]:
    """
    Filter threads for a viewer.

    Args:
        threads: Derived threads, already sorted
        viewer_id: Identity requesting the list
        options: Status, category and search filters (all must match)
        search_min_length: Search terms shorter than this are ignored

    Returns:
        Threads the viewer participates in that pass every filter, in
        input order.
    """
    search_term = options.search_term
    if len(search_term.strip()) < search_min_length:
        search_term = ""

    predicates = [
        _status_predicate(options.status),
        _category_predicate(options),
        _search_predicate(search_term),
    ]
    return [
        t for t in threads
        if is_participant(t, viewer_id) and all(p(t) for p in predicates)
    ]
