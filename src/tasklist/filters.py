"""Tag filtering for the visible task list.

A filter set is a tuple of tags in the order they were selected. A task
is visible when at least one of its tags is selected (OR, not AND); with
nothing selected every task is visible.

Example:
    >>> filters = toggle_filter((), "work")
    >>> [t.text for t in visible(tasks, filters)]
"""

from collections.abc import Iterable

from tasklist.models import Task

FilterSet = tuple[str, ...]


def visible(tasks: Iterable[Task], filter_set: Iterable[str]) -> tuple[Task, ...]:
    """Return the tasks matching any selected tag, in source order.

    Args:
        tasks: Task collection (never reordered or deduplicated).
        filter_set: Selected tags. Empty means no filtering.

    Returns:
        Tuple of visible tasks.
    """
    selected = set(filter_set)
    if not selected:
        return tuple(tasks)
    return tuple(t for t in tasks if any(tag in selected for tag in t.tags))


def toggle_filter(filter_set: FilterSet, tag: str) -> FilterSet:
    """Remove tag if selected, otherwise append it."""
    if tag in filter_set:
        return remove_filter(filter_set, tag)
    return (*filter_set, tag)


def remove_filter(filter_set: FilterSet, tag: str) -> FilterSet:
    """Deselect tag; unchanged if it wasn't selected."""
    return tuple(t for t in filter_set if t != tag)
