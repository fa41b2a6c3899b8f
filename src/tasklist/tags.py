"""Tag index: the distinct tags in use across a task collection."""

from collections.abc import Iterable

from tasklist.models import Task


def distinct_tags(tasks: Iterable[Task]) -> tuple[str, ...]:
    """Every tag used by any task, once, in order of first occurrence."""
    # dict preserves insertion order and drops repeats
    return tuple(dict.fromkeys(tag for task in tasks for tag in task.tags))
