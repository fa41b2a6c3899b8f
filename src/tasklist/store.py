"""In-memory task store.

Owns the canonical, ordered task collection and every mutation of it.
The collection is held as an immutable tuple; each successful mutation
replaces it with a new tuple (a snapshot) and hands that snapshot to
every subscriber, synchronously, before returning. Persistence is one
such subscriber.

Failed mutations (empty text on add, unknown id) change nothing and
notify nobody; they are reported only through the return value.

Example:
    >>> store = TaskStore()
    >>> task = store.add("Buy milk", "errand")
    >>> store.toggle_completed(task.id).completed
    True
    >>> store.remove(task.id)
    True
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace
from datetime import date

from tasklist.logging import Loggers
from tasklist.models import EditSession, EditTransition, Task, TaskIdGenerator

logger = Loggers.store()

SnapshotListener = Callable[[tuple[Task, ...]], None]
EditListener = Callable[[EditTransition, EditSession], None]

_UNSET = object()


class TaskStore:
    """Ordered task collection with snapshot notifications.

    At most one edit session is live. Starting an edit while another is
    live abandons the previous one: the ABANDONED transition is emitted
    for it before STARTED is emitted for the new one.
    """

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        id_generator: TaskIdGenerator | None = None,
    ) -> None:
        self._ids = id_generator or TaskIdGenerator()
        self._tasks: tuple[Task, ...] = ()
        self._edit: EditSession | None = None
        self._listeners: list[SnapshotListener] = []
        self._edit_listeners: list[EditListener] = []
        self.replace_all(tasks)

    # ---- queries ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """The latest snapshot."""
        return self._tasks

    @property
    def edit_session(self) -> EditSession | None:
        return self._edit

    def get(self, task_id: int) -> Task | None:
        """Get a task by ID."""
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    # ---- subscriptions ----

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call listener with every new snapshot.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)
        return lambda: self._discard(self._listeners, listener)

    def on_edit_transition(self, listener: EditListener) -> Callable[[], None]:
        """Call listener with (transition, session) on every edit-state change.

        Returns:
            A function that removes the listener.
        """
        self._edit_listeners.append(listener)
        return lambda: self._discard(self._edit_listeners, listener)

    @staticmethod
    def _discard(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def _commit(self, tasks: tuple[Task, ...]) -> None:
        self._tasks = tasks
        for listener in list(self._listeners):
            listener(tasks)

    def _transition(self, edge: EditTransition, session: EditSession) -> None:
        logger.debug("edit_transition", transition=edge.value, task_id=session.task_id)
        for listener in list(self._edit_listeners):
            listener(edge, session)

    # ---- loading ----

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Replace the collection wholesale, e.g. with what was loaded at startup.

        Does not notify subscribers: the collection came from storage and
        does not need writing back. Any live edit session is dropped.

        Raises:
            ValueError: If two tasks share an id.
        """
        loaded = tuple(tasks)
        seen: set[int] = set()
        for task in loaded:
            if task.id in seen:
                raise ValueError(f"duplicate task id {task.id}")
            seen.add(task.id)
            self._ids.observe(task.id)
        self._tasks = loaded
        self._edit = None

    # ---- mutations ----

    def add(
        self,
        text: str,
        tag: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Task | None:
        """Append a new task.

        Args:
            text: Task text; trimmed. Whitespace-only text is rejected.
            tag: Optional single tag; becomes the task's only tag if non-empty.
            start_date: Optional start date.
            end_date: Optional end date (not checked against start_date).

        Returns:
            The new Task, or None if text was empty.
        """
        trimmed = text.strip()
        if not trimmed:
            logger.debug("task_add_rejected", reason="empty_text")
            return None

        task = Task(
            id=self._ids.next_id(),
            text=trimmed,
            completed=False,
            tags=(tag,) if tag else (),
            start_date=start_date,
            end_date=end_date,
        )
        self._commit((*self._tasks, task))
        logger.info("task_added", task_id=task.id, tags=list(task.tags))
        return task

    def _replace_task(self, task_id: int, **changes) -> Task | None:
        updated: Task | None = None
        new_tasks = []
        for task in self._tasks:
            if task.id == task_id:
                updated = replace(task, **changes)
                new_tasks.append(updated)
            else:
                new_tasks.append(task)
        if updated is None:
            return None
        self._commit(tuple(new_tasks))
        return updated

    def toggle_completed(self, task_id: int) -> Task | None:
        """Flip completion of a task.

        Returns:
            The updated Task, or None if no task has that id.
        """
        task = self.get(task_id)
        if task is None:
            logger.debug("task_not_found", op="toggle_completed", task_id=task_id)
            return None
        updated = self._replace_task(task_id, completed=not task.completed)
        logger.info("task_toggled", task_id=task_id, completed=not task.completed)
        return updated

    def remove(self, task_id: int) -> bool:
        """Delete a task.

        Returns:
            True if deleted, False if not found.
        """
        remaining = tuple(t for t in self._tasks if t.id != task_id)
        if len(remaining) == len(self._tasks):
            logger.debug("task_not_found", op="remove", task_id=task_id)
            return False
        if self._edit is not None and self._edit.task_id == task_id:
            self.abandon_edit()
        self._commit(remaining)
        logger.info("task_removed", task_id=task_id)
        return True

    # ---- edit session ----

    def begin_edit(self, task_id: int) -> EditSession | None:
        """Start editing a task, loading its text and dates as scratch values.

        A live session (for any task, including this one) is abandoned first.

        Returns:
            The new EditSession, or None if no task has that id (in which
            case any live session is left alone).
        """
        task = self.get(task_id)
        if task is None:
            logger.debug("task_not_found", op="begin_edit", task_id=task_id)
            return None

        self.abandon_edit()
        self._edit = EditSession(
            task_id=task.id,
            text=task.text,
            start_date=task.start_date,
            end_date=task.end_date,
        )
        self._transition(EditTransition.STARTED, self._edit)
        return self._edit

    def abandon_edit(self) -> EditSession | None:
        """Drop the live session without saving, as happens when another edit starts.

        Returns:
            The abandoned session, or None if none was live.
        """
        session = self._edit
        if session is None:
            return None
        self._edit = None
        logger.info("edit_abandoned", task_id=session.task_id)
        self._transition(EditTransition.ABANDONED, session)
        return session

    def update_edit(
        self,
        *,
        text=_UNSET,
        start_date=_UNSET,
        end_date=_UNSET,
    ) -> EditSession | None:
        """Change scratch values of the live session.

        Only the keyword arguments given are changed; pass None to clear a date.

        Returns:
            The updated session, or None if no session is live.
        """
        if self._edit is None:
            return None
        changes = {
            name: value
            for name, value in (
                ("text", text),
                ("start_date", start_date),
                ("end_date", end_date),
            )
            if value is not _UNSET
        }
        self._edit = replace(self._edit, **changes)
        return self._edit

    def commit_edit(
        self,
        task_id: int,
        new_text: str,
        new_start_date: date | None = None,
        new_end_date: date | None = None,
    ) -> Task | None:
        """Replace a task's text and dates and close the edit session.

        The text is stored as given (no trimming or empty check) and the
        dates are not checked against each other. A live session for a
        different task is abandoned rather than committed.

        Snapshot listeners already see no live session; COMMITTED fires
        after the snapshot.

        Returns:
            The updated Task, or None if no task has that id (any live
            session is left alone).
        """
        if self.get(task_id) is None:
            logger.debug("task_not_found", op="commit_edit", task_id=task_id)
            return None

        committed = None
        if self._edit is not None and self._edit.task_id != task_id:
            self.abandon_edit()
        elif self._edit is not None:
            committed, self._edit = self._edit, None

        updated = self._replace_task(
            task_id,
            text=new_text,
            start_date=new_start_date,
            end_date=new_end_date,
        )
        if committed is not None:
            self._transition(EditTransition.COMMITTED, committed)
        logger.info("task_edited", task_id=task_id)
        return updated

    def save_edit(self) -> Task | None:
        """Commit the live session's scratch values.

        Returns:
            The updated Task, or None if no session is live or its task is gone.
        """
        session = self._edit
        if session is None:
            return None
        return self.commit_edit(
            session.task_id,
            session.text,
            session.start_date,
            session.end_date,
        )

    def cancel_edit(self) -> EditSession | None:
        """Close the live session without changing any task.

        Returns:
            The cancelled session, or None if none was live.
        """
        session = self._edit
        if session is None:
            return None
        self._edit = None
        self._transition(EditTransition.CANCELLED, session)
        return session
