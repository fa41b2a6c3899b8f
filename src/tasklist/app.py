"""Task list session: the surface a rendering layer talks to.

Wires a TaskStore to TaskPersistence (write-through: every snapshot is
saved before the mutating call returns) and keeps the tag filter set and
the derived views (visible tasks, tags in use) current. A UI reads the
properties and calls the methods here; it never touches Task fields.

Example:
    >>> session = TaskListSession.open(kv=MemoryKeyValueStore())
    >>> task = session.add("Write report", "work")
    >>> session.toggle_filter("work")
    ('work',)
    >>> [t.text for t in session.visible_tasks]
    ['Write report']
"""

from datetime import date

from tasklist.config import TaskListSettings, get_settings, validate_settings
from tasklist.filters import FilterSet, remove_filter, toggle_filter, visible
from tasklist.logging import Loggers, bind_context, configure_logging
from tasklist.models import EditSession, Task, TaskIdGenerator
from tasklist.persistence import (
    KeyValueStore,
    TaskPersistence,
    create_key_value_store,
)
from tasklist.store import TaskStore
from tasklist.tags import distinct_tags

logger = Loggers.session()


class TaskListSession:
    """Store, persistence and filter state for one running task list."""

    def __init__(self, store: TaskStore, persistence: TaskPersistence) -> None:
        self.store = store
        self.persistence = persistence
        self._filters: FilterSet = ()
        self._visible: tuple[Task, ...] = ()
        self._tags: tuple[str, ...] = ()
        self._unsubscribe = store.subscribe(self._on_snapshot)
        self._refresh(store.tasks)

    @classmethod
    def open(
        cls,
        settings: TaskListSettings | None = None,
        kv: KeyValueStore | None = None,
        id_generator: TaskIdGenerator | None = None,
    ) -> "TaskListSession":
        """Load the stored collection and return a ready session.

        Args:
            settings: Settings to use; defaults to get_settings(). Logging is
                (re)configured from them.
            kv: Key-value backend; defaults to the one settings select.
            id_generator: Id source for new tasks (tests pass a fixed clock).
        """
        if settings is None:
            settings = get_settings()
        configure_logging(settings)
        bind_context(storage_key=settings.storage_key)

        if kv is None:
            validate_settings(settings)
            kv = create_key_value_store(settings)

        persistence = TaskPersistence(kv, key=settings.storage_key)
        store = TaskStore(persistence.load(), id_generator=id_generator)
        logger.info("session_opened", key=settings.storage_key, count=len(store))
        return cls(store, persistence)

    def close(self) -> None:
        """Stop persisting and refreshing; the session is inert afterwards."""
        self._unsubscribe()

    def _on_snapshot(self, tasks: tuple[Task, ...]) -> None:
        self.persistence.save(tasks)
        self._refresh(tasks)

    def _refresh(self, tasks: tuple[Task, ...]) -> None:
        self._visible = visible(tasks, self._filters)
        self._tags = distinct_tags(tasks)

    # ---- views ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.store.tasks

    @property
    def filters(self) -> FilterSet:
        return self._filters

    @property
    def edit_session(self) -> EditSession | None:
        return self.store.edit_session

    @property
    def visible_tasks(self) -> tuple[Task, ...]:
        return self._visible

    @property
    def all_tags(self) -> tuple[str, ...]:
        return self._tags

    # ---- task mutations ----

    def add(
        self,
        text: str,
        tag: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Task | None:
        return self.store.add(text, tag, start_date, end_date)

    def toggle_completed(self, task_id: int) -> Task | None:
        return self.store.toggle_completed(task_id)

    def remove(self, task_id: int) -> bool:
        return self.store.remove(task_id)

    def begin_edit(self, task_id: int) -> EditSession | None:
        return self.store.begin_edit(task_id)

    def update_edit(self, **changes) -> EditSession | None:
        return self.store.update_edit(**changes)

    def commit_edit(
        self,
        task_id: int,
        new_text: str,
        new_start_date: date | None = None,
        new_end_date: date | None = None,
    ) -> Task | None:
        return self.store.commit_edit(task_id, new_text, new_start_date, new_end_date)

    def save_edit(self) -> Task | None:
        return self.store.save_edit()

    def cancel_edit(self) -> EditSession | None:
        return self.store.cancel_edit()

    # ---- filters ----

    def _set_filters(self, filters: FilterSet) -> FilterSet:
        self._filters = filters
        self._visible = visible(self.store.tasks, filters)
        return filters

    def toggle_filter(self, tag: str) -> FilterSet:
        return self._set_filters(toggle_filter(self._filters, tag))

    def remove_filter(self, tag: str) -> FilterSet:
        return self._set_filters(remove_filter(self._filters, tag))

    def clear_filters(self) -> FilterSet:
        return self._set_filters(())
