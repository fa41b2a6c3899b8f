"""Tests for TaskStore mutations, snapshots and the edit session."""

from datetime import date

import pytest

from tasklist.models import EditTransition, Task
from tasklist.store import TaskStore


@pytest.fixture
def store(id_generator) -> TaskStore:
    return TaskStore(id_generator=id_generator)


@pytest.fixture
def snapshots(store: TaskStore) -> list:
    received: list = []
    store.subscribe(received.append)
    return received


@pytest.fixture
def transitions(store: TaskStore) -> list:
    received: list = []
    store.on_edit_transition(lambda edge, session: received.append((edge, session.task_id)))
    return received


class TestAdd:
    """Tests for TaskStore.add."""

    def test_add_appends_task(self, store):
        task = store.add("Buy milk", "errand")
        assert store.tasks == (task,)
        assert task.text == "Buy milk"
        assert task.tags == ("errand",)
        assert task.completed is False

    def test_add_trims_text(self, store):
        task = store.add("  Call mom \n")
        assert task.text == "Call mom"

    def test_add_without_tag(self, store):
        assert store.add("No tag").tags == ()
        assert store.add("Empty tag", "").tags == ()

    def test_add_with_dates(self, store):
        task = store.add("Trip", None, date(2024, 5, 1), date(2024, 5, 3))
        assert task.start_date == date(2024, 5, 1)
        assert task.end_date == date(2024, 5, 3)

    def test_end_before_start_is_accepted(self, store):
        task = store.add("Backwards", None, date(2024, 5, 3), date(2024, 5, 1))
        assert task.end_date < task.start_date

    def test_add_grows_by_one_with_fresh_id(self, store):
        store.add("one")
        store.add("two")
        before = store.tasks
        task = store.add("three")
        assert len(store) == len(before) + 1
        assert task.id not in {t.id for t in before}

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_empty_text_is_rejected(self, store, snapshots, text):
        store.add("keep")
        before = store.tasks
        assert store.add(text, "tag") is None
        assert store.tasks == before
        assert len(snapshots) == 1

    def test_order_is_insertion_order(self, store):
        for text in ["a", "b", "c"]:
            store.add(text)
        assert [t.text for t in store] == ["a", "b", "c"]

    def test_rapid_adds_get_unique_ids(self, store):
        # the fixed clock never advances
        ids = [store.add(f"task {i}").id for i in range(50)]
        assert len(set(ids)) == 50


class TestToggleAndRemove:
    """Tests for toggle_completed and remove."""

    def test_toggle_flips(self, store):
        task = store.add("Task")
        toggled = store.toggle_completed(task.id)
        assert toggled.completed is True
        assert store.get(task.id).completed is True

    def test_toggle_twice_restores(self, store):
        task = store.add("Task")
        store.toggle_completed(task.id)
        store.toggle_completed(task.id)
        assert store.get(task.id).completed is False

    def test_toggle_unknown_id(self, store, snapshots):
        store.add("Task")
        assert store.toggle_completed(999) is None
        assert len(snapshots) == 1

    def test_toggle_keeps_position(self, store):
        a, b, c = store.add("a"), store.add("b"), store.add("c")
        store.toggle_completed(b.id)
        assert [t.id for t in store] == [a.id, b.id, c.id]

    def test_remove(self, store):
        a = store.add("a")
        b = store.add("b")
        assert store.remove(a.id) is True
        assert store.tasks == (b,)

    def test_remove_is_idempotent(self, store, snapshots):
        task = store.add("a")
        store.add("b")
        assert store.remove(task.id) is True
        after_first = store.tasks
        assert store.remove(task.id) is False
        assert store.tasks == after_first
        assert len(snapshots) == 3


class TestSnapshots:
    """Tests for snapshot immutability and notification."""

    def test_each_mutation_notifies_with_new_snapshot(self, store, snapshots):
        task = store.add("a")
        store.toggle_completed(task.id)
        store.remove(task.id)
        assert len(snapshots) == 3
        assert snapshots[-1] == ()
        assert snapshots[0][0].completed is False
        assert snapshots[1][0].completed is True

    def test_old_snapshot_unchanged_after_mutation(self, store):
        task = store.add("a")
        old = store.tasks
        store.toggle_completed(task.id)
        assert old[0].completed is False
        assert store.tasks[0] is not old[0]

    def test_listener_sees_latest_state(self, store):
        seen = []
        store.subscribe(lambda tasks: seen.append(store.tasks is tasks))
        store.add("a")
        assert seen == [True]

    def test_unsubscribe(self, store):
        received = []
        unsubscribe = store.subscribe(received.append)
        store.add("a")
        unsubscribe()
        store.add("b")
        assert len(received) == 1

    def test_replace_all_does_not_notify(self, store, snapshots):
        store.replace_all([Task(id=1, text="loaded")])
        assert store.tasks == (Task(id=1, text="loaded"),)
        assert snapshots == []

    def test_replace_all_rejects_duplicate_ids(self, store):
        with pytest.raises(ValueError, match="duplicate"):
            store.replace_all([Task(id=1, text="a"), Task(id=1, text="b")])

    def test_ids_after_load_exceed_loaded_ids(self, fixed_clock, id_generator):
        future_id = fixed_clock.now_ms + 1000
        store = TaskStore([Task(id=future_id, text="loaded")], id_generator=id_generator)
        assert store.add("new").id > future_id


class TestEditSession:
    """Tests for the edit-session state machine."""

    def test_begin_edit_loads_scratch(self, store, transitions):
        task = store.add("Draft", None, date(2024, 1, 1), None)
        session = store.begin_edit(task.id)
        assert session.task_id == task.id
        assert session.text == "Draft"
        assert session.start_date == date(2024, 1, 1)
        assert session.end_date is None
        assert store.edit_session == session
        assert transitions == [(EditTransition.STARTED, task.id)]

    def test_begin_edit_unknown_id(self, store, transitions):
        task = store.add("a")
        store.begin_edit(task.id)
        assert store.begin_edit(999) is None
        assert store.edit_session.task_id == task.id
        assert transitions == [(EditTransition.STARTED, task.id)]

    def test_switching_edit_abandons_previous(self, store, transitions):
        a = store.add("a")
        b = store.add("b")
        store.begin_edit(a.id)
        store.update_edit(text="unsaved change")
        store.begin_edit(b.id)
        assert transitions == [
            (EditTransition.STARTED, a.id),
            (EditTransition.ABANDONED, a.id),
            (EditTransition.STARTED, b.id),
        ]
        assert store.get(a.id).text == "a"
        assert store.edit_session.task_id == b.id

    def test_update_edit_changes_only_given_fields(self, store):
        task = store.add("a", None, date(2024, 1, 1), date(2024, 1, 2))
        store.begin_edit(task.id)
        session = store.update_edit(end_date=None)
        assert session.text == "a"
        assert session.start_date == date(2024, 1, 1)
        assert session.end_date is None

    def test_update_edit_without_session(self, store):
        assert store.update_edit(text="x") is None

    def test_commit_edit(self, store, transitions, snapshots):
        task = store.add("old", "tag")
        store.begin_edit(task.id)
        updated = store.commit_edit(task.id, "new", date(2024, 2, 1), date(2024, 2, 2))
        assert updated.text == "new"
        assert updated.tags == ("tag",)
        assert updated.start_date == date(2024, 2, 1)
        assert updated.end_date == date(2024, 2, 2)
        assert store.edit_session is None
        assert transitions[-1] == (EditTransition.COMMITTED, task.id)
        assert len(snapshots) == 2

    def test_commit_edit_snapshot_sees_no_session(self, store):
        task = store.add("old")
        store.begin_edit(task.id)
        seen = []
        store.subscribe(lambda tasks: seen.append((tasks[0].text, store.edit_session)))
        store.on_edit_transition(lambda edge, session: seen.append((edge, store.get(task.id).text)))

        store.commit_edit(task.id, "new")
        assert seen == [("new", None), (EditTransition.COMMITTED, "new")]

    def test_commit_edit_other_task_abandons_before_snapshot(self, store):
        a = store.add("a")
        b = store.add("b")
        store.begin_edit(a.id)
        sessions = []
        store.subscribe(lambda tasks: sessions.append(store.edit_session))

        store.commit_edit(b.id, "b2")
        assert sessions == [None]

    def test_commit_edit_allows_empty_text(self, store):
        task = store.add("old")
        assert store.commit_edit(task.id, "").text == ""

    def test_commit_edit_clears_dates_when_omitted(self, store):
        task = store.add("old", None, date(2024, 1, 1), date(2024, 1, 2))
        updated = store.commit_edit(task.id, "old")
        assert updated.start_date is None
        assert updated.end_date is None

    def test_commit_edit_unknown_id(self, store, snapshots):
        task = store.add("a")
        store.begin_edit(task.id)
        assert store.commit_edit(999, "x") is None
        assert store.edit_session is not None
        assert len(snapshots) == 1

    def test_save_edit_commits_scratch(self, store):
        task = store.add("a")
        store.begin_edit(task.id)
        store.update_edit(text="b", start_date=date(2024, 3, 3))
        updated = store.save_edit()
        assert updated.text == "b"
        assert updated.start_date == date(2024, 3, 3)
        assert store.edit_session is None

    def test_save_edit_without_session(self, store):
        assert store.save_edit() is None

    def test_cancel_edit(self, store, transitions, snapshots):
        task = store.add("a")
        store.begin_edit(task.id)
        store.update_edit(text="discard me")
        cancelled = store.cancel_edit()
        assert cancelled.text == "discard me"
        assert store.edit_session is None
        assert store.get(task.id).text == "a"
        assert transitions[-1] == (EditTransition.CANCELLED, task.id)
        assert len(snapshots) == 1

    def test_removing_edited_task_abandons_session(self, store, transitions):
        task = store.add("a")
        store.begin_edit(task.id)
        store.remove(task.id)
        assert store.edit_session is None
        assert transitions[-1] == (EditTransition.ABANDONED, task.id)
