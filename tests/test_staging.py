# Copyright (C) 2025 Heston Hamilton

from __future__ import annotations

import uuid

import pytest

from alias_manager.aliases import AliasRecord, decode
from alias_manager.errors import PersistenceError
from alias_manager.staging import Outcome, SortOrder, StagingStore, Status


def make_store(*pairs: tuple[str, str]) -> StagingStore:
    return StagingStore([AliasRecord(name=name, command=command) for name, command in pairs])


def names(records) -> list[str]:
    return [record.name for record in records]


class RecordingSave:
    def __init__(self) -> None:
        self.writes: list[str] = []

    def __call__(self, text: str) -> None:
        self.writes.append(text)


def failing_save(text: str) -> None:
    raise PersistenceError("disk full")


def test_initialize_sets_both_sets_in_file_order() -> None:
    store = make_store(("b", "2"), ("a", "1"))

    assert names(store.committed) == ["b", "a"]
    assert names(store.pending) == ["b", "a"]
    assert store.has_unsaved_changes() is False


def test_initialize_keeps_last_definition_of_duplicate_name() -> None:
    store = StagingStore(decode("alias ll='ls -l'\nalias gs='git status'\nalias ll='ls -la'"))

    assert [(r.name, r.command) for r in store.pending] == [("gs", "git status"), ("ll", "ls -la")]


def test_add_appends_record_with_fresh_id() -> None:
    store = make_store(("a", "1"))

    outcome = store.add("b", "2")

    assert outcome.ok
    assert outcome.changed is True
    assert outcome.record is not None
    assert names(store.pending) == ["a", "b"]
    assert outcome.record.id != store.pending[0].id
    assert store.has_unsaved_changes() is True


@pytest.mark.parametrize(("name", "command"), [("", "ls"), ("ll", ""), ("", "")])
def test_add_rejects_empty_values(name: str, command: str) -> None:
    store = make_store(("a", "1"))

    outcome = store.add(name, command)

    assert outcome.status is Status.VALIDATION_ERROR
    assert names(store.pending) == ["a"]


def test_add_collision_leaves_pending_unchanged() -> None:
    store = make_store(("ll", "ls -l"))

    outcome = store.add("ll", "ls -a")

    assert outcome.status is Status.COLLISION
    assert outcome.ok is False
    assert len(store.pending) == 1
    assert store.pending[0].command == "ls -l"


def test_collision_check_is_case_sensitive() -> None:
    store = make_store(("ll", "ls -l"))

    assert store.add("LL", "ls -L").ok
    assert names(store.pending) == ["ll", "LL"]


def test_update_replaces_in_place_and_keeps_id() -> None:
    store = make_store(("a", "1"), ("b", "2"), ("c", "3"))
    target = store.pending[1]

    outcome = store.update(target.id, "bb", "22")

    assert outcome.ok
    assert [(r.name, r.command) for r in store.pending] == [("a", "1"), ("bb", "22"), ("c", "3")]
    assert store.pending[1].id == target.id
    assert store.committed[1] == AliasRecord(name="b", command="2")


def test_update_may_keep_own_name() -> None:
    store = make_store(("ll", "ls -l"))

    outcome = store.update(store.pending[0].id, "ll", "ls -la")

    assert outcome.ok
    assert store.pending[0].command == "ls -la"


def test_update_collision_with_other_record() -> None:
    store = make_store(("a", "1"), ("b", "2"))

    outcome = store.update(store.pending[1].id, "a", "2")

    assert outcome.status is Status.COLLISION
    assert [(r.name, r.command) for r in store.pending] == [("a", "1"), ("b", "2")]


def test_update_rejects_empty_values() -> None:
    store = make_store(("a", "1"))

    outcome = store.update(store.pending[0].id, "a", "")

    assert outcome.status is Status.VALIDATION_ERROR
    assert store.pending[0].command == "1"


def test_update_unknown_id_is_not_found() -> None:
    store = make_store(("a", "1"))

    outcome = store.update(uuid.uuid4(), "b", "2")

    assert outcome.status is Status.NOT_FOUND
    assert names(store.pending) == ["a"]


def test_update_with_same_values_is_not_a_change() -> None:
    store = make_store(("a", "1"))

    outcome = store.update(store.pending[0].id, "a", "1")

    assert outcome.ok
    assert outcome.changed is False
    assert store.has_unsaved_changes() is False


def test_names_stay_unique_across_operations() -> None:
    store = make_store(("a", "1"))
    store.add("b", "2")
    store.add("a", "3")
    store.update(store.pending[1].id, "a", "4")
    store.add("c", "5")
    store.update(store.pending[2].id, "b", "6")

    pending_names = names(store.pending)
    assert len(pending_names) == len(set(pending_names))


def test_delete_removes_record() -> None:
    store = make_store(("a", "1"), ("b", "2"))

    outcome = store.delete(store.pending[0].id)

    assert outcome.ok and outcome.changed
    assert names(store.pending) == ["b"]
    assert names(store.committed) == ["a", "b"]


def test_delete_unknown_id_is_noop() -> None:
    store = make_store(("a", "1"), ("b", "2"))
    before = store.pending

    outcome = store.delete(uuid.uuid4())

    assert outcome.ok
    assert outcome.changed is False
    assert store.pending == before
    assert len(store.pending) == 2


def test_sort_orders() -> None:
    store = make_store(("b", "2"), ("a", "1"), ("c", "3"))

    store.sort(SortOrder.ASCENDING)
    assert names(store.pending) == ["a", "b", "c"]

    store.sort(SortOrder.DESCENDING)
    assert names(store.pending) == ["c", "b", "a"]

    store.sort(SortOrder.NONE)
    assert names(store.pending) == ["b", "a", "c"]
    assert names(store.committed) == ["b", "a", "c"]


def test_sort_is_case_sensitive() -> None:
    store = make_store(("b", "1"), ("B", "2"), ("a", "3"))

    store.sort(SortOrder.ASCENDING)

    assert names(store.pending) == ["B", "a", "b"]


def test_sort_marks_store_dirty() -> None:
    store = make_store(("b", "2"), ("a", "1"))

    store.sort(SortOrder.ASCENDING)
    assert store.has_unsaved_changes() is True

    store.sort(SortOrder.NONE)
    assert store.has_unsaved_changes() is False


def test_sort_none_keeps_pending_edits() -> None:
    store = make_store(("b", "2"), ("a", "1"))
    store.sort(SortOrder.ASCENDING)
    store.update(store.pending[0].id, "aa", "11")
    store.add("0", "zero")

    store.sort(SortOrder.NONE)

    assert [(r.name, r.command) for r in store.pending] == [("b", "2"), ("aa", "11"), ("0", "zero")]


def test_filter_is_case_insensitive_on_name_and_command() -> None:
    store = make_store(("Gco", "git checkout"), ("ll", "ls -l"))

    assert names(store.filter("GCO")) == ["Gco"]
    assert names(store.filter("checkout")) == ["Gco"]
    assert store.filter("xyz") == []
    assert names(store.filter("")) == ["Gco", "ll"]
    assert names(store.pending) == ["Gco", "ll"]


def test_dirty_tracking_lifecycle() -> None:
    store = make_store(("a", "1"))
    save = RecordingSave()
    assert store.has_unsaved_changes() is False

    store.add("b", "2")
    assert store.has_unsaved_changes() is True

    outcome = store.commit(save)
    assert outcome.ok
    assert store.has_unsaved_changes() is False
    assert save.writes == ["alias a='1'\nalias b='2'"]

    store.delete(store.pending[0].id)
    store.add("c", "3")
    assert store.has_unsaved_changes() is True

    assert store.rollback() is True
    assert store.pending == store.committed
    assert store.has_unsaved_changes() is False


def test_dirty_check_uses_value_equality() -> None:
    store = make_store(("a", "1"))
    original = store.pending[0]

    store.delete(original.id)
    store.add("a", "1")

    assert store.pending[0].id != original.id
    assert store.has_unsaved_changes() is False


def test_commit_failure_keeps_committed_and_pending() -> None:
    store = make_store(("a", "1"))
    store.add("b", "2")
    pending_before = store.pending

    outcome = store.commit(failing_save)

    assert outcome.status is Status.PERSISTENCE_ERROR
    assert "disk full" in outcome.message
    assert names(store.committed) == ["a"]
    assert store.pending == pending_before
    assert store.has_unsaved_changes() is True


def test_commit_rejects_reentrant_save() -> None:
    store = make_store(("a", "1"))
    nested: list[Outcome] = []

    def reentrant_save(text: str) -> None:
        nested.append(store.commit(lambda _: None))

    outcome = store.commit(reentrant_save)

    assert outcome.ok
    assert nested[0].status is Status.PERSISTENCE_ERROR


def test_commit_copies_pending_snapshot() -> None:
    store = make_store(("a", "1"))
    store.commit(RecordingSave())

    store.add("b", "2")

    assert names(store.committed) == ["a"]


def test_sort_order_cycle() -> None:
    assert SortOrder.NONE.next() is SortOrder.ASCENDING
    assert SortOrder.ASCENDING.next() is SortOrder.DESCENDING
    assert SortOrder.DESCENDING.next() is SortOrder.NONE


def test_outcome_payload() -> None:
    store = make_store()
    outcome = store.add("ll", "ls -l")

    payload = outcome.to_payload()

    assert payload["status"] == "ok"
    assert payload["changed"] is True
    assert payload["alias"]["name"] == "ll"
    assert payload["alias"]["id"] == str(outcome.record.id)


def test_update_unknown_id_with_taken_name_is_not_found() -> None:
    store = make_store(("a", "1"))

    outcome = store.update(uuid.uuid4(), "a", "2")

    assert outcome.status is Status.NOT_FOUND


@pytest.mark.parametrize("name", ["a=b", "=x", "x="])
def test_names_containing_separator_are_rejected(name: str) -> None:
    store = make_store(("ll", "ls -l"))

    added = store.add(name, "echo")
    updated = store.update(store.pending[0].id, name, "echo")

    assert added.status is Status.VALIDATION_ERROR
    assert updated.status is Status.VALIDATION_ERROR
    assert [(r.name, r.command) for r in store.pending] == [("ll", "ls -l")]
