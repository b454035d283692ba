"""Tests for InMemoryContactStore: ordering, soft delete, batch updates."""

from datetime import datetime, timezone

from contactlink.domain import LinkPrecedence
from contactlink.infrastructure import InMemoryContactStore

PRIMARY = LinkPrecedence.PRIMARY
SECONDARY = LinkPrecedence.SECONDARY


def test_insert_assigns_increasing_ids_and_timestamps():
    store = InMemoryContactStore()
    a = store.insert("a", None, None, PRIMARY)
    b = store.insert(None, "p1", a.id, SECONDARY)
    assert b.id == a.id + 1
    assert a.created_at == a.updated_at
    assert a.deleted_at is None
    assert store.list_active() == [a, b]


def test_find_by_fields_matches_either_field_only_when_supplied():
    store = InMemoryContactStore()
    a = store.insert("a", None, None, PRIMARY)
    b = store.insert(None, "p1", None, PRIMARY)
    store.insert("c", "p2", None, PRIMARY)

    assert store.find_by_fields("a", "p1") == [a, b]
    assert store.find_by_fields("a", None) == [a]
    assert store.find_by_fields(None, "p1") == [b]
    assert store.find_by_fields(None, None) == []


def test_results_ordered_by_created_at_then_id():
    t_late = datetime(2024, 1, 2, tzinfo=timezone.utc)
    t_early = datetime(2024, 1, 1, tzinfo=timezone.utc)
    times = iter([t_late, t_early, t_early])
    store = InMemoryContactStore(now=lambda: next(times))
    first = store.insert("x", None, None, PRIMARY)
    second = store.insert("x", None, None, PRIMARY)
    third = store.insert("x", None, None, PRIMARY)

    assert [c.id for c in store.find_by_fields("x", None)] == [second.id, third.id, first.id]


def test_find_by_ids_or_linked_ids():
    store = InMemoryContactStore()
    a = store.insert("a", None, None, PRIMARY)
    s = store.insert("b", None, a.id, SECONDARY)
    other = store.insert("c", None, None, PRIMARY)

    assert store.find_by_ids_or_linked_ids([a.id], [a.id]) == [a, s]
    assert store.find_by_ids_or_linked_ids([other.id], []) == [other]
    assert store.find_by_ids_or_linked_ids([], []) == []


def test_soft_deleted_contacts_excluded_everywhere():
    store = InMemoryContactStore()
    a = store.insert("a", "p1", None, PRIMARY)
    s = store.insert("b", None, a.id, SECONDARY)
    assert store.soft_delete(s.id) is True
    assert store.soft_delete(s.id) is False
    assert store.soft_delete(999) is False

    assert store.find_by_fields("b", None) == []
    assert store.find_by_ids_or_linked_ids([s.id], [a.id]) == []
    assert store.list_active() == [a]
    assert store.update_many_linked_id([a.id], 42) == 0
    assert store.get(s.id).deleted_at is not None


def test_update_many_precedence_and_link_refreshes_updated_at():
    ticks = iter(
        datetime(2024, 1, d, tzinfo=timezone.utc) for d in range(1, 10)
    )
    store = InMemoryContactStore(now=lambda: next(ticks))
    a = store.insert("a", None, None, PRIMARY)
    b = store.insert("b", None, None, PRIMARY)

    assert store.update_many_precedence_and_link([b.id], SECONDARY, a.id) == 1
    demoted = store.get(b.id)
    assert demoted.link_precedence == SECONDARY
    assert demoted.linked_id == a.id
    assert demoted.created_at == b.created_at
    assert demoted.updated_at > b.updated_at
    assert store.update_many_precedence_and_link([], SECONDARY, a.id) == 0


def test_update_many_linked_id_repoints_only_matching():
    store = InMemoryContactStore()
    a = store.insert("a", None, None, PRIMARY)
    b = store.insert("b", None, None, PRIMARY)
    s1 = store.insert(None, "p1", b.id, SECONDARY)
    s2 = store.insert(None, "p2", a.id, SECONDARY)

    assert store.update_many_linked_id([b.id], a.id) == 1
    assert store.get(s1.id).linked_id == a.id
    assert store.get(s2.id).linked_id == a.id
    assert store.get(b.id).linked_id is None
