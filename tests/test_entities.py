"""Tests for Contact invariants and the identify DTOs."""

from datetime import datetime, timezone

import pytest

from contactlink.application import ClusterView, IdentifyQuery
from contactlink.domain import Contact, LinkPrecedence


def test_contact_requires_email_or_phone():
    with pytest.raises(ValueError, match="email or a phone"):
        Contact(id=1)
    assert Contact(id=1, email="a@x.com").phone_number is None
    assert Contact(id=2, phone_number="123").email is None


def test_primary_cannot_have_linked_id():
    with pytest.raises(ValueError, match="Primary"):
        Contact(id=2, email="a", linked_id=1, link_precedence=LinkPrecedence.PRIMARY)


def test_secondary_requires_linked_id_other_than_itself():
    with pytest.raises(ValueError, match="must have a linked_id"):
        Contact(id=2, email="a", link_precedence=LinkPrecedence.SECONDARY)
    with pytest.raises(ValueError, match="itself"):
        Contact(id=2, email="a", linked_id=2, link_precedence=LinkPrecedence.SECONDARY)


def test_sort_key_breaks_timestamp_ties_by_id():
    t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    later_id = Contact(id=5, email="a", created_at=t)
    earlier_id = Contact(id=3, email="b", created_at=t)
    assert sorted([later_id, earlier_id], key=lambda c: c.sort_key) == [earlier_id, later_id]


def test_link_precedence_string_values():
    assert LinkPrecedence("primary") is LinkPrecedence.PRIMARY
    assert LinkPrecedence.SECONDARY.value == "secondary"


def test_identify_query_strips_and_blanks_to_none():
    q = IdentifyQuery(email="  a@x.com ", phone_number="   ")
    assert q.email == "a@x.com"
    assert q.phone_number is None
    assert not q.is_empty
    assert IdentifyQuery(email="", phone_number=None).is_empty


def test_cluster_view_orders_primary_first_and_dedupes():
    primary = Contact(id=1, email="a", phone_number="p1")
    secondaries = [
        Contact(id=2, email="b", linked_id=1, link_precedence=LinkPrecedence.SECONDARY),
        Contact(id=3, email="a", phone_number="p2", linked_id=1, link_precedence=LinkPrecedence.SECONDARY),
        Contact(id=4, phone_number="p1", linked_id=1, link_precedence=LinkPrecedence.SECONDARY),
    ]
    view = ClusterView.from_contacts(primary, secondaries)
    assert view.emails == ["a", "b"]
    assert view.phone_numbers == ["p1", "p2"]
    assert view.secondary_contact_ids == [2, 3, 4]


def test_cluster_view_payload_keeps_wire_field_names():
    view = ClusterView(primary_contact_id=1, emails=["a"], phone_numbers=[], secondary_contact_ids=[])
    assert view.to_payload() == {
        "contact": {
            "primaryContatctId": 1,
            "emails": ["a"],
            "phoneNumbers": [],
            "secondaryContactIds": [],
        }
    }
