"""Neo4j implementation of ContactStore.
Graph: one (:Contact) node per record. Links are stored as a linked_id property
(not relationships) so lookups by id and by linked_id are plain indexed matches.
Ids come from a (:ContactSequence {name: 'contact'}) counter node. Timestamps are
Neo4j DateTime values taken from the server clock after the counter is locked,
so id order and created_at order agree.
"""

from collections.abc import Iterable
from datetime import datetime

from contactlink.domain import Contact, LinkPrecedence

SEQUENCE_NAME = "contact"

_FIND_BY_FIELDS_QUERY = """
MATCH (c:Contact)
WHERE c.deleted_at IS NULL
  AND (($email IS NOT NULL AND c.email = $email)
       OR ($phone_number IS NOT NULL AND c.phone_number = $phone_number))
RETURN c
ORDER BY c.created_at, c.id
"""

_FIND_BY_IDS_OR_LINKED_IDS_QUERY = """
MATCH (c:Contact)
WHERE c.deleted_at IS NULL
  AND (c.id IN $ids OR c.linked_id IN $linked_ids)
RETURN c
ORDER BY c.created_at, c.id
"""

_INSERT_QUERY = """
MERGE (s:ContactSequence {name: $sequence})
ON CREATE SET s.value = 0
SET s.value = s.value + 1
WITH s.value AS next_id, datetime.realtime() AS now
CREATE (c:Contact {
    id: next_id,
    email: $email,
    phone_number: $phone_number,
    linked_id: $linked_id,
    link_precedence: $link_precedence,
    created_at: now,
    updated_at: now
})
RETURN c
"""

_UPDATE_PRECEDENCE_AND_LINK_QUERY = """
MATCH (c:Contact)
WHERE c.id IN $ids AND c.deleted_at IS NULL
SET c.link_precedence = $link_precedence,
    c.linked_id = $linked_id,
    c.updated_at = datetime.realtime()
RETURN count(c) AS updated
"""

_UPDATE_LINKED_ID_QUERY = """
MATCH (c:Contact)
WHERE c.linked_id IN $old_linked_ids AND c.deleted_at IS NULL
SET c.linked_id = $new_linked_id,
    c.updated_at = datetime.realtime()
RETURN count(c) AS updated
"""

_LIST_ACTIVE_QUERY = """
MATCH (c:Contact)
WHERE c.deleted_at IS NULL
RETURN c
ORDER BY c.created_at, c.id
"""

_SOFT_DELETE_QUERY = """
MATCH (c:Contact {id: $id})
WHERE c.deleted_at IS NULL
WITH c, datetime.realtime() AS now
SET c.deleted_at = now, c.updated_at = now
RETURN c.id AS id
"""


def _to_native(value) -> datetime | None:
    if value is None:
        return None
    return value.to_native()


class Neo4jContactStore:
    """Stores contacts as Contact nodes in Neo4j.
    The driver is owned by the caller (opened at startup, closed at shutdown).
    """

    def __init__(self, driver: object) -> None:
        self._driver = driver

    def _fetch(self, query: str, **params) -> list[Contact]:
        with self._driver.session() as session:
            result = session.run(query, **params)
            return [_record_to_contact(rec) for rec in result]

    def _count(self, query: str, **params) -> int:
        with self._driver.session() as session:
            record = session.run(query, **params).single()
        return record["updated"] if record else 0

    def find_by_fields(
        self, email: str | None, phone_number: str | None
    ) -> list[Contact]:
        if not email and not phone_number:
            return []
        return self._fetch(
            _FIND_BY_FIELDS_QUERY,
            email=email or None,
            phone_number=phone_number or None,
        )

    def find_by_ids_or_linked_ids(
        self, ids: Iterable[int], linked_ids: Iterable[int]
    ) -> list[Contact]:
        ids, linked_ids = sorted(set(ids)), sorted(set(linked_ids))
        if not ids and not linked_ids:
            return []
        return self._fetch(
            _FIND_BY_IDS_OR_LINKED_IDS_QUERY, ids=ids, linked_ids=linked_ids
        )

    def insert(
        self,
        email: str | None,
        phone_number: str | None,
        linked_id: int | None,
        link_precedence: LinkPrecedence,
    ) -> Contact:
        with self._driver.session() as session:
            record = session.run(
                _INSERT_QUERY,
                sequence=SEQUENCE_NAME,
                email=email,
                phone_number=phone_number,
                linked_id=linked_id,
                link_precedence=LinkPrecedence(link_precedence).value,
            ).single()
        if not record:
            raise RuntimeError("insert: expected one result")
        return _record_to_contact(record)

    def update_many_precedence_and_link(
        self, ids: Iterable[int], link_precedence: LinkPrecedence, linked_id: int | None
    ) -> int:
        ids = sorted(set(ids))
        if not ids:
            return 0
        return self._count(
            _UPDATE_PRECEDENCE_AND_LINK_QUERY,
            ids=ids,
            link_precedence=LinkPrecedence(link_precedence).value,
            linked_id=linked_id,
        )

    def update_many_linked_id(
        self, old_linked_ids: Iterable[int], new_linked_id: int
    ) -> int:
        old_linked_ids = sorted(set(old_linked_ids))
        if not old_linked_ids:
            return 0
        return self._count(
            _UPDATE_LINKED_ID_QUERY,
            old_linked_ids=old_linked_ids,
            new_linked_id=new_linked_id,
        )

    def list_active(self) -> list[Contact]:
        return self._fetch(_LIST_ACTIVE_QUERY)

    def soft_delete(self, contact_id: int) -> bool:
        """Mark a contact deleted. Returns True if it existed and was active."""
        with self._driver.session() as session:
            record = session.run(
                _SOFT_DELETE_QUERY, id=contact_id
            ).single()
        return record is not None


def _record_to_contact(record) -> Contact:
    c = record["c"]
    return Contact(
        id=c["id"],
        email=c.get("email") or None,
        phone_number=c.get("phone_number") or None,
        linked_id=c.get("linked_id"),
        link_precedence=LinkPrecedence(c["link_precedence"]),
        created_at=_to_native(c["created_at"]),
        updated_at=_to_native(c["updated_at"]),
        deleted_at=_to_native(c.get("deleted_at")),
    )
