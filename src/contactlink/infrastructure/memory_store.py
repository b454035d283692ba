"""In-memory implementation of ContactStore (no DB)."""

import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from contactlink.domain import Contact, LinkPrecedence
from contactlink.domain.entities import utcnow


class InMemoryContactStore:
    """Stores contacts in a dict keyed by id. Ids are assigned in creation order.

    now is injectable so tests can pin created_at (e.g. to force timestamp ties).
    """

    def __init__(self, now: Callable[[], datetime] = utcnow) -> None:
        self._now = now
        self._by_id: dict[int, Contact] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _active(self) -> list[Contact]:
        return sorted(
            (c for c in self._by_id.values() if not c.is_deleted),
            key=lambda c: c.sort_key,
        )

    def find_by_fields(
        self, email: str | None, phone_number: str | None
    ) -> list[Contact]:
        if not email and not phone_number:
            return []
        with self._lock:
            return [
                c
                for c in self._active()
                if (email and c.email == email)
                or (phone_number and c.phone_number == phone_number)
            ]

    def find_by_ids_or_linked_ids(
        self, ids: Iterable[int], linked_ids: Iterable[int]
    ) -> list[Contact]:
        id_set, linked_set = set(ids), set(linked_ids)
        if not id_set and not linked_set:
            return []
        with self._lock:
            return [
                c
                for c in self._active()
                if c.id in id_set
                or (c.linked_id is not None and c.linked_id in linked_set)
            ]

    def insert(
        self,
        email: str | None,
        phone_number: str | None,
        linked_id: int | None,
        link_precedence: LinkPrecedence,
    ) -> Contact:
        with self._lock:
            now = self._now()
            contact = Contact(
                id=self._next_id,
                email=email,
                phone_number=phone_number,
                linked_id=linked_id,
                link_precedence=link_precedence,
                created_at=now,
                updated_at=now,
            )
            self._by_id[contact.id] = contact
            self._next_id += 1
            return contact

    def update_many_precedence_and_link(
        self, ids: Iterable[int], link_precedence: LinkPrecedence, linked_id: int | None
    ) -> int:
        id_set = set(ids)
        if not id_set:
            return 0
        with self._lock:
            now = self._now()
            targets = [c for c in self._active() if c.id in id_set]
            for contact in targets:
                self._by_id[contact.id] = replace(
                    contact,
                    link_precedence=link_precedence,
                    linked_id=linked_id,
                    updated_at=now,
                )
            return len(targets)

    def update_many_linked_id(
        self, old_linked_ids: Iterable[int], new_linked_id: int
    ) -> int:
        old_set = set(old_linked_ids)
        if not old_set:
            return 0
        with self._lock:
            now = self._now()
            targets = [c for c in self._active() if c.linked_id in old_set]
            for contact in targets:
                self._by_id[contact.id] = replace(
                    contact, linked_id=new_linked_id, updated_at=now
                )
            return len(targets)

    def list_active(self) -> list[Contact]:
        with self._lock:
            return self._active()

    # Helpers outside the ContactStore port (tests, scripts).

    def get(self, contact_id: int) -> Contact | None:
        """Return the contact with the given id, deleted or not."""
        with self._lock:
            return self._by_id.get(contact_id)

    def soft_delete(self, contact_id: int) -> bool:
        """Mark a contact deleted. Returns True if it existed and was active."""
        with self._lock:
            contact = self._by_id.get(contact_id)
            if contact is None or contact.is_deleted:
                return False
            now = self._now()
            self._by_id[contact_id] = replace(contact, deleted_at=now, updated_at=now)
            return True
