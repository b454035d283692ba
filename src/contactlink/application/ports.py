"""Application ports (interfaces). Implemented by infrastructure adapters."""

from collections.abc import Iterable
from typing import Protocol

from contactlink.domain import Contact, LinkPrecedence


class ContactStore(Protocol):
    """Persists and queries contacts.

    Every list excludes soft-deleted contacts and is ordered by
    (created_at, id) ascending. Updates never touch soft-deleted contacts.
    """

    def find_by_fields(
        self, email: str | None, phone_number: str | None
    ) -> list[Contact]:
        """Return contacts whose email or phone number equals a supplied value."""
        ...

    def find_by_ids_or_linked_ids(
        self, ids: Iterable[int], linked_ids: Iterable[int]
    ) -> list[Contact]:
        """Return contacts whose id is in ids or whose linked_id is in linked_ids."""
        ...

    def insert(
        self,
        email: str | None,
        phone_number: str | None,
        linked_id: int | None,
        link_precedence: LinkPrecedence,
    ) -> Contact:
        """Create a contact and return it with its assigned id and timestamps."""
        ...

    def update_many_precedence_and_link(
        self, ids: Iterable[int], link_precedence: LinkPrecedence, linked_id: int | None
    ) -> int:
        """Set precedence and linked_id on the given contacts. Returns count updated."""
        ...

    def update_many_linked_id(
        self, old_linked_ids: Iterable[int], new_linked_id: int
    ) -> int:
        """Re-point contacts linked to any of old_linked_ids. Returns count updated."""
        ...

    def list_active(self) -> list[Contact]:
        """Return every non-deleted contact."""
        ...
