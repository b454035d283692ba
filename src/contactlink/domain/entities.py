"""Domain entities: Contact and LinkPrecedence."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkPrecedence(str, Enum):
    """Role of a contact inside its cluster."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class Contact:
    """
    One contact record: an email and/or phone number seen together.
    A PRIMARY anchors a cluster; a SECONDARY points at its cluster's primary.
    """

    id: int
    email: str | None = None
    phone_number: str | None = None
    linked_id: int | None = None
    link_precedence: LinkPrecedence = LinkPrecedence.PRIMARY
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    deleted_at: datetime | None = None

    def __post_init__(self):
        if not self.email and not self.phone_number:
            raise ValueError("Contact must have an email or a phone number.")

        if self.link_precedence == LinkPrecedence.PRIMARY:
            if self.linked_id is not None:
                raise ValueError("Primary contact cannot have a linked_id.")
        else:
            if self.linked_id is None:
                raise ValueError("Secondary contact must have a linked_id.")
            if self.linked_id == self.id:
                raise ValueError("Secondary contact cannot link to itself.")

    @property
    def is_primary(self) -> bool:
        return self.link_precedence == LinkPrecedence.PRIMARY

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def sort_key(self) -> tuple[datetime, int]:
        """Creation order; id breaks ties between identical timestamps."""
        return (self.created_at, self.id)
