"""Input value and result types for the identify flow."""

from dataclasses import dataclass, field

from contactlink.domain import Contact


@dataclass(frozen=True)
class IdentifyQuery:
    """(email, phone_number) pair as handed to the resolver. Blank values become None."""

    email: str | None = None
    phone_number: str | None = None

    def __post_init__(self):
        email = (self.email or "").strip() or None
        phone = (self.phone_number or "").strip() or None
        object.__setattr__(self, "email", email)
        object.__setattr__(self, "phone_number", phone)

    @property
    def is_empty(self) -> bool:
        return self.email is None and self.phone_number is None


@dataclass(frozen=True)
class ClusterView:
    """Consolidated identity: one primary and its secondaries."""

    primary_contact_id: int
    emails: list[str] = field(default_factory=list)
    phone_numbers: list[str] = field(default_factory=list)
    secondary_contact_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_contacts(cls, primary: Contact, secondaries: list[Contact]) -> "ClusterView":
        """Primary's values first, then secondaries' in the given order; duplicates dropped."""
        emails: list[str] = []
        phones: list[str] = []
        for contact in [primary, *secondaries]:
            if contact.email and contact.email not in emails:
                emails.append(contact.email)
            if contact.phone_number and contact.phone_number not in phones:
                phones.append(contact.phone_number)
        return cls(
            primary_contact_id=primary.id,
            emails=emails,
            phone_numbers=phones,
            secondary_contact_ids=[c.id for c in secondaries],
        )

    def to_payload(self) -> dict:
        """Wire shape. primaryContatctId keeps its historical spelling."""
        return {
            "contact": {
                "primaryContatctId": self.primary_contact_id,
                "emails": list(self.emails),
                "phoneNumbers": list(self.phone_numbers),
                "secondaryContactIds": list(self.secondary_contact_ids),
            }
        }


@dataclass(frozen=True)
class ClusterGroup:
    """A primary with the secondaries linked to it, for listings."""

    primary: Contact
    secondaries: list[Contact] = field(default_factory=list)

    @property
    def total_contacts(self) -> int:
        return 1 + len(self.secondaries)


@dataclass(frozen=True)
class ClusterListing:
    """Every active contact: clusters plus secondaries with no active primary."""

    groups: list[ClusterGroup] = field(default_factory=list)
    unlinked: list[Contact] = field(default_factory=list)

    @property
    def total_primary(self) -> int:
        return len(self.groups)

    @property
    def total_secondary(self) -> int:
        return sum(len(g.secondaries) for g in self.groups) + len(self.unlinked)

    @property
    def total_contacts(self) -> int:
        return self.total_primary + self.total_secondary
