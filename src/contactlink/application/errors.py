"""Errors raised by the identity resolver. Store errors are not wrapped."""


class IdentityError(Exception):
    """Base class for resolver errors."""


class InvalidInput(IdentityError, ValueError):
    """Neither an email nor a phone number was supplied."""


class NoCanonicalPrimary(IdentityError, RuntimeError):
    """A cluster was found with no primary contact: the store is inconsistent."""

    def __init__(self, message: str, contact_ids: list[int] | None = None) -> None:
        super().__init__(message)
        self.contact_ids = list(contact_ids or [])
