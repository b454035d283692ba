"""
contactlink core: clean-architecture layout.

- domain: entities (Contact, LinkPrecedence). No outer dependencies.
- application: use case (IdentityResolver), port (ContactStore), DTOs, errors.
- infrastructure: adapters (InMemoryContactStore, Neo4jContactStore), phone normalization.
"""

from contactlink.application import (
    ClusterGroup,
    ClusterListing,
    ClusterView,
    ContactStore,
    IdentifyQuery,
    IdentityError,
    IdentityResolver,
    InvalidInput,
    NoCanonicalPrimary,
)
from contactlink.domain import Contact, LinkPrecedence
from contactlink.infrastructure import InMemoryContactStore, Neo4jContactStore

__all__ = [
    "ClusterGroup",
    "ClusterListing",
    "ClusterView",
    "Contact",
    "ContactStore",
    "IdentifyQuery",
    "IdentityError",
    "IdentityResolver",
    "InMemoryContactStore",
    "InvalidInput",
    "LinkPrecedence",
    "Neo4jContactStore",
    "NoCanonicalPrimary",
]
