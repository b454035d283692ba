"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from contactlink.application.dto import (
    ClusterGroup,
    ClusterListing,
    ClusterView,
    IdentifyQuery,
)
from contactlink.application.errors import (
    IdentityError,
    InvalidInput,
    NoCanonicalPrimary,
)
from contactlink.application.identity_resolver import IdentityResolver
from contactlink.application.ports import ContactStore

__all__ = [
    "ClusterGroup",
    "ClusterListing",
    "ClusterView",
    "ContactStore",
    "IdentifyQuery",
    "IdentityError",
    "IdentityResolver",
    "InvalidInput",
    "NoCanonicalPrimary",
]
