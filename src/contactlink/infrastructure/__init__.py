"""Infrastructure layer: concrete implementations of application ports."""

from contactlink.infrastructure.memory_store import InMemoryContactStore
from contactlink.infrastructure.persistence.neo4j_store import Neo4jContactStore
from contactlink.infrastructure.persistence.schema import ensure_contact_constraints
from contactlink.infrastructure.phone import canonical_phone, normalize_phone

__all__ = [
    "InMemoryContactStore",
    "Neo4jContactStore",
    "canonical_phone",
    "ensure_contact_constraints",
    "normalize_phone",
]
