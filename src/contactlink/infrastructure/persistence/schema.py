"""Neo4j schema for contacts: id uniqueness, id sequence, lookup indexes."""

_SCHEMA_QUERIES = (
    """
    CREATE CONSTRAINT contact_id_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE c.id IS UNIQUE
    """,
    """
    CREATE CONSTRAINT contact_sequence_unique IF NOT EXISTS
    FOR (s:ContactSequence) REQUIRE s.name IS UNIQUE
    """,
    "CREATE INDEX contact_email IF NOT EXISTS FOR (c:Contact) ON (c.email)",
    "CREATE INDEX contact_phone_number IF NOT EXISTS FOR (c:Contact) ON (c.phone_number)",
    "CREATE INDEX contact_linked_id IF NOT EXISTS FOR (c:Contact) ON (c.linked_id)",
)


def ensure_contact_constraints(driver) -> None:
    """Create Contact constraints and indexes if missing. Idempotent; call at startup."""
    with driver.session() as session:
        for query in _SCHEMA_QUERIES:
            session.run(query).consume()
