#!/usr/bin/env python3
"""Manual smoke run: resolve a few identities against the configured store.

Runs the same sequence the service sees in production: a new contact, a new
phone for a known email, a new email for a known phone, then email-only and
phone-only lookups. Prints each consolidated view as JSON. Run from repo root
with .env (CONTACT_STORE, NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD), or pass
--memory to use a throwaway in-memory store.
"""
import argparse
import json
import logging
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from dotenv import load_dotenv  # noqa: E402
from neo4j import GraphDatabase  # noqa: E402

from contactlink.application import IdentifyQuery, IdentityResolver  # noqa: E402
from contactlink.infrastructure import (  # noqa: E402
    InMemoryContactStore,
    Neo4jContactStore,
    ensure_contact_constraints,
)

load_dotenv(REPO_ROOT / ".env")

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

_CASES = (
    ("New contact", "test@example.com", "+1234567890"),
    ("Existing contact with same email", "test@example.com", "+9876543210"),
    ("Existing contact with same phone number", "another@example.com", "+1234567890"),
    ("Only email provided", "newuser@example.com", None),
    ("Only phone number provided", None, "+5555555555"),
)


def _run(resolver: IdentityResolver) -> None:
    for name, email, phone in _CASES:
        print(f"Case: {name}")
        view = resolver.resolve(IdentifyQuery(email=email, phone_number=phone))
        print(json.dumps(view.to_payload(), indent=2))
        print()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--memory",
        action="store_true",
        help="use an in-memory store instead of Neo4j",
    )
    args = parser.parse_args()
    if args.memory or os.environ.get("CONTACT_STORE", "").strip().lower() == "memory":
        _run(IdentityResolver(InMemoryContactStore()))
        return 0

    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    driver = GraphDatabase.driver(uri, auth=(user, password))
    try:
        ensure_contact_constraints(driver)
        _run(IdentityResolver(Neo4jContactStore(driver)))
        return 0
    finally:
        driver.close()


if __name__ == "__main__":
    sys.exit(main())
