"""Identity reconciliation: link an (email, phone) pair to its contact cluster."""

import logging

from contactlink.application.dto import (
    ClusterGroup,
    ClusterListing,
    ClusterView,
    IdentifyQuery,
)
from contactlink.application.errors import InvalidInput, NoCanonicalPrimary
from contactlink.application.ports import ContactStore
from contactlink.domain import Contact, LinkPrecedence

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Core flow: seed lookup -> expand -> pick oldest primary -> demote others
    -> record new information -> re-read cluster.

    Holds no lock between store calls. Concurrent calls may leave extra
    primaries or duplicate secondaries behind; the next call touching the
    cluster consolidates them under the oldest primary.
    """

    def __init__(self, store: ContactStore) -> None:
        self._store = store

    def resolve(self, query: IdentifyQuery) -> ClusterView:
        """Return the consolidated cluster for query, creating or relinking contacts as needed."""
        if query.is_empty:
            raise InvalidInput("At least one of email or phoneNumber must be provided")
        email, phone = query.email, query.phone_number
        logger.info("Identifying contact email=%s phone_number=%s", email, phone)

        seeds = self._store.find_by_fields(email, phone)
        logger.info("Found %d matching contacts", len(seeds))
        if not seeds:
            created = self._store.insert(email, phone, None, LinkPrecedence.PRIMARY)
            logger.info("Created primary contact %d", created.id)
            return ClusterView.from_contacts(created, [])

        cluster = self._expand(seeds)
        logger.info("Expanded to %d related contacts", len(cluster))

        canonical = _canonical_primary(cluster)
        contenders = [c for c in cluster if c.is_primary and c.id != canonical.id]
        stale_targets = _stale_link_targets(cluster, canonical)
        if contenders or stale_targets:
            self._consolidate(canonical, contenders, stale_targets)

        known_emails = {c.email for c in cluster if c.email}
        known_phones = {c.phone_number for c in cluster if c.phone_number}
        new_email = email if email and email not in known_emails else None
        new_phone = phone if phone and phone not in known_phones else None
        if new_email or new_phone:
            created = self._store.insert(
                new_email, new_phone, canonical.id, LinkPrecedence.SECONDARY
            )
            logger.info(
                "Created secondary contact %d linked to %d", created.id, canonical.id
            )

        view = self._cluster_view(canonical.id)
        logger.info(
            "Identified primary %d with secondaries %s",
            view.primary_contact_id,
            view.secondary_contact_ids,
        )
        return view

    def list_clusters(self) -> ClusterListing:
        """Group every active contact under its primary. Newest primary first.

        Secondaries whose linked_id is not an active primary (a deleted primary,
        or a demoted one awaiting re-link) are listed as unlinked.
        """
        contacts = self._store.list_active()
        primaries = sorted(
            (c for c in contacts if c.is_primary), key=lambda c: c.sort_key, reverse=True
        )
        primary_ids = {p.id for p in primaries}
        secondaries_by_primary: dict[int, list[Contact]] = {}
        unlinked: list[Contact] = []
        for contact in contacts:
            if contact.is_primary:
                continue
            if contact.linked_id in primary_ids:
                secondaries_by_primary.setdefault(contact.linked_id, []).append(contact)
            else:
                unlinked.append(contact)
        return ClusterListing(
            groups=[
                ClusterGroup(primary=p, secondaries=secondaries_by_primary.get(p.id, []))
                for p in primaries
            ],
            unlinked=unlinked,
        )

    def _expand(self, seeds: list[Contact]) -> list[Contact]:
        """Seeds, the contacts they link to, and every contact linked to either.

        Secondaries never link to other secondaries, so one hop covers a
        consistent store. A call cut off between demotion and re-link leaves
        secondaries pointing at a demoted contact; their primary is one more
        hop away and is fetched only in that case.
        """
        ids: set[int] = set()
        for contact in seeds:
            ids.add(contact.id)
            if not contact.is_primary:
                ids.add(contact.linked_id)
        cluster = self._store.find_by_ids_or_linked_ids(sorted(ids), sorted(ids))

        fetched = {c.id for c in cluster}
        missing = {
            c.linked_id for c in cluster if not c.is_primary and c.linked_id not in fetched
        }
        if not missing:
            return cluster
        logger.info("Following links to %s", sorted(missing))
        extra = self._store.find_by_ids_or_linked_ids(sorted(missing), sorted(missing))
        merged = {c.id: c for c in [*cluster, *extra]}
        return sorted(merged.values(), key=lambda c: c.sort_key)

    def _consolidate(
        self, canonical: Contact, contenders: list[Contact], stale_targets: set[int]
    ) -> None:
        # Demotion lands before the re-link so nothing ends up pointing at a secondary.
        demoted_ids = [c.id for c in contenders]
        if demoted_ids:
            logger.info(
                "Consolidating primaries %s under %d", demoted_ids, canonical.id
            )
            self._store.update_many_precedence_and_link(
                demoted_ids, LinkPrecedence.SECONDARY, canonical.id
            )
        relinked = self._store.update_many_linked_id(
            sorted(set(demoted_ids) | stale_targets), canonical.id
        )
        if relinked:
            logger.info("Re-linked %d contacts to %d", relinked, canonical.id)

    def _cluster_view(self, primary_id: int) -> ClusterView:
        contacts = self._store.find_by_ids_or_linked_ids([primary_id], [primary_id])
        primary = next(
            (c for c in contacts if c.id == primary_id and c.is_primary), None
        )
        if primary is None:
            raise NoCanonicalPrimary(
                f"Primary contact {primary_id} not found after processing",
                [c.id for c in contacts],
            )
        secondaries = [
            c for c in contacts if not c.is_primary and c.linked_id == primary_id
        ]
        return ClusterView.from_contacts(primary, secondaries)


def _canonical_primary(cluster: list[Contact]) -> Contact:
    """Oldest primary by (created_at, id)."""
    primaries = [c for c in cluster if c.is_primary]
    if not primaries:
        raise NoCanonicalPrimary(
            "No primary contact found to consolidate", [c.id for c in cluster]
        )
    return min(primaries, key=lambda c: c.sort_key)


def _stale_link_targets(cluster: list[Contact], canonical: Contact) -> set[int]:
    """Ids of already-demoted contacts that other secondaries still link to."""
    demoted = {c.id for c in cluster if not c.is_primary}
    return {
        c.linked_id
        for c in cluster
        if not c.is_primary and c.linked_id != canonical.id and c.linked_id in demoted
    }
