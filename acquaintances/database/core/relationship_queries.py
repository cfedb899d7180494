"""
Relationship Query Engine — read side of the verification store.

Derives listings, party sets, counts and predicates from the store's rows:

- Listings of Verification rows: between two parties, or for one party filtered
  by status, direction and group (group-filtered listings are ordered by the
  fixed status priority pending, accepted, denied, blocked).
- Party sets (returned as lists sorted by type, then by id; numeric ids compare
  as numbers):
    * verifiers           — other side of every accepted row of a party
    * mutual verifiers    — verifiers of both parties, minus the two parties
    * verifiers of verifiers — two hops out, minus the party and its direct verifiers
- Counts and predicates built on the same queries.

A `per_page` of 0 returns everything; any other value returns a `Page`, or a
`CursorPage` when `use_cursor` is set. Multi-hop results issue one read per hop
inside a single session; no snapshot isolation is required between the hops.
"""

import logging
from typing import List, Optional, Set, Union

from sqlalchemy import desc
from sqlalchemy.orm import Query, Session

from acquaintances.database.core.verification_store import VerificationStore
from acquaintances.database.daos.verification_dao import DIRECTION_RECIPIENT, isSender, isRecipient
from acquaintances.database.entities.verification import Verification, VerificationStatus
from acquaintances.database.entities.verification_group import VerificationGroup
from acquaintances.database.helpers.pagination import get_or_paginate
from acquaintances.database.helpers.transactionManagement import transactional
from acquaintances.models import CursorPage, Page, PartyLike, PartyRef, as_party_ref

logger = logging.getLogger(__name__)

Listing = Union[List[Verification], Page, CursorPage]
PartyListing = Union[List[PartyRef], Page, CursorPage]


def _party_sort_key(party: PartyRef):
    # Numeric ids sort by value and ahead of non-numeric ids of the same type.
    if party.id.isdigit():
        return party.type, 0, int(party.id), ""
    return party.type, 1, 0, party.id


def _sorted_parties(parties: Set[PartyRef]) -> List[PartyRef]:
    return sorted(parties, key=_party_sort_key)


class RelationshipQueryEngine:
    """
    Read-only queries over a `VerificationStore`.

    Parameters
    ----------
    store : VerificationStore
        Store whose session factory, configuration and DAOs are reused.
    """

    def __init__(self, store: VerificationStore):
        self.store = store
        self.session_factory = store.session_factory
        self.settings = store.settings
        self.verifications = store.verifications
        self.groups = store.groups

    # =========================================================================
    # Query builders
    # =========================================================================

    def _query_all(
        self,
        session: Session,
        party: PartyRef,
        status: Optional[str] = None,
        group_name: Optional[str] = None,
        direction: Optional[str] = None,
    ) -> Query:
        query = self.verifications.queryFor(session, party, status=status, direction=direction)
        if group_name:
            return self.verifications.withGroup(query, self.settings.group_id(group_name))
        return query.order_by(Verification.id)

    def _query_accepted_between(self, session: Session, party: PartyRef, other: PartyRef) -> Query:
        return self.verifications.queryBetween(session, party, other).filter(
            Verification.status == VerificationStatus.ACCEPTED.value
        )

    def _verifier_set(self, session: Session, party: PartyRef, group_name: Optional[str] = None) -> Set[PartyRef]:
        verifiers = set()
        for verification in self._query_all(session, party, VerificationStatus.ACCEPTED, group_name):
            verifiers.add(verification.sender)
            verifiers.add(verification.recipient)
        verifiers.discard(party)
        return verifiers

    # =========================================================================
    # Verification listings
    # =========================================================================

    @transactional
    def find_between(
        self, party: PartyLike, other: PartyLike, verification_id: Optional[int] = None, session: Session = None
    ) -> List[Verification]:
        """Every row between the two parties (either direction), oldest first."""
        return (
            self.verifications.queryBetween(session, as_party_ref(party), as_party_ref(other), verification_id)
            .order_by(Verification.id)
            .all()
        )

    @transactional
    def find_all(
        self,
        party: PartyLike,
        status: Optional[str] = None,
        group_name: Optional[str] = None,
        direction: Optional[str] = None,
        per_page: int = 0,
        page: int = 1,
        cursor: Optional[str] = None,
        use_cursor: bool = False,
        session: Session = None,
    ) -> Listing:
        """
        Rows in which `party` takes part.

        Parameters
        ----------
        party : PartyLike
            Party whose verifications are listed.
        status : str | VerificationStatus | None
            Restrict to one status.
        group_name : str | None
            Restrict to rows tagged with this group; results are then ordered by
            status priority. An unknown name yields no rows.
        direction : str | None
            ``"sender"``, ``"recipient"``, or None / ``"all"`` for either role.
        per_page, page, cursor, use_cursor
            Pagination, see `get_or_paginate`.
        """
        query = self._query_all(session, as_party_ref(party), status, group_name, direction)
        return get_or_paginate(query, per_page, page, cursor, use_cursor)

    def all_verifications(self, party: PartyLike, group_name: Optional[str] = None, per_page: int = 0,
                          direction: Optional[str] = None, **pagination) -> Listing:
        return self.find_all(party, None, group_name, direction, per_page, **pagination)

    def pending_verifications(self, party: PartyLike, group_name: Optional[str] = None, per_page: int = 0,
                              direction: Optional[str] = None, **pagination) -> Listing:
        return self.find_all(party, VerificationStatus.PENDING, group_name, direction, per_page, **pagination)

    def accepted_verifications(self, party: PartyLike, group_name: Optional[str] = None, per_page: int = 0,
                               direction: Optional[str] = None, **pagination) -> Listing:
        return self.find_all(party, VerificationStatus.ACCEPTED, group_name, direction, per_page, **pagination)

    def denied_verifications(self, party: PartyLike, group_name: Optional[str] = None, per_page: int = 0,
                             direction: Optional[str] = None, **pagination) -> Listing:
        return self.find_all(party, VerificationStatus.DENIED, group_name, direction, per_page, **pagination)

    def verification_requests(self, party: PartyLike) -> List[Verification]:
        """Pending rows that `party` has received and not yet answered."""
        return self.find_all(party, VerificationStatus.PENDING, direction=DIRECTION_RECIPIENT)

    def all_verifications_with(self, party: PartyLike, other: PartyLike) -> List[Verification]:
        return self.find_between(party, other)

    @transactional
    def get_verification(self, party: PartyLike, other: PartyLike, session: Session = None) -> Optional[Verification]:
        """First (lowest id) row between the pair, if any."""
        return (
            self.verifications.queryBetween(session, as_party_ref(party), as_party_ref(other))
            .order_by(Verification.id)
            .first()
        )

    @transactional
    def latest_verification(self, party: PartyLike, other: PartyLike, session: Session = None) -> Optional[Verification]:
        """Most recent (highest id) row between the pair, if any."""
        return (
            self.verifications.queryBetween(session, as_party_ref(party), as_party_ref(other))
            .order_by(desc(Verification.id))
            .first()
        )

    @transactional
    def groups_tagged_by(self, verifier: PartyLike, session: Session = None) -> List[VerificationGroup]:
        """Every group tag applied by `verifier`."""
        return self.groups.fetchGroupsByVerifier(session, as_party_ref(verifier))

    # =========================================================================
    # Predicates
    # =========================================================================

    @transactional
    def has_verification_request_from(self, party: PartyLike, other: PartyLike, session: Session = None) -> bool:
        """True if `other` sent `party` a request that is still pending."""
        party = as_party_ref(party)
        other = as_party_ref(other)
        query = (
            self.verifications.queryBetween(session, party, other)
            .filter(isSender(other))
            .filter(Verification.status == VerificationStatus.PENDING.value)
        )
        return session.query(query.exists()).scalar()

    @transactional
    def has_sent_verification_request_to(self, party: PartyLike, other: PartyLike, session: Session = None) -> bool:
        """True if `party` sent `other` a request that is still pending."""
        party = as_party_ref(party)
        other = as_party_ref(other)
        query = (
            self.verifications.queryBetween(session, party, other)
            .filter(isSender(party))
            .filter(isRecipient(other))
            .filter(Verification.status == VerificationStatus.PENDING.value)
        )
        return session.query(query.exists()).scalar()

    @transactional
    def is_verified_with(self, party: PartyLike, other: PartyLike, session: Session = None) -> bool:
        """True if at least one row between the pair is accepted."""
        query = self._query_accepted_between(session, as_party_ref(party), as_party_ref(other))
        return session.query(query.exists()).scalar()

    @transactional
    def is_verified_with_group(
        self, party: PartyLike, other: PartyLike, group_name: str, session: Session = None
    ) -> bool:
        """True if an accepted row between the pair carries `group_name`; False for unknown groups."""
        group_id = self.settings.group_id(group_name)
        if group_id is None:
            return False
        query = self.verifications.withGroup(
            self._query_accepted_between(session, as_party_ref(party), as_party_ref(other)), group_id
        )
        return session.query(query.order_by(None).exists()).scalar()

    @transactional
    def verification_groups(self, party: PartyLike, other: PartyLike, session: Session = None) -> List[str]:
        """
        Distinct group names attached to accepted rows between the pair.

        Names follow the order of the configured mapping; ids that are no longer
        configured are skipped.
        """
        accepted = self._query_accepted_between(session, as_party_ref(party), as_party_ref(other))
        group_ids = set(self.groups.fetchGroupIdsForVerifications(session, accepted))
        configured = [group_id for group_id in self.settings.VERIFICATION_GROUPS.values() if group_id in group_ids]
        return [self.settings.group_name(group_id) for group_id in configured]

    # =========================================================================
    # Party sets
    # =========================================================================

    @transactional
    def verifiers(
        self,
        party: PartyLike,
        group_name: Optional[str] = None,
        per_page: int = 0,
        page: int = 1,
        cursor: Optional[str] = None,
        use_cursor: bool = False,
        session: Session = None,
    ) -> PartyListing:
        """Parties with at least one accepted row with `party` (optionally in `group_name`)."""
        verifiers = self._verifier_set(session, as_party_ref(party), group_name)
        return get_or_paginate(_sorted_parties(verifiers), per_page, page, cursor, use_cursor)

    @transactional
    def mutual_verifiers(
        self,
        party: PartyLike,
        other: PartyLike,
        per_page: int = 0,
        page: int = 1,
        cursor: Optional[str] = None,
        use_cursor: bool = False,
        session: Session = None,
    ) -> PartyListing:
        """Verifiers shared by `party` and `other`, excluding both of them."""
        party = as_party_ref(party)
        other = as_party_ref(other)
        mutual = self._verifier_set(session, party) & self._verifier_set(session, other)
        mutual -= {party, other}
        return get_or_paginate(_sorted_parties(mutual), per_page, page, cursor, use_cursor)

    @transactional
    def verifiers_of_verifiers(
        self,
        party: PartyLike,
        group_name: Optional[str] = None,
        per_page: int = 0,
        page: int = 1,
        cursor: Optional[str] = None,
        use_cursor: bool = False,
        session: Session = None,
    ) -> PartyListing:
        """
        Two-hop verifiers of `party`.

        The second hop can be restricted to rows tagged `group_name`. The party
        itself and its direct verifiers are excluded.
        """
        party = as_party_ref(party)
        direct = self._verifier_set(session, party)

        second_hop = self.verifications.queryAcceptedTouching(session, direct)
        if group_name:
            second_hop = self.verifications.withGroup(second_hop, self.settings.group_id(group_name))

        found = set()
        for verification in second_hop:
            found.add(verification.sender)
            found.add(verification.recipient)
        found -= direct
        found.discard(party)

        logger.debug(f"{party}: {len(direct)} direct verifier(s), {len(found)} second-hop verifier(s)")
        return get_or_paginate(_sorted_parties(found), per_page, page, cursor, use_cursor)

    # =========================================================================
    # Counts
    # =========================================================================

    @transactional
    def verification_count(self, party: PartyLike, other: PartyLike, session: Session = None) -> int:
        """Number of accepted rows between the pair."""
        return self._query_accepted_between(session, as_party_ref(party), as_party_ref(other)).count()

    @transactional
    def verifiers_count(
        self,
        party: PartyLike,
        group_name: Optional[str] = None,
        direction: Optional[str] = None,
        session: Session = None,
    ) -> int:
        """Number of accepted rows of `party` (rows, not distinct parties)."""
        query = self._query_all(session, as_party_ref(party), VerificationStatus.ACCEPTED, group_name, direction)
        return query.order_by(None).count()

    @transactional
    def pending_verifications_count(self, party: PartyLike, session: Session = None) -> int:
        """Number of pending rows of `party`, sent or received."""
        return self._query_all(session, as_party_ref(party), VerificationStatus.PENDING).order_by(None).count()

    def mutual_verifiers_count(self, party: PartyLike, other: PartyLike) -> int:
        return len(self.mutual_verifiers(party, other))
