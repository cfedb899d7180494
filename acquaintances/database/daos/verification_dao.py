"""
Verification DAO

Purpose
-------
Thin data-access layer for the `Verification` ORM entity. Provides:
- Creation and deletion of verification rows
- Query builders for "between two parties" and "all records of one party"
  (direction, status and group filters)
- Lookups used by the lifecycle operations (by recipient + id, latest accepted,
  blocked-pair check)
- The one-hop fan-out query used by the multi-hop relationship queries

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller
  (normally injected by `@transactional`).
- Business rules (self-verification, message length, permissions, signals) live in
  `acquaintances.database.core`; the DAO focuses on persistence.
- Query builders return un-executed `Query` objects so callers can count, page or
  narrow them further.

Ordering
--------
- Group-filtered listings are ordered by the fixed status priority
  (pending, accepted, denied, blocked), then by id.
- "Latest" lookups order by `created_at` then `id`, both descending.

Error Handling
--------------
- Methods that execute SQL catch `SQLAlchemyError`, log it and re-raise; the
  transactional decorator rolls the unit of work back.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import and_, case, desc, exists, false, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from acquaintances.database.entities.verification import Verification, VerificationStatus
from acquaintances.database.entities.verification_group import VerificationGroup
from acquaintances.exceptions import InvalidDirectionError
from acquaintances.models import PartyRef

logger = logging.getLogger(__name__)

DIRECTION_SENDER = "sender"
DIRECTION_RECIPIENT = "recipient"
DIRECTION_ALL = "all"


def isSender(party: PartyRef):
    """SQL predicate: `party` is the sender of the row."""
    return and_(Verification.sender_id == party.id, Verification.sender_type == party.type)


def isRecipient(party: PartyRef):
    """SQL predicate: `party` is the recipient of the row."""
    return and_(Verification.recipient_id == party.id, Verification.recipient_type == party.type)


class VerificationDao:
    """
    Data Access Object (DAO) for managing Verification entities.
    Provides creation, deletion and query-building on the verifications table.
    """

    def createVerification(self, session: Session, verification: Verification) -> Verification:
        """
        Stage a new verification and flush it so its id is assigned.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        verification : Verification
            Entity to insert.

        Returns
        -------
        Verification
            The same entity, with `id` populated.
        """
        try:
            session.add(verification)
            session.flush()
            return verification
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationDao.createVerification. Error Message: {e}")
            raise

    def deleteVerification(self, session: Session, verification: Verification) -> None:
        """Delete a verification; its group rows go with it."""
        try:
            session.delete(verification)
            session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationDao.deleteVerification. Error Message: {e}")
            raise

    def queryBetween(
        self, session: Session, party: PartyRef, other: PartyRef, verification_id: Optional[int] = None
    ) -> Query:
        """
        Rows where (party → other) or (other → party), optionally narrowed to one id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        party, other : PartyRef
            The two sides of the relationship; order does not matter.
        verification_id : int | None
            Restrict to a single row.

        Returns
        -------
        Query
            Un-executed query over `Verification`.
        """
        query = session.query(Verification).filter(
            or_(
                and_(isSender(party), isRecipient(other)),
                and_(isSender(other), isRecipient(party)),
            )
        )
        if verification_id is not None:
            query = query.filter(Verification.id == verification_id)
        return query

    def queryFor(
        self,
        session: Session,
        party: PartyRef,
        status: Optional[str] = None,
        direction: Optional[str] = None,
    ) -> Query:
        """
        All rows in which `party` takes part.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        party : PartyRef
            Party whose verifications are listed.
        status : str | None
            Restrict to one `VerificationStatus` value.
        direction : str | None
            ``"sender"`` or ``"recipient"`` restricts the role `party` must
            occupy; ``None`` or ``"all"`` accepts either.

        Raises
        ------
        InvalidDirectionError
            If `direction` is not one of the values above.
        """
        if direction is None or direction == DIRECTION_ALL:
            condition = or_(isSender(party), isRecipient(party))
        elif direction == DIRECTION_SENDER:
            condition = isSender(party)
        elif direction == DIRECTION_RECIPIENT:
            condition = isRecipient(party)
        else:
            raise InvalidDirectionError(
                f"Unknown direction {direction!r}; expected 'sender', 'recipient' or 'all'"
            )

        query = session.query(Verification).filter(condition)
        if status is not None:
            query = query.filter(Verification.status == VerificationStatus(status).value)
        return query

    def withGroup(self, query: Query, group_id: Optional[int]) -> Query:
        """
        Narrow `query` to rows tagged with `group_id` and order them by status priority.

        A `group_id` of None (unknown group name) yields an empty result.
        """
        if group_id is None:
            return query.filter(false())
        tagged = exists().where(
            and_(
                VerificationGroup.verification_id == Verification.id,
                VerificationGroup.group_id == group_id,
            )
        )
        priority = case(
            {status.value: rank for rank, status in enumerate(VerificationStatus.ordered())},
            value=Verification.status,
            else_=len(VerificationStatus.ordered()),
        )
        return query.filter(tagged).order_by(priority, Verification.id)

    def fetchReceivedById(
        self, session: Session, recipient: PartyRef, verification_id: int
    ) -> Optional[Verification]:
        """
        Fetch a verification by id, only if `recipient` is its recipient.

        Returns
        -------
        Verification | None
            None for an unknown id, or when `recipient` is the sender or unrelated.
        """
        try:
            return (
                session.query(Verification)
                .filter(Verification.id == verification_id)
                .filter(isRecipient(recipient))
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationDao.fetchReceivedById. Error Message: {e}")
            raise

    def fetchAcceptedBetween(
        self, session: Session, party: PartyRef, other: PartyRef, verification_id: Optional[int] = None
    ) -> Optional[Verification]:
        """
        Fetch the accepted verification targeted by a group operation.

        With `verification_id`, that exact row (if accepted and between the pair);
        without it, the most recently created accepted row (ties: highest id).
        """
        try:
            query = self.queryBetween(session, party, other, verification_id).filter(
                Verification.status == VerificationStatus.ACCEPTED.value
            )
            return query.order_by(desc(Verification.created_at), desc(Verification.id)).first()
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationDao.fetchAcceptedBetween. Error Message: {e}")
            raise

    def hasBlockedBetween(self, session: Session, party: PartyRef, other: PartyRef) -> bool:
        """True if any row between the pair, in either direction, is `blocked`."""
        try:
            query = self.queryBetween(session, party, other).filter(
                Verification.status == VerificationStatus.BLOCKED.value
            )
            return session.query(query.exists()).scalar()
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationDao.hasBlockedBetween. Error Message: {e}")
            raise

    def queryAcceptedTouching(self, session: Session, parties: Iterable[PartyRef]) -> Query:
        """
        Accepted rows whose sender or recipient is any of `parties`.

        An empty `parties` collection yields an empty query.
        """
        clauses = []
        for party in parties:
            clauses.append(isSender(party))
            clauses.append(isRecipient(party))
        query = session.query(Verification).filter(
            Verification.status == VerificationStatus.ACCEPTED.value
        )
        if not clauses:
            return query.filter(false())
        return query.filter(or_(*clauses))
