"""
VerificationGroup DAO

Purpose
-------
Persists and reads group tags attached to verifications:
- upsertGroup(session, verification_id, group_id, verifier) — idempotent tag
- deleteGroups(session, verification_id, verifier) — remove one verifier's tags
- fetchGroupIdsForVerifications(session, verification_query) — distinct group ids
- fetchGroupsByVerifier(session, verifier) — every tag applied by a party

Design
------
- Requires an active SQLAlchemy `Session` supplied by the caller.
- The unique constraint on (verification_id, group_id, verifier) is the source of
  truth; a concurrent duplicate insert surfaces as `IntegrityError` and the
  caller's unit of work is rolled back.
"""

import logging
from typing import List, Tuple

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from acquaintances.database.entities.verification import Verification, utcnow
from acquaintances.database.entities.verification_group import VerificationGroup
from acquaintances.models import PartyRef

logger = logging.getLogger(__name__)


def isVerifier(party: PartyRef):
    return and_(VerificationGroup.verifier_id == party.id, VerificationGroup.verifier_type == party.type)


class VerificationGroupDao:
    """
    Data Access Object (DAO) for managing VerificationGroup entities.
    """

    def fetchGroup(
        self, session: Session, verification_id: int, group_id: int, verifier: PartyRef
    ):
        return (
            session.query(VerificationGroup)
            .filter(VerificationGroup.verification_id == verification_id)
            .filter(VerificationGroup.group_id == group_id)
            .filter(isVerifier(verifier))
            .first()
        )

    def upsertGroup(
        self, session: Session, verification_id: int, group_id: int, verifier: PartyRef
    ) -> Tuple[VerificationGroup, bool]:
        """
        Tag a verification, or refresh the existing tag.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        verification_id : int
            Verification to tag.
        group_id : int
            Configured group id.
        verifier : PartyRef
            Party applying the tag.

        Returns
        -------
        tuple[VerificationGroup, bool]
            The tag row and whether it was newly created.
        """
        try:
            existing = self.fetchGroup(session, verification_id, group_id, verifier)
            if existing is not None:
                existing.updated_at = utcnow()
                session.flush()
                return existing, False

            group = VerificationGroup(verification_id, group_id, verifier)
            session.add(group)
            session.flush()
            return group, True
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationGroupDao.upsertGroup. Error Message: {e}")
            raise

    def deleteGroups(self, session: Session, verification_id: int, verifier: PartyRef) -> int:
        """
        Delete the tags `verifier` applied to one verification.

        Returns
        -------
        int
            Number of rows deleted.
        """
        try:
            return (
                session.query(VerificationGroup)
                .filter(VerificationGroup.verification_id == verification_id)
                .filter(isVerifier(verifier))
                .delete(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationGroupDao.deleteGroups. Error Message: {e}")
            raise

    def fetchGroupIdsForVerifications(self, session: Session, verification_query: Query) -> List[int]:
        """
        Distinct group ids attached to the verifications selected by `verification_query`.
        """
        try:
            ids_subquery = verification_query.order_by(None).with_entities(Verification.id).subquery()
            rows = (
                session.query(VerificationGroup.group_id)
                .filter(VerificationGroup.verification_id.in_(select(ids_subquery.c.id)))
                .distinct()
                .all()
            )
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationGroupDao.fetchGroupIdsForVerifications. Error Message: {e}")
            raise

    def fetchGroupsByVerifier(self, session: Session, verifier: PartyRef) -> List[VerificationGroup]:
        """Every tag applied by `verifier`, oldest first."""
        try:
            return (
                session.query(VerificationGroup)
                .filter(isVerifier(verifier))
                .order_by(VerificationGroup.id)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error in VerificationGroupDao.fetchGroupsByVerifier. Error Message: {e}")
            raise
