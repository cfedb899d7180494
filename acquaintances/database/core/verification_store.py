"""
Verification Store — lifecycle operations.

Every mutating operation runs as one unit of work through `@transactional`
(the session comes from `self.session_factory`, or from the caller's active
unit of work when nested). Lifecycle signals are dispatched once the outermost
unit of work has committed, and only when the mutation happened; a caller
that rolls back its own unit of work suppresses them.

State machine
-------------
- ``create``  → new row in ``pending``
- ``accept``  → ``accepted`` (recipient only; overwrites any current status)
- ``deny``    → ``denied``   (recipient only; overwrites any current status)
- ``remove``  → row deleted, from any status, by either side of the pair
- ``blocked`` is never set here; the host application may set it directly, and
  ``can_create`` honours it.

Failures
--------
- Hard (raised): self-verification, message over the configured length.
- Soft (returned): unknown id, wrong actor, blocked pair, unknown group name,
  no accepted verification to tag.
"""

import logging
from typing import Optional, Union

from sqlalchemy.orm import Session, sessionmaker

from acquaintances.database.config.config import Settings, settings as default_settings
from acquaintances.database.daos.verification_dao import VerificationDao
from acquaintances.database.daos.verification_group_dao import VerificationGroupDao
from acquaintances.database.entities.verification import Verification, VerificationStatus
from acquaintances.database.helpers.transactionManagement import run_after_commit, transactional
from acquaintances.exceptions import MessageTooLongError, SelfVerificationError
from acquaintances.models import PartyLike, PartyRef, as_party_ref
from acquaintances.signals import LifecycleSignal, SignalDispatcher

logger = logging.getLogger(__name__)


class VerificationStore:
    """
    Owns verification rows and their group tags.

    Parameters
    ----------
    session_factory : sessionmaker
        Factory producing sessions bound to the verification database.
    config : Settings
        Message length limit and group name → id mapping.
    dispatcher : SignalDispatcher | None
        Receiver of lifecycle signals; a private dispatcher is created if omitted.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        config: Optional[Settings] = None,
        dispatcher: Optional[SignalDispatcher] = None,
    ):
        self.session_factory = session_factory
        self.settings = config or default_settings
        self.dispatcher = dispatcher or SignalDispatcher()
        self.verifications = VerificationDao()
        self.groups = VerificationGroupDao()

    def _emit(self, signal: LifecycleSignal, initiator: PartyRef, counterparty: PartyRef) -> None:
        run_after_commit(lambda: self.dispatcher.dispatch(signal, initiator, counterparty))

    # =========================================================================
    # Creation
    # =========================================================================

    def create(
        self,
        sender: PartyLike,
        recipient: PartyLike,
        message: Optional[str] = None,
        group_name: Optional[str] = None,
    ) -> Union[Verification, bool]:
        """
        Send a new verification request from `sender` to `recipient`.

        Parameters
        ----------
        sender, recipient : PartyLike
            The two parties; they must differ by id or by type.
        message : str | None
            Optional message, at most ``VERIFICATION_MAX_LENGTH`` characters.
        group_name : str | None
            Stored on the legacy ``group_slug`` column only. Tags are applied
            with `tag_group` once the request has been accepted.

        Returns
        -------
        Verification | bool
            The new ``pending`` verification, or False if the pair is blocked.

        Raises
        ------
        SelfVerificationError
            `sender` and `recipient` are the same party.
        MessageTooLongError
            `message` exceeds the configured maximum length.
        """
        sender = as_party_ref(sender)
        recipient = as_party_ref(recipient)

        if sender == recipient:
            raise SelfVerificationError("Parties cannot verify themselves.")

        if message is not None and len(message) > self.settings.VERIFICATION_MAX_LENGTH:
            raise MessageTooLongError(self.settings.VERIFICATION_MAX_LENGTH, len(message))

        verification = self._insert(sender, recipient, message, group_name)
        if verification is None:
            logger.info(f"Verification from {sender} to {recipient} refused: pair is blocked")
            return False

        logger.info(f"Verification {verification.id} sent from {sender} to {recipient}")
        self._emit(LifecycleSignal.SENT, sender, recipient)
        return verification

    @transactional
    def can_create(self, sender: PartyLike, recipient: PartyLike, session: Session = None) -> bool:
        """False if any verification between the pair, in either direction, is blocked."""
        return not self.verifications.hasBlockedBetween(
            session, as_party_ref(sender), as_party_ref(recipient)
        )

    @transactional
    def _insert(self, sender, recipient, message, group_name, session: Session = None):
        if not self.can_create(sender, recipient):
            return None
        verification = Verification(
            sender=sender,
            recipient=recipient,
            message=message,
            status=VerificationStatus.PENDING,
            group_slug=group_name,
        )
        return self.verifications.createVerification(session, verification)

    # =========================================================================
    # Responses (recipient only)
    # =========================================================================

    def accept(self, recipient: PartyLike, verification_id: int) -> bool:
        """
        Accept verification `verification_id` on behalf of its recipient.

        Returns False (and changes nothing) when the id is unknown or `recipient`
        is not the recipient of that row.
        """
        return self._respond(recipient, verification_id, VerificationStatus.ACCEPTED, LifecycleSignal.ACCEPTED)

    def deny(self, recipient: PartyLike, verification_id: int) -> bool:
        """Deny verification `verification_id`; same rules as `accept`."""
        return self._respond(recipient, verification_id, VerificationStatus.DENIED, LifecycleSignal.DENIED)

    def _respond(self, recipient, verification_id, status, signal) -> bool:
        recipient = as_party_ref(recipient)
        sender = self._set_status(recipient, verification_id, status)
        if sender is None:
            logger.info(
                f"{status.value} of verification {verification_id} by {recipient} refused: no such received verification"
            )
            return False

        logger.info(f"Verification {verification_id} {status.value} by {recipient}")
        self._emit(signal, recipient, sender)
        return True

    @transactional
    def _set_status(self, recipient, verification_id, status, session: Session = None) -> Optional[PartyRef]:
        verification = self.verifications.fetchReceivedById(session, recipient, verification_id)
        if verification is None:
            return None
        verification.status = status.value
        session.flush()
        return verification.sender

    # =========================================================================
    # Removal
    # =========================================================================

    def remove(self, actor: PartyLike, recipient: PartyLike, verification_id: int) -> bool:
        """
        Delete verification `verification_id` if it is between `actor` and `recipient`.

        Either side may remove, whatever the status. The cancelled signal is
        dispatched only when a row was actually deleted.

        Returns
        -------
        bool
            True if a row was deleted.
        """
        actor = as_party_ref(actor)
        recipient = as_party_ref(recipient)

        if not self._delete(actor, recipient, verification_id):
            logger.info(f"Removal of verification {verification_id} by {actor} matched nothing")
            return False

        logger.info(f"Verification {verification_id} between {actor} and {recipient} removed")
        self._emit(LifecycleSignal.CANCELLED, actor, recipient)
        return True

    @transactional
    def _delete(self, actor, recipient, verification_id, session: Session = None) -> bool:
        verification = self.verifications.queryBetween(session, actor, recipient, verification_id).first()
        if verification is None:
            return False
        self.verifications.deleteVerification(session, verification)
        return True

    # =========================================================================
    # Group tags
    # =========================================================================

    @transactional
    def tag_group(
        self,
        verifier: PartyLike,
        other: PartyLike,
        group_name: str,
        verification_id: Optional[int] = None,
        session: Session = None,
    ) -> bool:
        """
        Tag an accepted verification between `verifier` and `other` with `group_name`.

        Without `verification_id` the most recently created accepted verification
        of the pair is tagged.

        Returns
        -------
        bool
            True only if a new tag row was created. Unknown group, no accepted
            target, or an already existing tag all return False.
        """
        verifier = as_party_ref(verifier)
        other = as_party_ref(other)

        group_id = self.settings.group_id(group_name)
        if group_id is None:
            logger.info(f"Tagging refused: unknown verification group {group_name!r}")
            return False

        verification = self.verifications.fetchAcceptedBetween(session, verifier, other, verification_id)
        if verification is None:
            logger.info(f"Tagging refused: no accepted verification between {verifier} and {other}")
            return False

        _, created = self.groups.upsertGroup(session, verification.id, group_id, verifier)
        logger.info(
            f"Verification {verification.id} tagged {group_name!r} by {verifier} (new tag: {created})"
        )
        return created

    @transactional
    def untag_group(
        self,
        verifier: PartyLike,
        other: PartyLike,
        verification_id: Optional[int] = None,
        session: Session = None,
    ) -> int:
        """
        Remove the tags `verifier` applied to an accepted verification with `other`.

        Target selection is the same as `tag_group`. Tags applied by other
        verifiers are left in place.

        Returns
        -------
        int
            Number of tag rows deleted (0 when nothing matched).
        """
        verifier = as_party_ref(verifier)
        other = as_party_ref(other)

        verification = self.verifications.fetchAcceptedBetween(session, verifier, other, verification_id)
        if verification is None:
            logger.info(f"Untagging refused: no accepted verification between {verifier} and {other}")
            return 0

        deleted = self.groups.deleteGroups(session, verification.id, verifier)
        logger.info(f"Removed {deleted} tag(s) from verification {verification.id} for {verifier}")
        return deleted
