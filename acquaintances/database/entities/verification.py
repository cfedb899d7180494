"""
Verification ORM Model
======================

The ``Verification`` ORM model represents one directional verification request
between two parties, stored in the table named by ``settings.VERIFICATIONS_TABLE``.

Key features
~~~~~~~~~~~~
- Integer autoincrement primary key (``id``)
- Polymorphic party references: (``sender_id``, ``sender_type``) and
  (``recipient_id``, ``recipient_type``)
- Optional ``message`` (length is validated by the store, never truncated)
- ``status``: one of ``pending | accepted | denied | blocked`` (default ``pending``)
- Legacy ``group_slug`` annotation (not authoritative; tags live in ``VerificationGroup``)
- Timezone-aware ``created_at`` / ``updated_at`` timestamps (UTC)

Integration notes
~~~~~~~~~~~~~~~~~
- A (sender, recipient) pair may own any number of rows; there is no uniqueness
  constraint on the pair.
- Deleting a verification deletes its ``VerificationGroup`` rows (ORM cascade plus
  ``ON DELETE CASCADE`` on the foreign key).
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import VARCHAR, TEXT, DateTime, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from acquaintances.database.config.config import settings
from acquaintances.database.config.connection_engine import declarativeBase
from acquaintances.models import PartyRef


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationStatus(str, enum.Enum):
    """Lifecycle states of a verification."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DENIED = "denied"
    BLOCKED = "blocked"

    @classmethod
    def ordered(cls) -> List["VerificationStatus"]:
        """Fixed priority used to order group-filtered listings."""
        return [cls.PENDING, cls.ACCEPTED, cls.DENIED, cls.BLOCKED]


class Verification(declarativeBase):
    """
    ORM model for the verifications table.

    Attributes
    ----------
    id : int
        Primary key.
    sender_id, sender_type : str
        Composite reference to the party who initiated the request.
    recipient_id, recipient_type : str
        Composite reference to the party who must respond.
    message : str | None
        Optional free text attached to the request.
    status : str
        Current ``VerificationStatus`` value.
    group_slug : str | None
        Legacy group annotation supplied at creation time.
    created_at, updated_at : datetime
        Row timestamps (UTC).
    """

    __tablename__ = settings.VERIFICATIONS_TABLE
    __table_args__ = (
        Index(f"ix_{settings.VERIFICATIONS_TABLE}_sender", "sender_type", "sender_id"),
        Index(f"ix_{settings.VERIFICATIONS_TABLE}_recipient", "recipient_type", "recipient_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Primary key."""

    sender_id: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    sender_type: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    recipient_id: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    recipient_type: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)

    message: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    """Verification message (optional)."""

    status: Mapped[str] = mapped_column(
        VARCHAR(16), nullable=False, default=VerificationStatus.PENDING.value
    )
    """pending/accepted/denied/blocked"""

    group_slug: Mapped[Optional[str]] = mapped_column(VARCHAR(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    groups: Mapped[List["VerificationGroup"]] = relationship(
        "VerificationGroup",
        back_populates="verification",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    """Group tags attached to this verification, loaded with the row so they stay
    readable after the session has closed."""

    def __init__(
        self,
        sender: PartyRef,
        recipient: PartyRef,
        message: Optional[str] = None,
        status: VerificationStatus = VerificationStatus.PENDING,
        group_slug: Optional[str] = None,
    ):
        """
        Initialize a new Verification object.

        Parameters
        ----------
        sender : PartyRef
            Party initiating the request.
        recipient : PartyRef
            Party expected to accept or deny it.
        message : str | None
            Optional message, stored verbatim.
        status : VerificationStatus
            Initial status (``pending`` unless the caller is seeding data).
        group_slug : str | None
            Legacy group annotation.
        """
        self.sender_id = sender.id
        self.sender_type = sender.type
        self.recipient_id = recipient.id
        self.recipient_type = recipient.type
        self.message = message
        self.status = VerificationStatus(status).value
        self.group_slug = group_slug
        now = utcnow()
        self.created_at = now
        self.updated_at = now

    @property
    def sender(self) -> PartyRef:
        return PartyRef(id=self.sender_id, type=self.sender_type)

    @property
    def recipient(self) -> PartyRef:
        return PartyRef(id=self.recipient_id, type=self.recipient_type)

    def counterparty_of(self, party: PartyRef) -> PartyRef:
        """Return the side of this verification that is not `party`."""
        return self.recipient if self.sender == party else self.sender

    def __str__(self) -> str:
        return (
            f"Verification: id:{self.id}, sender: {self.sender}, "
            f"recipient: {self.recipient}, status: {self.status}"
        )
