"""
VerificationGroup ORM Model
===========================

The ``VerificationGroup`` ORM model tags an accepted ``Verification`` with a
configured group (e.g. "phone", "personally"). Stored in the table named by
``settings.VERIFICATION_GROUPS_TABLE``.

Key features
~~~~~~~~~~~~
- Integer primary key (``id``)
- Foreign key to the owning verification (``verification_id``), ``ON DELETE CASCADE``
- ``group_id`` resolved from the configured name → id mapping
- Polymorphic reference to the tagging party (``verifier_id``, ``verifier_type``),
  independent of the verification's sender and recipient
- Unique on (``verification_id``, ``group_id``, ``verifier_type``, ``verifier_id``):
  tagging twice updates the existing row instead of inserting a duplicate
"""

from datetime import datetime

from sqlalchemy import VARCHAR, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from acquaintances.database.config.config import settings
from acquaintances.database.config.connection_engine import declarativeBase
from acquaintances.database.entities.verification import Verification, utcnow
from acquaintances.models import PartyRef


class VerificationGroup(declarativeBase):
    """
    ORM model for the verification groups table.

    Attributes
    ----------
    id : int
        Primary key.
    verification_id : int
        Foreign key to the tagged verification.
    group_id : int
        Configured group id.
    verifier_id, verifier_type : str
        Composite reference to the party who applied the tag.
    created_at, updated_at : datetime
        Row timestamps (UTC). ``updated_at`` is refreshed on re-tagging.
    """

    __tablename__ = settings.VERIFICATION_GROUPS_TABLE
    __table_args__ = (
        UniqueConstraint(
            "verification_id",
            "group_id",
            "verifier_type",
            "verifier_id",
            name=f"uq_{settings.VERIFICATION_GROUPS_TABLE}_tag",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    verification_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey(f"{settings.VERIFICATIONS_TABLE}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    """Foreign key to the owning verification."""

    group_id: Mapped[int] = mapped_column(Integer, nullable=False)

    verifier_id: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    verifier_type: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    verification: Mapped[Verification] = relationship(Verification, back_populates="groups")

    def __init__(self, verification_id: int, group_id: int, verifier: PartyRef):
        self.verification_id = verification_id
        self.group_id = group_id
        self.verifier_id = verifier.id
        self.verifier_type = verifier.type
        now = utcnow()
        self.created_at = now
        self.updated_at = now

    @property
    def verifier(self) -> PartyRef:
        return PartyRef(id=self.verifier_id, type=self.verifier_type)

    def __str__(self) -> str:
        return (
            f"VerificationGroup: verification_id:{self.verification_id}, "
            f"group_id: {self.group_id}, verifier: {self.verifier}"
        )
