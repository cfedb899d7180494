"""
Entities Package — SQLAlchemy 2.0 ORM Models (UTC timestamps)
=============================================================

The `entities` package defines the ORM models of the verification store,
mapping database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes form the persistence backbone and are consumed by DAOs
(`daos` package) to perform CRUD and query operations.

Tech Stack & Conventions
------------------------
- Any SQLAlchemy-supported database (SQLite in tests)
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`
- Parties are referenced polymorphically by (`*_id`, `*_type`); the store never
  owns party rows

Contents
--------
- Verification
    A directional request between a sender and a recipient.
    * Fields: `id`, sender/recipient references, `message`, `status`, `group_slug`
    * `status` values come from `VerificationStatus`

- VerificationGroup
    A group tag applied by a verifier to an accepted verification.
    * Unique on (`verification_id`, `group_id`, verifier)
    * Deleted together with its verification
"""

from acquaintances.database.entities.verification import Verification, VerificationStatus
from acquaintances.database.entities.verification_group import VerificationGroup

__all__ = ["Verification", "VerificationGroup", "VerificationStatus"]
