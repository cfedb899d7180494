"""
DAOs Package — Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package provides the Data Access Layer for the verification store.
It encapsulates all interactions with SQLAlchemy ORM entities, providing
clean query and CRUD APIs for the core layer while hiding direct query details.

Conventions
-----------
- SQLAlchemy 2.0 typed mappings (Mapped[...] / mapped_column)
- Session lifecycle (open/commit/rollback) is handled by callers
- DAOs surface exceptions so upper layers decide error policy

Contents
--------
- VerificationDao
    Handles verification persistence:
    * Creates and deletes verification rows
    * Builds "between two parties" and "all records of a party" queries
      (status, direction and group filters, status-priority ordering)
    * Looks up rows for accept/deny, for group operations, and blocked pairs
    * Fan-out query over accepted rows touching a set of parties (multi-hop)

- VerificationGroupDao
    Handles group tag persistence:
    * Idempotent upsert keyed by (verification, group, verifier)
    * Deletes one verifier's tags on a verification
    * Reads distinct group ids for a set of verifications, and tags by verifier
"""
