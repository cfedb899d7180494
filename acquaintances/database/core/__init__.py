"""
The `core` package holds the business layer of the verification store.

Contents
--------
- verification_store.VerificationStore
    Lifecycle operations (create, accept, deny, remove) and group tagging
    (tag_group, untag_group), each run as one transactional unit of work and
    followed by a lifecycle signal on success.

- relationship_queries.RelationshipQueryEngine
    Read side: listings, verifier sets (one and two hops), group predicates and counts.
"""

from acquaintances.database.core.verification_store import VerificationStore
from acquaintances.database.core.relationship_queries import RelationshipQueryEngine

__all__ = ["VerificationStore", "RelationshipQueryEngine"]
