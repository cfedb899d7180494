"""
Acquaintances — verification relationships between parties.

One party sends a verification request to another; the recipient accepts or
denies it; accepted verifications may be tagged into configured groups. The
package provides:

- `VerificationStore` for the lifecycle and tagging operations
- `RelationshipQueryEngine` for listings, verifier sets, predicates and counts
- `SignalDispatcher` for the lifecycle signals emitted by the store

Example
-------
.. code-block:: python

    from acquaintances import (
        PartyRef, RelationshipQueryEngine, Settings, VerificationStore,
        build_connection_engine, build_session_factory, create_schema,
    )

    engine = build_connection_engine("sqlite:///verifications.db")
    create_schema(engine)
    store = VerificationStore(build_session_factory(engine), Settings())
    queries = RelationshipQueryEngine(store)

    alice, bob = PartyRef(id=1, type="user"), PartyRef(id=2, type="user")
    verification = store.create(alice, bob, "We met at the conference")
    store.accept(bob, verification.id)
    store.tag_group(bob, alice, "personally", verification.id)
    queries.is_verified_with_group(alice, bob, "personally")  # True
"""

from acquaintances.database.config.config import Settings
from acquaintances.database.config.connection_engine import (
    build_connection_engine,
    build_session_factory,
    create_schema,
)
from acquaintances.database.core import RelationshipQueryEngine, VerificationStore
from acquaintances.database.entities import Verification, VerificationGroup, VerificationStatus
from acquaintances.exceptions import (
    AcquaintancesError,
    InvalidDirectionError,
    MessageTooLongError,
    SelfVerificationError,
)
from acquaintances.models import CursorPage, Page, Party, PartyRef, as_party_ref
from acquaintances.signals import LifecycleSignal, SignalDispatcher

__all__ = [
    "AcquaintancesError",
    "CursorPage",
    "InvalidDirectionError",
    "LifecycleSignal",
    "MessageTooLongError",
    "Page",
    "Party",
    "PartyRef",
    "RelationshipQueryEngine",
    "SelfVerificationError",
    "Settings",
    "SignalDispatcher",
    "Verification",
    "VerificationGroup",
    "VerificationStatus",
    "VerificationStore",
    "as_party_ref",
    "build_connection_engine",
    "build_session_factory",
    "create_schema",
]
