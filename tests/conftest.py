"""
Pytest configuration and shared fixtures for the verification store tests.
"""

import pytest
from dataclasses import dataclass
from sqlalchemy.pool import StaticPool

from acquaintances import (
    PartyRef,
    RelationshipQueryEngine,
    Settings,
    SignalDispatcher,
    Verification,
    VerificationStatus,
    VerificationStore,
    build_connection_engine,
    build_session_factory,
    create_schema,
)

# In-memory SQLite for testing
TEST_DATABASE_URL = "sqlite://"

TEST_GROUPS = {
    "text": 0,
    "phone": 1,
    "cam": 2,
    "personally": 3,
    "intimately": 4,
}


@dataclass
class HostUser:
    """Stand-in for a host application's user model."""
    party_id: int
    party_type: str = "user"


class SignalRecorder:
    """Collects (signal, initiator, counterparty) tuples in dispatch order."""

    def __init__(self):
        self.events = []

    def __call__(self, signal, initiator, counterparty):
        self.events.append((signal, initiator, counterparty))

    def clear(self):
        self.events.clear()


@pytest.fixture
def engine():
    """Fresh in-memory database with the verification schema."""
    engine = build_connection_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def test_settings():
    return Settings(VERIFICATION_GROUPS=dict(TEST_GROUPS), VERIFICATION_MAX_LENGTH=255)


@pytest.fixture
def recorder():
    return SignalRecorder()


@pytest.fixture
def dispatcher(recorder):
    dispatcher = SignalDispatcher()
    dispatcher.subscribe_all(recorder)
    return dispatcher


@pytest.fixture
def store(session_factory, test_settings, dispatcher):
    return VerificationStore(session_factory, test_settings, dispatcher)


@pytest.fixture
def queries(store):
    return RelationshipQueryEngine(store)


@pytest.fixture
def alice():
    return PartyRef(id=1, type="user")


@pytest.fixture
def bob():
    return PartyRef(id=2, type="user")


@pytest.fixture
def carol():
    return PartyRef(id=3, type="user")


@pytest.fixture
def dave():
    return PartyRef(id=4, type="user")


@pytest.fixture
def verify(store):
    """Create a verification from sender to recipient and accept it."""
    def _verify(sender, recipient, message=None):
        verification = store.create(sender, recipient, message)
        assert store.accept(recipient, verification.id)
        return verification
    return _verify


@pytest.fixture
def force_status(session_factory):
    """Set a verification's status directly, the way a host application would."""
    def _force(verification_id, status):
        with session_factory() as session:
            session.query(Verification).filter(Verification.id == verification_id).update(
                {"status": VerificationStatus(status).value}
            )
            session.commit()
    return _force
