"""
Test suite for the verification lifecycle: create, accept, deny, remove.
"""

import pytest

from acquaintances import (
    LifecycleSignal,
    MessageTooLongError,
    PartyRef,
    SelfVerificationError,
    Settings,
    VerificationStatus,
    VerificationStore,
)
from acquaintances.database.helpers.transactionManagement import transactional
from tests.conftest import HostUser


class TestCreate:
    """Tests for sending verification requests."""

    def test_create_returns_pending_verification(self, store, alice, bob):
        verification = store.create(alice, bob, "We met at the conference")

        assert verification.id is not None
        assert verification.status == VerificationStatus.PENDING
        assert verification.sender == alice
        assert verification.recipient == bob
        assert verification.message == "We met at the conference"

    def test_message_is_optional(self, store, alice, bob):
        verification = store.create(alice, bob)

        assert verification.message is None

    def test_self_verification_raises(self, store, alice):
        with pytest.raises(SelfVerificationError):
            store.create(alice, alice)

    def test_same_id_with_different_type_is_not_self(self, store):
        user = PartyRef(id=1, type="user")
        organisation = PartyRef(id=1, type="organisation")

        verification = store.create(user, organisation)

        assert verification.recipient == organisation

    def test_host_objects_are_accepted_as_parties(self, store, queries):
        verification = store.create(HostUser(10), HostUser(11))

        assert verification.sender == PartyRef(id="10", type="user")
        assert len(queries.verification_requests(HostUser(11))) == 1

    def test_message_at_max_length_is_stored_verbatim(self, store, queries, alice, bob):
        message = "a" * 254 + "z"

        verification = store.create(alice, bob, message)

        stored = queries.find_between(alice, bob, verification.id)
        assert len(stored) == 1
        assert stored[0].message == message

    def test_message_over_max_length_raises(self, store, queries, alice, bob):
        with pytest.raises(MessageTooLongError) as exc_info:
            store.create(alice, bob, "a" * 256)

        assert exc_info.value.max_length == 255
        assert exc_info.value.length == 256
        assert queries.find_between(alice, bob) == []

    def test_configured_max_length_is_used(self, session_factory, alice, bob):
        store = VerificationStore(session_factory, Settings(VERIFICATION_MAX_LENGTH=10))

        assert store.create(alice, bob, "0123456789")
        with pytest.raises(MessageTooLongError):
            store.create(alice, bob, "0123456789!")

    def test_every_request_is_an_independent_record(self, store, queries, alice, bob):
        first = store.create(alice, bob, "one")
        second = store.create(alice, bob, "two")
        third = store.create(alice, bob, "three")

        assert len({first.id, second.id, third.id}) == 3
        assert len(queries.verification_requests(bob)) == 3

    def test_new_request_allowed_after_acceptance(self, store, queries, verify, alice, bob):
        verify(alice, bob)

        store.create(alice, bob, "again")

        assert queries.is_verified_with(bob, alice)
        assert len(queries.verification_requests(bob)) == 1

    def test_group_name_is_kept_as_legacy_slug_only(self, store, queries, alice, bob):
        verification = store.create(alice, bob, "Phone verification", "phone")
        store.accept(bob, verification.id)

        assert verification.group_slug == "phone"
        assert queries.verification_groups(alice, bob) == []
        assert not queries.is_verified_with_group(alice, bob, "phone")


class TestBlocking:
    """Tests for the blocked-pair gate."""

    def test_blocked_pair_refuses_both_directions(self, store, force_status, alice, bob):
        verification = store.create(alice, bob)
        force_status(verification.id, VerificationStatus.BLOCKED)

        assert store.can_create(alice, bob) is False
        assert store.can_create(bob, alice) is False
        assert store.create(alice, bob) is False
        assert store.create(bob, alice) is False

    def test_any_blocked_record_blocks_the_pair(self, store, force_status, alice, bob):
        store.create(alice, bob)
        blocked = store.create(bob, alice)
        force_status(blocked.id, VerificationStatus.BLOCKED)

        assert store.create(alice, bob) is False

    def test_unblocking_allows_creation_again(self, store, force_status, alice, bob):
        verification = store.create(alice, bob)
        force_status(verification.id, VerificationStatus.BLOCKED)
        assert store.create(alice, bob) is False

        force_status(verification.id, VerificationStatus.DENIED)

        assert store.create(alice, bob)

    def test_block_does_not_affect_other_pairs(self, store, force_status, alice, bob, carol):
        verification = store.create(alice, bob)
        force_status(verification.id, VerificationStatus.BLOCKED)

        assert store.can_create(alice, carol)
        assert store.create(alice, carol)


class TestAcceptDeny:
    """Tests for recipient responses."""

    def test_recipient_can_accept(self, store, queries, alice, bob):
        verification = store.create(alice, bob)

        assert store.accept(bob, verification.id) is True
        assert queries.is_verified_with(alice, bob)
        assert queries.is_verified_with(bob, alice)

    def test_sender_cannot_accept(self, store, queries, alice, bob):
        verification = store.create(alice, bob)

        assert store.accept(alice, verification.id) is False
        assert queries.find_between(alice, bob)[0].status == VerificationStatus.PENDING
        assert not queries.is_verified_with(alice, bob)

    def test_unrelated_party_cannot_accept_or_deny(self, store, queries, alice, bob, carol):
        verification = store.create(alice, bob)

        assert store.accept(carol, verification.id) is False
        assert store.deny(carol, verification.id) is False
        assert queries.find_between(alice, bob)[0].status == VerificationStatus.PENDING

    def test_unknown_id_is_a_soft_failure(self, store, bob):
        assert store.accept(bob, 9999) is False
        assert store.deny(bob, 9999) is False

    def test_recipient_can_deny(self, store, queries, alice, bob):
        verification = store.create(alice, bob)

        assert store.deny(bob, verification.id) is True
        assert not queries.is_verified_with(bob, alice)
        assert queries.verification_requests(bob) == []
        assert len(queries.denied_verifications(alice)) == 1

    def test_sender_cannot_deny(self, store, queries, alice, bob):
        verification = store.create(alice, bob)

        assert store.deny(alice, verification.id) is False
        assert queries.find_between(alice, bob)[0].status == VerificationStatus.PENDING

    def test_deny_after_accept_overwrites(self, store, queries, alice, bob):
        verification = store.create(alice, bob)
        store.accept(bob, verification.id)

        assert store.deny(bob, verification.id) is True
        assert not queries.is_verified_with(alice, bob)
        assert not queries.is_verified_with(bob, alice)

    def test_accept_after_deny_overwrites(self, store, queries, alice, bob):
        verification = store.create(alice, bob)
        store.deny(bob, verification.id)

        assert store.accept(bob, verification.id) is True
        assert queries.is_verified_with(alice, bob)

    def test_accepting_twice_is_allowed(self, store, queries, alice, bob):
        verification = store.create(alice, bob)

        assert store.accept(bob, verification.id) is True
        assert store.accept(bob, verification.id) is True
        assert queries.verification_count(alice, bob) == 1

    def test_only_the_targeted_record_changes(self, store, queries, alice, bob):
        first = store.create(alice, bob, "first")
        store.create(alice, bob, "second")

        store.accept(bob, first.id)

        assert len(queries.accepted_verifications(alice)) == 1
        assert len(queries.verification_requests(bob)) == 1

    def test_mixed_responses_scenario(self, store, queries, alice, bob):
        first = store.create(alice, bob, "first")
        second = store.create(alice, bob, "second")
        store.create(alice, bob, "third")

        store.accept(bob, first.id)
        store.deny(bob, second.id)

        assert len(queries.verification_requests(bob)) == 1
        assert len(queries.accepted_verifications(alice)) == 1
        assert len(queries.denied_verifications(alice)) == 1
        assert queries.is_verified_with(bob, alice)


class TestRemove:
    """Tests for deleting verifications."""

    def test_sender_can_remove(self, store, queries, alice, bob):
        verification = store.create(alice, bob)

        assert store.remove(alice, bob, verification.id) is True
        assert queries.find_between(alice, bob) == []

    def test_recipient_can_remove(self, store, queries, verify, alice, bob):
        verification = verify(alice, bob)

        assert store.remove(bob, alice, verification.id) is True
        assert not queries.is_verified_with(alice, bob)

    def test_remove_only_deletes_the_given_id(self, store, queries, alice, bob):
        first = store.create(alice, bob)
        second = store.create(alice, bob)

        store.remove(alice, bob, first.id)

        assert [v.id for v in queries.find_between(alice, bob)] == [second.id]

    def test_remove_outside_the_pair_deletes_nothing(self, store, queries, alice, bob, carol):
        verification = store.create(alice, bob)

        assert store.remove(alice, carol, verification.id) is False
        assert store.remove(carol, bob, verification.id) is False
        assert len(queries.find_between(alice, bob)) == 1

    def test_remove_unknown_id(self, store, alice, bob):
        assert store.remove(alice, bob, 9999) is False

    def test_remove_deletes_group_tags(self, store, queries, verify, alice, bob):
        verification = verify(alice, bob)
        store.tag_group(bob, alice, "phone", verification.id)
        assert len(queries.groups_tagged_by(bob)) == 1

        store.remove(alice, bob, verification.id)

        assert queries.groups_tagged_by(bob) == []


class TestUnitOfWork:
    """Tests for transactional behaviour across store calls."""

    def test_nested_operations_roll_back_together(self, store, queries, recorder, alice, bob):
        class Batch:
            def __init__(self, store):
                self.store = store
                self.session_factory = store.session_factory

            @transactional
            def create_then_fail(self, sender, recipient, session=None):
                self.store.create(sender, recipient, "rolled back")
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            Batch(store).create_then_fail(alice, bob)

        assert queries.find_between(alice, bob) == []
        assert recorder.events == []

    def test_nested_signals_wait_for_the_outer_commit(self, store, queries, recorder, alice, bob):
        class Batch:
            def __init__(self, store):
                self.store = store
                self.session_factory = store.session_factory
                self.seen_inside = None

            @transactional
            def create_and_accept(self, sender, recipient, session=None):
                verification = self.store.create(sender, recipient)
                self.store.accept(recipient, verification.id)
                self.seen_inside = list(recorder.events)
                return verification

        batch = Batch(store)
        batch.create_and_accept(alice, bob)

        assert batch.seen_inside == []
        assert recorder.events == [
            (LifecycleSignal.SENT, alice, bob),
            (LifecycleSignal.ACCEPTED, bob, alice),
        ]
        assert queries.is_verified_with(alice, bob)

    def test_entities_remain_readable_after_commit(self, store, alice, bob):
        verification = store.create(alice, bob, "detached")

        assert verification.message == "detached"
        assert verification.created_at is not None
