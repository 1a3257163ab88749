"""Tests for tempora.services.friendship_service."""

from datetime import datetime

import pytest

from tempora.models.enums import FriendRequestAction, FriendshipStatus
from tempora.services.errors import BusinessRuleViolationError, NotFoundError
from tempora.services.friendship_service import (
    FriendRequestNotFoundError,
    FriendshipExistsError,
    FriendshipService,
    NotFriendsError,
)


class TestFriendRequests:
    def test_send_and_accept(self, db, make_user):
        alice, bob = make_user("Alice"), make_user("Bob")
        service = FriendshipService(db)

        request = service.send_request(alice.id, bob.id)
        assert request.status == FriendshipStatus.PENDING.value
        assert not service.are_friends(alice.id, bob.id)

        accepted = service.respond_to_request(bob.id, alice.id, FriendRequestAction.ACCEPT)
        assert accepted.status == FriendshipStatus.ACCEPTED.value
        assert service.are_friends(alice.id, bob.id)
        assert service.are_friends(bob.id, alice.id)

    def test_cannot_friend_yourself(self, db, make_user):
        alice = make_user()
        with pytest.raises(BusinessRuleViolationError, match="Cannot friend yourself"):
            FriendshipService(db).send_request(alice.id, alice.id)

    def test_unknown_target(self, db, make_user):
        alice = make_user()
        with pytest.raises(NotFoundError):
            FriendshipService(db).send_request(alice.id, 9999)

    def test_duplicate_in_either_order_conflicts(self, db, make_user):
        alice, bob = make_user("Alice"), make_user("Bob")
        service = FriendshipService(db)
        service.send_request(alice.id, bob.id)

        with pytest.raises(FriendshipExistsError):
            service.send_request(bob.id, alice.id)

    def test_only_recipient_can_respond(self, db, make_user):
        alice, bob = make_user("Alice"), make_user("Bob")
        service = FriendshipService(db)
        service.send_request(alice.id, bob.id)

        with pytest.raises(FriendRequestNotFoundError, match="Friend request not found or not pending"):
            service.respond_to_request(alice.id, bob.id, FriendRequestAction.ACCEPT)

    def test_declined_request_is_no_longer_pending(self, db, make_user):
        alice, bob = make_user("Alice"), make_user("Bob")
        service = FriendshipService(db)
        service.send_request(alice.id, bob.id)
        service.respond_to_request(bob.id, alice.id, FriendRequestAction.DECLINE)

        assert service.get_pending_requests(bob.id) == []
        with pytest.raises(FriendRequestNotFoundError):
            service.respond_to_request(bob.id, alice.id, FriendRequestAction.ACCEPT)

    def test_pending_requests_show_requester(self, db, make_user):
        alice, bob = make_user("Alice"), make_user("Bob")
        service = FriendshipService(db)
        service.send_request(alice.id, bob.id)

        (pending,) = service.get_pending_requests(bob.id)
        assert pending["requester"]["id"] == alice.id
        assert service.get_pending_requests(alice.id) == []


class TestFriendsAndSearch:
    def test_friends_listed_symmetrically_with_schedules(self, db, make_user, make_schedule, befriend):
        alice, bob, carol = make_user("Alice"), make_user("Bob"), make_user("Carol")
        make_schedule(bob, "Bob's week")
        befriend(alice, bob)
        befriend(carol, alice, status=FriendshipStatus.PENDING.value)

        service = FriendshipService(db)
        assert [f.id for f in service.get_friends(alice.id)] == [bob.id]
        assert [f.id for f in service.get_friends(bob.id)] == [alice.id]

        (friend,) = service.get_friends_with_schedules(alice.id)
        assert friend["schedules"][0]["name"] == "Bob's week"

    def test_search(self, db, make_user, befriend):
        alice = make_user("Alice", email="alice@example.com")
        bob = make_user("Bob", "Stone", email="bob@example.com")
        make_user("Bobby", "Tables", email="bobby@example.com")
        befriend(alice, bob, status=FriendshipStatus.PENDING.value)

        results = FriendshipService(db).search_users(alice.id, "BOB")
        by_email = {r["email"]: r for r in results}

        assert set(by_email) == {"bob@example.com", "bobby@example.com"}
        assert by_email["bob@example.com"]["friendshipStatus"] == "PENDING"
        assert by_email["bob@example.com"]["friendshipSenderId"] == alice.id
        assert by_email["bobby@example.com"]["friendshipStatus"] == "NONE"

    def test_search_needs_two_characters_and_excludes_self(self, db, make_user):
        alice = make_user("Alice", email="alice@example.com")
        service = FriendshipService(db)
        assert service.search_users(alice.id, "a") == []
        assert service.search_users(alice.id, "alice") == []


class TestFriendEvents:
    def test_requires_accepted_friendship(self, db, make_user, make_schedule, befriend):
        alice, bob = make_user("Alice"), make_user("Bob")
        schedule = make_schedule(bob)
        befriend(alice, bob, status=FriendshipStatus.PENDING.value)

        with pytest.raises(NotFriendsError):
            FriendshipService(db).get_friend_events(alice.id, bob.id, schedule.id)

    def test_schedule_must_belong_to_friend(self, db, make_user, make_schedule, befriend):
        alice, bob, carol = make_user("Alice"), make_user("Bob"), make_user("Carol")
        befriend(alice, bob)

        with pytest.raises(NotFriendsError, match="does not belong to this friend"):
            FriendshipService(db).get_friend_events(alice.id, bob.id, make_schedule(carol).id)

    def test_lists_friend_events_in_range(self, db, make_user, make_schedule, make_event, befriend):
        alice, bob = make_user("Alice"), make_user("Bob")
        schedule = make_schedule(bob)
        befriend(bob, alice)
        inside = make_event(schedule, [(datetime(2024, 12, 3, 9), datetime(2024, 12, 3, 10))])
        make_event(schedule, [(datetime(2025, 1, 3, 9), datetime(2025, 1, 3, 10))])

        events = FriendshipService(db).get_friend_events(
            alice.id, bob.id, schedule.id, start=datetime(2024, 12, 1), end=datetime(2024, 12, 31)
        )
        assert [e.id for e in events] == [inside.id]
