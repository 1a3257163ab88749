from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

from ..models.friendship import Friendship
from ..models.schedule import Schedule
from ..models.user import User
from ..models.event import Event
from ..models.enums import FriendshipStatus, FriendRequestAction
from ..utils.constants import AppConstants
from .errors import (
    ServiceError,
    NotFoundError,
    PermissionDeniedError,
    BusinessRuleViolationError,
    ConflictError,
)
from .event_service import EventService
from .user_service import UserService

logger = logging.getLogger(__name__)


class FriendshipServiceError(ServiceError):
    """Base exception for friendship service errors"""

    pass


class FriendRequestNotFoundError(FriendshipServiceError, NotFoundError):
    """No pending request from that user"""

    pass


class FriendshipExistsError(FriendshipServiceError, ConflictError):
    """A friendship row already exists for the pair, in either order"""

    pass


class NotFriendsError(FriendshipServiceError, PermissionDeniedError):
    """Operation requires an accepted friendship"""

    pass


class FriendshipService:
    def __init__(self, db: Session):
        self.db = db

    def _find_between(self, user_a: int, user_b: int) -> Optional[Friendship]:
        return (
            self.db.query(Friendship)
            .filter(
                or_(
                    and_(Friendship.user_id1 == user_a, Friendship.user_id2 == user_b),
                    and_(Friendship.user_id1 == user_b, Friendship.user_id2 == user_a),
                )
            )
            .first()
        )

    def send_request(self, user_id: int, target_user_id: int) -> Friendship:
        if target_user_id == user_id:
            raise BusinessRuleViolationError("Cannot friend yourself")

        UserService(self.db).get_user(target_user_id)

        if self._find_between(user_id, target_user_id):
            raise FriendshipExistsError("Friendship already exists or is pending")

        try:
            friendship = Friendship(
                user_id1=user_id,
                user_id2=target_user_id,
                status=FriendshipStatus.PENDING.value,
            )
            self.db.add(friendship)
            self.db.commit()
            self.db.refresh(friendship)
            return friendship

        except Exception as e:
            self.db.rollback()
            raise FriendshipServiceError(f"Failed to send friend request: {str(e)}")

    def respond_to_request(
        self, user_id: int, requester_id: int, action: FriendRequestAction
    ) -> Friendship:
        """Only the recipient of a pending request may accept or decline it"""
        friendship = (
            self.db.query(Friendship)
            .filter(
                Friendship.user_id1 == requester_id,
                Friendship.user_id2 == user_id,
                Friendship.status == FriendshipStatus.PENDING.value,
            )
            .first()
        )
        if not friendship:
            raise FriendRequestNotFoundError("Friend request not found or not pending")

        try:
            friendship.status = (
                FriendshipStatus.ACCEPTED.value
                if action == FriendRequestAction.ACCEPT
                else FriendshipStatus.DECLINED.value
            )
            self.db.commit()
            self.db.refresh(friendship)
            return friendship

        except Exception as e:
            self.db.rollback()
            raise FriendshipServiceError(f"Failed to respond to request: {str(e)}")

    def get_pending_requests(self, user_id: int) -> List[Dict[str, Any]]:
        """Requests waiting on this user, newest first"""
        requests = (
            self.db.query(Friendship)
            .filter(
                Friendship.user_id2 == user_id,
                Friendship.status == FriendshipStatus.PENDING.value,
            )
            .order_by(Friendship.created_at.desc())
            .all()
        )
        return [
            {
                **friendship.to_dict(),
                "requester": friendship.user1.to_public_dict(),
            }
            for friendship in requests
        ]

    def _accepted_friendships(self, user_id: int) -> List[Friendship]:
        return (
            self.db.query(Friendship)
            .filter(
                or_(Friendship.user_id1 == user_id, Friendship.user_id2 == user_id),
                Friendship.user_id1 != Friendship.user_id2,
                Friendship.status == FriendshipStatus.ACCEPTED.value,
            )
            .all()
        )

    def get_friends(self, user_id: int) -> List[User]:
        """The other user of every accepted friendship"""
        return [
            friendship.other_user(user_id)
            for friendship in self._accepted_friendships(user_id)
        ]

    def get_friends_with_schedules(self, user_id: int) -> List[Dict[str, Any]]:
        return [
            {
                **friend.to_public_dict(),
                "schedules": [schedule.to_dict() for schedule in friend.schedules],
            }
            for friend in self.get_friends(user_id)
        ]

    def are_friends(self, user_id: int, other_user_id: int) -> bool:
        friendship = self._find_between(user_id, other_user_id)
        return bool(
            friendship and friendship.status == FriendshipStatus.ACCEPTED.value
        )

    def ensure_friends(self, user_id: int, friend_id: int) -> User:
        """Return the friend if the friendship is accepted"""
        if friend_id == user_id or not self.are_friends(user_id, friend_id):
            raise NotFriendsError("You can only do that with a confirmed friend.")
        return self.db.query(User).filter(User.id == friend_id).first()

    def ensure_friend_schedule(self, friend_id: int, schedule_id: int) -> Schedule:
        schedule = (
            self.db.query(Schedule)
            .filter(Schedule.id == schedule_id, Schedule.user_id == friend_id)
            .first()
        )
        if not schedule:
            raise NotFriendsError("That schedule does not belong to this friend.")
        return schedule

    def get_friend_events(
        self,
        user_id: int,
        friend_id: int,
        schedule_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Event]:
        """Events on a confirmed friend's schedule"""
        self.ensure_friends(user_id, friend_id)
        self.ensure_friend_schedule(friend_id, schedule_id)
        return EventService(self.db).list_events(friend_id, schedule_id, start, end)

    def search_users(self, user_id: int, query: str) -> List[Dict[str, Any]]:
        """Case-insensitive match on email or names, tagged with friendship state"""
        query = (query or "").strip()
        if len(query) < AppConstants.MIN_SEARCH_QUERY_LENGTH:
            return []

        pattern = f"%{query.lower()}%"
        users = (
            self.db.query(User)
            .filter(
                or_(
                    func.lower(User.email).like(pattern),
                    func.lower(User.fname).like(pattern),
                    func.lower(User.lname).like(pattern),
                ),
                User.id != user_id,
            )
            .order_by(User.id)
            .limit(AppConstants.SEARCH_RESULTS_LIMIT)
            .all()
        )

        results = []
        for user in users:
            friendship = self._find_between(user_id, user.id)
            results.append(
                {
                    **user.to_public_dict(),
                    "friendshipStatus": friendship.status if friendship else "NONE",
                    "friendshipSenderId": friendship.user_id1 if friendship else None,
                }
            )
        return results

