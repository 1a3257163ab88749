from enum import Enum


class UserType(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class FriendshipStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class RepeatFrequency(str, Enum):
    NEVER = "NEVER"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class FriendRequestAction(str, Enum):
    ACCEPT = "ACCEPT"
    DECLINE = "DECLINE"
