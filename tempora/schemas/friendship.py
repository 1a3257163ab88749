from ..models.enums import FriendRequestAction
from .common import CamelModel


class FriendRequestCreate(CamelModel):
    target_user_id: int


class FriendRequestRespond(CamelModel):
    requester_id: int
    action: FriendRequestAction

