from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from datetime import datetime

from ..database import get_db
from ..models.user import User
from ..schemas.friendship import FriendRequestCreate, FriendRequestRespond
from ..services.friendship_service import FriendshipService
from ..dependencies.permissions import get_current_user
from ..utils.date_helpers import DateHelpers
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["friends"])


@router.post("/request", response_model=Dict[str, Any])
@handle_service_errors
async def send_friend_request(
    request_data: FriendRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    friendship = FriendshipService(db).send_request(
        current_user.id, request_data.target_user_id
    )
    return RouterResponse.created(
        data={"friendship": friendship.to_dict()}, message="Friend request sent"
    )


@router.post("/respond", response_model=Dict[str, Any])
@handle_service_errors
async def respond_to_friend_request(
    response_data: FriendRequestRespond,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Accept or decline a pending request addressed to the current user"""
    friendship = FriendshipService(db).respond_to_request(
        current_user.id, response_data.requester_id, response_data.action
    )
    return RouterResponse.updated(data={"friendship": friendship.to_dict()})


@router.get("/pending", response_model=Dict[str, Any])
@handle_service_errors
async def get_pending_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    requests = FriendshipService(db).get_pending_requests(current_user.id)
    return RouterResponse.success(data={"requests": requests})


@router.get("/list", response_model=Dict[str, Any])
@handle_service_errors
async def list_friends(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    friends = FriendshipService(db).get_friends_with_schedules(current_user.id)
    return RouterResponse.success(data={"friends": friends})


@router.get("/search", response_model=Dict[str, Any])
@handle_service_errors
async def search_users(
    query: str = Query("", description="At least two characters of a name or email"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    users = FriendshipService(db).search_users(current_user.id, query)
    return RouterResponse.success(data={"users": users})


@router.get("/{friend_id}/events", response_model=Dict[str, Any])
@handle_service_errors
async def get_friend_events(
    friend_id: int,
    schedule_id: int = Query(..., alias="scheduleId"),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    events = FriendshipService(db).get_friend_events(
        current_user.id,
        friend_id,
        schedule_id,
        start=DateHelpers.to_utc_naive(start),
        end=DateHelpers.to_utc_naive(end),
    )
    return RouterResponse.success(data={"events": [event.to_dict() for event in events]})
