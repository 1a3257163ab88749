from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from datetime import datetime

from ..database import get_db
from ..models.user import User
from ..schemas.event import EventCreate, EventUpdate
from ..services.event_service import EventService
from ..dependencies.permissions import get_current_user
from ..utils.date_helpers import DateHelpers
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["events"])


@router.get("", response_model=Dict[str, Any])
@handle_service_errors
async def list_events(
    schedule_id: Optional[int] = Query(None, alias="scheduleId"),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Stored events, optionally limited to one schedule and a time range"""
    events = EventService(db).list_events(
        current_user.id,
        schedule_id=schedule_id,
        start=DateHelpers.to_utc_naive(start),
        end=DateHelpers.to_utc_naive(end),
    )
    return RouterResponse.success(data={"events": [event.to_dict() for event in events]})


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create an event; without scheduleId it lands on the primary schedule"""
    event = EventService(db).create_event(current_user.id, event_data)
    return RouterResponse.created(data={"event": event.to_dict()}, message="Event created")


@router.patch("/{event_id}", response_model=Dict[str, Any])
@handle_service_errors
async def update_event(
    event_id: int,
    event_updates: EventUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    event = EventService(db).update_event(event_id, current_user.id, event_updates)
    return RouterResponse.updated(data={"event": event.to_dict()}, message="Event updated")


@router.delete("/{event_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    EventService(db).delete_event(event_id, current_user.id)
    return RouterResponse.deleted(message="Event deleted")
