from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from datetime import date

from ..database import get_db
from ..models.user import User
from ..services.calendar_service import CalendarService
from ..dependencies.permissions import get_current_user
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["calendar"])


@router.get("", response_model=Dict[str, Any])
@handle_service_errors
async def get_calendar(
    anchor: Optional[date] = Query(None, alias="date", description="Day to focus"),
    tz: Optional[str] = Query(None, description="IANA time zone, e.g. Europe/Paris"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Month grid, week slice and day timeline of the user's expanded events"""
    view = CalendarService(db).get_calendar_view(
        current_user.id, anchor=anchor, tz_name=tz
    )
    return RouterResponse.success(data=view.to_dict())
