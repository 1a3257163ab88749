from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Dict, Any

from ..database import get_db
from ..models.user import User
from ..schemas.schedule import ScheduleCreate
from ..services.schedule_service import ScheduleService
from ..dependencies.permissions import get_current_user
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["schedules"])


@router.get("", response_model=Dict[str, Any])
@handle_service_errors
async def list_schedules(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    schedules = ScheduleService(db).list_user_schedules(current_user.id)
    return RouterResponse.success(
        data={"schedules": [schedule.to_dict() for schedule in schedules]}
    )


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_schedule(
    schedule_data: ScheduleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    schedule = ScheduleService(db).create_schedule(current_user.id, schedule_data)
    return RouterResponse.created(
        data={"schedule": schedule.to_dict()}, message="Schedule created"
    )
