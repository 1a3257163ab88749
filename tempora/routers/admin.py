from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, Any

from ..database import get_db
from ..models.user import User
from ..schemas.admin import AdminUpdateRequest
from ..services.admin_service import AdminService
from ..dependencies.permissions import require_admin
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["admin"])


@router.get("/data", response_model=Dict[str, Any])
@handle_service_errors
async def get_admin_data(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return RouterResponse.success(data=AdminService(db).get_all_data())


@router.post("/update", response_model=Dict[str, Any])
@handle_service_errors
async def update_admin_data(
    update: AdminUpdateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Edit a single allow-listed column"""
    record = AdminService(db).update_field(update)
    return RouterResponse.updated(data=record)
