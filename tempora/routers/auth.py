from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from ..models.user import User
from ..schemas.auth import SignupRequest, LoginRequest
from ..services.user_service import UserService
from ..dependencies.permissions import get_current_user, SESSION_USER_KEY
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=dict, status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def signup(
    signup_data: SignupRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Create an account and start a session for it"""
    user = UserService(db).register_user(signup_data)
    request.session[SESSION_USER_KEY] = user.id

    return RouterResponse.created(
        data={"user": user.to_dict()}, message="Account created"
    )


@router.post("/login", response_model=dict)
@handle_service_errors
async def login(
    login_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    user = UserService(db).authenticate(login_data)
    request.session[SESSION_USER_KEY] = user.id
    logger.info(f"User {user.id} logged in")

    return RouterResponse.success(data={"user": user.to_dict()}, message="Logged in")


@router.post("/logout", response_model=dict)
async def logout(request: Request):
    request.session.clear()
    return RouterResponse.success(message="Logged out")


@router.get("/me", response_model=dict)
async def get_me(current_user: User = Depends(get_current_user)):
    return RouterResponse.success(data={"user": current_user.to_dict()})
