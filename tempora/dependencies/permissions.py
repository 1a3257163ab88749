from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from ..models.user import User

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


# Auth Helper Functions
async def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Get current authenticated user from the signed session cookie"""
    user_id = request.session.get(SESSION_USER_KEY)
    user = db.query(User).filter(User.id == user_id).first() if user_id else None

    if not user:
        if user_id:
            logger.warning(f"Session references missing user {user_id}")
            request.session.clear()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the current user has the ADMIN type"""
    if not current_user.is_admin:
        logger.warning(f"User {current_user.id} attempted an admin operation")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return current_user
