from sqlalchemy.orm import Session
import logging

from ..models.user import User
from ..models.enums import UserType
from ..schemas.auth import SignupRequest, LoginRequest
from ..utils.security import get_password_hash, verify_password
from ..utils.validation import ValidationHelpers
from .errors import (
    ServiceError,
    NotFoundError,
    BusinessRuleViolationError,
    AuthenticationError,
)

logger = logging.getLogger(__name__)


class UserServiceError(ServiceError):
    """Base exception for user service errors"""

    pass


class UserNotFoundError(UserServiceError, NotFoundError):
    """User not found"""

    pass


class EmailAlreadyRegisteredError(UserServiceError, BusinessRuleViolationError):
    """Signup with an email that already has an account"""

    pass


class InvalidCredentialsError(UserServiceError, AuthenticationError):
    """Unknown email or wrong password"""

    pass


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, signup_data: SignupRequest) -> User:
        """Create a USER account with a bcrypt password hash"""
        password_check = ValidationHelpers.validate_password(signup_data.password)
        if not password_check["valid"]:
            raise BusinessRuleViolationError(password_check["error"])

        email = signup_data.email.lower()
        if User.find_by_email(self.db, email):
            raise EmailAlreadyRegisteredError("Email already registered")

        try:
            user = User(
                email=email,
                fname=signup_data.fname,
                lname=signup_data.lname,
                hashed_password=get_password_hash(signup_data.password),
                type=UserType.USER.value,
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            logger.info(f"Registered user {user.id}")
            return user

        except Exception as e:
            self.db.rollback()
            raise UserServiceError(f"Failed to register user: {str(e)}")

    def authenticate(self, login_data: LoginRequest) -> User:
        user = User.find_by_email(self.db, login_data.email)
        if not user or not verify_password(login_data.password, user.hashed_password):
            raise InvalidCredentialsError("Invalid email or password")
        return user

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFoundError("User not found")
        return user
