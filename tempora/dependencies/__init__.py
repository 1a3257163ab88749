from .permissions import get_current_user, require_admin, SESSION_USER_KEY

__all__ = [
    "get_current_user",
    "require_admin",
    "SESSION_USER_KEY",
]
