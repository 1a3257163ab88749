from .security import verify_password, get_password_hash
from .date_helpers import DateHelpers
from .constants import AppConstants, ResponseMessages
from .validation import ValidationHelpers

__all__ = [
    "verify_password", "get_password_hash",
    "DateHelpers",
    "AppConstants", "ResponseMessages",
    "ValidationHelpers",
]
