class ServiceError(Exception):
    """Base exception for all service errors"""

    pass


class NotFoundError(ServiceError):
    """Resource not found (or not visible to the caller)"""

    pass


class PermissionDeniedError(ServiceError):
    """Permission denied for operation"""

    pass


class BusinessRuleViolationError(ServiceError):
    """Business rule violation"""

    pass


class AuthenticationError(ServiceError):
    """Credentials missing or invalid"""

    pass


class ConflictError(ServiceError):
    """Resource already exists"""

    pass
