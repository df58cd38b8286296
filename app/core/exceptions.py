from typing import Optional, Any

class UserHubError(Exception):
    """
    Base exception for UserHub application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class BadRequestError(UserHubError):
    """
    Raised when a request is well-formed but cannot be processed as sent.
    """
    def __init__(self, message: str = "Bad request", details: Optional[Any] = None):
        super().__init__(message, code="BAD_REQUEST", status_code=400, details=details)

class AuthenticationError(UserHubError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Not authorized", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class ResourceNotFoundError(UserHubError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class ConflictError(UserHubError):
    """
    Raised when a resource already exists (e.g. email taken).
    """
    def __init__(self, message: str = "Conflict", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=409, details=details)

