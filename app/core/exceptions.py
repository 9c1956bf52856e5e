from fastapi import status


class AppError(Exception):
    """Base error mapped to a JSON error response at the request boundary."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ConfigurationError(AppError):
    code = "CONFIGURATION_ERROR"
    message = "Invalid configuration"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Could not validate credentials"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Not enough permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid request"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Request conflicts with current state"


# Check-in outcomes
class NoActiveSessionError(NotFoundError):
    code = "NO_ACTIVE_SESSION"
    message = "No active session found for this class today"


class SessionExpiredError(ConflictError):
    code = "SESSION_EXPIRED"
    message = "Session has expired"


class CodeMismatchError(ConflictError):
    code = "CODE_MISMATCH"
    message = "code mismatch"


class NotEnrolledError(ForbiddenError):
    code = "NOT_ENROLLED"
    message = "Student is not enrolled in this class"


class EnrollmentInactiveError(ForbiddenError):
    code = "ENROLLMENT_INACTIVE"
    message = "Student enrollment is not active"


class AlreadyRecordedError(ConflictError):
    code = "ALREADY_RECORDED"
    message = "already recorded"
