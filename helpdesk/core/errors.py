"""
Typed failures raised by the lifecycle engine.

Every operation either returns its result or raises one of these. The HTTP layer
translates them into status codes in ``helpdesk.main``.
"""


class HelpdeskError(Exception):
    status_code = 400
    public_message: str | None = None

    def __init__(self, message: str = "", *, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def detail(self) -> str:
        return self.public_message or self.message


class ValidationError(HelpdeskError):
    status_code = 422


class InvalidAssigneeError(ValidationError):
    pass


class InvalidStatusError(ValidationError):
    pass


class AuthorizationError(HelpdeskError):
    status_code = 403


class NotFoundError(HelpdeskError):
    status_code = 404


class ConflictError(HelpdeskError):
    status_code = 409


class UploadError(HelpdeskError):
    status_code = 502
    public_message = "Attachment upload failed. Please try again."


class PersistenceError(HelpdeskError):
    status_code = 503
    public_message = "The ticket store is unavailable. Please try again."


class AuthError(HelpdeskError):
    status_code = 401
