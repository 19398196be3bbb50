from typing import Any, Optional


class ServiceError(Exception):
    """Domain error with the HTTP status the route should surface."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None, context: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.code = code
        self.context = context


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409
