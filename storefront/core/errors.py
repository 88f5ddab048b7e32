"""Error taxonomy shared by services and routers.

Services raise these; ``storefront.main`` turns them into JSON responses so
routers never build error payloads by hand.
"""


class APIError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        return 'fail' if 400 <= self.status_code < 500 else 'error'


class ValidationError(APIError):
    """Malformed or empty input; the caller can fix it and retry."""
    status_code = 400


class AuthenticationError(APIError):
    status_code = 401


class AuthorizationError(APIError):
    """Caller is known but not allowed to touch the resource."""
    status_code = 403


class NotFoundError(APIError):
    status_code = 404


class ConflictError(APIError):
    """Duplicate of something that must be unique (email, store, username)."""
    status_code = 409
