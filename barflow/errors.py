"""API error types

Every error raised by the venue services carries the HTTP status it maps to.
The handlers in ``barflow.main`` render them as ``{"message", "status"}``.
"""


class APIError(Exception):
    """Base error with a human readable message and an HTTP status"""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message, "status": self.status_code}


class NotFoundError(APIError):
    """A venue, member or user id did not match anything"""

    status_code = 404


class InvariantViolation(APIError):
    """The mutation would leave a venue without an owner"""

    status_code = 400


class ConflictError(APIError):
    """The stored venue changed between load and save"""

    status_code = 409


class ForbiddenError(APIError):
    status_code = 403
