"""Errors raised by the service layer.

Every service operation either returns its result or raises one of the
classes below. The HTTP layer maps each class to a status code in one place
(see ``app.main``) instead of inspecting messages.
"""

INVALID_ID = "invalid id"
REQUIRED = "required"
TOO_SHORT = "too short"
INVALID_EMAIL = "invalid email"
INVALID_CHOICE = "invalid choice"


class ServiceError(Exception):
    """Base class for all service-layer failures."""


class ValidationError(ServiceError):
    """A caller-supplied argument failed a precondition."""

    def __init__(self, field: str, cause: str):
        super().__init__(f"{field}: {cause}")
        self.field = field
        self.cause = cause


class NotFound(ServiceError):
    """A lookup by id found no row."""

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class Conflict(ServiceError):
    """The requested transition is blocked by another entity's claim."""


class BookReserved(Conflict):
    def __init__(self, book_id: int):
        super().__init__(f"book {book_id} is reserved by another user")
        self.book_id = book_id


class BookUnavailable(Conflict):
    def __init__(self, book_id: int):
        super().__init__(f"book {book_id} is already on loan")
        self.book_id = book_id


class HasLoanHistory(Conflict):
    """A book or user cannot be deleted while loans refer to it."""

    def __init__(self, resource: str, resource_id: int):
        super().__init__(f"{resource} {resource_id} has loan history")
        self.resource = resource
        self.resource_id = resource_id


class UserExists(Conflict):
    def __init__(self, email: str):
        super().__init__(f"user with email {email} already exists")
        self.email = email


class StoreError(ServiceError):
    """The persistent store failed; the original exception is chained."""


def require_id(field: str, value: int) -> None:
    if value is None or value < 1:
        raise ValidationError(field, INVALID_ID)


def require_text(field: str, value: str) -> None:
    if not value:
        raise ValidationError(field, REQUIRED)
