"""Error taxonomy shared by the store, the query layer and the views.

Every error carries the HTTP status and the ``kind`` string that the
app-level exception handler puts in the response body, so callers can tell
a duplicate review apart from any other rejection without parsing messages.
"""


class CatalogError(Exception):
    status_code = 503
    kind = "transient_failure"
    default_message = "The service is temporarily unavailable"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def with_message(self, message: str) -> "CatalogError":
        """Same kind and status, different user-facing message."""
        return type(self)(message)


class TransientFailure(CatalogError):
    pass


class NotFound(CatalogError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"


class Forbidden(CatalogError):
    status_code = 403
    kind = "forbidden"
    default_message = "You are not allowed to change this book"


class ValidationError(CatalogError):
    status_code = 422
    kind = "validation_error"
    default_message = "Invalid input"


class DuplicateReview(CatalogError):
    status_code = 409
    kind = "duplicate_review"
    default_message = "You've already reviewed this book"


class Unauthorized(CatalogError):
    status_code = 401
    kind = "unauthorized"
    default_message = "Sign in to continue"


class DuplicateAccount(CatalogError):
    status_code = 409
    kind = "duplicate_account"
    default_message = "An account with this email already exists"
