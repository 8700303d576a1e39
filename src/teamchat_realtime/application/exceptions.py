from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    code = "error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class AuthError(AppError):
    """Connection credential rejected before any registry entry exists."""

    code = "auth_failed"

    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    UNKNOWN_USER = "unknown_user"

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        super().__init__(detail or reason)


class NotFoundError(AppError):
    code = "not_found"


class ForbiddenError(AppError):
    code = "not_authorized"


class ValidationError(AppError):
    code = "invalid_input"


class EmptyMessageError(ValidationError):
    code = "empty_message"

    def __init__(self, detail: str = "Message must have text or an image") -> None:
        super().__init__(detail)


class DeliveryFailure(AppError):
    """A push to a live connection failed after persistence succeeded."""

    code = "delivery_failed"
