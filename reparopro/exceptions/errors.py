from typing import Any, Dict, Optional


class QuoteError(Exception):
    """Base class for every recoverable failure raised by the quote engine."""

    status_code = 400
    code = "quote_error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "code": self.code, "message": self.message}


class ValidationRejected(QuoteError):
    status_code = 422
    code = "validation_rejected"


class NotFound(QuoteError):
    status_code = 404
    code = "not_found"


class InvalidTransition(QuoteError):
    status_code = 409
    code = "invalid_transition"


class ChatClosed(InvalidTransition):
    code = "chat_closed"


class AccessDenied(QuoteError):
    status_code = 403
    code = "access_denied"


class ExternalServiceFailure(QuoteError):
    status_code = 502
    code = "external_service_failure"


class MissingPortalToken(QuoteError):
    status_code = 400
    code = "missing_token"


class InvalidPortalToken(QuoteError):
    status_code = 404
    code = "invalid_link"
