"""
Application errors. All of them are HTTPExceptions so the global handler can
render them directly.
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Input rejected before reaching the store."""

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message)


class NotFoundError(HTTPException):
    def __init__(self, resource_type: str, resource_id):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource_type} {resource_id} not found",
        )
        self.resource_id = resource_id


class DatabaseError(HTTPException):
    """A read or write against the store failed; nothing was committed."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


class ExternalServiceError(HTTPException):
    """A call to a third-party API failed."""

    def __init__(self, service_name: str, message: str):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"{service_name} error: {message}",
        )
        self.service_name = service_name


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: int):
        super().__init__("Transaction", transaction_id)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id):
        super().__init__("User", user_id)


class WhatsAppAPIError(ExternalServiceError):
    def __init__(self, message: str):
        super().__init__("WhatsApp API", message)


class LLMServiceError(ExternalServiceError):
    """Completion endpoint unreachable, timed out, or returned no usable body."""

    def __init__(self, message: str):
        super().__init__("LLM", message)
