"""
Shared error handling for the Summary Widget condition engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class ConditionEngineException(Exception):
    """Base exception for the condition engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class MalformedConditionError(ConditionEngineException):
    """A condition could not be evaluated as specified.

    Raised for unknown operation keys, missing or mistyped operands, and
    field values that cannot be resolved for the requested operation.
    """

    def __init__(self, message: str = "Malformed condition", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_CONDITION", message, details)

    @property
    def reason(self) -> str:
        return self.details.get("reason", "unknown")


class ConfigurationError(ConditionEngineException):
    """Configuration-related errors."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
