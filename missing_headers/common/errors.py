"""
Error Definitions

Defines custom exception classes used by the middleware for unified error handling.
"""

from typing import Any, Optional


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Args:
            include_details: Whether extra details are included

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class CapabilityUnsupportedError(AppError):
    """
    Capability Unsupported Error

    Raised when an optional response stream capability (e.g. hijacking) is
    requested from a sink that does not provide it.
    """

    def __init__(self, capability: str, sink_type: str):
        super().__init__(
            message=f"response sink does not support {capability}: {sink_type}",
            error_type="capability_error",
            code="capability_unsupported",
            details={"capability": capability, "sink_type": sink_type},
            status_code=501,
        )
        self.capability = capability
        self.sink_type = sink_type
