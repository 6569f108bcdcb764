"""
Custom exceptions for Comic Client.

This module defines application-specific exceptions that provide
clear error messages and help with error handling throughout the app.
"""

from typing import Any, Dict, Optional


class ComicClientError(Exception):
    """Base exception for all Comic Client errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception with a message and optional details.

        Args:
            message: Human-readable error message
            details: Additional contextual information about the error
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return a string representation of the error."""
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigurationError(ComicClientError):
    """Raised when there's an issue with the application configuration."""
    pass


class ValidationError(ComicClientError):
    """Raised when input validation fails."""
    pass


class APIError(ComicClientError):
    """Raised when an API request fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize with API-specific error information.

        Args:
            message: Human-readable error message
            status_code: HTTP status code if available
            response_text: Response text if available
            details: Additional contextual information
        """
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message, details)


class TransportError(APIError):
    """Raised when a request cannot complete (connection, timeout, bad body)."""
    pass


class LoadFailedError(APIError):
    """Raised when a failed loader result is unwrapped."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[Dict[str, Any]] = None,
        step: Optional[str] = None,
    ):
        self.error = error or {"error": message}
        self.step = step
        super().__init__(message, status_code=status_code, details={"step": step} if step else None)


class AuthRedirect(ComicClientError):
    """Raised when a loader result asks the caller to redirect to login."""

    def __init__(self, location: str, status: int, step: Optional[str] = None):
        message = f"Authentication required, redirect ({status}) to {location}"
        super().__init__(message, {"step": step} if step else None)
        self.location = location
        self.status = status
        self.step = step
