"""
Exception classes for the inventory REST client.

The client reports failures by handing one of these to the caller's error
callback rather than raising it, so each carries a display message and a
``details`` dict suitable for logging or rendering.
"""

from typing import Any, Dict, Optional


class InventoryRestException(Exception):
    """
    Base exception for all inventory REST client errors.

    Attributes:
        message: Human-readable error message
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class MissingFieldError(InventoryRestException):
    """
    A required input field was absent.

    Attributes:
        field_name: Name of the missing field
        message_key: Localization key describing the problem
    """

    def __init__(
        self,
        field_name: str,
        message_key: str,
        message: Optional[str] = None,
    ) -> None:
        self.field_name = field_name
        self.message_key = message_key
        super().__init__(
            message or message_key,
            details={"field": field_name, "message_key": message_key},
        )


class TransportError(InventoryRestException):
    """
    A REST call failed below the HTTP status layer, or its body was unusable.

    Attributes:
        url: Request URL, when known
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.url = url
        details = dict(details or {})
        if url is not None:
            details.setdefault("url", url)
        super().__init__(message, details)


class RequestTimeoutError(TransportError):
    """Raised for requests exceeding the configured timeout."""

    def __init__(self, url: str, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Request timed out after {timeout_seconds}s: {url}",
            url=url,
            details={"error_type": "timeout", "timeout_seconds": timeout_seconds},
        )


class ServiceUnavailableError(TransportError):
    """Raised when the server cannot be reached at all."""

    def __init__(self, url: str, reason: Optional[str] = None) -> None:
        self.reason = reason
        message = f"Cannot connect to {url}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            url=url,
            details={"error_type": "connection_error", "reason": reason},
        )


class HTTPStatusFailure(TransportError):
    """
    The server answered with a non-2xx status.

    Attributes:
        status_code: HTTP status code
        body: Response body, truncated to 500 characters
    """

    def __init__(self, url: str, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body[:500]
        super().__init__(
            f"Server returned error: {status_code}",
            url=url,
            details={
                "error_type": "http_error",
                "status_code": status_code,
                "body": self.body,
            },
        )
