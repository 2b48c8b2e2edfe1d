"""Typed exceptions raised by the access-control client."""
from __future__ import annotations

from typing import Any, Optional


class UclbrtError(Exception):
    """Base exception for all client operations."""
    pass


class ConfigurationError(UclbrtError):
    """Identity, endpoints, timezone or community context is missing or invalid."""
    pass


class InvalidArgumentError(UclbrtError, ValueError):
    """A required operation argument is empty or malformed."""
    pass


class FormatError(UclbrtError, ValueError):
    """Compact time string is not in YYMMDDHHmm form."""
    pass


class TransportError(UclbrtError):
    """HTTP exchange failed or returned a non-200 status.

    Attributes:
        status_code: HTTP status code, or None when no response was received
        body: Response body or transport failure description
    """

    def __init__(self, status_code: Optional[int], body: Any):
        self.status_code = status_code
        self.body = body
        super().__init__(f"[{status_code}] {body}")


class ServerError(UclbrtError):
    """Reply-level status indicates a failure.

    Attributes:
        info: Server-provided failure description
        status: Reply-level status value
    """

    def __init__(self, info: Any, status: Any = None):
        self.info = info
        self.status = status
        super().__init__(str(info) if info else f"server returned status {status}")


class UnexpectedResponseError(UclbrtError):
    """Otherwise successful reply lacks the expected field or marker."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"the {field} is not found in the return result of the server.")


class EncryptionError(UclbrtError):
    """Public key material is missing/invalid or encryption failed."""
    pass
