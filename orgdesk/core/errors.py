"""Error types raised by orgdesk services and endpoints.

Every error carries the HTTP status it maps to. The server's exception
handlers turn them into a ``{"error": message}`` JSON body.
"""

from __future__ import annotations


class OrgDeskError(Exception):
    """Base error for all orgdesk exceptions."""

    status_code: int = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(OrgDeskError):
    """Raised when request input is missing or malformed."""

    status_code = 400


class UnauthorizedError(OrgDeskError):
    """Raised when the caller is not authenticated."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ForbiddenError(OrgDeskError):
    """Raised when the caller lacks the role or ownership for an action."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFoundError(OrgDeskError):
    """Raised when a referenced resource does not exist."""

    status_code = 404

    def __init__(self, resource: str, identifier: object = None) -> None:
        if identifier is None:
            super().__init__(f"{resource} not found")
        else:
            super().__init__(f"{resource} {identifier} not found")


class ConflictError(OrgDeskError):
    """Raised when a write would duplicate an existing record."""

    status_code = 409


class ServiceUnavailableError(OrgDeskError):
    """Raised when a feature is switched off by configuration."""

    status_code = 503

    def __init__(self, feature: str) -> None:
        super().__init__(f"{feature} is disabled")
