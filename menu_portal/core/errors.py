"""Domain error taxonomy.

Services raise these; the exception handlers registered in ``menu_portal.main``
turn them into ``{"success": false, "message": ...}`` responses with the
matching HTTP status.
"""

from __future__ import annotations

from fastapi import status


class PortalError(Exception):
    """Base class for every error the API reports to clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(PortalError):
    """Duplicate natural key, e.g. an email that is already registered."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(PortalError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: str | None = None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class InvalidTransitionError(PortalError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: str, entity: str = "order") -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {entity} from {current} to {target}")


class InternalError(PortalError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
