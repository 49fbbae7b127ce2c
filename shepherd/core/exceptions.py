"""Error taxonomy for the access-control and promotion engine."""

from fastapi import status


class ShepherdError(Exception):
    """Base exception for Shepherd."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class PermissionDenied(ShepherdError):
    """Raised when the acting member lacks the grant for a module/action."""
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(ShepherdError):
    """Raised when a target role is not reachable from the current role by any rule."""
    status_code = status.HTTP_400_BAD_REQUEST


class StaleSubject(ShepherdError):
    """Raised when the subject's role changed since the caller last read it."""
    status_code = status.HTTP_409_CONFLICT


class StorageFailure(ShepherdError):
    """Raised when the store is unreachable or rejects a write."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class MemberNotFound(ShepherdError):
    """Raised when a member does not exist in the acting member's organization."""
    status_code = status.HTTP_404_NOT_FOUND


class RoleTableError(ShepherdError):
    """Raised when a role table violates its invariants."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
