"""Error types shared by services and the HTTP layer."""


class GrandGateError(Exception):
    """Base exception for the listings backend."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GrandGateError):
    """Malformed or missing client input."""

    status_code = 400


class AuthError(GrandGateError):
    """Missing or invalid credentials."""

    status_code = 401


class ForbiddenError(AuthError):
    """Authenticated, but not allowed (role, blocked or inactive account)."""

    status_code = 403


class NotFoundError(GrandGateError):
    """Requested entity does not exist."""

    status_code = 404


class RemoteServiceError(GrandGateError):
    """Media host or other remote dependency failed."""

    status_code = 500


class UploadError(RemoteServiceError):
    """A media upload was rejected or could not be completed."""

    status_code = 400
