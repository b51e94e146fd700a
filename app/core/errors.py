"""Domain errors raised by services and the token layer; mapped to HTTP status in app.main."""


class AccessControlError(Exception):
    """Base class for errors the API maps to a client-facing status code."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFound(AccessControlError):
    """Entity absent (user, role, permission)."""

    status_code = 404


class Conflict(AccessControlError):
    """Duplicate unique key (email, role name, permission name) or a blocked destructive change."""

    status_code = 409


class ValidationError(AccessControlError):
    """Input that is well-formed JSON but not acceptable (e.g. unknown user type)."""

    status_code = 400


class InvalidCredentials(AccessControlError):
    """Unknown email or wrong password at login."""

    status_code = 401


class Forbidden(AccessControlError):
    """Authenticated caller lacks the required permission."""

    status_code = 403


class TokenError(AccessControlError):
    """Bearer token rejected; always terminal for the request."""

    status_code = 401


class InvalidSignature(TokenError):
    """Signature does not verify against the issuing key."""


class TokenExpired(TokenError):
    """Current time is at or after the embedded expiry."""


class MalformedToken(TokenError):
    """Token cannot be decoded or lacks the required claims."""
