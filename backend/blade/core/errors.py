# blade/core/errors.py
"""
Domain errors raised by the authorization layer and the CMS routes.

Every error carries an HTTP status, a stable machine-readable code and a
human-readable message. They are turned into JSON responses by the
exception handler registered in ``blade.main``; none of them is fatal.
"""


class BladeError(Exception):
    status_code = 400
    code = "BAD_REQUEST"
    message = "Bad request"

    def __init__(self, message: str | None = None, code: str | None = None):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class BadRequest(BladeError):
    pass


class AuthenticationRequired(BladeError):
    """No session on a route that needs one."""
    status_code = 401
    code = "AUTH_REQUIRED"
    message = "Authentication required. Sign in to the admin to create or edit content."


class InvalidToken(BladeError):
    """Missing, malformed or unknown bearer credential (revoked looks the same)."""
    status_code = 401
    code = "AUTH_INVALID_TOKEN"
    message = "Invalid or missing token"


class Forbidden(BladeError):
    status_code = 403
    code = "FORBIDDEN"
    message = "You do not have access to this space"


class NotFound(BladeError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class Conflict(BladeError):
    status_code = 409
    code = "CONFLICT"
    message = "Already exists"


class SpaceRequired(BladeError):
    """An unscoped token without a session has no default space to fall back to."""
    code = "SPACE_REQUIRED"
    message = "This token is not scoped to a space. Pass ?space=<id> explicitly."
