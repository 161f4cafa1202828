"""Error taxonomy shared by services and routers.

Every error raised here is translated at the request boundary into
``{"error": message}`` with the class status code (see ``squeak.main``).
"""


class SqueakError(Exception):
    """Base exception for request-level failures."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SqueakError):
    """Malformed or missing request fields."""

    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(SqueakError):
    """No session, or the session token did not validate."""

    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(SqueakError):
    """Caller has no profile (or not the required role) in the organization."""

    status_code = 403
    default_message = "Not authorized"


class NotFoundError(SqueakError):
    status_code = 404
    default_message = "Not found"


class ConflictError(SqueakError):
    status_code = 409
    default_message = "Already exists"


class MissingParamsError(SqueakError):
    """Read path called without its lookup params.

    Widget clients already handle a 500 here, so the status is kept.
    """

    status_code = 500
    default_message = "Missing required params"


class ConfigMissingError(SqueakError):
    status_code = 500
    default_message = "Error fetching config"


class PersistenceError(SqueakError):
    status_code = 500
    default_message = "Error saving to database"


class UploadError(SqueakError):
    """Image CDN rejected or failed the upload."""

    status_code = 502
    default_message = "Image upload failed"


class DispatchError(SqueakError):
    """Notification delivery failed. Logged only, never returned to a caller."""

    default_message = "Notification delivery failed"
