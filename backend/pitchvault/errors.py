"""Error taxonomy shared by the store, resolver and routes.

Every error carries the HTTP status it maps to. The app-level handler in
main.py renders them all as ``{"error": message}``.
"""


class RegistryError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RegistryError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(RegistryError):
    status_code = 401
    default_message = "Unauthorized access"


class NotFoundError(RegistryError):
    status_code = 404
    default_message = "File not found"


class InternalError(RegistryError):
    status_code = 500
