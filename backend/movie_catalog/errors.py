"""Domain errors raised by services. Each maps to one HTTP status."""


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(CatalogError):
    status_code = 400


class Conflict(CatalogError):
    """Duplicate username, email or title slug."""
    status_code = 400


class Unauthorized(CatalogError):
    status_code = 401


class Forbidden(CatalogError):
    status_code = 403


class NotFound(CatalogError):
    status_code = 404


class NotConfigured(CatalogError):
    """An optional integration (OMDb, reset webhook) is needed but missing."""
    status_code = 500
