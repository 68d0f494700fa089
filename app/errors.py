"""
Domain errors

Services raise these; app.main turns them into JSON error responses so
every failure stays scoped to the single request that caused it.
"""


class DomainError(Exception):
    """Base class for errors surfaced to the admin console"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Rejected input, raised before any mutation"""

    status_code = 400


class NotFoundError(DomainError):
    """Referenced row does not exist"""

    status_code = 404


class StoreError(DomainError):
    """A primary data-store call failed and the operation was aborted"""

    status_code = 500


class SecondaryStoreError(StoreError):
    """A best-effort follow-up step failed after the primary mutation committed.

    Logged and reported alongside a successful result, never raised to the client.
    """
