"""Custom exceptions for usercount.

The set is closed: the endpoint layer matches on these classes, never on
message text. ``message`` is the short string that may reach a client;
the driver exception stays on ``__cause__`` and in the logs.
"""


class UserCountError(Exception):
    """Base exception for all usercount errors."""

    code = "USERCOUNT_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StorageConnectionError(UserCountError):
    """A storage session could not be established."""

    code = "DATABASE_UNAVAILABLE"


class QueryError(UserCountError):
    """Statement execution failed."""

    code = "QUERY_FAILED"


class ReleaseError(UserCountError):
    """Closing a storage session failed. Logged, never raised to callers."""

    code = "RELEASE_FAILED"
