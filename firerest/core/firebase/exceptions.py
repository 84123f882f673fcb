"""Firebase-specific exceptions for error handling.

Remote rejections are never raised by the services; they are recorded as
``FirebaseAPIError`` instances for diagnostics while the operation itself
returns a sentinel (``None`` / ``False``). Only local precondition
violations are raised.
"""


class FirebaseError(Exception):
    """Base exception for all Firebase operations."""
    pass


class FirebaseAPIError(FirebaseError):
    """HTTP error from the identity, token or database endpoint.

    Attributes:
        status_code: HTTP status code (0 when the request never completed)
        message: Error message from response
        endpoint: Endpoint that failed, with credentials redacted
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class ConfigurationError(FirebaseError, ValueError):
    """Missing or invalid project id, API key or credential context."""
    pass


class InvalidPathError(FirebaseError, ValueError):
    """Database path cannot be built (parent of root, empty or illegal key)."""
    pass


class AppNotFoundError(FirebaseError, KeyError):
    """No app registered under the requested name."""
    pass
