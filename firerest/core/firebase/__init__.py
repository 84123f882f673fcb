"""Firebase REST client library.

This package provides a small, testable interface to Firebase Authentication
and the Realtime Database over plain HTTPS.

Architecture:
- client.py: HTTP transport and URL helpers
- sessions.py: Credential context and signed-in user
- auth.py: Sign-up, sign-in, token refresh, password reset, sign-out
- database.py: Database references and CRUD
- app.py: Top-level app and the app registry
- validators.py: Local argument and path checks
- exceptions.py: Typed exceptions for error handling

Usage:
    from firerest.core.firebase import FirebaseApp

    app = FirebaseApp("demo", "api-key")
    app.auth.sign_in_with_password("alice@example.com", "secret")

    ref = app.database.get_reference("users").child(app.auth.current_user.local_id)
    ref.write({"name": "Alice"})
"""
from .client import (
    FirebaseHttpClient,
    with_query,
    redact_url,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    FirebaseError,
    FirebaseAPIError,
    ConfigurationError,
    InvalidPathError,
    AppNotFoundError,
)
from .sessions import (
    CredentialContext,
    SessionUser,
)
from .auth import (
    AuthService,
    IDENTITY_URL,
    TOKEN_URL,
)
from .database import (
    FirebaseDatabase,
    Reference,
    DATABASE_HOST,
)
from .app import (
    FirebaseApp,
    AppRegistry,
)

__all__ = [
    # Transport
    "FirebaseHttpClient",
    "with_query",
    "redact_url",
    "REQUEST_TIMEOUT",

    # Exceptions
    "FirebaseError",
    "FirebaseAPIError",
    "ConfigurationError",
    "InvalidPathError",
    "AppNotFoundError",

    # Session state
    "CredentialContext",
    "SessionUser",

    # Services
    "AuthService",
    "FirebaseDatabase",
    "Reference",

    # App
    "FirebaseApp",
    "AppRegistry",

    # Endpoints
    "IDENTITY_URL",
    "TOKEN_URL",
    "DATABASE_HOST",
]
