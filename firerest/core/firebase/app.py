"""Top-level Firebase client and the registry of initialized clients."""
from __future__ import annotations
import logging
from typing import Optional, Dict, List, TYPE_CHECKING

import requests

from .auth import AuthService, IDENTITY_URL, TOKEN_URL
from .client import FirebaseHttpClient, REQUEST_TIMEOUT
from .database import FirebaseDatabase, DATABASE_HOST
from .exceptions import ConfigurationError, AppNotFoundError
from .sessions import CredentialContext

if TYPE_CHECKING:
    from firerest.config.settings import FirebaseConfig

logger = logging.getLogger(__name__)


class FirebaseApp:
    """One Firebase project: its credential context, auth and database.

    The auth service and every database reference share the same
    ``CredentialContext``, so signing in through ``app.auth`` authorizes
    subsequent ``app.database`` calls.

    Usage:
        app = FirebaseApp("demo", "api-key")
        app.auth.sign_in_with_password("alice@example.com", "secret")
        app.database.get_reference("users/alice").read()
    """

    def __init__(
        self,
        project_id: str,
        api_key: str,
        *,
        database_host: str = DATABASE_HOST,
        identity_url: str = IDENTITY_URL,
        token_url: str = TOKEN_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.context = CredentialContext(api_key, project_id)
        self.http = FirebaseHttpClient(session=session, timeout=timeout)
        self.auth = AuthService(self.context, self.http, identity_url=identity_url, token_url=token_url)
        self.database = FirebaseDatabase(self.context, self.http, database_host=database_host)

    @classmethod
    def from_config(cls, config: "FirebaseConfig", session: Optional[requests.Session] = None) -> "FirebaseApp":
        """Build an app from loaded settings."""
        return cls(
            config.project_id,
            config.api_key,
            database_host=config.database_host,
            identity_url=config.identity_url,
            token_url=config.token_url,
            session=session,
            timeout=config.request_timeout,
        )

    @property
    def name(self) -> str:
        return self.context.project_id

    def close(self) -> None:
        self.http.close()

    def __repr__(self) -> str:
        return f"FirebaseApp(project_id={self.name!r})"


class AppRegistry:
    """Process-scoped mapping from project id to initialized app.

    Create one registry and pass it to the code that needs lookups; there is
    no module-level default. Single-app programs can use ``FirebaseApp``
    directly and skip the registry.
    """

    def __init__(self):
        self._apps: Dict[str, FirebaseApp] = {}

    def initialize_app(self, project_id: str, api_key: str, **kwargs) -> FirebaseApp:
        """Create and register an app for ``project_id``.

        Raises:
            ConfigurationError: If an app is already registered under that id
        """
        if project_id in self._apps:
            raise ConfigurationError(f"App '{project_id}' is already initialized")
        app = FirebaseApp(project_id, api_key, **kwargs)
        self._apps[project_id] = app
        logger.info("Initialized app %s", project_id)
        return app

    def register(self, app: FirebaseApp) -> FirebaseApp:
        """Register an app built elsewhere (e.g. with ``from_config``)."""
        if app.name in self._apps:
            raise ConfigurationError(f"App '{app.name}' is already initialized")
        self._apps[app.name] = app
        return app

    def get_app(self, name: str) -> FirebaseApp:
        """Return the app registered under ``name``.

        Raises:
            AppNotFoundError: If no such app exists
        """
        try:
            return self._apps[name]
        except KeyError:
            raise AppNotFoundError(f"No app named '{name}' has been initialized") from None

    def remove_app(self, name: str) -> bool:
        """Unregister and close an app. Returns False if it was not registered."""
        app = self._apps.pop(name, None)
        if app is None:
            return False
        app.close()
        logger.info("Removed app %s", name)
        return True

    def names(self) -> List[str]:
        return list(self._apps)

    def __contains__(self, name: object) -> bool:
        return name in self._apps

    def __len__(self) -> int:
        return len(self._apps)
