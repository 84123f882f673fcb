"""Signed-in session state shared by the auth and database services."""
from __future__ import annotations
import threading
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from .exceptions import ConfigurationError


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class SessionUser:
    """Decoded identity-provider response for an authenticated user.

    Instances are immutable; a new sign-in or refresh produces a new object.
    """
    local_id: str
    id_token: Optional[str] = field(default=None, repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)
    email: Optional[str] = None
    display_name: Optional[str] = None
    expires_in: int = 0
    registered: bool = False
    kind: Optional[str] = None
    issued_at: float = field(default_factory=time.time, compare=False)

    @classmethod
    def from_identity_response(cls, payload: Dict[str, Any]) -> "SessionUser":
        """Build a session from an identitytoolkit ``accounts:*`` body.

        Args:
            payload: Decoded JSON (camelCase keys, ``expiresIn`` as a string)

        Returns:
            New SessionUser
        """
        return cls(
            local_id=payload.get("localId", ""),
            id_token=payload.get("idToken"),
            refresh_token=payload.get("refreshToken"),
            email=payload.get("email"),
            display_name=payload.get("displayName"),
            expires_in=_to_int(payload.get("expiresIn")),
            registered=bool(payload.get("registered", False)),
            kind=payload.get("kind"),
        )

    @classmethod
    def from_token_response(cls, payload: Dict[str, Any], previous: Optional["SessionUser"] = None) -> "SessionUser":
        """Build a session from a securetoken refresh body.

        The token endpoint answers with snake_case keys and no profile data,
        so email and display name are carried over from ``previous`` when it
        belongs to the same user.
        """
        local_id = payload.get("user_id") or payload.get("localId", "")
        profile = previous if previous is not None and previous.local_id == local_id else None
        return cls(
            local_id=local_id,
            id_token=payload.get("id_token") or payload.get("idToken"),
            refresh_token=payload.get("refresh_token") or payload.get("refreshToken"),
            email=profile.email if profile else payload.get("email"),
            display_name=profile.display_name if profile else payload.get("displayName"),
            expires_in=_to_int(payload.get("expires_in", payload.get("expiresIn"))),
            registered=profile.registered if profile else False,
            kind=payload.get("token_type"),
        )

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.issued_at) + timedelta(seconds=self.expires_in)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return True once the id token lifetime has elapsed.

        Nothing refreshes the token automatically; callers decide whether to
        call ``AuthService.sign_in_with_token``.
        """
        return (now or datetime.now()) >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("issued_at")
        return data


class CredentialContext:
    """Project credentials plus the currently signed-in user.

    One context is created per app and shared by reference with the auth
    service and every database reference derived from it. ``api_key`` and
    ``project_id`` are fixed at construction; ``user`` is replaced wholesale
    under a lock, so concurrent sign-ins resolve to the last one completed.
    """

    def __init__(self, api_key: str, project_id: str):
        if not api_key or not str(api_key).strip():
            raise ConfigurationError("API key cannot be null or empty")
        if not project_id or not str(project_id).strip():
            raise ConfigurationError("Project id cannot be null or empty")
        self._api_key = api_key
        self._project_id = project_id
        self._user: Optional[SessionUser] = None
        self._lock = threading.Lock()

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def user(self) -> Optional[SessionUser]:
        with self._lock:
            return self._user

    @user.setter
    def user(self, value: Optional[SessionUser]) -> None:
        if value is not None and not isinstance(value, SessionUser):
            raise TypeError(f"Expected SessionUser or None, got {type(value).__name__}")
        with self._lock:
            self._user = value

    @property
    def id_token(self) -> Optional[str]:
        """Token to attach to database requests, or None when signed out."""
        user = self.user
        return user.id_token if user is not None and user.id_token else None

    @property
    def is_authenticated(self) -> bool:
        return self.id_token is not None

    def __repr__(self) -> str:
        user = self.user
        return f"CredentialContext(project_id={self._project_id!r}, user={user.local_id if user else None!r})"
