"""Firebase Authentication (identity toolkit + secure token) operations."""
from __future__ import annotations
import logging
from typing import Optional, Dict, Any, Tuple

import requests

from .client import FirebaseHttpClient, with_query, redact_url
from .exceptions import ConfigurationError, FirebaseAPIError
from .sessions import CredentialContext, SessionUser
from .validators import require_text

IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1/accounts"
TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

logger = logging.getLogger(__name__)


class AuthService:
    """Service for signing end users in and out of a Firebase project.

    Every network operation performs exactly one request. Remote rejections
    never raise: sign-in paths clear the stored session, the other paths
    return ``None`` / ``False``. The provider's reason is kept in
    ``last_error``.

    Usage:
        auth = AuthService(context)
        auth.sign_in_with_password("alice@example.com", "secret")
        if auth.current_user is None:
            print(auth.last_error)
    """

    def __init__(
        self,
        context: CredentialContext,
        http: Optional[FirebaseHttpClient] = None,
        identity_url: str = IDENTITY_URL,
        token_url: str = TOKEN_URL,
    ):
        """Initialize auth service.

        Args:
            context: Credential context shared with the database service
            http: Transport (a private one is created by default)
            identity_url: Base of the ``accounts:*`` endpoints
            token_url: Token refresh endpoint
        """
        if context is None:
            raise ConfigurationError("Credential context cannot be null")
        self.context = context
        self.http = http or FirebaseHttpClient()
        self.identity_url = identity_url.rstrip("/")
        self.token_url = token_url
        self._last_error: Optional[FirebaseAPIError] = None

    @property
    def current_user(self) -> Optional[SessionUser]:
        return self.context.user

    @property
    def last_error(self) -> Optional[FirebaseAPIError]:
        """Most recent remote rejection, or None after a successful call."""
        return self._last_error

    def sign_up(self, email: str, password: str) -> Optional[SessionUser]:
        """Create a new email/password account.

        The stored session is left untouched; callers decide whether the new
        account counts as signed in.

        Returns:
            The new user's session, or None if the provider rejected the request
        """
        require_text(email, "Email")
        require_text(password, "Password")
        payload = self._post_identity("signUp", self._credentials(email, password))
        if payload is None:
            return None
        user = SessionUser.from_identity_response(payload)
        logger.info("Signed up user %s", user.local_id)
        return user

    def sign_in_with_password(self, email: str, password: str) -> None:
        """Sign in with email and password, replacing the stored session.

        On failure the stored session is cleared.
        """
        require_text(email, "Email")
        require_text(password, "Password")
        payload = self._post_identity(
            "signInWithPassword", self._credentials(email, password), token_keys=("idToken", "refreshToken")
        )
        user = SessionUser.from_identity_response(payload) if payload is not None else None
        self._store(user)

    def sign_in_with_token(self, refresh_token: str) -> None:
        """Exchange a refresh token for a fresh session.

        Same success and failure semantics as ``sign_in_with_password``.
        """
        require_text(refresh_token, "Refresh token")
        url = with_query(self.token_url, key=self.context.api_key)
        payload = self._post(
            url,
            {"grant_type": "refresh_token", "refreshToken": refresh_token},
            token_keys=("id_token", "refresh_token"),
        )
        user = SessionUser.from_token_response(payload, previous=self.context.user) if payload is not None else None
        self._store(user)

    def send_password_reset_email(self, email: str) -> bool:
        """Ask the provider to email a password reset link.

        Returns:
            True if the provider accepted the request
        """
        require_text(email, "Email")
        payload = self._post_identity("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        return payload is not None

    def sign_out(self) -> None:
        """Forget the stored session. No request is sent."""
        user = self.context.user
        if user is not None:
            logger.info("Signed out user %s", user.local_id)
        self.context.user = None

    @staticmethod
    def _credentials(email: str, password: str) -> Dict[str, Any]:
        return {"email": email, "password": password, "returnSecureToken": True}

    def _post_identity(self, action: str, body: Dict[str, Any], **kwargs) -> Optional[Dict[str, Any]]:
        url = with_query(f"{self.identity_url}:{action}", key=self.context.api_key)
        return self._post(url, body, **kwargs)

    def _post(
        self, url: str, body: Dict[str, Any], token_keys: Tuple[str, ...] = ()
    ) -> Optional[Dict[str, Any]]:
        """POST ``body`` and return the decoded reply, or None on any failure.

        A reply missing any of ``token_keys`` counts as a failure, so a
        sign-in never stores a session without both of its tokens.
        """
        endpoint = redact_url(url)
        try:
            resp = self.http.post(url, json=body)
        except requests.RequestException as e:
            self._fail(FirebaseAPIError(0, str(e), endpoint))
            return None
        if not resp.ok:
            self._fail(FirebaseAPIError(resp.status_code, _provider_message(resp), endpoint))
            return None
        try:
            payload = resp.json() if resp.text else {}
        except ValueError:
            self._fail(FirebaseAPIError(resp.status_code, "Response body is not valid JSON", endpoint))
            return None
        if not isinstance(payload, dict):
            payload = {}
        missing = [key for key in token_keys if not payload.get(key)]
        if missing:
            self._fail(FirebaseAPIError(resp.status_code, f"Response has no {', '.join(missing)}", endpoint))
            return None
        self._last_error = None
        return payload

    def _fail(self, error: FirebaseAPIError) -> None:
        logger.warning("Auth request failed: %s", error)
        self._last_error = error

    def _store(self, user: Optional[SessionUser]) -> None:
        self.context.user = user
        if user is not None:
            logger.info("Signed in user %s", user.local_id)
        else:
            logger.info("Sign-in failed, session cleared")


def _provider_message(resp: requests.Response) -> str:
    """Extract ``error.message`` (e.g. EMAIL_EXISTS) from an error body."""
    try:
        error = resp.json().get("error", {})
    except (ValueError, AttributeError):
        return resp.text or resp.reason or ""
    if isinstance(error, dict):
        return error.get("message") or resp.text
    return str(error)
