"""Pytest shared fixtures for the Firebase client tests."""
import json
import pathlib
import sys
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlsplit, parse_qs

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from firerest.core.firebase import FirebaseApp


# ─────────────────────────────────────────────────────────────────────────────
# Stub transport
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)
        self.reason = "OK" if status_code < 400 else "Error"

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeFirebaseSession:
    """In-memory Firebase backend behind a ``requests.Session`` interface.

    Identity and token replies are scripted per action; the database keeps
    a JSON tree so writes can be read back. Every call is recorded in
    ``calls`` as ``(method, url, kwargs)``.
    """

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.tree: Any = None
        self.identity: Dict[str, StubResponse] = {}
        self.token_response: Optional[StubResponse] = None
        self.database_status: Optional[int] = None
        self.required_token: Optional[str] = None
        self.raise_error: Optional[Exception] = None
        self.closed = False

    # Scripting helpers
    def script_identity(self, action: str, payload: Any, status_code: int = 200) -> None:
        self.identity[action] = StubResponse(status_code, payload)

    def script_token(self, payload: Any, status_code: int = 200) -> None:
        self.token_response = StubResponse(status_code, payload)

    @property
    def last_call(self) -> Tuple[str, str, Dict[str, Any]]:
        return self.calls[-1]

    # requests.Session interface
    def request(self, method: str, url: str, **kwargs) -> StubResponse:
        self.calls.append((method, url, kwargs))
        if self.raise_error is not None:
            raise self.raise_error
        parts = urlsplit(url)
        if parts.netloc == "identitytoolkit.googleapis.com":
            action = parts.path.rsplit(":", 1)[-1]
            return self.identity.get(action, StubResponse(400, {"error": {"message": "UNSCRIPTED"}}))
        if parts.netloc == "securetoken.googleapis.com":
            return self.token_response or StubResponse(400, {"error": {"message": "INVALID_REFRESH_TOKEN"}})
        if parts.netloc.endswith(".firebaseio.com"):
            return self._database(method, parts, kwargs.get("data"))
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    def close(self) -> None:
        self.closed = True

    def _database(self, method: str, parts, data: Optional[str]) -> StubResponse:
        if self.database_status is not None:
            return StubResponse(self.database_status, {"error": "Simulated failure"})
        if self.required_token is not None:
            token = parse_qs(parts.query).get("auth", [None])[0]
            if token != self.required_token:
                return StubResponse(401, {"error": "Permission denied"})
        assert parts.path.endswith(".json")
        segments = [s for s in parts.path[: -len(".json")].split("/") if s]
        if method == "GET":
            return StubResponse(200, self._get(segments))
        if method == "PUT":
            value = json.loads(data)
            self._set(segments, value)
            return StubResponse(200, value)
        if method == "PATCH":
            value = json.loads(data)
            for key, child in value.items():
                self._set(segments + key.split("/"), child)
            return StubResponse(200, value)
        if method == "DELETE":
            self._set(segments, None)
            return StubResponse(200, None)
        return StubResponse(405, {"error": "Method not allowed"})

    def _get(self, segments: List[str]) -> Any:
        node = self.tree
        for segment in segments:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node

    def _set(self, segments: List[str], value: Any) -> None:
        if not segments:
            self.tree = value
            return
        if not isinstance(self.tree, dict):
            self.tree = {}
        node = self.tree
        for segment in segments[:-1]:
            if not isinstance(node.get(segment), dict):
                node[segment] = {}
            node = node[segment]
        if value is None:
            node.pop(segments[-1], None)
        else:
            node[segments[-1]] = value


SIGN_IN_PAYLOAD = {
    "kind": "identitytoolkit#VerifyPasswordResponse",
    "localId": "u1",
    "email": "a@b.com",
    "displayName": "",
    "idToken": "t1",
    "registered": True,
    "refreshToken": "r1",
    "expiresIn": "3600",
}


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_real_http(monkeypatch, request):
    """
    Prevent unit tests from reaching Firebase.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {method} {url}")

    monkeypatch.setattr(requests.Session, "request", _refuse)


@pytest.fixture()
def fake_session():
    return FakeFirebaseSession()


@pytest.fixture()
def firebase_app(fake_session):
    """App for project "demo" with API key "K" wired to the fake backend."""
    return FirebaseApp("demo", "K", session=fake_session)


@pytest.fixture()
def signed_in_app(firebase_app, fake_session):
    fake_session.script_identity("signInWithPassword", SIGN_IN_PAYLOAD)
    firebase_app.auth.sign_in_with_password("a@b.com", "pw")
    return firebase_app


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a live Firebase project)"
    )
