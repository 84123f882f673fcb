"""Firebase Realtime Database references and CRUD operations."""
from __future__ import annotations
import json
import logging
from typing import Optional, Any, Callable, TypeVar
from urllib.parse import quote

import requests

from .client import FirebaseHttpClient, with_query, redact_url
from .exceptions import ConfigurationError, InvalidPathError
from .sessions import CredentialContext
from .validators import split_path, validate_child_name

DATABASE_HOST = "firebaseio.com"

T = TypeVar("T")

logger = logging.getLogger(__name__)


class FirebaseDatabase:
    """Entry point to the Realtime Database of one project."""

    def __init__(
        self,
        context: CredentialContext,
        http: Optional[FirebaseHttpClient] = None,
        database_host: str = DATABASE_HOST,
    ):
        if context is None:
            raise ConfigurationError("Credential context cannot be null")
        self.context = context
        self.http = http or FirebaseHttpClient()
        self.database_host = database_host

    def get_reference(self, path: Optional[str] = None) -> "Reference":
        """Return a reference to ``path`` (the root when omitted)."""
        return Reference(self.context, path, http=self.http, database_host=self.database_host)


class Reference:
    """Immutable handle on one node of the database tree.

    Navigation (``child``, ``parent``, ``root``) never touches the network and
    always returns a new Reference sharing the same credential context and
    transport. CRUD calls read the context's id token when they run, so a
    reference built before sign-in is authorized once the user signs in.

    Usage:
        ref = database.get_reference("users").child("alice")
        ref.write({"age": 31})
        ref.read()       # {"age": 31}
        str(ref)         # https://demo.firebaseio.com/users/alice
    """

    def __init__(
        self,
        context: CredentialContext,
        path: Optional[str] = None,
        http: Optional[FirebaseHttpClient] = None,
        database_host: str = DATABASE_HOST,
    ):
        if context is None:
            raise ConfigurationError("Credential context cannot be null")
        self._context = context
        self._path = "/".join(split_path(path))
        self._http = http or FirebaseHttpClient()
        self._database_host = database_host

    # ─────────────────────────────────────────────────────────────────────
    # Addressing
    # ─────────────────────────────────────────────────────────────────────
    @property
    def path(self) -> str:
        """Slash-delimited path; empty string at the root."""
        return self._path

    @property
    def key(self) -> Optional[str]:
        """Last path segment, or None at the root."""
        if not self._path:
            return None
        return self._path.rsplit("/", 1)[-1]

    @property
    def is_root(self) -> bool:
        return not self._path

    @property
    def base_url(self) -> str:
        return f"https://{self._context.project_id}.{self._database_host}/"

    @property
    def url(self) -> str:
        return f"{self.base_url}{quote(self._path, safe='/')}"

    def child(self, name: str) -> "Reference":
        """Return the reference ``name`` levels below this one.

        ``name`` may contain slashes: ``child("a/b")`` equals
        ``child("a").child("b")``.

        Raises:
            InvalidPathError: If name is empty or holds a forbidden character
        """
        segments = validate_child_name(name)
        if self._path:
            segments.insert(0, self._path)
        return self._derive("/".join(segments))

    def parent(self) -> "Reference":
        """Return the reference one level up.

        Raises:
            InvalidPathError: If this is the root reference
        """
        if not self._path:
            raise InvalidPathError("The root reference has no parent")
        head, _, _ = self._path.rpartition("/")
        return self._derive(head)

    def root(self) -> "Reference":
        return self._derive("")

    def _derive(self, path: str) -> "Reference":
        return Reference(self._context, path, http=self._http, database_host=self._database_host)

    def request_url(self) -> str:
        """URL for a CRUD call issued now, with ``auth`` only when signed in."""
        return with_query(f"{self.url}.json", auth=self._context.id_token)

    # ─────────────────────────────────────────────────────────────────────
    # CRUD
    # ─────────────────────────────────────────────────────────────────────
    def read_raw(self) -> Optional[str]:
        """Return the node's JSON text, or None if the request failed."""
        resp = self._send("GET")
        if resp is None:
            return None
        return resp.text

    def read(self) -> Any:
        """Return the decoded node value, or None if absent or the request failed."""
        text = self.read_raw()
        if text is None or not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError:
            logger.warning("Undecodable response body from %s", self)
            return None

    def read_as(self, factory: Callable[..., T]) -> Optional[T]:
        """Read and convert the value with ``factory``.

        Objects are passed as keyword arguments (``factory(**value)``), any
        other value positionally. Returns None when there is nothing to read.
        """
        value = self.read()
        if value is None:
            return None
        if isinstance(value, dict):
            return factory(**value)
        return factory(value)

    def write(self, data: Any) -> bool:
        """Replace the node with ``data``.

        Strings are sent as already-encoded JSON; everything else is encoded
        with ``json.dumps``.

        Returns:
            True if the database accepted the write
        """
        return self._send("PUT", data=_encode(data)) is not None

    def update(self, data: Any) -> bool:
        """Merge the children of ``data`` into the node (PATCH)."""
        return self._send("PATCH", data=_encode(data)) is not None

    def remove(self) -> bool:
        """Delete the node and everything below it."""
        return self._send("DELETE") is not None

    def _send(self, method: str, **kwargs) -> Optional[requests.Response]:
        """Issue one request; return the response only when it succeeded."""
        url = self.request_url()
        try:
            resp = self._http.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, redact_url(url), e)
            return None
        if not resp.ok:
            logger.warning("%s %s rejected with status %s", method, redact_url(url), resp.status_code)
            return None
        return resp

    def __str__(self) -> str:
        return self.url

    def __repr__(self) -> str:
        return f"Reference({self.url!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        return (
            self._context is other._context
            and self._database_host == other._database_host
            and self._path == other._path
        )

    def __hash__(self) -> int:
        return hash((id(self._context), self._database_host, self._path))


def _encode(data: Any) -> str:
    if isinstance(data, str):
        return data
    return json.dumps(data)
