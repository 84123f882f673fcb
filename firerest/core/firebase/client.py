"""Low-level HTTP client shared by the auth and database services.

Sends requests through a single ``requests.Session`` and hands the raw
response back; status interpretation belongs to the services.
"""
from __future__ import annotations
import logging
import re
from typing import Optional, Any
from urllib.parse import urlencode

import requests

REQUEST_TIMEOUT = 5

logger = logging.getLogger(__name__)

_SECRET_PARAMS = re.compile(r"([?&](?:key|auth)=)[^&]*")


def with_query(url: str, **params: Any) -> str:
    """Append query parameters to ``url``, skipping those whose value is None.

    An absent value never produces an empty ``name=`` pair, and no ``?`` is
    added when nothing remains.
    """
    present = {name: value for name, value in params.items() if value is not None}
    if not present:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(present)}"


def redact_url(url: str) -> str:
    """Mask API keys and auth tokens in a URL for logs and error records."""
    return _SECRET_PARAMS.sub(r"\1***", url)


class FirebaseHttpClient:
    """HTTP transport for the Firebase REST endpoints.

    Usage:
        http = FirebaseHttpClient()
        resp = http.get("https://demo.firebaseio.com/users.json")

    Responses are returned for every status code; only transport failures
    (``requests.RequestException``) propagate to the caller.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = REQUEST_TIMEOUT):
        """Initialize the transport.

        Args:
            session: Session to reuse (a new one is created by default)
            timeout: Per-request timeout in seconds
        """
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self.timeout = timeout

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Execute one request and return the response unchecked."""
        logger.debug("%s %s", method, redact_url(url))
        resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        logger.debug("%s %s -> %s", method, redact_url(url), resp.status_code)
        return resp

    def get(self, url: str, **kwargs) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, json: Optional[Any] = None, **kwargs) -> requests.Response:
        return self.request("POST", url, json=json, **kwargs)

    def put(self, url: str, data: Optional[str] = None, **kwargs) -> requests.Response:
        return self.request("PUT", url, data=data, **kwargs)

    def patch(self, url: str, data: Optional[str] = None, **kwargs) -> requests.Response:
        return self.request("PATCH", url, data=data, **kwargs)

    def delete(self, url: str, **kwargs) -> requests.Response:
        return self.request("DELETE", url, **kwargs)

    def close(self) -> None:
        self.session.close()
