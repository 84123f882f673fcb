"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from firerest.core.firebase import DATABASE_HOST, IDENTITY_URL, TOKEN_URL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

DEMO_PROJECT_ID = "demo-project"
DEMO_API_KEY = "demo-api-key"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.info("Loaded %s from environment", env_var)
            return secret_value

    return None


@dataclass
class FirebaseConfig:
    """Client configuration container."""
    project_id: str
    api_key: str
    database_host: str = DATABASE_HOST
    identity_url: str = IDENTITY_URL
    token_url: str = TOKEN_URL
    request_timeout: float = REQUEST_TIMEOUT
    demo_mode: bool = False

    @property
    def database_url(self) -> str:
        return f"https://{self.project_id}.{self.database_host}/"


def _get_or_default(var_name: str, demo_default: Optional[str] = None, demo_mode: bool = False) -> str:
    """Get environment variable or fall back to the demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        logger.info("[demo-mode] Using default for %s", var_name)
        return demo_default

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return REQUEST_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise RuntimeError(f"FIREBASE_REQUEST_TIMEOUT must be a number, got {raw!r}") from None
    if timeout <= 0:
        raise RuntimeError("FIREBASE_REQUEST_TIMEOUT must be positive")
    return timeout


def load_settings() -> FirebaseConfig:
    """Load client settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    project_id = _get_or_default("FIREBASE_PROJECT_ID", demo_default=DEMO_PROJECT_ID, demo_mode=demo_mode)

    # API key: /run/secrets > environment > demo default
    api_key = _load_secret_from_file("firebase_api_key", "FIREBASE_API_KEY")
    if not api_key:
        if demo_mode:
            api_key = DEMO_API_KEY
            logger.info("[demo-mode] Using default for FIREBASE_API_KEY")
        else:
            raise RuntimeError("FIREBASE_API_KEY not found in /run/secrets or environment")

    return FirebaseConfig(
        project_id=project_id,
        api_key=api_key,
        database_host=os.environ.get("FIREBASE_DATABASE_HOST") or DATABASE_HOST,
        identity_url=os.environ.get("FIREBASE_IDENTITY_URL") or IDENTITY_URL,
        token_url=os.environ.get("FIREBASE_TOKEN_URL") or TOKEN_URL,
        request_timeout=_parse_timeout(os.environ.get("FIREBASE_REQUEST_TIMEOUT")),
        demo_mode=demo_mode,
    )
