"""Local input checks run before any request is sent."""
from __future__ import annotations
from typing import List, Optional

from .exceptions import InvalidPathError

# Characters the Realtime Database rejects in keys
FORBIDDEN_KEY_CHARS = frozenset(".$#[]")


def require_text(value: Optional[str], field: str) -> str:
    """Ensure a required string argument is present.

    Args:
        value: Argument to check
        field: Field name for error messages (e.g., "Email")

    Returns:
        The value, unchanged

    Raises:
        ValueError: If value is None, not a string, or blank
    """
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field} is required")
    return value


def split_path(path: Optional[str]) -> List[str]:
    """Split a slash-delimited database path into validated segments.

    Leading, trailing and repeated slashes are dropped, so ``"/a//b/"`` and
    ``"a/b"`` address the same node. ``None`` and ``""`` mean the root.

    Raises:
        InvalidPathError: If a segment contains a forbidden key character
    """
    if path is None:
        return []
    if not isinstance(path, str):
        raise InvalidPathError(f"Path must be a string, got {type(path).__name__}")
    segments = [segment for segment in path.split("/") if segment]
    for segment in segments:
        bad = FORBIDDEN_KEY_CHARS.intersection(segment)
        if bad:
            raise InvalidPathError(
                f"Invalid key '{segment}': keys cannot contain {''.join(sorted(bad))}"
            )
    return segments


def validate_child_name(name: Optional[str]) -> List[str]:
    """Validate the argument of ``Reference.child``.

    Unlike a full path, a child name must address at least one level.
    """
    segments = split_path(name)
    if not segments:
        raise InvalidPathError("Child name cannot be null or empty")
    return segments
