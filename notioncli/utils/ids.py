"""Helpers for Notion identifiers, URLs and file paths passed on the command line."""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import urlparse

_HEX_ID_RE = re.compile(r"([0-9a-fA-F]{32})")
_FULL_HEX_RE = re.compile(r"^[0-9a-fA-F]{32}$")


def normalize_id(raw_id: str) -> str:
    """Extract the compact 32-character Notion ID from an ID, UUID or URL.

    Args:
        raw_id: Raw ID, hyphenated UUID, or a Notion share URL.

    Returns:
        str: The ID without hyphens, case preserved.

    Raises:
        ValueError: If no valid ID can be found.
    """

    cleaned = raw_id.strip()
    match = _HEX_ID_RE.search(cleaned)
    if match:
        return match.group(1)
    compact = cleaned.replace("-", "")
    if not _FULL_HEX_RE.match(compact):
        raise ValueError(f"Invalid Notion ID format: {raw_id!r}")
    return compact


def format_id(raw_id: str) -> str:
    """Return the 8-4-4-4-12 UUID form, or the input when it is not 32 chars."""

    clean = raw_id.replace("-", "")
    if len(clean) != 32:
        return raw_id
    return f"{clean[0:8]}-{clean[8:12]}-{clean[12:16]}-{clean[16:20]}-{clean[20:32]}"


def validate_url(url: str, allowed_schemes: Iterable[str] = ("http", "https")) -> str:
    """Return ``url`` when it is absolute and uses an allowed scheme.

    Raises:
        ValueError: If the URL is malformed or uses another protocol.
    """

    parsed = urlparse(url.strip())
    if not parsed.scheme:
        raise ValueError(f"Invalid URL format: {url!r}")
    allowed = {scheme.lower().rstrip(":") for scheme in allowed_schemes}
    if parsed.scheme.lower() not in allowed:
        raise ValueError(
            f"Unsupported URL protocol '{parsed.scheme}:'; allowed: "
            + ", ".join(sorted(f"{scheme}:" for scheme in allowed))
        )
    if not parsed.netloc:
        raise ValueError(f"Invalid URL format: {url!r}")
    return url


def validate_file_path(path: str) -> str:
    """Reject paths that cannot name a file on disk."""

    if "\0" in path:
        raise ValueError("File path contains null bytes")
    return path


__all__ = ["format_id", "normalize_id", "validate_file_path", "validate_url"]
