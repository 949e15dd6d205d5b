"""Runtime configuration resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

API_KEY_ENV = "NOTION_API_KEY"
LEGACY_API_KEY_ENV = "NOTION_TOKEN"
DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_TIMEOUT_MS = 30_000


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class CliContext:
    """Settings shared by every command invocation."""

    api_key: str
    json_output: bool = False
    quiet: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    notion_version: str = DEFAULT_NOTION_VERSION


def load_env_file(path: Path) -> None:
    """Populate os.environ from a simple KEY=VALUE .env file.

    Existing environment variables always win over values from the file.
    """

    if not path.is_file():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip().removeprefix("export ").strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)


def create_cli_context(*, json_output: bool = False, quiet: bool = False) -> CliContext:
    """Build the command context from environment variables.

    Raises:
        ConfigError: If no API key is configured or the timeout is not a number.
    """

    api_key = os.getenv(API_KEY_ENV) or os.getenv(LEGACY_API_KEY_ENV)
    if not api_key:
        raise ConfigError(f"{API_KEY_ENV} environment variable not set")

    raw_timeout = os.getenv("NOTION_TIMEOUT_MS", "").strip()
    try:
        timeout_ms = int(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_MS
    except ValueError as exc:
        raise ConfigError(f"NOTION_TIMEOUT_MS must be an integer, got {raw_timeout!r}") from exc

    return CliContext(
        api_key=api_key,
        json_output=json_output,
        quiet=quiet,
        timeout_ms=timeout_ms,
        notion_version=os.getenv("NOTION_VERSION", DEFAULT_NOTION_VERSION),
    )


__all__ = [
    "API_KEY_ENV",
    "CliContext",
    "ConfigError",
    "DEFAULT_NOTION_VERSION",
    "DEFAULT_TIMEOUT_MS",
    "create_cli_context",
    "load_env_file",
]
