"""
Configuration for OpenLibrary search.

All configuration is validated at construction time, not per-call.
Environment variables are read once via ``OLConfig.from_env()`` and
the resulting object is immutable.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://openlibrary.org"
_DEFAULT_SEARCH_PATH = "/search.json"
_DEFAULT_TIMEOUT = 10.0
_DEFAULT_CLI_LIMIT = 5
_DEFAULT_GUI_LIMIT = 10


@dataclass(frozen=True)
class OLConfig:
    """Validated, immutable configuration for OpenLibrary search.

    Args:
        base_url: OpenLibrary base URL (no trailing slash).
        search_path: Path of the search endpoint.
        timeout: Connect and response timeout for one exchange, in seconds.
        cli_limit: Number of results printed by the command-line caller.
        gui_limit: Number of results shown by the interactive caller.
        verify_ssl: TLS verification (True, False, or path to CA bundle).
    """

    base_url: str = _DEFAULT_BASE_URL
    search_path: str = _DEFAULT_SEARCH_PATH
    timeout: float = _DEFAULT_TIMEOUT
    cli_limit: int = _DEFAULT_CLI_LIMIT
    gui_limit: int = _DEFAULT_GUI_LIMIT
    verify_ssl: bool | str = True

    def __post_init__(self) -> None:
        errors: list[str] = []

        if not self.base_url:
            errors.append("base_url must be a non-empty string")
        if not self.search_path.startswith("/"):
            errors.append(f"search_path must start with '/', got {self.search_path!r}")
        if self.timeout <= 0:
            errors.append(f"timeout must be > 0, got {self.timeout}")
        if self.cli_limit < 1:
            errors.append(f"cli_limit must be >= 1, got {self.cli_limit}")
        if self.gui_limit < 1:
            errors.append(f"gui_limit must be >= 1, got {self.gui_limit}")

        if errors:
            raise ValueError("Invalid OpenLibrary configuration: " + "; ".join(errors))

    @property
    def search_url(self) -> str:
        return f"{self.base_url}{self.search_path}"

    @classmethod
    def from_env(cls, **overrides: object) -> OLConfig:
        """Build config from environment variables with optional overrides.

        Environment variables:
            OLSEARCH_BASE_URL     -- base URL (default https://openlibrary.org)
            OLSEARCH_SEARCH_PATH  -- search endpoint path (default /search.json)
            OLSEARCH_TIMEOUT      -- exchange timeout seconds (default 10)
            OLSEARCH_CLI_LIMIT    -- results printed by the CLI (default 5)
            OLSEARCH_GUI_LIMIT    -- results shown by the GUI (default 10)
            OLSEARCH_VERIFY_SSL   -- "true", "false", or path to CA bundle

        Explicit keyword arguments override environment variables.
        """

        def _env_float(key: str, default: float) -> float:
            raw = os.environ.get(key)
            if raw is None:
                return default
            try:
                return float(raw)
            except ValueError:
                raise ValueError(f"Environment variable {key}={raw!r} is not a valid number")

        def _env_int(key: str, default: int) -> int:
            raw = os.environ.get(key)
            if raw is None:
                return default
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"Environment variable {key}={raw!r} is not a valid integer")

        def _env_verify(key: str, default: bool | str) -> bool | str:
            raw = os.environ.get(key)
            if raw is None:
                return default
            low = raw.strip().lower()
            if low in ("true", "1", "yes"):
                return True
            if low in ("false", "0", "no"):
                return False
            return raw  # CA bundle path

        kwargs: dict[str, object] = {
            "base_url": os.environ.get("OLSEARCH_BASE_URL", _DEFAULT_BASE_URL),
            "search_path": os.environ.get("OLSEARCH_SEARCH_PATH", _DEFAULT_SEARCH_PATH),
            "timeout": _env_float("OLSEARCH_TIMEOUT", _DEFAULT_TIMEOUT),
            "cli_limit": _env_int("OLSEARCH_CLI_LIMIT", _DEFAULT_CLI_LIMIT),
            "gui_limit": _env_int("OLSEARCH_GUI_LIMIT", _DEFAULT_GUI_LIMIT),
            "verify_ssl": _env_verify("OLSEARCH_VERIFY_SSL", True),
        }
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        kwargs["base_url"] = str(kwargs["base_url"]).rstrip("/")

        config = cls(**kwargs)  # type: ignore[arg-type]
        logger.debug(
            "OpenLibrary config: url=%s timeout=%.1f cli_limit=%d gui_limit=%d",
            config.search_url,
            config.timeout,
            config.cli_limit,
            config.gui_limit,
        )
        return config
