"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass, replace

# Drive v3 accepts at most 1000 entries per files.list page.
MAX_PAGE_SIZE = 1000

DEFAULT_MAX_ATTEMPTS = 5
AGGRESSIVE_MAX_ATTEMPTS = 50

# Seconds a single HTTP request may block on connect or read.
DEFAULT_REQUEST_TIMEOUT = 60.0


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Every field has a default. Credentials live in files rather than in the
    environment, so a missing credential surfaces when the files are read,
    not here.
    """

    client_secret_file: str = "client_secret.json"
    token_file: str = "drive-untrash-token.json"
    max_connections: int = 10
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    workers: int = 16
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def with_overrides(self, **overrides: object) -> "AppConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)  # type: ignore[arg-type]


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Optional environment variables (with defaults):
        DU_CLIENT_SECRET_FILE: OAuth client secret JSON (default: client_secret.json).
        DU_TOKEN_FILE: Cached user token JSON (default: drive-untrash-token.json).
        DU_MAX_CONNECTIONS: Max remote calls in flight at once (default: 10).
        DU_MAX_ATTEMPTS: Attempt budget per remote call (default: 5).
        DU_WORKERS: Size of the shared worker pool (default: 16).
        DU_REQUEST_TIMEOUT: Per-request socket timeout in seconds (default: 60).

    Listings always request the Drive maximum page size; it is not configurable.

    Returns:
        Configured AppConfig instance.

    Raises:
        ValueError: If a numeric variable is not a positive number.
    """
    return AppConfig(
        client_secret_file=os.environ.get("DU_CLIENT_SECRET_FILE", "client_secret.json"),
        token_file=os.environ.get("DU_TOKEN_FILE", "drive-untrash-token.json"),
        max_connections=_positive_int("DU_MAX_CONNECTIONS", 10),
        max_attempts=_positive_int("DU_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
        workers=_positive_int("DU_WORKERS", 16),
        request_timeout=_positive_float("DU_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
    )


def _positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


def _positive_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = float(raw)
    if not value > 0:
        raise ValueError(f"{name} must be a positive number, got {raw!r}")
    return value
