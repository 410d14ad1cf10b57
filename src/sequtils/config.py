"""
Environment-driven settings.

Environment variables:
    SEQUTILS_MAX_WORKERS: default worker count for parallel dispatch
        (default: min(32, cpu_count + 4), same as ThreadPoolExecutor)
    SEQUTILS_METRICS_ENABLED: record Prometheus metrics (default: true)
    SEQUTILS_TRACING_ENABLED: open a span per dispatch (default: true)
"""

import logging
import os
from dataclasses import dataclass

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes")
_FALSY = ("false", "0", "no")

_settings: "Settings | None" = None


def default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class Settings:
    max_workers: int
    metrics_enabled: bool = True
    tracing_enabled: bool = True


def env_bool(name: str, default: bool) -> bool:
    """Read a true/1/yes or false/0/no flag; unset or empty gives ``default``."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_workers(name: str) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default_max_workers()
    try:
        workers = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if workers < 1:
        raise ConfigurationError(f"{name} must be >= 1, got {workers}")
    return workers


def load_settings() -> Settings:
    """Read settings from the environment, without caching."""
    return Settings(
        max_workers=_parse_workers("SEQUTILS_MAX_WORKERS"),
        metrics_enabled=env_bool("SEQUTILS_METRICS_ENABLED", True),
        tracing_enabled=env_bool("SEQUTILS_TRACING_ENABLED", True),
    )


def get_settings() -> Settings:
    """Return the cached settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
        logger.debug(f"Loaded settings: {_settings}")
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next ``get_settings`` re-reads the env."""
    global _settings
    _settings = None
