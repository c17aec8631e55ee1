"""LightRAG plugin configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

logger = logging.getLogger(__name__)

# Fallback único para todos os call sites (upload, hook, rotas)
DEFAULT_PROXY_URL = "http://localhost:8081"

DEFAULT_TIMEOUT = 300.0
DEFAULT_MAX_UPLOAD_MB = 50
DEFAULT_MODEL = "lightrag:latest"

# plugins.lightrag.LIGHTRAG_PROXY_URL no objeto de usuário do host
USER_PLUGIN_KEY = "lightrag"
PROXY_URL_KEY = "LIGHTRAG_PROXY_URL"


def _float_env(name: str, default: float) -> float:
    """Read a positive number from the environment, falling back to default."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return float(default)
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return float(default)
    if not 0 < value < float("inf"):
        logger.warning(f"Invalid {name}={raw!r} (must be > 0), using default {default}")
        return float(default)
    return value


@dataclass
class LightRAGConfig:
    """Deployment-level settings for the LightRAG integration."""

    # Deployment default target (None = use DEFAULT_PROXY_URL)
    proxy_url: str | None = None

    # Upper bound for a single forwarded request, in seconds
    timeout: float = DEFAULT_TIMEOUT

    # Uploads above this size are rejected before encoding
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_MB * 1024 * 1024

    # Model identifier sent with chat completion requests
    model: str = DEFAULT_MODEL

    @classmethod
    def from_env(cls) -> "LightRAGConfig":
        """Create config from environment variables."""
        return cls(
            proxy_url=os.getenv(PROXY_URL_KEY) or None,
            timeout=_float_env("LIGHTRAG_TIMEOUT", DEFAULT_TIMEOUT),
            max_upload_bytes=int(
                _float_env("LIGHTRAG_MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB) * 1024 * 1024
            ),
            model=os.getenv("LIGHTRAG_MODEL", DEFAULT_MODEL),
        )


@lru_cache
def get_lightrag_config() -> LightRAGConfig:
    """Get cached LightRAG configuration."""
    return LightRAGConfig.from_env()


def reload_lightrag_config() -> LightRAGConfig:
    """Drop the cached configuration and read the environment again."""
    get_lightrag_config.cache_clear()
    return get_lightrag_config()


@dataclass(frozen=True)
class ForwardingTarget:
    """Base URL of the remote LightRAG proxy for one call chain."""

    base_url: str

    def __post_init__(self):
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))

    def url_for(self, path: str) -> str:
        """Join a sub-path (e.g. /v1/documents) to the base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"


def _clean(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def resolve_target(
    user_plugins: dict[str, Any] | None,
    config: LightRAGConfig | None = None,
) -> ForwardingTarget:
    """Resolve the target URL for a call.

    Order: per-user plugin setting, deployment default, hardcoded fallback.

    Args:
        user_plugins: The user's ``plugins`` mapping (may be None)
        config: Deployment config (defaults to the cached env config)

    Returns:
        ForwardingTarget
    """
    config = config or get_lightrag_config()

    lightrag_settings = (user_plugins or {}).get(USER_PLUGIN_KEY) or {}
    user_url = None
    if isinstance(lightrag_settings, dict):
        user_url = _clean(lightrag_settings.get(PROXY_URL_KEY))

    if user_url:
        logger.debug(f"Using per-user LightRAG URL: {user_url}")
        return ForwardingTarget(user_url)

    return ForwardingTarget(_clean(config.proxy_url) or DEFAULT_PROXY_URL)
