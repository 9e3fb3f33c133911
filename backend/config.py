"""
Runtime Configuration for Parley.

Provides a singleton RuntimeConfig class holding provider credentials,
model names and collaborator URLs. Values default from environment
variables; /health reports them with credentials masked.

Usage:
    from config import runtime_config
    key = runtime_config.credential_for("claude")
"""

import os
import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional, List

logger = logging.getLogger(__name__)

# Provider ids accepted on the wire (``selectedLLM``)
PROVIDER_IDS = ("gemini", "claude", "chatgpt")


def _first_env(*keys: str, default: str) -> str:
    """Return the first non-empty environment value from keys, else default."""
    for key in keys:
        value = os.environ.get(key, "").strip()
        if value:
            return value
    return default


def _split_env(key: str, default: str) -> List[str]:
    raw = os.environ.get(key, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class RuntimeConfig:
    """Process-wide configuration. All values default from environment variables."""

    # Provider used when a request names none (or an unknown one)
    default_provider: str = field(default_factory=lambda: _first_env("DEFAULT_LLM", default="gemini"))

    # Credentials (env-only, masked in to_dict)
    gemini_api_key: str = field(
        default_factory=lambda: _first_env("GOOGLE_API_KEY", "GEMINI_API_KEY", default="")
    )
    anthropic_api_key: str = field(default_factory=lambda: _first_env("ANTHROPIC_API_KEY", default=""))
    openai_api_key: str = field(default_factory=lambda: _first_env("OPENAI_API_KEY", default=""))

    # Model names
    gemini_model: str = field(default_factory=lambda: _first_env("GEMINI_MODEL", default="gemini-2.0-flash"))
    claude_model: str = field(
        default_factory=lambda: _first_env("CLAUDE_MODEL", default="claude-3-5-sonnet-20241022")
    )
    openai_model: str = field(default_factory=lambda: _first_env("OPENAI_MODEL", default="gpt-4"))
    openai_base_url: str = field(default_factory=lambda: os.environ.get("OPENAI_BASE_URL", ""))

    # Anthropic requires an explicit output cap
    claude_max_tokens: int = field(default_factory=lambda: int(os.environ.get("CLAUDE_MAX_TOKENS", "4000")))

    # Collaborators
    backend_url: str = field(
        default_factory=lambda: _first_env("BACKEND_URL", default="http://localhost:3333").rstrip("/")
    )
    http_timeout: float = field(default_factory=lambda: float(os.environ.get("HTTP_TIMEOUT", "60")))
    default_caller_id: str = field(default_factory=lambda: _first_env("DEFAULT_USER_ID", default="default-user"))

    # Service
    cors_origins: List[str] = field(default_factory=lambda: _split_env("CORS_ORIGINS", "http://localhost:3000"))
    log_level: str = field(default_factory=lambda: _first_env("LOG_LEVEL", default="INFO").upper())

    _SECRET_FIELDS = ("gemini_api_key", "anthropic_api_key", "openai_api_key")

    def credential_for(self, provider_id: str) -> Optional[str]:
        """Return the API key configured for a provider id, or None."""
        key = {
            "gemini": self.gemini_api_key,
            "claude": self.anthropic_api_key,
            "chatgpt": self.openai_api_key,
        }.get(provider_id)
        return key or None

    def resolve_provider(self, provider_id: Optional[str]) -> str:
        """Map a requested provider id to a supported one, falling back to the default."""
        if provider_id in PROVIDER_IDS:
            return provider_id
        if provider_id:
            logger.info(f"Unknown provider {provider_id!r}, using default {self.default_provider!r}")
        return self.default_provider if self.default_provider in PROVIDER_IDS else "gemini"

    def to_dict(self) -> Dict[str, Any]:
        """Export current config as dict (excludes internal fields, masks credentials)."""
        result = {}
        for field_info in fields(self):
            if field_info.name.startswith("_"):
                continue
            value = getattr(self, field_info.name)
            if field_info.name in self._SECRET_FIELDS:
                value = "***" if value else ""
            result[field_info.name] = value
        return result


# Singleton instance
runtime_config = RuntimeConfig()

