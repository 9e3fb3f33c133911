"""LLM Providers - factory for provider adapter instances."""

from typing import Optional

from config import PROVIDER_IDS, RuntimeConfig, runtime_config
from providers.base import (
    DirectAnswer,
    ProviderAdapter,
    ProviderTurnOutcome,
    ToolCall,
    ToolRequested,
)


def get_provider(provider_id: str, config: Optional[RuntimeConfig] = None) -> ProviderAdapter:
    """Create a provider adapter from runtime config.

    Args:
        provider_id: "gemini" | "claude" | "chatgpt"
        config: RuntimeConfig (defaults to the singleton)
    """
    config = config or runtime_config
    api_key = config.credential_for(provider_id) or ""

    if provider_id == "gemini":
        from providers.gemini import GeminiAdapter
        return GeminiAdapter(api_key=api_key, model=config.gemini_model)
    elif provider_id == "claude":
        from providers.anthropic import ClaudeAdapter
        return ClaudeAdapter(
            api_key=api_key,
            model=config.claude_model,
            max_tokens=config.claude_max_tokens,
        )
    elif provider_id == "chatgpt":
        from providers.openai_compat import OpenAIAdapter
        return OpenAIAdapter(
            api_key=api_key,
            model=config.openai_model,
            base_url=config.openai_base_url,
        )
    else:
        raise ValueError(f"Unknown provider id: {provider_id} (expected one of {', '.join(PROVIDER_IDS)})")


__all__ = [
    "DirectAnswer",
    "ProviderAdapter",
    "ProviderTurnOutcome",
    "ToolCall",
    "ToolRequested",
    "get_provider",
]
