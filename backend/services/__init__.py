"""
Parley Services - clients for external collaborators.

- tool_registry: JSON-RPC tool server sessions, one per caller
- conversation_store: REST client + post-turn persistence gateway
"""

from .tool_registry import ToolRegistryClient, ToolSessionManager
from .conversation_store import ConversationGateway, ConversationStoreClient

__all__ = ["ToolRegistryClient", "ToolSessionManager", "ConversationGateway", "ConversationStoreClient"]
