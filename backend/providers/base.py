"""
Provider Adapter - abstract interface every LLM provider implements.

The turn handler is written once against this interface. Each adapter
owns its provider's wire format in both directions:

- adapt_tools / adapt_messages: internal schema -> provider request shape
- send_turn: one request/response exchange, returning the raw response dict
- parse_response: raw response -> ProviderTurnOutcome
- build_follow_up: conversation + executed tool results -> follow-up request

ProviderTurnOutcome is a tagged variant:
    DirectAnswer(text)            no tool requested
    ToolRequested(calls, text)    one or more ToolCall(name, arguments, call_id)
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from models import Message, ToolDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the provider.

    ``error`` is set when the provider's argument encoding could not be
    decoded; the handler reports it as a tool failure.
    """

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    call_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class DirectAnswer:
    text: str


@dataclass(frozen=True)
class ToolRequested:
    calls: Tuple[ToolCall, ...]
    text: str = ""


ProviderTurnOutcome = Union[DirectAnswer, ToolRequested]

# (call, result payload) pairs fed back to the provider
ExecutedCalls = Sequence[Tuple[ToolCall, Any]]


def decode_arguments(raw: Any) -> Tuple[Dict[str, Any], Optional[str]]:
    """Decode provider tool arguments (dict or JSON string).

    Returns:
        (arguments, error) - error is a message when the string is not a JSON object
    """
    if raw is None or raw == "":
        return {}, None
    if isinstance(raw, dict):
        return raw, None
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse tool call arguments: {raw!r}")
            return {}, f"Invalid tool arguments: {e.msg}"
        if isinstance(parsed, dict):
            return parsed, None
    return {}, f"Invalid tool arguments: expected an object, got {type(raw).__name__}"


def result_to_text(result: Any) -> str:
    """Serialize a tool result payload for providers that take text."""
    return json.dumps(result, default=str)


def response_to_dict(response: Any) -> Dict[str, Any]:
    """SDK response object -> plain dict (pydantic models and proto wrappers)."""
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump()
    if hasattr(response, "to_dict"):
        return response.to_dict()
    raise TypeError(f"Unsupported response type: {type(response).__name__}")


class ProviderAdapter(ABC):
    """Abstract LLM provider interface for chat turns."""

    #: Wire id used in ``selectedLLM`` ("gemini", "claude", "chatgpt")
    provider_id: str = ""

    def __init__(self, api_key: str, model: str):
        self._api_key = api_key
        self.model = model

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable name (e.g. 'Gemini', 'Claude')."""
        ...

    @abstractmethod
    def adapt_tools(self, tools: Sequence[ToolDescriptor]) -> Optional[List[Dict[str, Any]]]:
        """Provider tool declarations, or None when there are no tools."""
        ...

    @abstractmethod
    def adapt_messages(self, messages: Sequence[Message]) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def send_turn(
        self, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]]
    ) -> Dict[str, Any]:
        """Send one request and return the raw response as a dict.

        Raises:
            ProviderError: transport or API failure
        """
        ...

    @abstractmethod
    def parse_response(self, raw: Dict[str, Any]) -> ProviderTurnOutcome:
        """Classify a raw response as a direct answer or a tool request.

        Raises:
            ProviderError: the response does not have the provider's shape
        """
        ...

    @abstractmethod
    def build_follow_up(
        self,
        messages: List[Dict[str, Any]],
        raw: Dict[str, Any],
        executed: ExecutedCalls,
    ) -> List[Dict[str, Any]]:
        """Conversation for the follow-up request carrying the tool results."""
        ...

    def has_credentials(self) -> bool:
        return bool(self._api_key)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} model={self.model!r}>"
