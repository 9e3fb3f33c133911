"""
Gemini Provider - wraps Google's Generative AI SDK.

Tool requests arrive as ``function_call`` parts on the first candidate;
results go back as a ``function_response`` part with ``{"result": ...}``.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from errors import ProviderError
from providers import formats
from providers.base import (
    DirectAnswer,
    ExecutedCalls,
    ProviderAdapter,
    ProviderTurnOutcome,
    ToolCall,
    ToolRequested,
    decode_arguments,
    response_to_dict,
)

logger = logging.getLogger(__name__)


def _default_model_factory(api_key: str, model: str, tools: Optional[List[Dict[str, Any]]]):
    try:
        import google.generativeai as genai
    except ImportError as e:
        raise ProviderError(
            "google-generativeai package not installed",
            details="Install with: pip install google-generativeai",
            provider="gemini",
            error_type="dependency",
        ) from e

    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model, tools=tools)


class GeminiAdapter(ProviderAdapter):
    """Provider that calls Google Gemini."""

    provider_id = "gemini"

    def __init__(self, api_key: str = "", model: str = "", model_factory: Optional[Callable] = None):
        """
        Args:
            api_key: Google API key
            model: Gemini model name
            model_factory: (api_key, model, tools) -> object with async
                generate_content_async(contents); defaults to the SDK
        """
        super().__init__(api_key, model or "gemini-2.0-flash")
        self._model_factory = model_factory or _default_model_factory

    @property
    def provider_name(self) -> str:
        return "Gemini"

    def adapt_tools(self, tools) -> Optional[List[Dict[str, Any]]]:
        declarations = formats.tools_to_gemini(tools)
        if not declarations:
            return None
        return [{"function_declarations": declarations}]

    def adapt_messages(self, messages) -> List[Dict[str, Any]]:
        return formats.messages_to_gemini(messages)

    async def send_turn(self, messages, tools) -> Dict[str, Any]:
        client = self._model_factory(self._api_key, self.model, tools)
        try:
            response = await client.generate_content_async(messages)
            return response_to_dict(response)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(
                f"Gemini request failed: {e}", provider=self.provider_id, model=self.model
            ) from e

    def parse_response(self, raw: Dict[str, Any]) -> ProviderTurnOutcome:
        parts = self._parts(raw)
        calls = []
        texts = []
        for part in parts:
            function_call = part.get("function_call") or part.get("functionCall")
            if function_call:
                arguments, error = decode_arguments(function_call.get("args"))
                calls.append(ToolCall(
                    name=function_call.get("name", ""),
                    arguments=arguments,
                    call_id=function_call.get("id") or None,
                    error=error,
                ))
            elif part.get("text"):
                texts.append(part["text"])

        text = "".join(texts)
        if calls:
            return ToolRequested(calls=tuple(calls), text=text)
        return DirectAnswer(text=text)

    def build_follow_up(self, messages, raw, executed: ExecutedCalls) -> List[Dict[str, Any]]:
        model_turn = {"role": "model", "parts": self._parts(raw)}
        responses = {
            "role": "user",
            "parts": [
                {"function_response": {"name": call.name, "response": {"result": result}}}
                for call, result in executed
            ],
        }
        return [*messages, model_turn, responses]

    def _parts(self, raw: Dict[str, Any]) -> Sequence[Dict[str, Any]]:
        candidates = raw.get("candidates")
        if candidates is None:
            raise ProviderError(
                "Invalid response structure from Gemini",
                details="no candidates in response",
                provider=self.provider_id,
                error_type="invalid",
            )
        if not candidates:
            return []
        content = candidates[0].get("content") or {}
        return content.get("parts") or []
