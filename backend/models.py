"""
Shared data model for chat turns.

Wire names are camelCase (``toolName``, ``conversationId``) to match the
browser client and the conversation store; Python attributes are snake_case.
"""

import json
from typing import Any, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Message(_WireModel):
    """One chat message. Content is usually text but may be structured."""

    role: Role
    content: Any = ""

    def text(self) -> str:
        """Content as text; structured payloads are JSON-serialized."""
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content)


class ToolDescriptor(_WireModel):
    """A tool advertised by the tool server's ``tools/list``."""

    name: str
    description: str = ""
    input_schema: Optional[dict] = Field(default=None, alias="inputSchema")


class ToolResult(_WireModel):
    """Outcome of one successful tool invocation within a turn."""

    tool_name: str = Field(alias="toolName")
    tool_args: Any = Field(default=None, alias="toolArgs")
    result: Any = None


class TurnRequest(_WireModel):
    """One inbound chat turn. Frozen for the duration of processing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    messages: Tuple[Message, ...] = ()
    provider_id: Optional[str] = None
    conversation_id: Optional[str] = None
    caller_id: Optional[str] = None

    @property
    def last_message(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None


class TurnResult(_WireModel):
    """What a turn produced: new assistant messages plus tool results."""

    messages: List[Message] = Field(default_factory=list)
    tool_results: List[ToolResult] = Field(default_factory=list, alias="toolResults")
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
