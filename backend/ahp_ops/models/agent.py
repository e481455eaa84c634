"""Models for one agent run: conversation turns, tool calls and the action ledger."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TurnRole(str, Enum):
    """Who produced a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class StopReason(str, Enum):
    """Why the model stopped producing output."""

    COMPLETED = "completed"
    TOOL_CALLS_REQUESTED = "tool_calls_requested"
    OTHER = "other"


class ToolInvocation(BaseModel):
    """One tool call proposed by the model."""

    model_config = ConfigDict(frozen=True)

    call_id: str
    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Outcome of one tool call, paired with its invocation by call_id."""

    call_id: str
    payload: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def from_router(cls, call_id: str, result: Dict[str, Any]) -> "ToolResult":
        if "error" in result:
            return cls(call_id=call_id, error=str(result["error"]))
        return cls(call_id=call_id, payload=result)

    def as_content(self) -> Dict[str, Any]:
        """Body handed back to the model."""
        if self.error is not None:
            return {"error": self.error}
        return self.payload or {}


class ConversationTurn(BaseModel):
    """A user or assistant turn; text, tool calls, or tool results."""

    role: TurnRole
    text: Optional[str] = None
    tool_calls: List[ToolInvocation] = Field(default_factory=list)
    tool_results: List[ToolResult] = Field(default_factory=list)


class ModelResponse(BaseModel):
    """Normalized response of one model call."""

    text_blocks: List[str] = Field(default_factory=list)
    tool_calls: List[ToolInvocation] = Field(default_factory=list)
    stop_reason: StopReason = StopReason.OTHER
    raw_stop_reason: Optional[str] = None

    @property
    def text(self) -> str:
        return "\n".join(block for block in self.text_blocks if block)


class ActionRecord(BaseModel):
    """Ledger entry for one tool call; carries either result or error."""

    tool: str
    input: Dict[str, Any] = Field(default_factory=dict)
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class AgentRunResult(BaseModel):
    """What a finished run hands back to the entry handler."""

    summary: str
    actions_taken: List[ActionRecord] = Field(default_factory=list)
    iteration_count: int = 0
    hit_iteration_limit: bool = False
