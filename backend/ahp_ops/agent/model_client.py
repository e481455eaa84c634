"""Model call used by the agent loop, backed by an OpenAI-compatible endpoint."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Protocol, Sequence

from openai import AsyncOpenAI

from ahp_ops.core.config import Settings, get_settings
from ahp_ops.models.agent import (
    ConversationTurn,
    ModelResponse,
    StopReason,
    ToolInvocation,
    TurnRole,
)


class ModelClient(Protocol):
    async def invoke(
        self,
        system_prompt: str,
        tools: Sequence[Dict[str, Any]],
        conversation: Sequence[ConversationTurn],
    ) -> ModelResponse:
        ...


def to_chat_messages(system_prompt: str, conversation: Sequence[ConversationTurn]) -> List[Dict[str, Any]]:
    """Flatten conversation turns into chat-completions messages."""
    messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    for turn in conversation:
        if turn.role == TurnRole.ASSISTANT:
            message: Dict[str, Any] = {"role": "assistant", "content": turn.text or None}
            if turn.tool_calls:
                message["tool_calls"] = [
                    {
                        "id": call.call_id,
                        "type": "function",
                        "function": {"name": call.tool_name, "arguments": json.dumps(call.arguments)},
                    }
                    for call in turn.tool_calls
                ]
            messages.append(message)
            continue

        if turn.tool_results:
            for result in turn.tool_results:
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": result.call_id,
                        "content": json.dumps(result.as_content(), ensure_ascii=False, default=str),
                    }
                )
        else:
            messages.append({"role": "user", "content": turn.text or ""})
    return messages


def _parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    try:
        parsed = json.loads(raw or "{}")
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def parse_completion(completion: Any) -> ModelResponse:
    choice = completion.choices[0]
    message = choice.message
    finish_reason = getattr(choice, "finish_reason", None)

    tool_calls = [
        ToolInvocation(
            call_id=str(call.id),
            tool_name=str(call.function.name or ""),
            arguments=_parse_arguments(call.function.arguments),
        )
        for call in (message.tool_calls or [])
    ]
    text = str(message.content or "").strip()

    # A truncated response ("length", "content_filter") never runs its tool calls.
    if finish_reason not in ("tool_calls", "stop"):
        stop_reason = StopReason.OTHER
    elif tool_calls:
        stop_reason = StopReason.TOOL_CALLS_REQUESTED
    else:
        stop_reason = StopReason.COMPLETED

    return ModelResponse(
        text_blocks=[text] if text else [],
        tool_calls=tool_calls,
        stop_reason=stop_reason,
        raw_stop_reason=finish_reason,
    )


class OpenAIModelClient:
    """Chat-completions client; created lazily so a missing key only fails a run."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None) -> None:
        self.settings = settings or get_settings()
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.llm_api_key,
                base_url=self.settings.llm_base_url or None,
                timeout=float(self.settings.llm_timeout_seconds),
            )
        return self._client

    async def invoke(
        self,
        system_prompt: str,
        tools: Sequence[Dict[str, Any]],
        conversation: Sequence[ConversationTurn],
    ) -> ModelResponse:
        completion = await self._get_client().chat.completions.create(
            model=self.settings.llm_model,
            messages=to_chat_messages(system_prompt, conversation),
            tools=list(tools),
            tool_choice="auto",
            temperature=self.settings.llm_temperature,
            max_tokens=self.settings.llm_max_tokens,
        )
        return parse_completion(completion)
