"""Tool-use loop that processes one service visit end to end.

Each iteration calls the model with the system prompt, the tool catalog and the
conversation so far. Tool calls in a response run concurrently through the
router and their results go back as one user turn. The loop ends on natural
completion, on any other stop reason, or at the iteration ceiling.
"""
from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ahp_ops.agent.model_client import ModelClient, OpenAIModelClient
from ahp_ops.agent.prompts import AGENT_SYSTEM_PROMPT
from ahp_ops.agent.tool_router import ToolRouter, tool_router
from ahp_ops.agent.tools import TOOL_DEFINITIONS
from ahp_ops.core.config import Settings, get_settings
from ahp_ops.core.errors import AgentRunError
from ahp_ops.core.logging import logger
from ahp_ops.models.agent import (
    ActionRecord,
    AgentRunResult,
    ConversationTurn,
    StopReason,
    ToolInvocation,
    ToolResult,
    TurnRole,
)


NO_SUMMARY_FALLBACK = "Agent completed (no summary text returned)"


def initial_message(form_data: Mapping[str, Any]) -> str:
    return "Process this service visit:\n\n" + json.dumps(form_data, indent=2, ensure_ascii=False, default=str)


class VisitAgent:
    """Runs the bounded model/tool loop; holds no per-run state between runs."""

    def __init__(
        self,
        model: Optional[ModelClient] = None,
        router: Optional[ToolRouter] = None,
        settings: Optional[Settings] = None,
        system_prompt: str = AGENT_SYSTEM_PROMPT,
        tools: Sequence[Dict[str, Any]] = TOOL_DEFINITIONS,
        max_iterations: Optional[int] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.model = model or OpenAIModelClient(self.settings)
        self.router = router or tool_router
        self.system_prompt = system_prompt
        self.tools = list(tools)
        self.max_iterations = max(1, int(max_iterations or self.settings.agent_max_iterations))

    async def run(self, form_data: Mapping[str, Any]) -> AgentRunResult:
        started = time.time()
        conversation: List[ConversationTurn] = [
            ConversationTurn(role=TurnRole.USER, text=initial_message(form_data))
        ]
        actions: List[ActionRecord] = []
        summary = ""
        iteration = 0
        finished = False

        while iteration < self.max_iterations:
            iteration += 1
            try:
                response = await self.model.invoke(self.system_prompt, self.tools, conversation)
            except Exception as exc:
                logger.error("Model call failed", iteration=iteration, error=str(exc))
                raise AgentRunError(f"Model call failed: {exc}") from exc

            conversation.append(
                ConversationTurn(
                    role=TurnRole.ASSISTANT,
                    text=response.text or None,
                    tool_calls=response.tool_calls,
                )
            )
            if response.text:
                summary = response.text

            if response.stop_reason == StopReason.COMPLETED:
                finished = True
                break

            if response.stop_reason == StopReason.TOOL_CALLS_REQUESTED and response.tool_calls:
                results = await self._execute_batch(response.tool_calls, actions)
                conversation.append(ConversationTurn(role=TurnRole.USER, tool_results=results))
                continue

            logger.warning(
                "Unexpected stop reason, ending run with current summary",
                stop_reason=response.raw_stop_reason or response.stop_reason.value,
                iteration=iteration,
            )
            finished = True
            break

        if not finished:
            logger.warning(
                "Hit max iterations, agent may not have completed all steps",
                max_iterations=self.max_iterations,
                tool_calls=len(actions),
            )

        logger.info(
            "Agent run finished",
            iterations=iteration,
            tool_calls=len(actions),
            failed_calls=sum(1 for action in actions if action.error is not None),
            elapsed_ms=int((time.time() - started) * 1000),
        )
        return AgentRunResult(
            summary=summary or NO_SUMMARY_FALLBACK,
            actions_taken=actions,
            iteration_count=iteration,
            hit_iteration_limit=not finished,
        )

    async def _execute_batch(
        self,
        calls: Sequence[ToolInvocation],
        actions: List[ActionRecord],
    ) -> List[ToolResult]:
        """Run every call of one response; one failure never skips the others."""
        outcomes = await asyncio.gather(
            *(self.router.execute(call.tool_name, call.arguments) for call in calls),
            return_exceptions=True,
        )

        results: List[ToolResult] = []
        for call, outcome in zip(calls, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                outcome = {"error": str(outcome) or outcome.__class__.__name__}
            result = ToolResult.from_router(call.call_id, outcome)
            logger.info("Tool executed", tool=call.tool_name, ok=result.error is None)
            actions.append(
                ActionRecord(
                    tool=call.tool_name,
                    input=dict(call.arguments),
                    result=result.payload,
                    error=result.error,
                )
            )
            results.append(result)
        return results


visit_agent = VisitAgent()


async def process_event(payload: Mapping[str, Any]) -> AgentRunResult:
    """Entry point for one visit; raises AgentRunError only when the model call fails."""
    return await visit_agent.run(payload)
