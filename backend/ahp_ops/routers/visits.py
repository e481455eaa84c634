"""Webhook routes called by the service visit form."""
from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from ahp_ops.agent import visit_agent as agent_module
from ahp_ops.core.auth import require_api_key
from ahp_ops.core.config import get_settings
from ahp_ops.core.errors import AgentRunError, ApiError
from ahp_ops.core.logging import logger
from ahp_ops.models.visit import VisitMeta, VisitResponse, validate_visit_payload


router = APIRouter(prefix="/api", tags=["visits"])


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "version": get_settings().app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/process-visit", dependencies=[Depends(require_api_key)])
async def process_visit(request: Request):
    try:
        body = await request.json()
    except ValueError:
        body = None

    error = validate_visit_payload(body)
    if error:
        raise ApiError(status_code=400, error=error, code="INVALID_REQUEST")

    form_data = body["form_data"]
    client = str(form_data.get("Select Client Account") or "").strip()
    logger.info("Processing visit", client=client)
    started = time.time()

    try:
        result = await agent_module.process_event(form_data)
    except AgentRunError as exc:
        logger.error("Agent run failed", client=client, error=str(exc))
        raise ApiError(status_code=500, error=f"Agent error: {exc}", code="AGENT_ERROR")

    elapsed = int((time.time() - started) * 1000)
    logger.info(
        "Visit processed",
        client=client,
        elapsed_ms=elapsed,
        iterations=result.iteration_count,
        tool_calls=len(result.actions_taken),
    )
    response = VisitResponse(
        summary=result.summary,
        actions_taken=result.actions_taken,
        meta=VisitMeta(iterations=result.iteration_count, elapsed_ms=elapsed, client=client),
    )
    return response.model_dump(mode="json", exclude_none=True)
