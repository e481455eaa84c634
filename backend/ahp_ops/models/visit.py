"""Request/response models for the service-visit endpoint."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ahp_ops.models.agent import ActionRecord


REQUIRED_TEXT_FIELDS = (
    "Select Client Account",
    "Service Date",
    "Overall Account Plant Health",
    "Is This Account Up To AHP Standards?",
    "Service Notes & Details",
    "Completed by",
)

REQUIRED_LIST_FIELDS = (
    "Services Performed Today",
    "Any Issues or Concerns?",
)


def validate_visit_payload(body: Any) -> Optional[str]:
    """Return the first validation error for a visit request body, or None."""
    if not isinstance(body, dict):
        return "Request body must be a JSON object"

    form_data = body.get("form_data")
    if not isinstance(form_data, dict):
        return "form_data is required and must be an object"

    for field in REQUIRED_TEXT_FIELDS:
        value = form_data.get(field)
        if field == "Service Date":
            if not value:
                return f'form_data["{field}"] is required'
            continue
        if not isinstance(value, str) or not value.strip():
            return f'form_data["{field}"] is required'

    for field in REQUIRED_LIST_FIELDS:
        value = form_data.get(field)
        if not isinstance(value, list) or not value:
            return f'form_data["{field}"] must be a non-empty array'

    return None


class VisitMeta(BaseModel):
    iterations: int
    elapsed_ms: int
    client: str


class VisitResponse(BaseModel):
    """Successful run of the operations agent for one visit."""

    success: bool = True
    summary: str
    actions_taken: List[ActionRecord] = Field(default_factory=list)
    meta: VisitMeta


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
