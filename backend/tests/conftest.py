"""Shared fakes: an in-memory spreadsheet and a scripted model."""
from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from ahp_ops.core.config import Settings  # noqa: E402
from ahp_ops.core.errors import GoogleAPIError  # noqa: E402
from ahp_ops.models.agent import ConversationTurn, ModelResponse, StopReason, ToolInvocation  # noqa: E402
from ahp_ops.services.google_sheets import HeaderCache, RowStore, column_letter  # noqa: E402


CELL = re.compile(r"([A-Z]+)(\d+)")


def _column_index(letters: str) -> int:
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - 64)
    return index - 1


class InMemorySheetsClient:
    """Stands in for SheetsClient; one grid (header row first) per tab name."""

    def __init__(self, sheets: Dict[str, List[List[str]]]) -> None:
        self.sheets = {name: [list(row) for row in rows] for name, rows in sheets.items()}
        self.calls: List[tuple] = []

    def _grid(self, a1_range: str) -> tuple:
        sheet, _, cells = a1_range.partition("!")
        if sheet not in self.sheets:
            raise GoogleAPIError(f"Unable to parse range: {a1_range}")
        return self.sheets[sheet], sheet, cells

    async def get_values(self, spreadsheet_id: str, a1_range: str) -> List[List[str]]:
        self.calls.append(("get", spreadsheet_id, a1_range))
        grid, _, cells = self._grid(a1_range)
        if cells == "1:1":
            return [list(grid[0])] if grid else []
        return [list(row) for row in grid[1:]]

    async def append_values(self, spreadsheet_id: str, a1_range: str, rows: List[List[str]]) -> str:
        self.calls.append(("append", spreadsheet_id, a1_range))
        grid, sheet, _ = self._grid(a1_range)
        for row in rows:
            grid.append(list(row))
        last = len(grid)
        width = max(1, len(rows[-1]))
        return f"{sheet}!A{last}:{column_letter(width - 1)}{last}"

    async def update_values(self, spreadsheet_id: str, a1_range: str, rows: List[List[str]]) -> None:
        self.calls.append(("update", spreadsheet_id, a1_range))
        grid, _, cells = self._grid(a1_range)
        match = CELL.fullmatch(cells)
        col, row_number = _column_index(match.group(1)), int(match.group(2))
        while len(grid) < row_number:
            grid.append([])
        row = grid[row_number - 1]
        while len(row) <= col:
            row.append("")
        row[col] = rows[0][0]

    def header_reads(self, sheet: str) -> int:
        return sum(1 for kind, _, rng in self.calls if kind == "get" and rng == f"{sheet}!1:1")


Scripted = Union[ModelResponse, Callable[[Sequence[ConversationTurn]], ModelResponse], Exception]


class ScriptedModelClient:
    """Replays canned responses; snapshots the conversation it was shown each call."""

    def __init__(self, script: Sequence[Scripted], default: Optional[Scripted] = None) -> None:
        self.script = list(script)
        self.default = default
        self.seen: List[List[ConversationTurn]] = []
        self.system_prompts: List[str] = []

    async def invoke(self, system_prompt: str, tools: Sequence[Dict[str, Any]], conversation: Sequence[ConversationTurn]) -> ModelResponse:
        self.seen.append(list(conversation))
        self.system_prompts.append(system_prompt)
        step = self.script.pop(0) if self.script else self.default
        if step is None:
            raise AssertionError("model called more times than scripted")
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(conversation)
        return step


def tool_call(call_id: str, name: str, **arguments: Any) -> ToolInvocation:
    return ToolInvocation(call_id=call_id, tool_name=name, arguments=arguments)


def tool_response(*calls: ToolInvocation, text: str = "") -> ModelResponse:
    return ModelResponse(
        text_blocks=[text] if text else [],
        tool_calls=list(calls),
        stop_reason=StopReason.TOOL_CALLS_REQUESTED,
        raw_stop_reason="tool_calls",
    )


def final_response(text: str) -> ModelResponse:
    return ModelResponse(text_blocks=[text] if text else [], stop_reason=StopReason.COMPLETED, raw_stop_reason="stop")


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []

    async def send_email(self, to: str, subject: str, body: str, from_name: Optional[str] = None) -> Dict[str, Any]:
        self.sent.append({"to": to, "subject": subject, "body": body, "from_name": from_name})
        return {"success": True, "message_id": f"msg-{len(self.sent)}", "to": to}


class RecordingDocs:
    def __init__(self) -> None:
        self.created: List[Dict[str, Any]] = []

    async def create_doc(self, folder_id: str, title: str, content: str) -> Dict[str, Any]:
        self.created.append({"folder_id": folder_id, "title": title, "content": content})
        doc_id = f"doc-{len(self.created)}"
        return {"success": True, "doc_id": doc_id, "doc_url": f"https://docs.google.com/document/d/{doc_id}/edit"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        spreadsheet_id="main-sheet",
        procurement_spreadsheet_id="procurement-sheet",
        google_workspace_user="service@example.com",
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_refresh_token="refresh-token",
        llm_api_key="test-key",
        agent_max_iterations=30,
    )


@pytest.fixture
def sheets() -> InMemorySheetsClient:
    return InMemorySheetsClient(
        {
            "Client_Master_Data": [
                ["Account_Name", "Contact_Email", "Fee_Per_Visit", "Last_Service_Date", "Last_Health_Score"],
                ["Acme Corp", "ops@acme.test", "150", "2026-09-01", "Good"],
                ["Globex", "hello@globex.test", "95", "2026-09-10", "Excellent"],
            ],
            "Service_Log": [
                ["Date", "Client", "Account_Plant_Health", "Notes", "Email_Sent"],
                ["2026-08-04", "Acme Corp", "Good", "Watered", "Yes"],
                ["2026-09-01", "acme corp", "Fair", "Pruned", "No"],
                ["2026-08-20", "Globex", "Excellent", "All good", "Yes"],
                ["2026-07-15", "ACME CORP", "Good", "Pest check", "No"],
            ],
            "Tasks": [
                ["Task_ID", "Created_Date", "Title", "Priority", "Client", "Status"],
            ],
            "PROCUREMENT_MASTER": [
                ["ID", "Status", "Client", "Plant", "Quantity"],
            ],
        }
    )


@pytest.fixture
def row_store(settings: Settings, sheets: InMemorySheetsClient) -> RowStore:
    return RowStore(client=sheets, settings=settings, header_cache=HeaderCache())


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def docs() -> RecordingDocs:
    return RecordingDocs()
