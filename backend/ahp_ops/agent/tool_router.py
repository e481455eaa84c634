"""Routes model tool calls to the Sheets, Gmail and Drive clients.

Every call yields a dict: the adapter payload on success or ``{"error": ...}``
on failure. Nothing raised by an adapter escapes ``execute``.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ahp_ops.agent import tools
from ahp_ops.core.logging import logger
from ahp_ops.services.gmail import GmailClient, gmail_client
from ahp_ops.services.google_drive import DriveClient, drive_client
from ahp_ops.services.google_sheets import RowStore, row_store


def _require(args: Mapping[str, Any], key: str) -> Any:
    value = args.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required argument: {key}")
    return value


def _cell_values(args: Mapping[str, Any]) -> Dict[str, Any]:
    values = _require(args, "values")
    if not isinstance(values, dict):
        raise ValueError("values must be an object of column header -> cell value")
    return values


class ToolRouter:
    """Maps a tool name and its arguments onto exactly one adapter call."""

    def __init__(
        self,
        rows: Optional[RowStore] = None,
        mail: Optional[GmailClient] = None,
        docs: Optional[DriveClient] = None,
    ) -> None:
        self.rows = rows or row_store
        self.mail = mail or gmail_client
        self.docs = docs or drive_client

    async def execute(self, name: str, args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        args = args or {}
        try:
            return await self._dispatch(name, args)
        except Exception as exc:
            logger.warning("Tool call failed", tool=name, error=str(exc))
            return {"error": str(exc) or exc.__class__.__name__}

    async def _dispatch(self, name: str, args: Mapping[str, Any]) -> Dict[str, Any]:
        if name == tools.SHEETS_READ_ROWS:
            limit = args.get("limit")
            page = await self.rows.read_rows(
                str(_require(args, "sheet_name")),
                filter_column=args.get("filter_column"),
                filter_value=args.get("filter_value"),
                limit=int(limit) if limit is not None else None,
                sort_by=args.get("sort_by"),
                sort_order=args.get("sort_order") or "desc",
            )
            return page.model_dump()
        if name == tools.SHEETS_APPEND_ROW:
            result = await self.rows.append_row(str(_require(args, "sheet_name")), _cell_values(args))
            return result.model_dump()
        if name == tools.SHEETS_UPDATE_ROW:
            result = await self.rows.update_row(
                str(_require(args, "sheet_name")),
                int(_require(args, "row_number")),
                _cell_values(args),
            )
            return result.model_dump()
        if name == tools.GMAIL_SEND:
            return await self.mail.send_email(
                str(_require(args, "to")),
                str(_require(args, "subject")),
                str(args.get("body") or ""),
                from_name=args.get("from_name"),
            )
        if name == tools.DRIVE_CREATE_DOC:
            return await self.docs.create_doc(
                str(_require(args, "folder_id")),
                str(_require(args, "title")),
                str(args.get("content") or ""),
            )
        return {"error": f"Unknown tool: {name}"}


tool_router = ToolRouter()
