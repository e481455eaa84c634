"""Function-tool catalog offered to the model on every call.

Names and parameter keys must match what the system prompt tells the model to
call; the router dispatches on the same names.
"""
from __future__ import annotations

from typing import Any, Dict, List


SHEETS_READ_ROWS = "sheets_read_rows"
SHEETS_APPEND_ROW = "sheets_append_row"
SHEETS_UPDATE_ROW = "sheets_update_row"
GMAIL_SEND = "gmail_send"
DRIVE_CREATE_DOC = "drive_create_doc"


def _function(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
    }


_CELL_VALUES = {
    "type": "object",
    "description": "Column headers as keys, cell values as string values",
    "additionalProperties": {"type": "string"},
}


TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    _function(
        SHEETS_READ_ROWS,
        "Read rows from a Google Sheet tab. Can filter by a column value and limit results. "
        "Returns matching rows as objects plus their row numbers. Use filter_column + filter_value "
        "to look up a specific client or recent visits.",
        {
            "sheet_name": {
                "type": "string",
                "description": "Sheet tab name, e.g. 'Client_Master_Data', 'Service_Log', 'Tasks', 'PROCUREMENT_MASTER'",
            },
            "filter_column": {"type": "string", "description": "Column header to filter on, e.g. 'Account_Name', 'Client'"},
            "filter_value": {"type": "string", "description": "Value to match in the filter column (case-insensitive exact match)"},
            "limit": {"type": "integer", "description": "Max rows to return. Default 10."},
            "sort_by": {"type": "string", "description": "Column header to sort results by"},
            "sort_order": {"type": "string", "enum": ["asc", "desc"], "description": "'asc' or 'desc'. Default 'desc'"},
        },
        ["sheet_name"],
    ),
    _function(
        SHEETS_APPEND_ROW,
        "Append a new row to a Google Sheet tab. Keys not matching a column header are ignored; "
        "missing columns are left blank.",
        {
            "sheet_name": {"type": "string", "description": "Sheet tab name to append to"},
            "values": _CELL_VALUES,
        },
        ["sheet_name", "values"],
    ),
    _function(
        SHEETS_UPDATE_ROW,
        "Update specific cells in an existing row. The row number comes from a previous "
        "sheets_read_rows or sheets_append_row call. Only the given columns change.",
        {
            "sheet_name": {"type": "string", "description": "Sheet tab name"},
            "row_number": {
                "type": "integer",
                "description": "1-based row number (row 1 = headers, row 2 = first data row)",
            },
            "values": _CELL_VALUES,
        },
        ["sheet_name", "row_number", "values"],
    ),
    _function(
        GMAIL_SEND,
        "Send a plain-text email from the company service address. Use for client recap emails "
        "and urgent alerts to the owner.",
        {
            "to": {"type": "string", "description": "Recipient email address"},
            "subject": {"type": "string", "description": "Email subject line"},
            "body": {"type": "string", "description": "Email body (plain text)"},
            "from_name": {"type": "string", "description": "Sender display name. Default: 'Atlanta Houseplants'"},
        },
        ["to", "subject", "body"],
    ),
    _function(
        DRIVE_CREATE_DOC,
        "Create a Google Doc in a Drive folder. Use for new client setup documents or service summaries.",
        {
            "folder_id": {"type": "string", "description": "Google Drive folder ID"},
            "title": {"type": "string", "description": "Document title"},
            "content": {"type": "string", "description": "Document body text"},
        },
        ["folder_id", "title", "content"],
    ),
]


def tool_names() -> List[str]:
    return [tool["function"]["name"] for tool in TOOL_DEFINITIONS]
