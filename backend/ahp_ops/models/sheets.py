"""Result shapes returned by the spreadsheet row store."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RowsPage(BaseModel):
    """Filtered/sorted rows truncated to a limit; counts cover the full match set."""

    rows: List[Dict[str, str]] = Field(default_factory=list)
    total_found: int = 0
    row_numbers: List[int] = Field(default_factory=list)


class RowAppendResult(BaseModel):
    success: bool = True
    row_number: Optional[int] = None
    sheet_name: str


class RowUpdateResult(BaseModel):
    success: bool = True
    row_number: int
    updated_columns: List[str] = Field(default_factory=list)
