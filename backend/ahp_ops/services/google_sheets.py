"""Google Sheets access: header-indexed row reads, appends and sparse updates."""
from __future__ import annotations

import asyncio
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

import httpx

from ahp_ops.core.config import Settings, get_settings
from ahp_ops.core.errors import GoogleAPIError
from ahp_ops.core.logging import logger
from ahp_ops.models.sheets import RowAppendResult, RowsPage, RowUpdateResult
from ahp_ops.services.google_auth import GoogleTokenProvider, google_token_provider


DEFAULT_READ_LIMIT = 10
DATA_RANGE_END = "ZZ"
UPDATED_RANGE_ROW = re.compile(r"[A-Z]+(\d+)$")


def column_letter(index: int) -> str:
    """0-based column index to A1 letters: 0 -> A, 25 -> Z, 26 -> AA."""
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")
    letters = ""
    n = index
    while n >= 0:
        letters = chr(n % 26 + 65) + letters
        n = n // 26 - 1
    return letters


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


class SheetsClient:
    """Thin Sheets API v4 client over httpx."""

    BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

    def __init__(
        self,
        token_provider: Optional[GoogleTokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self.token_provider = token_provider or google_token_provider
        self._transport = transport
        self._timeout = timeout

    def _values_url(self, spreadsheet_id: str, a1_range: str, suffix: str = "") -> str:
        return f"{self.BASE_URL}/{spreadsheet_id}/values/{quote(a1_range, safe='')}{suffix}"

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = await self.token_provider.auth_headers()
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.request(method, url, headers=headers, params=params, json=json)
        if response.status_code >= 400:
            raise GoogleAPIError(
                f"Sheets request failed ({response.status_code}) {method} {url}: {response.text[:400]}"
            )
        if not response.content:
            return {}
        return response.json()

    async def get_values(self, spreadsheet_id: str, a1_range: str) -> List[List[Any]]:
        payload = await self._request("GET", self._values_url(spreadsheet_id, a1_range))
        return payload.get("values") or []

    async def append_values(self, spreadsheet_id: str, a1_range: str, rows: List[List[str]]) -> str:
        """Append rows below the table; returns the range the store reports as written."""
        payload = await self._request(
            "POST",
            self._values_url(spreadsheet_id, a1_range, ":append"),
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json={"values": rows},
        )
        return str((payload.get("updates") or {}).get("updatedRange") or "")

    async def update_values(self, spreadsheet_id: str, a1_range: str, rows: List[List[str]]) -> None:
        await self._request(
            "PUT",
            self._values_url(spreadsheet_id, a1_range),
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": rows},
        )


class HeaderCache:
    """Header rows keyed by (spreadsheet_id, sheet_name); filled lazily, never evicted."""

    def __init__(self) -> None:
        self._headers: Dict[Tuple[str, str], List[str]] = {}

    def get(self, spreadsheet_id: str, sheet_name: str) -> Optional[List[str]]:
        return self._headers.get((spreadsheet_id, sheet_name))

    def put(self, spreadsheet_id: str, sheet_name: str, headers: List[str]) -> List[str]:
        # A concurrent first load may land twice; both writes carry the same row.
        self._headers[(spreadsheet_id, sheet_name)] = headers
        return headers

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._headers

    def __len__(self) -> int:
        return len(self._headers)


class RowStore:
    """Header-indexed view over spreadsheet tabs (row 1 = headers, data from row 2)."""

    def __init__(
        self,
        client: Any = None,
        settings: Optional[Settings] = None,
        header_cache: Optional[HeaderCache] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or SheetsClient(timeout=self.settings.google_timeout_seconds)
        self.header_cache = header_cache if header_cache is not None else HeaderCache()

    def _spreadsheet_id(self, sheet_name: str) -> str:
        spreadsheet_id = self.settings.spreadsheet_id_for(sheet_name)
        if not spreadsheet_id:
            raise GoogleAPIError("SPREADSHEET_ID is not configured.")
        return spreadsheet_id

    async def get_headers(self, sheet_name: str) -> List[str]:
        spreadsheet_id = self._spreadsheet_id(sheet_name)
        cached = self.header_cache.get(spreadsheet_id, sheet_name)
        if cached is not None:
            return cached

        values = await self.client.get_values(spreadsheet_id, f"{sheet_name}!1:1")
        headers = [_cell_text(cell) for cell in (values[0] if values else [])]
        self.header_cache.put(spreadsheet_id, sheet_name, headers)
        logger.debug(
            "Loaded sheet headers",
            sheet=sheet_name,
            columns=len(headers),
            cached_sheets=len(self.header_cache),
        )
        return headers

    async def read_rows(
        self,
        sheet_name: str,
        filter_column: Optional[str] = None,
        filter_value: Any = None,
        limit: Optional[int] = DEFAULT_READ_LIMIT,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = "desc",
    ) -> RowsPage:
        spreadsheet_id = self._spreadsheet_id(sheet_name)
        headers = await self.get_headers(sheet_name)
        raw_rows = await self.client.get_values(spreadsheet_id, f"{sheet_name}!A2:{DATA_RANGE_END}")

        records: List[Tuple[int, Dict[str, str]]] = []
        for offset, raw in enumerate(raw_rows):
            record = {
                header: _cell_text(raw[col]) if col < len(raw) else ""
                for col, header in enumerate(headers)
            }
            records.append((offset + 2, record))

        if filter_column and filter_value is not None:
            wanted = _cell_text(filter_value).lower()
            records = [
                (row_number, record)
                for row_number, record in records
                if record.get(filter_column, "").lower() == wanted
            ]

        if sort_by:
            records.sort(
                key=lambda item: item[1].get(sort_by, ""),
                reverse=(sort_order or "desc") != "asc",
            )

        size = DEFAULT_READ_LIMIT if limit is None else max(0, int(limit))
        page = records[:size]
        return RowsPage(
            rows=[record for _, record in page],
            total_found=len(records),
            row_numbers=[row_number for row_number, _ in page],
        )

    async def append_row(self, sheet_name: str, values: Mapping[str, Any]) -> RowAppendResult:
        spreadsheet_id = self._spreadsheet_id(sheet_name)
        headers = await self.get_headers(sheet_name)
        row = [_cell_text(values.get(header)) for header in headers]

        updated_range = await self.client.append_values(spreadsheet_id, f"{sheet_name}!A:A", [row])
        match = UPDATED_RANGE_ROW.search(updated_range or "")
        row_number = int(match.group(1)) if match else None
        return RowAppendResult(row_number=row_number, sheet_name=sheet_name)

    async def update_row(
        self,
        sheet_name: str,
        row_number: int,
        values: Mapping[str, Any],
    ) -> RowUpdateResult:
        spreadsheet_id = self._spreadsheet_id(sheet_name)
        headers = await self.get_headers(sheet_name)
        positions = {header: idx for idx, header in reversed(list(enumerate(headers)))}

        writes = []
        updated_columns: List[str] = []
        for header, value in values.items():
            col = positions.get(header)
            if col is None:
                continue
            a1_range = f"{sheet_name}!{column_letter(col)}{row_number}"
            writes.append(self.client.update_values(spreadsheet_id, a1_range, [[_cell_text(value)]]))
            updated_columns.append(header)

        # Every write settles before a failure is reported.
        outcomes = await asyncio.gather(*writes, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return RowUpdateResult(row_number=row_number, updated_columns=updated_columns)


row_store = RowStore()
