"""Unit tests for the header-indexed spreadsheet row store."""
from __future__ import annotations

import asyncio

import pytest

from ahp_ops.core.errors import GoogleAPIError
from ahp_ops.services.google_sheets import HeaderCache, RowStore, column_letter


def test_column_letter_follows_spreadsheet_alphabet():
    assert column_letter(0) == "A"
    assert column_letter(25) == "Z"
    assert column_letter(26) == "AA"
    assert column_letter(27) == "AB"
    assert column_letter(51) == "AZ"
    assert column_letter(52) == "BA"
    assert column_letter(701) == "ZZ"
    assert column_letter(702) == "AAA"
    with pytest.raises(ValueError):
        column_letter(-1)


def test_filter_is_case_insensitive_exact_match(row_store):
    page = asyncio.run(row_store.read_rows("Service_Log", filter_column="Client", filter_value="acme corp"))
    assert page.total_found == 3
    assert {row["Client"] for row in page.rows} == {"Acme Corp", "acme corp", "ACME CORP"}

    partial = asyncio.run(row_store.read_rows("Service_Log", filter_column="Client", filter_value="acme"))
    assert partial.total_found == 0
    assert partial.rows == []


def test_rows_are_header_keyed_and_row_numbers_kept_separate(row_store):
    page = asyncio.run(row_store.read_rows("Client_Master_Data", filter_column="Account_Name", filter_value="Globex"))
    assert page.rows == [
        {
            "Account_Name": "Globex",
            "Contact_Email": "hello@globex.test",
            "Fee_Per_Visit": "95",
            "Last_Service_Date": "2026-09-10",
            "Last_Health_Score": "Excellent",
        }
    ]
    assert page.row_numbers == [3]
    assert all("_rowNumber" not in row and "row_number" not in row for row in page.rows)


def test_short_rows_are_padded_with_empty_strings(row_store, sheets):
    sheets.sheets["Service_Log"].append(["2026-10-01", "Initech"])
    page = asyncio.run(row_store.read_rows("Service_Log", filter_column="Client", filter_value="Initech"))
    assert page.rows[0]["Notes"] == ""
    assert page.rows[0]["Email_Sent"] == ""
    assert page.row_numbers == [6]


def test_sort_orders_reverse_each_other(row_store):
    desc = asyncio.run(row_store.read_rows("Service_Log", sort_by="Date"))
    asc = asyncio.run(row_store.read_rows("Service_Log", sort_by="Date", sort_order="asc"))

    assert [row["Date"] for row in desc.rows] == ["2026-09-01", "2026-08-20", "2026-08-04", "2026-07-15"]
    assert asc.rows == list(reversed(desc.rows))
    assert asc.row_numbers == list(reversed(desc.row_numbers))


def test_limit_truncates_rows_but_not_total_found(row_store):
    page = asyncio.run(
        row_store.read_rows("Service_Log", filter_column="Client", filter_value="ACME corp", sort_by="Date", limit=2)
    )
    assert page.total_found == 3
    assert [row["Date"] for row in page.rows] == ["2026-09-01", "2026-08-04"]
    assert page.row_numbers == [3, 2]


def test_default_limit_is_ten(row_store, sheets):
    for day in range(1, 15):
        sheets.sheets["Service_Log"].append([f"2026-10-{day:02d}", "Bulk", "Good", "", "No"])
    page = asyncio.run(row_store.read_rows("Service_Log", filter_column="Client", filter_value="bulk"))
    assert page.total_found == 14
    assert len(page.rows) == 10
    assert len(page.row_numbers) == 10


def test_repeated_reads_are_identical(row_store):
    first = asyncio.run(row_store.read_rows("Service_Log", filter_column="Client", filter_value="acme corp", sort_by="Date"))
    second = asyncio.run(row_store.read_rows("Service_Log", filter_column="Client", filter_value="acme corp", sort_by="Date"))
    assert first == second


def test_headers_are_fetched_once_per_sheet(row_store, sheets):
    asyncio.run(row_store.read_rows("Service_Log"))
    asyncio.run(row_store.read_rows("Service_Log", limit=1))
    asyncio.run(row_store.append_row("Service_Log", {"Client": "Globex"}))
    assert sheets.header_reads("Service_Log") == 1
    assert ("main-sheet", "Service_Log") in row_store.header_cache
    assert len(row_store.header_cache) == 1

    asyncio.run(row_store.read_rows("Tasks"))
    assert len(row_store.header_cache) == 2


def test_procurement_sheet_uses_its_own_spreadsheet(row_store, sheets):
    asyncio.run(row_store.append_row("PROCUREMENT_MASTER", {"ID": "P-1", "Plant": "Ficus"}))
    assert ("procurement-sheet", "PROCUREMENT_MASTER") in row_store.header_cache
    assert ("append", "procurement-sheet", "PROCUREMENT_MASTER!A:A") in sheets.calls


def test_append_aligns_values_with_headers(row_store, sheets):
    before = len(sheets.sheets["Tasks"])
    result = asyncio.run(
        row_store.append_row(
            "Tasks",
            {"Title": "Poor health follow-up", "Task_ID": "T-1", "Priority": "urgent", "Owner_Mood": "ignored"},
        )
    )
    grid = sheets.sheets["Tasks"]
    assert len(grid) == before + 1
    assert grid[-1] == ["T-1", "", "Poor health follow-up", "urgent", "", ""]
    assert result.success is True
    assert result.row_number == len(grid)
    assert result.sheet_name == "Tasks"


def test_append_coerces_values_to_strings(row_store, sheets):
    asyncio.run(row_store.append_row("PROCUREMENT_MASTER", {"ID": "P-2", "Quantity": 3, "Status": None}))
    assert sheets.sheets["PROCUREMENT_MASTER"][-1] == ["P-2", "", "", "", "3"]


def test_append_without_reported_range_has_no_row_number(settings, sheets):
    async def _no_range(spreadsheet_id, a1_range, rows):
        return ""

    sheets.append_values = _no_range
    store = RowStore(client=sheets, settings=settings, header_cache=HeaderCache())
    result = asyncio.run(store.append_row("Tasks", {"Task_ID": "T-9"}))
    assert result.row_number is None


def test_update_writes_only_known_headers(row_store, sheets):
    result = asyncio.run(
        row_store.update_row(
            "Client_Master_Data",
            2,
            {"Last_Service_Date": "2026-10-19", "Favorite_Plant": "Monstera", "Last_Health_Score": "Poor"},
        )
    )
    assert result.updated_columns == ["Last_Service_Date", "Last_Health_Score"]
    assert result.row_number == 2
    assert sheets.sheets["Client_Master_Data"][1] == ["Acme Corp", "ops@acme.test", "150", "2026-10-19", "Poor"]
    updates = [rng for kind, _, rng in sheets.calls if kind == "update"]
    assert sorted(updates) == ["Client_Master_Data!D2", "Client_Master_Data!E2"]


def test_update_with_only_unknown_headers_writes_nothing(row_store, sheets):
    result = asyncio.run(row_store.update_row("Tasks", 2, {"Nope": "x"}))
    assert result.success is True
    assert result.updated_columns == []
    assert not [call for call in sheets.calls if call[0] == "update"]


def test_store_failures_propagate(row_store):
    with pytest.raises(GoogleAPIError):
        asyncio.run(row_store.read_rows("Missing_Tab"))


def test_missing_spreadsheet_id_is_an_error(settings, sheets):
    settings.spreadsheet_id = ""
    settings.procurement_spreadsheet_id = ""
    store = RowStore(client=sheets, settings=settings)
    with pytest.raises(GoogleAPIError):
        asyncio.run(store.read_rows("Service_Log"))


def test_update_waits_for_every_write_before_failing(row_store, sheets):
    original = sheets.update_values
    completed = []

    async def _flaky_update(spreadsheet_id, a1_range, rows):
        if a1_range == "Tasks!A2":
            raise GoogleAPIError("Sheets API error (500): backend error")
        await asyncio.sleep(0.05)
        await original(spreadsheet_id, a1_range, rows)
        completed.append(a1_range)

    sheets.update_values = _flaky_update
    with pytest.raises(GoogleAPIError, match="backend error"):
        asyncio.run(row_store.update_row("Tasks", 2, {"Task_ID": "T-1", "Status": "Done"}))
    assert completed == ["Tasks!F2"]
