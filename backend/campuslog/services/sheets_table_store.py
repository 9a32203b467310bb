"""
CampusLog Backend — Google Sheets Table Store
===============================================

What:  TableStore backed by the Google Sheets API v4 (spreadsheets.values).
Why:   The spreadsheets are the system of record; staff read them directly.
How:   Builds A1 ranges from the Table description and calls values.get /
       values.append / values.update. The discovery client is blocking, so each
       `execute()` runs in Starlette's threadpool.
Who:   Built once by container.py and shared by every domain service.

Thread Safety:
    A discovery Resource is safe to share, but the httplib2.Http object it
    carries is not. When an `http_factory` is supplied, every request executes
    on a fresh authorised Http object (see google_clients.py).

Value Semantics:
    Writes use valueInputOption=USER_ENTERED, so "42" is stored as a number
    and "2024-01-15" may be stored as a date. Reads use the default
    FORMATTED_VALUE rendering and therefore always come back as strings.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError
from starlette.concurrency import run_in_threadpool

from campuslog.exceptions import RemoteUnavailableError
from campuslog.services.table_base import Table, TableStore, pad_row, parse_columns

logger = logging.getLogger(__name__)

VALUE_INPUT_OPTION = "USER_ENTERED"

# What: Everything the client stack raises for a failed round-trip
# Why OSError too: socket timeouts and refused connections surface from httplib2
# as plain OSError subclasses, not HttpLib2Error
REMOTE_ERRORS = (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError)


class SheetsTableStore(TableStore):
    """
    Google Sheets implementation of the tabular record store.

    Args:
        sheets:       Resource returned by build("sheets", "v4", ...)
        http_factory: Optional callable returning a new authorised Http
                      object per request
    """

    def __init__(self, sheets: Any, http_factory: Optional[Callable[[], Any]] = None):
        self._sheets = sheets
        self._http_factory = http_factory

    @property
    def _values(self) -> Any:
        return self._sheets.spreadsheets().values()

    async def _execute(self, request: Any, operation: str, table: Optional[Table] = None) -> dict:
        """Run one API request off the event loop and translate its failures."""
        kwargs = {}
        # Why a fresh Http per request: execute() runs on a threadpool worker, and
        # two workers sharing one httplib2.Http corrupt each other's connections
        # Alternative: one Http guarded by a lock. Rejected: it serialises every
        # Sheets call in the process
        if self._http_factory is not None:
            kwargs["http"] = self._http_factory()
        try:
            # Why run_in_threadpool: execute() blocks on the network; calling it
            # directly would stall every other request on the event loop
            return await run_in_threadpool(request.execute, **kwargs) or {}
        except REMOTE_ERRORS as e:
            context = {"operation": operation, "error": str(e)}
            if table is not None:
                context.update(location=table.location, table=table.name)
            logger.error("Sheets %s failed: %s", operation, context)
            raise RemoteUnavailableError(context=context)

    # ── Primitives ────────────────────────────────────────────────────────

    async def append_row(self, table: Table, values: Sequence[str]) -> None:
        request = self._values.append(
            spreadsheetId=table.location,
            range=table.a1(),
            valueInputOption=VALUE_INPUT_OPTION,
            body={"values": [list(values)]},
        )
        await self._execute(request, "append", table)
        logger.debug("Appended row to %s: %s", table.name, values[:3])

    async def find_row_index(self, table: Table, key: str) -> Optional[int]:
        request = self._values.get(spreadsheetId=table.location, range=table.a1("A:A"))
        result = await self._execute(request, "find", table)
        for row_index, row in enumerate(result.get("values", []), start=1):
            if row and str(row[0]) == key:
                return row_index
        return None

    async def read_row(
        self, table: Table, row_index: int, columns: Optional[str] = None
    ) -> List[str]:
        columns = columns or table.columns
        first, last = parse_columns(columns)
        request = self._values.get(
            spreadsheetId=table.location, range=table.a1(columns, row=row_index)
        )
        result = await self._execute(request, "read_row", table)
        rows = result.get("values", [])
        return pad_row(rows[0] if rows else [], last - first + 1)

    async def update_row(
        self,
        table: Table,
        row_index: int,
        values: Sequence[str],
        columns: Optional[str] = None,
    ) -> None:
        request = self._values.update(
            spreadsheetId=table.location,
            range=table.a1(columns, row=row_index),
            valueInputOption=VALUE_INPUT_OPTION,
            body={"values": [list(values)]},
        )
        await self._execute(request, "update", table)

    async def read_all(self, table: Table, columns: Optional[str] = None) -> List[List[str]]:
        request = self._values.get(spreadsheetId=table.location, range=table.a1(columns))
        result = await self._execute(request, "read_all", table)
        return [[str(cell) for cell in row] for row in result.get("values", [])]

    async def health_check(self, location: str) -> bool:
        """Fetch only the spreadsheet id; costs one read request of quota."""
        request = self._sheets.spreadsheets().get(spreadsheetId=location, fields="spreadsheetId")
        try:
            await self._execute(request, "health_check")
            return True
        except RemoteUnavailableError:
            return False
