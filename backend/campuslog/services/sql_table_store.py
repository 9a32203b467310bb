"""
CampusLog Backend — SQL Table Store
=====================================

What:  TableStore backed by the `table_rows` table via async SQLAlchemy.
Why:   Local development and the test-suite run without Google credentials.
How:   Each spreadsheet row is one TableRow (location, table_name, position,
       cells). Positions are 1-based with the header at position 1, so row
       indexes mean the same thing as in the Sheets backend.

Spreadsheet Fidelity:
    - Appends land at max(position) + 1. Overlapping appends each get their
      own row number (see append_row).
    - Writes mimic USER_ENTERED parsing for numbers: "007" is stored as "7",
      "12.50" as "12.5". Everything else is stored verbatim.
    - read_all fills missing positions with empty rows and drops trailing
      empty cells, as values.get does.

Each operation opens its own session and commits before returning; there is
no transaction spanning two operations.
"""

import logging
import re
from contextlib import asynccontextmanager
from decimal import Decimal, InvalidOperation
from typing import AsyncIterator, List, Optional, Sequence, Tuple, Type

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campuslog.exceptions import RemoteUnavailableError
from campuslog.models.table_row import TableRow
from campuslog.services.table_base import Table, TableStore, pad_row, parse_columns

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?\d+")
_DECIMAL = re.compile(r"[+-]?(\d+\.\d*|\.\d+)")

# What: How many times one append may lose the race for a row number
# Why bounded: each lost race means another writer succeeded, so running out
# takes that many simultaneous appends to one table
APPEND_ATTEMPTS = 25


def user_entered(value: object) -> str:
    """Normalise a cell the way a spreadsheet parses typed-in numbers."""
    cell = "" if value is None else str(value)
    stripped = cell.strip()
    if _INTEGER.fullmatch(stripped):
        return str(int(stripped))
    if _DECIMAL.fullmatch(stripped):
        try:
            number = Decimal(stripped)
        except InvalidOperation:
            return cell
        if number == number.to_integral_value():
            return str(int(number))
        return format(number.normalize(), "f")
    return cell


def _trim(cells: List[str]) -> List[str]:
    end = len(cells)
    while end and cells[end - 1] == "":
        end -= 1
    return cells[:end]


class SqlTableStore(TableStore):
    """
    SQL implementation of the tabular record store.

    Args:
        session_factory: async_sessionmaker bound to the engine holding table_rows
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(
        self,
        operation: str,
        table: Optional[Table] = None,
        passthrough: Tuple[Type[SQLAlchemyError], ...] = (),
    ) -> AsyncIterator[AsyncSession]:
        """
        Session that commits on success and reports database failures.

        Exceptions listed in `passthrough` are rolled back and re-raised
        untranslated, so the caller can handle them itself.
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except passthrough:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                context = {"operation": operation, "error": type(e).__name__}
                if table is not None:
                    context.update(location=table.location, table=table.name)
                logger.error("SQL table %s failed: %s", operation, e)
                raise RemoteUnavailableError(context=context)

    @staticmethod
    def _rows_of(table: Table):
        return select(TableRow).where(
            TableRow.location == table.location,
            TableRow.table_name == table.name,
        )

    async def _get_row(self, session: AsyncSession, table: Table, row_index: int) -> Optional[TableRow]:
        result = await session.execute(self._rows_of(table).where(TableRow.position == row_index))
        return result.scalar_one_or_none()

    # ── Primitives ────────────────────────────────────────────────────────

    async def append_row(self, table: Table, values: Sequence[str]) -> None:
        """
        Insert the row at max(position) + 1.

        Why claim-and-retry: two overlapping appends can read the same
        max(position). The unique constraint lets exactly one of them claim
        that row number; the loser's insert fails with IntegrityError, and it
        re-reads the max and claims the next free number. Every append lands,
        as it does with values.append on a spreadsheet.
        Alternative: a per-table lock. Rejected because it only serialises
        appends within one process, not across workers sharing a database.
        """
        cells = [user_entered(value) for value in values]
        for attempt in range(1, APPEND_ATTEMPTS + 1):
            try:
                async with self._session("append", table, passthrough=(IntegrityError,)) as session:
                    result = await session.execute(
                        select(func.max(TableRow.position)).where(
                            TableRow.location == table.location,
                            TableRow.table_name == table.name,
                        )
                    )
                    position = (result.scalar() or 0) + 1
                    session.add(
                        TableRow(
                            location=table.location,
                            table_name=table.name,
                            position=position,
                            cells=cells,
                        )
                    )
                    await session.flush()
            except IntegrityError:
                logger.debug(
                    "Row %d of %s was claimed concurrently (attempt %d)",
                    position,
                    table.name,
                    attempt,
                )
                continue
            logger.debug("Appended row %d to %s", position, table.name)
            return

        logger.error("Gave up appending to %s after %d position conflicts", table.name, APPEND_ATTEMPTS)
        raise RemoteUnavailableError(
            context={
                "operation": "append",
                "location": table.location,
                "table": table.name,
                "error": "position conflict",
            }
        )

    async def find_row_index(self, table: Table, key: str) -> Optional[int]:
        async with self._session("find", table) as session:
            result = await session.execute(self._rows_of(table).order_by(TableRow.position))
            for row in result.scalars():
                if row.cells and row.cells[0] == key:
                    return row.position
        return None

    async def read_row(
        self, table: Table, row_index: int, columns: Optional[str] = None
    ) -> List[str]:
        first, last = parse_columns(columns or table.columns)
        async with self._session("read_row", table) as session:
            row = await self._get_row(session, table, row_index)
        cells = row.cells if row is not None else []
        return pad_row(cells[first - 1:last], last - first + 1)

    async def update_row(
        self,
        table: Table,
        row_index: int,
        values: Sequence[str],
        columns: Optional[str] = None,
    ) -> None:
        first, last = parse_columns(columns or table.columns)
        written = pad_row([user_entered(value) for value in values], last - first + 1)
        async with self._session("update", table) as session:
            row = await self._get_row(session, table, row_index)
            if row is None:
                row = TableRow(
                    location=table.location,
                    table_name=table.name,
                    position=row_index,
                    cells=[],
                )
                session.add(row)
            cells = pad_row(row.cells or [], max(len(row.cells or []), last))
            cells[first - 1:last] = written
            # Reassign so the JSON column is flagged dirty
            row.cells = _trim(cells)

    async def read_all(self, table: Table, columns: Optional[str] = None) -> List[List[str]]:
        first, last = parse_columns(columns or table.columns)
        async with self._session("read_all", table) as session:
            result = await session.execute(self._rows_of(table).order_by(TableRow.position))
            stored = {row.position: row.cells for row in result.scalars()}

        rows: List[List[str]] = []
        for position in range(1, max(stored, default=0) + 1):
            rows.append(_trim([str(c) for c in stored.get(position, [])[first - 1:last]]))
        while rows and not rows[-1]:
            rows.pop()
        return rows

    async def health_check(self, location: str) -> bool:
        try:
            async with self._session("health_check") as session:
                await session.execute(text("SELECT 1"))
            return True
        except RemoteUnavailableError:
            return False
