"""
CampusLog Backend — Tabular Record Store Interface
====================================================

What:  The "spreadsheet as database" contract every backend implements.
Why:   Each route group used to carry its own copy of find-row-by-id,
       read-modify-write and header zipping. They live here once.
How:   Backends implement five primitives (append, find, read, update,
       read_all). The composed operations (merge_update, list_all,
       list_filtered) are written once on top of them.

Row Addressing:
    Row indexes are 1-based and count the header row, exactly like A1
    notation: the header is row 1, the first record is row 2.

Known Weaknesses (kept on purpose):
    - find_row_index scans column A top-to-bottom on every call; there is
      no index. Large tables make every update slower.
    - merge_update is read-modify-write with no compare-and-swap. Two
      concurrent updates of the same key can both read the same row; the
      last write wins and the other change is silently lost.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from campuslog.exceptions import NotFoundError, SchemaMismatchError

logger = logging.getLogger(__name__)

# A record is one data row keyed by the header row's column names.
Record = Dict[str, str]


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-01-15T12:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def column_letter(number: int) -> str:
    """1 → A, 26 → Z, 27 → AA."""
    if number < 1:
        raise ValueError(f"Column numbers start at 1, got {number}")
    letters = ""
    while number:
        number, remainder = divmod(number - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def column_number(letters: str) -> int:
    """A → 1, Z → 26, AA → 27."""
    number = 0
    for char in letters.upper():
        if not "A" <= char <= "Z":
            raise ValueError(f"Invalid column letters: {letters!r}")
        number = number * 26 + (ord(char) - ord("A") + 1)
    return number


def parse_columns(columns: str) -> Tuple[int, int]:
    """'A:G' → (1, 7)."""
    first, _, last = columns.partition(":")
    return column_number(first), column_number(last or first)


@dataclass(frozen=True)
class Table:
    """
    A named tab inside a store location (spreadsheet id).

    Attributes:
        location:        Spreadsheet id (or the equivalent SQL namespace)
        name:            Tab name, e.g. "Departments"
        header:          Declared column names, in sheet order
        created_column:  Column never touched by merge updates
        updated_column:  Column stamped with the current time on merge updates
    """

    location: str
    name: str
    header: Tuple[str, ...]
    created_column: Optional[str] = None
    updated_column: Optional[str] = None

    @property
    def key_column(self) -> str:
        return self.header[0]

    @property
    def width(self) -> int:
        return len(self.header)

    @property
    def columns(self) -> str:
        """Full column range, e.g. 'A:G'."""
        return f"A:{column_letter(self.width)}"

    def a1(self, columns: Optional[str] = None, row: Optional[int] = None) -> str:
        """
        Build an A1 range for this table.

        a1()            → Departments!A:G
        a1("A:A")       → Departments!A:A
        a1(row=5)       → Departments!A5:G5
        """
        first, _, last = (columns or self.columns).partition(":")
        last = last or first
        if row is not None:
            span = f"{first}{row}:{last}{row}"
        else:
            span = f"{first}:{last}"
        return f"{self.quoted_name}!{span}"

    @property
    def quoted_name(self) -> str:
        if self.name.replace("_", "").isalnum():
            return self.name
        return "'" + self.name.replace("'", "''") + "'"

    def index_of(self, column: str) -> int:
        try:
            return self.header.index(column)
        except ValueError:
            raise SchemaMismatchError(column=column, table=self.name)


def pad_row(row: Sequence[str], width: int) -> List[str]:
    """Pads (or trims) a row to exactly `width` cells; missing cells are ''."""
    cells = ["" if cell is None else str(cell) for cell in list(row)[:width]]
    return cells + [""] * (width - len(cells))


def rows_to_records(rows: Sequence[Sequence[str]]) -> List[Record]:
    """
    Zip every data row with the header row.

    Rows shorter than the header get '' for missing trailing cells. A table
    with no rows, or only a header, yields an empty list.
    """
    if len(rows) <= 1:
        return []
    header = [str(cell) for cell in rows[0]]
    return [dict(zip(header, pad_row(row, len(header)))) for row in rows[1:]]


class TableStore(ABC):
    """
    Abstract interface for a row-oriented table backend.

    Contract:
        - Every call round-trips to the backing service; nothing is cached.
        - Backend failures are raised as RemoteUnavailableError.
        - Values are written with "user entered" semantics: the backend may
          store numeric-looking strings as numbers.
        - Reads always return strings.

    Implementations:
        - SheetsTableStore: Google Sheets API v4
        - SqlTableStore: one SQL table holding every row as a JSON array
    """

    # ── Backend primitives ────────────────────────────────────────────────

    @abstractmethod
    async def append_row(self, table: Table, values: Sequence[str]) -> None:
        """Add one row after the last row of the table."""
        ...

    @abstractmethod
    async def find_row_index(self, table: Table, key: str) -> Optional[int]:
        """
        Scan column A top-to-bottom for `key`.

        Returns:
            The 1-based row index of the FIRST match (header counted), or
            None when no row matches.
        """
        ...

    @abstractmethod
    async def read_row(
        self, table: Table, row_index: int, columns: Optional[str] = None
    ) -> List[str]:
        """Read one row, padded to the width of `columns` (default: whole table)."""
        ...

    @abstractmethod
    async def update_row(
        self,
        table: Table,
        row_index: int,
        values: Sequence[str],
        columns: Optional[str] = None,
    ) -> None:
        """
        Overwrite the cells of one row.

        This is a full overwrite of the range: callers supply every column's
        final value. There is no per-cell patch.
        """
        ...

    @abstractmethod
    async def read_all(self, table: Table, columns: Optional[str] = None) -> List[List[str]]:
        """Read every row of the range, header included, as raw cell lists."""
        ...

    @abstractmethod
    async def health_check(self, location: str) -> bool:
        """True if the location is reachable with our credentials."""
        ...

    # ── Composed operations ───────────────────────────────────────────────

    async def ensure_header(self, table: Table) -> None:
        """
        Write the declared header into row 1 of an empty table.

        A table that already has a header is left alone; a different header
        is only reported, since rewriting it would be a schema migration.
        """
        existing = await self.read_row(table, 1)
        if not any(existing):
            await self.update_row(table, 1, list(table.header))
            logger.info("Wrote header row for %s/%s", table.location, table.name)
        elif tuple(existing) != table.header:
            logger.warning(
                "Header of %s/%s differs from the declared layout: %s",
                table.location,
                table.name,
                existing,
            )

    async def merge_update(
        self,
        table: Table,
        key: str,
        changes: Mapping[str, Optional[str]],
        timestamp: str,
    ) -> Record:
        """
        Update a row in place, keeping every column the caller left empty.

        Steps: find_row_index → read_row → merge → update_row.

        Merge policy (per column):
            - key column and created column: never overwritten
            - updated column: always set to `timestamp`
            - anything else: the supplied value if it is non-empty,
              otherwise the existing value. A field cannot be cleared here.

        Args:
            table:     Table to update
            key:       Primary key (column A) of the row
            changes:   Column name → new value (None or '' means "keep")
            timestamp: Value written to the updated column

        Returns:
            The merged record as written.

        Raises:
            SchemaMismatchError: `changes` names a column the table lacks
            NotFoundError:       no row has this key (nothing is written)
        """
        for column in changes:
            table.index_of(column)

        row_index = await self.find_row_index(table, key)
        if row_index is None:
            raise NotFoundError(resource=table.name, resource_id=key)

        existing = await self.read_row(table, row_index)
        merged: List[str] = []
        for position, column in enumerate(table.header):
            if position == 0:
                merged.append(key)
            elif column == table.created_column:
                merged.append(existing[position])
            elif column == table.updated_column:
                merged.append(timestamp)
            else:
                supplied = changes.get(column)
                merged.append(str(supplied) if supplied else existing[position])

        await self.update_row(table, row_index, merged)
        logger.info("Merged update into %s row %d (key=%s)", table.name, row_index, key)
        return dict(zip(table.header, merged))

    async def list_all(self, table: Table, columns: Optional[str] = None) -> List[Record]:
        """Every record of the table, in table order."""
        rows = await self.read_all(table, columns)
        return rows_to_records(rows)

    async def list_filtered(
        self,
        table: Table,
        column: str,
        value: str,
        columns: Optional[str] = None,
    ) -> List[Record]:
        """
        Records whose `column` equals `value` exactly, in table order.

        Raises:
            SchemaMismatchError: the header row has no such column
        """
        rows = await self.read_all(table, columns)
        if len(rows) <= 1:
            return []
        if column not in rows[0]:
            raise SchemaMismatchError(column=column, table=table.name)
        return [record for record in rows_to_records(rows) if record[column] == value]
