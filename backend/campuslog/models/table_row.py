"""
CampusLog Backend — Table Row SQLAlchemy Model
================================================

What:  ORM model for the `table_rows` table, the SQL stand-in for spreadsheet tabs.
Why:   Lets SqlTableStore behave like a spreadsheet (header in row 1, records
       below, cells always strings) without one SQL table per tab.
How:   Every spreadsheet cell grid becomes rows keyed by
       (location, table_name, position). `cells` holds the row as a JSON list
       of strings, so a row may be shorter than the header, like in Sheets.
Who:   Used only by SqlTableStore and by Alembic.

Table Design:
    - location:   Spreadsheet id the tab belongs to (any opaque string)
    - table_name: Tab name, e.g. "Movements"
    - position:   1-based row number; position 1 is the header row
    - cells:      JSON array of strings

    Unique (location, table_name, position):
        A row number is taken at most once. When two appends race for the
        same position, the constraint decides the winner; SqlTableStore
        retries the loser at the next free position, so both rows land.
        Why a constraint and not a lock: it also holds across processes
        sharing one database.
"""

from typing import List

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from campuslog.database import Base


class TableRow(Base):
    """One row of one spreadsheet-like table."""

    __tablename__ = "table_rows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Spreadsheet id (or equivalent namespace) the table lives in",
    )
    table_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Tab name, e.g. Departments",
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="1-based row number; 1 is the header row",
    )
    cells: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Row cells as a JSON array of strings",
    )

    __table_args__ = (
        UniqueConstraint("location", "table_name", "position", name="uq_table_rows_position"),
    )

    def __repr__(self) -> str:
        return (
            f"<TableRow(location='{self.location}', table='{self.table_name}', "
            f"position={self.position})>"
        )
