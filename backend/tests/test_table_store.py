"""
CampusLog Backend — Tabular Record Store Tests
================================================

What:  Tests for the TableStore contract, run on the SQL backend.
Why:   merge_update and the list operations are shared by every domain
       service; a regression here corrupts rows in every table.

Test Strategy:
    ✅ A1 range and column-letter helpers
    ✅ append / find / read / update primitives
    ✅ merge_update: non-empty wins, omitted kept, created kept, updated advances
    ✅ merge_update on a missing key writes nothing
    ✅ list_filtered equals the filtered subset of list_all, in order
    ✅ Concurrent merges of one key: the last write wins (no locking)
"""

import asyncio

import pytest

from campuslog.database import build_session_factory
from campuslog.exceptions import NotFoundError, SchemaMismatchError
from campuslog.services.sql_table_store import SqlTableStore, user_entered
from campuslog.services.table_base import (
    Table,
    column_letter,
    column_number,
    rows_to_records,
)

PEOPLE = Table(
    location="directory",
    name="People",
    header=("PersonID", "Name", "City", "CreatedAt", "UpdatedAt"),
    created_column="CreatedAt",
    updated_column="UpdatedAt",
)


async def seed(store, rows):
    await store.ensure_header(PEOPLE)
    for row in rows:
        await store.append_row(PEOPLE, row)


class TestTableHelpers:
    """Pure helpers: no store needed."""

    def test_column_letters(self):
        assert column_letter(1) == "A"
        assert column_letter(11) == "K"
        assert column_letter(26) == "Z"
        assert column_letter(27) == "AA"
        assert column_number("AA") == 27

    def test_column_letter_rejects_zero(self):
        with pytest.raises(ValueError):
            column_letter(0)

    def test_full_range(self):
        assert PEOPLE.a1() == "People!A:E"

    def test_column_range(self):
        assert PEOPLE.a1("A:A") == "People!A:A"

    def test_single_row_range(self):
        assert PEOPLE.a1(row=5) == "People!A5:E5"

    def test_sheet_names_with_spaces_are_quoted(self):
        table = Table(location="x", name="Bus Log", header=("A", "B"))
        assert table.a1() == "'Bus Log'!A:B"

    def test_rows_to_records_pads_short_rows(self):
        records = rows_to_records([["ID", "Name", "City"], ["1", "Asha"]])
        assert records == [{"ID": "1", "Name": "Asha", "City": ""}]

    def test_rows_to_records_header_only(self):
        assert rows_to_records([["ID", "Name"]]) == []
        assert rows_to_records([]) == []

    def test_user_entered_numbers(self):
        assert user_entered("007") == "7"
        assert user_entered("12.50") == "12.5"
        assert user_entered("12.0") == "12"
        assert user_entered("Block A") == "Block A"
        assert user_entered("2024-01-15") == "2024-01-15"
        assert user_entered(None) == ""


class TestPrimitives:

    @pytest.mark.asyncio
    async def test_ensure_header_writes_empty_table_only(self, table_store):
        await table_store.ensure_header(PEOPLE)
        await table_store.ensure_header(PEOPLE)
        rows = await table_store.read_all(PEOPLE)
        assert rows == [list(PEOPLE.header)]

    @pytest.mark.asyncio
    async def test_append_then_find_returns_sheet_row(self, table_store):
        await seed(table_store, [["p1", "Asha"], ["p2", "Ravi"]])
        assert await table_store.find_row_index(PEOPLE, "p1") == 2
        assert await table_store.find_row_index(PEOPLE, "p2") == 3

    @pytest.mark.asyncio
    async def test_find_returns_first_match(self, table_store):
        await seed(table_store, [["dup", "first"], ["other", "x"], ["dup", "second"]])
        assert await table_store.find_row_index(PEOPLE, "dup") == 2

    @pytest.mark.asyncio
    async def test_find_missing_key(self, table_store):
        await seed(table_store, [["p1", "Asha"]])
        assert await table_store.find_row_index(PEOPLE, "nope") is None

    @pytest.mark.asyncio
    async def test_read_row_pads_to_range_width(self, table_store):
        await seed(table_store, [["p1", "Asha"]])
        assert await table_store.read_row(PEOPLE, 2) == ["p1", "Asha", "", "", ""]

    @pytest.mark.asyncio
    async def test_read_row_with_column_range(self, table_store):
        await seed(table_store, [["p1", "Asha", "Pune"]])
        assert await table_store.read_row(PEOPLE, 2, "B:C") == ["Asha", "Pune"]

    @pytest.mark.asyncio
    async def test_update_row_overwrites_whole_range(self, table_store):
        await seed(table_store, [["p1", "Asha", "Pune", "t0", "t0"]])
        await table_store.update_row(PEOPLE, 2, ["p1", "Asha K", "", "t0", "t1"])
        assert await table_store.read_row(PEOPLE, 2) == ["p1", "Asha K", "", "t0", "t1"]

    @pytest.mark.asyncio
    async def test_numeric_strings_are_normalised(self, table_store):
        await seed(table_store, [["p1", "0042"]])
        assert await table_store.read_row(PEOPLE, 2, "B:B") == ["42"]

    @pytest.mark.asyncio
    async def test_health_check(self, table_store):
        assert await table_store.health_check("directory") is True


class TestConcurrentAppends:
    """Overlapping appends must each land in their own row."""

    @pytest.mark.asyncio
    async def test_gathered_appends_all_land(self, table_store):
        await seed(table_store, [])

        await asyncio.gather(
            *(table_store.append_row(PEOPLE, [f"p{i}", f"Person {i}"]) for i in range(5))
        )

        records = await table_store.list_all(PEOPLE)
        assert sorted(r["PersonID"] for r in records) == ["p0", "p1", "p2", "p3", "p4"]
        rows = await table_store.read_all(PEOPLE)
        assert len(rows) == 6
        for i in range(5):
            assert await table_store.find_row_index(PEOPLE, f"p{i}") is not None

    @pytest.mark.asyncio
    async def test_appends_to_different_tables_do_not_conflict(self, table_store):
        other = Table(location="directory", name="Others", header=("OtherID",))
        await seed(table_store, [])
        await table_store.ensure_header(other)

        await asyncio.gather(
            table_store.append_row(PEOPLE, ["p1"]),
            table_store.append_row(other, ["o1"]),
            table_store.append_row(PEOPLE, ["p2"]),
        )

        assert await table_store.find_row_index(other, "o1") == 2
        assert len(await table_store.list_all(PEOPLE)) == 2


class TestMergeUpdate:

    @pytest.mark.asyncio
    async def test_merge_semantics(self, table_store):
        await seed(table_store, [["p1", "Asha", "Pune", "2024-01-01T00:00:00.000Z", "2024-01-01T00:00:00.000Z"]])

        merged = await table_store.merge_update(
            PEOPLE,
            "p1",
            {"Name": "Asha K", "City": "", "CreatedAt": "hijack"},
            "2024-02-01T00:00:00.000Z",
        )

        assert merged == {
            "PersonID": "p1",
            "Name": "Asha K",
            "City": "Pune",
            "CreatedAt": "2024-01-01T00:00:00.000Z",
            "UpdatedAt": "2024-02-01T00:00:00.000Z",
        }
        records = await table_store.list_all(PEOPLE)
        assert records == [merged]

    @pytest.mark.asyncio
    async def test_none_values_keep_existing(self, table_store):
        await seed(table_store, [["p1", "Asha", "Pune", "t0", "t0"]])
        merged = await table_store.merge_update(PEOPLE, "p1", {"City": None}, "t1")
        assert merged["City"] == "Pune"

    @pytest.mark.asyncio
    async def test_missing_key_raises_and_writes_nothing(self, table_store):
        await seed(table_store, [["p1", "Asha", "Pune", "t0", "t0"]])
        before = await table_store.read_all(PEOPLE)

        with pytest.raises(NotFoundError):
            await table_store.merge_update(PEOPLE, "ghost", {"Name": "X"}, "t1")

        assert await table_store.read_all(PEOPLE) == before

    @pytest.mark.asyncio
    async def test_unknown_column_raises(self, table_store):
        await seed(table_store, [["p1", "Asha"]])
        with pytest.raises(SchemaMismatchError):
            await table_store.merge_update(PEOPLE, "p1", {"Nickname": "A"}, "t1")

    @pytest.mark.asyncio
    async def test_concurrent_merges_last_write_wins(self, engine, table_store):
        """
        Two updates of one key that both read before either writes: the
        second write replaces the first, whose change is lost.
        """
        await seed(table_store, [["p1", "Asha", "Pune", "t0", "t0"]])

        both_read = asyncio.Event()
        reads = []

        class InterleavingStore(SqlTableStore):
            async def read_row(self, table, row_index, columns=None):
                row = await super().read_row(table, row_index, columns)
                reads.append(row_index)
                if len(reads) == 2:
                    both_read.set()
                await both_read.wait()
                return row

        store = InterleavingStore(build_session_factory(engine))

        await asyncio.gather(
            store.merge_update(PEOPLE, "p1", {"Name": "Asha K"}, "t1"),
            store.merge_update(PEOPLE, "p1", {"City": "Mumbai"}, "t2"),
        )

        [record] = await store.list_all(PEOPLE)
        applied = (record["Name"] == "Asha K", record["City"] == "Mumbai")
        assert applied in {(True, False), (False, True)}


class TestListing:

    @pytest.mark.asyncio
    async def test_empty_table(self, table_store):
        assert await table_store.list_all(PEOPLE) == []

    @pytest.mark.asyncio
    async def test_header_only(self, table_store):
        await seed(table_store, [])
        assert await table_store.list_all(PEOPLE) == []

    @pytest.mark.asyncio
    async def test_list_all_fills_trailing_cells(self, table_store):
        await seed(table_store, [["p1", "Asha"]])
        assert await table_store.list_all(PEOPLE) == [
            {"PersonID": "p1", "Name": "Asha", "City": "", "CreatedAt": "", "UpdatedAt": ""}
        ]

    @pytest.mark.asyncio
    async def test_filtered_is_subset_of_all_in_order(self, table_store):
        await seed(
            table_store,
            [["p1", "A", "Pune"], ["p2", "B", "Delhi"], ["p3", "C", "Pune"], ["p4", "D", "Pune "]],
        )
        everything = await table_store.list_all(PEOPLE)
        filtered = await table_store.list_filtered(PEOPLE, "City", "Pune")

        assert filtered == [r for r in everything if r["City"] == "Pune"]
        assert [r["PersonID"] for r in filtered] == ["p1", "p3"]

    @pytest.mark.asyncio
    async def test_filter_on_missing_header_raises(self, table_store):
        await seed(table_store, [["p1", "A", "Pune"]])
        with pytest.raises(SchemaMismatchError, match='"DepartmentID" header not found'):
            await table_store.list_filtered(PEOPLE, "DepartmentID", "d1")

    @pytest.mark.asyncio
    async def test_filter_on_empty_table_is_empty(self, table_store):
        assert await table_store.list_filtered(PEOPLE, "DepartmentID", "d1") == []
