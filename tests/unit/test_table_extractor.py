"""
Unit tests for TableExtractor.

Tests cover:
- Row streaming and column order
- Empty tables vs. zero-column tables
- Batching via fetchmany
- Cursor release on every exit path
"""

import pytest

from dbtools.sqldump.errors import EmptySchemaError, QueryError
from dbtools.sqldump.extract.tables import TableExtractor, TableRecord
from tests.fake_mysql import make_shop


class TestTableExtractor:
    """Tests for TableExtractor."""

    @pytest.fixture
    def server(self):
        """Create a fake server with users and orders."""
        return make_shop()

    @pytest.fixture
    def extractor(self, server):
        """Create extractor with a small batch size."""
        return TableExtractor(server.connect(), fetch_batch_size=2)

    def test_extract_rows(self, extractor):
        """Rows are joined tuple literals in column order."""
        payload = extractor.extract_rows("users")

        assert payload == "(1,NULL,'O''Brien'),(2,'Ann','line1\\nline2')"

    def test_empty_table_yields_empty_payload(self, extractor):
        """Zero rows is not an error."""
        assert extractor.extract_rows("orders") == ""

    def test_zero_columns_rejected(self, server, extractor):
        """A table reporting no columns is an error."""
        server.add_table("hollow", [])

        with pytest.raises(EmptySchemaError):
            extractor.extract_rows("hollow")

        assert server.open_cursors == []

    def test_fetches_in_batches(self, server, extractor):
        """Rows are pulled with fetchmany in configured batches."""
        server.add_table("numbers", ["n"], [(i,) for i in range(5)])

        assert extractor.extract_rows("numbers") == "(0),(1),(2),(3),(4)"

        cursor = server.cursors[-1]
        assert cursor.fetch_sizes == [2, 2, 2, 2]

    def test_fetch_failure_releases_cursor(self, server, extractor):
        """A failure mid-stream is a QueryError and the cursor is closed."""
        server.add_table("numbers", ["n"], [(i,) for i in range(5)])
        server.fail_on("FETCH 2")

        with pytest.raises(QueryError) as exc_info:
            extractor.extract_rows("numbers")

        assert exc_info.value.table == "numbers"
        assert server.open_cursors == []

    def test_abandoned_iteration_releases_cursor(self, server, extractor):
        """Stopping early still closes the cursor."""
        rows = extractor.iter_rows("users")
        assert next(rows) == "(1,NULL,'O''Brien')"
        rows.close()

        assert server.open_cursors == []

    def test_build_record(self, extractor):
        """A record carries schema, payload and row count."""
        record = extractor.build_record("users")

        assert isinstance(record, TableRecord)
        assert record.name == "users"
        assert record.sql.startswith("CREATE TABLE `users`")
        assert record.row_count == 2
        assert record.has_data

    def test_build_record_empty_table(self, extractor):
        """An empty table has no data."""
        record = extractor.build_record("orders")

        assert record.values == ""
        assert record.row_count == 0
        assert not record.has_data

    def test_build_record_zero_columns(self, server, extractor):
        """No record is produced for a zero-column table."""
        server.add_table("hollow", [])

        with pytest.raises(EmptySchemaError):
            extractor.build_record("hollow")

    def test_invalid_batch_size(self, server):
        """Batch size must be positive."""
        with pytest.raises(ValueError):
            TableExtractor(server.connect(), fetch_batch_size=0)
