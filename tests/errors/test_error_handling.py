"""
Error handling tests for execution import and trade storage.

Tests cover the error hierarchy, row-level recovery during parsing and
propagation of document-level failures.
"""

import sqlite3
from unittest.mock import patch

import pytest

from tradelog_app.data.parsers import parse_execution_csv
from tradelog_app.errors import (
    FormatUndetectedError,
    ImportDataError,
    MalformedRowError,
    NoRecordsParsedError,
    PersistenceError,
    SystemFailureError,
)
from tradelog_app.persistence import TradeStore


class TestErrorClassification:
    """Test error classification system."""

    def test_import_error_hierarchy(self):
        """Document-level import errors are terminal for the document."""
        base_error = ImportDataError("base error")
        assert base_error.recoverable is False
        assert base_error.context == {}

        undetected = FormatUndetectedError("no layout", scanned_lines=12)
        assert isinstance(undetected, ImportDataError)
        assert undetected.scanned_lines == 12
        assert undetected.user_message.startswith("Could not recognize the file format")

        empty = NoRecordsParsedError("nothing parsed", layout="domestic", skipped_rows=3)
        assert isinstance(empty, ImportDataError)
        assert empty.layout == "domestic"
        assert empty.skipped_rows == 3
        assert empty.recoverable is False

    def test_malformed_row_is_recoverable(self):
        error = MalformedRowError("bad price", raw_row="abc", column="price")
        assert isinstance(error, ImportDataError)
        assert error.recoverable is True
        assert error.column == "price"

    def test_system_failure_hierarchy(self):
        error = PersistenceError("insert failed", operation="insert", target="executions",
                                 context={"rows": 2})
        assert isinstance(error, SystemFailureError)
        assert error.recoverable is False
        assert error.operation == "insert"
        assert error.target == "executions"
        assert error.context == {"rows": 2}

    def test_context_is_preserved(self):
        error = FormatUndetectedError("no header", context={"layout": "foreign"})
        assert error.context == {"layout": "foreign"}


class TestRowLevelRecovery:
    """Rows that fail to parse are skipped without failing the document."""

    HEADER = '"約定日","銘柄","銘柄コード","市場","取引","期限","預り","課税","約定数量","約定単価"'

    def test_bad_number_skipped(self):
        text = "\n".join([
            self.HEADER,
            '"2025/10/03","トヨタ自動車","7203","東証","株式現物買","--","特定","--","abc","2,500"',
            '"2025/10/06","ソニーグループ","6758","東証","株式現物買","--","特定","--","100","3,100"',
        ])
        result = parse_execution_csv(text)

        assert [r.symbol for r in result.records] == ["6758"]
        assert result.skipped_rows == 1

    def test_bad_date_skipped(self):
        text = "\n".join([
            self.HEADER,
            '"not a date","トヨタ自動車","7203","東証","株式現物買","--","特定","--","100","2,500"',
            '"2025/10/06","ソニーグループ","6758","東証","株式現物売","--","特定","--","100","3,100"',
        ])
        result = parse_execution_csv(text)

        assert len(result.records) == 1
        assert result.skipped_rows == 1

    def test_non_positive_quantity_skipped(self):
        text = "\n".join([
            self.HEADER,
            '"2025/10/03","トヨタ自動車","7203","東証","株式現物買","--","特定","--","0","2,500"',
            '"2025/10/06","ソニーグループ","6758","東証","株式現物買","--","特定","--","100","3,100"',
        ])
        result = parse_execution_csv(text)

        assert len(result.records) == 1
        assert result.skipped_rows == 1

    def test_all_rows_bad_raises(self):
        text = "\n".join([
            self.HEADER,
            '"2025/10/03","トヨタ自動車","7203","東証","株式現物買","--","特定","--","abc","2,500"',
        ])
        with pytest.raises(NoRecordsParsedError) as exc_info:
            parse_execution_csv(text)

        assert exc_info.value.layout == "domestic"
        assert exc_info.value.skipped_rows == 1


class TestDocumentLevelFailures:
    """Document-level failures propagate to the caller."""

    def test_unrecognized_document(self):
        with pytest.raises(FormatUndetectedError):
            parse_execution_csv("symbol,qty\nfoo,bar\n")

    def test_layout_without_header_row(self):
        # detected by the exchange-name heuristic, but no header row exists
        text = "\n".join([
            "preamble",
            '"2026年01月30日","USD","AMTM / New York Stock Exchange","買付","特定","10","25.50"',
        ])
        with pytest.raises(FormatUndetectedError) as exc_info:
            parse_execution_csv(text)

        assert exc_info.value.context["layout"] == "foreign"


class TestStoreFailures:
    """Storage failures surface as PersistenceError."""

    def test_sqlite_error_wrapped(self, tmp_path):
        store = TradeStore(str(tmp_path / "errors.db"))

        with patch("tradelog_app.persistence.trade_store.sqlite3.connect",
                   side_effect=sqlite3.OperationalError("database is locked")):
            with pytest.raises(PersistenceError) as exc_info:
                store.list_executions()

        assert exc_info.value.operation == "select"
        assert exc_info.value.target == "executions"
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
