"""
Import error classifications for broker execution exports.

A failed document is terminal for that document: the caller surfaces the
error to the user and does not retry. Row-level problems are recovered
locally by skipping the row.
"""

from typing import Any, Optional


class ImportDataError(Exception):
    """Base class for problems with an imported execution document."""

    user_message = "The file could not be imported."

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class FormatUndetectedError(ImportDataError):
    """Neither layout's header nor the data-row heuristic matched."""

    user_message = (
        "Could not recognize the file format. "
        "Check that the file is an execution history CSV exported from the broker."
    )

    def __init__(self, message: str, scanned_lines: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.scanned_lines = scanned_lines


class NoRecordsParsedError(ImportDataError):
    """A layout was detected but no data row survived row-level filtering."""

    user_message = (
        "No executions were found in the file. "
        "Check that the file is a supported execution history export."
    )

    def __init__(self, message: str, layout: Optional[str] = None,
                 skipped_rows: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.layout = layout
        self.skipped_rows = skipped_rows


class MalformedRowError(ImportDataError):
    """A single row is unusable. Recovered by skipping the row."""

    def __init__(self, message: str, raw_row: Optional[str] = None,
                 column: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_row = raw_row
        self.column = column
        self.recoverable = True
