"""
Broker execution export parsers.

This module converts the broker's execution history CSV into canonical
ExecutionRecord objects. Two column layouts exist: the domestic layout
(Japanese equities, numeric security codes) and the foreign layout (US
equities, combined "name TICKER / Exchange" cell and localized dates).
The layout is detected from the document itself.
"""

import csv
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional, Sequence, TypeVar, Union

from ..config.defaults import ParserParams
from ..errors import FormatUndetectedError, MalformedRowError, NoRecordsParsedError
from ..logging.config import get_import_logger, log_import_result
from ..utils.time import localized_to_slash_date, parse_trade_date
from .encoding import decode_export
from .models import Country, ExecutionRecord, Layout, ParseResult, Side

logger = get_import_logger(__name__)

# Header marker tokens
EXECUTION_DATE_MARKER = "約定日"
SECURITY_CODE_MARKER = "銘柄コード"
DOMESTIC_EXECUTION_DATE_MARKER = "国内約定日"
SECURITY_NAME_MARKER = "銘柄名"

# Side description tokens
BUY_MARKER = "買"
SELL_MARKER = "売"

# Data-row heuristics
EXCHANGE_TOKENS = ("New York Stock Exchange", "NASDAQ")
SECURITY_CODE_PATTERN = re.compile(r"^\d{4,5}$")

PLACEHOLDER_CODE = "--"
SYMBOL_SEPARATOR = " / "
TICKER_PATTERN = re.compile(r"([A-Z]{2,5})\s*/")
TRAILING_TICKER_PATTERN = re.compile(r"\s+[A-Z]{2,5}\s*$")

T = TypeVar("T")


@dataclass(frozen=True)
class LayoutDetector:
    """A single detection rule mapping a predicate to a layout."""
    name: str
    layout: Layout
    predicate: Callable


def _is_domestic_header(line: str) -> bool:
    return SECURITY_CODE_MARKER in line


def _is_foreign_header(line: str) -> bool:
    return DOMESTIC_EXECUTION_DATE_MARKER in line and SECURITY_NAME_MARKER in line


def _has_exchange_cell(cells: Sequence[str]) -> bool:
    return any(token in cell for cell in cells for token in EXCHANGE_TOKENS)


def _has_security_code_cell(cells: Sequence[str]) -> bool:
    return any(SECURITY_CODE_PATTERN.match(cell) for cell in cells)


# Evaluated in order; the first matching detector decides the layout.
HEADER_DETECTORS: tuple[LayoutDetector, ...] = (
    LayoutDetector("domestic_header", Layout.DOMESTIC, _is_domestic_header),
    LayoutDetector("foreign_header", Layout.FOREIGN, _is_foreign_header),
)

ROW_DETECTORS: tuple[LayoutDetector, ...] = (
    LayoutDetector("exchange_name", Layout.FOREIGN, _has_exchange_cell),
    LayoutDetector("security_code", Layout.DOMESTIC, _has_security_code_cell),
)


def _first_match(detectors: Sequence[LayoutDetector],
                 candidates: Iterable[T]) -> Optional[LayoutDetector]:
    """Return the first detector matching any candidate, scanning candidates in order."""
    for candidate in candidates:
        for detector in detectors:
            if detector.predicate(candidate):
                return detector
    return None


def split_lines(text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def split_cells(line: str) -> list[str]:
    """Split one CSV line into cells with quotes and surrounding whitespace removed."""
    try:
        row = next(csv.reader([line]))
    except (csv.Error, StopIteration):
        row = line.split(",")
    return [cell.replace('"', "").strip() for cell in row]


def detect_layout(source: Union[str, Sequence[str]], scan_lines: int = 9) -> Layout:
    """
    Detect which export layout a document uses.

    Header lines are checked first. If no header marker is present the first
    ``scan_lines`` data lines (after the first line) are inspected for an
    exchange name or a 4-5 digit security code.

    Args:
        source: Decoded document text, or its lines
        scan_lines: Number of data lines inspected by the row heuristic

    Returns:
        Detected layout

    Raises:
        FormatUndetectedError: If neither headers nor data rows identify a layout
    """
    lines = split_lines(source) if isinstance(source, str) else list(source)

    detector = _first_match(HEADER_DETECTORS, lines)
    if detector is None:
        sample = lines[1:scan_lines + 1]
        detector = _first_match(ROW_DETECTORS, (split_cells(line) for line in sample))

    if detector is None:
        raise FormatUndetectedError(
            "Could not determine the export layout from headers or data rows",
            scanned_lines=len(lines),
        )

    logger.debug("Layout detected", layout=detector.layout.value, detector=detector.name)
    return detector.layout


def _find_header_index(lines: Sequence[str], markers: Sequence[str], layout: Layout) -> int:
    for index, line in enumerate(lines):
        if all(marker in line for marker in markers):
            return index
    raise FormatUndetectedError(
        f"Header row not found for {layout.value} layout",
        scanned_lines=len(lines),
        context={"layout": layout.value, "markers": list(markers)},
    )


def _side_from_description(description: str) -> Optional[Side]:
    """Derive the side from a description cell; None if absent or ambiguous."""
    is_buy = BUY_MARKER in description
    is_sell = SELL_MARKER in description
    if is_buy == is_sell:
        return None
    return Side.BUY if is_buy else Side.SELL


def _parse_number(value: str, column: str) -> float:
    """Parse a numeric cell, stripping thousands separators."""
    try:
        return float(value.replace(",", ""))
    except ValueError:
        raise MalformedRowError(f"Invalid {column} '{value}'", raw_row=value, column=column)


def _parse_date(value: str) -> date:
    try:
        return parse_trade_date(localized_to_slash_date(value))
    except ValueError as e:
        raise MalformedRowError(f"Invalid date '{value}': {e}", raw_row=value, column="date")


def split_symbol_cell(cell: str) -> tuple[str, str]:
    """
    Split a foreign-layout "name TICKER / Exchange" cell.

    Returns:
        Tuple of (ticker, display name). The ticker falls back to the whole
        cell when no ticker precedes the separator.
    """
    ticker_match = TICKER_PATTERN.search(cell)
    ticker = ticker_match.group(1) if ticker_match else cell
    name = TRAILING_TICKER_PATTERN.sub("", cell.split(SYMBOL_SEPARATOR)[0]).strip()
    return ticker, name


def parse_domestic_row(cells: Sequence[str], min_cells: int = 10) -> Optional[ExecutionRecord]:
    """
    Parse one domestic-layout row.

    Columns: 0 date, 1 name, 2 security code, 4 side description,
    8 quantity, 9 price.

    Returns:
        ExecutionRecord, or None for rows that are not equity executions

    Raises:
        MalformedRowError: If a numeric or date cell cannot be parsed
    """
    if len(cells) < min_cells:
        return None

    code = cells[2]
    if not code or code == PLACEHOLDER_CODE:
        return None  # funds carry no security code

    side = _side_from_description(cells[4])
    if side is None:
        return None

    return ExecutionRecord(
        symbol=code,
        name=cells[1],
        country=Country.JP,
        date=_parse_date(cells[0]),
        side=side,
        quantity=_parse_number(cells[8], "quantity"),
        price=_parse_number(cells[9], "price"),
    )


def parse_foreign_row(cells: Sequence[str], min_cells: int = 7) -> Optional[ExecutionRecord]:
    """
    Parse one foreign-layout row.

    Columns: 0 domestic execution date, 2 "name TICKER / Exchange",
    3 side description, 5 quantity, 6 price.

    Returns:
        ExecutionRecord, or None for rows that are not executions

    Raises:
        MalformedRowError: If a numeric or date cell cannot be parsed
    """
    if len(cells) < min_cells:
        return None

    side = _side_from_description(cells[3])
    if side is None:
        return None

    ticker, name = split_symbol_cell(cells[2])

    return ExecutionRecord(
        symbol=ticker,
        name=name,
        country=Country.US,
        date=_parse_date(cells[0]),
        side=side,
        quantity=_parse_number(cells[5], "quantity"),
        price=_parse_number(cells[6], "price"),
    )


def parse_execution_csv(text: str, params: Optional[ParserParams] = None,
                        layout: Optional[Layout] = None) -> ParseResult:
    """
    Parse a decoded execution export into execution records.

    Rows are parsed best-effort: rows that are not executions or that fail
    to parse are skipped and counted.

    Args:
        text: Decoded export text
        params: Parser parameters (defaults if omitted)
        layout: Layout already detected by the caller; detected here if omitted

    Returns:
        ParseResult with the detected layout, records and skipped-row count

    Raises:
        FormatUndetectedError: If the layout or its header row cannot be found
        NoRecordsParsedError: If no row produced a record
    """
    params = params or ParserParams()
    lines = split_lines(text)
    if layout is None:
        layout = detect_layout(lines, scan_lines=params.heuristic_scan_lines)

    if layout is Layout.DOMESTIC:
        markers = (EXECUTION_DATE_MARKER, SECURITY_CODE_MARKER)
        min_cells = params.min_cells_domestic
        parse_row = parse_domestic_row
    else:
        markers = (DOMESTIC_EXECUTION_DATE_MARKER, SECURITY_NAME_MARKER)
        min_cells = params.min_cells_foreign
        parse_row = parse_foreign_row

    header_index = _find_header_index(lines, markers, layout)

    records: list[ExecutionRecord] = []
    skipped = 0

    for line_no, line in enumerate(lines[header_index + 1:], start=header_index + 2):
        try:
            record = parse_row(split_cells(line), min_cells)
        except MalformedRowError as e:
            logger.debug("Skipping malformed row", line=line_no, error=str(e), column=e.column)
            skipped += 1
            continue

        if record is None:
            skipped += 1
            continue

        records.append(record)

    if not records:
        raise NoRecordsParsedError(
            f"No executions parsed from {layout.value} export",
            layout=layout.value,
            skipped_rows=skipped,
        )

    log_import_result(logger, layout.value, len(records), skipped)
    return ParseResult(layout=layout, records=records, skipped_rows=skipped)


def parse_execution_export(data: Union[bytes, bytearray, str],
                           params: Optional[ParserParams] = None) -> ParseResult:
    """
    Decode and parse a raw execution export.

    Args:
        data: Raw export bytes (or already decoded text)
        params: Parser parameters; ``params.encoding`` selects the codec

    Returns:
        ParseResult as returned by parse_execution_csv
    """
    params = params or ParserParams()
    return parse_execution_csv(decode_export(data, params.encoding), params)
