"""Decoding of uploaded spreadsheets and delimited text into a RawTable.

Only the first sheet of a workbook is read. Header text is taken from the
first row that has any non-empty cell; rows that are entirely empty are
skipped.
"""

import csv
import io
import zipfile
from datetime import date, datetime
from typing import Any, Iterable, Sequence
from xml.etree import ElementTree

import openpyxl
import xlrd
from openpyxl.utils.exceptions import InvalidFileException

from finport.domain import errors
from finport.domain.entities import Cell, FileFormat, RawTable
from finport.logging_setup import get_logger

logger = get_logger(__name__)

CSV_DELIMITERS = ",;\t|"
CSV_ENCODINGS = ("utf-8-sig", "cp1252")
SNIFF_SAMPLE_SIZE = 4096

# Container signatures: Office Open XML is a zip archive, BIFF lives in OLE2
ZIP_SIGNATURE = b"PK\x03\x04"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

_XLSX_ERRORS = (
    zipfile.BadZipFile,
    InvalidFileException,
    ElementTree.ParseError,
    KeyError,
    EOFError,
    OSError,
    ValueError,
)


def normalize_cell(value: Any) -> Cell:
    """Convert a container value into a pipeline cell.

    Numbers and dates keep their type, text is trimmed (empty becomes None),
    booleans and anything else become text.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, datetime, date)):
        return value
    text = str(value).strip()
    return text or None


def unique_header(name: str, used: set[str]) -> str:
    """Return ``name``, or ``name (N)`` with the lowest N >= 2 not in ``used``."""
    if name not in used:
        return name
    counter = 2
    while f"{name} ({counter})" in used:
        counter += 1
    return f"{name} ({counter})"


def build_table(raw_rows: Iterable[Sequence[Any]], file_name: str = "file") -> RawTable:
    """Assemble a RawTable from positional rows.

    Raises:
        EmptyFileError: If there is no header row or no data row
    """
    header_positions: list[tuple[int, str]] = []
    rows: list[dict[str, Cell]] = []

    for raw in raw_rows:
        cells = [normalize_cell(value) for value in raw]
        if all(cell is None for cell in cells):
            continue

        if not header_positions:
            used: set[str] = set()
            for position, cell in enumerate(cells):
                if cell is None:
                    continue
                name = unique_header(str(cell), used)
                used.add(name)
                header_positions.append((position, name))
            continue

        rows.append(
            {
                name: cells[position] if position < len(cells) else None
                for position, name in header_positions
            }
        )

    if not header_positions or not rows:
        raise errors.EmptyFileError(errors.empty_file(file_name))

    logger.debug("Parsed %s: %d columns, %d data rows", file_name, len(header_positions), len(rows))
    return RawTable(
        headers=tuple(name for _, name in header_positions),
        rows=tuple(rows),
    )


def decode_text(payload: bytes, file_name: str = "file") -> str:
    """Decode delimited text, preferring UTF-8.

    Raises:
        UnreadableFileError: If no supported encoding fits
    """
    for encoding in CSV_ENCODINGS:
        try:
            return payload.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise errors.UnreadableFileError(
        errors.unreadable_file(file_name, "text is not UTF-8 or Windows-1252")
    )


def read_csv_rows(payload: bytes, file_name: str = "file") -> list[list[str]]:
    """Split delimited text into rows of strings."""
    text = decode_text(payload, file_name)
    sample = text[:SNIFF_SAMPLE_SIZE]
    try:
        delimiter = csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        delimiter = ","

    try:
        return list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
    except csv.Error as e:
        raise errors.UnreadableFileError(errors.unreadable_file(file_name, e)) from e


def read_xlsx_rows(payload: bytes, file_name: str = "file") -> list[tuple[Any, ...]]:
    """Read the first worksheet of an Office Open XML workbook."""
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(payload), read_only=True, data_only=True)
    except _XLSX_ERRORS as e:
        raise errors.UnreadableFileError(errors.unreadable_file(file_name, e)) from e

    try:
        if not workbook.worksheets:
            raise errors.EmptyFileError(errors.empty_file(file_name))
        sheet = workbook.worksheets[0]
        # Read-only sheets parse their XML lazily, while rows are iterated
        try:
            return [tuple(row) for row in sheet.iter_rows(values_only=True)]
        except _XLSX_ERRORS as e:
            raise errors.UnreadableFileError(errors.unreadable_file(file_name, e)) from e
    finally:
        workbook.close()


def read_xls_rows(payload: bytes, file_name: str = "file") -> list[list[Any]]:
    """Read the first sheet of a legacy BIFF workbook."""
    try:
        book = xlrd.open_workbook(file_contents=payload)
    except (xlrd.XLRDError, OSError, ValueError, AssertionError) as e:
        raise errors.UnreadableFileError(errors.unreadable_file(file_name, e)) from e

    if book.nsheets == 0:
        raise errors.EmptyFileError(errors.empty_file(file_name))
    sheet = book.sheet_by_index(0)

    rows = []
    for row_idx in range(sheet.nrows):
        values: list[Any] = []
        for cell in sheet.row(row_idx):
            if cell.ctype == xlrd.XL_CELL_DATE:
                try:
                    values.append(xlrd.xldate.xldate_as_datetime(cell.value, book.datemode))
                except (xlrd.xldate.XLDateError, OverflowError):
                    values.append(cell.value)
            elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                values.append(bool(cell.value))
            elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
                values.append(None)
            else:
                values.append(cell.value)
        rows.append(values)
    return rows


_READERS = {
    FileFormat.CSV: read_csv_rows,
    FileFormat.XLSX: read_xlsx_rows,
    FileFormat.XLS: read_xls_rows,
}


def workbook_container(payload: bytes, file_format: FileFormat) -> FileFormat:
    """Pick the workbook reader from the payload's signature.

    Bank portals often name xlsx downloads '.xls', so for workbooks the
    leading bytes win over the extension. CSV and
    payloads without a known signature keep the declared format.
    """
    if file_format is FileFormat.CSV:
        return file_format
    if payload.startswith(ZIP_SIGNATURE):
        return FileFormat.XLSX
    if payload.startswith(OLE2_SIGNATURE):
        return FileFormat.XLS
    return file_format


def parse_table(payload: bytes, file_format: FileFormat, file_name: str = "file") -> RawTable:
    """Decode an uploaded payload into headers and rows.

    Args:
        payload: Validated file contents
        file_format: Format detected by the validator from the extension
        file_name: Name used in error messages

    Returns:
        RawTable for the first sheet

    Raises:
        UnreadableFileError: If the payload cannot be decoded
        EmptyFileError: If fewer than a header and one data row exist
    """
    container = workbook_container(payload, file_format)
    if container is not file_format:
        logger.debug("%s is a %s workbook despite its extension", file_name, container.value)
    reader = _READERS[container]
    return build_table(reader(payload, file_name), file_name)
