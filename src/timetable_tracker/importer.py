"""Read timetable grids from spreadsheet and text formats.

The expected layout is a weekly grid: the first row holds the day names
(its first cell is the time column header), the first column holds the
start times, and each cell is ``Subject (Room)`` or just ``Subject``.
"""
import csv
import json
import logging
import re
from pathlib import Path

from timetable_tracker.errors import ParseError
from timetable_tracker.models import Weekday

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".xlsx", ".xlsm", ".csv", ".json", ".yaml", ".yml")
WEEKEND = ("saturday", "sunday")

_CELL_RE = re.compile(r"^(.+?)\s*\((.+?)\)\s*$")


def read_grid(file_path: str) -> list[list]:
    """Return the rows of the first sheet (or the document) as lists."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if not path.exists():
        raise ParseError(f"File not found: {file_path}")

    try:
        if suffix in (".xlsx", ".xlsm"):
            from openpyxl import load_workbook
            workbook = load_workbook(file_path, read_only=True, data_only=True)
            try:
                sheet = workbook.worksheets[0]
                return [list(row) for row in sheet.iter_rows(values_only=True)]
            finally:
                workbook.close()
        elif suffix == ".csv":
            with open(path, newline="", encoding="utf-8-sig") as f:
                return [row for row in csv.reader(f)]
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            import yaml
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise ParseError(
                f"Unsupported file type {suffix or '(none)'}; use one of {', '.join(SUPPORTED_SUFFIXES)}"
            )
    except ParseError:
        raise
    except Exception as e:
        raise ParseError(f"Could not read {path.name}: {e}") from e

    if not isinstance(data, list) or not all(isinstance(row, list) for row in data):
        raise ParseError(f"{path.name} must contain a list of rows")
    return data


def split_cell(value) -> tuple[str, str]:
    """Split ``"Maths (B12)"`` into subject and room."""
    text = str(value).strip()
    match = _CELL_RE.match(text)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return text, ""


def _header_day(value):
    """Weekday for a header cell, None for columns to skip."""
    text = str(value or "").strip()
    if not text:
        return None
    if any(len(text) >= 3 and name.startswith(text.lower()) for name in WEEKEND):
        logger.warning("Skipping weekend column %r", text)
        return None
    try:
        return Weekday.parse(text)
    except ValueError:
        raise ParseError(f"Unrecognized day in header: {text!r}") from None


def parse_grid(rows: list[list]) -> list[tuple]:
    """Extract (day, time, subject, room) tuples from a weekly grid."""
    if len(rows) < 2:
        raise ParseError("No classes found: the grid needs a header row and at least one time row")
    days = [_header_day(cell) for cell in rows[0][1:]]

    entries = []
    for row in rows[1:]:
        if not row or row[0] is None or str(row[0]).strip() == "":
            continue
        time = row[0]
        for day, cell in zip(days, row[1:]):
            if day is None or cell is None:
                continue
            subject, room = split_cell(cell)
            if subject:
                entries.append((day, time, subject, room))
    if not entries:
        raise ParseError("No classes found in the timetable")
    logger.debug("Parsed %d timetable cells", len(entries))
    return entries


def parse_file(file_path: str) -> list[tuple]:
    return parse_grid(read_grid(file_path))
