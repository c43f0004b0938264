"""Turn parsed timetable rows into a fresh application state."""
import logging

from timetable_tracker.errors import ParseError
from timetable_tracker.models import AppState, ScheduleEntry, Weekday, slot_id
from timetable_tracker.schedule import normalize_time

logger = logging.getLogger(__name__)


def _entry_from_row(index: int, row) -> ScheduleEntry:
    try:
        day, time, subject, room = row
    except (TypeError, ValueError):
        raise ParseError(f"row {index}: expected (day, time, subject, room), got {row!r}") from None
    try:
        day = Weekday.parse(day)
    except ValueError as e:
        raise ParseError(f"row {index}: {e}") from None
    try:
        time = normalize_time(time)
    except ParseError as e:
        raise ParseError(f"row {index}: {e}") from None
    subject = str(subject or "").strip()
    if not subject:
        raise ParseError(f"row {index}: empty subject")
    return ScheduleEntry(day, time, subject, str(room or "").strip(), slot_id(day, time))


def ingest(parsed_entries) -> AppState:
    """Build the state for a newly uploaded timetable.

    Every row is validated before anything is built, so a ParseError means
    the caller's current state is still the one to keep. Rows sharing a
    (day, time) slot collapse to the last one. Attendance and the daily
    ledger start empty.
    """
    slots = {}
    for index, row in enumerate(parsed_entries, 1):
        entry = _entry_from_row(index, row)
        slots[(entry.day, entry.time)] = entry
    # ids derive from (day, time), so they are unique once slots are collapsed
    schedule = sorted(slots.values(), key=lambda e: (e.day.column, e.time))
    logger.info("Ingested %d classes across %d subjects", len(schedule), len({e.subject for e in schedule}))
    return AppState(schedule=tuple(schedule), attendance={}, daily_marks={})
