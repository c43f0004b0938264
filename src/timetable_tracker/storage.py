"""Load and save the application state as one JSON document."""
import json
import logging
import sqlite3
from datetime import datetime

from timetable_tracker.db import get_connection
from timetable_tracker.errors import ParseError
from timetable_tracker.models import AppState, AttendanceCounters, Mark, ScheduleEntry, Weekday, slot_id
from timetable_tracker.schedule import normalize_time

logger = logging.getLogger(__name__)

STORAGE_KEY = "timetable-app-data"


def state_to_document(state: AppState) -> dict:
    return {
        "timetable": [
            {"day": e.day.value, "time": e.time, "subject": e.subject, "room": e.room, "id": e.id}
            for e in state.schedule
        ],
        "attendance": {
            subject: {"total": c.total, "present": c.present}
            for subject, c in state.attendance.items()
        },
        "dailyAttendance": {
            day: {key: Mark(mark).value for key, mark in marks.items()}
            for day, marks in state.daily_marks.items()
        },
    }


def _entry_from_document(item: dict):
    if str(item["day"]).strip().lower() in ("saturday", "sunday"):
        logger.warning("Dropping stored weekend class %r", item.get("subject"))
        return None
    day = Weekday.parse(item["day"])
    time = normalize_time(item["time"])
    # entries saved before slot identities existed have no id
    entry_id = item.get("id") or slot_id(day, time)
    return ScheduleEntry(day, time, str(item["subject"]), str(item.get("room") or ""), str(entry_id))


def _counters_from_document(value: dict) -> AttendanceCounters:
    total = max(0, int(value["total"]))
    present = max(0, min(int(value["present"]), total))
    return AttendanceCounters(total=total, present=present)


def state_from_document(doc: dict) -> AppState:
    """Rebuild a state; raises KeyError, TypeError or ValueError on a bad shape."""
    if not isinstance(doc, dict):
        raise TypeError(f"expected an object, got {type(doc).__name__}")
    schedule = []
    for item in doc.get("timetable") or []:
        entry = _entry_from_document(item)
        if entry is not None:
            schedule.append(entry)
    attendance = {
        str(subject): _counters_from_document(value)
        for subject, value in (doc.get("attendance") or {}).items()
    }
    daily_marks = {
        str(day): {str(key): Mark(mark) for key, mark in marks.items()}
        for day, marks in (doc.get("dailyAttendance") or {}).items()
    }
    return AppState(schedule=tuple(schedule), attendance=attendance, daily_marks=daily_marks)


def load_state(db_path: str) -> AppState:
    """Load the saved state, or an empty one if there is none or it is corrupt.

    A corrupt record is left in place; the next save replaces it.
    """
    try:
        conn = get_connection(db_path)
        try:
            row = conn.execute("SELECT value FROM app_data WHERE key = ?", (STORAGE_KEY,)).fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.warning("Data store is unreadable, starting empty: %s", e)
        return AppState.empty()
    if row is None:
        return AppState.empty()
    try:
        return state_from_document(json.loads(row["value"]))
    except (ParseError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning("Saved data is unreadable, starting empty: %s", e)
        return AppState.empty()


def save_state(db_path: str, state: AppState) -> bool:
    """Persist the state. Failures are logged and reported as False."""
    payload = json.dumps(state_to_document(state), ensure_ascii=False)
    try:
        conn = get_connection(db_path)
        try:
            with conn:
                conn.execute(
                    "INSERT INTO app_data (key, value, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                    (STORAGE_KEY, payload, datetime.now().isoformat()),
                )
        finally:
            conn.close()
    except (sqlite3.Error, OSError):
        logger.exception("Failed to save data")
        return False
    return True
