"""Weekly schedule queries and single-slot edits."""
import re
from dataclasses import replace
from datetime import date, datetime, time as dt_time
from typing import Optional

from timetable_tracker.errors import ParseError
from timetable_tracker.models import AppState, ScheduleEntry, Weekday, slot_id

DEFAULT_TIMES = ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"]
PREVIEW_HEADER = ["Day", "Time", "Subject", "Room"]

# "9:00", "09.00", "9am", "14:00-15:00" (start of a range); nothing else may follow
_TIME_RE = re.compile(
    r"^\s*(\d{1,2})(?:\s*[:.]\s*(\d{2}))?\s*(?:([ap])\.?\s*m\.?)?"
    r"\s*(?:-\s*\d{1,2}(?:\s*[:.]\s*\d{2})?\s*(?:[ap]\.?\s*m\.?)?\s*)?$",
    re.IGNORECASE,
)


def normalize_time(value) -> str:
    """Return a slot time as ``HH:MM`` or raise ParseError."""
    if isinstance(value, (datetime, dt_time)):
        return value.strftime("%H:%M")
    if isinstance(value, float) and 0 <= value < 1:
        # spreadsheet time stored as a fraction of a day
        minutes = round(value * 24 * 60)
        return f"{minutes // 60:02d}:{minutes % 60:02d}"
    text = str(value).strip()
    match = _TIME_RE.match(text)
    if not text or not match or (match.group(2) is None and match.group(3) is None):
        raise ParseError(f"unrecognized time: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower()
    if meridiem and not 1 <= hour <= 12:
        raise ParseError(f"unrecognized time: {value!r}")
    if meridiem == "p" and hour != 12:
        hour += 12
    elif meridiem == "a" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        raise ParseError(f"unrecognized time: {value!r}")
    return f"{hour:02d}:{minute:02d}"


def find_entry(state: AppState, day: Weekday, time: str) -> Optional[ScheduleEntry]:
    for entry in state.schedule:
        if entry.day == day and entry.time == time:
            return entry
    return None


def classes_for_day(state: AppState, day: Optional[Weekday]) -> list[ScheduleEntry]:
    if day is None:
        return []
    entries = [e for e in state.schedule if e.day == day and e.subject.strip()]
    return sorted(entries, key=lambda e: e.time)


def todays_classes(state: AppState, today: Optional[date] = None) -> list[ScheduleEntry]:
    return classes_for_day(state, Weekday.today(today))


def subjects(state: AppState) -> list[str]:
    """Unique subjects in timetable order."""
    seen = []
    for entry in state.schedule:
        if entry.subject not in seen:
            seen.append(entry.subject)
    return seen


def time_slots(state: AppState) -> list[str]:
    """Rows of the weekly grid: every scheduled time, or the default day."""
    times = sorted({e.time for e in state.schedule})
    return times or list(DEFAULT_TIMES)


def update_entry(state: AppState, day: Weekday, time: str, subject: str, room: str = "") -> AppState:
    """Set the class in one slot, keeping its identity if it already exists.

    Attendance counters are not touched, even when the subject is renamed.
    """
    subject = subject.strip()
    if not subject:
        raise ValueError("subject must not be empty")
    time = normalize_time(time)
    schedule = list(state.schedule)
    for index, entry in enumerate(schedule):
        if entry.day == day and entry.time == time:
            schedule[index] = replace(entry, subject=subject, room=room.strip())
            break
    else:
        schedule.append(ScheduleEntry(day, time, subject, room.strip(), slot_id(day, time)))
    return replace(state, schedule=tuple(schedule))


def preview_rows(entries) -> list[list[str]]:
    """Table of parsed entries shown before an upload is confirmed."""
    rows = [list(PREVIEW_HEADER)]
    for entry in entries:
        rows.append([entry.day.value, entry.time, entry.subject, entry.room])
    return rows
