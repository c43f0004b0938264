"""Daily attendance ledger.

Cumulative counters only grow ``total`` the first time a class occurrence is
marked on a given day. Marking it again the same day corrects ``present``
instead of counting a new class, so a wrong tap can always be undone.
"""
from dataclasses import replace
from datetime import date
from typing import Optional

from timetable_tracker.models import AppState, AttendanceCounters, Mark, MarkStatus


def date_key(on: Optional[date] = None) -> str:
    """Calendar-day key used in the ledger (ISO, locale independent)."""
    return (on or date.today()).isoformat()


def mark_attendance(
    state: AppState,
    class_key: str,
    subject: str,
    is_present: bool,
    on: Optional[date] = None,
) -> AppState:
    """Record today's outcome for one class and return the new state.

    Args:
        state: Current application state (left untouched).
        class_key: Identity of the class occurrence, normally the schedule
            entry id. The subject name is accepted for classes that have no
            schedule entry.
        subject: Subject whose counters are updated.
        is_present: True for present, False for absent.
        on: Day being marked, defaults to today.

    Returns:
        A new AppState with updated counters and daily marks.
    """
    if not subject or not subject.strip():
        raise ValueError("subject must not be empty")
    day = date_key(on)
    new_mark = Mark.from_bool(is_present)
    previous = state.daily_marks.get(day, {}).get(class_key)

    counters = state.counters(subject)
    if previous is None:
        counters = AttendanceCounters(
            total=counters.total + 1,
            present=counters.present + (1 if is_present else 0),
        )
    elif previous != new_mark:
        if is_present:
            present = min(counters.present + 1, counters.total)
        else:
            present = max(counters.present - 1, 0)
        counters = AttendanceCounters(total=counters.total, present=present)

    attendance = dict(state.attendance)
    attendance[subject] = counters
    daily_marks = dict(state.daily_marks)
    daily_marks[day] = {**state.daily_marks.get(day, {}), class_key: new_mark}
    return replace(state, attendance=attendance, daily_marks=daily_marks)


def daily_status(
    daily_marks: dict,
    class_key: str,
    on: Optional[date] = None,
    subject: Optional[str] = None,
) -> MarkStatus:
    """Look up what was recorded for a class on a day.

    Falls back to the subject name for records written before marks were
    keyed by schedule entry.
    """
    marks = daily_marks.get(date_key(on), {})
    mark = marks.get(class_key)
    if mark is None and subject:
        mark = marks.get(subject)
    if mark is None:
        return MarkStatus.NONE
    return MarkStatus(Mark(mark).value)
