# tests/test_ingest.py
from datetime import date, time

import pytest

from timetable_tracker.errors import ParseError
from timetable_tracker.ingest import ingest
from timetable_tracker.ledger import mark_attendance
from timetable_tracker.models import AppState, Weekday
from timetable_tracker.override import set_attendance_counters


def _twelve_rows():
    days = ["Monday", "Tuesday", "Wednesday", "Thursday"]
    times = ["09:00", "10:00", "11:00"]
    return [(d, t, f"Subject {i}", f"R{i}") for i, (d, t) in enumerate((d, t) for d in days for t in times)]


def test_ingest_resets_attendance_and_ledger():
    old = AppState.empty()
    for subject in ("Maths", "Physics", "Chemistry"):
        old = set_attendance_counters(old, subject, 10, 8)
        old = mark_attendance(old, subject, subject, True, on=date(2026, 10, 12))
    state = ingest(_twelve_rows())
    assert len(state.schedule) == 12
    assert state.attendance == {}
    assert state.daily_marks == {}
    # the previous state object is left as it was
    assert set(old.attendance) == {"Maths", "Physics", "Chemistry"}


def test_duplicate_slot_last_wins():
    state = ingest([
        ("Monday", "09:00", "Maths", "B1"),
        ("Monday", "09:00", "Physics", "Lab"),
    ])
    assert len(state.schedule) == 1
    assert state.schedule[0].subject == "Physics"
    assert state.schedule[0].room == "Lab"


def test_identities_are_deterministic_and_unique():
    rows = _twelve_rows()
    first = ingest(rows)
    second = ingest(list(reversed(rows)))
    ids = [e.id for e in first.schedule]
    assert len(set(ids)) == 12
    assert ids == [e.id for e in second.schedule]
    assert first.schedule[0].id == "Monday-09:00-1"


def test_entries_sorted_by_day_then_time():
    state = ingest([
        ("Friday", "09:00", "A", ""),
        ("Monday", "14:00", "B", ""),
        ("Monday", "09:30", "C", ""),
    ])
    assert [(e.day, e.time) for e in state.schedule] == [
        (Weekday.MONDAY, "09:30"), (Weekday.MONDAY, "14:00"), (Weekday.FRIDAY, "09:00"),
    ]


def test_values_are_normalized():
    state = ingest([("tue", time(9, 0), "  Maths ", None), (Weekday.WEDNESDAY, "2 pm", "Art", " Hall ")])
    tuesday, wednesday = state.schedule
    assert (tuesday.day, tuesday.time, tuesday.subject, tuesday.room) == (Weekday.TUESDAY, "09:00", "Maths", "")
    assert (wednesday.time, wednesday.room) == ("14:00", "Hall")


@pytest.mark.parametrize("row", [
    ("Funday", "09:00", "Maths", ""),
    ("Monday", "morning", "Maths", ""),
    ("Monday", "09:00", "   ", ""),
    ("Monday", "09:00"),
])
def test_bad_row_raises_parse_error(row):
    with pytest.raises(ParseError):
        ingest([("Monday", "10:00", "Physics", ""), row])


def test_empty_input_gives_empty_schedule():
    state = ingest([])
    assert state == AppState.empty()
