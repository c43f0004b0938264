# tests/test_integration.py
"""End-to-end test of the core workflow."""
from datetime import date

from timetable_tracker.db import init_db
from timetable_tracker.importer import parse_file
from timetable_tracker.ingest import ingest
from timetable_tracker.ledger import daily_status, mark_attendance
from timetable_tracker.models import AttendanceCounters, MarkStatus, ProjectionStatus
from timetable_tracker.override import set_attendance_counters
from timetable_tracker.projection import project_subject, subject_summary
from timetable_tracker.schedule import todays_classes
from timetable_tracker.settings import get_threshold, set_threshold
from timetable_tracker.storage import load_state, save_state

MONDAY = date(2026, 10, 12)
TUESDAY = date(2026, 10, 13)


def test_full_week_workflow(tmp_db, tmp_path):
    """Upload a timetable, mark a few days, correct mistakes and reload."""
    init_db(tmp_db)
    f = tmp_path / "week.csv"
    f.write_text(
        "Time,Mon,Tue,Wed,Thu,Fri\n"
        "09:00,Maths (B12),Physics,Maths,Physics,Maths\n"
        "11:00,Physics (Lab 1),,,Chemistry,\n"
    )
    state = ingest(parse_file(str(f)))
    assert len(state.schedule) == 7
    save_state(tmp_db, state)

    # Monday: attend Maths, miss Physics, then fix the Physics mark
    monday = todays_classes(state, MONDAY)
    assert [c.subject for c in monday] == ["Maths", "Physics"]
    state = mark_attendance(state, monday[0].id, monday[0].subject, True, on=MONDAY)
    state = mark_attendance(state, monday[1].id, monday[1].subject, False, on=MONDAY)
    state = mark_attendance(state, monday[1].id, monday[1].subject, True, on=MONDAY)
    save_state(tmp_db, state)

    # Tuesday: miss Physics, tapping twice by accident
    tuesday = todays_classes(state, TUESDAY)
    state = mark_attendance(state, tuesday[0].id, "Physics", False, on=TUESDAY)
    state = mark_attendance(state, tuesday[0].id, "Physics", False, on=TUESDAY)
    save_state(tmp_db, state)

    state = load_state(tmp_db)
    assert state.attendance["Maths"] == AttendanceCounters(total=1, present=1)
    assert state.attendance["Physics"] == AttendanceCounters(total=2, present=1)
    assert daily_status(state.daily_marks, monday[1].id, on=MONDAY) == MarkStatus.PRESENT

    # import history from before the app was used
    state = set_attendance_counters(state, "Chemistry", 20, 14)
    save_state(tmp_db, state)
    set_threshold(tmp_db, 70)

    state = load_state(tmp_db)
    threshold = get_threshold(tmp_db)
    chemistry = project_subject(state.attendance["Chemistry"], threshold)
    assert chemistry.percentage == 70
    assert chemistry.status == ProjectionStatus.GOOD
    assert chemistry.can_miss == 0

    rows = {r["subject"]: r for r in subject_summary(state, threshold)}
    assert rows["Physics"]["projection"].status == ProjectionStatus.DANGER
    assert rows["Physics"]["projection"].need_to_attend == 2

    # uploading again wipes attendance
    state = ingest(parse_file(str(f)))
    save_state(tmp_db, state)
    assert load_state(tmp_db).attendance == {}
