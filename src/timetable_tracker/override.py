"""Manual correction of a subject's attendance counters."""
import re
from dataclasses import replace

from timetable_tracker.models import AppState, AttendanceCounters


def parse_count(text) -> int:
    """Read a count typed by the user from its leading digits, else 0."""
    match = re.match(r"\s*([+-]?\d+)", str(text))
    return int(match.group(1)) if match else 0


def set_attendance_counters(state: AppState, subject: str, new_total: int, new_present: int) -> AppState:
    """Overwrite a subject's counters, clamping them into a consistent pair.

    Negative totals become 0 and present is capped to [0, total]; bad input
    is never rejected. The daily ledger is left alone: a class marked later
    the same day is still counted on top of these totals if it was not marked
    before, and corrected in place if it was.
    """
    total = max(0, new_total)
    present = max(0, min(new_present, total))
    attendance = dict(state.attendance)
    attendance[subject] = AttendanceCounters(total=total, present=present)
    return replace(state, attendance=attendance)
