"""Threshold projections for attendance counters."""
import math
from fractions import Fraction

from timetable_tracker.models import AppState, AttendanceCounters, Projection, ProjectionStatus
from timetable_tracker.schedule import subjects

DEFAULT_THRESHOLD = 75
WARNING_BAND = 10  # percentage points below the threshold


def _ratio(threshold) -> Fraction:
    if not 0 < threshold < 100:
        raise ValueError(f"threshold must be between 0 and 100, got {threshold}")
    return Fraction(threshold) / 100


def get_status(percentage: int, threshold=DEFAULT_THRESHOLD) -> ProjectionStatus:
    if percentage >= threshold:
        return ProjectionStatus.GOOD
    elif percentage >= threshold - WARNING_BAND:
        return ProjectionStatus.WARNING
    return ProjectionStatus.DANGER


def project_subject(counters: AttendanceCounters, threshold=DEFAULT_THRESHOLD) -> Projection:
    """Project a subject's counters against the attendance threshold.

    can_miss is the largest m with present / (total + m) >= t, and
    need_to_attend the smallest n with (present + n) / (total + n) >= t,
    where t = threshold / 100. Evaluated with exact fractions.
    """
    t = _ratio(threshold)
    if counters.total == 0:
        return Projection(0, 0, 0, ProjectionStatus.UNKNOWN)

    # Round half up, as percentages are shown to the user.
    percentage = math.floor(Fraction(100 * counters.present, counters.total) + Fraction(1, 2))
    can_miss = max(0, math.floor((counters.present - t * counters.total) / t))
    need_to_attend = 0
    if percentage < threshold:
        need_to_attend = max(0, math.ceil((t * counters.total - counters.present) / (1 - t)))
    return Projection(
        percentage=percentage,
        can_miss=can_miss,
        need_to_attend=need_to_attend,
        status=get_status(percentage, threshold),
    )


def subject_summary(state: AppState, threshold=DEFAULT_THRESHOLD) -> list[dict]:
    """One row per tracked subject: timetable subjects first, then any others."""
    names = subjects(state)
    names += [name for name in state.attendance if name not in names]
    rows = []
    for name in names:
        counters = state.counters(name)
        rows.append({
            "subject": name,
            "present": counters.present,
            "total": counters.total,
            "missed": counters.missed,
            "projection": project_subject(counters, threshold),
        })
    return rows
