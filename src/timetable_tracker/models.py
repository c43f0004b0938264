"""Data classes for the timetable and attendance domain model."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"

    @property
    def column(self) -> int:
        """1-based position of the day in the weekly grid."""
        return list(Weekday).index(self) + 1

    @classmethod
    def parse(cls, value) -> "Weekday":
        """Accept a Weekday, a full day name or an abbreviation of 3+ letters."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if len(text) >= 3:
            for day in cls:
                if day.value.lower().startswith(text):
                    return day
        raise ValueError(f"not a weekday: {value!r}")

    @classmethod
    def today(cls, on: Optional[date] = None) -> Optional["Weekday"]:
        """Weekday for the given date (default today), None on weekends."""
        index = (on or date.today()).weekday()
        days = list(cls)
        return days[index] if index < len(days) else None


class Mark(str, Enum):
    """A recorded outcome for one class occurrence."""
    PRESENT = "present"
    ABSENT = "absent"

    @classmethod
    def from_bool(cls, is_present: bool) -> "Mark":
        return cls.PRESENT if is_present else cls.ABSENT


class MarkStatus(str, Enum):
    """Result of looking up a class in the daily ledger."""
    NONE = "none"
    PRESENT = "present"
    ABSENT = "absent"


class ProjectionStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"
    UNKNOWN = "unknown"


def slot_id(day: Weekday, time: str) -> str:
    """Stable identity of a weekly slot, e.g. ``Monday-09:00-1``."""
    return f"{day.value}-{time}-{day.column}"


@dataclass(frozen=True)
class ScheduleEntry:
    day: Weekday
    time: str  # HH:MM
    subject: str
    room: str = ""
    id: str = ""


@dataclass(frozen=True)
class AttendanceCounters:
    total: int = 0
    present: int = 0

    @property
    def missed(self) -> int:
        return self.total - self.present


@dataclass(frozen=True)
class Projection:
    percentage: int
    can_miss: int
    need_to_attend: int
    status: ProjectionStatus


@dataclass(frozen=True)
class AppState:
    """The whole persisted state. Operations return new instances."""
    schedule: tuple = ()
    attendance: dict = field(default_factory=dict)
    daily_marks: dict = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "AppState":
        return cls()

    def counters(self, subject: str) -> AttendanceCounters:
        return self.attendance.get(subject, AttendanceCounters())
