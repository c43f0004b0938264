import pytest

from timetable_tracker.ingest import ingest


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


@pytest.fixture
def week_state():
    """A small weekly timetable with no attendance recorded yet."""
    return ingest([
        ("Monday", "09:00", "Maths", "B12"),
        ("Monday", "11:00", "Physics", "Lab 1"),
        ("Monday", "14:00", "Maths", "B12"),
        ("Tuesday", "10:00", "Chemistry", ""),
        ("Wednesday", "09:00", "Physics", "Lab 2"),
    ])
