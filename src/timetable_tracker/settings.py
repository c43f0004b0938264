"""User settings stored alongside the application data."""
import logging

from timetable_tracker.db import get_connection
from timetable_tracker.projection import DEFAULT_THRESHOLD

logger = logging.getLogger(__name__)


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    try:
        row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    finally:
        conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    try:
        with conn:
            conn.execute(
                "INSERT INTO user_settings (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )
    finally:
        conn.close()


def get_threshold(db_path: str) -> float:
    """Attendance threshold in percent, falling back to the default."""
    raw = get_setting(db_path, "threshold")
    if raw is None:
        return DEFAULT_THRESHOLD
    try:
        value = float(raw)
    except ValueError:
        value = -1
    if not 0 < value < 100:
        logger.warning("Ignoring invalid stored threshold %r", raw)
        return DEFAULT_THRESHOLD
    return int(value) if value.is_integer() else value


def set_threshold(db_path: str, threshold: float) -> None:
    if not 0 < threshold < 100:
        raise ValueError(f"threshold must be between 0 and 100, got {threshold}")
    set_setting(db_path, "threshold", str(threshold))
