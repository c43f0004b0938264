# tests/test_settings.py
import sqlite3

import pytest

from timetable_tracker.db import init_db
from timetable_tracker.settings import get_setting, get_threshold, set_setting, set_threshold


def test_get_setting_default(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "missing") is None
    assert get_setting(tmp_db, "missing", "x") == "x"


def test_set_setting_overwrites(tmp_db):
    init_db(tmp_db)
    set_setting(tmp_db, "k", "1")
    set_setting(tmp_db, "k", "2")
    assert get_setting(tmp_db, "k") == "2"


def test_threshold_defaults_to_75(tmp_db):
    init_db(tmp_db)
    assert get_threshold(tmp_db) == 75


def test_set_threshold(tmp_db):
    init_db(tmp_db)
    set_threshold(tmp_db, 80)
    assert get_threshold(tmp_db) == 80
    set_threshold(tmp_db, 66.5)
    assert get_threshold(tmp_db) == 66.5


@pytest.mark.parametrize("value", [0, 100, -1, 150])
def test_set_threshold_rejects_out_of_range(tmp_db, value):
    init_db(tmp_db)
    with pytest.raises(ValueError):
        set_threshold(tmp_db, value)


@pytest.mark.parametrize("raw", ["abc", "0", "100", "nan"])
def test_invalid_stored_threshold_falls_back(tmp_db, raw):
    init_db(tmp_db)
    set_setting(tmp_db, "threshold", raw)
    assert get_threshold(tmp_db) == 75


def test_settings_errors_propagate_without_tables(tmp_db):
    with pytest.raises(sqlite3.OperationalError):
        get_setting(tmp_db, "threshold")
    with pytest.raises(sqlite3.OperationalError):
        set_setting(tmp_db, "threshold", "80")
