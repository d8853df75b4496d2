from __future__ import annotations

import logging
from datetime import date, timedelta

from screen_time.paths import day_log_path
from screen_time.retention import clean_up_old_logs, parse_log_date

TODAY = date(2026, 10, 18)


def test_parse_log_date_round_trips_day_log_name(tmp_path):
    assert parse_log_date(day_log_path(tmp_path, TODAY).name) == TODAY


def test_removes_only_logs_older_than_window(tmp_path):
    expired = day_log_path(tmp_path, TODAY - timedelta(days=15))
    boundary = day_log_path(tmp_path, TODAY - timedelta(days=14))
    recent = day_log_path(tmp_path, TODAY - timedelta(days=1))
    for path in (expired, boundary, recent):
        path.write_text("alpha;0;3\n")

    removed = clean_up_old_logs(tmp_path, TODAY)

    assert removed == [expired]
    assert boundary.exists() and recent.exists()


def test_skips_files_that_are_not_day_logs(tmp_path, caplog):
    (tmp_path / "app-names.csv").write_text("alpha;/a.desktop\n")
    (tmp_path / "notes.txt").write_text("")
    (tmp_path / "Foo-99-2020.csv").write_text("")
    (tmp_path / "archive").mkdir()

    with caplog.at_level(logging.DEBUG, logger="screen_time.retention"):
        assert clean_up_old_logs(tmp_path, TODAY) == []

    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "Foo-99-2020.csv",
        "app-names.csv",
        "archive",
        "notes.txt",
    ]
    assert "not a log file" in caplog.text


def test_custom_window(tmp_path):
    old = day_log_path(tmp_path, TODAY - timedelta(days=3))
    old.write_text("")
    assert clean_up_old_logs(tmp_path, TODAY, keep_days=2) == [old]
