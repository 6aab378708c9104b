"""
Tests for fixed check-in windows, per-course windows and window parsing
"""
from datetime import time
from types import SimpleNamespace

import pytest

from portal.services.checkin_windows import (
    CheckInWindow,
    CourseWindowSchedule,
    DEFAULT_CHECKIN_WINDOWS,
    FixedWindowSchedule,
    is_within_window,
    js_day_of_week,
    parse_windows,
)
from portal.tests.conftest import campus_time


def _window(day_of_week=0, start=time(9, 0), end=time(10, 0), grace=15):
    return SimpleNamespace(day_of_week=day_of_week, start_time=start, end_time=end, grace_period_minutes=grace)


class TestFixedWindows:
    schedule = FixedWindowSchedule()

    def test_0850_is_morning_and_on_time(self):
        match = self.schedule.match(campus_time(8, 50))
        assert match is not None
        assert match.label == "morning"
        assert match.is_late is False

    def test_0910_is_morning_and_late(self):
        match = self.schedule.match(campus_time(9, 10))
        assert match.label == "morning"
        assert match.is_late is True

    @pytest.mark.parametrize("hour,minute", [(10, 0), (14, 20), (8, 44), (13, 44), (23, 59)])
    def test_outside_every_window(self, hour, minute):
        assert self.schedule.match(campus_time(hour, minute)) is None

    def test_boundaries_are_minute_granular(self):
        assert self.schedule.match(campus_time(8, 45)).is_late is False
        assert self.schedule.match(campus_time(9, 0, 59)).is_late is False
        assert self.schedule.match(campus_time(9, 1)).is_late is True
        assert self.schedule.match(campus_time(9, 15, 59)).label == "morning"
        assert self.schedule.match(campus_time(9, 16)) is None

    def test_afternoon_window(self):
        assert self.schedule.match(campus_time(14, 0)).is_late is False
        match = self.schedule.match(campus_time(14, 5))
        assert match.label == "afternoon"
        assert match.is_late is True

    def test_describe_lists_windows(self):
        assert self.schedule.describe() == "08:45-09:15, 13:45-14:15"


class TestParseWindows:
    def test_default_string_matches_defaults(self):
        assert parse_windows("08:45-09:00-09:15,13:45-14:00-14:15") == DEFAULT_CHECKIN_WINDOWS

    def test_labels_follow_start_time(self):
        windows = parse_windows("07:00-07:10-07:30, 12:30-12:40-13:00, 18:00-18:05-18:20")
        assert [w.label for w in windows] == ["morning", "afternoon", "evening"]

    @pytest.mark.parametrize("text", [
        "",
        "08:45-09:15",
        "08:45-09:00-xx:15",
        "09:15-09:00-08:45",
        "08:45-09:30-09:15",
    ])
    def test_rejects_bad_input(self, text):
        with pytest.raises(ValueError):
            parse_windows(text)

    def test_window_requires_start_before_end(self):
        with pytest.raises(ValueError):
            CheckInWindow("bad", time(10, 0), time(10, 0), time(10, 0))


class TestCourseWindows:
    def test_day_of_week_counts_from_sunday(self):
        assert js_day_of_week(campus_time(9, 0)) == 0  # Sunday
        assert js_day_of_week(campus_time(9, 0, day=24)) == 6  # Saturday

    def test_inside_grace_period_is_on_time(self):
        evaluation = is_within_window(_window(), campus_time(9, 15))
        assert evaluation.in_window is True
        assert evaluation.in_grace is True
        assert evaluation.is_late is False

    def test_after_grace_period_is_late(self):
        evaluation = is_within_window(_window(), campus_time(9, 15, 1))
        assert evaluation.in_window is True
        assert evaluation.in_grace is False
        assert evaluation.is_late is True

    def test_end_time_is_inclusive(self):
        assert is_within_window(_window(), campus_time(10, 0)).in_window is True
        assert is_within_window(_window(), campus_time(10, 0, 1)).in_window is False

    def test_other_weekday_is_outside(self):
        evaluation = is_within_window(_window(day_of_week=1), campus_time(9, 5))
        assert evaluation.in_window is False
        assert evaluation.in_grace is False
        assert evaluation.is_late is False

    def test_zero_grace_means_late_after_start(self):
        assert is_within_window(_window(grace=0), campus_time(9, 0)).is_late is False
        assert is_within_window(_window(grace=0), campus_time(9, 0, 30)).is_late is True

    def test_grace_running_past_midnight(self):
        window = _window(start=time(23, 50), end=time(23, 59), grace=30)
        assert is_within_window(window, campus_time(23, 58)).in_grace is True

    def test_schedule_matches_by_weekday(self):
        schedule = CourseWindowSchedule([
            _window(day_of_week=2, start=time(11, 0), end=time(12, 0)),
            _window(day_of_week=0, start=time(9, 0), end=time(10, 0)),
        ])
        match = schedule.match(campus_time(9, 30))
        assert match.label == "Sunday 09:00-10:00"
        assert match.is_late is True
        assert schedule.describe() == "Sunday 09:00-10:00, Tuesday 11:00-12:00"

    def test_empty_schedule_never_matches(self):
        schedule = CourseWindowSchedule([])
        assert schedule.match(campus_time(9, 0)) is None
        assert "no attendance windows" in schedule.describe()
