"""
Check-in time windows.

Two independent schedules decide whether "now" is inside a check-in window and
whether a check-in at that moment is late:

- FixedWindowSchedule: the global daily windows (08:45-09:15 and 13:45-14:15 by
  default). Each window carries its on-time boundary as data; comparisons run at
  minute granularity on the campus wall clock, so 09:00:59 is on time and
  09:15:59 is still inside the morning window.
- CourseWindowSchedule: per-course AttendanceWindow rows managed by faculty,
  evaluated with is_within_window() using the row's grace period.

The application picks one schedule (CHECKIN_WINDOW_STRATEGY); they are never
merged. This module has no database or settings imports so the config layer can
use parse_windows() during validation.
"""
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Iterable, Optional, Sequence, Tuple

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


@dataclass(frozen=True)
class CheckInWindow:
    """A fixed daily window: open at start, on time through on_time_until, closed after end."""
    label: str
    start: time
    on_time_until: time
    end: time

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(f"window '{self.label}': start must be before end")
        if not self.start <= self.on_time_until <= self.end:
            raise ValueError(f"window '{self.label}': on-time boundary must lie between start and end")


@dataclass(frozen=True)
class WindowMatch:
    """The window that contains "now", and whether a check-in now counts as late."""
    label: str
    is_late: bool


@dataclass(frozen=True)
class WindowEvaluation:
    in_window: bool
    in_grace: bool
    is_late: bool


DEFAULT_CHECKIN_WINDOWS: Tuple[CheckInWindow, ...] = (
    CheckInWindow("morning", time(8, 45), time(9, 0), time(9, 15)),
    CheckInWindow("afternoon", time(13, 45), time(14, 0), time(14, 15)),
)


def _label_for(start: time) -> str:
    if start < time(12, 0):
        return "morning"
    if start < time(17, 0):
        return "afternoon"
    return "evening"


def parse_windows(text: str) -> Tuple[CheckInWindow, ...]:
    """
    Parse "HH:MM-HH:MM-HH:MM,..." (start, on-time boundary, end) into windows.

    Raises:
        ValueError: on empty input, malformed times, or inconsistent boundaries
    """
    windows = []
    for chunk in (text or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts = [p.strip() for p in chunk.split("-")]
        if len(parts) != 3:
            raise ValueError(f"check-in window '{chunk}' must be start-ontime-end (HH:MM-HH:MM-HH:MM)")
        try:
            start, on_time_until, end = (time.fromisoformat(p) for p in parts)
        except ValueError:
            raise ValueError(f"check-in window '{chunk}' has an invalid HH:MM time")
        windows.append(CheckInWindow(_label_for(start), start, on_time_until, end))
    if not windows:
        raise ValueError("at least one check-in window is required")
    return tuple(windows)


def wall_clock_minute(now: datetime) -> time:
    """Local clock time truncated to the minute (timezone dropped)."""
    return now.time().replace(second=0, microsecond=0)


def js_day_of_week(now: datetime) -> int:
    """Day of week numbered 0=Sunday .. 6=Saturday, as stored on attendance windows."""
    return now.isoweekday() % 7


def _grace_boundary(start: time, grace_minutes: int, on: datetime) -> time:
    boundary = datetime.combine(on.date(), start) + timedelta(minutes=grace_minutes or 0)
    if boundary.date() != on.date():
        return time.max
    return boundary.time()


def is_within_window(window, now: datetime) -> WindowEvaluation:
    """
    Evaluate a per-course attendance window against the local wall clock.

    ``window`` is anything with day_of_week, start_time, end_time and
    grace_period_minutes (an AttendanceWindow row or a schema object).

    - in_window: same weekday and start_time <= now <= end_time
    - in_grace: in_window and now <= start_time + grace period (on time)
    - is_late: in_window and past the grace period
    """
    t = now.time().replace(tzinfo=None)
    in_window = (
        js_day_of_week(now) == window.day_of_week
        and window.start_time <= t <= window.end_time
    )
    if not in_window:
        return WindowEvaluation(in_window=False, in_grace=False, is_late=False)
    in_grace = t <= _grace_boundary(window.start_time, window.grace_period_minutes, now)
    return WindowEvaluation(in_window=True, in_grace=in_grace, is_late=not in_grace)


def _hhmm(t: time) -> str:
    return t.strftime("%H:%M")


class FixedWindowSchedule:
    """Global daily windows, independent of course."""

    def __init__(self, windows: Sequence[CheckInWindow] = DEFAULT_CHECKIN_WINDOWS):
        self.windows = tuple(windows)

    def match(self, now: datetime) -> Optional[WindowMatch]:
        t = wall_clock_minute(now)
        for window in self.windows:
            if window.start <= t <= window.end:
                return WindowMatch(label=window.label, is_late=t > window.on_time_until)
        return None

    def describe(self) -> str:
        return ", ".join(f"{_hhmm(w.start)}-{_hhmm(w.end)}" for w in self.windows)


class CourseWindowSchedule:
    """Faculty-configured windows for a single course."""

    def __init__(self, windows: Iterable):
        self.windows = sorted(windows, key=lambda w: (w.day_of_week, w.start_time))

    def match(self, now: datetime) -> Optional[WindowMatch]:
        for window in self.windows:
            evaluation = is_within_window(window, now)
            if evaluation.in_window:
                label = f"{DAY_NAMES[window.day_of_week]} {_hhmm(window.start_time)}-{_hhmm(window.end_time)}"
                return WindowMatch(label=label, is_late=evaluation.is_late)
        return None

    def describe(self) -> str:
        if not self.windows:
            return "no attendance windows are configured for this course"
        return ", ".join(
            f"{DAY_NAMES[w.day_of_week]} {_hhmm(w.start_time)}-{_hhmm(w.end_time)}" for w in self.windows
        )
