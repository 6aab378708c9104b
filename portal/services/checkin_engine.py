"""
Attendance check-in eligibility engine.

evaluate() is a pure function of its arguments: the attempt, the campus
geofence, whether a record already exists for today, the local wall-clock time
and the window schedule. It never reads settings, the clock or the database,
and it returns a CheckInDecision instead of raising. Checks run in a fixed
order and the first failure wins:

    1. identity          -> UNAUTHENTICATED
    2. location reading  -> LOCATION_UNAVAILABLE (pending/permission_denied/unavailable/timeout)
    3. geofence          -> OUTSIDE_RADIUS
    4. time window       -> OUTSIDE_WINDOW
    5. duplicate day     -> ALREADY_CHECKED_IN

Present vs late depends only on the matched window, never on distance.
"""
import enum
import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

from portal.models.attendance import AttendanceStatus
from portal.services.checkin_windows import FixedWindowSchedule
from portal.utils.geo import CampusLocation, GeoPoint, haversine_distance, meters_over_limit


class LocationState(str, enum.Enum):
    RESOLVED = "resolved"
    PENDING = "pending"
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"


class RejectionReason(str, enum.Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"
    OUTSIDE_RADIUS = "OUTSIDE_RADIUS"
    OUTSIDE_WINDOW = "OUTSIDE_WINDOW"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"


LOCATION_MESSAGES = {
    LocationState.PENDING: "Still getting your location. Please wait a moment and try again.",
    LocationState.PERMISSION_DENIED: "Unable to get your location. Please enable location permissions.",
    LocationState.UNAVAILABLE: "Unable to get your location. Location information is unavailable.",
    LocationState.TIMEOUT: "Unable to get your location. Location request timed out.",
}

UNAUTHENTICATED_MESSAGE = "You must be logged in to check in."
ALREADY_CHECKED_IN_MESSAGE = "You have already checked in today."
PERSISTENCE_FAILED_MESSAGE = "An error occurred while checking in. Please try again."


@dataclass(frozen=True)
class CheckInAttempt:
    """One subject's request to record attendance. Not persisted."""
    subject_id: Optional[int]
    location: Optional[GeoPoint] = None
    course_id: Optional[int] = None
    accuracy_meters: Optional[float] = None
    location_state: LocationState = LocationState.RESOLVED
    captured_at: Optional[datetime] = None


@dataclass(frozen=True)
class CheckInDecision:
    accepted: bool
    message: str
    status: Optional[AttendanceStatus] = None
    reason: Optional[RejectionReason] = None
    location_state: Optional[LocationState] = None
    distance_meters: Optional[float] = None
    required_meters: Optional[float] = None
    window_label: Optional[str] = None

    @property
    def meters_over_limit(self) -> Optional[int]:
        if self.distance_meters is None or self.required_meters is None:
            return None
        return meters_over_limit(self.distance_meters, self.required_meters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "status": self.status.value if self.status else None,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "location_state": self.location_state.value if self.location_state else None,
            "distance_meters": round(self.distance_meters, 1) if self.distance_meters is not None else None,
            "required_meters": self.required_meters,
            "meters_over_limit": self.meters_over_limit,
            "window_label": self.window_label,
        }


def _reject(reason: RejectionReason, message: str, **fields) -> CheckInDecision:
    return CheckInDecision(accepted=False, message=message, reason=reason, **fields)


def _age_seconds(captured_at: datetime, now: datetime) -> float:
    # A naive stamp is read on the same clock as its counterpart
    if captured_at.tzinfo is None and now.tzinfo is not None:
        captured_at = captured_at.replace(tzinfo=now.tzinfo)
    elif captured_at.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=captured_at.tzinfo)
    return (now - captured_at).total_seconds()


def location_state_of(attempt: CheckInAttempt, now: datetime, max_age_seconds: Optional[int] = None) -> LocationState:
    """Effective state of the attempt's reading: missing readings are pending, stale ones timed out."""
    if attempt.location_state != LocationState.RESOLVED:
        return attempt.location_state
    if attempt.location is None:
        return LocationState.PENDING
    if max_age_seconds and attempt.captured_at is not None:
        if _age_seconds(attempt.captured_at, now) > max_age_seconds:
            return LocationState.TIMEOUT
    return LocationState.RESOLVED


def evaluate(
    attempt: CheckInAttempt,
    campus: CampusLocation,
    existing_record_today: bool,
    now: datetime,
    schedule=None,
    max_location_age_seconds: Optional[int] = None,
) -> CheckInDecision:
    """
    Decide whether a check-in attempt is accepted and classify it.

    Args:
        attempt: subject, claimed location and reading state
        campus: geofence centre and allowed radius
        existing_record_today: a record already exists for subject + course + local date
        now: local wall-clock time of the request
        schedule: object with match(now) and describe(); defaults to the fixed daily windows
        max_location_age_seconds: readings older than this count as timed out (None/0 disables)

    Returns:
        CheckInDecision; accepted decisions carry status present or late
    """
    schedule = schedule if schedule is not None else FixedWindowSchedule()

    if attempt.subject_id is None:
        return _reject(RejectionReason.UNAUTHENTICATED, UNAUTHENTICATED_MESSAGE)

    state = location_state_of(attempt, now, max_location_age_seconds)
    if state != LocationState.RESOLVED:
        return _reject(
            RejectionReason.LOCATION_UNAVAILABLE,
            LOCATION_MESSAGES[state],
            location_state=state,
        )

    distance = haversine_distance(attempt.location, campus.point)
    if math.isnan(distance):
        return _reject(
            RejectionReason.LOCATION_UNAVAILABLE,
            LOCATION_MESSAGES[LocationState.UNAVAILABLE],
            location_state=LocationState.UNAVAILABLE,
        )
    required = campus.allowed_radius_meters
    if distance > required:
        over = meters_over_limit(distance, required)
        return _reject(
            RejectionReason.OUTSIDE_RADIUS,
            f"You must be within {required:g}m of campus to check in. "
            f"You are {round(distance)}m away ({over}m over the limit).",
            location_state=state,
            distance_meters=distance,
            required_meters=required,
        )

    match = schedule.match(now)
    if match is None:
        return _reject(
            RejectionReason.OUTSIDE_WINDOW,
            f"You are outside the check-in window. Available times: {schedule.describe()}.",
            location_state=state,
            distance_meters=distance,
            required_meters=required,
        )

    if existing_record_today:
        return _reject(
            RejectionReason.ALREADY_CHECKED_IN,
            ALREADY_CHECKED_IN_MESSAGE,
            location_state=state,
            distance_meters=distance,
            required_meters=required,
            window_label=match.label,
        )

    status = AttendanceStatus.LATE if match.is_late else AttendanceStatus.PRESENT
    return CheckInDecision(
        accepted=True,
        message=f"Successfully checked in! Status: {status.value.capitalize()}",
        status=status,
        location_state=state,
        distance_meters=distance,
        required_meters=required,
        window_label=match.label,
    )


def persistence_failed(decision: CheckInDecision) -> CheckInDecision:
    """Turn an accepted decision whose write failed into the generic rejection."""
    return replace(
        decision,
        accepted=False,
        status=None,
        reason=RejectionReason.PERSISTENCE_FAILED,
        message=PERSISTENCE_FAILED_MESSAGE,
    )
