"""On-call rotation calculation.

Who is on call is a pure function of the member list, the rotation config and
the current time. Nothing is persisted, so every reader agrees and restarts
need no state.
"""
import logging
import math
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..utils.time_utils import parse_timestamp, utcnow

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_HOURS = 168  # one week

# A schedule starting within this window already shows its first assignee
START_GRACE_PERIOD = timedelta(hours=1)


class RotationConfigError(ValueError):
    """Rotation config that cannot produce an on-call member."""


def _resolve_timezone(name: Optional[str]) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RotationConfigError(f"Unknown timezone: {name}") from e


def rotation_duration(rotation_config: Mapping[str, Any]) -> timedelta:
    """Length of one shift.

    `duration_hours` wins over the older `rotation_interval_hours` key; a
    week is assumed when neither is set.
    """
    hours = rotation_config.get("duration_hours")
    if hours is None:
        hours = rotation_config.get("rotation_interval_hours")
    if hours is None:
        hours = DEFAULT_ROTATION_HOURS

    if isinstance(hours, bool):
        raise RotationConfigError(f"Invalid rotation duration: {hours!r}")
    try:
        hours = float(hours)
    except (TypeError, ValueError) as e:
        raise RotationConfigError(f"Invalid rotation duration: {hours!r}") from e
    if not math.isfinite(hours) or hours <= 0:
        raise RotationConfigError(f"Rotation duration must be positive, got {hours}")
    return timedelta(hours=hours)


def _parse(value: Any, tz: tzinfo, field: str) -> Optional[datetime]:
    try:
        return parse_timestamp(value, assume=tz)
    except ValueError as e:
        raise RotationConfigError(f"Invalid {field}: {value!r}") from e


def _member_order(member: Mapping[str, Any]) -> float:
    order = member.get("order")
    if isinstance(order, (int, float)) and not isinstance(order, bool):
        return order
    return math.inf


def current_on_call_user_id(
    members: Optional[Iterable[Mapping[str, Any]]],
    rotation_config: Optional[Mapping[str, Any]],
    created_at: Optional[datetime],
    now: datetime,
    default_timezone: Optional[str] = None,
) -> Optional[str]:
    """Compute who is on call at `now`.

    Raises RotationConfigError for malformed configuration. Use
    calculate_current_on_call_user_id() on read paths.
    """
    members = list(members or [])
    if not members:
        return None

    # sorted() is stable: members sharing an order keep their listed position
    members = sorted(members, key=_member_order)
    rotation_config = rotation_config or {}

    tz = _resolve_timezone(rotation_config.get("timezone") or default_timezone)
    now = parse_timestamp(now)
    schedule_start = _parse(rotation_config.get("schedule_start"), tz, "schedule_start")
    if schedule_start is None:
        schedule_start = _parse(created_at, tz, "created_at")
    if schedule_start is None:
        raise RotationConfigError("Schedule has neither schedule_start nor created_at")

    if now < schedule_start and schedule_start - now > START_GRACE_PERIOD:
        return None

    schedule_end = _parse(rotation_config.get("schedule_end"), tz, "schedule_end")
    if schedule_end is not None and now > schedule_end:
        return None

    duration = rotation_duration(rotation_config)

    # Inside the grace window elapsed is negative; that still maps to shift 0
    elapsed = max(now - schedule_start, timedelta(0))
    rotation_index = elapsed // duration
    member = members[rotation_index % len(members)]
    return member.get("user_id")


def calculate_current_on_call_user_id(schedule, now: Optional[datetime] = None) -> Optional[str]:
    """Current on-call user for a schedule row, or None.

    Never raises: a broken rotation config is logged and nobody is shown as
    on call.
    """
    now = now or utcnow()
    try:
        return current_on_call_user_id(
            schedule.members,
            schedule.rotation_config,
            schedule.created_at,
            now,
            default_timezone=getattr(schedule, "timezone", None),
        )
    except (RotationConfigError, TypeError, AttributeError) as e:
        # TypeError/AttributeError: members stored as something other than a list of objects
        logger.warning(f"On-call schedule {schedule.id} has an invalid rotation: {e}")
        return None
