"""Tests for on-call rotation calculation."""
import logging
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from alert24.services.rotation import (
    RotationConfigError,
    calculate_current_on_call_user_id,
    current_on_call_user_id,
    rotation_duration,
)

T0 = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)
MEMBERS = [
    {"user_id": "alice", "order": 1},
    {"user_id": "bob", "order": 2},
    {"user_id": "carol", "order": 3},
]


def make_schedule(members=None, rotation_config=None, created_at=T0, tz="UTC"):
    return SimpleNamespace(
        id="sched-1",
        members=MEMBERS if members is None else members,
        rotation_config={"duration_hours": 168, "schedule_start": T0.isoformat()} if rotation_config is None else rotation_config,
        created_at=created_at,
        timezone=tz,
    )


class TestRotationIndex:
    """Tests for member selection over time."""

    @pytest.mark.parametrize(
        "elapsed_hours, expected",
        [
            (0, "alice"),
            (1, "alice"),
            (167, "alice"),
            (168, "bob"),
            (336, "carol"),
            (504, "alice"),
            (169, "bob"),
        ],
    )
    def test_weekly_rotation(self, elapsed_hours, expected):
        schedule = make_schedule()
        now = T0 + timedelta(hours=elapsed_hours)
        assert calculate_current_on_call_user_id(schedule, now) == expected

    def test_full_cycle_returns_to_same_member(self):
        schedule = make_schedule()
        first = calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=1))
        later = calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=1 + 3 * 168))
        assert first == later == "alice"

    def test_members_sorted_by_order(self):
        members = [
            {"user_id": "carol", "order": 30},
            {"user_id": "alice", "order": 5},
            {"user_id": "bob", "order": 12},
        ]
        schedule = make_schedule(members=members)
        assert calculate_current_on_call_user_id(schedule, T0) == "alice"
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=168)) == "bob"
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=336)) == "carol"

    def test_custom_duration(self):
        schedule = make_schedule(rotation_config={"duration_hours": 12, "schedule_start": T0.isoformat()})
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=13)) == "bob"

    def test_rotation_interval_hours_is_accepted(self):
        schedule = make_schedule(rotation_config={"rotation_interval_hours": 24, "schedule_start": T0.isoformat()})
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=49)) == "carol"

    def test_default_duration_is_one_week(self):
        assert rotation_duration({}) == timedelta(hours=168)
        schedule = make_schedule(rotation_config={"schedule_start": T0.isoformat()})
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=100)) == "alice"

    def test_created_at_used_without_schedule_start(self):
        schedule = make_schedule(rotation_config={"duration_hours": 24}, created_at=T0)
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=25)) == "bob"

    def test_deterministic_for_fixed_inputs(self):
        schedule = make_schedule()
        now = T0 + timedelta(hours=400)
        results = {calculate_current_on_call_user_id(schedule, now) for _ in range(10)}
        assert results == {"carol"}


class TestScheduleWindow:
    """Tests for start, grace window and end handling."""

    def test_no_members_is_nobody(self):
        schedule = make_schedule(members=[])
        for hours in (0, 10, 1000):
            assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=hours)) is None

    def test_no_members_ignores_broken_config(self):
        schedule = make_schedule(members=[], rotation_config={"duration_hours": -5})
        assert calculate_current_on_call_user_id(schedule, T0) is None

    def test_start_within_grace_window_shows_first_member(self):
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        schedule = make_schedule(
            rotation_config={"duration_hours": 168, "schedule_start": (now + timedelta(minutes=30)).isoformat()}
        )
        assert calculate_current_on_call_user_id(schedule, now) == "alice"

    def test_start_beyond_grace_window_is_nobody(self):
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        schedule = make_schedule(
            rotation_config={"duration_hours": 168, "schedule_start": (now + timedelta(hours=2)).isoformat()}
        )
        assert calculate_current_on_call_user_id(schedule, now) is None

    def test_after_schedule_end_is_nobody(self):
        schedule = make_schedule(rotation_config={
            "duration_hours": 168,
            "schedule_start": T0.isoformat(),
            "schedule_end": (T0 + timedelta(days=30)).isoformat(),
        })
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(days=29)) is not None
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(days=31)) is None

    def test_zulu_timestamps(self):
        schedule = make_schedule(rotation_config={"duration_hours": 24, "schedule_start": "2025-01-06T09:00:00Z"})
        assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=24)) == "bob"

    def test_naive_start_uses_schedule_timezone(self):
        # 09:00 in New York is 14:00 UTC in January
        schedule = make_schedule(
            rotation_config={"duration_hours": 1, "schedule_start": "2025-01-06T09:00:00"},
            tz="America/New_York",
        )
        now = datetime(2025, 1, 6, 15, 30, tzinfo=timezone.utc)
        assert calculate_current_on_call_user_id(schedule, now) == "bob"

    def test_naive_now_treated_as_utc(self):
        schedule = make_schedule()
        assert calculate_current_on_call_user_id(schedule, datetime(2025, 1, 13, 9, 0)) == "bob"


class TestInvalidConfig:
    """Malformed rotations never raise from the read path."""

    @pytest.mark.parametrize("duration", [0, -24, "abc", float("inf"), True])
    def test_bad_duration_returns_none(self, duration, caplog):
        schedule = make_schedule(rotation_config={"duration_hours": duration, "schedule_start": T0.isoformat()})

        with caplog.at_level(logging.WARNING, logger="alert24.services.rotation"):
            assert calculate_current_on_call_user_id(schedule, T0 + timedelta(hours=5)) is None

        assert "invalid rotation" in caplog.text

    @pytest.mark.parametrize("duration", [0, -1])
    def test_strict_calculation_rejects_non_positive_duration(self, duration):
        with pytest.raises(RotationConfigError):
            current_on_call_user_id(MEMBERS, {"duration_hours": duration}, T0, T0 + timedelta(hours=1))

    def test_unparseable_start_returns_none(self):
        schedule = make_schedule(rotation_config={"schedule_start": "next tuesday"})
        assert calculate_current_on_call_user_id(schedule, T0) is None

    def test_unknown_timezone_returns_none(self):
        schedule = make_schedule(rotation_config={"schedule_start": T0.isoformat(), "timezone": "Mars/Olympus"})
        assert calculate_current_on_call_user_id(schedule, T0) is None

    def test_malformed_members_return_none(self):
        schedule = make_schedule(members=["alice", "bob"])
        assert calculate_current_on_call_user_id(schedule, T0) is None
