from datetime import time
from types import SimpleNamespace

import pytest

from src.timekeeping.timekeeping.attendance.policy import AttendancePolicy


def test_defaults_when_settings_are_silent():
    policy = AttendancePolicy.from_settings(SimpleNamespace())

    assert policy.work_start == time(9, 0)
    assert policy.grace_minutes == 5
    assert policy.late_detection_enabled is True
    assert policy.break_minutes == 0
    assert policy.overtime_enabled is False
    assert policy.half_day_threshold_hours is None


def test_reads_values_from_settings_module():
    settings = SimpleNamespace(
        WORK_START_TIME="08:30",
        LATE_GRACE_MINUTES="10",
        LATE_DETECTION_ENABLED="0",
        BREAK_MINUTES=45,
        STANDARD_WORK_HOURS="7.5",
        OVERTIME_ENABLED="true",
        HALF_DAY_THRESHOLD_HOURS="4",
    )

    policy = AttendancePolicy.from_settings(settings)

    assert policy.work_start == time(8, 30)
    assert policy.grace_minutes == 10
    assert policy.late_detection_enabled is False
    assert policy.break_minutes == 45
    assert policy.standard_work_hours == 7.5
    assert policy.overtime_enabled is True
    assert policy.half_day_threshold_hours == 4.0


def test_blank_half_day_threshold_disables_it():
    assert AttendancePolicy.from_settings(SimpleNamespace(HALF_DAY_THRESHOLD_HOURS="")).half_day_threshold_hours is None


@pytest.mark.parametrize(
    "settings",
    [
        SimpleNamespace(WORK_START_TIME="nine"),
        SimpleNamespace(LATE_GRACE_MINUTES=-1),
        SimpleNamespace(BREAK_MINUTES="-30"),
        SimpleNamespace(LATE_GRACE_MINUTES="five"),
    ],
)
def test_malformed_settings_fail_fast(settings):
    with pytest.raises(ValueError):
        AttendancePolicy.from_settings(settings)
