from datetime import datetime

import pytest

from qr_attendance.attendance.time_window import TimeWindowPolicy
from qr_attendance.core.enums import CaptureKind, CaptureWindow

from conftest import at


@pytest.mark.parametrize(
    "ts, expected",
    [
        (at(6, 59, 59), CaptureWindow.NONE),
        (at(7, 0, 0), CaptureWindow.TIME_IN),
        (at(9, 45), CaptureWindow.TIME_IN),
        (at(11, 30, 0), CaptureWindow.TIME_IN),
        (at(11, 30, 1), CaptureWindow.NONE),
        (at(12, 15), CaptureWindow.NONE),
        (at(12, 59, 59), CaptureWindow.NONE),
        (at(13, 0, 0), CaptureWindow.TIME_OUT),
        (at(16, 59, 59), CaptureWindow.TIME_OUT),
        (at(17, 0, 0), CaptureWindow.NONE),
        (at(23, 59, 59), CaptureWindow.NONE),
        (at(0, 0, 0), CaptureWindow.NONE),
    ],
)
def test_classify_boundaries(ts, expected):
    decision = TimeWindowPolicy().classify(ts)

    assert decision.window is expected
    assert decision.can_capture is (expected is not CaptureWindow.NONE)


def test_sub_second_part_does_not_leave_time_in_window():
    decision = TimeWindowPolicy().classify(datetime(2025, 3, 3, 11, 30, 0, 999999))
    assert decision.window is CaptureWindow.TIME_IN


def test_every_minute_of_the_day_maps_to_exactly_one_window():
    policy = TimeWindowPolicy()
    seen = {w: 0 for w in CaptureWindow}
    for minute in range(24 * 60):
        seen[policy.classify(at(minute // 60, minute % 60)).window] += 1

    # 07:00..11:30 inclusive, 13:00..16:59
    assert seen[CaptureWindow.TIME_IN] == 4 * 60 + 31
    assert seen[CaptureWindow.TIME_OUT] == 4 * 60
    assert sum(seen.values()) == 24 * 60


def test_decision_kind():
    policy = TimeWindowPolicy()
    assert policy.classify(at(8, 0)).kind is CaptureKind.TIME_IN
    assert policy.classify(at(14, 0)).kind is CaptureKind.TIME_OUT
    with pytest.raises(ValueError):
        policy.classify(at(12, 0)).kind


def test_describe_messages():
    policy = TimeWindowPolicy()
    assert policy.describe(at(8, 5)) == "Current time: 08:05 - Time In Window (7:00 AM - 11:30 AM)"
    assert policy.describe(at(14, 0)) == "Current time: 14:00 - Time Out Window (1:00 PM - 5:00 PM)"
    assert policy.describe(at(12, 0)) == "Current time: 12:00 - Outside scanning hours"
