from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time

from ..core.constants import TIME_IN_END, TIME_IN_START, TIME_OUT_END, TIME_OUT_START
from ..core.enums import CaptureKind, CaptureWindow


@dataclass(frozen=True)
class WindowDecision:
    window: CaptureWindow
    can_capture: bool

    @property
    def kind(self) -> CaptureKind:
        if self.window is CaptureWindow.TIME_IN:
            return CaptureKind.TIME_IN
        if self.window is CaptureWindow.TIME_OUT:
            return CaptureKind.TIME_OUT
        raise ValueError("no capture kind outside the daily windows")


def _clock_label(t: time) -> str:
    return t.strftime("%I:%M %p").lstrip("0")


class TimeWindowPolicy:
    """Fixed daily capture schedule, local time.

    Time-in runs 07:00:00 through 11:30:00 inclusive; time-out runs 13:00:00
    up to but excluding 17:00:00. Sub-second parts are dropped before
    comparing, so 11:30:00.9 is still time-in and 11:30:01 is not.
    """

    def classify(self, ts: datetime) -> WindowDecision:
        t = ts.time().replace(microsecond=0)

        if TIME_IN_START <= t <= TIME_IN_END:
            return WindowDecision(window=CaptureWindow.TIME_IN, can_capture=True)
        if TIME_OUT_START <= t < TIME_OUT_END:
            return WindowDecision(window=CaptureWindow.TIME_OUT, can_capture=True)
        return WindowDecision(window=CaptureWindow.NONE, can_capture=False)

    def describe(self, ts: datetime) -> str:
        decision = self.classify(ts)
        message = f"Current time: {ts.strftime('%H:%M')}"
        if decision.window is CaptureWindow.TIME_IN:
            return f"{message} - Time In Window ({_clock_label(TIME_IN_START)} - {_clock_label(TIME_IN_END)})"
        if decision.window is CaptureWindow.TIME_OUT:
            return f"{message} - Time Out Window ({_clock_label(TIME_OUT_START)} - {_clock_label(TIME_OUT_END)})"
        return f"{message} - Outside scanning hours"
