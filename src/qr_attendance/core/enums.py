from __future__ import annotations

from enum import Enum


class CaptureWindow(str, Enum):
    """Khung giờ quét trong ngày."""

    NONE = "none"
    TIME_IN = "time_in"
    TIME_OUT = "time_out"


class CaptureKind(str, Enum):
    """Trường được ghi khi xác nhận một lượt quét."""

    TIME_IN = "time_in"
    TIME_OUT = "time_out"


class ScanState(str, Enum):
    """Trạng thái vòng đời của một lượt quét."""

    IDLE = "idle"
    DECODING = "decoding"
    RESOLVED = "resolved"
    CONFIRMING = "confirming"
    COMMITTED = "committed"
    FAILED = "failed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def is_in_flight(self) -> bool:
        return self in (ScanState.DECODING, ScanState.RESOLVED, ScanState.CONFIRMING)


TERMINAL_STATES = frozenset(
    {ScanState.COMMITTED, ScanState.FAILED, ScanState.REJECTED, ScanState.CANCELLED}
)
