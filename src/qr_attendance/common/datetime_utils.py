from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Protocol
from zoneinfo import ZoneInfo


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """IANA zone name -> tzinfo. Empty means server local time."""
    if not name:
        return None
    return ZoneInfo(name)


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz) if tz else datetime.now()


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


@dataclass(frozen=True)
class SystemClock:
    """Wall clock in the institution's time zone."""

    tz: Optional[tzinfo] = None

    def now(self) -> datetime:
        return now_local(self.tz)


@dataclass
class FixedClock:
    """Clock that only moves when told to."""

    current: datetime
    step: timedelta = field(default_factory=timedelta)

    def now(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta
