"""A millisecond-resolution monotonic instant."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

_U64_MAX = 2**64 - 1
_ONE_MS = timedelta(milliseconds=1)


def _millis(duration: timedelta) -> int:
    if duration < timedelta(0):
        raise ValueError("duration must not be negative")
    return duration // _ONE_MS


@dataclass(frozen=True, order=True)
class Instant:
    """A point in time, in milliseconds since an unspecified epoch."""

    milliseconds: int

    def __post_init__(self) -> None:
        if not 0 <= self.milliseconds <= _U64_MAX:
            raise ValueError("milliseconds out of range")

    @classmethod
    def from_duration_since_epoch(cls, duration: timedelta) -> Instant:
        return cls(_millis(duration))

    @classmethod
    def from_millis_since_epoch(cls, milliseconds: int) -> Instant:
        return cls(milliseconds)

    @classmethod
    def from_seconds_since_epoch(cls, seconds: int) -> Instant:
        return cls(seconds * 1000)

    def add_seconds(self, seconds: int) -> Instant:
        total = self.milliseconds + 1000 * seconds
        if total > _U64_MAX:
            raise OverflowError("instant overflow")
        return Instant(total)

    def __add__(self, other: timedelta) -> Instant:
        if not isinstance(other, timedelta):
            return NotImplemented
        return Instant(min(self.milliseconds + _millis(other), _U64_MAX))

    def __sub__(self, other):
        if isinstance(other, Instant):
            return timedelta(milliseconds=max(self.milliseconds - other.milliseconds, 0))
        if isinstance(other, timedelta):
            return Instant(max(self.milliseconds - _millis(other), 0))
        return NotImplemented