"""Subscribe acknowledgement."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from umqtt.codec import (
    FixedHeader,
    InvalidSubscribeReasonCode,
    MalformedPacket,
    QoS,
    Reader,
    Writer,
)


class SubscribeReasonCode(IntEnum):
    """Per-filter result in a suback: the granted QoS or a failure."""

    SUCCESS_AT_MOST_ONCE = 0
    SUCCESS_AT_LEAST_ONCE = 1
    SUCCESS_EXACTLY_ONCE = 2
    FAILURE = 0x80

    @classmethod
    def from_byte(cls, value: int) -> SubscribeReasonCode:
        try:
            return cls(value)
        except ValueError:
            raise InvalidSubscribeReasonCode(value) from None

    def to_byte(self) -> int:
        return int(self)

    @classmethod
    def success(cls, granted: QoS) -> SubscribeReasonCode:
        """The success code for a granted QoS."""
        return cls(int(granted))

    @property
    def qos(self) -> QoS | None:
        """The granted QoS, or None on failure."""
        if self is SubscribeReasonCode.FAILURE:
            return None
        return QoS(int(self))


@dataclass(frozen=True)
class SubAck:
    """Acknowledgement to a subscribe."""

    pkid: int
    return_codes: tuple[SubscribeReasonCode, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "return_codes", tuple(self.return_codes))

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> SubAck:
        reader = Reader(data)
        reader.advance(fixed_header.fixed_header_len)
        pkid = reader.read_u16()
        codes = reader.remaining()
        if not codes:
            raise MalformedPacket("suback without return codes")
        return cls(pkid, tuple(SubscribeReasonCode.from_byte(byte) for byte in codes))

    def encode(self, capacity: int | None = None) -> bytes:
        writer = Writer(capacity)
        writer.put_u8(0x90)
        writer.write_remaining_length(2 + len(self.return_codes))
        writer.put_u16(self.pkid)
        for code in self.return_codes:
            writer.put_u8(code.to_byte())
        return writer.getvalue()