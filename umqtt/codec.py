"""Wire-level building blocks: errors, enums, fixed header framing, readers and writers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

MAX_REMAINING_LENGTH = 268_435_455
_U16_MAX = 0xFFFF


class DecodeError(Exception):
    """Raised when incoming bytes cannot be turned into a packet."""


class NeedMoreData(DecodeError):
    """The stream does not yet hold a whole packet."""

    def __init__(self, needed: int) -> None:
        super().__init__(f"need {needed} more byte(s)")
        self.needed = needed


class PayloadSizeLimitExceeded(DecodeError):
    """The announced remaining length is larger than allowed."""

    def __init__(self, size: int) -> None:
        super().__init__(f"payload size {size} exceeds limit")
        self.size = size


class InvalidPacketType(DecodeError):
    """The packet type nibble names no known packet."""

    def __init__(self, value: int) -> None:
        super().__init__(f"invalid packet type {value}")
        self.value = value


class MalformedRemainingLength(DecodeError):
    """The remaining length uses more than four bytes."""


class MalformedPacket(DecodeError):
    """The packet content does not match its framing."""


class EmptySubscription(DecodeError):
    """A subscribe packet carries no filters."""


class BadUtf8(DecodeError):
    """A string field is not valid UTF-8."""


class InvalidProtocol(DecodeError):
    """The protocol name is not MQTT."""


class InvalidProtocolLevel(DecodeError):
    """The protocol level is not supported."""

    def __init__(self, level: int) -> None:
        super().__init__(f"invalid protocol level {level}")
        self.level = level


class InvalidQoS(DecodeError):
    """A QoS value outside 0..2."""

    def __init__(self, value: int) -> None:
        super().__init__(f"invalid QoS {value}")
        self.value = value


class InvalidConnectReturnCode(DecodeError):
    """A connack return code outside the known set."""

    def __init__(self, code: int) -> None:
        super().__init__(f"invalid connect return code {code}")
        self.code = code


class PacketIdZero(DecodeError):
    """A packet that needs an identifier carries zero."""


class UnsupportedPacket(DecodeError):
    """A packet that this side does not handle."""


class InvalidSubscribeReasonCode(DecodeError):
    """A suback return code outside the known set."""

    def __init__(self, code: int) -> None:
        super().__init__(f"invalid subscribe reason code {code}")
        self.code = code


class UnexpectedPacket(DecodeError):
    """A valid packet that is not allowed in the current state."""

    def __init__(self, packet_type: "PacketType") -> None:
        super().__init__(f"unexpected packet {packet_type!r}")
        self.packet_type = packet_type


class EncodeError(Exception):
    """Raised when a packet cannot be serialised."""


class NotEnoughCapacity(EncodeError):
    """The output buffer is too small."""


class PayloadTooLong(EncodeError):
    """A length does not fit in its wire field."""


class InvalidOutgoingPacket(EncodeError):
    """The packet to send is not well formed."""


class QoS(IntEnum):
    """Quality of service."""

    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2


def qos(num: int) -> QoS:
    """Map a number to a QoS level."""
    try:
        return QoS(num)
    except ValueError:
        raise InvalidQoS(num) from None


class Protocol(Enum):
    """Protocol version."""

    V4 = 4
    V5 = 5


class PacketType(IntEnum):
    """MQTT control packet type."""

    CONNECT = 1
    CONNACK = 2
    PUBLISH = 3
    PUBACK = 4
    PUBREC = 5
    PUBREL = 6
    PUBCOMP = 7
    SUBSCRIBE = 8
    SUBACK = 9
    UNSUBSCRIBE = 10
    UNSUBACK = 11
    PINGREQ = 12
    PINGRESP = 13
    DISCONNECT = 14


@dataclass(frozen=True, order=True)
class FixedHeader:
    """The first byte plus the decoded remaining length of a packet."""

    byte1: int
    fixed_header_len: int
    remaining_len: int

    def packet_type(self) -> PacketType:
        num = self.byte1 >> 4
        try:
            return PacketType(num)
        except ValueError:
            raise InvalidPacketType(num) from None

    def frame_length(self) -> int:
        """Size of the whole packet: fixed header, variable header and payload."""
        return self.fixed_header_len + self.remaining_len


def _decode_length(data: bytes) -> tuple[int, int]:
    """Decode a variable byte integer; return (bytes used, value)."""
    value = 0
    used = 0
    shift = 0
    for byte in data:
        used += 1
        value += (byte & 0x7F) << shift
        if byte & 0x80 == 0:
            return used, value
        shift += 7
        if shift > 21:
            raise MalformedRemainingLength("remaining length exceeds four bytes")
    raise NeedMoreData(1)


def parse_fixed_header(data: bytes) -> FixedHeader:
    """Parse the fixed header at the start of ``data``."""
    if len(data) < 2:
        raise NeedMoreData(2 - len(data))
    used, length = _decode_length(data[1:])
    return FixedHeader(data[0], used + 1, length)


def check(data: bytes, max_packet_size: int) -> FixedHeader:
    """Return the fixed header if ``data`` holds a whole packet within the size limit."""
    header = parse_fixed_header(data)
    if header.remaining_len > max_packet_size:
        raise PayloadSizeLimitExceeded(header.remaining_len)
    frame_length = header.frame_length()
    if len(data) < frame_length:
        raise NeedMoreData(frame_length - len(data))
    return header


class Reader:
    """Consumes MQTT primitive fields from a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def advance(self, n: int) -> None:
        if n < 0 or self._pos + n > len(self._data):
            raise MalformedPacket("advance past end of data")
        self._pos += n

    def remaining(self) -> bytes:
        """The bytes not yet consumed."""
        return self._data[self._pos:]

    def _left(self) -> int:
        return len(self._data) - self._pos

    def read_u8(self) -> int:
        if self._left() < 1:
            raise MalformedPacket("missing byte")
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_u16(self) -> int:
        if self._left() < 2:
            raise MalformedPacket("missing 16-bit field")
        value = int.from_bytes(self._data[self._pos:self._pos + 2], "big")
        self._pos += 2
        return value

    def read_bytes(self) -> bytes:
        """Read a length-prefixed byte string."""
        length = self.read_u16()
        if length > self._left():
            raise MalformedPacket("length prefix exceeds packet")
        value = self._data[self._pos:self._pos + length]
        self._pos += length
        return value

    def read_string(self) -> str:
        """Read a length-prefixed UTF-8 string."""
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            raise BadUtf8("string is not valid UTF-8") from None


class Writer:
    """Appends MQTT primitive fields to a buffer of bounded capacity.

    A capacity of ``None`` means the buffer may grow without limit.
    """

    def __init__(self, capacity: int | None) -> None:
        self.capacity = capacity
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def __getitem__(self, index):
        return self._buffer[index]

    def __setitem__(self, index, value) -> None:
        self._buffer[index] = value

    def spare_capacity(self) -> int | None:
        if self.capacity is None:
            return None
        return self.capacity - len(self._buffer)

    def _reserve(self, n: int) -> None:
        spare = self.spare_capacity()
        if spare is not None and spare < n:
            raise NotEnoughCapacity(f"need {n} byte(s), {spare} available")

    def put_u8(self, byte: int) -> None:
        self._reserve(1)
        self._buffer.append(byte)

    def put_u16(self, value: int) -> None:
        self._reserve(2)
        self._buffer += value.to_bytes(2, "big")

    def put_slice(self, data: bytes) -> None:
        self._reserve(len(data))
        self._buffer += data

    def write_bytes(self, data: bytes) -> None:
        """Write a length-prefixed byte string."""
        if len(data) > _U16_MAX:
            raise PayloadTooLong("field longer than 65535 bytes")
        self.put_u16(len(data))
        self.put_slice(data)

    def write_string(self, text: str) -> None:
        """Write a length-prefixed UTF-8 string."""
        self.write_bytes(text.encode("utf-8"))

    def write_remaining_length(self, length: int) -> int:
        """Write a variable byte integer; return how many bytes it took."""
        if length > MAX_REMAINING_LENGTH:
            raise PayloadTooLong(f"remaining length {length} too large")
        count = 0
        while True:
            byte = length % 128
            length //= 128
            if length > 0:
                byte |= 0x80
            self.put_u8(byte)
            count += 1
            if length == 0:
                return count

    def getvalue(self) -> bytes:
        return bytes(self._buffer)