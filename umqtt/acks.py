"""Small fixed-layout packets: connack, the publish acknowledgements, unsuback, ping and disconnect."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from umqtt.codec import (
    FixedHeader,
    InvalidConnectReturnCode,
    MalformedPacket,
    Reader,
    Writer,
)


class ConnectReturnCode(IntEnum):
    """Return code carried by a connack."""

    SUCCESS = 0
    REFUSED_PROTOCOL_VERSION = 1
    BAD_CLIENT_ID = 2
    SERVICE_UNAVAILABLE = 3
    BAD_USER_NAME_PASSWORD = 4
    NOT_AUTHORIZED = 5

    def is_success(self) -> bool:
        return self is ConnectReturnCode.SUCCESS


def _connect_return(num: int) -> ConnectReturnCode:
    try:
        return ConnectReturnCode(num)
    except ValueError:
        raise InvalidConnectReturnCode(num) from None


def _read_pkid(fixed_header: FixedHeader, data: bytes) -> int:
    reader = Reader(data)
    reader.advance(fixed_header.fixed_header_len)
    return reader.read_u16()


def _encode_pkid(first_byte: int, pkid: int, capacity: int | None) -> bytes:
    writer = Writer(capacity)
    writer.put_u8(first_byte)
    writer.write_remaining_length(2)
    writer.put_u16(pkid)
    return writer.getvalue()


def _encode_fixed(raw: bytes, capacity: int | None) -> bytes:
    writer = Writer(capacity)
    writer.put_slice(raw)
    return writer.getvalue()


@dataclass(frozen=True)
class ConnAck:
    """Acknowledgement to a connect packet."""

    session_present: bool
    code: ConnectReturnCode

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> ConnAck:
        reader = Reader(data)
        reader.advance(fixed_header.fixed_header_len)
        flags = reader.read_u8()
        return_code = reader.read_u8()
        return cls(session_present=(flags & 0x01) == 1, code=_connect_return(return_code))

    def encode(self, capacity: int | None = None) -> bytes:
        writer = Writer(capacity)
        writer.put_u8(0x20)
        writer.write_remaining_length(2)
        writer.put_u8(int(self.session_present))
        writer.put_u8(int(self.code))
        return writer.getvalue()


@dataclass(frozen=True)
class PubAck:
    """Acknowledgement to a QoS 1 publish."""

    pkid: int

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> PubAck:
        return cls(_read_pkid(fixed_header, data))

    def encode(self, capacity: int | None = None) -> bytes:
        return _encode_pkid(0x40, self.pkid, capacity)


@dataclass(frozen=True)
class PubRec:
    """Acknowledgement to a QoS 2 publish."""

    pkid: int

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> PubRec:
        return cls(_read_pkid(fixed_header, data))

    def encode(self, capacity: int | None = None) -> bytes:
        return _encode_pkid(0x50, self.pkid, capacity)


@dataclass(frozen=True)
class PubRel:
    """QoS 2 publish release, in response to a pubrec."""

    pkid: int

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> PubRel:
        return cls(_read_pkid(fixed_header, data))

    def encode(self, capacity: int | None = None) -> bytes:
        return _encode_pkid(0x62, self.pkid, capacity)


@dataclass(frozen=True)
class PubComp:
    """QoS 2 publish complete, in response to a pubrel."""

    pkid: int

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> PubComp:
        return cls(_read_pkid(fixed_header, data))

    def encode(self, capacity: int | None = None) -> bytes:
        return _encode_pkid(0x70, self.pkid, capacity)


@dataclass(frozen=True)
class UnsubAck:
    """Acknowledgement to an unsubscribe."""

    pkid: int

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> UnsubAck:
        if fixed_header.remaining_len != 2:
            raise MalformedPacket("unsuback remaining length must be 2")
        return cls(_read_pkid(fixed_header, data))

    def encode(self, capacity: int | None = None) -> bytes:
        writer = Writer(capacity)
        writer.put_slice(b"\xb0\x02")
        writer.put_u16(self.pkid)
        return writer.getvalue()


@dataclass(frozen=True)
class PingReq:
    """Ping request."""

    def encode(self, capacity: int | None = None) -> bytes:
        return _encode_fixed(b"\xc0\x00", capacity)


@dataclass(frozen=True)
class PingResp:
    """Ping response."""

    def encode(self, capacity: int | None = None) -> bytes:
        return _encode_fixed(b"\xd0\x00", capacity)


@dataclass(frozen=True)
class Disconnect:
    """Client disconnect."""

    def encode(self, capacity: int | None = None) -> bytes:
        return _encode_fixed(b"\xe0\x00", capacity)