"""Publish packets, both as plain values and written lazily in place."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from umqtt.codec import (
    FixedHeader,
    InvalidOutgoingPacket,
    NotEnoughCapacity,
    PacketIdZero,
    PayloadTooLong,
    QoS,
    Reader,
    Writer,
    qos as qos_from_int,
)

_MAX_FIXED_HEADER = 5
_U16_MAX = 0xFFFF


def _first_byte(dup: bool, qos: QoS, retain: bool) -> int:
    return 0x30 | int(retain) | (int(qos) << 1) | (int(dup) << 3)


@dataclass(frozen=True)
class Publish:
    """A publish packet with its topic and payload."""

    dup: bool
    qos: QoS
    retain: bool
    topic: str
    pkid: int
    payload: bytes

    def __str__(self) -> str:
        try:
            shown: str | bytes = self.payload.decode("utf-8")
        except UnicodeDecodeError:
            shown = self.payload
        return (
            f"Topic = {self.topic}, Qos = {self.qos.name}, Retain = {self.retain}, "
            f"Pkid = {self.pkid}, Payload = {shown!r}"
        )

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> Publish:
        byte1 = fixed_header.byte1
        level = qos_from_int((byte1 & 0b0110) >> 1)
        dup = bool(byte1 & 0b1000)
        retain = bool(byte1 & 0b0001)

        reader = Reader(data)
        reader.advance(fixed_header.fixed_header_len)
        topic = reader.read_string()
        pkid = 0 if level is QoS.AT_MOST_ONCE else reader.read_u16()
        if level is not QoS.AT_MOST_ONCE and pkid == 0:
            raise PacketIdZero("publish with QoS > 0 needs a packet identifier")

        return cls(
            dup=dup,
            qos=level,
            retain=retain,
            topic=topic,
            pkid=pkid,
            payload=reader.remaining(),
        )

    def _len(self) -> int:
        length = 2 + len(self.topic.encode("utf-8")) + len(self.payload)
        if self.qos != QoS.AT_MOST_ONCE and self.pkid != 0:
            length += 2
        return length

    def encode(self, capacity: int | None = None) -> bytes:
        writer = Writer(capacity)
        writer.put_u8(_first_byte(self.dup, self.qos, self.retain))
        writer.write_remaining_length(self._len())
        writer.write_string(self.topic)
        if self.qos != QoS.AT_MOST_ONCE:
            if self.pkid == 0:
                raise InvalidOutgoingPacket("publish with QoS > 0 needs a packet identifier")
            writer.put_u16(self.pkid)
        writer.put_slice(self.payload)
        return writer.getvalue()


class _PartWriter:
    """Common view onto the output buffer handed to topic and payload callbacks."""

    def __init__(self, writer: Writer) -> None:
        self._writer = writer

    def __len__(self) -> int:
        return len(self._writer)

    @property
    def capacity(self) -> int | None:
        return self._writer.capacity

    def is_empty(self) -> bool:
        return len(self) == 0

    def _is_full(self) -> bool:
        return self.capacity is not None and len(self) == self.capacity

    def _add_text(self, text: str) -> None:
        self._writer.put_slice(text.encode("utf-8"))


class TopicWriter(_PartWriter):
    """Receives the topic text when an :class:`OutPublish` is encoded."""

    def __init__(self, writer: Writer) -> None:
        super().__init__(writer)

    def is_full(self) -> bool:
        return self._is_full()

    def add_str(self, text: str) -> None:
        self._add_text(text)

    def write(self, text: str) -> int:
        """File-like write of text; returns the number of characters written."""
        self._add_text(text)
        return len(text)


class PayloadWriter(_PartWriter):
    """Receives the payload bytes when an :class:`OutPublish` is encoded."""

    def __init__(self, writer: Writer) -> None:
        super().__init__(writer)

    def is_full(self) -> bool:
        return self._is_full()

    def add_u8(self, byte: int) -> None:
        self._writer.put_u8(byte)

    def add_slice(self, data: bytes) -> None:
        self._writer.put_slice(data)

    def add_str(self, text: str) -> None:
        self._add_text(text)

    def write(self, text: str) -> int:
        """File-like write of text; returns the number of characters written."""
        self._add_text(text)
        return len(text)


@dataclass(frozen=True)
class OutPublish:
    """A publish whose topic and payload are produced by callbacks while encoding."""

    dup: bool
    qos: QoS
    retain: bool
    pkid: int

    @staticmethod
    def _write_topic(topic: Callable[[TopicWriter], Any], body: Writer) -> None:
        length_index = len(body)
        body.put_slice(b"\x00\x00")
        start = len(body)
        topic(TopicWriter(body))
        topic_len = len(body) - start
        if topic_len > _U16_MAX:
            raise PayloadTooLong("topic longer than 65535 bytes")
        body[length_index:length_index + 2] = topic_len.to_bytes(2, "big")

    def encode(
        self,
        topic: Callable[[TopicWriter], Any],
        payload: Callable[[PayloadWriter], Any],
        capacity: int | None = None,
    ) -> bytes:
        """Build the packet; ``capacity`` bounds the whole buffer, header space included."""
        if capacity is not None and capacity < _MAX_FIXED_HEADER:
            raise NotEnoughCapacity("buffer cannot hold a fixed header")
        body = Writer(None if capacity is None else capacity - _MAX_FIXED_HEADER)

        self._write_topic(topic, body)
        if self.qos != QoS.AT_MOST_ONCE:
            if self.pkid == 0:
                raise InvalidOutgoingPacket("publish with QoS > 0 needs a packet identifier")
            body.put_u16(self.pkid)
        payload(PayloadWriter(body))

        header = Writer(_MAX_FIXED_HEADER)
        header.put_u8(_first_byte(self.dup, self.qos, self.retain))
        header.write_remaining_length(len(body))
        return header.getvalue() + body.getvalue()