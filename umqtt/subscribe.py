"""Subscribe packet, its filters and an in-place filter writer."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from umqtt.codec import (
    EmptySubscription,
    FixedHeader,
    MalformedPacket,
    PayloadTooLong,
    QoS,
    Reader,
    Writer,
    qos as qos_from_int,
)

_U16_MAX = 0xFFFF


@dataclass(frozen=True)
class SubscribeFilter:
    """A topic filter together with the requested QoS."""

    path: str
    qos: QoS

    def __str__(self) -> str:
        return f"Filter = {self.path}, Qos = {self.qos.name}"

    def _len(self) -> int:
        return 2 + len(self.path.encode("utf-8")) + 1

    def write(self, writer: Writer) -> None:
        writer.write_string(self.path)
        writer.put_u8(int(self.qos))


def _parse_filters(data: bytes) -> tuple[list[SubscribeFilter], bytes]:
    """Parse filters until one is incomplete or invalid; return them and the rest."""
    filters = []
    rest = data
    while len(rest) >= 2:
        topic_len = int.from_bytes(rest[:2], "big")
        body = rest[2:]
        if len(body) < topic_len + 1:
            break
        try:
            path = body[:topic_len].decode("utf-8")
            level = qos_from_int(body[topic_len])
        except (UnicodeDecodeError, ValueError):
            break
        filters.append(SubscribeFilter(path, level))
        rest = body[topic_len + 1:]
    return filters, rest


@dataclass(frozen=True)
class Subscribe:
    """Subscription request."""

    pkid: int
    filters: tuple[SubscribeFilter, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", tuple(self.filters))

    def __str__(self) -> str:
        shown = ", ".join(f"{{{f}}}" for f in self.filters)
        return f"Filters = [{shown}], Packet id = {self.pkid}"

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> Subscribe:
        reader = Reader(data)
        reader.advance(fixed_header.fixed_header_len)
        pkid = reader.read_u16()
        filters, rest = _parse_filters(reader.remaining())
        if not filters:
            raise EmptySubscription("subscribe without filters")
        if rest:
            raise MalformedPacket("trailing bytes after subscribe filters")
        return cls(pkid, tuple(filters))

    def _len(self) -> int:
        return 2 + sum(f._len() for f in self.filters)

    def encode(self, capacity: int | None = None) -> bytes:
        writer = Writer(capacity)
        writer.put_u8(0x82)
        writer.write_remaining_length(self._len())
        writer.put_u16(self.pkid)
        for subscribe_filter in self.filters:
            subscribe_filter.write(writer)
        return writer.getvalue()


class SubscribeWriter:
    """Writes subscribe filters directly into an output buffer."""

    def __init__(self, writer: Writer) -> None:
        self._writer = writer

    def add_str(self, topic: str, qos: QoS) -> None:
        raw = topic.encode("utf-8")
        if len(raw) > _U16_MAX:
            raise PayloadTooLong("topic longer than 65535 bytes")
        self._writer.put_slice(len(raw).to_bytes(2, "big"))
        self._writer.put_slice(raw)
        self._writer.put_slice(bytes([int(qos)]))

    def add_separated(self, parts: Sequence[str], separator: str, qos: QoS) -> None:
        """Write a filter made of ``parts`` joined by ``separator``."""
        start = len(self._writer)
        self._writer.put_slice(b"\x00\x00")
        sep = separator.encode("utf-8")
        for index, part in enumerate(parts):
            if index:
                self._writer.put_slice(sep)
            self._writer.put_slice(part.encode("utf-8"))
        length = len(self._writer) - start - 2
        if length > _U16_MAX:
            raise PayloadTooLong("topic longer than 65535 bytes")
        self._writer[start:start + 2] = length.to_bytes(2, "big")
        self._writer.put_slice(bytes([int(qos)]))


class RetainForwardRule(Enum):
    """When the broker forwards retained messages on subscribe."""

    ON_EVERY_SUBSCRIBE = "on_every_subscribe"
    ON_NEW_SUBSCRIBE = "on_new_subscribe"
    NEVER = "never"