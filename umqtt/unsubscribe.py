"""Unsubscribe packet."""

from __future__ import annotations

from dataclasses import dataclass

from umqtt.codec import FixedHeader, Reader, Writer


@dataclass(frozen=True)
class Unsubscribe:
    """Request to remove subscriptions for a set of topics."""

    pkid: int
    topics: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "topics", tuple(self.topics))

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> Unsubscribe:
        reader = Reader(data)
        reader.advance(fixed_header.fixed_header_len)
        pkid = reader.read_u16()
        topics = []
        while reader.remaining():
            topics.append(reader.read_string())
        return cls(pkid, tuple(topics))

    def _len(self) -> int:
        return 2 + sum(len(topic.encode("utf-8")) + 2 for topic in self.topics)

    def encode(self, capacity: int | None = None) -> bytes:
        writer = Writer(capacity)
        writer.put_u8(0xA2)
        writer.write_remaining_length(self._len())
        writer.put_u16(self.pkid)
        for topic in self.topics:
            writer.write_string(topic)
        return writer.getvalue()