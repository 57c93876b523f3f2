"""Transport-level client state: connection handshake, packet framing and keep alive."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum, auto
from typing import Union

from umqtt.acks import ConnAck, PingResp, PubAck, PubComp, PubRec, PubRel, UnsubAck
from umqtt.clock import Instant
from umqtt.codec import (
    DecodeError,
    NeedMoreData,
    PacketType,
    UnexpectedPacket,
    UnsupportedPacket,
)
from umqtt.connect import ConnectOptions
from umqtt.packet import packet_type_of, read_packet
from umqtt.publish import Publish
from umqtt.suback import SubAck


class State(Enum):
    """Connection state of the transport client."""

    DISCONNECTED = auto()
    TRANSPORT_CONNECTED = auto()
    CONNECTED = auto()


@dataclass(frozen=True)
class Disconnected:
    """Notification that the connection to the broker is gone."""


Notification = Union[
    ConnAck, Publish, PubAck, PubRec, PubRel, PubComp, SubAck, UnsubAck, PingResp, Disconnected
]

_ZERO = timedelta(0)
_FORWARDED = (Publish, PubAck, PubRec, PubRel, PubComp, SubAck, UnsubAck, PingResp)


class TransportClient:
    """Low-level client handling the transport side of an MQTT connection.

    It tracks the handshake, assembles packets from received bytes and keeps
    track of when the next ping is due. Times are :class:`Instant` values from
    a monotonic clock.
    """

    def __init__(self, max_packet_size: int) -> None:
        self.max_packet_size = max_packet_size
        self.keep_alive = _ZERO
        self.state = State.DISCONNECTED
        self._packet_send_at = Instant.from_seconds_since_epoch(0)

    def on_transport_opened(self, options: ConnectOptions) -> None:
        """Signal that a transport to a broker has been opened."""
        self.keep_alive = timedelta(seconds=options.keep_alive)
        self._packet_send_at = Instant.from_seconds_since_epoch(0)
        self.state = State.TRANSPORT_CONNECTED

    def on_packet_sent(self, now: Instant) -> None:
        """Record that a packet was sent to the broker at ``now``."""
        if self.keep_alive > _ZERO:
            self._packet_send_at = now + self.keep_alive

    def on_transport_closed(self) -> None:
        self.state = State.DISCONNECTED

    def _read(self, data: bytes):
        try:
            return read_packet(data, self.max_packet_size)
        except NeedMoreData:
            return None
        except DecodeError:
            self.state = State.DISCONNECTED
            raise

    def on_bytes_received(self, data: bytes) -> tuple[Notification, int] | None:
        """Try to parse one packet from ``data``.

        Returns ``None`` when more bytes are needed, otherwise the notification
        and the number of bytes the caller should drop from its buffer.
        """
        if self.state is State.DISCONNECTED:
            return Disconnected(), 0

        result = self._read(data)
        if result is None:
            return None
        packet, taken = result

        if self.state is State.TRANSPORT_CONNECTED:
            if isinstance(packet, ConnAck):
                if packet.code.is_success():
                    self.state = State.CONNECTED
                    return packet, taken
                self.state = State.DISCONNECTED
                return Disconnected(), 0
            self.state = State.DISCONNECTED
            raise UnexpectedPacket(packet_type_of(packet))

        if isinstance(packet, ConnAck):
            self.state = State.DISCONNECTED
            raise UnexpectedPacket(PacketType.CONNACK)
        if isinstance(packet, _FORWARDED):
            return packet, taken
        self.state = State.DISCONNECTED
        raise UnsupportedPacket(f"{packet_type_of(packet).name} is not handled by a client")

    def next_ping_in(self, now: Instant) -> timedelta | None:
        """Time until the next ping is due, or ``None`` when keep alive is off."""
        if self.keep_alive > _ZERO:
            return self._packet_send_at - now
        return None

    def is_disconnected(self) -> bool:
        return self.state is State.DISCONNECTED