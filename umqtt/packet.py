"""Framing of whole packets out of a byte stream."""

from __future__ import annotations

from typing import Union

from umqtt.acks import (
    ConnAck,
    Disconnect,
    PingReq,
    PingResp,
    PubAck,
    PubComp,
    PubRec,
    PubRel,
    UnsubAck,
)
from umqtt.codec import FixedHeader, MalformedPacket, PacketType, check
from umqtt.connect import Connect
from umqtt.publish import Publish
from umqtt.suback import SubAck
from umqtt.subscribe import Subscribe
from umqtt.unsubscribe import Unsubscribe

Packet = Union[
    Connect,
    ConnAck,
    Publish,
    PubAck,
    PubRec,
    PubRel,
    PubComp,
    Subscribe,
    SubAck,
    Unsubscribe,
    UnsubAck,
    PingReq,
    PingResp,
    Disconnect,
]

_READERS = {
    PacketType.CONNECT: Connect.read_exact,
    PacketType.CONNACK: ConnAck.read_exact,
    PacketType.PUBLISH: Publish.read_exact,
    PacketType.PUBACK: PubAck.read_exact,
    PacketType.PUBREC: PubRec.read_exact,
    PacketType.PUBREL: PubRel.read_exact,
    PacketType.PUBCOMP: PubComp.read_exact,
    PacketType.SUBSCRIBE: Subscribe.read_exact,
    PacketType.SUBACK: SubAck.read_exact,
    PacketType.UNSUBSCRIBE: Unsubscribe.read_exact,
    PacketType.UNSUBACK: UnsubAck.read_exact,
}

_EMPTY_PACKETS = {
    PacketType.PINGREQ: PingReq,
    PacketType.PINGRESP: PingResp,
    PacketType.DISCONNECT: Disconnect,
}

_TYPES = {
    Connect: PacketType.CONNECT,
    ConnAck: PacketType.CONNACK,
    Publish: PacketType.PUBLISH,
    PubAck: PacketType.PUBACK,
    PubRec: PacketType.PUBREC,
    PubRel: PacketType.PUBREL,
    PubComp: PacketType.PUBCOMP,
    Subscribe: PacketType.SUBSCRIBE,
    SubAck: PacketType.SUBACK,
    Unsubscribe: PacketType.UNSUBSCRIBE,
    UnsubAck: PacketType.UNSUBACK,
    PingReq: PacketType.PINGREQ,
    PingResp: PacketType.PINGRESP,
    Disconnect: PacketType.DISCONNECT,
}


def _read_exact(fixed_header: FixedHeader, data: bytes) -> Packet:
    packet_type = fixed_header.packet_type()
    if fixed_header.remaining_len == 0:
        empty = _EMPTY_PACKETS.get(packet_type)
        if empty is None:
            raise MalformedPacket(f"{packet_type.name} packet without content")
        return empty()
    empty = _EMPTY_PACKETS.get(packet_type)
    if empty is not None:
        return empty()
    return _READERS[packet_type](fixed_header, data)


def read_packet(data: bytes, max_size: int) -> tuple[Packet, int]:
    """Read the next packet from ``data``; return it and the number of bytes it used."""
    fixed_header = check(data, max_size)
    frame = bytes(data[:fixed_header.frame_length()])
    return _read_exact(fixed_header, frame), len(frame)


def packet_type_of(packet: Packet) -> PacketType:
    """The control packet type of a packet object."""
    try:
        return _TYPES[type(packet)]
    except KeyError:
        raise TypeError(f"not an MQTT packet: {packet!r}") from None