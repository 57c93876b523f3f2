from datetime import timedelta

import pytest

from umqtt.acks import ConnAck, ConnectReturnCode, PingResp, PubAck
from umqtt.clock import Instant
from umqtt.codec import (
    MalformedPacket,
    PacketType,
    QoS,
    UnexpectedPacket,
    UnsupportedPacket,
)
from umqtt.connect import ConnectOptions
from umqtt.publish import Publish
from umqtt.subscribe import Subscribe, SubscribeFilter
from umqtt.transport_client import Disconnected, State, TransportClient


def connected_client(keep_alive=0):
    client = TransportClient(256)
    client.on_transport_opened(ConnectOptions(keep_alive=keep_alive))
    notification, taken = client.on_bytes_received(bytes([0x20, 2, 0, 0]))
    assert notification == ConnAck(False, ConnectReturnCode.SUCCESS)
    assert taken == 4
    return client


def test_documented_ping_sequence():
    client = connected_client()
    data = bytearray([0xD0, 0, 0xD0, 0])
    notification, taken = client.on_bytes_received(bytes(data))
    assert taken == 2
    assert notification == PingResp()
    del data[:2]
    notification, taken = client.on_bytes_received(bytes(data))
    assert taken == 2
    assert notification == PingResp()
    del data[:2]
    assert client.on_bytes_received(bytes(data)) is None


def test_new_client_is_disconnected():
    client = TransportClient(256)
    assert client.is_disconnected()
    assert client.on_bytes_received(b"\xd0\x00") == (Disconnected(), 0)


def test_successful_connack_connects():
    client = connected_client()
    assert client.state is State.CONNECTED
    assert not client.is_disconnected()


def test_refused_connack_disconnects():
    client = TransportClient(256)
    client.on_transport_opened(ConnectOptions())
    assert client.on_bytes_received(bytes([0x20, 2, 0, 5])) == (Disconnected(), 0)
    assert client.is_disconnected()


def test_partial_connack_waits():
    client = TransportClient(256)
    client.on_transport_opened(ConnectOptions())
    assert client.on_bytes_received(b"\x20\x02\x00") is None
    assert client.state is State.TRANSPORT_CONNECTED


def test_packet_before_connack_is_unexpected():
    client = TransportClient(256)
    client.on_transport_opened(ConnectOptions())
    with pytest.raises(UnexpectedPacket) as info:
        client.on_bytes_received(b"\xd0\x00")
    assert info.value.packet_type == PacketType.PINGRESP
    assert client.is_disconnected()


def test_second_connack_is_unexpected():
    client = connected_client()
    with pytest.raises(UnexpectedPacket) as info:
        client.on_bytes_received(bytes([0x20, 2, 0, 0]))
    assert info.value.packet_type == PacketType.CONNACK
    assert client.is_disconnected()


def test_subscribe_from_broker_is_unsupported():
    client = connected_client()
    raw = Subscribe(1, (SubscribeFilter("a", QoS.AT_MOST_ONCE),)).encode()
    with pytest.raises(UnsupportedPacket):
        client.on_bytes_received(raw)
    assert client.is_disconnected()


def test_malformed_packet_disconnects():
    client = connected_client()
    with pytest.raises(MalformedPacket):
        client.on_bytes_received(b"\x40\x00")
    assert client.is_disconnected()


def test_publish_and_puback_are_forwarded():
    client = connected_client()
    publish = Publish(False, QoS.AT_LEAST_ONCE, False, "a/b", 9, b"data")
    raw = publish.encode()
    assert client.on_bytes_received(raw) == (publish, len(raw))
    assert client.on_bytes_received(PubAck(9).encode()) == (PubAck(9), 4)


def test_closed_transport_reports_disconnected():
    client = connected_client()
    client.on_transport_closed()
    assert client.on_bytes_received(b"\xd0\x00") == (Disconnected(), 0)


def test_no_ping_without_keep_alive():
    client = connected_client()
    client.on_packet_sent(Instant.from_seconds_since_epoch(5))
    assert client.next_ping_in(Instant.from_seconds_since_epoch(6)) is None


def test_ping_due_after_keep_alive():
    client = connected_client(keep_alive=10)
    client.on_packet_sent(Instant.from_seconds_since_epoch(1))
    assert client.next_ping_in(Instant.from_seconds_since_epoch(4)) == timedelta(seconds=7)
    assert client.next_ping_in(Instant.from_seconds_since_epoch(20)) == timedelta(0)


def test_ping_due_immediately_before_any_send():
    client = connected_client(keep_alive=10)
    assert client.next_ping_in(Instant.from_seconds_since_epoch(3)) == timedelta(0)