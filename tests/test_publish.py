import pytest

from umqtt.codec import (
    InvalidOutgoingPacket,
    InvalidQoS,
    NotEnoughCapacity,
    PacketIdZero,
    QoS,
    parse_fixed_header,
)
from umqtt.publish import OutPublish, Publish


def _decode(data: bytes) -> Publish:
    header = parse_fixed_header(data)
    return Publish.read_exact(header, data[: header.frame_length()])


def test_out_publish_qos0():
    output = OutPublish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, pkid=0).encode(
        lambda w: w.add_str("hello"), lambda w: w.add_str("world"), 256
    )
    assert output == b"\x30\x0c\x00\x05helloworld"


def test_out_publish_multibyte_remaining_len_qos0():
    def payload(writer):
        for i in range(128):
            writer.add_u8(i)

    output = OutPublish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, pkid=0).encode(
        lambda w: w.add_str("hello"), payload, 256
    )
    assert len(output) == 1 + 2 + 2 + 5 + 128
    assert output[0:10] == b"\x30\x87\x01\x00\x05hello"
    assert output[10:] == bytes(range(128))


def test_out_publish_qos1_includes_packet_id():
    output = OutPublish(dup=False, qos=QoS.AT_LEAST_ONCE, retain=False, pkid=10).encode(
        lambda w: w.add_str("hello"), lambda w: w.add_slice(b"world"), 256
    )
    assert output == b"\x32\x0e\x00\x05hello\x00\x0aworld"


def test_out_publish_qos1_zero_packet_id_rejected():
    with pytest.raises(InvalidOutgoingPacket):
        OutPublish(dup=False, qos=QoS.AT_LEAST_ONCE, retain=False, pkid=0).encode(
            lambda w: w.add_str("a"), lambda w: None, 256
        )


def test_out_publish_not_enough_capacity():
    with pytest.raises(NotEnoughCapacity):
        OutPublish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, pkid=0).encode(
            lambda w: w.add_str("hello"), lambda w: None, 10
        )


def test_out_publish_capacity_below_header_size():
    with pytest.raises(NotEnoughCapacity):
        OutPublish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, pkid=0).encode(
            lambda w: None, lambda w: None, 4
        )


def test_topic_writer_write_and_is_full():
    seen = []

    def topic(writer):
        writer.write("hel")
        writer.write("lo")
        seen.append(writer.is_full())

    output = OutPublish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, pkid=0).encode(
        topic, lambda w: seen.append(w.is_full()), 12
    )
    assert output == b"\x30\x07\x00\x05hello"
    assert seen == [True, True]


def test_out_publish_decodes_as_publish():
    output = OutPublish(dup=True, qos=QoS.EXACTLY_ONCE, retain=True, pkid=7).encode(
        lambda w: w.add_str("a/b"), lambda w: w.add_str("data"), None
    )
    assert _decode(output) == Publish(
        dup=True, qos=QoS.EXACTLY_ONCE, retain=True, topic="a/b", pkid=7, payload=b"data"
    )


def test_publish_encode_known_bytes():
    publish = Publish(
        dup=False, qos=QoS.AT_MOST_ONCE, retain=True, topic="a", pkid=0, payload=b"x"
    )
    assert publish.encode() == b"\x31\x04\x00\x01ax"


@pytest.mark.parametrize("level, pkid", [(QoS.AT_MOST_ONCE, 0), (QoS.AT_LEAST_ONCE, 5), (QoS.EXACTLY_ONCE, 300)])
def test_publish_round_trip(level, pkid):
    publish = Publish(dup=False, qos=level, retain=False, topic="x/y", pkid=pkid, payload=b"\x00\xff")
    assert _decode(publish.encode(256)) == publish


def test_publish_encode_zero_packet_id_rejected():
    publish = Publish(dup=False, qos=QoS.AT_LEAST_ONCE, retain=False, topic="a", pkid=0, payload=b"")
    with pytest.raises(InvalidOutgoingPacket):
        publish.encode()


def test_publish_encode_not_enough_capacity():
    publish = Publish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, topic="abc", pkid=0, payload=b"xyz")
    with pytest.raises(NotEnoughCapacity):
        publish.encode(5)


def test_publish_read_packet_id_zero():
    with pytest.raises(PacketIdZero):
        _decode(b"\x32\x05\x00\x01a\x00\x00")


def test_publish_read_invalid_qos():
    with pytest.raises(InvalidQoS):
        _decode(b"\x36\x03\x00\x01a")


def test_publish_str():
    publish = Publish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, topic="t", pkid=0, payload=b"hi")
    assert str(publish) == "Topic = t, Qos = AT_MOST_ONCE, Retain = False, Pkid = 0, Payload = 'hi'"