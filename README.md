# umqtt

A small MQTT 3.1.1 library with no dependencies. It encodes and decodes
MQTT control packets. It also provides a transport-level client state
machine, which assembles incoming packets from a byte stream and tracks
keep-alive timing.

## Installation

```
pip install umqtt
```

## Modules

| Module | Contents |
| --- | --- |
| `umqtt.codec` | Error classes, `QoS`, `Protocol`, `PacketType`, `FixedHeader`, `parse_fixed_header`, `check`, and the primitive `Reader` / `Writer` |
| `umqtt.acks` | `ConnAck` with `ConnectReturnCode`, `PubAck`, `PubRec`, `PubRel`, `PubComp`, `UnsubAck`, `PingReq`, `PingResp`, `Disconnect` |
| `umqtt.connect` | `Connect`, `ConnectOptions`, `LastWill`, `Login` |
| `umqtt.publish` | `Publish`, and `OutPublish` with its `TopicWriter` / `PayloadWriter` |
| `umqtt.subscribe` | `Subscribe`, `SubscribeFilter`, `SubscribeWriter`, `RetainForwardRule` |
| `umqtt.suback` | `SubAck`, `SubscribeReasonCode` |
| `umqtt.unsubscribe` | `Unsubscribe` |
| `umqtt.packet` | `read_packet`, `packet_type_of` |
| `umqtt.topics` | `TopicIterator` |
| `umqtt.clock` | `Instant` |
| `umqtt.transport_client` | `TransportClient`, `State`, `Disconnected` |

## Decoding packets

`read_packet(data, max_size)` reads the next packet from the bytes received so
far. It returns the packet object and the number of bytes it used.

```python
from umqtt.packet import read_packet, packet_type_of
from umqtt.acks import PingResp
from umqtt.codec import PacketType

packet, taken = read_packet(b"\xd0\x00\xd0\x00", 20)
assert packet == PingResp()
assert taken == 2
assert packet_type_of(packet) is PacketType.PINGRESP
```

`read_packet` can raise the following errors:

- `NeedMoreData` when the buffer does not yet hold a whole packet. Its
  `needed` attribute gives how many more bytes are required.
- `PayloadSizeLimitExceeded` when the announced remaining length is larger
  than `max_size`.
- Another subclass of `umqtt.codec.DecodeError` for malformed content, such as
  `MalformedPacket`, `BadUtf8`, `InvalidQoS` or `PacketIdZero`.

Each packet class also has a `read_exact(fixed_header, data)` class method.
It takes a `FixedHeader` from `parse_fixed_header` and exactly the packet's
bytes.

## Encoding packets

Each packet has an `encode(capacity=None)` method that returns `bytes`.
Passing a capacity bounds the output size. If the packet would not fit, the
method raises `NotEnoughCapacity`.

```python
from umqtt.acks import ConnAck, ConnectReturnCode
from umqtt.subscribe import Subscribe, SubscribeFilter
from umqtt.codec import QoS

ConnAck(session_present=True, code=ConnectReturnCode.SUCCESS).encode(256)
# b"\x20\x02\x01\x00"

Subscribe(pkid=260, filters=[
    SubscribeFilter("a/+", QoS.AT_MOST_ONCE),
    SubscribeFilter("#", QoS.AT_LEAST_ONCE),
]).encode()
```

A connect packet is usually built from `ConnectOptions`:

```python
from umqtt.connect import ConnectOptions, LastWill, Login
from umqtt.codec import QoS

password = b"password"
options = ConnectOptions(
    client_id="test",
    keep_alive=10,
    clean_session=True,
    last_will=LastWill("/a", b"offline", QoS.AT_LEAST_ONCE, False),
    login=Login(username="user", password=password),
)
data = options.as_connect().encode(256)
```

Encoding can raise the following errors, all subclasses of
`umqtt.codec.EncodeError`:

- `NotEnoughCapacity` when the output does not fit in `capacity`.
- `PayloadTooLong` when a length does not fit its wire field.
- `InvalidOutgoingPacket` for a QoS 1 or 2 publish with packet id 0.

### Publishing without building the topic first

`OutPublish.encode(topic, payload, capacity=None)` takes two callables. The
first receives a `TopicWriter` and the second a `PayloadWriter`. Both
writers have `add_str` and a file-like `write`. `PayloadWriter` also has
`add_u8` and `add_slice`. A given capacity covers the whole packet, including
five bytes reserved for the fixed header.

```python
from umqtt.publish import OutPublish
from umqtt.codec import QoS

out = OutPublish(dup=False, qos=QoS.AT_MOST_ONCE, retain=False, pkid=0)
out.encode(lambda t: t.add_str("hello"), lambda p: p.add_str("world"), 256)
# b"\x30\x0c\x00\x05helloworld"
```

### Writing subscribe filters in place

```python
from umqtt.codec import QoS, Writer
from umqtt.subscribe import SubscribeWriter

buffer = Writer(256)
SubscribeWriter(buffer).add_separated(["hello", "world"], "/", QoS.AT_MOST_ONCE)
assert buffer.getvalue() == b"\x00\x0bhello/world\x00"
```

### Topic pieces

`TopicIterator` yields topic parts with `"/"` between them:

```python
from umqtt.topics import TopicIterator

assert list(TopicIterator(["hello", "world"])) == ["hello", "/", "world"]
assert list(TopicIterator("hello")) == ["hello"]
```

## Transport client

`TransportClient(max_packet_size)` tracks the connection state. It does not
read from or write to a socket; your code does that and keeps the client
informed.

- Call `on_transport_opened(options)` once the transport is open. This takes
  the keep-alive from a `ConnectOptions` and waits for a CONNACK.
- Call `on_packet_sent(now)` each time a packet is sent. `now` is a
  `umqtt.clock.Instant`.
- Pass received bytes to `on_bytes_received(data)`. The return value depends
  on the state:
  - It returns `None` when more bytes are needed.
  - Otherwise it returns `(notification, taken)`. Drop `taken` bytes from your
    buffer.
  - Before the handshake, only a CONNACK is accepted. A successful CONNACK
    moves the client to `State.CONNECTED`. A refused one yields
    `(Disconnected(), 0)`.
  - Once disconnected, every call yields `(Disconnected(), 0)`.
- `next_ping_in(now)` returns the `timedelta` until a ping is due. The value
  stops at zero and does not go negative. It returns `None` when keep-alive
  is 0.
- `on_transport_closed()` and `is_disconnected()` manage and report the state.

```python
from umqtt.transport_client import TransportClient
from umqtt.connect import ConnectOptions
from umqtt.acks import PingResp

client = TransportClient(256)
client.on_transport_opened(ConnectOptions())
client.on_bytes_received(b"\x20\x02\x00\x00")          # CONNACK accepted
notification, taken = client.on_bytes_received(b"\xd0\x00")
assert notification == PingResp() and taken == 2
```

A decoding error moves the client to `State.DISCONNECTED` and is then
re-raised. The following also raise and disconnect:

- An unexpected packet raises `UnexpectedPacket`. This covers any non-CONNACK
  packet during the handshake, and a second CONNACK.
- A packet a client never receives raises `UnsupportedPacket`. These are
  CONNECT, SUBSCRIBE, UNSUBSCRIBE, PINGREQ and DISCONNECT.

`Instant` counts milliseconds since an arbitrary epoch:

- Adding a `timedelta` stops at the 64-bit maximum.
- Subtracting a `timedelta` stops at zero.
- Subtracting one `Instant` from another gives a non-negative `timedelta`.

## What this package does not do

- It has no network I/O, sockets or event loop.
- It does not retransmit or track QoS 1/2 message flows, and it does not
  manage sessions.
- It has no command-line program.
- Only protocol level 4 (MQTT 3.1.1) connect packets are decoded; MQTT 5
  properties are not supported.

## Running the tests

```
pip install -e .[test]
pytest
```