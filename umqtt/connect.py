"""Connect packet and the options that build it."""

from __future__ import annotations

from dataclasses import dataclass

from umqtt.codec import (
    FixedHeader,
    InvalidProtocol,
    InvalidProtocolLevel,
    MalformedPacket,
    Protocol,
    QoS,
    Reader,
    Writer,
    qos,
)

_USERNAME_FLAG = 0x80
_PASSWORD_FLAG = 0x40
_WILL_RETAIN_FLAG = 0x20
_WILL_QOS_MASK = 0x18
_WILL_FLAG = 0x04
_CLEAN_SESSION_FLAG = 0x02


@dataclass(frozen=True)
class Login:
    """User name and password credentials."""

    username: str
    password: bytes

    @classmethod
    def _read(cls, connect_flags: int, reader: Reader) -> Login | None:
        username = reader.read_string() if connect_flags & _USERNAME_FLAG else ""
        password = reader.read_bytes() if connect_flags & _PASSWORD_FLAG else b""
        if not username and not password:
            return None
        return cls(username, password)

    def _len(self) -> int:
        length = 0
        if self.username:
            length += 2 + len(self.username.encode("utf-8"))
        if self.password:
            length += 2 + len(self.password)
        return length

    def write(self, writer: Writer) -> int:
        """Write the credentials and return the connect flags they set."""
        flags = 0
        if self.username:
            flags |= _USERNAME_FLAG
            writer.write_string(self.username)
        if self.password:
            flags |= _PASSWORD_FLAG
            writer.write_bytes(self.password)
        return flags


@dataclass(frozen=True)
class LastWill:
    """Message the broker publishes on behalf of the client when it goes away."""

    topic: str
    message: bytes
    qos: QoS
    retain: bool

    @classmethod
    def _read(cls, connect_flags: int, reader: Reader) -> LastWill | None:
        if not connect_flags & _WILL_FLAG:
            if connect_flags & (_WILL_RETAIN_FLAG | _WILL_QOS_MASK):
                raise MalformedPacket("will qos or retain set without a will")
            return None
        topic = reader.read_string()
        message = reader.read_bytes()
        will_qos = qos((connect_flags & _WILL_QOS_MASK) >> 3)
        return cls(topic, message, will_qos, bool(connect_flags & _WILL_RETAIN_FLAG))

    def _len(self) -> int:
        return 2 + len(self.topic.encode("utf-8")) + 2 + len(self.message)

    def write(self, writer: Writer) -> int:
        """Write the will and return the connect flags it sets."""
        flags = _WILL_FLAG | (int(self.qos) << 3)
        if self.retain:
            flags |= _WILL_RETAIN_FLAG
        writer.write_string(self.topic)
        writer.write_bytes(self.message)
        return flags


@dataclass(frozen=True)
class Connect:
    """Connection packet sent by the client."""

    protocol: Protocol
    keep_alive: int
    client_id: str
    clean_session: bool
    last_will: LastWill | None = None
    login: Login | None = None

    @classmethod
    def read_exact(cls, fixed_header: FixedHeader, data: bytes) -> Connect:
        reader = Reader(data)
        reader.advance(fixed_header.fixed_header_len)

        protocol_name = reader.read_string()
        protocol_level = reader.read_u8()
        if protocol_name != "MQTT":
            raise InvalidProtocol(f"unknown protocol name {protocol_name!r}")
        if protocol_level != 4:
            raise InvalidProtocolLevel(protocol_level)

        connect_flags = reader.read_u8()
        keep_alive = reader.read_u16()
        client_id = reader.read_string()
        last_will = LastWill._read(connect_flags, reader)
        login = Login._read(connect_flags, reader)

        return cls(
            protocol=Protocol.V4,
            keep_alive=keep_alive,
            client_id=client_id,
            clean_session=bool(connect_flags & _CLEAN_SESSION_FLAG),
            last_will=last_will,
            login=login,
        )

    def _len(self) -> int:
        # protocol name, level, connect flags, keep alive
        length = 2 + 4 + 1 + 1 + 2
        length += 2 + len(self.client_id.encode("utf-8"))
        if self.last_will is not None:
            length += self.last_will._len()
        if self.login is not None:
            length += self.login._len()
        return length

    def encode(self, capacity: int | None = None) -> bytes:
        writer = Writer(capacity)
        writer.put_u8(0x10)
        writer.write_remaining_length(self._len())
        writer.write_string("MQTT")
        writer.put_u8(self.protocol.value)

        flags = _CLEAN_SESSION_FLAG if self.clean_session else 0
        flags_index = len(writer)
        writer.put_u8(flags)
        writer.put_u16(self.keep_alive)
        writer.write_string(self.client_id)

        if self.last_will is not None:
            flags |= self.last_will.write(writer)
        if self.login is not None:
            flags |= self.login.write(writer)

        writer[flags_index] = flags
        return writer.getvalue()


@dataclass
class ConnectOptions:
    """Options used when connecting to a broker."""

    client_id: str = ""
    last_will: LastWill | None = None
    login: Login | None = None
    keep_alive: int = 0
    clean_session: bool = False

    def as_connect(self) -> Connect:
        return Connect(
            protocol=Protocol.V4,
            keep_alive=self.keep_alive,
            client_id=self.client_id,
            clean_session=self.clean_session,
            last_will=self.last_will,
            login=self.login,
        )