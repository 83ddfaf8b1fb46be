"""Tests for the collectd binary packet writer and UDP sender."""

import hashlib
import hmac
import socket
import struct
from dataclasses import replace

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

from collectd_reporter.errors import PacketError
from collectd_reporter.metadata import MetaData
from collectd_reporter.protocol import (
    OFB,
    TYPE_ENCR_AES256,
    TYPE_HOST,
    TYPE_INTERVAL,
    TYPE_PLUGIN,
    TYPE_PLUGIN_INSTANCE,
    TYPE_SIGN_SHA256,
    TYPE_TIME,
    TYPE_TYPE,
    TYPE_TYPE_INSTANCE,
    TYPE_VALUES,
    PacketWriter,
    SecurityLevel,
    encode_packet,
)
from collectd_reporter.transport import Sender

META = MetaData(host="h", timestamp=100, interval=10, plugin="jvm.heap", type_instance="used")


class RecordingSink:
    def __init__(self):
        self.sent: list[bytes] = []

    def send(self, data: bytes) -> None:
        self.sent.append(data)


def _parts(packet: bytes) -> list[tuple[int, bytes]]:
    parts = []
    offset = 0
    while offset < len(packet):
        part_type, length = struct.unpack_from(">HH", packet, offset)
        parts.append((part_type, packet[offset + 4:offset + length]))
        offset += length
    return parts


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def test_encode_part_order_and_contents():
    parts = _parts(encode_packet(META, (1.5,)))
    assert [t for t, _ in parts] == [
        TYPE_HOST,
        TYPE_TIME,
        TYPE_PLUGIN,
        TYPE_PLUGIN_INSTANCE,
        TYPE_TYPE,
        TYPE_TYPE_INSTANCE,
        TYPE_INTERVAL,
        TYPE_VALUES,
    ]
    body = dict(parts)
    assert body[TYPE_HOST] == b"h\x00"
    assert body[TYPE_PLUGIN] == b"jvm.heap\x00"
    assert body[TYPE_PLUGIN_INSTANCE] == b"\x00"
    assert body[TYPE_TYPE] == b"gauge\x00"
    assert body[TYPE_TYPE_INSTANCE] == b"used\x00"
    assert struct.unpack(">Q", body[TYPE_TIME]) == (100,)
    assert struct.unpack(">Q", body[TYPE_INTERVAL]) == (10,)


def test_encode_string_part_bytes():
    packet = encode_packet(META, (1.5,))
    assert packet.startswith(b"\x00\x00\x00\x06h\x00")


def test_encode_values_as_little_endian_gauges():
    load = replace(META, type="load")
    values = dict(_parts(encode_packet(load, (1.5, 7))))[TYPE_VALUES]
    count = struct.unpack(">H", values[:2])[0]
    assert count == 2
    assert values[2:4] == b"\x01\x01"
    assert struct.unpack("<dd", values[4:]) == (1.5, 7.0)


@pytest.mark.parametrize("bad", [(), ("1",), (None,), (True,)])
def test_encode_rejects_invalid_values(bad):
    with pytest.raises(PacketError):
        encode_packet(META, bad)


def test_gauge_type_takes_exactly_one_value():
    with pytest.raises(PacketError, match="exactly one value, got 2"):
        encode_packet(META, (1.5, 7))
    sink = RecordingSink()
    with pytest.raises(PacketError):
        PacketWriter(sink).write(META, 1.0, 2.0)
    assert sink.sent == []


def test_encode_rejects_long_names():
    with pytest.raises(PacketError, match="exceeds 63 bytes"):
        encode_packet(META.with_plugin("p" * 64), (1,))
    encode_packet(META.with_plugin("p" * 63), (1,))


def test_encode_rejects_negative_timestamp():
    with pytest.raises(PacketError):
        encode_packet(MetaData(host="h", timestamp=-1, interval=10), (1,))


def test_write_rejects_oversized_packet():
    sink = RecordingSink()
    with pytest.raises(PacketError, match="exceeds 1024 bytes"):
        PacketWriter(sink, "u" * 1000, "secret", SecurityLevel.SIGN).write(META, 1.0)
    assert sink.sent == []


def test_packet_error_is_value_error():
    assert issubclass(PacketError, ValueError)


# ---------------------------------------------------------------------------
# Security levels
# ---------------------------------------------------------------------------

def test_none_sends_plain_packet():
    sink = RecordingSink()
    PacketWriter(sink).write(META, 2.0)
    assert sink.sent == [encode_packet(META, (2.0,))]


def test_sign_prepends_hmac():
    sink = RecordingSink()
    PacketWriter(sink, "user", "secret", SecurityLevel.SIGN).write(META, 2.0)
    packet = sink.sent[0]

    part_type, length = struct.unpack_from(">HH", packet)
    assert part_type == TYPE_SIGN_SHA256
    assert length == 4 + 32 + len(b"user")
    mac = packet[4:36]
    assert packet[36:length] == b"user"
    payload = packet[length:]
    assert payload == encode_packet(META, (2.0,))
    assert mac == hmac.new(b"secret", b"user" + payload, hashlib.sha256).digest()


def test_encrypt_round_trip():
    sink = RecordingSink()
    PacketWriter(sink, "user", "secret", SecurityLevel.ENCRYPT).write(META, 2.0)
    packet = sink.sent[0]

    part_type, length = struct.unpack_from(">HH", packet)
    assert part_type == TYPE_ENCR_AES256
    assert length == len(packet)
    (user_len,) = struct.unpack_from(">H", packet, 4)
    assert packet[6:6 + user_len] == b"user"
    iv = packet[6 + user_len:22 + user_len]
    ciphertext = packet[22 + user_len:]

    key = hashlib.sha256(b"secret").digest()
    decryptor = Cipher(algorithms.AES(key), OFB(iv)).decryptor()
    plain = decryptor.update(ciphertext) + decryptor.finalize()
    digest, payload = plain[:20], plain[20:]
    assert payload == encode_packet(META, (2.0,))
    assert digest == hashlib.sha1(payload).digest()


def test_encrypt_uses_fresh_iv():
    sink = RecordingSink()
    writer = PacketWriter(sink, "user", "secret", SecurityLevel.ENCRYPT)
    writer.write(META, 1.0)
    writer.write(META, 1.0)
    assert sink.sent[0] != sink.sent[1]


@pytest.mark.parametrize("value,expected", [
    ("none", SecurityLevel.NONE),
    ("SIGN", SecurityLevel.SIGN),
    (" Encrypt ", SecurityLevel.ENCRYPT),
    (SecurityLevel.SIGN, SecurityLevel.SIGN),
])
def test_security_level_parse(value, expected):
    assert SecurityLevel.parse(value) is expected


def test_security_level_parse_unknown():
    with pytest.raises(ValueError, match="unknown security level"):
        SecurityLevel.parse("tls")


# ---------------------------------------------------------------------------
# Sender
# ---------------------------------------------------------------------------

class TestSender:

    def test_connect_without_host(self):
        sender = Sender(None)
        with pytest.raises(ConnectionError):
            sender.connect()
        assert not sender.is_connected()

    def test_send_when_not_connected(self):
        with pytest.raises(OSError):
            Sender("127.0.0.1").send(b"x")

    def test_connect_send_disconnect(self):
        receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        receiver.bind(("127.0.0.1", 0))
        receiver.settimeout(2)
        try:
            sender = Sender("127.0.0.1", receiver.getsockname()[1])
            assert not sender.is_connected()
            sender.connect()
            assert sender.is_connected()
            sender.send(b"hello")
            data, _ = receiver.recvfrom(64)
            assert data == b"hello"
            sender.disconnect()
            assert not sender.is_connected()
            # second disconnect is harmless
            sender.disconnect()
        finally:
            receiver.close()
