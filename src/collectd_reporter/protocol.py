"""Encoder for the collectd binary network protocol.

Each call to :meth:`PacketWriter.write` produces one self-contained packet
with the parts::

    HOST, TIME, PLUGIN, PLUGIN_INSTANCE, TYPE, TYPE_INSTANCE, INTERVAL, VALUES

All values are sent as GAUGE (little-endian doubles).  Depending on the
security level the packet is then signed (HMAC-SHA256) or encrypted
(AES-256-OFB) the way collectd's network plugin expects.
"""

from __future__ import annotations

import enum
import hashlib
import hmac
import numbers
import os
import struct
from typing import Protocol

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

try:
    # OFB lives under "decrepit" in newer cryptography releases
    from cryptography.hazmat.decrepit.ciphers.modes import OFB
except ImportError:
    from cryptography.hazmat.primitives.ciphers.modes import OFB

from .errors import PacketError
from .metadata import DEFAULT_TYPE, MetaData

TYPE_HOST = 0x0000
TYPE_TIME = 0x0001
TYPE_PLUGIN = 0x0002
TYPE_PLUGIN_INSTANCE = 0x0003
TYPE_TYPE = 0x0004
TYPE_TYPE_INSTANCE = 0x0005
TYPE_VALUES = 0x0006
TYPE_INTERVAL = 0x0007
TYPE_SIGN_SHA256 = 0x0200
TYPE_ENCR_AES256 = 0x0210

DATA_TYPE_GAUGE = 1

BUFFER_SIZE = 1024
# collectd's DATA_MAX_NAME_LEN is 64 including the terminating NUL
MAX_STRING_LENGTH = 63

_HEADER = struct.Struct(">HH")
_IV_SIZE = 16


class SecurityLevel(enum.Enum):
    """Authentication mode for outbound packets."""

    NONE = "none"
    SIGN = "sign"
    ENCRYPT = "encrypt"

    @classmethod
    def parse(cls, value: str | SecurityLevel) -> SecurityLevel:
        """Accept an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"unknown security level {value!r} (expected one of: {choices})") from None


class PacketSink(Protocol):
    def send(self, data: bytes) -> None: ...


def _string_part(part_type: int, value: str) -> bytes:
    raw = value.encode("utf-8")
    if len(raw) > MAX_STRING_LENGTH:
        raise PacketError(
            f"value {value!r} exceeds {MAX_STRING_LENGTH} bytes"
        )
    return _HEADER.pack(part_type, _HEADER.size + len(raw) + 1) + raw + b"\0"


def _numeric_part(part_type: int, value: int) -> bytes:
    if value < 0:
        raise PacketError(f"numeric part 0x{part_type:04x} must not be negative: {value}")
    return _HEADER.pack(part_type, _HEADER.size + 8) + struct.pack(">Q", value)


def _values_part(values: tuple) -> bytes:
    if not values:
        raise PacketError("at least one value is required")
    encoded = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise PacketError(f"value {value!r} is not a number")
        encoded.append(struct.pack("<d", float(value)))

    count = len(values)
    header = _HEADER.pack(TYPE_VALUES, _HEADER.size + 2 + 9 * count)
    return header + struct.pack(">H", count) + bytes([DATA_TYPE_GAUGE] * count) + b"".join(encoded)


def encode_packet(metadata: MetaData, values: tuple) -> bytes:
    """Encode one unsecured packet for *metadata* carrying *values*."""
    if metadata.type == DEFAULT_TYPE and len(values) != 1:
        raise PacketError(f"type {DEFAULT_TYPE!r} carries exactly one value, got {len(values)}")
    return b"".join((
        _string_part(TYPE_HOST, metadata.host),
        _numeric_part(TYPE_TIME, metadata.timestamp),
        _string_part(TYPE_PLUGIN, metadata.plugin),
        _string_part(TYPE_PLUGIN_INSTANCE, metadata.plugin_instance),
        _string_part(TYPE_TYPE, metadata.type),
        _string_part(TYPE_TYPE_INSTANCE, metadata.type_instance),
        _numeric_part(TYPE_INTERVAL, metadata.interval),
        _values_part(values),
    ))


class PacketWriter:
    """Encodes samples and hands the resulting packets to a sender."""

    def __init__(
        self,
        sender: PacketSink,
        username: str = "",
        password: str = "",
        security_level: SecurityLevel = SecurityLevel.NONE,
    ) -> None:
        self._sender = sender
        self._username = username.encode("utf-8")
        self._password = password.encode("utf-8")
        self._security_level = security_level

    @property
    def security_level(self) -> SecurityLevel:
        return self._security_level

    def write(self, metadata: MetaData, *values: int | float) -> None:
        """Send one packet.

        With the default ``gauge`` type exactly one value is accepted.
        Raises :class:`PacketError` if the sample cannot be encoded and
        :class:`OSError` if the sender fails.
        """
        packet = self.secure(encode_packet(metadata, values))
        if len(packet) > BUFFER_SIZE:
            raise PacketError(f"packet of {len(packet)} bytes exceeds {BUFFER_SIZE} bytes")
        self._sender.send(packet)

    def secure(self, payload: bytes) -> bytes:
        """Apply the configured security level to *payload*."""
        if self._security_level is SecurityLevel.SIGN:
            return self._sign(payload)
        if self._security_level is SecurityLevel.ENCRYPT:
            return self._encrypt(payload)
        return payload

    def _sign(self, payload: bytes) -> bytes:
        mac = hmac.new(self._password, self._username + payload, hashlib.sha256).digest()
        header = _HEADER.pack(TYPE_SIGN_SHA256, _HEADER.size + len(mac) + len(self._username))
        return header + mac + self._username + payload

    def _encrypt(self, payload: bytes) -> bytes:
        key = hashlib.sha256(self._password).digest()
        iv = os.urandom(_IV_SIZE)
        encryptor = Cipher(algorithms.AES(key), OFB(iv)).encryptor()
        ciphertext = encryptor.update(hashlib.sha1(payload).digest() + payload) + encryptor.finalize()

        length = _HEADER.size + 2 + len(self._username) + _IV_SIZE + len(ciphertext)
        return (
            _HEADER.pack(TYPE_ENCR_AES256, length)
            + struct.pack(">H", len(self._username))
            + self._username
            + iv
            + ciphertext
        )
