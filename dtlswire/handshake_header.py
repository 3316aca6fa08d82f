"""Handshake message header, hello random and cipher suite list encoding."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum

from .errors import BufferTooSmallError

HEADER_LENGTH = 12
RANDOM_BYTES_LENGTH = 28
RANDOM_LENGTH = RANDOM_BYTES_LENGTH + 4

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class HandshakeType(IntEnum):
    """Identifiers of handshake messages."""

    HELLO_REQUEST = 0
    CLIENT_HELLO = 1
    SERVER_HELLO = 2
    HELLO_VERIFY_REQUEST = 3
    CERTIFICATE = 11
    SERVER_KEY_EXCHANGE = 12
    CERTIFICATE_REQUEST = 13
    SERVER_HELLO_DONE = 14
    CERTIFICATE_VERIFY = 15
    CLIENT_KEY_EXCHANGE = 16
    FINISHED = 20

    def __str__(self) -> str:
        return _TYPE_NAMES[self]


_TYPE_NAMES = {
    HandshakeType.HELLO_REQUEST: "HelloRequest",
    HandshakeType.CLIENT_HELLO: "ClientHello",
    HandshakeType.SERVER_HELLO: "ServerHello",
    HandshakeType.HELLO_VERIFY_REQUEST: "HelloVerifyRequest",
    HandshakeType.CERTIFICATE: "TypeCertificate",
    HandshakeType.SERVER_KEY_EXCHANGE: "ServerKeyExchange",
    HandshakeType.CERTIFICATE_REQUEST: "CertificateRequest",
    HandshakeType.SERVER_HELLO_DONE: "ServerHelloDone",
    HandshakeType.CERTIFICATE_VERIFY: "CertificateVerify",
    HandshakeType.CLIENT_KEY_EXCHANGE: "ClientKeyExchange",
    HandshakeType.FINISHED: "Finished",
}

_KNOWN_TYPES = frozenset(t.value for t in HandshakeType)


def _u24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


@dataclass
class HandshakeHeader:
    """The 12 byte header in front of every handshake message.

    ``type`` is a ``HandshakeType`` when the code is known, otherwise the raw int.
    """

    type: HandshakeType | int = HandshakeType.HELLO_REQUEST
    length: int = 0
    message_sequence: int = 0
    fragment_offset: int = 0
    fragment_length: int = 0

    def marshal(self) -> bytes:
        return (
            bytes([int(self.type) & 0xFF])
            + _u24(self.length)
            + struct.pack(">H", self.message_sequence & 0xFFFF)
            + _u24(self.fragment_offset)
            + _u24(self.fragment_length)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> HandshakeHeader:
        if len(data) < HEADER_LENGTH:
            raise BufferTooSmallError()
        raw_type = data[0]
        return cls(
            type=HandshakeType(raw_type) if raw_type in _KNOWN_TYPES else raw_type,
            length=int.from_bytes(data[1:4], "big"),
            message_sequence=int.from_bytes(data[4:6], "big"),
            fragment_offset=int.from_bytes(data[6:9], "big"),
            fragment_length=int.from_bytes(data[9:12], "big"),
        )


@dataclass(frozen=True)
class Random:
    """The random value of ClientHello and ServerHello."""

    gmt_unix_time: datetime = _EPOCH
    random_bytes: bytes = field(default=bytes(RANDOM_BYTES_LENGTH))

    def __post_init__(self) -> None:
        if len(self.random_bytes) != RANDOM_BYTES_LENGTH:
            raise ValueError(f"random_bytes must be {RANDOM_BYTES_LENGTH} bytes long")

    def marshal_fixed(self) -> bytes:
        seconds = int(self.gmt_unix_time.timestamp()) & 0xFFFFFFFF
        return struct.pack(">I", seconds) + bytes(self.random_bytes)

    @classmethod
    def unmarshal_fixed(cls, data: bytes) -> Random:
        if len(data) != RANDOM_LENGTH:
            raise ValueError(f"random must be {RANDOM_LENGTH} bytes long")
        seconds = int.from_bytes(data[0:4], "big")
        return cls(datetime.fromtimestamp(seconds, tz=timezone.utc), bytes(data[4:]))

    @classmethod
    def generate(cls) -> Random:
        """A random value stamped with the current time."""
        return cls(datetime.now(tz=timezone.utc), os.urandom(RANDOM_BYTES_LENGTH))


def decode_cipher_suite_ids(buf: bytes) -> list[int]:
    """Decode a two byte length-prefixed list of cipher suite ids."""
    if len(buf) < 2:
        raise BufferTooSmallError()
    count = int.from_bytes(buf[0:2], "big") // 2
    if len(buf) < 2 + count * 2:
        raise BufferTooSmallError()
    return [int.from_bytes(buf[pos : pos + 2], "big") for pos in range(2, 2 + count * 2, 2)]


def encode_cipher_suite_ids(cipher_suite_ids: list[int]) -> bytes:
    """Encode cipher suite ids with a two byte length prefix."""
    ids = list(cipher_suite_ids)
    return struct.pack(">H", (len(ids) * 2) & 0xFFFF) + b"".join(
        struct.pack(">H", i & 0xFFFF) for i in ids
    )