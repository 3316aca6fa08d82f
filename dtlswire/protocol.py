"""Basic DTLS wire types: versions, content types and simple contents."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol, runtime_checkable

from .errors import BufferTooSmallError, InvalidCipherSpecError


class ContentType(IntEnum):
    """IANA registered record content types."""

    CHANGE_CIPHER_SPEC = 20
    ALERT = 21
    HANDSHAKE = 22
    APPLICATION_DATA = 23


@runtime_checkable
class Content(Protocol):
    """What a record layer carries.

    Implementations also provide an ``unmarshal`` class method that builds
    an instance from its encoded bytes.
    """

    @property
    def content_type(self) -> ContentType: ...

    def marshal(self) -> bytes: ...


@dataclass(frozen=True)
class Version:
    """Major/minor protocol version as found in records and hellos."""

    major: int
    minor: int


VERSION_1_0 = Version(major=0xFE, minor=0xFF)
VERSION_1_2 = Version(major=0xFE, minor=0xFD)


@dataclass
class ApplicationData:
    """Opaque application payload carried by the record layer."""

    data: bytes = b""

    @property
    def content_type(self) -> ContentType:
        return ContentType.APPLICATION_DATA

    def marshal(self) -> bytes:
        return bytes(self.data)

    @classmethod
    def unmarshal(cls, data: bytes) -> ApplicationData:
        return cls(bytes(data))


@dataclass
class ChangeCipherSpec:
    """Signals a transition in ciphering strategy; always the single byte 1."""

    @property
    def content_type(self) -> ContentType:
        return ContentType.CHANGE_CIPHER_SPEC

    def marshal(self) -> bytes:
        return b"\x01"

    @classmethod
    def unmarshal(cls, data: bytes) -> ChangeCipherSpec:
        if bytes(data) != b"\x01":
            raise InvalidCipherSpecError()
        return cls()


class CompressionMethod(IntEnum):
    """Supported TLS compression methods."""

    NULL = 0


_SUPPORTED_COMPRESSION_IDS = frozenset(method.value for method in CompressionMethod)


def decode_compression_methods(buf: bytes) -> list[CompressionMethod]:
    """Decode a length-prefixed list, keeping only supported methods."""
    if len(buf) < 1:
        raise BufferTooSmallError()
    count = buf[0]
    if len(buf) < 1 + count:
        raise BufferTooSmallError()
    return [
        CompressionMethod(raw)
        for raw in buf[1 : 1 + count]
        if raw in _SUPPORTED_COMPRESSION_IDS
    ]


def encode_compression_methods(methods: Sequence[CompressionMethod] | Iterable[CompressionMethod]) -> bytes:
    """Encode methods as a count byte followed by the ids in reverse order."""
    items = list(methods)
    return bytes([len(items) & 0xFF, *(int(m) & 0xFF for m in reversed(items))])