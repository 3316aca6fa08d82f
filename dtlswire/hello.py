"""ClientHello and ServerHello handshake messages."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .errors import (
    BufferTooSmallError,
    CipherSuiteUnsetError,
    CompressionMethodUnsetError,
    CookieTooLongError,
    InvalidCompressionMethodError,
)
from .ext_params import Extension
from .extensions import marshal_extensions, unmarshal_extensions
from .handshake_header import (
    RANDOM_LENGTH,
    HandshakeType,
    Random,
    decode_cipher_suite_ids,
    encode_cipher_suite_ids,
)
from .protocol import (
    VERSION_1_2,
    CompressionMethod,
    Version,
    decode_compression_methods,
    encode_compression_methods,
)

_VARIABLE_WIDTH_START = 2 + RANDOM_LENGTH
_MAX_COOKIE_LENGTH = 255
_SUPPORTED_COMPRESSION_IDS = frozenset(method.value for method in CompressionMethod)


def _read_u8_vector(data: bytes, offset: int) -> tuple[bytes, int]:
    """Read a one byte length-prefixed vector that must not end the data."""
    offset += 1
    if len(data) <= offset:
        raise BufferTooSmallError()
    length = data[offset - 1]
    if len(data) <= offset + length:
        raise BufferTooSmallError()
    return data[offset : offset + length], offset + length


def _encode_u8_vector(value: bytes) -> bytes:
    return bytes([len(value) & 0xFF]) + bytes(value)


def _decode_fixed_part(data: bytes) -> tuple[Version, Random]:
    if len(data) < _VARIABLE_WIDTH_START:
        raise BufferTooSmallError()
    version = Version(major=data[0], minor=data[1])
    return version, Random.unmarshal_fixed(data[2:_VARIABLE_WIDTH_START])


def _encode_fixed_part(version: Version, random: Random) -> bytes:
    return bytes([version.major & 0xFF, version.minor & 0xFF]) + random.marshal_fixed()


@dataclass
class MessageClientHello:
    """The first message a client sends, also used to renegotiate."""

    version: Version = VERSION_1_2
    random: Random = field(default_factory=Random)
    cookie: bytes = b""
    session_id: bytes = b""
    cipher_suite_ids: list[int] = field(default_factory=list)
    compression_methods: list[CompressionMethod] = field(default_factory=list)
    extensions: list[Extension] = field(default_factory=list)

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CLIENT_HELLO

    def marshal(self) -> bytes:
        if len(self.cookie) > _MAX_COOKIE_LENGTH:
            raise CookieTooLongError()
        return (
            _encode_fixed_part(self.version, self.random)
            + _encode_u8_vector(self.session_id)
            + _encode_u8_vector(self.cookie)
            + encode_cipher_suite_ids(self.cipher_suite_ids)
            + encode_compression_methods(self.compression_methods)
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageClientHello:
        data = bytes(data)
        version, random = _decode_fixed_part(data)
        offset = _VARIABLE_WIDTH_START
        session_id, offset = _read_u8_vector(data, offset)
        cookie, offset = _read_u8_vector(data, offset)

        cipher_suite_ids = decode_cipher_suite_ids(data[offset:])
        if len(data) < offset + 2:
            raise BufferTooSmallError()
        offset += int.from_bytes(data[offset : offset + 2], "big") + 2

        if len(data) < offset:
            raise BufferTooSmallError()
        compression_methods = decode_compression_methods(data[offset:])
        offset += data[offset] + 1

        return cls(
            version=version,
            random=random,
            cookie=cookie,
            session_id=session_id,
            cipher_suite_ids=cipher_suite_ids,
            compression_methods=compression_methods,
            extensions=unmarshal_extensions(data[offset:]),
        )


@dataclass
class MessageServerHello:
    """The server's answer to a ClientHello with the chosen parameters."""

    version: Version = VERSION_1_2
    random: Random = field(default_factory=Random)
    session_id: bytes = b""
    cipher_suite_id: int | None = None
    compression_method: CompressionMethod | None = None
    extensions: list[Extension] = field(default_factory=list)

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_HELLO

    def marshal(self) -> bytes:
        if self.cipher_suite_id is None:
            raise CipherSuiteUnsetError()
        if self.compression_method is None:
            raise CompressionMethodUnsetError()
        return (
            _encode_fixed_part(self.version, self.random)
            + _encode_u8_vector(self.session_id)
            + struct.pack(">H", self.cipher_suite_id & 0xFFFF)
            + bytes([int(self.compression_method) & 0xFF])
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageServerHello:
        data = bytes(data)
        version, random = _decode_fixed_part(data)
        session_id, offset = _read_u8_vector(data, _VARIABLE_WIDTH_START)

        if len(data) < offset + 2:
            raise BufferTooSmallError()
        cipher_suite_id = int.from_bytes(data[offset : offset + 2], "big")
        offset += 2

        if len(data) <= offset:
            raise BufferTooSmallError()
        if data[offset] not in _SUPPORTED_COMPRESSION_IDS:
            raise InvalidCompressionMethodError()
        compression_method = CompressionMethod(data[offset])
        offset += 1

        extensions = unmarshal_extensions(data[offset:]) if len(data) > offset else []
        return cls(
            version=version,
            random=random,
            session_id=session_id,
            cipher_suite_id=cipher_suite_id,
            compression_method=compression_method,
            extensions=extensions,
        )