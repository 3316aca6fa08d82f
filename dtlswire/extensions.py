"""Hello extensions with nested length-prefixed bodies, and extension lists."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from .errors import (
    ALPNInvalidFormatError,
    BufferTooSmallError,
    InvalidExtensionTypeError,
    InvalidSNIFormatError,
    LengthMismatchError,
    NoApplicationProtocolError,
)
from .ext_params import Extension, SupportedEllipticCurves, TypeValue, UseSRTP

_SERVER_NAME_TYPE_DNS_HOST_NAME = 0
_RENEGOTIATION_INFO_HEADER_SIZE = 5
_USE_EXTENDED_MASTER_SECRET_HEADER_SIZE = 4


def _u16(value: int) -> bytes:
    return struct.pack(">H", value & 0xFFFF)


def _prefixed(body: bytes, width: int) -> bytes:
    if len(body) >= 1 << (8 * width):
        raise ValueError(f"{len(body)} bytes do not fit a {width} byte length prefix")
    return len(body).to_bytes(width, "big") + body


def _encode_text(text: str) -> bytes:
    return text.encode("utf-8", errors="surrogateescape")


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="surrogateescape")


class _Reader:
    """Consumes big-endian integers and length-prefixed vectors from bytes."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def empty(self) -> bool:
        return self._pos >= len(self._data)

    def rest(self) -> bytes:
        return self._data[self._pos :]

    def _take(self, count: int) -> bytes | None:
        if self._pos + count > len(self._data):
            return None
        chunk = self._data[self._pos : self._pos + count]
        self._pos += count
        return chunk

    def read_uint(self, width: int) -> int | None:
        chunk = self._take(width)
        return None if chunk is None else int.from_bytes(chunk, "big")

    def read_prefixed(self, width: int) -> _Reader | None:
        start = self._pos
        length = self.read_uint(width)
        if length is None:
            return None
        body = self._take(length)
        if body is None:
            self._pos = start
            return None
        return _Reader(body)


def _read_extension_body(data: bytes, expected: TypeValue) -> _Reader:
    """Check the type of an extension and return a reader over its body."""
    reader = _Reader(data)
    ext_type = reader.read_uint(2)
    if (0 if ext_type is None else ext_type) != expected:
        raise InvalidExtensionTypeError()
    body = reader.read_prefixed(2)
    return _Reader(b"") if body is None else body


@dataclass
class ALPN:
    """Application-layer protocol negotiation."""

    protocol_name_list: list[str] = field(default_factory=list)

    type_value: ClassVar[TypeValue] = TypeValue.ALPN

    def marshal(self) -> bytes:
        names = b"".join(_prefixed(_encode_text(name), 1) for name in self.protocol_name_list)
        return _u16(self.type_value) + _prefixed(_prefixed(names, 2), 2)

    @classmethod
    def unmarshal(cls, data: bytes) -> ALPN:
        body = _read_extension_body(data, cls.type_value)
        proto_list = body.read_prefixed(2)
        if proto_list is None or proto_list.empty():
            raise ALPNInvalidFormatError()
        names: list[str] = []
        while not proto_list.empty():
            proto = proto_list.read_prefixed(1)
            if proto is None or proto.empty():
                raise ALPNInvalidFormatError()
            names.append(_decode_text(proto.rest()))
        return cls(names)


def alpn_protocol_selection(
    supported_protocols: Sequence[str], peer_supported_protocols: Sequence[str]
) -> str:
    """Pick the first of our protocols the peer also offers.

    Returns an empty string when either side offers nothing.
    """
    if not supported_protocols or not peer_supported_protocols:
        return ""
    peer = set(peer_supported_protocols)
    for protocol in supported_protocols:
        if protocol in peer:
            return protocol
    raise NoApplicationProtocolError()


@dataclass
class RenegotiationInfo:
    """Announces renegotiation support."""

    renegotiated_connection: int = 0

    type_value: ClassVar[TypeValue] = TypeValue.RENEGOTIATION_INFO

    def marshal(self) -> bytes:
        return _u16(self.type_value) + _u16(1) + bytes([self.renegotiated_connection & 0xFF])

    @classmethod
    def unmarshal(cls, data: bytes) -> RenegotiationInfo:
        data = bytes(data)
        if len(data) < _RENEGOTIATION_INFO_HEADER_SIZE:
            raise BufferTooSmallError()
        if int.from_bytes(data[0:2], "big") != cls.type_value:
            raise InvalidExtensionTypeError()
        return cls(data[4])


@dataclass
class ServerName:
    """The host name the client wishes to contact."""

    server_name: str = ""

    type_value: ClassVar[TypeValue] = TypeValue.SERVER_NAME

    def marshal(self) -> bytes:
        entry = bytes([_SERVER_NAME_TYPE_DNS_HOST_NAME]) + _prefixed(_encode_text(self.server_name), 2)
        return _u16(self.type_value) + _prefixed(_prefixed(entry, 2), 2)

    @classmethod
    def unmarshal(cls, data: bytes) -> ServerName:
        body = _read_extension_body(data, cls.type_value)
        name_list = body.read_prefixed(2)
        if name_list is None or name_list.empty():
            raise InvalidSNIFormatError()
        server_name = ""
        while not name_list.empty():
            name_type = name_list.read_uint(1)
            name = name_list.read_prefixed(2) if name_type is not None else None
            if name is None or name.empty():
                raise InvalidSNIFormatError()
            if name_type != _SERVER_NAME_TYPE_DNS_HOST_NAME:
                continue
            if server_name:
                # Several names of the same type are prohibited.
                raise InvalidSNIFormatError()
            server_name = _decode_text(name.rest())
            if server_name.endswith("."):
                raise InvalidSNIFormatError()
        return cls(server_name)


@dataclass
class UseExtendedMasterSecret:
    """Binds the master secret to a log of the full handshake."""

    supported: bool = False

    type_value: ClassVar[TypeValue] = TypeValue.USE_EXTENDED_MASTER_SECRET

    def marshal(self) -> bytes:
        if not self.supported:
            return b""
        return _u16(self.type_value) + _u16(0)

    @classmethod
    def unmarshal(cls, data: bytes) -> UseExtendedMasterSecret:
        data = bytes(data)
        if len(data) < _USE_EXTENDED_MASTER_SECRET_HEADER_SIZE:
            raise BufferTooSmallError()
        if int.from_bytes(data[0:2], "big") != cls.type_value:
            raise InvalidExtensionTypeError()
        return cls(True)


_DECODERS = {
    TypeValue.SERVER_NAME: ServerName,
    TypeValue.SUPPORTED_ELLIPTIC_CURVES: SupportedEllipticCurves,
    TypeValue.USE_SRTP: UseSRTP,
    TypeValue.ALPN: ALPN,
    TypeValue.USE_EXTENDED_MASTER_SECRET: UseExtendedMasterSecret,
    TypeValue.RENEGOTIATION_INFO: RenegotiationInfo,
}


def unmarshal_extensions(buf: bytes) -> list[Extension]:
    """Decode a length-prefixed block of extensions, skipping unknown ones."""
    buf = bytes(buf)
    if not buf:
        return []
    if len(buf) < 2:
        raise BufferTooSmallError()
    if len(buf) - 2 != int.from_bytes(buf[0:2], "big"):
        raise LengthMismatchError()

    extensions: list[Extension] = []
    offset = 2
    while offset < len(buf):
        if len(buf) < offset + 2:
            raise BufferTooSmallError()
        decoder = _DECODERS.get(int.from_bytes(buf[offset : offset + 2], "big"))
        if decoder is not None:
            extensions.append(decoder.unmarshal(buf[offset:]))
        if len(buf) < offset + 4:
            raise BufferTooSmallError()
        offset += 4 + int.from_bytes(buf[offset + 2 : offset + 4], "big")
    return extensions


def marshal_extensions(extensions: Iterable[Extension]) -> bytes:
    """Encode extensions one after another behind a two byte length."""
    body = b"".join(extension.marshal() for extension in extensions)
    return _u16(len(body)) + body