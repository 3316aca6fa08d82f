"""Hello extensions that carry lists of negotiated parameters."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Protocol, runtime_checkable

from .errors import BufferTooSmallError, InvalidExtensionTypeError, LengthMismatchError
from .srtp import SRTPProtectionProfile


class TypeValue(IntEnum):
    """Two byte identifiers of TLS extensions as registered with IANA."""

    SERVER_NAME = 0
    SUPPORTED_ELLIPTIC_CURVES = 10
    SUPPORTED_POINT_FORMATS = 11
    SUPPORTED_SIGNATURE_ALGORITHMS = 13
    USE_SRTP = 14
    ALPN = 16
    USE_EXTENDED_MASTER_SECRET = 23
    RENEGOTIATION_INFO = 65281


@runtime_checkable
class Extension(Protocol):
    """A single TLS extension.

    Implementations also provide an ``unmarshal`` class method that builds
    an instance from its encoded bytes, type and length prefix included.
    """

    @property
    def type_value(self) -> TypeValue: ...

    def marshal(self) -> bytes: ...


class NamedCurve(IntEnum):
    """Supported named elliptic curves."""

    P256 = 0x0017
    P384 = 0x0018
    X25519 = 0x001D


class CurvePointFormat(IntEnum):
    """Elliptic curve point formats."""

    UNCOMPRESSED = 0


class HashAlgorithm(IntEnum):
    """Hash algorithms of the signature_algorithms registry."""

    NONE = 0
    MD5 = 1
    SHA1 = 2
    SHA224 = 3
    SHA256 = 4
    SHA384 = 5
    SHA512 = 6
    ED25519 = 8


class SignatureAlgorithm(IntEnum):
    """Signature algorithms of the signature_algorithms registry."""

    ANONYMOUS = 0
    RSA = 1
    ECDSA = 3
    ED25519 = 7


@dataclass(frozen=True)
class SignatureHashAlgorithm:
    """A hash and signature algorithm pair."""

    hash: HashAlgorithm
    signature: SignatureAlgorithm


_CURVE_IDS = frozenset(c.value for c in NamedCurve)
_HASH_IDS = frozenset(h.value for h in HashAlgorithm)
_SIGNATURE_IDS = frozenset(s.value for s in SignatureAlgorithm)
_SRTP_IDS = frozenset(p.value for p in SRTPProtectionProfile)

_SUPPORTED_GROUPS_HEADER_SIZE = 6
_SUPPORTED_POINT_FORMATS_SIZE = 5
_SUPPORTED_SIGNATURE_ALGORITHMS_HEADER_SIZE = 6
_USE_SRTP_HEADER_SIZE = 6


def _u16(value: int) -> bytes:
    return struct.pack(">H", value & 0xFFFF)


def _check_header(data: bytes, header_size: int, expected: TypeValue) -> None:
    if len(data) <= header_size:
        raise BufferTooSmallError()
    if int.from_bytes(data[0:2], "big") != expected:
        raise InvalidExtensionTypeError()


@dataclass
class SupportedEllipticCurves:
    """The curves a peer supports."""

    elliptic_curves: list[NamedCurve] = field(default_factory=list)

    type_value: ClassVar[TypeValue] = TypeValue.SUPPORTED_ELLIPTIC_CURVES

    def marshal(self) -> bytes:
        count = len(self.elliptic_curves)
        body = b"".join(_u16(int(curve)) for curve in self.elliptic_curves)
        return _u16(self.type_value) + _u16(2 + count * 2) + _u16(count * 2) + body

    @classmethod
    def unmarshal(cls, data: bytes) -> SupportedEllipticCurves:
        data = bytes(data)
        _check_header(data, _SUPPORTED_GROUPS_HEADER_SIZE, cls.type_value)
        group_count = int.from_bytes(data[4:6], "big") // 2
        end = _SUPPORTED_GROUPS_HEADER_SIZE + group_count * 2
        if end > len(data):
            raise LengthMismatchError()
        ids = (
            int.from_bytes(data[pos : pos + 2], "big")
            for pos in range(_SUPPORTED_GROUPS_HEADER_SIZE, end, 2)
        )
        return cls([NamedCurve(i) for i in ids if i in _CURVE_IDS])


@dataclass
class SupportedPointFormats:
    """The elliptic curve point formats a peer supports."""

    point_formats: list[CurvePointFormat] = field(default_factory=list)

    type_value: ClassVar[TypeValue] = TypeValue.SUPPORTED_POINT_FORMATS

    def marshal(self) -> bytes:
        count = len(self.point_formats)
        return (
            _u16(self.type_value)
            + _u16(1 + count)
            + bytes([count & 0xFF])
            + bytes(int(p) & 0xFF for p in self.point_formats)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> SupportedPointFormats:
        data = bytes(data)
        _check_header(data, _SUPPORTED_POINT_FORMATS_SIZE, cls.type_value)
        # The count is read as two bytes starting at the one-byte list length.
        count = int.from_bytes(data[4:6], "big")
        if _SUPPORTED_GROUPS_HEADER_SIZE + count > len(data):
            raise LengthMismatchError()
        raw = data[_SUPPORTED_POINT_FORMATS_SIZE : _SUPPORTED_POINT_FORMATS_SIZE + count]
        return cls([CurvePointFormat(p) for p in raw if p == CurvePointFormat.UNCOMPRESSED])


@dataclass
class SupportedSignatureAlgorithms:
    """The signature and hash algorithm pairs a peer supports."""

    signature_hash_algorithms: list[SignatureHashAlgorithm] = field(default_factory=list)

    type_value: ClassVar[TypeValue] = TypeValue.SUPPORTED_SIGNATURE_ALGORITHMS

    def marshal(self) -> bytes:
        count = len(self.signature_hash_algorithms)
        body = b"".join(
            bytes([int(a.hash) & 0xFF, int(a.signature) & 0xFF])
            for a in self.signature_hash_algorithms
        )
        return _u16(self.type_value) + _u16(2 + count * 2) + _u16(count * 2) + body

    @classmethod
    def unmarshal(cls, data: bytes) -> SupportedSignatureAlgorithms:
        data = bytes(data)
        header = _SUPPORTED_SIGNATURE_ALGORITHMS_HEADER_SIZE
        _check_header(data, header, cls.type_value)
        count = int.from_bytes(data[4:6], "big") // 2
        end = header + count * 2
        if end > len(data):
            raise LengthMismatchError()
        pairs = (data[pos : pos + 2] for pos in range(header, end, 2))
        return cls(
            [
                SignatureHashAlgorithm(HashAlgorithm(h), SignatureAlgorithm(s))
                for h, s in pairs
                if h in _HASH_IDS and s in _SIGNATURE_IDS
            ]
        )


@dataclass
class UseSRTP:
    """The SRTP protection profiles a peer supports."""

    protection_profiles: list[SRTPProtectionProfile] = field(default_factory=list)

    type_value: ClassVar[TypeValue] = TypeValue.USE_SRTP

    def marshal(self) -> bytes:
        count = len(self.protection_profiles)
        body = b"".join(_u16(int(p)) for p in self.protection_profiles)
        # The trailing zero byte is an empty MKI.
        return _u16(self.type_value) + _u16(2 + count * 2 + 1) + _u16(count * 2) + body + b"\x00"

    @classmethod
    def unmarshal(cls, data: bytes) -> UseSRTP:
        data = bytes(data)
        _check_header(data, _USE_SRTP_HEADER_SIZE, cls.type_value)
        count = int.from_bytes(data[4:6], "big") // 2
        end = _USE_SRTP_HEADER_SIZE + count * 2
        if end > len(data):
            raise LengthMismatchError()
        ids = (int.from_bytes(data[pos : pos + 2], "big") for pos in range(_USE_SRTP_HEADER_SIZE, end, 2))
        return cls([SRTPProtectionProfile(i) for i in ids if i in _SRTP_IDS])