"""Handshake messages for certificates, key exchange and handshake completion."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import ClassVar

from .errors import (
    BufferTooSmallError,
    CipherSuiteUnsetError,
    InvalidClientKeyExchangeError,
    InvalidEllipticCurveTypeError,
    InvalidHashAlgorithmError,
    InvalidNamedCurveError,
    InvalidSignatureAlgorithmError,
    LengthMismatchError,
)
from .ext_params import HashAlgorithm, NamedCurve, SignatureAlgorithm, SignatureHashAlgorithm
from .handshake_header import HandshakeType


class KeyExchangeAlgorithm(IntFlag):
    """Key exchange algorithms of a cipher suite; PSK and ECDHE may be combined."""

    NONE = 0
    PSK = 1
    ECDHE = 2


class CurveType(IntEnum):
    """Elliptic curve types of the ServerKeyExchange message."""

    NAMED_CURVE = 0x03


class ClientCertificateType(IntEnum):
    """Certificate types a server may request from a client."""

    RSA_SIGN = 1
    ECDSA_SIGN = 64


_HASH_IDS = frozenset(h.value for h in HashAlgorithm)
_SIGNATURE_IDS = frozenset(s.value for s in SignatureAlgorithm)
_CURVE_IDS = frozenset(c.value for c in NamedCurve)
_CURVE_TYPE_IDS = frozenset(c.value for c in CurveType)
_CLIENT_CERT_IDS = frozenset(t.value for t in ClientCertificateType)

_CERTIFICATE_LENGTH_FIELD_SIZE = 3
_CERTIFICATE_REQUEST_MIN_LENGTH = 5
_CERTIFICATE_VERIFY_MIN_LENGTH = 4


def _u16(value: int) -> bytes:
    return struct.pack(">H", value & 0xFFFF)


def _u24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


def _read_u16(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def _read_u24(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 3], "big")


@dataclass
class MessageCertificate:
    """A chain of DER encoded certificates of the client or the server."""

    certificate: list[bytes] = field(default_factory=list)

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE

    def marshal(self) -> bytes:
        body = b"".join(_u24(len(cert)) + bytes(cert) for cert in self.certificate)
        return _u24(len(body)) + body

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageCertificate:
        data = bytes(data)
        if len(data) < _CERTIFICATE_LENGTH_FIELD_SIZE:
            raise BufferTooSmallError()
        if _read_u24(data, 0) + _CERTIFICATE_LENGTH_FIELD_SIZE != len(data):
            raise LengthMismatchError()

        certificates: list[bytes] = []
        offset = _CERTIFICATE_LENGTH_FIELD_SIZE
        while offset < len(data):
            if offset + _CERTIFICATE_LENGTH_FIELD_SIZE > len(data):
                raise BufferTooSmallError()
            length = _read_u24(data, offset)
            offset += _CERTIFICATE_LENGTH_FIELD_SIZE
            if offset + length > len(data):
                raise LengthMismatchError()
            certificates.append(data[offset : offset + length])
            offset += length
        return cls(certificates)


@dataclass
class MessageCertificateRequest:
    """A server's request for a client certificate."""

    certificate_types: list[ClientCertificateType] = field(default_factory=list)
    signature_hash_algorithms: list[SignatureHashAlgorithm] = field(default_factory=list)
    certificate_authorities_names: list[bytes] = field(default_factory=list)

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE_REQUEST

    def marshal(self) -> bytes:
        types = bytes([len(self.certificate_types) & 0xFF]) + bytes(
            int(t) & 0xFF for t in self.certificate_types
        )
        algorithms = _u16(len(self.signature_hash_algorithms) * 2) + b"".join(
            bytes([int(a.hash) & 0xFF, int(a.signature) & 0xFF])
            for a in self.signature_hash_algorithms
        )
        names = b"".join(_u16(len(ca)) + bytes(ca) for ca in self.certificate_authorities_names)
        return types + algorithms + _u16(len(names)) + names

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageCertificateRequest:
        data = bytes(data)
        if len(data) < _CERTIFICATE_REQUEST_MIN_LENGTH:
            raise BufferTooSmallError()

        types_length = data[0]
        offset = 1
        if offset + types_length > len(data):
            raise BufferTooSmallError()
        certificate_types = [
            ClientCertificateType(t)
            for t in data[offset : offset + types_length]
            if t in _CLIENT_CERT_IDS
        ]
        offset += types_length

        if len(data) < offset + 2:
            raise BufferTooSmallError()
        algorithms_length = _read_u16(data, offset)
        offset += 2
        if offset + algorithms_length > len(data):
            raise BufferTooSmallError()
        algorithms: list[SignatureHashAlgorithm] = []
        for pos in range(offset, offset + algorithms_length, 2):
            if len(data) < pos + 2:
                raise BufferTooSmallError()
            hash_id, signature_id = data[pos], data[pos + 1]
            if hash_id in _HASH_IDS and signature_id in _SIGNATURE_IDS:
                algorithms.append(
                    SignatureHashAlgorithm(HashAlgorithm(hash_id), SignatureAlgorithm(signature_id))
                )
        offset += algorithms_length

        if len(data) < offset + 2:
            raise BufferTooSmallError()
        cas_length = _read_u16(data, offset)
        offset += 2
        if offset + cas_length > len(data):
            raise BufferTooSmallError()
        cas = data[offset : offset + cas_length]
        names: list[bytes] = []
        while cas:
            if len(cas) < 2:
                raise BufferTooSmallError()
            name_length = _read_u16(cas, 0)
            cas = cas[2:]
            if len(cas) < name_length:
                raise BufferTooSmallError()
            names.append(cas[:name_length])
            cas = cas[name_length:]

        return cls(certificate_types, algorithms, names)


@dataclass
class MessageCertificateVerify:
    """Explicit verification of a client certificate."""

    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE_VERIFY

    def marshal(self) -> bytes:
        return (
            bytes([int(self.hash_algorithm) & 0xFF, int(self.signature_algorithm) & 0xFF])
            + _u16(len(self.signature))
            + bytes(self.signature)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageCertificateVerify:
        data = bytes(data)
        if len(data) < _CERTIFICATE_VERIFY_MIN_LENGTH:
            raise BufferTooSmallError()
        if data[0] not in _HASH_IDS:
            raise InvalidHashAlgorithmError()
        if data[1] not in _SIGNATURE_IDS:
            raise InvalidSignatureAlgorithmError()
        if _read_u16(data, 2) + 4 != len(data):
            raise BufferTooSmallError()
        return cls(HashAlgorithm(data[0]), SignatureAlgorithm(data[1]), data[4:])


@dataclass
class MessageClientKeyExchange:
    """The client's PSK identity and/or its ephemeral public key."""

    identity_hint: bytes | None = None
    public_key: bytes | None = None
    key_exchange_algorithm: KeyExchangeAlgorithm = KeyExchangeAlgorithm.NONE

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CLIENT_KEY_EXCHANGE

    def marshal(self) -> bytes:
        if self.identity_hint is None and self.public_key is None:
            raise InvalidClientKeyExchangeError()
        out = b""
        if self.identity_hint is not None:
            out += _u16(len(self.identity_hint)) + bytes(self.identity_hint)
        if self.public_key is not None:
            out += bytes([len(self.public_key) & 0xFF]) + bytes(self.public_key)
        return out

    @classmethod
    def unmarshal(
        cls, data: bytes, key_exchange_algorithm: KeyExchangeAlgorithm
    ) -> MessageClientKeyExchange:
        data = bytes(data)
        kea = KeyExchangeAlgorithm(key_exchange_algorithm)
        if len(data) < 2:
            raise BufferTooSmallError()
        if kea == KeyExchangeAlgorithm.NONE:
            raise CipherSuiteUnsetError()

        identity_hint: bytes | None = None
        public_key: bytes | None = None
        offset = 0
        if kea & KeyExchangeAlgorithm.PSK:
            psk_length = _read_u16(data, 0)
            if psk_length > len(data) - 2:
                raise BufferTooSmallError()
            identity_hint = data[2 : 2 + psk_length]
            offset += psk_length + 2

        if kea & KeyExchangeAlgorithm.ECDHE:
            if offset >= len(data):
                raise BufferTooSmallError()
            if data[offset] > len(data) - 1 - offset:
                raise BufferTooSmallError()
            public_key = data[offset + 1 :]

        return cls(identity_hint, public_key, kea)


@dataclass
class MessageServerKeyExchange:
    """The server's PSK identity hint and/or signed ECDH parameters."""

    identity_hint: bytes | None = None
    elliptic_curve_type: CurveType | int = 0
    named_curve: NamedCurve | int = 0
    public_key: bytes = b""
    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""
    key_exchange_algorithm: KeyExchangeAlgorithm = KeyExchangeAlgorithm.NONE

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_KEY_EXCHANGE

    def marshal(self) -> bytes:
        out = b""
        if self.identity_hint is not None:
            out += _u16(len(self.identity_hint)) + bytes(self.identity_hint)
        if int(self.elliptic_curve_type) == 0 or not self.public_key:
            return out

        out += (
            bytes([int(self.elliptic_curve_type) & 0xFF])
            + _u16(int(self.named_curve))
            + bytes([len(self.public_key) & 0xFF])
            + bytes(self.public_key)
        )
        has_hash = self.hash_algorithm != HashAlgorithm.NONE
        anonymous = self.signature_algorithm == SignatureAlgorithm.ANONYMOUS
        if has_hash and not self.signature:
            raise InvalidHashAlgorithmError()
        if not has_hash and self.signature:
            raise InvalidHashAlgorithmError()
        if anonymous and (has_hash or self.signature):
            raise InvalidSignatureAlgorithmError()
        if anonymous:
            return out

        return (
            out
            + bytes([int(self.hash_algorithm) & 0xFF, int(self.signature_algorithm) & 0xFF])
            + _u16(len(self.signature))
            + bytes(self.signature)
        )

    @classmethod
    def unmarshal(
        cls, data: bytes, key_exchange_algorithm: KeyExchangeAlgorithm
    ) -> MessageServerKeyExchange:
        data = bytes(data)
        kea = KeyExchangeAlgorithm(key_exchange_algorithm)
        if len(data) < 2:
            raise BufferTooSmallError()
        if kea == KeyExchangeAlgorithm.NONE:
            raise CipherSuiteUnsetError()

        message = cls(key_exchange_algorithm=kea)
        hint_length = _read_u16(data, 0)
        if hint_length <= len(data) - 2 and kea & KeyExchangeAlgorithm.PSK:
            message.identity_hint = data[2 : 2 + hint_length]
            data = data[2 + hint_length :]
        if kea == KeyExchangeAlgorithm.PSK:
            if not data:
                return message
            raise LengthMismatchError()
        if not kea & KeyExchangeAlgorithm.ECDHE:
            raise LengthMismatchError()

        if not data:
            raise BufferTooSmallError()
        if data[0] not in _CURVE_TYPE_IDS:
            raise InvalidEllipticCurveTypeError()
        message.elliptic_curve_type = CurveType(data[0])

        if len(data) < 3:
            raise BufferTooSmallError()
        curve_id = _read_u16(data, 1)
        if curve_id not in _CURVE_IDS:
            raise InvalidNamedCurveError()
        message.named_curve = NamedCurve(curve_id)
        if len(data) < 4:
            raise BufferTooSmallError()

        offset = 4 + data[3]
        if len(data) < offset:
            raise BufferTooSmallError()
        message.public_key = data[4:offset]

        # Anonymous exchanges carry no hash, signature algorithm or signature.
        if len(data) == offset:
            return message

        if data[offset] not in _HASH_IDS:
            raise InvalidHashAlgorithmError()
        message.hash_algorithm = HashAlgorithm(data[offset])
        offset += 1
        if len(data) <= offset:
            raise BufferTooSmallError()
        if data[offset] not in _SIGNATURE_IDS:
            raise InvalidSignatureAlgorithmError()
        message.signature_algorithm = SignatureAlgorithm(data[offset])
        offset += 1
        if len(data) < offset + 2:
            raise BufferTooSmallError()
        signature_length = _read_u16(data, offset)
        offset += 2
        if len(data) < offset + signature_length:
            raise BufferTooSmallError()
        message.signature = data[offset : offset + signature_length]
        return message


@dataclass
class MessageFinished:
    """The first message protected by the negotiated keys."""

    verify_data: bytes = b""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.FINISHED

    def marshal(self) -> bytes:
        return bytes(self.verify_data)

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageFinished:
        return cls(bytes(data))


@dataclass
class MessageServerHelloDone:
    """Marks the end of the server's hello flight; it has no body."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_HELLO_DONE

    def marshal(self) -> bytes:
        return b""

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageServerHelloDone:
        return cls()