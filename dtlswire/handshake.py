"""The handshake record content and the HelloVerifyRequest message."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar, Union

from .errors import (
    BufferTooSmallError,
    CookieTooLongError,
    HandshakeMessageUnsetError,
    LengthMismatchError,
    NotImplementedFeatureError,
    UnableToMarshalFragmentedError,
)
from .handshake_header import HEADER_LENGTH, HandshakeHeader, HandshakeType
from .hello import MessageClientHello, MessageServerHello
from .messages import (
    KeyExchangeAlgorithm,
    MessageCertificate,
    MessageCertificateRequest,
    MessageCertificateVerify,
    MessageClientKeyExchange,
    MessageFinished,
    MessageServerHelloDone,
    MessageServerKeyExchange,
)
from .protocol import VERSION_1_2, ContentType, Version

_MAX_COOKIE_LENGTH = 255


@dataclass
class MessageHelloVerifyRequest:
    """A server's request that the client repeat its hello with a cookie."""

    version: Version = VERSION_1_2
    cookie: bytes = b""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.HELLO_VERIFY_REQUEST

    def marshal(self) -> bytes:
        if len(self.cookie) > _MAX_COOKIE_LENGTH:
            raise CookieTooLongError()
        return (
            bytes([self.version.major & 0xFF, self.version.minor & 0xFF, len(self.cookie)])
            + bytes(self.cookie)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageHelloVerifyRequest:
        data = bytes(data)
        if len(data) < 3:
            raise BufferTooSmallError()
        cookie_length = data[2]
        if len(data) < cookie_length + 3:
            raise BufferTooSmallError()
        return cls(Version(major=data[0], minor=data[1]), data[3 : 3 + cookie_length])


_Message = Union[
    MessageClientHello,
    MessageServerHello,
    MessageHelloVerifyRequest,
    MessageCertificate,
    MessageCertificateRequest,
    MessageCertificateVerify,
    MessageClientKeyExchange,
    MessageServerKeyExchange,
    MessageFinished,
    MessageServerHelloDone,
]

_Decoder = Callable[[bytes, KeyExchangeAlgorithm], _Message]

_DECODERS: dict[int, _Decoder] = {
    HandshakeType.CLIENT_HELLO: lambda body, _: MessageClientHello.unmarshal(body),
    HandshakeType.HELLO_VERIFY_REQUEST: lambda body, _: MessageHelloVerifyRequest.unmarshal(body),
    HandshakeType.SERVER_HELLO: lambda body, _: MessageServerHello.unmarshal(body),
    HandshakeType.CERTIFICATE: lambda body, _: MessageCertificate.unmarshal(body),
    HandshakeType.SERVER_KEY_EXCHANGE: MessageServerKeyExchange.unmarshal,
    HandshakeType.CERTIFICATE_REQUEST: lambda body, _: MessageCertificateRequest.unmarshal(body),
    HandshakeType.SERVER_HELLO_DONE: lambda body, _: MessageServerHelloDone.unmarshal(body),
    HandshakeType.CLIENT_KEY_EXCHANGE: MessageClientKeyExchange.unmarshal,
    HandshakeType.FINISHED: lambda body, _: MessageFinished.unmarshal(body),
    HandshakeType.CERTIFICATE_VERIFY: lambda body, _: MessageCertificateVerify.unmarshal(body),
}


@dataclass
class Handshake:
    """A handshake message together with its header."""

    header: HandshakeHeader = field(default_factory=HandshakeHeader)
    message: _Message | None = None
    key_exchange_algorithm: KeyExchangeAlgorithm = KeyExchangeAlgorithm.NONE

    @property
    def content_type(self) -> ContentType:
        return ContentType.HANDSHAKE

    def marshal(self) -> bytes:
        """Encode header and message; the header's lengths and type are updated."""
        if self.message is None:
            raise HandshakeMessageUnsetError()
        if self.header.fragment_offset != 0:
            raise UnableToMarshalFragmentedError()
        body = self.message.marshal()
        self.header.length = len(body)
        self.header.fragment_length = len(body)
        self.header.type = self.message.handshake_type
        return self.header.marshal() + body

    @classmethod
    def unmarshal(
        cls,
        data: bytes,
        key_exchange_algorithm: KeyExchangeAlgorithm = KeyExchangeAlgorithm.NONE,
    ) -> Handshake:
        data = bytes(data)
        header = HandshakeHeader.unmarshal(data)
        reported_length = int.from_bytes(data[1:4], "big")
        if len(data) - HEADER_LENGTH != reported_length:
            raise LengthMismatchError()
        if reported_length != header.fragment_length:
            raise LengthMismatchError()

        decoder = _DECODERS.get(data[0])
        if decoder is None:
            raise NotImplementedFeatureError()
        kea = KeyExchangeAlgorithm(key_exchange_algorithm)
        message = decoder(data[HEADER_LENGTH:], kea)
        return cls(header=header, message=message, key_exchange_algorithm=kea)