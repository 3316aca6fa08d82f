"""The DTLS record layer: record headers, records and datagram splitting."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .alert import Alert
from .errors import (
    BufferTooSmallError,
    InvalidContentTypeError,
    InvalidPacketLengthError,
    SequenceNumberOverflowError,
    UnsupportedProtocolVersionError,
)
from .handshake import Handshake
from .protocol import (
    VERSION_1_0,
    VERSION_1_2,
    ApplicationData,
    ChangeCipherSpec,
    Content,
    ContentType,
    Version,
)

HEADER_SIZE = 13
MAX_SEQUENCE_NUMBER = 0x0000FFFFFFFFFFFF

_CONTENT_TYPE_IDS = frozenset(c.value for c in ContentType)
_SUPPORTED_VERSIONS = (VERSION_1_0, VERSION_1_2)


@dataclass
class RecordHeader:
    """The 13 byte header of every DTLS record.

    Decoding leaves ``content_len`` alone; encoding a record sets it.
    """

    content_type: ContentType | int = ContentType.APPLICATION_DATA
    content_len: int = 0
    version: Version = VERSION_1_2
    epoch: int = 0
    sequence_number: int = 0

    def marshal(self) -> bytes:
        if self.sequence_number > MAX_SEQUENCE_NUMBER:
            raise SequenceNumberOverflowError()
        return (
            bytes([int(self.content_type) & 0xFF, self.version.major & 0xFF, self.version.minor & 0xFF])
            + struct.pack(">H", self.epoch & 0xFFFF)
            + self.sequence_number.to_bytes(6, "big")
            + struct.pack(">H", self.content_len & 0xFFFF)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> RecordHeader:
        if len(data) < HEADER_SIZE:
            raise BufferTooSmallError()
        raw_type = data[0]
        header = cls(
            content_type=ContentType(raw_type) if raw_type in _CONTENT_TYPE_IDS else raw_type,
            version=Version(major=data[1], minor=data[2]),
            epoch=int.from_bytes(data[3:5], "big"),
            sequence_number=int.from_bytes(data[5:11], "big"),
        )
        if header.version not in _SUPPORTED_VERSIONS:
            raise UnsupportedProtocolVersionError()
        return header


_DECODERS = {
    ContentType.CHANGE_CIPHER_SPEC: ChangeCipherSpec.unmarshal,
    ContentType.ALERT: Alert.unmarshal,
    ContentType.HANDSHAKE: Handshake.unmarshal,
    ContentType.APPLICATION_DATA: ApplicationData.unmarshal,
}


@dataclass
class RecordLayer:
    """A record: header and the content it carries."""

    header: RecordHeader = field(default_factory=RecordHeader)
    content: Content = field(default_factory=ApplicationData)

    def marshal(self) -> bytes:
        """Encode the record; the header's length and content type are updated."""
        body = self.content.marshal()
        self.header.content_len = len(body)
        self.header.content_type = self.content.content_type
        return self.header.marshal() + body

    @classmethod
    def unmarshal(cls, data: bytes) -> RecordLayer:
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise BufferTooSmallError()
        header = RecordHeader.unmarshal(data)
        decoder = _DECODERS.get(data[0])
        if decoder is None:
            raise InvalidContentTypeError()
        return cls(header=header, content=decoder(data[HEADER_SIZE:]))


def unpack_datagram(buf: bytes) -> list[bytes]:
    """Split a datagram into the records packed one after another in it."""
    buf = bytes(buf)
    records: list[bytes] = []
    offset = 0
    while offset != len(buf):
        if len(buf) - offset <= HEADER_SIZE:
            raise InvalidPacketLengthError()
        packet_length = HEADER_SIZE + int.from_bytes(buf[offset + 11 : offset + 13], "big")
        if offset + packet_length > len(buf):
            raise InvalidPacketLengthError()
        records.append(buf[offset : offset + packet_length])
        offset += packet_length
    return records