"""The TLS alert protocol."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .errors import BufferTooSmallError
from .protocol import ContentType


class AlertLevel(IntEnum):
    """Severity of an alert."""

    WARNING = 1
    FATAL = 2

    def __str__(self) -> str:
        return self.name.capitalize()


class AlertDescription(IntEnum):
    """What an alert is about."""

    CLOSE_NOTIFY = 0
    UNEXPECTED_MESSAGE = 10
    BAD_RECORD_MAC = 20
    DECRYPTION_FAILED = 21
    RECORD_OVERFLOW = 22
    DECOMPRESSION_FAILURE = 30
    HANDSHAKE_FAILURE = 40
    NO_CERTIFICATE = 41
    BAD_CERTIFICATE = 42
    UNSUPPORTED_CERTIFICATE = 43
    CERTIFICATE_REVOKED = 44
    CERTIFICATE_EXPIRED = 45
    CERTIFICATE_UNKNOWN = 46
    ILLEGAL_PARAMETER = 47
    UNKNOWN_CA = 48
    ACCESS_DENIED = 49
    DECODE_ERROR = 50
    DECRYPT_ERROR = 51
    EXPORT_RESTRICTION = 60
    PROTOCOL_VERSION = 70
    INSUFFICIENT_SECURITY = 71
    INTERNAL_ERROR = 80
    USER_CANCELED = 90
    NO_RENEGOTIATION = 100
    UNSUPPORTED_EXTENSION = 110
    NO_APPLICATION_PROTOCOL = 120

    def __str__(self) -> str:
        if self is AlertDescription.UNKNOWN_CA:
            return "UnknownCA"
        return "".join(part.capitalize() for part in self.name.split("_"))


_LEVEL_IDS = frozenset(level.value for level in AlertLevel)
_DESCRIPTION_IDS = frozenset(description.value for description in AlertDescription)


def _level_name(level: int) -> str:
    return str(AlertLevel(level)) if level in _LEVEL_IDS else "Invalid alert level"


def _description_name(description: int) -> str:
    if description in _DESCRIPTION_IDS:
        return str(AlertDescription(description))
    return "Invalid alert description"


@dataclass
class Alert:
    """An alert's level and description.

    Unknown codes read from the wire are kept as plain ints.
    """

    level: AlertLevel | int = AlertLevel.WARNING
    description: AlertDescription | int = AlertDescription.CLOSE_NOTIFY

    @property
    def content_type(self) -> ContentType:
        return ContentType.ALERT

    def marshal(self) -> bytes:
        return bytes([int(self.level) & 0xFF, int(self.description) & 0xFF])

    @classmethod
    def unmarshal(cls, data: bytes) -> Alert:
        if len(data) != 2:
            raise BufferTooSmallError()
        level, description = data[0], data[1]
        return cls(
            AlertLevel(level) if level in _LEVEL_IDS else level,
            AlertDescription(description) if description in _DESCRIPTION_IDS else description,
        )

    def __str__(self) -> str:
        return f"Alert {_level_name(self.level)}: {_description_name(self.description)}"