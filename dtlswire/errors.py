"""Error types raised while encoding and decoding DTLS records."""

from __future__ import annotations


class DTLSError(Exception):
    """Base class of every DTLS error.

    ``timeout()`` and ``temporary()`` tell the caller whether the failure
    came from a deadline and whether the connection is still usable.
    """

    prefix = "dtls"
    default_message = "error"

    def __init__(self, message: str | None = None) -> None:
        self.message = self.default_message if message is None else message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"

    def timeout(self) -> bool:
        return False

    def temporary(self) -> bool:
        return False


class FatalError(DTLSError):
    """The connection is no longer available, usually through misconfiguration."""

    prefix = "dtls fatal"


class InternalError(DTLSError):
    """A fault of the implementation itself; the connection is no longer available."""

    prefix = "dtls internal"


class TemporaryError(DTLSError):
    """The request failed, but the connection is still available."""

    prefix = "dtls temporary"

    def temporary(self) -> bool:
        return True


class DTLSTimeoutError(DTLSError):
    """The request timed out."""

    prefix = "dtls timeout"

    def timeout(self) -> bool:
        return True

    def temporary(self) -> bool:
        return True


class HandshakeError(DTLSError):
    """The handshake failed; wraps the error that made it fail."""

    prefix = "handshake error"

    def __init__(self, error: BaseException | str) -> None:
        self.error = error
        super().__init__(str(error))

    def _wrapped_dtls_error(self) -> DTLSError | None:
        err = self.error if isinstance(self.error, BaseException) else None
        seen: set[int] = set()
        while err is not None and id(err) not in seen:
            if isinstance(err, DTLSError):
                return err
            seen.add(id(err))
            err = err.__cause__ or err.__context__
        return None

    def timeout(self) -> bool:
        wrapped = self._wrapped_dtls_error()
        return wrapped.timeout() if wrapped is not None else False

    def temporary(self) -> bool:
        wrapped = self._wrapped_dtls_error()
        return wrapped.temporary() if wrapped is not None else False


class BufferTooSmallError(TemporaryError):
    default_message = "buffer is too small"


class InvalidCipherSpecError(FatalError):
    default_message = "cipher spec invalid"


class ALPNInvalidFormatError(FatalError):
    default_message = "invalid alpn format"


class NoApplicationProtocolError(FatalError):
    default_message = "no application protocol"


class InvalidExtensionTypeError(FatalError):
    default_message = "invalid extension type"


class InvalidSNIFormatError(FatalError):
    default_message = "invalid server name format"


class LengthMismatchError(InternalError):
    default_message = "data length and declared length do not match"


class UnableToMarshalFragmentedError(InternalError):
    default_message = "unable to marshal fragmented handshakes"


class HandshakeMessageUnsetError(InternalError):
    default_message = "handshake message unset, unable to marshal"


class InvalidClientKeyExchangeError(FatalError):
    default_message = "unable to determine if ClientKeyExchange is a public key or PSK Identity"


class InvalidHashAlgorithmError(FatalError):
    default_message = "invalid hash algorithm"


class InvalidSignatureAlgorithmError(FatalError):
    default_message = "invalid signature algorithm"


class CookieTooLongError(FatalError):
    default_message = "cookie must not be longer then 255 bytes"


class InvalidEllipticCurveTypeError(FatalError):
    default_message = "invalid or unknown elliptic curve type"


class InvalidNamedCurveError(FatalError):
    default_message = "invalid named curve"


class CipherSuiteUnsetError(FatalError):
    default_message = "server hello can not be created without a cipher suite"


class CompressionMethodUnsetError(FatalError):
    default_message = "server hello can not be created without a compression method"


class InvalidCompressionMethodError(FatalError):
    default_message = "invalid or unknown compression method"


class NotImplementedFeatureError(InternalError):
    default_message = "feature has not been implemented yet"


class InvalidPacketLengthError(TemporaryError):
    default_message = "packet length and declared length do not match"


class SequenceNumberOverflowError(InternalError):
    default_message = "sequence number overflow"


class UnsupportedProtocolVersionError(FatalError):
    default_message = "unsupported protocol version"


class InvalidContentTypeError(TemporaryError):
    default_message = "invalid content type"