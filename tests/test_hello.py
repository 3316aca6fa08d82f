from datetime import datetime, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from dtlswire.errors import (
    BufferTooSmallError,
    CipherSuiteUnsetError,
    CompressionMethodUnsetError,
    CookieTooLongError,
    InvalidCompressionMethodError,
)
from dtlswire.ext_params import NamedCurve, SupportedEllipticCurves
from dtlswire.handshake_header import HandshakeType, Random
from dtlswire.hello import MessageClientHello, MessageServerHello
from dtlswire.protocol import CompressionMethod, Version

RAW_CLIENT_HELLO = bytes([
    0xfe, 0xfd, 0xb6, 0x2f, 0xce, 0x5c, 0x42, 0x54, 0xff, 0x86, 0xe1, 0x24, 0x41, 0x91, 0x42,
    0x62, 0x15, 0xad, 0x16, 0xc9, 0x15, 0x8d, 0x95, 0x71, 0x8a, 0xbb, 0x22, 0xd7, 0x47, 0xec,
    0xd8, 0x3d, 0xdc, 0x4b, 0x00, 0x14, 0xe6, 0x14, 0x3a, 0x1b, 0x04, 0xea, 0x9e, 0x7a, 0x14,
    0xd6, 0x6c, 0x57, 0xd0, 0x0e, 0x32, 0x85, 0x76, 0x18, 0xde, 0xd8, 0x00, 0x04, 0xc0, 0x2b,
    0xc0, 0x0a, 0x01, 0x00, 0x00, 0x08, 0x00, 0x0a, 0x00, 0x04, 0x00, 0x02, 0x00, 0x1d,
])

RAW_CLIENT_HELLO_SESSION_ID = bytes([
    0xfe, 0xfd, 0xb6, 0x2f, 0xce, 0x5c, 0x42, 0x54, 0xff, 0x86, 0xe1, 0x24, 0x41, 0x91, 0x42,
    0x62, 0x15, 0xad, 0x16, 0xc9, 0x15, 0x8d, 0x95, 0x71, 0x8a, 0xbb, 0x22, 0xd7, 0x47, 0xec,
    0xd8, 0x3d, 0xdc, 0x4b, 0x20, 0xe0, 0xe1, 0xe2, 0xe3, 0xe4, 0xe5, 0xe6, 0xe7, 0xe8, 0xe9,
    0xea, 0xeb, 0xec, 0xed, 0xee, 0xef, 0xf0, 0xf1, 0xf2, 0xf3, 0xf4, 0xf5, 0xf6, 0xf7, 0xf8,
    0xf9, 0xfa, 0xfb, 0xfc, 0xfd, 0xfe, 0xff, 0x14, 0xe6, 0x14, 0x3a, 0x1b, 0x04, 0xea, 0x9e,
    0x7a, 0x14, 0xd6, 0x6c, 0x57, 0xd0, 0x0e, 0x32, 0x85, 0x76, 0x18, 0xde, 0xd8, 0x00, 0x04,
    0xc0, 0x2b, 0xc0, 0x0a, 0x01, 0x00, 0x00, 0x08, 0x00, 0x0a, 0x00, 0x04, 0x00, 0x02, 0x00,
    0x1d,
])

RAW_SERVER_HELLO = bytes([
    0xfe, 0xfd, 0x21, 0x63, 0x32, 0x21, 0x81, 0x0e, 0x98, 0x6c,
    0x85, 0x3d, 0xa4, 0x39, 0xaf, 0x5f, 0xd6, 0x5c, 0xcc, 0x20,
    0x7f, 0x7c, 0x78, 0xf1, 0x5f, 0x7e, 0x1c, 0xb7, 0xa1, 0x1e,
    0xcf, 0x63, 0x84, 0x28, 0x00, 0xc0, 0x2b, 0x00, 0x00, 0x00,
])

RAW_SERVER_HELLO_SESSION_ID = bytes([
    0xfe, 0xfd, 0x21, 0x63, 0x32, 0x21, 0x81, 0x0e, 0x98, 0x6c,
    0x85, 0x3d, 0xa4, 0x39, 0xaf, 0x5f, 0xd6, 0x5c, 0xcc, 0x20,
    0x7f, 0x7c, 0x78, 0xf1, 0x5f, 0x7e, 0x1c, 0xb7, 0xa1, 0x1e,
    0xcf, 0x63, 0x84, 0x28, 0x20, 0xe0, 0xe1, 0xe2, 0xe3, 0xe4,
    0xe5, 0xe6, 0xe7, 0xe8, 0xe9, 0xea, 0xeb, 0xec, 0xed, 0xee,
    0xef, 0xf0, 0xf1, 0xf2, 0xf3, 0xf4, 0xf5, 0xf6, 0xf7, 0xf8,
    0xf9, 0xfa, 0xfb, 0xfc, 0xfd, 0xfe, 0xff, 0xc0, 0x2b, 0x00,
    0x00, 0x00,
])

SESSION_ID = bytes(range(0xE0, 0x100))


def test_client_hello_unmarshal_and_marshal():
    expected = MessageClientHello(
        version=Version(major=0xFE, minor=0xFD),
        random=Random(
            datetime.fromtimestamp(3056586332, tz=timezone.utc),
            bytes([
                0x42, 0x54, 0xff, 0x86, 0xe1, 0x24, 0x41, 0x91, 0x42, 0x62, 0x15, 0xad, 0x16, 0xc9,
                0x15, 0x8d, 0x95, 0x71, 0x8a, 0xbb, 0x22, 0xd7, 0x47, 0xec, 0xd8, 0x3d, 0xdc, 0x4b,
            ]),
        ),
        session_id=b"",
        cookie=bytes([
            0xe6, 0x14, 0x3a, 0x1b, 0x04, 0xea, 0x9e, 0x7a, 0x14, 0xd6,
            0x6c, 0x57, 0xd0, 0x0e, 0x32, 0x85, 0x76, 0x18, 0xde, 0xd8,
        ]),
        cipher_suite_ids=[0xC02B, 0xC00A],
        compression_methods=[CompressionMethod.NULL],
        extensions=[SupportedEllipticCurves([NamedCurve.X25519])],
    )
    parsed = MessageClientHello.unmarshal(RAW_CLIENT_HELLO)
    assert parsed == expected
    assert parsed.marshal() == RAW_CLIENT_HELLO


def test_client_hello_session_id():
    parsed = MessageClientHello.unmarshal(RAW_CLIENT_HELLO_SESSION_ID)
    assert parsed.session_id == SESSION_ID
    assert parsed.marshal() == RAW_CLIENT_HELLO_SESSION_ID


def test_client_hello_type():
    assert MessageClientHello.unmarshal(RAW_CLIENT_HELLO).handshake_type == HandshakeType.CLIENT_HELLO
    assert MessageServerHello.unmarshal(RAW_SERVER_HELLO).handshake_type == HandshakeType.SERVER_HELLO


def test_client_hello_cookie_too_long():
    with pytest.raises(CookieTooLongError):
        MessageClientHello(cookie=bytes(256)).marshal()


def test_client_hello_too_short():
    with pytest.raises(BufferTooSmallError):
        MessageClientHello.unmarshal(RAW_CLIENT_HELLO[:20])
    with pytest.raises(BufferTooSmallError):
        MessageClientHello.unmarshal(RAW_CLIENT_HELLO[:40])


@given(
    session_id=st.binary(max_size=32),
    cookie=st.binary(max_size=255),
    suites=st.lists(st.integers(min_value=0, max_value=0xFFFF), max_size=10),
)
def test_client_hello_round_trip(session_id, cookie, suites):
    message = MessageClientHello(
        random=Random(datetime.fromtimestamp(1000, tz=timezone.utc), bytes(range(28))),
        session_id=session_id,
        cookie=cookie,
        cipher_suite_ids=suites,
        compression_methods=[CompressionMethod.NULL],
    )
    assert MessageClientHello.unmarshal(message.marshal()) == message


def test_server_hello_unmarshal_and_marshal():
    expected = MessageServerHello(
        version=Version(major=0xFE, minor=0xFD),
        random=Random(
            datetime.fromtimestamp(560149025, tz=timezone.utc),
            bytes([
                0x81, 0x0e, 0x98, 0x6c, 0x85, 0x3d, 0xa4, 0x39, 0xaf, 0x5f, 0xd6, 0x5c, 0xcc, 0x20,
                0x7f, 0x7c, 0x78, 0xf1, 0x5f, 0x7e, 0x1c, 0xb7, 0xa1, 0x1e, 0xcf, 0x63, 0x84, 0x28,
            ]),
        ),
        session_id=b"",
        cipher_suite_id=0xC02B,
        compression_method=CompressionMethod.NULL,
        extensions=[],
    )
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO)
    assert parsed == expected
    assert parsed.marshal() == RAW_SERVER_HELLO


def test_server_hello_session_id():
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO_SESSION_ID)
    assert parsed.session_id == SESSION_ID
    assert parsed.marshal() == RAW_SERVER_HELLO_SESSION_ID


def test_server_hello_without_extensions_block():
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO[:-2])
    assert parsed.extensions == []
    assert parsed.cipher_suite_id == 0xC02B


def test_server_hello_requires_cipher_suite_and_compression():
    with pytest.raises(CipherSuiteUnsetError):
        MessageServerHello(compression_method=CompressionMethod.NULL).marshal()
    with pytest.raises(CompressionMethodUnsetError):
        MessageServerHello(cipher_suite_id=0xC02B).marshal()


def test_server_hello_invalid_compression_method():
    raw = bytearray(RAW_SERVER_HELLO)
    raw[37] = 0x01
    with pytest.raises(InvalidCompressionMethodError):
        MessageServerHello.unmarshal(bytes(raw))


def test_server_hello_too_short():
    with pytest.raises(BufferTooSmallError):
        MessageServerHello.unmarshal(RAW_SERVER_HELLO[:30])
    with pytest.raises(BufferTooSmallError):
        MessageServerHello.unmarshal(RAW_SERVER_HELLO[:36])
    with pytest.raises(BufferTooSmallError):
        MessageServerHello.unmarshal(RAW_SERVER_HELLO[:37])