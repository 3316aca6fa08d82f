import time
from datetime import datetime, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from dtlswire.errors import BufferTooSmallError
from dtlswire.handshake_header import (
    HEADER_LENGTH,
    HandshakeHeader,
    HandshakeType,
    Random,
    decode_cipher_suite_ids,
    encode_cipher_suite_ids,
)

RANDOM_RAW = bytes(
    [
        0xB6, 0x2F, 0xCE, 0x5C, 0x42, 0x54, 0xFF, 0x86, 0xE1, 0x24, 0x41, 0x91, 0x42, 0x62, 0x15, 0xAD,
        0x16, 0xC9, 0x15, 0x8D, 0x95, 0x71, 0x8A, 0xBB, 0x22, 0xD7, 0x47, 0xEC, 0xD8, 0x3D, 0xDC, 0x4B,
    ]
)


def test_decode_cipher_suite_ids_empty():
    with pytest.raises(BufferTooSmallError):
        decode_cipher_suite_ids(b"")


def test_decode_cipher_suite_ids_truncated():
    with pytest.raises(BufferTooSmallError):
        decode_cipher_suite_ids(bytes([0x00, 0x04, 0xC0, 0x2B]))


def test_encode_cipher_suite_ids():
    assert encode_cipher_suite_ids([0xC02B, 0xC00A]) == bytes([0x00, 0x04, 0xC0, 0x2B, 0xC0, 0x0A])


def test_decode_cipher_suite_ids_ignores_trailing_data():
    assert decode_cipher_suite_ids(bytes([0x00, 0x02, 0xC0, 0x2B, 0x01, 0x00])) == [0xC02B]


@given(st.lists(st.integers(min_value=0, max_value=0xFFFF), max_size=20))
def test_cipher_suite_ids_round_trip(ids):
    assert decode_cipher_suite_ids(encode_cipher_suite_ids(ids)) == ids


def test_header_marshal():
    header = HandshakeHeader(
        type=HandshakeType.CLIENT_HELLO,
        length=0x29,
        message_sequence=2,
        fragment_offset=0,
        fragment_length=0x29,
    )
    assert header.marshal() == bytes(
        [0x01, 0x00, 0x00, 0x29, 0x00, 0x02, 0x00, 0x00, 0x00, 0x00, 0x00, 0x29]
    )


@given(
    st.sampled_from(list(HandshakeType)),
    st.integers(0, 0xFFFFFF),
    st.integers(0, 0xFFFF),
    st.integers(0, 0xFFFFFF),
    st.integers(0, 0xFFFFFF),
)
def test_header_round_trip(kind, length, seq, offset, frag_len):
    header = HandshakeHeader(kind, length, seq, offset, frag_len)
    raw = header.marshal()
    assert len(raw) == HEADER_LENGTH
    assert HandshakeHeader.unmarshal(raw) == header


def test_header_keeps_unknown_type():
    raw = bytes([0x63]) + bytes(11)
    assert HandshakeHeader.unmarshal(raw).type == 0x63


def test_header_too_small():
    with pytest.raises(BufferTooSmallError):
        HandshakeHeader.unmarshal(bytes(11))


def test_handshake_type_names():
    client_hello = HandshakeHeader.unmarshal(bytes([0x01]) + bytes(11))
    certificate = HandshakeHeader.unmarshal(bytes([0x0B]) + bytes(11))
    assert str(client_hello.type) == "ClientHello"
    assert str(certificate.type) == "TypeCertificate"


def test_random_unmarshal_fixed():
    random = Random.unmarshal_fixed(RANDOM_RAW)
    assert random.gmt_unix_time == datetime.fromtimestamp(3056586332, tz=timezone.utc)
    assert random.random_bytes == RANDOM_RAW[4:]


def test_random_marshal_fixed():
    random = Random(datetime.fromtimestamp(3056586332, tz=timezone.utc), RANDOM_RAW[4:])
    assert random.marshal_fixed() == RANDOM_RAW


def test_random_wrong_length():
    with pytest.raises(ValueError):
        Random.unmarshal_fixed(RANDOM_RAW[:-1])
    with pytest.raises(ValueError):
        Random(random_bytes=b"\x00" * 5)


def test_random_generate():
    before = int(time.time())
    random = Random.generate()
    after = int(time.time())
    assert len(random.random_bytes) == 28
    assert before <= int(random.gmt_unix_time.timestamp()) <= after
    assert len(random.marshal_fixed()) == 32


def test_random_generate_differs():
    generated = [Random.generate().random_bytes for _ in range(5)]
    assert all(len(value) == 28 for value in generated)
    assert len(set(generated)) == 5