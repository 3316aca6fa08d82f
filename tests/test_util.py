from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from dtlswire.srtp import SRTPProtectionProfile
from dtlswire.util import find_matching_cipher_suite, find_matching_srtp_profile, split_bytes


@dataclass
class _Suite:
    id: int
    name: str


@given(st.binary(max_size=200), st.integers(min_value=1, max_value=50))
def test_split_bytes_round_trip(data, split_len):
    chunks = split_bytes(data, split_len)
    assert b"".join(chunks) == data
    assert all(0 < len(chunk) <= split_len for chunk in chunks)
    assert all(len(chunk) == split_len for chunk in chunks[:-1])


def test_split_bytes_empty():
    assert split_bytes(b"", 4) == []


def test_split_bytes_rejects_non_positive_length():
    with pytest.raises(ValueError):
        split_bytes(b"abc", 0)


def test_srtp_profile_prefers_first_list_order():
    a = [
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80,
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_32,
    ]
    b = [
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_32,
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80,
    ]
    assert find_matching_srtp_profile(a, b) == SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80


def test_srtp_profile_no_match():
    a = [SRTPProtectionProfile.SRTP_AEAD_AES_128_GCM]
    b = [SRTPProtectionProfile.SRTP_AEAD_AES_256_GCM]
    assert find_matching_srtp_profile(a, b) is None


def test_cipher_suite_matches_by_id_and_returns_from_first_list():
    ours = _Suite(0xC02B, "ours")
    theirs = _Suite(0xC02B, "theirs")
    result = find_matching_cipher_suite([_Suite(0xC00A, "other"), ours], [theirs])
    assert result is ours


def test_cipher_suite_no_match():
    assert find_matching_cipher_suite([_Suite(0xC02B, "a")], [_Suite(0xC00A, "b")]) is None