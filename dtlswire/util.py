"""Helpers for negotiation and fragmenting."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from .srtp import SRTPProtectionProfile

T = TypeVar("T")


def find_matching_srtp_profile(
    a: Iterable[SRTPProtectionProfile], b: Iterable[SRTPProtectionProfile]
) -> SRTPProtectionProfile | None:
    """Return the first profile of ``a`` also present in ``b``, or None."""
    candidates = list(b)
    return next((profile for profile in a if profile in candidates), None)


def find_matching_cipher_suite(a: Iterable[Any], b: Iterable[Any]) -> Any | None:
    """Return the first suite of ``a`` whose ``id`` appears in ``b``, or None."""
    ids = {suite.id for suite in b}
    return next((suite for suite in a if suite.id in ids), None)


def split_bytes(data: bytes, split_len: int) -> list[bytes]:
    """Cut ``data`` into consecutive chunks of at most ``split_len`` bytes."""
    if split_len <= 0:
        raise ValueError("split_len must be positive")
    return [data[start : start + split_len] for start in range(0, len(data), split_len)]