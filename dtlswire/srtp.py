"""SRTP protection profiles negotiated through the use_srtp extension."""

from enum import IntEnum


class SRTPProtectionProfile(IntEnum):
    """Parameters in effect for SRTP processing."""

    SRTP_AES128_CM_HMAC_SHA1_80 = 0x0001
    SRTP_AES128_CM_HMAC_SHA1_32 = 0x0002
    SRTP_AEAD_AES_128_GCM = 0x0007
    SRTP_AEAD_AES_256_GCM = 0x0008