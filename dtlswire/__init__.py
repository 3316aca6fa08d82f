"""Encoding and decoding of the DTLS 1.2 wire format: records, handshake messages, extensions and alerts."""

__version__ = "0.1.0"