# dtlswire

`dtlswire` reads and writes the DTLS 1.2 wire format. It uses only the standard library.

## What it covers

| Module | Contents |
| --- | --- |
| `dtlswire.recordlayer` | `RecordHeader`, `RecordLayer`, `unpack_datagram`, `HEADER_SIZE`, `MAX_SEQUENCE_NUMBER` |
| `dtlswire.protocol` | `ContentType`, `Content`, `Version` (`VERSION_1_0`, `VERSION_1_2`), `ApplicationData`, `ChangeCipherSpec`, `CompressionMethod`, `decode_compression_methods`, `encode_compression_methods` |
| `dtlswire.alert` | `Alert`, `AlertLevel`, `AlertDescription` |
| `dtlswire.handshake` | `Handshake`, `MessageHelloVerifyRequest` |
| `dtlswire.handshake_header` | `HandshakeHeader`, `HandshakeType`, `Random`, `decode_cipher_suite_ids`, `encode_cipher_suite_ids` |
| `dtlswire.hello` | `MessageClientHello`, `MessageServerHello` |
| `dtlswire.messages` | `MessageCertificate`, `MessageCertificateRequest`, `MessageCertificateVerify`, `MessageClientKeyExchange`, `MessageServerKeyExchange`, `MessageFinished`, `MessageServerHelloDone`, `KeyExchangeAlgorithm`, `CurveType`, `ClientCertificateType` |
| `dtlswire.extensions` | `ServerName`, `ALPN`, `RenegotiationInfo`, `UseExtendedMasterSecret`, `marshal_extensions`, `unmarshal_extensions`, `alpn_protocol_selection` |
| `dtlswire.ext_params` | `SupportedEllipticCurves`, `SupportedPointFormats`, `SupportedSignatureAlgorithms`, `UseSRTP`, `TypeValue`, `Extension`, `NamedCurve`, `CurvePointFormat`, `HashAlgorithm`, `SignatureAlgorithm`, `SignatureHashAlgorithm` |
| `dtlswire.srtp` | `SRTPProtectionProfile` |
| `dtlswire.util` | `find_matching_srtp_profile`, `find_matching_cipher_suite`, `split_bytes` |
| `dtlswire.session` | `Session`, `SessionStore` (an abstract base class) |
| `dtlswire.errors` | `DTLSError` and its subclasses |

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Usage

Each message, extension and content type has two methods:

- `marshal()` returns its encoding as `bytes`.
- The class method `unmarshal(data)` parses bytes into a new instance.

`RecordLayer.marshal()` and `Handshake.marshal()` also update the lengths and type in their header.

```python
from dtlswire.protocol import ChangeCipherSpec
from dtlswire.recordlayer import RecordLayer, unpack_datagram

datagram = bytes([0x14, 0xfe, 0xff, 0, 0, 0, 0, 0, 0, 0, 0x12, 0, 1, 1])
for raw in unpack_datagram(datagram):
    record = RecordLayer.unmarshal(raw)
    assert isinstance(record.content, ChangeCipherSpec)
    assert record.header.sequence_number == 18
    assert record.marshal() == raw
```

The key exchange messages are laid out according to the negotiated key exchange algorithm, so their `unmarshal` takes that algorithm as a second argument. `Handshake.unmarshal` takes it as an optional argument and passes it on:

```python
from dtlswire.messages import KeyExchangeAlgorithm, MessageClientKeyExchange

msg = MessageClientKeyExchange.unmarshal(b"\x02\xab\xcd", KeyExchangeAlgorithm.ECDHE)
assert msg.public_key == b"\xab\xcd"
assert msg.marshal() == b"\x02\xab\xcd"
```

`alpn_protocol_selection` returns the first of your protocols that the peer also offers. If either list is empty, it returns an empty string. If the lists share no protocol, it raises `NoApplicationProtocolError`:

```python
from dtlswire.extensions import alpn_protocol_selection

alpn_protocol_selection(["http/1.1", "spd/1"], ["spd/1"])  # -> "spd/1"
```

`Random.generate()` builds a hello random stamped with the current time, with 28 bytes taken from `os.urandom`.

## Errors

Malformed input raises a subclass of `dtlswire.errors.DTLSError`, for example `BufferTooSmallError` or `LengthMismatchError`. Every error class also derives from one of four groups:

- `FatalError`
- `InternalError`
- `TemporaryError`
- `DTLSTimeoutError`

Each error reports two things through `temporary()` and `timeout()`: whether the connection is still usable, and whether the failure came from a deadline. `HandshakeError` wraps another error and reports the answers of the first `DTLSError` it finds in that error's cause chain.

## What it does not do

`dtlswire` only encodes and decodes. It has:

- no sockets or connections,
- no handshake state machine,
- no cipher suites,
- no encryption, MAC or key derivation,
- no replay protection.

`SessionStore` only defines the interface for storing sessions. It ships no storage implementation.