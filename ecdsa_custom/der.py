"""DER framing of an ECDSA signature: SEQUENCE { INTEGER r, INTEGER s }."""

from signature_algorithm import InvalidSignatureFormatError

SEQUENCE_TAG = 0x30
INTEGER_TAG = 0x02


def _encode_length(length: int) -> bytes:
    if length < 0x80:  # noqa: PLR2004
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8)
    return bytes([0x80 | len(body)]) + body


def _encode_integer(value: int) -> bytes:
    if value < 0:
        msg = f'Only non-negative integers can be encoded, but got: {value}'
        raise ValueError(msg)

    # one extra byte whenever the top bit would be set, so the value stays positive
    body = value.to_bytes(value.bit_length() // 8 + 1)
    return bytes([INTEGER_TAG]) + _encode_length(len(body)) + body


def der_encode(r: int, s: int) -> bytes:
    body = _encode_integer(r) + _encode_integer(s)
    return bytes([SEQUENCE_TAG]) + _encode_length(len(body)) + body


def _read_length(data: bytes, offset: int) -> tuple[int, int]:
    if offset >= len(data):
        raise InvalidSignatureFormatError('Missing length octet')

    first = data[offset]
    offset += 1
    if first < 0x80:  # noqa: PLR2004
        return first, offset

    count = first & 0x7F
    if count == 0 or count > 4:  # noqa: PLR2004
        raise InvalidSignatureFormatError('Unsupported length encoding')
    if offset + count > len(data):
        raise InvalidSignatureFormatError('Truncated length')

    length = int.from_bytes(data[offset : offset + count])
    if length < 0x80 or data[offset] == 0:  # noqa: PLR2004
        raise InvalidSignatureFormatError('Length is not minimally encoded')
    return length, offset + count


def _read_integer(data: bytes, offset: int) -> tuple[int, int]:
    if offset >= len(data) or data[offset] != INTEGER_TAG:
        raise InvalidSignatureFormatError('Expected an INTEGER')

    length, offset = _read_length(data, offset + 1)
    end = offset + length
    if length == 0 or end > len(data):
        raise InvalidSignatureFormatError('Truncated INTEGER')

    body = data[offset:end]
    if body[0] & 0x80:
        raise InvalidSignatureFormatError('Negative INTEGER')
    if len(body) > 1 and body[0] == 0 and not body[1] & 0x80:
        raise InvalidSignatureFormatError('INTEGER is not minimally encoded')
    return int.from_bytes(body), end


def der_decode(data: bytes) -> tuple[int, int]:
    """Strictly parse a DER signature; anything but exactly two non-negative INTEGERs is rejected."""
    if not isinstance(data, bytes | bytearray):
        msg = f'Excepted bytes, but got: {type(data)}'
        raise InvalidSignatureFormatError(msg)
    if not data or data[0] != SEQUENCE_TAG:
        raise InvalidSignatureFormatError('Expected a SEQUENCE')

    length, offset = _read_length(data, 1)
    if offset + length != len(data):
        raise InvalidSignatureFormatError('SEQUENCE length does not match the data')

    r, offset = _read_integer(data, offset)
    s, offset = _read_integer(data, offset)
    if offset != len(data):
        raise InvalidSignatureFormatError('Trailing data after the second INTEGER')
    return r, s
