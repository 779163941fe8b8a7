import hmac
from hashlib import sha256

from signature_algorithm import Message

HASH_NAME = 'sha256'
DIGEST_SIZE = sha256().digest_size
DIGEST_BITS = 8 * DIGEST_SIZE


def encode_message(message: Message) -> bytes:
    if isinstance(message, bytes):
        return message
    if isinstance(message, str):
        return message.encode()

    msg = f'Excepted str or bytes message, but got: {type(message)}'
    raise TypeError(msg)


def digest(data: bytes) -> bytes:
    return sha256(data).digest()


def hash_message(message: Message) -> bytes:
    return digest(encode_message(message))


def hmac_digest(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, HASH_NAME).digest()


# https://datatracker.ietf.org/doc/html/rfc6979#section-2.3.2
def bits_to_int(data: bytes, bits: int) -> int:
    """Integer value of the leftmost `bits` bits of `data`."""
    value = int.from_bytes(data)
    extra = 8 * len(data) - bits
    if extra > 0:
        value >>= extra
    return value
