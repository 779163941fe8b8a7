"""Deterministic per-signature nonces (RFC 6979, section 3.2).

The nonce k is derived from the private key and the message hash with
HMAC-SHA-256, so signing does not depend on a random source, and the same
(key, message) always yields the same k.
"""

import logging
from collections.abc import Iterator

from .cache import BoundedCache
from .hashing import DIGEST_SIZE, bits_to_int, digest, hmac_digest

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_SIZE = 4096


def _int_to_octets(x: int, length: int) -> bytes:
    return x.to_bytes(length)


def _bits_to_octets(data: bytes, order: int, length: int) -> bytes:
    z = bits_to_int(data, order.bit_length()) % order
    return _int_to_octets(z, length)


# https://datatracker.ietf.org/doc/html/rfc6979#section-3.2
def deterministic_nonces(secret: int, message_hash: bytes, order: int) -> Iterator[int]:
    """Yield candidate nonces in [1, order - 1], the first one being the RFC 6979 k.

    Asking for the next candidate continues the generator the way RFC 6979 does
    when a candidate is rejected (for example because r or s came out zero).
    """
    if not 1 <= secret < order:
        msg = 'Secret should lie in [1, order - 1]'
        raise ValueError(msg)

    qlen = order.bit_length()
    rolen = (qlen + 7) // 8
    x = _int_to_octets(secret, rolen)
    h = _bits_to_octets(message_hash, order, rolen)

    # b. and c.
    v = b'\x01' * DIGEST_SIZE
    k = b'\x00' * DIGEST_SIZE

    # d. to g.: the two refresh steps differ only by the domain separator
    for separator in (b'\x00', b'\x01'):
        k = hmac_digest(k, v + separator + x + h)
        v = hmac_digest(k, v)

    # h.
    while True:
        t = b''
        while 8 * len(t) < qlen:
            v = hmac_digest(k, v)
            t += v

        candidate = bits_to_int(t, qlen)
        if 1 <= candidate < order:
            yield candidate

        k = hmac_digest(k, v + b'\x00')
        v = hmac_digest(k, v)


class NonceRegistry:
    """Remembers recently issued nonces together with the inputs they came from.

    Issuing the same k again for the same (secret, message hash) is fine, that is
    just deterministic signing of the same message. The same k for different
    inputs would leak the private key, so it is refused. Nonces and secrets are
    only ever stored as SHA-256 digests.
    """

    def __init__(self, capacity: int = DEFAULT_REGISTRY_SIZE):
        self._issued = BoundedCache(capacity)

    @staticmethod
    def fingerprint(secret: int, message_hash: bytes) -> bytes:
        length = max(1, (secret.bit_length() + 7) // 8)
        return digest(secret.to_bytes(length) + b'\x00' + message_hash)

    @staticmethod
    def nonce_id(k: int) -> bytes:
        return digest(k.to_bytes(max(1, (k.bit_length() + 7) // 8)))

    def claim(self, k: int, secret: int, message_hash: bytes) -> bool:
        owner = self.fingerprint(secret, message_hash)
        stored = self._issued.setdefault(self.nonce_id(k), owner)
        if stored != owner:
            logger.warning('Refusing a nonce that was already issued for a different key or message')
            return False
        return True

    def __len__(self) -> int:
        return len(self._issued)
