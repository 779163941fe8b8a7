from .cache import BoundedCache
from .hashing import DIGEST_SIZE, bits_to_int, encode_message, hash_message, hmac_digest
from .modular import (
    InverseNotFoundError,
    byte_length,
    constant_time_equal,
    extended_gcd,
    mod_exp,
    mod_inverse,
    random_bits,
    random_in_range,
)
from .nonce import NonceRegistry, deterministic_nonces
from .primes import is_probable_prime, random_prime

__all__ = [
    'DIGEST_SIZE',
    'BoundedCache',
    'InverseNotFoundError',
    'NonceRegistry',
    'bits_to_int',
    'byte_length',
    'constant_time_equal',
    'deterministic_nonces',
    'encode_message',
    'extended_gcd',
    'hash_message',
    'hmac_digest',
    'is_probable_prime',
    'mod_exp',
    'mod_inverse',
    'random_bits',
    'random_in_range',
    'random_prime',
]
