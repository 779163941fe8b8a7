import logging
import threading
from dataclasses import dataclass, field
from itertools import islice
from typing import ClassVar

from arithmetic import (
    BoundedCache,
    NonceRegistry,
    bits_to_int,
    byte_length,
    constant_time_equal,
    deterministic_nonces,
    hash_message,
    mod_exp,
    mod_inverse,
    random_in_range,
)
from arithmetic.cache import DEFAULT_CAPACITY
from arithmetic.nonce import DEFAULT_REGISTRY_SIZE
from signature_algorithm import (
    KeyPair,
    Message,
    PrivateKey,
    PublicKey,
    SignatureResult,
    SigningFailedError,
    hex_to_int,
    int_to_hex,
)

from .parameters import P_BITS, Q_BITS, DomainParameters, generate_parameters

logger = logging.getLogger(__name__)

MAX_SIGNING_ATTEMPTS = 64


@dataclass(frozen=True)
class DSAPrivateKey(PrivateKey):
    x: int

    def to_dict(self) -> dict[str, str]:
        return {'x': int_to_hex(self.x)}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> 'DSAPrivateKey':
        return cls(hex_to_int(data['x']))


@dataclass(frozen=True)
class DSAPublicKey(PublicKey):
    p: int
    q: int
    g: int
    y: int

    @property
    def parameters(self) -> DomainParameters:
        return DomainParameters(self.p, self.q, self.g)

    def to_dict(self) -> dict[str, str]:
        return {name: int_to_hex(getattr(self, name)) for name in ('p', 'q', 'g', 'y')}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> 'DSAPublicKey':
        return cls(*(hex_to_int(data[name]) for name in ('p', 'q', 'g', 'y')))


@dataclass(frozen=True)
class DSASignature(SignatureResult):
    r: int
    s: int
    message_hash: bytes = field(default=b'', compare=False)
    p_bits: int = field(default=0, compare=False)
    q_bits: int = field(default=0, compare=False)

    @property
    def size(self) -> int:
        # r || s, each at the width of q
        return 2 * ((self.q_bits + 7) // 8)

    def to_dict(self) -> dict[str, str | int]:
        return {
            'r': int_to_hex(self.r),
            's': int_to_hex(self.s),
            'message_hash': self.message_hash.hex(),
            'p_bits': self.p_bits,
            'q_bits': self.q_bits,
        }


# https://en.wikipedia.org/wiki/Digital_Signature_Algorithm
class DSA:
    name: ClassVar[str] = 'DSA'

    def __init__(
        self,
        parameters: DomainParameters | None = None,
        p_bits: int = P_BITS,
        q_bits: int = Q_BITS,
        cache_size: int = DEFAULT_CAPACITY,
        nonce_registry_size: int = DEFAULT_REGISTRY_SIZE,
        cancel: threading.Event | None = None,
    ):
        if parameters is not None:
            parameters.validate()

        self.p_bits = p_bits
        self.q_bits = q_bits
        self.cancel = cancel
        self._parameters = parameters
        self._parameters_lock = threading.Lock()
        self._cache = BoundedCache(cache_size)
        self._nonces = NonceRegistry(nonce_registry_size)

    @property
    def parameters(self) -> DomainParameters:
        """Domain parameters, generated on first use and shared by every key of this instance."""
        if self._parameters is None:
            with self._parameters_lock:
                if self._parameters is None:
                    self._parameters = generate_parameters(self.p_bits, self.q_bits, self.cancel)
        return self._parameters

    def generate_keys(self) -> KeyPair:
        p, q, g = self.parameters.p, self.parameters.q, self.parameters.g

        x = random_in_range(1, q - 1)
        y = mod_exp(g, x, p)
        return KeyPair(DSAPublicKey(p, q, g, y), DSAPrivateKey(x))

    # FIPS 186-4, 4.6: the leftmost min(N, outlen) bits of the hash
    def _hash_to_int(self, message_hash: bytes, q: int) -> int:
        return bits_to_int(message_hash, q.bit_length()) % q

    def sign(self, message: Message, key_pair: KeyPair) -> DSASignature:
        private_key, public_key = key_pair.private_key, key_pair.public_key
        if not isinstance(private_key, DSAPrivateKey):
            msg = f'Excepted DSAPrivateKey, but got: {type(private_key)}'
            raise TypeError(msg)
        if not isinstance(public_key, DSAPublicKey):
            msg = f'Excepted DSAPublicKey, but got: {type(public_key)}'
            raise TypeError(msg)

        p, q, g, x = public_key.p, public_key.q, public_key.g, private_key.x
        message_hash = hash_message(message)
        z = self._hash_to_int(message_hash, q)

        for k in islice(deterministic_nonces(x, message_hash, q), MAX_SIGNING_ATTEMPTS):
            if not self._nonces.claim(k, x, message_hash):
                continue

            r = mod_exp(g, k, p) % q
            if r == 0:
                logger.debug('r = 0, drawing the next nonce')
                continue

            s = mod_inverse(k, q) * (z + x * r) % q
            if s == 0:
                logger.debug('s = 0, drawing the next nonce')
                continue

            return DSASignature(r, s, message_hash, p.bit_length(), q.bit_length())

        msg = f'No valid DSA signature after {MAX_SIGNING_ATTEMPTS} nonces'
        raise SigningFailedError(msg)

    def _verify(self, message: Message, signature: DSASignature, public_key: DSAPublicKey) -> bool:
        p, q, g, y = public_key.p, public_key.q, public_key.g, public_key.y
        r, s = signature.r, signature.s

        if not (0 < r < q and 0 < s < q):
            logger.debug('r or s out of range')
            return False
        if not 1 < y < p:
            logger.debug('Public key y out of range')
            return False

        z = self._hash_to_int(hash_message(message), q)
        # only public values go through the cache
        w = mod_inverse(s, q, self._cache)
        u1 = z * w % q
        u2 = r * w % q
        v = mod_exp(g, u1, p, self._cache) * mod_exp(y, u2, p, self._cache) % p % q
        return constant_time_equal(v, r, byte_length(q))

    def verify(self, message: Message, signature: SignatureResult, key_pair: KeyPair) -> bool:
        public_key = key_pair.public_key
        if not isinstance(public_key, DSAPublicKey) or not isinstance(signature, DSASignature):
            logger.debug('Not a DSA key or signature: %s, %s', type(public_key), type(signature))
            return False

        try:
            return self._verify(message, signature, public_key)
        except (ValueError, TypeError, ArithmeticError) as exc:
            logger.debug('DSA verification failed: %s', exc)
            return False
