import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import ClassVar

from arithmetic import (
    NonceRegistry,
    bits_to_int,
    byte_length,
    constant_time_equal,
    deterministic_nonces,
    hash_message,
    mod_inverse,
    random_in_range,
)
from arithmetic.nonce import DEFAULT_REGISTRY_SIZE
from signature_algorithm import (
    InvalidSignatureFormatError,
    KeyPair,
    Message,
    PrivateKey,
    PublicKey,
    SignatureResult,
    SigningFailedError,
    hex_to_int,
    int_to_hex,
)

from .der import der_decode, der_encode
from .elliptic_curve import EllipticCurve, NormalPoint, PointAtInfinity, secp256k1

logger = logging.getLogger(__name__)

COORDINATE_SIZE = 32
MAX_SIGNING_ATTEMPTS = 64


@dataclass(frozen=True)
class ECPrivateKey(PrivateKey):
    d: int
    curve: str = secp256k1.name

    def to_dict(self) -> dict[str, str]:
        return {'d': int_to_hex(self.d, COORDINATE_SIZE), 'curve': self.curve}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> 'ECPrivateKey':
        return cls(hex_to_int(data['d']), data.get('curve', secp256k1.name))


@dataclass(frozen=True)
class ECPublicKey(PublicKey):
    x: int
    y: int
    curve: str = secp256k1.name

    @property
    def point(self) -> NormalPoint:
        return NormalPoint(self.x, self.y)

    def to_dict(self) -> dict[str, str]:
        return {
            'x': int_to_hex(self.x, COORDINATE_SIZE),
            'y': int_to_hex(self.y, COORDINATE_SIZE),
            'curve': self.curve,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> 'ECPublicKey':
        return cls(hex_to_int(data['x']), hex_to_int(data['y']), data.get('curve', secp256k1.name))


@dataclass(frozen=True)
class ECDSASignature(SignatureResult):
    r: int
    s: int
    der: bytes = field(default=b'', compare=False)
    message_hash: bytes = field(default=b'', compare=False)

    @property
    def size(self) -> int:
        return len(self.der) if self.der else len(der_encode(self.r, self.s))

    def to_dict(self) -> dict[str, str]:
        return {
            'r': int_to_hex(self.r, COORDINATE_SIZE),
            's': int_to_hex(self.s, COORDINATE_SIZE),
            'der': self.der.hex(),
            'message_hash': self.message_hash.hex(),
        }


class ECDSA:
    name: ClassVar[str] = 'ECDSA'
    curve: EllipticCurve

    def __init__(
        self,
        curve: EllipticCurve = secp256k1,
        low_s: bool = True,  # noqa: FBT001, FBT002
        nonce_registry_size: int = DEFAULT_REGISTRY_SIZE,
    ):
        self.curve = curve
        self.low_s = low_s
        self._nonces = NonceRegistry(nonce_registry_size)

    def generate_keys(self) -> KeyPair:
        d = random_in_range(1, self.curve.n - 1)
        point = self.curve.multiply_base(d)
        assert isinstance(point, NormalPoint)  # noqa: S101

        return KeyPair(
            ECPublicKey(point.x, point.y, self.curve.name),
            ECPrivateKey(d, self.curve.name),
        )

    # Let z be the L_n leftmost bits of e, where L_n is the bit length of the group order n
    def _hash_to_int(self, message_hash: bytes) -> int:
        return bits_to_int(message_hash, self.curve.n.bit_length()) % self.curve.n

    # https://en.wikipedia.org/wiki/Elliptic_Curve_Digital_Signature_Algorithm#Signature_generation_algorithm
    def sign(self, message: Message, key_pair: KeyPair) -> ECDSASignature:
        private_key = key_pair.private_key
        if not isinstance(private_key, ECPrivateKey):
            msg = f'Excepted ECPrivateKey, but got: {type(private_key)}'
            raise TypeError(msg)
        if private_key.curve != self.curve.name:
            msg = f'Key belongs to {private_key.curve}, not {self.curve.name}'
            raise ValueError(msg)

        n = self.curve.n
        d = private_key.d

        # 1. and 2. e = HASH(m), truncated to the bit length of n
        message_hash = hash_message(message)
        z = self._hash_to_int(message_hash)

        # 3. k comes from RFC 6979; asking for another candidate is "go back to step 3"
        for k in islice(deterministic_nonces(d, message_hash, n), MAX_SIGNING_ATTEMPTS):
            if not self._nonces.claim(k, d, message_hash):
                continue

            # 4. and 5. r = x1 mod n for (x1, y1) = k * G
            point = self.curve.multiply_base(k)
            assert isinstance(point, NormalPoint)  # noqa: S101
            r = point.x % n
            if r == 0:
                logger.debug('r = 0, drawing the next nonce')
                continue

            # 6. s = k^{-1} (z + r d_A) mod n
            s = mod_inverse(k, n) * (z + r * d) % n
            if s == 0:
                logger.debug('s = 0, drawing the next nonce')
                continue

            # 7. (r, -s mod n) is also valid, keep the lower one
            if self.low_s and s > n // 2:
                s = n - s

            return ECDSASignature(r, s, der_encode(r, s), message_hash)

        msg = f'No valid ECDSA signature after {MAX_SIGNING_ATTEMPTS} nonces'
        raise SigningFailedError(msg)

    def _components(self, signature: SignatureResult | bytes) -> tuple[int, int]:
        if isinstance(signature, ECDSASignature):
            return signature.r, signature.s
        if isinstance(signature, bytes | bytearray):
            return der_decode(bytes(signature))

        msg = f'Excepted ECDSASignature or DER bytes, but got: {type(signature)}'
        raise InvalidSignatureFormatError(msg)

    # https://en.wikipedia.org/wiki/Elliptic_Curve_Digital_Signature_Algorithm#Signature_verification_algorithm
    def _verify(self, message: Message, signature: SignatureResult | bytes, public_key: ECPublicKey) -> bool:
        n = self.curve.n
        r, s = self._components(signature)

        # Q_A must be a point on this curve other than O; with cofactor 1 that also means n * Q_A = O
        if public_key.curve != self.curve.name:
            logger.debug('Public key is for curve %s', public_key.curve)
            return False
        q = public_key.point
        if not self.curve.is_valid(q):
            logger.debug('Public key is not on the curve')
            return False

        # 1. r and s are integers in [1, n - 1]
        if not (1 <= r < n and 1 <= s < n):
            logger.debug('r or s out of range')
            return False

        # 2. and 3.
        z = self._hash_to_int(hash_message(message))

        # 4.
        w = mod_inverse(s, n)
        u1 = z * w % n
        u2 = r * w % n

        # 5. (x1, y1) = u1 * G + u2 * Q_A, O means invalid
        point = self.curve.multiply_add(u1, u2, q)
        if isinstance(point, PointAtInfinity):
            logger.debug('u1 * G + u2 * Q is the point at infinity')
            return False

        # 6.
        return constant_time_equal(point.x % n, r, byte_length(n))

    def verify(self, message: Message, signature: SignatureResult | bytes, key_pair: KeyPair) -> bool:
        public_key = key_pair.public_key
        if not isinstance(public_key, ECPublicKey):
            logger.debug('Not an EC public key: %s', type(public_key))
            return False

        try:
            return self._verify(message, signature, public_key)
        except (InvalidSignatureFormatError, ValueError, TypeError, ArithmeticError) as exc:
            logger.debug('ECDSA verification failed: %s', exc)
            return False
