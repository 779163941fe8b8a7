import logging
import os
import threading
from dataclasses import dataclass, field
from hmac import compare_digest
from typing import ClassVar

from arithmetic import (
    DIGEST_SIZE,
    InverseNotFoundError,
    byte_length,
    hash_message,
    mod_exp,
    mod_inverse,
    random_prime,
)
from arithmetic.hashing import digest
from signature_algorithm import (
    KeyGenerationFailedError,
    KeyPair,
    Message,
    PrivateKey,
    PublicKey,
    SignatureResult,
    hex_to_int,
    int_to_hex,
)

logger = logging.getLogger(__name__)

PUBLIC_EXPONENT = 65537
PRIME_BITS = 1024
PRIME_ROUNDS = 40
SALT_LENGTH = 32
MAX_KEYGEN_ATTEMPTS = 16


@dataclass(frozen=True)
class RSAPrivateKey(PrivateKey):
    d: int
    n: int

    def to_dict(self) -> dict[str, str]:
        return {'d': int_to_hex(self.d), 'n': int_to_hex(self.n)}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> 'RSAPrivateKey':
        return cls(hex_to_int(data['d']), hex_to_int(data['n']))


@dataclass(frozen=True)
class RSAPublicKey(PublicKey):
    e: int
    n: int

    def to_dict(self) -> dict[str, str]:
        return {'e': int_to_hex(self.e), 'n': int_to_hex(self.n)}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> 'RSAPublicKey':
        return cls(hex_to_int(data['e']), hex_to_int(data['n']))


@dataclass(frozen=True)
class RSASignature(SignatureResult):
    signature: int
    # informational only, the verifier recovers the salt from the encoded message
    salt: bytes = field(default=b'', compare=False)
    message_hash: bytes = field(default=b'', compare=False)
    # octet length of n, 0 when unknown
    key_size: int = field(default=0, compare=False)

    @property
    def size(self) -> int:
        return self.key_size or byte_length(self.signature)

    def to_dict(self) -> dict[str, str]:
        return {
            'signature': int_to_hex(self.signature, self.key_size or None),
            'salt': self.salt.hex(),
            'message_hash': self.message_hash.hex(),
        }


# https://datatracker.ietf.org/doc/html/rfc8017#section-8.1
class RSA:
    name: ClassVar[str] = 'RSA'

    def __init__(
        self,
        prime_bits: int = PRIME_BITS,
        salt_length: int = SALT_LENGTH,
        rounds: int = PRIME_ROUNDS,
        cancel: threading.Event | None = None,
    ):
        self.prime_bits = prime_bits
        self.salt_length = salt_length
        self.rounds = rounds
        self.cancel = cancel

    def generate_keys(self) -> KeyPair:
        logger.info('Generating an RSA key pair from two %d-bit primes', self.prime_bits)
        for attempt in range(1, MAX_KEYGEN_ATTEMPTS + 1):
            p = random_prime(self.prime_bits, self.rounds, self.cancel)
            q = random_prime(self.prime_bits, self.rounds, self.cancel)
            if p == q:
                logger.debug('Drew the same prime twice, resampling (attempt %d)', attempt)
                continue

            n = p * q
            phi = (p - 1) * (q - 1)
            try:
                d = mod_inverse(PUBLIC_EXPONENT, phi)
            except InverseNotFoundError:
                logger.debug('e is not invertible modulo phi(n), resampling (attempt %d)', attempt)
                continue

            return KeyPair(RSAPublicKey(PUBLIC_EXPONENT, n), RSAPrivateKey(d, n))

        msg = f'No usable RSA key after {MAX_KEYGEN_ATTEMPTS} attempts'
        raise KeyGenerationFailedError(msg)

    # https://datatracker.ietf.org/doc/html/rfc8017#section-4.1
    def _I2OSP(self, x: int, xLen: int) -> bytes:
        # OverflowError stands for "integer too large"
        return x.to_bytes(xLen)

    # https://datatracker.ietf.org/doc/html/rfc8017#section-4.2
    def _OS2IP(self, X: bytes) -> int:
        return int.from_bytes(X)

    # https://datatracker.ietf.org/doc/html/rfc8017#section-5.2.1
    def _RSASP1(self, K: RSAPrivateKey, m: int) -> int:
        if not 0 <= m < K.n:
            raise ValueError('message representative out of range')
        return mod_exp(m, K.d, K.n)

    # https://datatracker.ietf.org/doc/html/rfc8017#section-5.2.2
    def _RSAVP1(self, P: RSAPublicKey, s: int) -> int:
        if not 0 <= s < P.n:
            raise ValueError('signature representative out of range')
        return mod_exp(s, P.e, P.n)

    # https://datatracker.ietf.org/doc/html/rfc8017#appendix-B.2.1
    def _MGF1(self, mgfSeed: bytes, maskLen: int) -> bytes:
        if maskLen > (1 << 32) * DIGEST_SIZE:
            raise ValueError('mask too long')

        T = b''.join(
            digest(mgfSeed + self._I2OSP(counter, 4)) for counter in range((maskLen + DIGEST_SIZE - 1) // DIGEST_SIZE)
        )
        return T[:maskLen]

    def _clear_top_bits(self, data: bytes, emLen: int, emBits: int) -> bytes:
        # leftmost 8emLen - emBits bits of the first octet are forced to zero
        bitsCount = 8 * emLen - emBits
        return bytes([data[0] & (0xFF >> bitsCount)]) + data[1:]

    def _salt_length(self, emLen: int) -> int:
        return max(0, min(self.salt_length, emLen - DIGEST_SIZE - 2))

    # https://datatracker.ietf.org/doc/html/rfc8017#section-9.1.1
    def _EMSA_PSS_ENCODE(self, mHash: bytes, emBits: int, salt: bytes) -> bytes:
        hLen = len(mHash)
        sLen = len(salt)

        # 3. emLen has to hold the hash, the salt, the 0x01 separator and the trailer
        emLen = (emBits + 7) // 8
        if emLen < hLen + sLen + 2:
            raise ValueError('encoding error')

        # 5. and 6. H = Hash(00 00 00 00 00 00 00 00 || mHash || salt)
        H = digest(b'\x00' * 8 + mHash + salt)

        # 7. and 8. DB = PS || 0x01 || salt
        PS = b'\x00' * (emLen - sLen - hLen - 2)
        DB = PS + b'\x01' + salt

        # 9. to 11. mask DB, then clear the bits above emBits
        dbMask = self._MGF1(H, emLen - hLen - 1)
        maskedDB = bytes(x ^ y for x, y in zip(DB, dbMask, strict=True))
        maskedDB = self._clear_top_bits(maskedDB, emLen, emBits)

        # 12. EM = maskedDB || H || 0xbc
        return maskedDB + H + b'\xbc'

    # https://datatracker.ietf.org/doc/html/rfc8017#section-9.1.2
    def _EMSA_PSS_VERIFY(self, mHash: bytes, EM: bytes, emBits: int) -> bool:
        """EMSA-PSS verification that recovers the salt instead of assuming its length.

        The salt is whatever follows the first 0x01 octet of DB, everything before
        it has to be zero.
        """
        hLen = len(mHash)

        # 3.
        emLen = len(EM)
        if emLen < hLen + 2:
            logger.debug('Encoded message is too short')
            return False

        # 4.
        if EM[-1] != 0xBC:  # noqa: PLR2004
            logger.debug('Trailer byte is not 0xbc')
            return False

        # 5.
        length = emLen - hLen - 1
        maskedDB = EM[:length]
        H = EM[length : length + hLen]

        # 6.
        bitsCount = 8 * emLen - emBits
        # bits are in reverse order, so we can check for an overflow
        if (maskedDB[0] << bitsCount) >> 8:
            logger.debug('Bits above emBits are set')
            return False

        # 7. to 9.
        dbMask = self._MGF1(H, length)
        DB = bytes(x ^ y for x, y in zip(maskedDB, dbMask, strict=True))
        DB = self._clear_top_bits(DB, emLen, emBits)

        # 10. PS must be zeros followed by the 0x01 separator
        separator = DB.find(b'\x01')
        if separator < 0 or any(DB[:separator]):
            logger.debug('Padding string is malformed')
            return False

        # 11.
        salt = DB[separator + 1 :]

        # 12. to 14.
        H_ = digest(b'\x00' * 8 + mHash + salt)
        return compare_digest(H, H_)

    # https://datatracker.ietf.org/doc/html/rfc8017#section-8.1.1
    def _RSASSA_PSS_SIGN(self, K: RSAPrivateKey, mHash: bytes) -> tuple[int, bytes]:
        modBits = K.n.bit_length()
        emBits = modBits - 1
        emLen = (emBits + 7) // 8

        salt = os.urandom(self._salt_length(emLen))
        EM = self._EMSA_PSS_ENCODE(mHash, emBits, salt)

        m = self._OS2IP(EM)
        return self._RSASP1(K, m), salt

    # https://datatracker.ietf.org/doc/html/rfc8017#section-8.1.2
    def _RSASSA_PSS_VERIFY(self, P: RSAPublicKey, mHash: bytes, s: int) -> bool:
        # 2.b. out-of-range representatives are rejected, never reduced
        try:
            m = self._RSAVP1(P, s)
        except ValueError:
            logger.debug('Signature representative out of range')
            return False

        # 2.c.
        modBits = P.n.bit_length()
        emLen = (modBits + 6) // 8  # ceil((modBits - 1) / 8)
        try:
            EM = self._I2OSP(m, emLen)
        except OverflowError:
            logger.debug('Encoded message does not fit into emLen octets')
            return False

        # 3.
        return self._EMSA_PSS_VERIFY(mHash, EM, modBits - 1)

    def sign(self, message: Message, key_pair: KeyPair) -> RSASignature:
        private_key = key_pair.private_key
        if not isinstance(private_key, RSAPrivateKey):
            msg = f'Excepted RSAPrivateKey, but got: {type(private_key)}'
            raise TypeError(msg)

        mHash = hash_message(message)
        s, salt = self._RSASSA_PSS_SIGN(private_key, mHash)
        return RSASignature(s, salt, mHash, byte_length(private_key.n))

    def verify(self, message: Message, signature: SignatureResult, key_pair: KeyPair) -> bool:
        public_key = key_pair.public_key
        if not isinstance(public_key, RSAPublicKey) or not isinstance(signature, RSASignature):
            logger.debug('Not an RSA key or signature: %s, %s', type(public_key), type(signature))
            return False

        try:
            return self._RSASSA_PSS_VERIFY(public_key, hash_message(message), signature.signature)
        except (ValueError, TypeError, ArithmeticError) as exc:
            logger.debug('RSA-PSS verification failed: %s', exc)
            return False
