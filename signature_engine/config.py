from dataclasses import dataclass

from arithmetic.cache import DEFAULT_CAPACITY
from arithmetic.nonce import DEFAULT_REGISTRY_SIZE
from dsa.parameters import P_BITS, Q_BITS
from ecdsa_custom.elliptic_curve import secp256k1
from rsa_pss.rsa import PRIME_BITS, PRIME_ROUNDS, SALT_LENGTH


@dataclass(frozen=True)
class EngineConfig:
    rsa_prime_bits: int = PRIME_BITS
    rsa_prime_rounds: int = PRIME_ROUNDS
    rsa_salt_length: int = SALT_LENGTH

    dsa_p_bits: int = P_BITS
    dsa_q_bits: int = Q_BITS

    ecdsa_curve: str = secp256k1.name
    ecdsa_low_s: bool = True

    cache_size: int = DEFAULT_CAPACITY
    nonce_registry_size: int = DEFAULT_REGISTRY_SIZE

    def __post_init__(self) -> None:
        if self.rsa_prime_rounds < 20:  # noqa: PLR2004
            msg = f'RSA primes need at least 20 Miller-Rabin rounds, but got: {self.rsa_prime_rounds}'
            raise ValueError(msg)
        if self.dsa_q_bits >= self.dsa_p_bits:
            msg = 'DSA q should be shorter than p'
            raise ValueError(msg)
