import logging
import threading
from collections.abc import Callable

from dsa import DSA
from ecdsa_custom import ECDSA
from ecdsa_custom.elliptic_curve import CURVES
from rsa_pss import RSA
from signature_algorithm import KeyPair, Message, SignatureResult, UnsupportedAlgorithmError

from .config import EngineConfig

logger = logging.getLogger(__name__)

Algorithm = RSA | DSA | ECDSA


def _build_rsa(config: EngineConfig) -> RSA:
    return RSA(config.rsa_prime_bits, config.rsa_salt_length, config.rsa_prime_rounds)


def _build_dsa(config: EngineConfig) -> DSA:
    return DSA(
        p_bits=config.dsa_p_bits,
        q_bits=config.dsa_q_bits,
        cache_size=config.cache_size,
        nonce_registry_size=config.nonce_registry_size,
    )


def _build_ecdsa(config: EngineConfig) -> ECDSA:
    if config.ecdsa_curve not in CURVES:
        msg = f'Unknown curve: {config.ecdsa_curve}'
        raise UnsupportedAlgorithmError(msg)
    return ECDSA(CURVES[config.ecdsa_curve], config.ecdsa_low_s, config.nonce_registry_size)


BUILDERS: dict[str, Callable[[EngineConfig], Algorithm]] = {
    RSA.name: _build_rsa,
    DSA.name: _build_dsa,
    ECDSA.name: _build_ecdsa,
}


def supported_algorithms() -> list[str]:
    return list(BUILDERS)


class AlgorithmFactory:
    """Resolves an algorithm by name (case-insensitive) and keeps one instance per name."""

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()
        self._instances: dict[str, Algorithm] = {}
        self._lock = threading.Lock()

    def get_algorithm(self, name: str) -> Algorithm:
        key = name.strip().upper()
        if key not in BUILDERS:
            msg = f'Unsupported algorithm: {name}'
            raise UnsupportedAlgorithmError(msg)

        with self._lock:
            if key not in self._instances:
                logger.debug('Creating the %s engine', key)
                self._instances[key] = BUILDERS[key](self.config)
            return self._instances[key]


_default_factory = AlgorithmFactory()


def get_algorithm(name: str) -> Algorithm:
    return _default_factory.get_algorithm(name)


def generate_keys(name: str) -> KeyPair:
    return get_algorithm(name).generate_keys()


def sign(name: str, message: Message, key_pair: KeyPair) -> SignatureResult:
    return get_algorithm(name).sign(message, key_pair)


def verify(name: str, message: Message, signature: SignatureResult, key_pair: KeyPair) -> bool:
    return get_algorithm(name).verify(message, signature, key_pair)
