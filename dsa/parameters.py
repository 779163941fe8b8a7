import logging
import threading
from dataclasses import dataclass

from arithmetic import is_probable_prime, mod_exp, random_in_range, random_prime
from arithmetic.primes import check_cancelled
from signature_algorithm import KeyGenerationFailedError

logger = logging.getLogger(__name__)

P_BITS = 2048
Q_BITS = 256
P_ROUNDS = 40
Q_ROUNDS = 20


@dataclass(frozen=True)
class DomainParameters:
    p: int
    q: int
    g: int

    @property
    def p_bits(self) -> int:
        return self.p.bit_length()

    @property
    def q_bits(self) -> int:
        return self.q.bit_length()

    def validate(self) -> None:
        if (self.p - 1) % self.q != 0:
            msg = 'q does not divide p - 1'
            raise ValueError(msg)
        if not 1 < self.g < self.p:
            msg = 'g should lie in (1, p)'
            raise ValueError(msg)
        if pow(self.g, self.q, self.p) != 1:
            msg = 'g does not generate a subgroup of order q'
            raise ValueError(msg)


# p = N * q + 1, N is even so that p is odd
def _generate_p(q: int, p_bits: int, rounds: int, cancel: threading.Event | None) -> int:
    low = -(-((1 << (p_bits - 1)) - 1) // q)  # smallest N with N * q + 1 >= 2^(p_bits - 1)
    high = ((1 << p_bits) - 2) // q  # largest N with N * q + 1 < 2^p_bits
    low += low % 2
    high -= high % 2
    if low > high:
        msg = f'No {p_bits}-bit p exists for a {q.bit_length()}-bit q'
        raise KeyGenerationFailedError(msg)

    candidates = 0
    while True:
        check_cancelled(cancel)
        candidates += 1
        n = 2 * random_in_range(low // 2, high // 2)
        p = n * q + 1
        if is_probable_prime(p, rounds):
            logger.debug('Found p after %d candidates', candidates)
            return p


def _find_generator(p: int, q: int) -> int:
    factor = (p - 1) // q
    for h in range(2, p - 1):
        g = mod_exp(h, factor, p)
        if g > 1:
            return g

    msg = 'No generator g exists for these p and q'
    raise KeyGenerationFailedError(msg)


def generate_parameters(
    p_bits: int = P_BITS,
    q_bits: int = Q_BITS,
    cancel: threading.Event | None = None,
) -> DomainParameters:
    if q_bits >= p_bits:
        msg = f'q should be shorter than p, but got {q_bits} >= {p_bits} bits'
        raise ValueError(msg)

    logger.info('Generating DSA domain parameters (%d-bit p, %d-bit q)', p_bits, q_bits)
    q = random_prime(q_bits, Q_ROUNDS, cancel)
    p = _generate_p(q, p_bits, P_ROUNDS, cancel)
    g = _find_generator(p, q)

    parameters = DomainParameters(p, q, g)
    parameters.validate()
    logger.info('DSA domain parameters ready')
    return parameters
