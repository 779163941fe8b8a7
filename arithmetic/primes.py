import logging
import secrets
import threading

from signature_algorithm import GenerationCancelledError

from .modular import random_bits

logger = logging.getLogger(__name__)

ROUNDS = 40

SMALL_PRIMES = (
    3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71, 73, 79, 83, 89, 97,
    101, 103, 107, 109, 113, 127, 131, 137, 139, 149, 151, 157, 163, 167, 173, 179, 181, 191, 193,
    197, 199, 211, 223, 227, 229, 233, 239, 241, 251, 257, 263, 269, 271, 277, 281, 283, 293, 307,
    311, 313, 317, 331, 337, 347, 349, 353, 359, 367, 373, 379, 383, 389, 397, 401, 409, 419, 421,
    431, 433, 439, 443, 449, 457, 461, 463, 467, 479, 487, 491, 499, 503, 509, 521, 523, 541, 547,
)  # fmt: skip


# https://www.geeksforgeeks.org/primality-test-set-3-miller-rabin/
def rabin_miller(n: int, d: int, r: int) -> bool:
    """One Miller-Rabin round for n - 1 = 2^r * d; False means n is certainly composite."""
    a = secrets.randbelow(n - 3) + 2  # [2, n - 2]
    x = pow(a, d, n)
    if x in (1, n - 1):
        return True

    for _ in range(r - 1):
        x = x * x % n
        if x == n - 1:
            return True
        if x == 1:
            return False

    return False


# The probability of a false positive is at most (1/4)^rounds
def is_probable_prime(n: int, rounds: int = ROUNDS) -> bool:
    if n < 2:  # noqa: PLR2004
        return False
    if n <= 3:  # noqa: PLR2004
        return True
    if n % 2 == 0:
        return False

    for p in SMALL_PRIMES:
        if n % p == 0:
            return n == p

    d, r = n - 1, 0
    while d % 2 == 0:
        d //= 2
        r += 1

    return all(rabin_miller(n, d, r) for _ in range(rounds))


def check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        msg = 'Prime generation was cancelled'
        raise GenerationCancelledError(msg)


# Returns a random prime of exactly `bits` bits
def random_prime(bits: int, rounds: int = ROUNDS, cancel: threading.Event | None = None) -> int:
    if bits < 2:  # noqa: PLR2004
        msg = f'A prime needs at least 2 bits, but got: {bits}'
        raise ValueError(msg)

    candidates = 0
    while True:
        check_cancelled(cancel)
        candidates += 1
        x = random_bits(bits, top_bit=True, odd=bits > 2)  # noqa: PLR2004
        if is_probable_prime(x, rounds):
            logger.debug('Found a %d-bit prime after %d candidates', bits, candidates)
            return x
