import hmac
import secrets

from .cache import BoundedCache


class InverseNotFoundError(ArithmeticError):
    pass


def mod_exp(base: int, exponent: int, modulus: int, cache: BoundedCache | None = None) -> int:
    if modulus < 1:
        msg = f'Modulus should be positive, but got: {modulus}'
        raise ValueError(msg)
    if exponent < 0:
        msg = 'Negative exponents are not supported, use mod_inverse'
        raise ValueError(msg)
    if modulus == 1:
        return 0

    base %= modulus
    if cache is None:
        return pow(base, exponent, modulus)

    key = ('exp', base, exponent, modulus)
    result = cache.get(key)
    if result is None:
        result = cache.setdefault(key, pow(base, exponent, modulus))
    return result


# https://en.wikipedia.org/wiki/Extended_Euclidean_algorithm
def extended_gcd(a: int, b: int) -> tuple[int, int, int]:
    """Return (g, x, y) such that a * x + b * y == g == gcd(a, b)."""
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1
    while r:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_x, x = x, old_x - quotient * x
        old_y, y = y, old_y - quotient * y
    return old_r, old_x, old_y


def mod_inverse(a: int, m: int, cache: BoundedCache | None = None) -> int:
    if m < 2:  # noqa: PLR2004
        msg = f'Modulus should be at least 2, but got: {m}'
        raise ValueError(msg)

    a %= m
    key = ('inv', a, m)
    if cache is not None:
        result = cache.get(key)
        if result is not None:
            return result

    g, x, _ = extended_gcd(a, m)
    if g != 1:
        msg = f'{a} has no inverse modulo {m}, gcd = {g}'
        raise InverseNotFoundError(msg)

    result = x % m
    if cache is not None:
        cache.put(key, result)
    return result


# secrets.randbelow rejects out-of-range draws, so there is no modulo bias
def random_in_range(low: int, high: int) -> int:
    """Uniform random integer from [low, high]."""
    if low > high:
        msg = f'Empty range [{low}, {high}]'
        raise ValueError(msg)
    return low + secrets.randbelow(high - low + 1)


def random_bits(bits: int, *, top_bit: bool = False, odd: bool = False) -> int:
    if bits < 1:
        msg = f'Bit length should be positive, but got: {bits}'
        raise ValueError(msg)

    value = secrets.randbits(bits)
    if top_bit:
        value |= 1 << (bits - 1)
    if odd:
        value |= 1
    return value


def byte_length(value: int) -> int:
    return (value.bit_length() + 7) // 8


def constant_time_equal(a: int, b: int, size: int) -> bool:
    """Compare two non-negative integers as `size`-byte strings without early exit."""
    if a < 0 or b < 0 or a.bit_length() > 8 * size or b.bit_length() > 8 * size:
        return False
    return hmac.compare_digest(a.to_bytes(size), b.to_bytes(size))
