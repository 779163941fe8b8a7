from math import gcd

import pytest

from ..cache import BoundedCache
from ..modular import (
    InverseNotFoundError,
    constant_time_equal,
    extended_gcd,
    mod_exp,
    mod_inverse,
    random_bits,
    random_in_range,
)


def test_mod_exp() -> None:
    assert mod_exp(4, 13, 497) == 445
    assert mod_exp(2, 0, 7) == 1
    assert mod_exp(0, 0, 7) == 1
    assert mod_exp(123456789, 987654321, 1) == 0
    assert mod_exp(-3, 3, 7) == pow(-3, 3, 7)
    assert mod_exp(10**30 + 7, 65537, 2**127 - 1) == pow(10**30 + 7, 65537, 2**127 - 1)

    with pytest.raises(ValueError):  # noqa: PT011
        mod_exp(2, 3, 0)
    with pytest.raises(ValueError):  # noqa: PT011
        mod_exp(2, -1, 7)


def test_mod_exp_cache() -> None:
    cache = BoundedCache(2)
    assert mod_exp(3, 200, 1009, cache) == pow(3, 200, 1009)
    assert len(cache) == 1
    assert mod_exp(3 + 1009, 200, 1009, cache) == pow(3, 200, 1009)  # base is reduced before lookup
    assert len(cache) == 1

    mod_exp(5, 7, 11, cache)
    mod_exp(6, 7, 11, cache)
    assert len(cache) == 2


def test_extended_gcd() -> None:
    for a, b in ((240, 46), (17, 5), (0, 9), (12, 0), (2**61 - 1, 2**31 - 1)):
        g, x, y = extended_gcd(a, b)
        assert g == gcd(a, b)
        assert a * x + b * y == g


def test_mod_inverse() -> None:
    assert mod_inverse(3, 11) == 4
    assert mod_inverse(-3, 11) == 7
    assert mod_inverse(65537, 2**127 - 2) * 65537 % (2**127 - 2) == 1

    for m in (7, 97, 1009):
        for a in range(1, m):
            assert a * mod_inverse(a, m) % m == 1

    with pytest.raises(InverseNotFoundError):
        mod_inverse(6, 9)
    with pytest.raises(InverseNotFoundError):
        mod_inverse(0, 7)
    with pytest.raises(ValueError):  # noqa: PT011
        mod_inverse(3, 1)


def test_mod_inverse_cache() -> None:
    cache = BoundedCache()
    assert mod_inverse(3, 11, cache) == 4
    assert mod_inverse(3, 11, cache) == 4
    assert len(cache) == 1


def test_random_in_range() -> None:
    seen = {random_in_range(5, 8) for _ in range(500)}
    assert seen == {5, 6, 7, 8}

    assert random_in_range(3, 3) == 3
    with pytest.raises(ValueError):  # noqa: PT011
        random_in_range(4, 3)

    big = 2**256
    for _ in range(100):
        assert big <= random_in_range(big, 2 * big) <= 2 * big


def test_random_bits() -> None:
    for _ in range(100):
        x = random_bits(64, top_bit=True, odd=True)
        assert x.bit_length() == 64
        assert x % 2 == 1
        assert random_bits(8) < 256

    with pytest.raises(ValueError):  # noqa: PT011
        random_bits(0)


def test_constant_time_equal() -> None:
    assert constant_time_equal(0, 0, 1)
    assert constant_time_equal(2**255, 2**255, 32)
    assert not constant_time_equal(2**255, 2**255 + 1, 32)
    assert not constant_time_equal(2**256, 2**256, 32)  # does not fit
    assert not constant_time_equal(-1, -1, 32)
