import threading

import pytest

from arithmetic import is_probable_prime
from signature_algorithm import GenerationCancelledError

from ..parameters import DomainParameters, generate_parameters


@pytest.mark.parametrize(('p_bits', 'q_bits'), [(64, 16), (512, 160), (1024, 160)])
def test_generated_parameters(p_bits: int, q_bits: int) -> None:
    parameters = generate_parameters(p_bits, q_bits)
    p, q, g = parameters.p, parameters.q, parameters.g

    assert parameters.p_bits == p_bits
    assert parameters.q_bits == q_bits
    assert is_probable_prime(p)
    assert is_probable_prime(q)
    assert (p - 1) % q == 0
    assert (p - 1) // q % 2 == 0
    assert 1 < g < p
    assert pow(g, q, p) == 1

    parameters.validate()


def test_smallest_generator() -> None:
    parameters = generate_parameters(64, 16)
    p, q, g = parameters.p, parameters.q, parameters.g
    for h in range(2, p - 1):
        candidate = pow(h, (p - 1) // q, p)
        if candidate > 1:
            assert candidate == g
            break


def test_bad_sizes() -> None:
    with pytest.raises(ValueError):  # noqa: PT011
        generate_parameters(256, 256)
    with pytest.raises(ValueError):  # noqa: PT011
        generate_parameters(160, 256)


def test_validate() -> None:
    # p = 2 * 11 + 1
    DomainParameters(23, 11, 4).validate()

    with pytest.raises(ValueError):  # noqa: PT011
        DomainParameters(23, 7, 4).validate()  # q does not divide p - 1
    with pytest.raises(ValueError):  # noqa: PT011
        DomainParameters(23, 11, 1).validate()
    with pytest.raises(ValueError):  # noqa: PT011
        DomainParameters(23, 11, 5).validate()  # order 22


def test_cancelled() -> None:
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(GenerationCancelledError):
        generate_parameters(1024, 160, cancel)
