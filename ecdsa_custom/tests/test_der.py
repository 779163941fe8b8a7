import pytest
from ecdsa import SECP256k1
from ecdsa.util import sigdecode_der, sigencode_der

from signature_algorithm import InvalidSignatureFormatError

from ..der import der_decode, der_encode

N = SECP256k1.order


@pytest.mark.parametrize(
    ('r', 's'),
    [
        (1, 1),
        (0, 0),
        (0x7F, 0x80),
        (0xFF, 0x0100),
        (N - 1, N - 1),
        (N // 2, 0x00FF << 240),
        (2**1100 + 1, 3),  # long form length
    ],
)
def test_matches_library(r: int, s: int) -> None:
    der = der_encode(r, s)
    assert der == sigencode_der(r, s, N)
    assert der_decode(der) == (r, s)
    assert sigdecode_der(der, N) == (r, s)


def test_encoding() -> None:
    assert der_encode(0, 0) == bytes.fromhex('3006020100020100')
    assert der_encode(0x7F, 0x80) == bytes.fromhex('300702017f02020080')

    # a set top bit needs a leading zero byte
    der = der_encode(2**255, 1)
    assert der[2:5] == bytes.fromhex('022100')
    assert len(der) == 2 + 35 + 3


@pytest.mark.parametrize(
    'data',
    [
        '',
        '31060201010201ff',  # wrong outer tag
        '3006020101020101ff',  # trailing data
        '3007020101020101',  # sequence length too long
        '3005020101020101',  # sequence length too short
        '3006020180020101',  # negative r
        '300702020001020101',  # r is not minimal
        '30050200020101',  # empty r
        '3006020501020101',  # r runs past the end
        '3003020101',  # no s
        '3009020101020101020101',  # a third integer
        '3006030101020101',  # not an INTEGER
        '308106020101020101',  # sequence length is not minimal
        '3080',  # indefinite length
        '30',  # no length
    ],
)
def test_malformed(data: str) -> None:
    with pytest.raises(InvalidSignatureFormatError):
        der_decode(bytes.fromhex(data))


def test_not_bytes() -> None:
    with pytest.raises(InvalidSignatureFormatError):
        der_decode('3006020101020101')  # type: ignore[arg-type]

    # still a ValueError for callers that only know about that
    with pytest.raises(ValueError):  # noqa: PT011
        der_decode(b'')


def test_bytearray() -> None:
    assert der_decode(bytearray(der_encode(5, 6))) == (5, 6)
