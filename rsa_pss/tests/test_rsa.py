import threading

import pytest
from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA as RSA_LIB
from Crypto.Signature import pss

from signature_algorithm import GenerationCancelledError, KeyPair, PrivateKey, PublicKey

from ..rsa import PUBLIC_EXPONENT, RSA, RSAPrivateKey, RSAPublicKey, RSASignature

MESSAGE = 'Hello, RSA-PSS digital signature!'


@pytest.fixture(scope='module')
def rsa() -> RSA:
    return RSA()


@pytest.fixture(scope='module')
def key_pair(rsa: RSA) -> KeyPair:
    return rsa.generate_keys()


def _signature_bytes(signature: RSASignature, n: int) -> bytes:
    return signature.signature.to_bytes((n.bit_length() + 7) // 8)


def test_key_types(rsa: RSA) -> None:
    with pytest.raises(TypeError):
        rsa.sign(b'', KeyPair(PublicKey(), PrivateKey()))
    assert not rsa.verify(b'', RSASignature(1), KeyPair(PublicKey(), PrivateKey()))


def test_key_shape(key_pair: KeyPair) -> None:
    pk, sk = key_pair.public_key, key_pair.private_key
    assert isinstance(pk, RSAPublicKey)
    assert isinstance(sk, RSAPrivateKey)

    assert pk.e == PUBLIC_EXPONENT
    assert pk.n == sk.n
    assert pk.n.bit_length() in (2047, 2048)


def test_key_consistency(key_pair: KeyPair) -> None:
    pk, sk = key_pair.public_key, key_pair.private_key
    assert isinstance(pk, RSAPublicKey)
    assert isinstance(sk, RSAPrivateKey)

    # the library recovers p and q from (n, e, d)
    key = RSA_LIB.construct((pk.n, pk.e, sk.d), consistency_check=True)
    phi = (key.p - 1) * (key.q - 1)
    assert pk.e * sk.d % phi == 1
    assert key.p * key.q == pk.n


def test_custom_rsa(rsa: RSA, key_pair: KeyPair) -> None:
    signature = rsa.sign(MESSAGE, key_pair)
    assert rsa.verify(MESSAGE, signature, key_pair)
    assert len(signature.salt) == 32
    assert len(signature.message_hash) == 32
    assert signature.size == 256
    assert len(signature.to_dict()['signature']) == 512

    signature2 = rsa.sign('another message', key_pair)
    assert not rsa.verify(MESSAGE, signature2, key_pair)  # different message

    key_pair2 = rsa.generate_keys()
    signature3 = rsa.sign(MESSAGE, key_pair2)
    assert not rsa.verify(MESSAGE, signature3, key_pair)  # different private key


def test_randomized_padding(rsa: RSA, key_pair: KeyPair) -> None:
    signature1 = rsa.sign(MESSAGE, key_pair)
    signature2 = rsa.sign(MESSAGE, key_pair)
    assert signature1.salt != signature2.salt
    assert signature1.signature != signature2.signature
    assert rsa.verify(MESSAGE, signature1, key_pair)
    assert rsa.verify(MESSAGE, signature2, key_pair)


@pytest.mark.parametrize('length', [0, 1, 55, 64, 1000, 10000])
def test_message_lengths(rsa: RSA, key_pair: KeyPair, length: int) -> None:
    message = 'x' * length
    assert rsa.verify(message, rsa.sign(message, key_pair), key_pair)


def test_tampered_message(rsa: RSA, key_pair: KeyPair) -> None:
    signature = rsa.sign(MESSAGE, key_pair)
    data = bytearray(MESSAGE.encode())
    for i in (0, len(data) // 2, len(data) - 1):
        tampered = data.copy()
        tampered[i] ^= 1
        assert not rsa.verify(bytes(tampered), signature, key_pair)


def test_tampered_signature(rsa: RSA, key_pair: KeyPair) -> None:
    signature = rsa.sign(MESSAGE, key_pair)
    for shift in (0, 8, 1000, 2000):
        tampered = RSASignature(signature.signature ^ (0xFF << shift), signature.salt, signature.message_hash)
        assert not rsa.verify(MESSAGE, tampered, key_pair)


def test_display_fields_are_not_trusted(rsa: RSA, key_pair: KeyPair) -> None:
    signature = rsa.sign(MESSAGE, key_pair)
    other = rsa.sign('other', key_pair)

    # a valid signature for another message does not pass by carrying this message's hash and salt
    forged = RSASignature(other.signature, signature.salt, signature.message_hash)
    assert not rsa.verify(MESSAGE, forged, key_pair)

    # wrong display fields do not break a genuine signature either
    relabelled = RSASignature(signature.signature, b'', b'')
    assert rsa.verify(MESSAGE, relabelled, key_pair)


def test_out_of_range(rsa: RSA, key_pair: KeyPair) -> None:
    pk = key_pair.public_key
    assert isinstance(pk, RSAPublicKey)
    signature = rsa.sign(MESSAGE, key_pair)

    assert not rsa.verify(MESSAGE, RSASignature(signature.signature + pk.n), key_pair)
    assert not rsa.verify(MESSAGE, RSASignature(pk.n), key_pair)
    assert not rsa.verify(MESSAGE, RSASignature(-1), key_pair)
    assert not rsa.verify(MESSAGE, RSASignature(0), key_pair)
    assert not rsa.verify(MESSAGE, RSASignature(1), key_pair)
    assert not rsa.verify(MESSAGE, RSASignature('garbage'), key_pair)  # type: ignore[arg-type]


def test_rsa_with_library_custom_key(rsa: RSA, key_pair: KeyPair) -> None:
    pk, sk = key_pair.public_key, key_pair.private_key
    assert isinstance(pk, RSAPublicKey)
    assert isinstance(sk, RSAPrivateKey)
    message = MESSAGE.encode()

    # the library verifies our signature
    signature = rsa.sign(message, key_pair)
    lib_pk = RSA_LIB.construct((pk.n, pk.e))
    pss.new(lib_pk, salt_bytes=32).verify(SHA256.new(message), _signature_bytes(signature, pk.n))

    # we verify the library's signatures, whatever salt length it picked
    lib_sk = RSA_LIB.construct((sk.n, pk.e, sk.d))
    for salt_bytes in (0, 20, 32):
        lib_signature = pss.new(lib_sk, salt_bytes=salt_bytes).sign(SHA256.new(message))
        assert rsa.verify(message, RSASignature(int.from_bytes(lib_signature)), key_pair)
        assert not rsa.verify(b'x' + message, RSASignature(int.from_bytes(lib_signature)), key_pair)


def test_rsa_with_library_library_key(rsa: RSA) -> None:
    message = MESSAGE.encode()
    key = RSA_LIB.generate(2048)
    key_pair = KeyPair(RSAPublicKey(key.e, key.n), RSAPrivateKey(key.d, key.n))

    signature = rsa.sign(message, key_pair)
    assert rsa.verify(message, signature, key_pair)
    pss.new(RSA_LIB.construct((key.n, key.e)), salt_bytes=32).verify(SHA256.new(message), _signature_bytes(signature, key.n))

    lib_signature = pss.new(key).sign(SHA256.new(message))
    assert rsa.verify(message, RSASignature(int.from_bytes(lib_signature)), key_pair)


def test_unaligned_modulus() -> None:
    # modBits - 1 divisible by 8 makes emLen one octet shorter than n
    rsa = RSA(prime_bits=257, salt_length=16, rounds=20)
    key_pair = rsa.generate_keys()
    while key_pair.public_key.n.bit_length() % 8 != 1:  # type: ignore[attr-defined]
        key_pair = rsa.generate_keys()

    signature = rsa.sign(MESSAGE, key_pair)
    assert rsa.verify(MESSAGE, signature, key_pair)


def test_small_salt_budget() -> None:
    # a short modulus leaves no room for a 32-byte salt
    rsa = RSA(prime_bits=256, rounds=20)
    key_pair = rsa.generate_keys()
    signature = rsa.sign(MESSAGE, key_pair)
    assert len(signature.salt) == 64 - 32 - 2
    assert rsa.verify(MESSAGE, signature, key_pair)


def test_dict_round_trip(key_pair: KeyPair) -> None:
    pk, sk = key_pair.public_key, key_pair.private_key
    assert isinstance(pk, RSAPublicKey)
    assert isinstance(sk, RSAPrivateKey)
    assert RSAPublicKey.from_dict(pk.to_dict()) == pk
    assert RSAPrivateKey.from_dict(sk.to_dict()) == sk


def test_cancelled_generation() -> None:
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(GenerationCancelledError):
        RSA(cancel=cancel).generate_keys()
