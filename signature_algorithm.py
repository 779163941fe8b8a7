from dataclasses import dataclass
from typing import ClassVar, Protocol, runtime_checkable

Message = str | bytes


class PrivateKey:
    pass


class PublicKey:
    pass


class SignatureResult:
    pass


@dataclass(frozen=True)
class KeyPair:
    public_key: PublicKey
    private_key: PrivateKey


@runtime_checkable
class SignatureAlgorithm(Protocol):
    name: ClassVar[str]

    def generate_keys(self) -> KeyPair: ...

    def sign(self, message: Message, key_pair: KeyPair) -> SignatureResult: ...

    def verify(self, message: Message, signature: SignatureResult, key_pair: KeyPair) -> bool: ...


class SignatureEngineError(Exception):
    pass


class KeyGenerationFailedError(SignatureEngineError):
    pass


class GenerationCancelledError(KeyGenerationFailedError):
    pass


class SigningFailedError(SignatureEngineError):
    pass


class InvalidSignatureFormatError(SignatureEngineError, ValueError):
    pass


class UnsupportedAlgorithmError(SignatureEngineError, ValueError):
    pass


def int_to_hex(value: int, size: int | None = None) -> str:
    """Big-endian hex of a non-negative integer, zero-padded to `size` bytes when given."""
    if value < 0:
        msg = f'Cannot encode negative integer: {value}'
        raise ValueError(msg)
    if size is None:
        size = max(1, (value.bit_length() + 7) // 8)
    return value.to_bytes(size).hex()


def hex_to_int(text: str) -> int:
    text = text.strip().removeprefix('0x').removeprefix('0X')
    if not text:
        msg = 'Empty hexadecimal string'
        raise ValueError(msg)
    return int(text, 16)
