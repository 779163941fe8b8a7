from .rsa import RSA, RSAPrivateKey, RSAPublicKey, RSASignature

__all__ = [
    'RSA',
    'RSAPrivateKey',
    'RSAPublicKey',
    'RSASignature',
]
