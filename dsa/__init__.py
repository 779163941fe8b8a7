from .dsa import DSA, DSAPrivateKey, DSAPublicKey, DSASignature
from .parameters import DomainParameters, generate_parameters

__all__ = [
    'DSA',
    'DSAPrivateKey',
    'DSAPublicKey',
    'DSASignature',
    'DomainParameters',
    'generate_parameters',
]
