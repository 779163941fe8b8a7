from .der import der_decode, der_encode
from .ecdsa import ECDSA, ECDSASignature, ECPrivateKey, ECPublicKey
from .elliptic_curve import EllipticCurve, NormalPoint, PointAtInfinity, secp256k1

__all__ = [
    'ECDSA',
    'ECDSASignature',
    'ECPrivateKey',
    'ECPublicKey',
    'EllipticCurve',
    'NormalPoint',
    'PointAtInfinity',
    'der_decode',
    'der_encode',
    'secp256k1',
]
