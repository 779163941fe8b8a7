from dataclasses import dataclass
from functools import cached_property

from arithmetic import mod_inverse

WINDOW_BITS = 4


@dataclass(frozen=True)
class NormalPoint:
    x: int
    y: int


@dataclass(frozen=True)
class PointAtInfinity:
    pass


Point = NormalPoint | PointAtInfinity


# (X, Y, Z) stands for (X / Z^2, Y / Z^3), Z = 0 is the point at infinity
@dataclass(frozen=True)
class JacobianPoint:
    x: int
    y: int
    z: int

    @property
    def is_infinity(self) -> bool:
        return self.z == 0


INFINITY = JacobianPoint(1, 1, 0)


class EllipticCurve:
    # y^2 = x^3 + ax + b (mod p)
    name: str
    a: int
    b: int
    p: int

    G: NormalPoint
    n: int

    # Constructor does not check if p and n are indeed prime
    def __init__(self, name: str, a: int, b: int, p: int, G: NormalPoint, n: int):  # noqa: N803
        self.name = name
        self.a = a
        self.b = b
        self.p = p
        self.G = G
        self.n = n

        if not self.is_valid(G):
            msg = f'Base point is not on the curve {name}'
            raise ValueError(msg)

    def is_valid(self, p: Point) -> bool:
        if isinstance(p, PointAtInfinity):
            return True

        if not (0 <= p.x < self.p and 0 <= p.y < self.p):
            return False
        return (p.x**3 + self.a * p.x + self.b - p.y**2) % self.p == 0

    def to_jacobian(self, p: Point) -> JacobianPoint:
        if isinstance(p, PointAtInfinity):
            return INFINITY
        return JacobianPoint(p.x, p.y, 1)

    def to_affine(self, p: JacobianPoint) -> Point:
        if p.is_infinity:
            return PointAtInfinity()

        z_inv = mod_inverse(p.z, self.p)
        z_inv2 = z_inv * z_inv % self.p
        return NormalPoint(p.x * z_inv2 % self.p, p.y * z_inv2 * z_inv % self.p)

    # https://hyperelliptic.org/EFD/g1p/auto-shortw-jacobian.html#doubling-dbl-1998-cmo-2
    def _double(self, p: JacobianPoint) -> JacobianPoint:
        if p.is_infinity or p.y == 0:
            return INFINITY

        mod = self.p
        yy = p.y * p.y % mod
        s = 4 * p.x * yy % mod
        m = (3 * p.x * p.x + self.a * pow(p.z, 4, mod)) % mod
        x = (m * m - 2 * s) % mod
        y = (m * (s - x) - 8 * yy * yy) % mod
        z = 2 * p.y * p.z % mod
        return JacobianPoint(x, y, z)

    # https://hyperelliptic.org/EFD/g1p/auto-shortw-jacobian.html#addition-add-1998-cmo-2
    def _add(self, p: JacobianPoint, q: JacobianPoint) -> JacobianPoint:
        if p.is_infinity:
            return q
        if q.is_infinity:
            return p

        mod = self.p
        pz2 = p.z * p.z % mod
        qz2 = q.z * q.z % mod
        u1 = p.x * qz2 % mod
        u2 = q.x * pz2 % mod
        s1 = p.y * qz2 * q.z % mod
        s2 = q.y * pz2 * p.z % mod

        if u1 == u2:
            # P = Q doubles, P = -Q cancels out
            return self._double(p) if s1 == s2 else INFINITY

        h = (u2 - u1) % mod
        r = (s2 - s1) % mod
        hh = h * h % mod
        hhh = h * hh % mod
        v = u1 * hh % mod
        x = (r * r - hhh - 2 * v) % mod
        y = (r * (v - x) - s1 * hhh) % mod
        z = h * p.z * q.z % mod
        return JacobianPoint(x, y, z)

    def double(self, p: Point) -> Point:
        return self.to_affine(self._double(self.to_jacobian(p)))

    # https://en.wikipedia.org/wiki/Elliptic_curve_point_multiplication
    def add(self, p: Point, q: Point) -> Point:
        return self.to_affine(self._add(self.to_jacobian(p), self.to_jacobian(q)))

    def negate(self, p: Point) -> Point:
        if isinstance(p, PointAtInfinity):
            return p
        return NormalPoint(p.x, (-p.y) % self.p)

    def _multiply(self, p: JacobianPoint, k: int) -> JacobianPoint:
        # double-and-add, most significant bit first
        res = INFINITY
        for bit in bin(k)[2:]:
            res = self._double(res)
            if bit == '1':
                res = self._add(res, p)
        return res

    def multiply(self, p: Point, k: int) -> Point:
        if k < 0:
            return self.multiply(self.negate(p), -k)
        return self.to_affine(self._multiply(self.to_jacobian(p), k))

    @cached_property
    def _base_table(self) -> list[list[JacobianPoint]]:
        """table[i][d] = d * 16^i * G for every 4-bit window i of an n-sized scalar."""
        windows = (self.n.bit_length() + WINDOW_BITS - 1) // WINDOW_BITS
        table = []
        base = self.to_jacobian(self.G)
        for _ in range(windows):
            row = [INFINITY]
            for _ in range((1 << WINDOW_BITS) - 1):
                row.append(self._add(row[-1], base))
            table.append(row)
            base = self._add(row[-1], base)  # 16 * base
        return table

    def _multiply_base(self, k: int) -> JacobianPoint:
        k %= self.n
        res = INFINITY
        mask = (1 << WINDOW_BITS) - 1
        for row in self._base_table:
            if not k:
                break
            res = self._add(res, row[k & mask])
            k >>= WINDOW_BITS
        return res

    def multiply_base(self, k: int) -> Point:
        """k * G using the precomputed fixed-window table."""
        return self.to_affine(self._multiply_base(k))

    # https://en.wikipedia.org/wiki/Elliptic_curve_point_multiplication#Shamir's_trick
    def multiply_add(self, u1: int, u2: int, q: Point) -> Point:
        """u1 * G + u2 * Q with a single shared chain of doublings."""
        g = self.to_jacobian(self.G)
        qj = self.to_jacobian(q)
        both = self._add(g, qj)

        res = INFINITY
        for i in range(max(u1.bit_length(), u2.bit_length()) - 1, -1, -1):
            res = self._double(res)
            match (u1 >> i) & 1, (u2 >> i) & 1:
                case 1, 1:
                    res = self._add(res, both)
                case 1, 0:
                    res = self._add(res, g)
                case 0, 1:
                    res = self._add(res, qj)
        return self.to_affine(res)


# https://en.bitcoin.it/wiki/Secp256k1
secp256k1 = EllipticCurve(
    'secp256k1',
    0,
    7,
    (1 << 256) - (1 << 32) - (1 << 9) - (1 << 8) - (1 << 7) - (1 << 6) - (1 << 4) - 1,
    NormalPoint(
        0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798, 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
    ),
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
)

CURVES = {secp256k1.name: secp256k1}
