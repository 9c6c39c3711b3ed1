"""Arithmetic on the secp256k1 curve and random sampling helpers."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from functools import lru_cache

P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
B = 7
GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

_Jacobian = tuple[int, int, int]
_JACOBIAN_INFINITY: _Jacobian = (1, 1, 0)


def _as_int(value: object) -> int | None:
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


@dataclass(frozen=True)
class Scalar:
    """An element of the group of integers modulo the curve order."""

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError("scalar value must be an int")
        object.__setattr__(self, "value", self.value % N)

    @classmethod
    def random(cls) -> Scalar:
        """A uniformly random non-zero scalar."""
        return cls(secrets.randbelow(N - 1) + 1)

    @classmethod
    def from_int(cls, value: int) -> Scalar:
        return cls(value)

    def to_int(self) -> int:
        return self.value

    def invert(self) -> Scalar:
        if self.value == 0:
            raise ZeroDivisionError("the zero scalar has no inverse")
        return Scalar(pow(self.value, -1, N))

    def __add__(self, other: object) -> Scalar:
        value = _as_int(other)
        if value is None:
            return NotImplemented
        return Scalar(self.value + value)

    __radd__ = __add__

    def __sub__(self, other: object) -> Scalar:
        value = _as_int(other)
        if value is None:
            return NotImplemented
        return Scalar(self.value - value)

    def __rsub__(self, other: object) -> Scalar:
        value = _as_int(other)
        if value is None:
            return NotImplemented
        return Scalar(value - self.value)

    def __mul__(self, other: object):
        if isinstance(other, Point):
            return other * self
        value = _as_int(other)
        if value is None:
            return NotImplemented
        return Scalar(self.value * value)

    __rmul__ = __mul__

    def __neg__(self) -> Scalar:
        return Scalar(-self.value)


def _on_curve(x: int, y: int) -> bool:
    return 0 <= x < P and 0 <= y < P and (y * y - x * x * x - B) % P == 0


def _jacobian_double(point: _Jacobian) -> _Jacobian:
    x, y, z = point
    if z == 0 or y == 0:
        return _JACOBIAN_INFINITY
    ysq = y * y % P
    s = 4 * x * ysq % P
    m = 3 * x * x % P
    nx = (m * m - 2 * s) % P
    ny = (m * (s - nx) - 8 * ysq * ysq) % P
    nz = 2 * y * z % P
    return nx, ny, nz


def _jacobian_add(first: _Jacobian, second: _Jacobian) -> _Jacobian:
    x1, y1, z1 = first
    x2, y2, z2 = second
    if z1 == 0:
        return second
    if z2 == 0:
        return first
    z1z1 = z1 * z1 % P
    z2z2 = z2 * z2 % P
    u1 = x1 * z2z2 % P
    u2 = x2 * z1z1 % P
    s1 = y1 * z2 * z2z2 % P
    s2 = y2 * z1 * z1z1 % P
    if u1 == u2:
        if s1 != s2:
            return _JACOBIAN_INFINITY
        return _jacobian_double(first)
    h = (u2 - u1) % P
    r = (s2 - s1) % P
    h2 = h * h % P
    h3 = h * h2 % P
    u1h2 = u1 * h2 % P
    x3 = (r * r - h3 - 2 * u1h2) % P
    y3 = (r * (u1h2 - x3) - s1 * h3) % P
    z3 = h * z1 * z2 % P
    return x3, y3, z3


@dataclass(frozen=True)
class Point:
    """A point on secp256k1; both coordinates are None for the point at infinity."""

    x: int | None
    y: int | None

    def __post_init__(self) -> None:
        if (self.x is None) != (self.y is None):
            raise ValueError("both coordinates must be given, or neither")
        if self.x is not None and not _on_curve(self.x, self.y):
            raise ValueError("point is not on the curve")

    @classmethod
    def generator(cls) -> Point:
        return cls(GX, GY)

    @classmethod
    def base_point2(cls) -> Point:
        """A second generator whose discrete log with respect to G is unknown."""
        return _base_point2()

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        data = bytes(data)
        if len(data) == 33 and data[0] in (2, 3):
            x = int.from_bytes(data[1:], "big")
            y = _lift_x(x, data[0] & 1)
            if y is None:
                raise ValueError("x coordinate is not on the curve")
            return cls(x, y)
        if len(data) == 65 and data[0] == 4:
            return cls(int.from_bytes(data[1:33], "big"), int.from_bytes(data[33:], "big"))
        raise ValueError("invalid point encoding")

    def to_bytes(self, compressed: bool = True) -> bytes:
        if self.is_infinity():
            raise ValueError("the point at infinity has no encoding")
        x_bytes = self.x.to_bytes(32, "big")
        if compressed:
            return bytes([2 + (self.y & 1)]) + x_bytes
        return b"\x04" + x_bytes + self.y.to_bytes(32, "big")

    def x_coord(self) -> int:
        if self.x is None:
            raise ValueError("the point at infinity has no coordinates")
        return self.x

    def y_coord(self) -> int:
        if self.y is None:
            raise ValueError("the point at infinity has no coordinates")
        return self.y

    def is_infinity(self) -> bool:
        return self.x is None

    def _to_jacobian(self) -> _Jacobian:
        if self.is_infinity():
            return _JACOBIAN_INFINITY
        return self.x, self.y, 1

    @classmethod
    def _from_jacobian(cls, point: _Jacobian) -> Point:
        x, y, z = point
        if z == 0:
            return cls(None, None)
        z_inv = pow(z, -1, P)
        z_inv2 = z_inv * z_inv % P
        return cls(x * z_inv2 % P, y * z_inv2 * z_inv % P)

    def __add__(self, other: object) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return Point._from_jacobian(_jacobian_add(self._to_jacobian(), other._to_jacobian()))

    def __neg__(self) -> Point:
        if self.is_infinity():
            return self
        return Point(self.x, (-self.y) % P)

    def __mul__(self, scalar: object) -> Point:
        value = _as_int(scalar)
        if value is None:
            return NotImplemented
        value %= N
        if value == 0 or self.is_infinity():
            return Point(None, None)
        base = self._to_jacobian()
        result = _JACOBIAN_INFINITY
        for bit in bin(value)[2:]:
            result = _jacobian_double(result)
            if bit == "1":
                result = _jacobian_add(result, base)
        return Point._from_jacobian(result)

    def __rmul__(self, scalar: object) -> Point:
        return self.__mul__(scalar)


def _lift_x(x: int, parity: int) -> int | None:
    if not 0 <= x < P:
        return None
    rhs = (x * x * x + B) % P
    y = pow(rhs, (P + 1) // 4, P)
    if y * y % P != rhs:
        return None
    if y & 1 != parity:
        y = P - y
    return y


@lru_cache(maxsize=1)
def _base_point2() -> Point:
    digest = hashlib.sha256(Point.generator().to_bytes(True)).digest()
    while True:
        y = _lift_x(int.from_bytes(digest, "big"), 0)
        if y is not None:
            return Point(int.from_bytes(digest, "big"), y)
        digest = hashlib.sha256(digest).digest()


def sample_below(upper: int) -> int:
    """A uniformly random integer in [0, upper)."""
    if upper <= 0:
        raise ValueError("upper bound must be positive")
    return secrets.randbelow(upper)


def sample_bits(bits: int) -> int:
    """A uniformly random integer of at most the given number of bits."""
    if bits < 0:
        raise ValueError("bit count must not be negative")
    return secrets.randbits(bits) if bits else 0


def sample_range(low: int, high: int) -> int:
    """A uniformly random integer in [low, high)."""
    if high <= low:
        raise ValueError("empty range")
    return low + secrets.randbelow(high - low)


def mod_inv(a: int, modulus: int) -> int:
    """The inverse of a modulo modulus; ValueError if there is none."""
    try:
        return pow(a % modulus, -1, modulus)
    except ValueError:
        raise ValueError(f"{a} is not invertible modulo the given modulus") from None