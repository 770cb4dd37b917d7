#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Elliptic curve group over a prime field.

Points are plain tuples:
affine (x, y) with INF = (5, 0) as point at infinity,
Jacobian (X, Y, Z) standing for (X/Z^2, Y/Z^3), with Z = 0 for infinity.

The group does not need to be cyclic:
the prime order subgroup is in the hdcore.ecc.curve module,
wNAF scalar multiplication in the hdcore.ecc.wnaf module.
"""

from typing import List

from hdcore.alias import INF, INFJ, Integer, JacPoint, Point
from hdcore.ecc.field import PrimeField
from hdcore.exceptions import (
    HDCoreTypeError,
    HDCoreValueError,
    InvalidPointError,
    NoSquareRootError,
    PointAtInfinityError,
)
from hdcore.utils import HEX_THRESHOLD, hex_string, int_from_integer, int_repr


def jac_from_aff(Q: Point) -> JacPoint:
    "Return the Jacobian coordinates of an affine point (assumed on curve)."
    if Q[1] == 0:
        return INFJ
    return Q[0], Q[1], 1


def _fmt(i: int, quote: bool = False) -> str:
    if i <= HEX_THRESHOLD:
        return str(i)
    return f"'{hex_string(i)}'" if quote else hex_string(i)


class CurveGroup:
    """Group of the points of the curve y^2 = x^3 + a*x + b over Fp.

    Curve parameters are validated as in SEC 1 v.2 section 3.1.1.2.1:
    p must be an odd prime, a and b must be in 0..p-1,
    and the discriminant 4*a^3 + 27*b^2 must not vanish modulo p.
    """

    def __init__(self, p: Integer, a: Integer, b: Integer) -> None:

        p = int_from_integer(p)
        a = int_from_integer(a)
        b = int_from_integer(b)

        # raises HDCoreValueError if p is not an odd prime
        self.field = PrimeField(p)
        self.p = p
        self.p_size = self.field.p_size

        for name, value in (("a", a), ("b", b)):
            if value < 0:
                raise HDCoreValueError(f"negative {name}: {value}")
            if value >= p:
                err_msg = f"p <= {name}: {int_repr(p)} <= {int_repr(value)}"
                raise HDCoreValueError(err_msg)

        if (4 * pow(a, 3, p) + 27 * pow(b, 2, p)) % p == 0:
            raise HDCoreValueError("zero discriminant")
        self._a = a
        self._b = b

    def _coefficients(self, quote: bool) -> List[str]:
        # a and b share the same representation
        if max(self._a, self._b) > HEX_THRESHOLD:
            if quote:
                return [f"'{hex_string(self._a)}'", f"'{hex_string(self._b)}'"]
            return [hex_string(self._a), hex_string(self._b)]
        return [str(self._a), str(self._b)]

    def __str__(self) -> str:
        a, b = self._coefficients(quote=False)
        return f"Curve\n p   = {_fmt(self.p)}\n a   = {a}\n b   = {b}"

    def __repr__(self) -> str:
        a, b = self._coefficients(quote=True)
        return f"Curve({_fmt(self.p, quote=True)}, {a}, {b})"

    @property
    def a(self) -> int:
        return self._a

    @property
    def b(self) -> int:
        return self._b

    def _inv(self, a: int) -> int:
        # DivisionByZeroError for a = 0 (mod p)
        return self.field.inv(a).value

    def negate(self, Q: Point) -> Point:
        "Return the opposite point, without checking it is on curve."
        if len(Q) != 2:
            raise HDCoreTypeError("not a point")
        # the modulo keeps INF unchanged
        return Q[0], -Q[1] % self.p

    def negate_jac(self, Q: JacPoint) -> JacPoint:
        "Return the opposite Jacobian point, without checking it is on curve."
        if len(Q) != 3:
            raise HDCoreTypeError("not a Jacobian point")
        return Q[0], -Q[1] % self.p, Q[2]

    def aff_from_jac(self, Q: JacPoint) -> Point:
        if Q[2] == 0:
            return INF
        z_inv = self._inv(Q[2])
        z_inv2 = z_inv * z_inv % self.p
        return Q[0] * z_inv2 % self.p, Q[1] * z_inv2 * z_inv % self.p

    def x_aff_from_jac(self, Q: JacPoint) -> int:
        if Q[2] == 0:
            raise PointAtInfinityError("INF has no x-coordinate")
        z_inv = self._inv(Q[2])
        return Q[0] * z_inv * z_inv % self.p

    def y_aff_from_jac(self, Q: JacPoint) -> int:
        if Q[2] == 0:
            raise PointAtInfinityError("INF has no y-coordinate")
        z_inv = self._inv(Q[2])
        return Q[1] * pow(z_inv, 3, self.p) % self.p

    def jac_equality(self, QJ: JacPoint, PJ: JacPoint) -> bool:
        """Return True if the Jacobian points are the same affine point.

        The points are assumed to be on curve:
        the comparison is done cross-multiplying by the Z powers,
        without any modular inversion.
        """
        if QJ[2] == 0 or PJ[2] == 0:
            return QJ[2] == PJ[2]

        p = self.p
        qz2, pz2 = QJ[2] * QJ[2] % p, PJ[2] * PJ[2] % p
        if QJ[0] * pz2 % p != PJ[0] * qz2 % p:
            return False
        return QJ[1] * pz2 * PJ[2] % p == PJ[1] * qz2 * QJ[2] % p

    def add(self, Q1: Point, Q2: Point) -> Point:
        "Return the sum of two points, which must be on curve."
        self.require_on_curve(Q1)
        self.require_on_curve(Q2)
        # affine addition costs one inversion, as the Jacobian round trip
        return self.add_aff(Q1, Q2)

    def double(self, Q: Point) -> Point:
        "Return the double of a point, which must be on curve."
        self.require_on_curve(Q)
        return self.double_aff(Q)

    def add_jac(self, Q: JacPoint, R: JacPoint) -> JacPoint:
        # points are assumed to be on curve

        if Q[2] == 0:
            return R
        if R[2] == 0:
            return Q

        p = self.p
        qz2 = Q[2] * Q[2] % p
        rz2 = R[2] * R[2] % p
        u1 = Q[0] * rz2 % p
        u2 = R[0] * qz2 % p
        s1 = Q[1] * rz2 * R[2] % p
        s2 = R[1] * qz2 * Q[2] % p

        h = (u2 - u1) % p
        r = (s2 - s1) % p
        if h == 0:
            # same affine x: either the same point or opposite points
            return self.double_jac(Q) if r == 0 else INFJ

        h2 = h * h % p
        h3 = h2 * h % p
        u1h2 = u1 * h2 % p
        X = (r * r - h3 - 2 * u1h2) % p
        Y = (r * (u1h2 - X) - s1 * h3) % p
        Z = h * Q[2] * R[2] % p
        return X, Y, Z

    def double_jac(self, Q: JacPoint) -> JacPoint:
        # point is assumed to be on curve

        p = self.p
        y2 = Q[1] * Q[1] % p
        z2 = Q[2] * Q[2] % p
        s = 4 * Q[0] * y2 % p
        m = (3 * Q[0] * Q[0] + self._a * z2 * z2) % p
        X = (m * m - 2 * s) % p
        Y = (m * (s - X) - 8 * y2 * y2) % p
        # Z = 0 for INFJ and for points of order two
        Z = 2 * Q[1] * Q[2] % p
        return X, Y, Z

    def add_aff(self, Q: Point, R: Point) -> Point:
        # points are assumed to be on curve

        if Q[1] == 0:
            return R
        if R[1] == 0:
            return Q
        if Q[0] == R[0]:
            return self.double_aff(Q) if Q[1] == R[1] else INF

        slope = (R[1] - Q[1]) * self._inv(R[0] - Q[0]) % self.p
        return self._chord(slope, Q, R[0])

    def double_aff(self, Q: Point) -> Point:
        # point is assumed to be on curve

        if Q[1] == 0:
            return INF
        slope = (3 * Q[0] * Q[0] + self._a) * self._inv(2 * Q[1]) % self.p
        return self._chord(slope, Q, Q[0])

    def _chord(self, slope: int, Q: Point, x_R: int) -> Point:
        # third intersection of the line through Q, reflected on the x axis
        x = (slope * slope - Q[0] - x_R) % self.p
        y = (slope * (Q[0] - x) - Q[1]) % self.p
        return x, y

    def _y2(self, x: int) -> int:
        # the right-hand side of the curve equation:
        # x is a valid coordinate only if this is a quadratic residue
        return ((x * x + self._a) * x + self._b) % self.p

    def y(self, x: int) -> int:
        """Return the (even) y coordinate from x, as in (x, y)."""
        if not 0 <= x < self.p:
            raise InvalidPointError(f"x-coordinate not in 0..p-1: {int_repr(x)}")
        try:
            return self.field.sqrt(self._y2(x)).value
        except NoSquareRootError as e:
            err_msg = f"invalid x-coordinate: {int_repr(x)}"
            raise InvalidPointError(err_msg) from e

    def require_on_curve(self, Q: Point) -> None:
        "Raise InvalidPointError if the point is not on curve."
        if not self.is_on_curve(Q):
            raise InvalidPointError("point not on curve")

    def is_on_curve(self, Q: Point) -> bool:
        "Return True if the point is on curve (INF included)."
        if len(Q) != 2:
            raise InvalidPointError("point must be a tuple[int, int]")
        x, y = Q
        if y == 0:
            return True
        if not (0 <= x < self.p and 0 < y < self.p):
            return False
        return self._y2(x) == y * y % self.p

    # y-coordinate selection: even/odd or low/high

    def y_even(self, x: int) -> int:
        """Return the even affine y-coordinate associated to x."""
        return self.y(x)

    def y_odd(self, x: int) -> int:
        """Return the odd affine y-coordinate associated to x."""
        return -self.y(x) % self.p

    def y_low(self, x: int) -> int:
        """Return the low affine y-coordinate (not above p/2) associated to x."""
        root = self.y(x)
        return min(root, self.p - root)


def mult_aff(m: int, Q: Point, ec: CurveGroup) -> Point:
    """Scalar multiplication of a curve point in affine coordinates.

    Left-to-right 'double & add': slow, as each step costs an inversion,
    it is the reference implementation used to validate curve parameters.

    The point is assumed to be on curve;
    m is not reduced modulo the group order.
    """

    if m < 0:
        raise HDCoreValueError(f"negative m: {hex(m)}")

    R = INF
    for i in reversed(range(m.bit_length())):
        R = ec.double_aff(R)
        if (m >> i) & 1:
            R = ec.add_aff(R, Q)
    return R


def mult_jac(m: int, Q: JacPoint, ec: CurveGroup) -> JacPoint:
    """Scalar multiplication of a curve point in Jacobian coordinates.

    Montgomery ladder: every bit of m costs one addition and one doubling,
    whatever its value, keeping the invariant R1 = R0 + Q.

    The point is assumed to be on curve;
    m is not reduced modulo the group order.
    """

    if m < 0:
        raise HDCoreValueError(f"negative m: {hex(m)}")

    R0, R1 = INFJ, Q
    for i in reversed(range(m.bit_length())):
        if (m >> i) & 1:
            R0, R1 = ec.add_jac(R0, R1), ec.double_jac(R1)
        else:
            R0, R1 = ec.double_jac(R0), ec.add_jac(R0, R1)
    return R0


def _double_mult(
    u: int, HJ: JacPoint, v: int, QJ: JacPoint, ec: CurveGroup
) -> JacPoint:
    """Double scalar multiplication u*H + v*Q (Shamir-Strauss).

    A single left-to-right 'double & add' loop serves both products:
    at each bit the point added is INF, H, Q, or the precomputed H+Q,
    according to the bits of u and v.

    The points are assumed to be on curve;
    u and v are not reduced modulo the group order.
    """

    if u < 0:
        raise HDCoreValueError(f"negative first coefficient: {hex(u)}")
    if v < 0:
        raise HDCoreValueError(f"negative second coefficient: {hex(v)}")

    T = [INFJ, HJ, QJ, ec.add_jac(HJ, QJ)]
    R = INFJ
    for i in reversed(range(max(u.bit_length(), v.bit_length()))):
        R = ec.double_jac(R)
        R = ec.add_jac(R, T[((u >> i) & 1) + 2 * ((v >> i) & 1)])
    return R
