#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Elliptic curve point multiplication using the w-ary non-adjacent form.

The scalar is recoded in wNAF: odd signed digits,
at most one non-zero digit in any w consecutive ones;
the number of point additions is then about bitlength/(w+1),
while doublings remain one per bit.

The odd multiples {Q, 3Q, ..., (2^(w-1)-1)Q} of the point are precomputed;
negative digits use the opposite point, as on Weierstrass curves
-P can be computed on the fly.
The tables of fixed points (e.g. the curve generator) are built lazily
and cached process-wide: they are immutable tuples, hence safe for
concurrent read access once built.

Reference:
    - D. Hankerson, 'Guide to Elliptic Curve Cryptography' chapter 3
"""

import functools
from typing import List, Tuple

from hdcore.alias import INFJ, JacPoint
from hdcore.ecc.curve_group import CurveGroup
from hdcore.exceptions import HDCoreValueError

WNAF_WIDTH = 4


def mods(m: int, w: int) -> int:
    "Signed modulo function."

    w2 = 1 << w
    M = m % w2
    return M - w2 if M >= (w2 >> 1) else M


def wNAF_of_m(m: int, w: int = WNAF_WIDTH) -> List[int]:
    """wNAF (width-w Non-adjacent form) of number m.

    Given an integer m, wNAF is a method of representation
    with powers of 2, where the coefficients are odd or 0,
    and where at most one of any w consecutive digits is nonzero.
    It has the following properties:

    - m has a unique width-w NAF
    - the length of wNAF(m) is at most one more than the length
      of the binary representation of m
    - the average density of nonzero digits is approximately 1/(w + 1)

    Digits are returned least significant first.
    """

    if m < 0:
        raise HDCoreValueError(f"negative m: {hex(m)}")
    if w < 2:
        raise HDCoreValueError(f"invalid w: {w}")

    M: List[int] = []
    while m > 0:
        if m & 1:
            d = mods(m, w)
            m -= d
        else:
            d = 0
        M.append(d)
        m >>= 1
    return M


def odd_multiples(
    QJ: JacPoint, ec: CurveGroup, w: int = WNAF_WIDTH
) -> Tuple[JacPoint, ...]:
    "Return the odd multiples (Q, 3Q, ..., (2^(w-1)-1)Q)."

    if w < 2:
        raise HDCoreValueError(f"invalid w: {w}")

    Q2 = ec.double_jac(QJ)
    T = [QJ]
    for _ in range(1, 1 << (w - 2)):
        T.append(ec.add_jac(T[-1], Q2))
    return tuple(T)


@functools.lru_cache()  # least recently used cache
def cached_odd_multiples(
    QJ: JacPoint, ec: CurveGroup, w: int = WNAF_WIDTH
) -> Tuple[JacPoint, ...]:
    "Lazily built, process-wide odd multiples of a fixed point."
    return odd_multiples(QJ, ec, w)


def mult_w_NAF(
    m: int, QJ: JacPoint, ec: CurveGroup, w: int = WNAF_WIDTH, cached: bool = False
) -> JacPoint:
    """Scalar multiplication in Jacobian coordinates using wNAF.

    'left-to-right' evaluation of the 'right-to-left' recoding.
    It is not constant time.

    The input point is assumed to be on curve;
    m is an arbitrary non-negative integer: it is not reduced mod n.
    """

    M = wNAF_of_m(m, w)
    if not M:
        return INFJ

    T = cached_odd_multiples(QJ, ec, w) if cached else odd_multiples(QJ, ec, w)

    R = INFJ
    for d in reversed(M):
        R = ec.double_jac(R)
        if d > 0:
            R = ec.add_jac(R, T[(d - 1) >> 1])
        elif d < 0:
            R = ec.add_jac(R, ec.negate_jac(T[(-d - 1) >> 1]))
    return R


def _mult(m: int, QJ: JacPoint, ec: CurveGroup) -> JacPoint:
    """Scalar multiplication, the default algorithm.

    Multiplications of the curve generator use the cached table.
    """
    cached = QJ == getattr(ec, "GJ", None)
    return mult_w_NAF(m, QJ, ec, WNAF_WIDTH, cached)
