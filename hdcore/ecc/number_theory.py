#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Number theory and modular arithmetic functions.

Integer-level building blocks for the prime field arithmetic:
see hdcore.ecc.field for the FieldElement abstraction.

Square roots modulo p use the closed formulas for p = 3 mod 4
and p = 5 mod 8 (Atkin), falling back to Tonelli-Shanks otherwise
(e.g. for the stark curve prime, which is 1 mod 8).
"""

from typing import Tuple

from hdcore.exceptions import DivisionByZeroError, NoSquareRootError
from hdcore.utils import int_repr


def xgcd(a: int, b: int) -> Tuple[int, int, int]:
    "Return (g, x, y) such that a*x + b*y = g = gcd(a, b)."

    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1
    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_x, x = x, old_x - q * x
        old_y, y = y, old_y - q * y
    return old_r, old_x, old_y


def mod_inv(a: int, m: int) -> int:
    """Return the inverse of a (mod m). m does not have to be a prime.

    Zero (mod m) has no inverse: DivisionByZeroError is raised,
    instead of silently returning zero.
    """

    a %= m
    g, x, _ = xgcd(a, m)
    if g != 1:
        err_msg = f"no inverse for {int_repr(a)} mod {int_repr(m)}"
        raise DivisionByZeroError(err_msg)
    return x % m


def legendre_symbol(a: int, p: int) -> int:
    """Return the Legendre symbol (a|p) of an odd prime p.

    By Euler's criterion a^((p-1)/2) is 1 for quadratic residues,
    p-1 for non residues, and 0 if p divides a.
    """

    ls = pow(a, (p - 1) // 2, p)
    return ls if ls in (0, 1) else -1


def _no_root(a: int, p: int) -> NoSquareRootError:
    return NoSquareRootError(f"no root for {int_repr(a)} mod {int_repr(p)}")


def mod_sqrt(a: int, p: int) -> int:
    """Return a square root of a (mod p); p must be a prime.

    The other root is p - r.
    NoSquareRootError is raised if a is not a quadratic residue.
    """

    a %= p

    if p % 4 == 3:
        candidates = [pow(a, (p + 1) // 4, p)]
    elif p % 8 == 5:
        r = pow(a, (p + 3) // 8, p)
        # if r^2 = -a then r * sqrt(-1) is the root
        candidates = [r, r * pow(2, (p - 1) // 4, p) % p]
    else:
        return tonelli(a, p)

    for r in candidates:
        if r * r % p == a:
            return r
    raise _no_root(a, p)


def tonelli(a: int, p: int) -> int:
    "Return a square root of a (mod p) with the Tonelli-Shanks algorithm."

    a %= p
    if a == 0 or p == 2:
        return a
    if legendre_symbol(a, p) != 1:
        raise _no_root(a, p)

    # p - 1 = q * 2^s, with q odd
    s = ((p - 1) & -(p - 1)).bit_length() - 1
    q = (p - 1) >> s
    if s == 1:
        return pow(a, (p + 1) // 4, p)

    # any quadratic non residue will do
    z = next(i for i in range(2, p) if legendre_symbol(i, p) == -1)

    m, c, t, r = s, pow(z, q, p), pow(a, q, p), pow(a, (q + 1) // 2, p)
    while t != 1:
        # least i, 0 < i < m, such that t^(2^i) = 1
        i, t2i = 1, t * t % p
        while t2i != 1:
            i += 1
            t2i = t2i * t2i % p
        b = pow(c, 1 << (m - i - 1), p)
        m, c = i, b * b % p
        t, r = t * c % p, r * b % p
    return r


def is_probable_prime(p: int) -> bool:
    "Fermat test to base 2, good enough to reject parameter typos."
    return p > 2 and p % 2 == 1 and pow(2, p - 1, p) == 1
