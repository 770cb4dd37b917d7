#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Prime order elliptic curves and the supported curve profiles.

The supported curves are a closed set of parameter profiles,
loaded from the ec_params.json data file:

* secp256k1 (SEC 2 v.2), http://www.secg.org/sec2-v2.pdf
* secp256r1 (SEC 2 v.2, also known as NIST P-256)
* stark, the StarkNet curve:
  its field prime is 1 mod 8, so square roots need Tonelli-Shanks

Other curves are obtained instantiating Curve with field prime,
curve coefficients, generator, order, and cofactor:
the parameters are validated as in SEC 1 v.2 section 3.1.1.2.1.
"""

import json
from math import isqrt
from os import path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from hdcore.alias import Integer, Point
from hdcore.ecc.curve_group import CurveGroup, _double_mult, jac_from_aff, mult_aff
from hdcore.ecc.wnaf import _mult
from hdcore.exceptions import HDCoreValueError, InvalidPointError
from hdcore.utils import HEX_THRESHOLD, hex_string, int_from_integer, int_repr


class Curve(CurveGroup):
    """Cyclic subgroup of prime order n generated by G.

    The curve is y^2 = x^3 + a*x + b over Fp,
    and cofactor*n is the number of its points.
    """

    def __init__(
        self,
        p: Integer,
        a: Integer,
        b: Integer,
        G: Point,
        n: Integer,
        cofactor: int,
        weakness_check: bool = True,
        name: Optional[str] = None,
    ) -> None:

        super().__init__(p, a, b)
        self.name = name

        if len(G) != 2:
            raise InvalidPointError("generator must a be a sequence[int, int]")
        self.G = int_from_integer(G[0]), int_from_integer(G[1])
        if not self.is_on_curve(self.G):
            raise InvalidPointError("generator is not on the curve")
        self.GJ = self.G[0], self.G[1], 1

        self.n = int_from_integer(n)
        self.nlen = self.n.bit_length()
        self.n_size = (self.nlen + 7) // 8
        self.cofactor = cofactor
        self._check_order()
        if weakness_check:
            self._check_embedding_degree()

    def _check_order(self) -> None:
        n = self.n
        if n < 2 or n % 2 == 0 or pow(2, n - 1, n) != 1:
            raise HDCoreValueError(f"n is not prime: {int_repr(n)}")

        # Hasse: |#E - (p + 1)| <= 2*sqrt(p)
        delta = isqrt(4 * self.p)
        if self.cofactor < 2 and abs(n - (self.p + 1)) > delta:
            raise HDCoreValueError(f"n not in p+1-delta..p+1+delta: {int_repr(n)}")

        if self.G[1] == 0:
            raise InvalidPointError("INF point cannot be a generator")
        if mult_aff(n, self.G, self)[1] != 0:
            raise HDCoreValueError(f"n is not the group order: {int_repr(n)}")

        expected = (self.p + 1 + delta) // n
        if self.cofactor != expected:
            msg = f"invalid cofactor: {self.cofactor}, expected {expected}"
            raise HDCoreValueError(msg)

        # anomalous curve
        if n == self.p:
            raise HDCoreValueError(f"n=p weak curve: {int_repr(n)}")

    def _check_embedding_degree(self) -> None:
        # MOV attack: p^k = 1 mod n for a small k
        if any(pow(self.p, k, self.n) == 1 for k in range(1, 100)):
            raise HDCoreValueError("weak curve")

    def _generator(self, quote: bool) -> List[str]:
        # both coordinates share the field element representation
        if self.p <= HEX_THRESHOLD:
            return [str(c) for c in self.G]
        if quote:
            return [f"'{hex_string(c)}'" for c in self.G]
        return [hex_string(c) for c in self.G]

    def _order(self, quote: bool) -> str:
        if self.n <= HEX_THRESHOLD:
            return str(self.n)
        return f"'{hex_string(self.n)}'" if quote else hex_string(self.n)

    def __str__(self) -> str:
        x_G, y_G = self._generator(quote=False)
        lines = [
            super().__str__(),
            f" x_G = {x_G}",
            f" y_G = {y_G}",
            f" n   = {self._order(quote=False)}",
            f" cofactor = {self.cofactor}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        x_G, y_G = self._generator(quote=True)
        args = f"({x_G}, {y_G}), {self._order(quote=True)}, {self.cofactor}"
        return f"{super().__repr__()[:-1]}, {args})"


def _load_curves() -> Dict[str, Curve]:
    filename = path.join(path.dirname(__file__), "data", "ec_params.json")
    with open(filename, "r", encoding="ascii") as file_:
        profiles = json.load(file_)
    return {name: Curve(*params, name=name) for name, params in profiles.items()}


CURVES: Mapping[str, Curve] = MappingProxyType(_load_curves())

secp256k1 = CURVES["secp256k1"]
secp256r1 = CURVES["secp256r1"]
stark = CURVES["stark"]


def mult(m: Integer, Q: Optional[Point] = None, ec: Curve = secp256k1) -> Point:
    """Return m*Q, with Q defaulting to the curve generator.

    m is not reduced mod n: n*G is INF.
    """
    if Q is None:
        QJ = ec.GJ
    else:
        ec.require_on_curve(Q)
        QJ = jac_from_aff(Q)
    return ec.aff_from_jac(_mult(int_from_integer(m), QJ, ec))


def double_mult(
    u: Integer, H: Point, v: Integer, Q: Point, ec: Curve = secp256k1
) -> Point:
    "Return u*H + v*Q, computed with Shamir's trick."

    ec.require_on_curve(H)
    ec.require_on_curve(Q)
    u = int_from_integer(u)
    v = int_from_integer(v)
    R = _double_mult(u, jac_from_aff(H), v, jac_from_aff(Q), ec)
    return ec.aff_from_jac(R)
