#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdcore.ecc.curve` module."

import secrets
from typing import Dict, Tuple

import pytest

from hdcore.alias import INF, INFJ, Point
from hdcore.ecc.curve import CURVES, Curve, double_mult, mult, secp256k1, stark
from hdcore.ecc.curve_group import jac_from_aff, mult_aff
from hdcore.exceptions import (
    HDCoreTypeError,
    HDCoreValueError,
    InvalidPointError,
    PointAtInfinityError,
)

# test curves: very low cardinality
low_card_curves: Dict[str, Curve] = {}
# 13 % 4 = 1; 13 % 8 = 5
low_card_curves["ec13_11"] = Curve(13, 7, 6, (1, 1), 11, 1, False)
low_card_curves["ec13_19"] = Curve(13, 0, 2, (1, 9), 19, 1, False)
# 17 % 4 = 1; 17 % 8 = 1
low_card_curves["ec17_13"] = Curve(17, 6, 8, (0, 12), 13, 2, False)
low_card_curves["ec17_23"] = Curve(17, 3, 5, (1, 14), 23, 1, False)
# 19 % 4 = 3; 19 % 8 = 3
low_card_curves["ec19_13"] = Curve(19, 0, 2, (4, 16), 13, 2, False)
low_card_curves["ec19_23"] = Curve(19, 2, 9, (0, 16), 23, 1, False)
# 23 % 4 = 3; 23 % 8 = 7
low_card_curves["ec23_19"] = Curve(23, 9, 7, (5, 4), 19, 1, False)
low_card_curves["ec23_31"] = Curve(23, 5, 1, (0, 1), 31, 1, False)

all_curves: Dict[str, Curve] = {}
all_curves.update(low_card_curves)
all_curves.update(CURVES)


def test_exceptions() -> None:

    # good curve
    Curve(13, 0, 2, (1, 9), 19, 1, False)

    with pytest.raises(HDCoreValueError, match="p is not an odd prime: "):
        Curve(15, 0, 2, (1, 9), 19, 1, False)

    with pytest.raises(HDCoreValueError, match="negative a: "):
        Curve(13, -1, 2, (1, 9), 19, 1, False)

    with pytest.raises(HDCoreValueError, match="p <= a: "):
        Curve(13, 13, 2, (1, 9), 19, 1, False)

    with pytest.raises(HDCoreValueError, match="negative b: "):
        Curve(13, 0, -2, (1, 9), 19, 1, False)

    with pytest.raises(HDCoreValueError, match="p <= b: "):
        Curve(13, 0, 13, (1, 9), 19, 1, False)

    with pytest.raises(HDCoreValueError, match="zero discriminant"):
        Curve(11, 7, 7, (1, 9), 19, 1, False)

    err_msg = "generator must a be a sequence\\[int, int\\]"
    with pytest.raises(InvalidPointError, match=err_msg):
        Curve(13, 0, 2, (1, 9, 1), 19, 1, False)  # type: ignore

    with pytest.raises(InvalidPointError, match="generator is not on the curve"):
        Curve(13, 0, 2, (2, 9), 19, 1, False)

    with pytest.raises(HDCoreValueError, match="n is not prime: "):
        Curve(13, 0, 2, (1, 9), 20, 1, False)

    with pytest.raises(HDCoreValueError, match="n not in "):
        Curve(13, 0, 2, (1, 9), 71, 1, False)

    with pytest.raises(InvalidPointError, match="INF point cannot be a generator"):
        Curve(13, 0, 2, INF, 19, 1, False)

    with pytest.raises(HDCoreValueError, match="n is not the group order: "):
        Curve(13, 0, 2, (1, 9), 17, 1, False)

    with pytest.raises(HDCoreValueError, match="invalid cofactor: "):
        Curve(13, 0, 2, (1, 9), 19, 2, False)

    with pytest.raises(HDCoreValueError, match="weak curve"):
        Curve(11, 2, 7, (6, 9), 7, 2, True)


def test_supported_curves() -> None:

    assert sorted(CURVES) == ["secp256k1", "secp256r1", "stark"]
    for name, ec in CURVES.items():
        assert ec.name == name
        assert ec.cofactor == 1
        assert ec.p_size == 32
        assert ec.n_size == 32

    # stark is the curve with p = 1 mod 8
    assert stark.p % 8 == 1

    # read-only mapping
    with pytest.raises(TypeError):
        CURVES["ec13_11"] = low_card_curves["ec13_11"]  # type: ignore


def test_str_and_repr() -> None:

    ec = low_card_curves["ec13_11"]
    assert repr(ec) == "Curve(13, 7, 6, (1, 1), 11, 1)"
    assert str(ec).startswith("Curve\n p   = 13\n a   = 7\n b   = 6")
    assert str(ec).endswith(" n   = 11\n cofactor = 1")

    assert repr(secp256k1).startswith("Curve('FFFFFFFF FFFFFFFF")
    assert repr(secp256k1).endswith("', 1)")
    assert " x_G = 79BE667E F9DCBBAC" in str(secp256k1)


def _random_point(ec: Curve) -> Tuple[int, Point]:
    q = 1 + secrets.randbelow(ec.n - 1)
    return q, mult(q, ec.G, ec)


def test_aff_jac_conversions() -> None:
    for ec in all_curves.values():
        _, Q = _random_point(ec)
        # any Z gives the same affine point
        for z in (1, 2, ec.p - 1):
            QJ = Q[0] * z * z % ec.p, Q[1] * z * z * z % ec.p, z
            assert ec.aff_from_jac(QJ) == Q
            assert (ec.x_aff_from_jac(QJ), ec.y_aff_from_jac(QJ)) == Q
        assert ec.aff_from_jac(jac_from_aff(Q)) == Q

        assert jac_from_aff(INF) == INFJ
        assert ec.aff_from_jac(INFJ) == INF
        with pytest.raises(PointAtInfinityError, match="INF has no x-coordinate"):
            ec.x_aff_from_jac(INFJ)
        with pytest.raises(PointAtInfinityError, match="INF has no y-coordinate"):
            ec.y_aff_from_jac(INFJ)


def test_group_law_aff() -> None:
    for ec in all_curves.values():
        _, P = _random_point(ec)
        _, Q = _random_point(ec)

        # identity and inverse
        for R in (P, INF):
            assert ec.add_aff(R, INF) == ec.add_aff(INF, R) == R
            assert ec.add_aff(R, ec.negate(R)) == INF
        assert ec.double_aff(INF) == INF

        # the generic add falls back to doubling
        assert ec.add_aff(P, P) == ec.double_aff(P) == ec.double(P)
        assert ec.add_aff(P, Q) == ec.add_aff(Q, P) == ec.add(P, Q)
        assert ec.add_aff(ec.add_aff(P, Q), ec.G) == ec.add_aff(P, ec.add(Q, ec.G))


def test_group_law_jac() -> None:
    for ec in all_curves.values():
        _, P = _random_point(ec)
        _, Q = _random_point(ec)
        PJ, QJ = jac_from_aff(P), jac_from_aff(Q)

        for RJ in (PJ, INFJ):
            assert ec.jac_equality(ec.add_jac(RJ, INFJ), RJ)
            assert ec.jac_equality(ec.add_jac(INFJ, RJ), RJ)
            assert ec.jac_equality(ec.add_jac(RJ, ec.negate_jac(RJ)), INFJ)
        assert ec.jac_equality(ec.double_jac(INFJ), INFJ)

        assert ec.jac_equality(ec.add_jac(PJ, PJ), ec.double_jac(PJ))
        assert ec.jac_equality(ec.add_jac(PJ, QJ), ec.add_jac(QJ, PJ))

        # same results as in affine coordinates
        assert ec.aff_from_jac(ec.add_jac(PJ, QJ)) == ec.add_aff(P, Q)
        assert ec.aff_from_jac(ec.double_jac(PJ)) == ec.double_aff(P)


def test_negate() -> None:
    for ec in all_curves.values():
        q, Q = _random_point(ec)
        minus_Q = ec.negate(Q)
        assert minus_Q == (Q[0], ec.p - Q[1])
        assert minus_Q == mult(ec.n - q, ec.G, ec)
        assert ec.aff_from_jac(ec.negate_jac(jac_from_aff(Q))) == minus_Q

        assert ec.negate(INF) == INF
        assert ec.jac_equality(ec.negate_jac(INFJ), INFJ)

    ec = secp256k1
    with pytest.raises(HDCoreTypeError, match="not a point"):
        ec.negate(ec.GJ)  # type: ignore
    with pytest.raises(HDCoreTypeError, match="not a Jacobian point"):
        ec.negate_jac(ec.G)  # type: ignore


def test_is_on_curve() -> None:
    for ec in all_curves.values():
        _, Q = _random_point(ec)
        assert ec.is_on_curve(Q)
        assert ec.is_on_curve(INF)

        off_curve = ec.G[0], ec.G[1] + 1
        assert not ec.is_on_curve(off_curve)
        with pytest.raises(InvalidPointError, match="point not on curve"):
            ec.require_on_curve(off_curve)

        # coordinates out of range
        assert not ec.is_on_curve((Q[0] + ec.p, Q[1]))
        assert not ec.is_on_curve((Q[0], Q[1] + ec.p))

        with pytest.raises(InvalidPointError, match="point must be a tuple"):
            ec.is_on_curve((1, 2, 1))  # type: ignore


def test_y() -> None:
    for ec in low_card_curves.values():
        for x in range(ec.p):
            try:
                y = ec.y(x)
            except InvalidPointError:
                continue
            assert y % 2 == 0
            assert ec.y_even(x) == y
            assert ec.y_odd(x) == (ec.p - y) % ec.p
            assert ec.y_low(x) <= ec.p // 2
            assert ec.is_on_curve((x, y)) or y == 0

        with pytest.raises(InvalidPointError, match="x-coordinate not in 0..p-1: "):
            ec.y(ec.p)

    ec = secp256k1
    # 5 is not a valid x-coordinate for secp256k1
    with pytest.raises(InvalidPointError, match="invalid x-coordinate: "):
        ec.y(5)
    assert ec.y(ec.G[0]) == ec.G[1]


def test_mult() -> None:
    for ec in low_card_curves.values():
        for q in range(ec.n):
            Q = mult_aff(q, ec.G, ec)
            assert Q == mult(q, ec.G, ec)
            assert Q == mult(q, None, ec)
            # the scalar is not reduced: the group order cycles back
            assert Q == mult(q + ec.n, ec.G, ec)
        assert mult(ec.n, ec.G, ec) == INF
        assert mult(0, ec.G, ec) == INF
        assert mult(1, INF, ec) == INF

    # 2G on secp256k1
    x = 0xC6047F9441ED7D6D3045406E95C07CD85C778E4B8CEF3CA7ABAC09B95C709EE5
    y = 0x1AE168FEA63DC339A3C58419466CEAEEF7F632653266D0E1236431A950CFE52A
    assert mult(2) == (x, y)
    assert mult("0x02") == (x, y)

    for ec in CURVES.values():
        assert mult(ec.n, ec.G, ec) == INF
        assert mult(ec.n - 1, ec.G, ec) == ec.negate(ec.G)
        q = 1 + secrets.randbelow(ec.n - 1)
        assert mult(q, ec.G, ec) == mult_aff(q, ec.G, ec)

    with pytest.raises(HDCoreValueError, match="negative m: "):
        mult(-1)

    with pytest.raises(InvalidPointError, match="point not on curve"):
        mult(1, (secp256k1.G[0], secp256k1.G[1] + 1))


def test_double_mult() -> None:
    for ec in low_card_curves.values():
        H = mult(2, ec.G, ec)
        for u in range(ec.n):
            for v in range(ec.n):
                R = ec.add(mult(u, H, ec), mult(v, ec.G, ec))
                assert R == double_mult(u, H, v, ec.G, ec)

    ec = secp256k1
    H = mult(3, ec.G, ec)
    u = 1 + secrets.randbelow(ec.n - 1)
    v = 1 + secrets.randbelow(ec.n - 1)
    R = ec.add(mult(u, H, ec), mult(v, ec.G, ec))
    assert R == double_mult(u, H, v, ec.G, ec)

    # 0*H + v*G = v*G
    assert double_mult(0, H, v, ec.G) == mult(v, ec.G)
    # u*H + 0*G = u*H
    assert double_mult(u, H, 0, ec.G) == mult(u, H)
    # u*INF + v*G = v*G
    assert double_mult(u, INF, v, ec.G) == mult(v, ec.G)

    with pytest.raises(HDCoreValueError, match="negative first coefficient: "):
        double_mult(-1, H, v, ec.G)

    with pytest.raises(HDCoreValueError, match="negative second coefficient: "):
        double_mult(u, H, -1, ec.G)
