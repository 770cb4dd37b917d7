#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdcore.ecc.wnaf` module."

import secrets

import pytest

from hdcore.alias import INFJ
from hdcore.ecc.curve import CURVES, secp256k1
from hdcore.ecc.curve_group import mult_jac
from hdcore.ecc.wnaf import (
    _mult,
    cached_odd_multiples,
    mods,
    mult_w_NAF,
    odd_multiples,
    wNAF_of_m,
)
from hdcore.exceptions import HDCoreValueError
from tests.ecc.test_curve import low_card_curves


def test_mods() -> None:
    assert mods(7, 4) == 7
    assert mods(8, 4) == -8
    assert mods(15, 4) == -1
    assert mods(17, 4) == 1
    for w in range(2, 7):
        for m in range(1, 200, 2):
            d = mods(m, w)
            assert d % 2 == 1
            assert -(1 << (w - 1)) <= d < (1 << (w - 1))
            assert (m - d) % (1 << w) == 0


def test_wNAF_of_m() -> None:

    assert wNAF_of_m(0) == []
    assert wNAF_of_m(1) == [1]
    # 7 = 8 - 1
    assert wNAF_of_m(7, 2) == [-1, 0, 0, 1]
    assert wNAF_of_m(7, 4) == [7]

    for w in range(2, 7):
        for _ in range(10):
            m = secrets.randbits(256)
            M = wNAF_of_m(m, w)
            # digits are least significant first
            assert sum(d << i for i, d in enumerate(M)) == m
            assert len(M) <= m.bit_length() + 1
            for i, d in enumerate(M):
                if d != 0:
                    assert d % 2 == 1
                    assert abs(d) < 1 << (w - 1)
                    # at most one non-zero digit in any w consecutive ones
                    assert all(x == 0 for x in M[i + 1 : i + w])

    with pytest.raises(HDCoreValueError, match="negative m: "):
        wNAF_of_m(-1)
    with pytest.raises(HDCoreValueError, match="invalid w: "):
        wNAF_of_m(1, 1)


def test_odd_multiples() -> None:
    for ec in low_card_curves.values():
        for w in range(2, 6):
            T = odd_multiples(ec.GJ, ec, w)
            assert len(T) == 1 << (w - 2)
            for i, PJ in enumerate(T):
                assert ec.jac_equality(PJ, mult_jac(2 * i + 1, ec.GJ, ec))

    with pytest.raises(HDCoreValueError, match="invalid w: "):
        odd_multiples(secp256k1.GJ, secp256k1, 1)

    # the cached table is built once
    T1 = cached_odd_multiples(secp256k1.GJ, secp256k1)
    T2 = cached_odd_multiples(secp256k1.GJ, secp256k1)
    assert T1 is T2


def test_mult_w_NAF() -> None:
    for ec in low_card_curves.values():
        for w in range(2, 6):
            for m in range(3 * ec.n):
                RJ = mult_w_NAF(m, ec.GJ, ec, w)
                assert ec.jac_equality(RJ, mult_jac(m, ec.GJ, ec))
        assert ec.jac_equality(mult_w_NAF(ec.n, ec.GJ, ec), INFJ)

    for ec in CURVES.values():
        m = secrets.randbelow(ec.n)
        RJ = mult_jac(m, ec.GJ, ec)
        assert ec.jac_equality(mult_w_NAF(m, ec.GJ, ec), RJ)
        assert ec.jac_equality(mult_w_NAF(m, ec.GJ, ec, cached=True), RJ)
        assert ec.jac_equality(_mult(m, ec.GJ, ec), RJ)

        # non-generator point
        QJ = ec.double_jac(ec.GJ)
        RJ = mult_jac(m, QJ, ec)
        assert ec.jac_equality(_mult(m, QJ, ec), RJ)

    with pytest.raises(HDCoreValueError, match="negative m: "):
        mult_w_NAF(-1, secp256k1.GJ, secp256k1)
