#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdcore.ecc.sec_point` module."

import secrets

import pytest

from hdcore.alias import INF
from hdcore.ecc.curve import CURVES, mult, secp256k1
from hdcore.ecc.sec_point import bytes_from_point, point_from_octets
from hdcore.exceptions import InvalidInputLengthError, InvalidPointError


def test_generator() -> None:

    ec = secp256k1
    G_bytes = bytes_from_point(ec.G)
    assert G_bytes.hex() == (
        "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    )
    assert point_from_octets(G_bytes) == ec.G
    assert point_from_octets(G_bytes.hex()) == ec.G

    G_bytes = bytes_from_point(ec.G, compressed=False)
    assert len(G_bytes) == 65
    assert G_bytes[0] == 4
    assert point_from_octets(G_bytes) == ec.G


def test_infinity() -> None:
    for ec in CURVES.values():
        assert bytes_from_point(INF, ec) == b"\x00"
        assert bytes_from_point(INF, ec, compressed=False) == b"\x00"
        assert point_from_octets(b"\x00", ec) == INF
        assert point_from_octets("00", ec) == INF


def test_round_trip() -> None:
    for ec in CURVES.values():
        for _ in range(4):
            q = 1 + secrets.randbelow(ec.n - 1)
            Q = mult(q, ec.G, ec)
            Q_bytes = bytes_from_point(Q, ec)
            assert len(Q_bytes) == ec.p_size + 1
            # the prefix encodes the parity of y
            assert Q_bytes[0] == 2 + (Q[1] & 1)
            assert point_from_octets(Q_bytes, ec) == Q
            Q_bytes = bytes_from_point(Q, ec, False)
            assert len(Q_bytes) == 2 * ec.p_size + 1
            assert point_from_octets(Q_bytes, ec) == Q

            minus_Q = ec.negate(Q)
            minus_Q_bytes = bytes_from_point(minus_Q, ec)
            assert minus_Q_bytes[1:] == bytes_from_point(Q, ec)[1:]
            assert minus_Q_bytes[0] != bytes_from_point(Q, ec)[0]
            assert point_from_octets(minus_Q_bytes, ec) == minus_Q


def test_exceptions() -> None:

    ec = secp256k1
    G_bytes = bytes_from_point(ec.G)

    with pytest.raises(InvalidInputLengthError, match="invalid size: "):
        point_from_octets(G_bytes[:-1])

    with pytest.raises(InvalidInputLengthError, match="invalid size for infinity"):
        point_from_octets(b"\x00" + G_bytes[1:])

    with pytest.raises(InvalidInputLengthError, match="invalid size for compressed"):
        point_from_octets(b"\x02" + G_bytes[1:] * 2)

    with pytest.raises(InvalidInputLengthError, match="invalid size for uncompre"):
        point_from_octets(b"\x04" + G_bytes[1:])

    # 5 is not a valid x-coordinate for secp256k1
    x_bytes = (5).to_bytes(32, byteorder="big", signed=False)
    with pytest.raises(InvalidPointError, match="invalid x-coordinate: "):
        point_from_octets(b"\x02" + x_bytes)

    # x-coordinate not in 0..p-1
    x_bytes = ec.p.to_bytes(32, byteorder="big", signed=False)
    with pytest.raises(InvalidPointError, match="invalid x-coordinate: "):
        point_from_octets(b"\x03" + x_bytes)

    # y-coordinate tampered with
    Q_bytes = bytearray(bytes_from_point(ec.G, ec, False))
    Q_bytes[-1] ^= 1
    with pytest.raises(InvalidPointError, match="point not on curve"):
        point_from_octets(bytes(Q_bytes))

    Q_bytes = b"\x04" + ec.G[0].to_bytes(32, "big") + b"\x00" * 32
    with pytest.raises(InvalidPointError, match="invalid uncompressed infinity"):
        point_from_octets(Q_bytes)

    with pytest.raises(InvalidPointError, match="not a point: "):
        point_from_octets(b"\x05" + G_bytes[1:])

    with pytest.raises(InvalidPointError, match="point not on curve"):
        bytes_from_point((ec.G[0], ec.G[1] + 1))
