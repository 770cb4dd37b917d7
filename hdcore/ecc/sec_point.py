#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""SEC 1 v.2 point encoding (sections 2.3.3 and 2.3.4).

* 0x00: the point at infinity (single byte)
* 0x02 || x: compressed point with even y
* 0x03 || x: compressed point with odd y
* 0x04 || x || y: uncompressed point
"""

from hdcore.alias import INF, Octets, Point
from hdcore.ecc.curve import Curve, secp256k1
from hdcore.exceptions import InvalidInputLengthError, InvalidPointError
from hdcore.utils import bytes_from_octets, hex_string

INF_BYTES = b"\x00"


def bytes_from_point(Q: Point, ec: Curve = secp256k1, compressed: bool = True) -> bytes:
    "Return the SEC 1 encoding of the point, compressed by default."

    ec.require_on_curve(Q)
    x_Q, y_Q = Q
    if y_Q == 0:
        return INF_BYTES

    x_bytes = x_Q.to_bytes(ec.p_size, "big")
    if compressed:
        return bytes([0x02 + (y_Q & 1)]) + x_bytes
    return b"\x04" + x_bytes + y_Q.to_bytes(ec.p_size, "big")


def _check_size(kind: str, actual: int, expected: int) -> None:
    if actual != expected:
        msg = f"invalid size for {kind} point: {actual} instead of {expected}"
        raise InvalidInputLengthError(msg)


def _compressed_point(prefix: int, x_bytes: bytes, ec: Curve) -> Point:
    x_Q = int.from_bytes(x_bytes, "big")
    try:
        y_Q = ec.y_even(x_Q)
    except InvalidPointError as e:
        raise InvalidPointError(f"invalid x-coordinate: '{hex_string(x_Q)}'") from e
    if prefix == 0x03:
        y_Q = (ec.p - y_Q) % ec.p
    return x_Q, y_Q


def _uncompressed_point(xy_bytes: bytes, ec: Curve) -> Point:
    Q = (
        int.from_bytes(xy_bytes[: ec.p_size], "big"),
        int.from_bytes(xy_bytes[ec.p_size :], "big"),
    )
    # infinity has no uncompressed encoding
    if Q[1] == 0:
        raise InvalidPointError("invalid uncompressed infinity point")
    if not ec.is_on_curve(Q):
        raise InvalidPointError(f"point not on curve: {Q}")
    return Q


def point_from_octets(pub_key: Octets, ec: Curve = secp256k1) -> Point:
    """Return the point (x_Q, y_Q) encoded by the SEC 1 octets.

    The encoding is fully validated:
    the point must be on the curve,
    InvalidPointError or InvalidInputLengthError being raised otherwise.
    """

    pub_key = bytes_from_octets(pub_key, (1, ec.p_size + 1, 2 * ec.p_size + 1))
    prefix, size = pub_key[0], len(pub_key)

    if prefix == 0x00:
        _check_size("infinity", size, 1)
        return INF
    if prefix in (0x02, 0x03):
        _check_size("compressed", size, ec.p_size + 1)
        return _compressed_point(prefix, pub_key[1:], ec)
    if prefix == 0x04:
        _check_size("uncompressed", size, 2 * ec.p_size + 1)
        return _uncompressed_point(pub_key[1:], ec)
    raise InvalidPointError(f"not a point: {pub_key!r}")
