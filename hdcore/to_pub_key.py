#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Public keys: from any key representation to curve point or SEC bytes."

from typing import Union

from hdcore.alias import Point
from hdcore.bip32.bip32 import ExtendedKey
from hdcore.ecc.curve import Curve, mult, secp256k1
from hdcore.ecc.sec_point import bytes_from_point, point_from_octets
from hdcore.exceptions import (
    HDCoreValueError,
    InvalidPointError,
    PointAtInfinityError,
)
from hdcore.to_prv_key import PrvKey, int_from_prv_key

# SEC octets, extended public key, or point tuple
PubKey = Union[bytes, str, ExtendedKey, Point]

# any private or public key
Key = Union[int, bytes, str, ExtendedKey, Point]


def _not_infinity(Q: Point) -> Point:
    if Q[1] == 0:
        raise PointAtInfinityError("infinity point is not a public key")
    return Q


def _point_from_xpub(xpub: ExtendedKey, ec: Curve) -> Point:
    if xpub.ec is not ec:
        raise HDCoreValueError(f"curve mismatch: {xpub.ec.name} instead of {ec.name}")
    if xpub.is_private:
        raise InvalidPointError(f"not a public key: {xpub.b58encode()}")
    return xpub.pub_key


def point_from_pub_key(pub_key: PubKey, ec: Curve = secp256k1) -> Point:
    """Return the curve point of a public key.

    Accepted inputs are an extended public key
    (as ExtendedKey or Base58Check string),
    SEC 1 octets, or a point tuple.
    The point at infinity is rejected.
    """

    if isinstance(pub_key, tuple):
        ec.require_on_curve(pub_key)
        return _not_infinity(pub_key)
    if isinstance(pub_key, ExtendedKey):
        return _point_from_xpub(pub_key, ec)

    if isinstance(pub_key, str):
        pub_key = pub_key.strip()
        # hex-strings contain '0', which is not in the base58 alphabet
        try:
            xpub = ExtendedKey.b58decode(pub_key, ec)
        except ValueError:
            pass
        else:
            return _point_from_xpub(xpub, ec)

    return _not_infinity(point_from_octets(pub_key, ec))


def point_from_key(key: Key, ec: Curve = secp256k1) -> Point:
    """Return the curve point of a private or public key.

    A private key q is mapped to q*G.
    """

    if isinstance(key, tuple):
        return point_from_pub_key(key, ec)
    if isinstance(key, ExtendedKey) and not key.is_private:
        return point_from_pub_key(key, ec)
    if isinstance(key, (int, ExtendedKey)):
        return mult(int_from_prv_key(key, ec), ec.G, ec)

    # octets and strings are tried as private key first
    try:
        q = int_from_prv_key(key, ec)
    except ValueError:
        return point_from_pub_key(key, ec)
    return mult(q, ec.G, ec)


def pub_key_from_prv_key(
    prv_key: PrvKey, ec: Curve = secp256k1, compressed: bool = True
) -> bytes:
    "Return the SEC encoded public key of a private key."

    Q = mult(int_from_prv_key(prv_key, ec), ec.G, ec)
    return bytes_from_point(Q, ec, compressed)


def pub_key_from_key(
    key: Key, ec: Curve = secp256k1, compressed: bool = True
) -> bytes:
    "Return the SEC encoded public key of a private or public key."

    return bytes_from_point(point_from_key(key, ec), ec, compressed)
