#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdcore.to_pub_key` module."

import pytest

from hdcore.ecc.curve import secp256r1
from hdcore.exceptions import (
    HDCoreValueError,
    InvalidPointError,
    PointAtInfinityError,
)
from hdcore.to_pub_key import point_from_pub_key, pub_key_from_prv_key
from tests.test_to_key import (
    INF,
    Q,
    compressed_pub_keys,
    invalid_prv_keys,
    not_a_pub_keys,
    plain_prv_keys,
    q,
    uncompressed_pub_keys,
    xprv,
    xprv_data,
    xpub,
    xpub_data,
)


def test_from_pub_key() -> None:

    for pub_key in [Q, *compressed_pub_keys, *uncompressed_pub_keys]:
        assert Q == point_from_pub_key(pub_key)

    for pub_key in [xpub, " " + xpub + " ", xpub_data]:
        assert Q == point_from_pub_key(pub_key)

    err_msg = "curve mismatch: secp256k1 instead of secp256r1"
    with pytest.raises(HDCoreValueError, match=err_msg):
        point_from_pub_key(xpub_data, secp256r1)
    with pytest.raises(InvalidPointError, match="point not on curve"):
        point_from_pub_key(Q, secp256r1)


def test_pub_key_exceptions() -> None:

    for pub_key in not_a_pub_keys:
        with pytest.raises(ValueError):
            point_from_pub_key(pub_key)

    with pytest.raises(PointAtInfinityError, match="infinity point is not a pub"):
        point_from_pub_key(INF)
    with pytest.raises(PointAtInfinityError, match="infinity point is not a pub"):
        point_from_pub_key(b"\x00")
    with pytest.raises(InvalidPointError, match="not a public key: xprv"):
        point_from_pub_key(xprv)
    with pytest.raises(InvalidPointError, match="not a public key: xprv"):
        point_from_pub_key(xprv_data)


def test_pub_key_from_prv_key() -> None:

    for prv_key in [q, *plain_prv_keys, xprv, xprv_data]:
        assert pub_key_from_prv_key(prv_key) == compressed_pub_keys[0]
        assert pub_key_from_prv_key(prv_key, compressed=False) == (
            uncompressed_pub_keys[0]
        )

    for prv_key in invalid_prv_keys:
        with pytest.raises(HDCoreValueError, match="private key not in 1..n-1: "):
            pub_key_from_prv_key(prv_key)
