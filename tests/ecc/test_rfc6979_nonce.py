#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdcore.ecc.rfc6979_nonce` module."

import hashlib
from itertools import islice

import pytest

from hdcore.ecc.curve import secp256k1, secp256r1
from hdcore.ecc.rfc6979_nonce import challenge_, rfc6979_nonce_, rfc6979_nonces_
from hdcore.exceptions import InvalidInputLengthError, InvalidPrivateKeyError


def test_rfc6979() -> None:
    # source: https://bitcointalk.org/index.php?topic=285142.40
    msg = "Satoshi Nakamoto".encode()
    msg_hash = hashlib.sha256(msg).digest()
    x = 0x1
    k = 0x8F8A276C19F4149656B280621E358CCE24F5F52542772691EE69063B74F15D15
    assert k == rfc6979_nonce_(msg_hash, x, hf=hashlib.sha256)
    # private key as n_size bytes or hex-string
    assert k == rfc6979_nonce_(msg_hash, x.to_bytes(32, "big"))
    assert k == rfc6979_nonce_(msg_hash.hex(), x.to_bytes(32, "big").hex())


def test_rfc6979_example() -> None:
    class _helper:  # pylint: disable=too-few-public-methods
        def __init__(self, n: int) -> None:
            self.n = n
            self.nlen = n.bit_length()
            self.n_size = (self.nlen + 7) // 8

    # source: https://tools.ietf.org/html/rfc6979 section A.1
    fake_ec = _helper(0x4000000000000000000020108A2E0CC0D99F8A5EF)
    x = 0x09A4D6792295A7F730FC3F2B49CBC0F62E862272F
    msg = "sample".encode()
    msg_hash = hashlib.sha256(msg).digest()
    k = 0x23AF4074C90A02B3FE61D286D5C87F425E6BDD81B
    assert k == rfc6979_nonce_(msg_hash, x, fake_ec)  # type: ignore


def test_rfc6979_p256() -> None:
    # source: https://tools.ietf.org/html/rfc6979 section A.2.5
    ec = secp256r1
    x = 0xC9AFA9D845BA75166B5C215767B1D6934E50C3DB36E89B127B8A622B120F6721
    msg_hash = hashlib.sha256(b"sample").digest()
    k = 0xA6E3C57DD01ABE90086538398355DD4C3B17AA873382B0F24D6129493D8AAD60
    assert k == rfc6979_nonce_(msg_hash, x, ec)


def test_nonce_sequence() -> None:
    msg_hash = hashlib.sha256(b"sample").digest()
    c = challenge_(msg_hash)
    nonces = list(islice(rfc6979_nonces_(c, 1), 3))
    assert nonces[0] == rfc6979_nonce_(msg_hash, 1)
    # distinct candidates, all in 1..n-1
    assert len(set(nonces)) == 3
    assert all(0 < k < secp256k1.n for k in nonces)
    # deterministic
    assert nonces == list(islice(rfc6979_nonces_(c, 1), 3))


def test_exceptions() -> None:
    msg_hash = hashlib.sha256(b"sample").digest()

    with pytest.raises(InvalidInputLengthError, match="invalid size: "):
        rfc6979_nonce_(msg_hash[:-1], 1)

    with pytest.raises(InvalidPrivateKeyError, match="private key not in 1..n-1: "):
        rfc6979_nonce_(msg_hash, 0)

    with pytest.raises(InvalidPrivateKeyError, match="private key not in 1..n-1: "):
        rfc6979_nonce_(msg_hash, secp256k1.n)
