#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Deterministic ECDSA nonces (RFC 6979).

https://tools.ietf.org/html/rfc6979

A nonce that is reused across two messages, or that is even slightly
biased, leaks the private key. RFC 6979 removes the need for a random
source at signing time: nonces are drawn from an HMAC-DRBG seeded with
the private key and the message digest.

The generator yields an unbounded sequence of candidates in 1..n-1,
so that a signer can move to the next one when r or s is zero
(section 3.2.h.3).

Schnorr signatures derive their nonce differently, see schnorr_nonce.py.
"""

import hashlib
import hmac
from typing import Iterator

from hdcore.alias import HashF, Octets
from hdcore.ecc.curve import Curve, secp256k1
from hdcore.to_prv_key import PrvKey, int_from_prv_key
from hdcore.utils import bytes_from_octets, int_from_bits


class _HmacDrbg:
    "HMAC-DRBG state (K, V) as used in RFC 6979 section 3.2."

    def __init__(self, seed_material: bytes, hf: HashF) -> None:
        self.hf = hf
        size = hf().digest_size
        self.k = b"\x00" * size
        self.v = b"\x01" * size
        self.update(seed_material)

    def _hmac(self, data: bytes) -> bytes:
        return hmac.new(self.k, data, self.hf).digest()

    def update(self, seed_material: bytes = b"") -> None:
        self.k = self._hmac(self.v + b"\x00" + seed_material)
        self.v = self._hmac(self.v)
        if seed_material:
            self.k = self._hmac(self.v + b"\x01" + seed_material)
            self.v = self._hmac(self.v)

    def generate(self, size: int) -> bytes:
        out = b""
        while len(out) < size:
            self.v = self._hmac(self.v)
            out += self.v
        return out


def challenge_(
    msg_hash: Octets, ec: Curve = secp256k1, hf: HashF = hashlib.sha256
) -> int:
    "Return the leftmost ec.nlen bits of the message hash, reduced mod n."

    msg_hash = bytes_from_octets(msg_hash, hf().digest_size)
    return int_from_bits(msg_hash, ec.nlen) % ec.n


def rfc6979_nonces_(
    c: int, q: int, ec: Curve = secp256k1, hf: HashF = hashlib.sha256
) -> Iterator[int]:
    "Yield the successive RFC6979 nonce candidates in 1..n-1."

    # int2octets(q) || bits2octets(h), both n_size long
    seed_material = q.to_bytes(ec.n_size, "big") + c.to_bytes(ec.n_size, "big")
    drbg = _HmacDrbg(seed_material, hf)
    while True:
        # out of range candidates are rejected, never reduced mod n
        candidate = int_from_bits(drbg.generate(ec.n_size), ec.nlen)
        if 0 < candidate < ec.n:
            yield candidate
        drbg.update()


def rfc6979_nonce_(
    msg_hash: Octets,
    prv_key: PrvKey,
    ec: Curve = secp256k1,
    hf: HashF = hashlib.sha256,
) -> int:
    "Return the first RFC6979 deterministic nonce for the message hash."

    c = challenge_(msg_hash, ec, hf)
    q = int_from_prv_key(prv_key, ec)
    return next(rfc6979_nonces_(c, q, ec, hf))
