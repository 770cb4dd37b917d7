#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Deterministic Schnorr nonces, as in BIP340 but scheme-parametrized.

https://github.com/bitcoin/bips/blob/master/bip-0340.mediawiki

With TaggedHash(tag, x) = hf(hf(tag) || hf(tag) || x):

    t = bytes(q) xor TaggedHash(aux_tag, aux)
    nonce = TaggedHash(nonce_tag, t || bytes(x_Q) || msg)

Each Schnorr scheme brings its own curve, hash function, and tags,
so that nonces of different schemes are domain separated.
"""

import secrets
from hashlib import sha256
from typing import Optional, Tuple

from hdcore.alias import HashF, Octets
from hdcore.ecc.curve import Curve, mult, secp256k1
from hdcore.hashes import tagged_hash
from hdcore.to_prv_key import PrvKey, int_from_prv_key
from hdcore.utils import bytes_from_octets, int_from_bits

BIP340_AUX_TAG = b"BIP0340/aux"
BIP340_NONCE_TAG = b"BIP0340/nonce"


def _even_y(k: int, ec: Curve) -> Tuple[int, int]:
    "Return (k', x) with k'*G = (x, y) having even y, k' being k or n-k."
    x, y = mult(k, ec.G, ec)
    return (ec.n - k if y % 2 else k), x


def _nonce(
    msg_hash: bytes,
    q: int,
    x_Q: int,
    aux: bytes,
    ec: Curve,
    hf: HashF,
    aux_tag: bytes,
    nonce_tag: bytes,
) -> int:
    mask = int.from_bytes(tagged_hash(aux_tag, aux, hf), "big")
    # wide enough for both q and the mask
    size = max(ec.n_size, hf().digest_size)
    data = (q ^ mask).to_bytes(size, "big") + x_Q.to_bytes(ec.p_size, "big")
    data += msg_hash

    # rehash instead of reducing mod n, which would bias the nonce:
    # this matters on the small test curves
    while True:
        data = tagged_hash(nonce_tag, data, hf)
        candidate = int_from_bits(data, ec.nlen)
        if 0 < candidate < ec.n:
            return candidate


def schnorr_nonce_(
    msg_hash: Octets,
    prv_key: PrvKey,
    aux: Optional[Octets] = None,
    ec: Curve = secp256k1,
    hf: HashF = sha256,
    aux_tag: bytes = BIP340_AUX_TAG,
    nonce_tag: bytes = BIP340_NONCE_TAG,
) -> Tuple[int, int, int, int]:
    """Return the tuple (nonce, x_K, q, x_Q).

    Both nonce and q are negated, if needed,
    so that K = nonce*G and Q = q*G have even y-coordinate.
    Fresh random aux bytes are used when aux is not provided.
    """

    hf_len = hf().digest_size
    msg_hash = bytes_from_octets(msg_hash, hf_len)
    if aux is None:
        aux = secrets.token_bytes(hf_len)
    else:
        aux = bytes_from_octets(aux, hf_len)

    q, x_Q = _even_y(int_from_prv_key(prv_key, ec), ec)
    k, x_K = _even_y(_nonce(msg_hash, q, x_Q, aux, ec, hf, aux_tag, nonce_tag), ec)
    return k, x_K, q, x_Q
