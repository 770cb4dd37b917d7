#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Digests and keyed hashes used by signatures and key derivation.

RIPEMD160 comes from pycryptodome: OpenSSL 3 builds of hashlib
drop it unless the legacy provider is enabled.
"""

import hashlib
import hmac

from Crypto.Hash import RIPEMD160

from hdcore.alias import HashF, Octets
from hdcore.utils import bytes_from_octets


def sha256(octets: Octets) -> bytes:
    "Return the SHA256 digest of the octets."
    return hashlib.sha256(bytes_from_octets(octets)).digest()


def ripemd160(octets: Octets) -> bytes:
    "Return the RIPEMD160 digest of the octets."
    return RIPEMD160.new(bytes_from_octets(octets)).digest()


def hash160(octets: Octets) -> bytes:
    "Return RIPEMD160(SHA256(octets)), the BIP32 key identifier hash."
    return ripemd160(sha256(octets))


def hash256(octets: Octets) -> bytes:
    "Return SHA256(SHA256(octets)), as used by Base58Check."
    return sha256(sha256(octets))


def hmac_sha512(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha512).digest()


def reduce_to_hlen(msg: Octets, hf: HashF = hashlib.sha256) -> bytes:
    "Return hf(msg), i.e. the message digest to be signed."
    h = hf()
    h.update(bytes_from_octets(msg))
    return bytes(h.digest())


def tagged_hash(tag: bytes, m: bytes, hf: HashF = hashlib.sha256) -> bytes:
    """Return the domain separated hash hf(hf(tag) || hf(tag) || m).

    This is the BIP340 construction, generalized to any hash function.
    """
    h = hf()
    h.update(tag)
    prefix = h.digest() * 2

    h = hf()
    h.update(prefix + m)
    return bytes(h.digest())
