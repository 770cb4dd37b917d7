#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""BIP32 network constants.

Extended key version bytes and the HMAC key used to derive
the master key from the seed on each supported curve:
the curve/hash choice of a given blockchain is up to the caller.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, List, Mapping

from hdcore.exceptions import HDCoreValueError


@dataclass(frozen=True)
class Network:
    # base58 extended private key starts with 'xprv' or 'tprv'
    bip32_prv: bytes
    # base58 extended public key starts with 'xpub' or 'tpub'
    bip32_pub: bytes


NETWORKS: Mapping[str, Network] = MappingProxyType(
    {
        "mainnet": Network(
            bip32_prv=bytes.fromhex("0488ADE4"), bip32_pub=bytes.fromhex("0488B21E")
        ),
        "testnet": Network(
            bip32_prv=bytes.fromhex("04358394"), bip32_pub=bytes.fromhex("043587CF")
        ),
    }
)

XPRV_VERSIONS: List[bytes] = [net.bip32_prv for net in NETWORKS.values()]
XPUB_VERSIONS: List[bytes] = [net.bip32_pub for net in NETWORKS.values()]

# BIP32 master key HMAC key, by curve name
# the secp256r1 one is from SLIP-0010
SEED_KEYS: Mapping[str, bytes] = MappingProxyType(
    {
        "secp256k1": b"Bitcoin seed",
        "secp256r1": b"Nist256p1 seed",
    }
)

# curves where an invalid master or child key is fixed re-running the HMAC,
# as in SLIP-0010; on secp256k1 the BIP32 rule applies: the key is rejected
SLIP10_CURVES: FrozenSet[str] = frozenset(["secp256r1"])


def network_from_xkeyversion(xkey_version: bytes) -> str:
    "Return the network name of a BIP32 extended key version."
    for net_name, net in NETWORKS.items():
        if xkey_version in (net.bip32_prv, net.bip32_pub):
            return net_name
    raise HDCoreValueError(f"unknown extended key version: 0x{xkey_version.hex()}")


def xpub_version_from_xprv_version(xprv_version: bytes) -> bytes:
    "Return the public version matching a private extended key version."
    try:
        i = XPRV_VERSIONS.index(xprv_version)
    except ValueError as e:
        err_msg = f"not a private key version: 0x{xprv_version.hex()}"
        raise HDCoreValueError(err_msg) from e
    return XPUB_VERSIONS[i]
