#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdcore.network` module."

import pytest

from hdcore.ecc.curve import CURVES
from hdcore.exceptions import HDCoreValueError
from hdcore.network import (
    NETWORKS,
    SEED_KEYS,
    XPRV_VERSIONS,
    XPUB_VERSIONS,
    network_from_xkeyversion,
    xpub_version_from_xprv_version,
)


def test_networks() -> None:

    assert NETWORKS["mainnet"].bip32_prv.hex() == "0488ade4"
    assert NETWORKS["mainnet"].bip32_pub.hex() == "0488b21e"
    assert NETWORKS["testnet"].bip32_prv.hex() == "04358394"
    assert NETWORKS["testnet"].bip32_pub.hex() == "043587cf"

    # versions are unique
    versions = XPRV_VERSIONS + XPUB_VERSIONS
    assert len(set(versions)) == len(versions)

    for net_name, net in NETWORKS.items():
        assert network_from_xkeyversion(net.bip32_prv) == net_name
        assert network_from_xkeyversion(net.bip32_pub) == net_name
        assert xpub_version_from_xprv_version(net.bip32_prv) == net.bip32_pub

    with pytest.raises(TypeError):
        NETWORKS["regtest"] = NETWORKS["testnet"]  # type: ignore


def test_exceptions() -> None:

    err_msg = "unknown extended key version: 0x00000000"
    with pytest.raises(HDCoreValueError, match=err_msg):
        network_from_xkeyversion(b"\x00" * 4)

    xpub_version = NETWORKS["mainnet"].bip32_pub
    err_msg = "not a private key version: 0x0488b21e"
    with pytest.raises(HDCoreValueError, match=err_msg):
        xpub_version_from_xprv_version(xpub_version)


def test_seed_keys() -> None:

    assert SEED_KEYS["secp256k1"] == b"Bitcoin seed"
    assert SEED_KEYS["secp256r1"] == b"Nist256p1 seed"
    for ec_name in SEED_KEYS:
        assert ec_name in CURVES
    assert "stark" not in SEED_KEYS
