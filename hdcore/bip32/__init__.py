#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Module hdcore.bip32."""

from hdcore.bip32.bip32 import (
    BIP32Key,
    ExtendedKey,
    derive,
    derive_child,
    derive_from_account,
    derive_path,
    master_key_from_seed,
    neuter,
    rootxprv_from_seed,
    xpub_from_xprv,
)
from hdcore.bip32.der_path import (
    BIP32DerPath,
    bytes_from_bip32_path,
    indexes_from_bip32_path,
    int_from_index_str,
    str_from_bip32_path,
    str_from_index_int,
)

__all__ = [
    "BIP32Key",
    "ExtendedKey",
    "derive",
    "derive_child",
    "derive_from_account",
    "derive_path",
    "master_key_from_seed",
    "neuter",
    "rootxprv_from_seed",
    "xpub_from_xprv",
    "BIP32DerPath",
    "bytes_from_bip32_path",
    "indexes_from_bip32_path",
    "int_from_index_str",
    "str_from_bip32_path",
    "str_from_index_int",
]
