#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Functions for conversions between different private key formats."

from typing import Union

from hdcore.bip32.bip32 import ExtendedKey
from hdcore.ecc.curve import Curve, secp256k1
from hdcore.exceptions import HDCoreValueError, InvalidPrivateKeyError
from hdcore.utils import bytes_from_octets, hex_string

PrvKey = Union[int, bytes, str, ExtendedKey]


def _int_from_xprv(xprv: ExtendedKey, ec: Curve) -> int:

    if xprv.ec is not ec:
        raise HDCoreValueError(f"curve mismatch: {xprv.ec.name} instead of {ec.name}")
    if not xprv.is_private:
        err_msg = f"not a private key: {xprv.b58encode()}"
        raise InvalidPrivateKeyError(err_msg)
    # q has already been validated by the ExtendedKey
    return xprv.prv_key


def int_from_prv_key(prv_key: PrvKey, ec: Curve = secp256k1) -> int:
    """Return a verified-as-valid private key integer.

    It supports:

    - BIP32 extended keys (ExtendedKey or base58 string)
    - Octets (n_size bytes or hex-string)
    - native int

    The key is never reduced modulo n:
    values not in 1..n-1 raise InvalidPrivateKeyError.
    """

    if isinstance(prv_key, ExtendedKey):
        return _int_from_xprv(prv_key, ec)

    if isinstance(prv_key, int):
        q = prv_key
    elif isinstance(prv_key, bytes):
        q = int.from_bytes(bytes_from_octets(prv_key, ec.n_size), "big")
    else:  # hex-string or base58 xprv
        prv_key = prv_key.strip()
        try:
            q = int.from_bytes(bytes_from_octets(prv_key, ec.n_size), "big")
        except ValueError:
            try:
                xprv = ExtendedKey.b58decode(prv_key, ec)
            except ValueError as e:
                raise InvalidPrivateKeyError(f"not a private key: {prv_key}") from e
            return _int_from_xprv(xprv, ec)

    if not 0 < q < ec.n:
        err_msg = "private key not in 1..n-1: "
        err_msg += f"'{hex_string(q)}'" if q > 0 else f"{q}"
        raise InvalidPrivateKeyError(err_msg)

    return q
