#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""BIP32 derivation paths and indexes.

Paths are accepted in several forms, all converted to a list of int:

- strings, with or without the leading "m", e.g. "m/44h/0'/1H/0/10";
  hardened indexes are marked by "h", "H", or "'"
- a sequence of int indexes, or a single int
- bytes: the concatenation of 4-bytes little-endian indexes

String paths are parsed strictly: blanks around segments are ignored,
but empty segments, non-numeric segments, a misplaced "m",
and out-of-range indexes are rejected with InvalidPathError.
"""

from typing import List, Sequence, Union

from hdcore.exceptions import InvalidPathError

HARDENED = 0x80000000
MAX_DEPTH = 255

# default hardening symbol among the possible ones: "h", "H", "'"
_HARDENING = "h"


def int_from_index_str(s: str) -> int:
    "Return the index int from its string representation (e.g. 44h)."

    s = s.strip()
    hardened = False
    if s and s[-1] in ("'", "h", "H"):
        s = s[:-1]
        hardened = True

    if not s or not (s.isascii() and s.isdigit()):
        raise InvalidPathError(f"invalid index: {s!r}")
    index = int(s)
    if not 0 <= index < HARDENED:
        raise InvalidPathError(f"invalid index: {index}")
    return index + (HARDENED if hardened else 0)


def str_from_index_int(i: int, hardening: str = _HARDENING) -> str:
    "Return the string representation of the index int."

    if hardening not in ("'", "h", "H"):
        raise InvalidPathError(f"invalid hardening symbol: {hardening}")
    if not 0 <= i <= 0xFFFFFFFF:
        raise InvalidPathError(f"invalid index: {i}")
    if i < HARDENED:
        return str(i)
    return str(i - HARDENED) + hardening


def _indexes_from_bip32_path_str(der_path: str) -> List[int]:

    steps = [x.strip() for x in der_path.split("/")]
    if steps[0] in ("m", "M"):
        steps = steps[1:]
        # "m" alone is the root
        if steps == []:
            return []
    elif steps == [""]:
        raise InvalidPathError("empty derivation path")

    return [int_from_index_str(s) for s in steps]


BIP32DerPath = Union[str, Sequence[int], int, bytes]


def indexes_from_bip32_path(der_path: BIP32DerPath) -> List[int]:
    "Return the list of integer indexes of a derivation path."

    if isinstance(der_path, str):
        indexes = _indexes_from_bip32_path_str(der_path)
    elif isinstance(der_path, int):
        indexes = [der_path]
    elif isinstance(der_path, bytes):
        if len(der_path) % 4 != 0:
            err_msg = f"index are not a multiple of 4-bytes: {len(der_path)}"
            raise InvalidPathError(err_msg)
        indexes = [
            int.from_bytes(der_path[n : n + 4], byteorder="little", signed=False)
            for n in range(0, len(der_path), 4)
        ]
    else:  # Sequence[int]
        indexes = list(der_path)

    for i in indexes:
        if not isinstance(i, int) or not 0 <= i <= 0xFFFFFFFF:
            raise InvalidPathError(f"invalid index: {i!r}")

    if len(indexes) > MAX_DEPTH:
        raise InvalidPathError(f"depth greater than {MAX_DEPTH}: {len(indexes)}")
    return indexes


def str_from_bip32_path(der_path: BIP32DerPath, hardening: str = _HARDENING) -> str:
    "Return the 'm/...' string representation of a derivation path."
    indexes = indexes_from_bip32_path(der_path)
    result = "/".join(str_from_index_int(i, hardening) for i in indexes)
    return "m" + ("/" + result if result else "")


def bytes_from_bip32_path(der_path: BIP32DerPath) -> bytes:
    "Return the little-endian 4-bytes indexes of a derivation path."
    indexes = indexes_from_bip32_path(der_path)
    result = [i.to_bytes(4, byteorder="little", signed=False) for i in indexes]
    return b"".join(result)
