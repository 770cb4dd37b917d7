#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Conversion utilities for the loosely typed inputs.

Octets may be bytes or hex-strings, integers may be int,
hex-strings (with or without 0x prefix), or big-endian bytes.
See SEC 1 v.2 section 2.3 for the octet conversions:
https://www.secg.org/sec1-v2.pdf
"""

from collections.abc import Iterable as IterableCollection
from io import BytesIO
from typing import Iterable, Optional, Union

from hdcore.alias import BinaryData, Integer, Octets
from hdcore.exceptions import HDCoreValueError, InvalidInputLengthError

# larger integers are printed as hex-strings in error messages
HEX_THRESHOLD = 0xFFFFFFFF

NoneOneOrMoreInt = Optional[Union[int, Iterable[int]]]


def bytes_from_octets(octets: Octets, out_size: NoneOneOrMoreInt = None) -> bytes:
    """Return bytes from bytes or hex-string (blanks are ignored).

    If out_size is an int or a collection of ints,
    the length of the result must match it.
    """

    if isinstance(octets, str):
        octets = bytes.fromhex(octets)

    if out_size is None:
        return octets
    sizes = out_size if isinstance(out_size, IterableCollection) else (out_size,)
    if len(octets) not in sizes:
        err_msg = f"invalid size: {len(octets)} bytes instead of {out_size}"
        raise InvalidInputLengthError(err_msg)
    return octets


def bytesio_from_binarydata(stream: BinaryData) -> BytesIO:
    "Return a BytesIO stream from bytes or hex-string; streams pass through."

    if isinstance(stream, (str, bytes)):
        return BytesIO(bytes_from_octets(stream))
    return stream


def int_from_bits(octets: Octets, nlen: int) -> int:
    """Return the integer of the leftmost nlen bits of the octets.

    This is bits2int of RFC 6979 section 2.3.2 and
    SEC 1 v.2 section 4.1.3 (5): the result is less than 2^nlen,
    but it is not reduced modulo n.
    """

    octets = bytes_from_octets(octets)
    i = int.from_bytes(octets, byteorder="big", signed=False)
    excess_bits = len(octets) * 8 - nlen
    return i >> excess_bits if excess_bits > 0 else i


def int_from_integer(i: Integer) -> int:
    """Return an int from its int, hex-string, or bytes representation.

    Hex-strings may have the 0x (or -0x) prefix,
    bytes are read as big-endian unsigned integer:
    3735928559, "0xdeadbeef", "deadbeef", and b'\xde\xad\xbe\xef'
    are the same integer.
    """

    if isinstance(i, int):
        return i
    if isinstance(i, bytes):
        return int.from_bytes(i, byteorder="big", signed=False)

    s = i.strip().lower()
    if s.startswith(("0x", "-0x")):
        return int(s, 16)
    return int.from_bytes(bytes.fromhex(s), byteorder="big", signed=False)


def hex_string(i: Integer) -> str:
    """Return the upper-case hex-string of a non-negative integer.

    The hex-string has an even number of digits,
    grouped by four bytes (eight digits) from the right,
    e.g. '01 00000000'.
    """

    int_ = int_from_integer(i)
    if int_ < 0:
        raise HDCoreValueError(f"negative integer: {int_}")
    digits = f"{int_:X}"
    digits = digits.zfill(len(digits) + len(digits) % 2)
    head = len(digits) % 8
    groups = [digits[:head]] if head else []
    groups += [digits[j : j + 8] for j in range(head, len(digits), 8)]
    return " ".join(groups)


def int_repr(i: int) -> str:
    "Return the decimal or (large integer) quoted hex-string representation."
    return f"'{hex_string(i)}'" if i > HEX_THRESHOLD else f"{i}"
