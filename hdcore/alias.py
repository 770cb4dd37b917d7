#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Type aliases for the input conventions of the hdcore API.

Functions are lenient on input and strict on output:
they accept the representations listed here and always return
bytes, int, or tuple values.
"""

from io import BytesIO
from typing import Any, Callable, Tuple, Union

# bytes, or a hex-string accepted by bytes.fromhex
# (blanks are allowed, e.g. "0279be667e f9dcbbac"):
# digests, seeds, chain codes, BIP32 versions, SEC points, signatures.
# hdcore.utils.bytes_from_octets converts them to bytes.
Octets = Union[bytes, str]

# ascii text, e.g. a Base58Check extended key, as str or bytes;
# surrounding blanks are stripped
String = Union[bytes, str]

# a byte stream, or Octets to be wrapped in one
BinaryData = Union[BytesIO, Octets]

# int, or its big-endian bytes / hex-string representation
Integer = Union[bytes, str, int]

# hash constructor with the hashlib interface, e.g. hashlib.sha256
HashF = Callable[[], Any]

# affine point: a plain tuple, which is faster than a NamedTuple
Point = Tuple[int, int]

# Prime order groups have no affine point with y == 0,
# so any (x, 0) stands for the point at infinity.
# 5 is not the x-coordinate of any secp256k1 point.
INF = 5, 0

# Jacobian point (X, Y, Z) for the affine point (X/Z^2, Y/Z^3)
JacPoint = Tuple[int, int, int]

# Z == 0 marks infinity in Jacobian coordinates
INFJ = 7, 0, 0
