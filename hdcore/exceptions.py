#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Exception classes.

The base classes are only meant to discriminate between Exceptions
being raised by hdcore from those raised by other codebase:
users are usually better off just dealing with the regular
ValueError, TypeError, and RuntimeError
from which the hdcore versions are derived.

The specialized classes allow callers to react to a specific failure,
e.g. retrying a child key derivation with the next index.
"""


class HDCoreValueError(ValueError):
    pass


class HDCoreTypeError(TypeError):
    pass


class HDCoreRuntimeError(RuntimeError):
    pass


# field arithmetic


class DivisionByZeroError(HDCoreValueError, ZeroDivisionError):
    "No modular inverse exists (e.g. for the zero field element)."


class NoSquareRootError(HDCoreValueError):
    "The field element is not a quadratic residue."


# curve points


class InvalidPointError(HDCoreValueError):
    "Not a valid point of the curve."


class PointAtInfinityError(InvalidPointError):
    "Unexpected point at infinity."


# signatures


class ZeroRError(HDCoreRuntimeError):
    "ECDSA nonce leading to r = 0: retry with the next nonce."


class ZeroSError(HDCoreRuntimeError):
    "ECDSA nonce leading to s = 0: retry with the next nonce."


class InvalidPrivateKeyError(HDCoreValueError):
    "Private key not in 1..n-1."


class InvalidInputLengthError(HDCoreValueError):
    "Octets with unexpected size."


class InvalidRecoveryIdError(HDCoreValueError):
    "ECDSA recovery id not in 0..3 or not usable."


# hierarchical deterministic keys


class PublicDerivationUnavailableError(HDCoreValueError):
    "Hardened derivation requested from a public-only extended key."


class InvalidChildKeyError(HDCoreValueError):
    "Child key derivation resulted in an invalid key: use the next index."


class InvalidPathError(HDCoreValueError):
    "Malformed BIP32 derivation path."


class InvalidSeedError(HDCoreValueError):
    "Seed of invalid size or leading to an invalid master key."
