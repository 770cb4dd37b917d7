#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Prime field Fp and its elements.

PrimeField binds an odd prime modulus p at construction time;
FieldElement is an immutable value in canonical reduced form,
i.e. an integer in [0, p).

All arithmetic is arbitrary-precision:
field primes exceed 2^250 for the supported curves.

Square roots are returned in canonical form:
of the two roots r and p-r of a non-zero quadratic residue,
the even one is returned
(this is the parity convention used in point decompression).
"""

from dataclasses import dataclass
from math import ceil
from typing import Union

from hdcore.alias import Octets
from hdcore.ecc.number_theory import (
    is_probable_prime,
    legendre_symbol,
    mod_inv,
    mod_sqrt,
)
from hdcore.exceptions import HDCoreTypeError, HDCoreValueError
from hdcore.utils import bytes_from_octets, int_from_integer, int_repr


@dataclass(frozen=True)
class PrimeField:
    "Finite field of integers modulo an odd prime p."

    p: int

    def __post_init__(self) -> None:
        if not isinstance(self.p, int):
            raise HDCoreTypeError(f"not an int field modulus: {self.p!r}")
        if not is_probable_prime(self.p):
            raise HDCoreValueError(f"p is not an odd prime: {int_repr(self.p)}")

    @property
    def p_size(self) -> int:
        "Byte size of the field elements."
        return ceil(self.p.bit_length() / 8)

    def __call__(self, value: "FieldLike") -> "FieldElement":
        "Return the field element of the (reduced) integer value."
        return FieldElement(self._int(value), self)

    def __contains__(self, element: object) -> bool:
        return isinstance(element, FieldElement) and element.field == self

    def _int(self, a: "FieldLike") -> int:
        if isinstance(a, FieldElement):
            if a.field != self:
                err_msg = f"field mismatch: {int_repr(a.field.p)} "
                err_msg += f"instead of {int_repr(self.p)}"
                raise HDCoreValueError(err_msg)
            return a.value
        return int_from_integer(a) % self.p

    def add(self, a: "FieldLike", b: "FieldLike") -> "FieldElement":
        return FieldElement((self._int(a) + self._int(b)) % self.p, self)

    def sub(self, a: "FieldLike", b: "FieldLike") -> "FieldElement":
        return FieldElement((self._int(a) - self._int(b)) % self.p, self)

    def neg(self, a: "FieldLike") -> "FieldElement":
        return FieldElement(-self._int(a) % self.p, self)

    def mul(self, a: "FieldLike", b: "FieldLike") -> "FieldElement":
        return FieldElement(self._int(a) * self._int(b) % self.p, self)

    def inv(self, a: "FieldLike") -> "FieldElement":
        """Return the multiplicative inverse.

        The zero element has no inverse: DivisionByZeroError is raised.
        """
        return FieldElement(mod_inv(self._int(a), self.p), self)

    def div(self, a: "FieldLike", b: "FieldLike") -> "FieldElement":
        return self.mul(a, self.inv(b))

    def pow(self, a: "FieldLike", e: int) -> "FieldElement":
        "Exponentiation by repeated squaring; negative e uses the inverse."
        base = self._int(a)
        if e < 0:
            base = mod_inv(base, self.p)
            e = -e
        return FieldElement(pow(base, e, self.p), self)

    def is_square(self, a: "FieldLike") -> bool:
        "Return True if a is zero or a quadratic residue."
        return legendre_symbol(self._int(a), self.p) != -1

    def sqrt(self, a: "FieldLike") -> "FieldElement":
        """Return the even square root of a.

        The other root is its opposite (p - r).
        NoSquareRootError is raised if a is not a quadratic residue.
        """
        r = mod_sqrt(self._int(a), self.p)
        return FieldElement(self.p - r if r & 1 else r, self)

    def from_bytes(self, octets: Octets) -> "FieldElement":
        "Return the field element from p_size big-endian bytes, with reduction."
        b = bytes_from_octets(octets, self.p_size)
        return self(int.from_bytes(b, byteorder="big", signed=False))

    def to_bytes(self, a: "FieldLike") -> bytes:
        return self._int(a).to_bytes(self.p_size, byteorder="big", signed=False)


@dataclass(frozen=True)
class FieldElement:
    "Element of a prime field, always in canonical reduced form."

    value: int
    field: PrimeField

    def __post_init__(self) -> None:
        if not 0 <= self.value < self.field.p:
            err_msg = f"value not in 0..p-1: {int_repr(self.value)}"
            raise HDCoreValueError(err_msg)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __bytes__(self) -> bytes:
        return self.field.to_bytes(self)

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    @property
    def is_even(self) -> bool:
        return self.value & 1 == 0

    def __add__(self, other: "FieldLike") -> "FieldElement":
        return self.field.add(self, other)

    def __radd__(self, other: "FieldLike") -> "FieldElement":
        return self.field.add(other, self)

    def __sub__(self, other: "FieldLike") -> "FieldElement":
        return self.field.sub(self, other)

    def __rsub__(self, other: "FieldLike") -> "FieldElement":
        return self.field.sub(other, self)

    def __neg__(self) -> "FieldElement":
        return self.field.neg(self)

    def __mul__(self, other: "FieldLike") -> "FieldElement":
        return self.field.mul(self, other)

    def __rmul__(self, other: "FieldLike") -> "FieldElement":
        return self.field.mul(other, self)

    def __truediv__(self, other: "FieldLike") -> "FieldElement":
        return self.field.div(self, other)

    def __rtruediv__(self, other: "FieldLike") -> "FieldElement":
        return self.field.div(other, self)

    def __pow__(self, e: int) -> "FieldElement":
        return self.field.pow(self, e)

    def inv(self) -> "FieldElement":
        return self.field.inv(self)

    def sqrt(self) -> "FieldElement":
        return self.field.sqrt(self)


FieldLike = Union[FieldElement, int, bytes, str]
