#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Poseidon permutation over a prime field.

https://eprint.iacr.org/2019/458.pdf

The state is a vector of t field elements.
Each round adds the round constants, applies the S-box x^alpha
and multiplies the state by the MDS matrix.
The S-box is applied to the whole state in the full rounds
and to a single element in the partial ones:
rounds_full/2 full rounds come first, then the partial rounds,
then the remaining full rounds.

The parameters (MDS matrix and round constants included) are not
generated here: they are inputs, as they are for the reference
implementations.
"""

from math import gcd
from typing import List, Sequence

from hdcore.ecc.field import FieldElement, FieldLike, PrimeField
from hdcore.exceptions import HDCoreTypeError, HDCoreValueError


class Poseidon:
    "Poseidon permutation of t field elements."

    def __init__(
        self,
        field: PrimeField,
        mds: Sequence[Sequence[FieldLike]],
        round_constants: Sequence[Sequence[FieldLike]],
        rounds_full: int,
        rounds_partial: int,
        sbox_power: int = 5,
        reverse_partial_pow_idx: bool = False,
    ) -> None:

        if not isinstance(field, PrimeField):
            raise HDCoreTypeError(f"not a PrimeField: {field!r}")
        self.field = field

        if rounds_full < 0 or rounds_full % 2:
            raise HDCoreValueError(f"invalid number of full rounds: {rounds_full}")
        if rounds_partial < 0:
            err_msg = f"invalid number of partial rounds: {rounds_partial}"
            raise HDCoreValueError(err_msg)
        self.rounds_full = rounds_full
        self.rounds_partial = rounds_partial

        # x^alpha must be a permutation of the field
        if sbox_power < 2 or gcd(sbox_power, field.p - 1) != 1:
            raise HDCoreValueError(f"invalid sbox power: {sbox_power}")
        self.sbox_power = sbox_power

        t = len(mds)
        if t < 1 or any(len(row) != t for row in mds):
            raise HDCoreValueError("invalid MDS matrix")
        self.t = t
        self.mds = [[field(x) for x in row] for row in mds]

        rounds = rounds_full + rounds_partial
        if len(round_constants) != rounds:
            err_msg = f"wrong number of round constants: {len(round_constants)}"
            err_msg += f" instead of {rounds}"
            raise HDCoreValueError(err_msg)
        if any(len(row) != t for row in round_constants):
            raise HDCoreValueError("invalid round constants")
        self.round_constants = [[field(x) for x in row] for row in round_constants]

        # the state element going through the S-box in partial rounds
        self.partial_idx = t - 1 if reverse_partial_pow_idx else 0

    def _round(self, values: List[FieldElement], i: int, full: bool) -> None:
        values[:] = [v + c for v, c in zip(values, self.round_constants[i])]
        if full:
            values[:] = [v**self.sbox_power for v in values]
        else:
            j = self.partial_idx
            values[j] = values[j] ** self.sbox_power
        zero = self.field(0)
        values[:] = [
            sum((m * v for m, v in zip(row, values)), zero) for row in self.mds
        ]

    def permute(self, values: Sequence[FieldLike]) -> List[FieldElement]:
        "Return the permutation of the t input values."

        if len(values) != self.t:
            err_msg = f"wrong number of values: {len(values)} instead of {self.t}"
            raise HDCoreValueError(err_msg)
        state = [self.field(v) for v in values]

        half = self.rounds_full // 2
        i = 0
        for _ in range(half):
            self._round(state, i, True)
            i += 1
        for _ in range(self.rounds_partial):
            self._round(state, i, False)
            i += 1
        for _ in range(half):
            self._round(state, i, True)
            i += 1
        return state

    __call__ = permute

    def hash(self, values: Sequence[FieldLike]) -> FieldElement:
        """Return the sponge hash of any number of field elements.

        The first state element is the capacity, initialized with
        the number of inputs; the other t-1 are the rate.
        Zero padding fills the last rate block.
        """

        rate = self.t - 1
        if rate < 1:
            raise HDCoreValueError(f"no sponge rate for t = {self.t}")
        state = [self.field(len(values))] + [self.field(0)] * rate
        for i in range(0, max(len(values), 1), rate):
            block = [self.field(v) for v in values[i : i + rate]]
            for j, v in enumerate(block, 1):
                state[j] += v
            state = self.permute(state)
        return state[1]
