#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Elliptic Curve Digital Signature Algorithm (ECDSA).

Implementation according to SEC 1 v.2:

http://www.secg.org/sec1-v2.pdf

specialized with bitcoin canonical 'low-s' form
to avoid producing malleable signatures.

Signatures carry an optional recovery id (0..3):

* bit 0 is the parity of the y-coordinate of the nonce point R
* bit 1 is set if the x-coordinate of R overflowed the group order n

When the signature is normalized to low-s, R is negated:
its y parity flips and bit 0 of the recovery id flips with it.
"""

import contextlib
import logging
import secrets
from dataclasses import InitVar, dataclass, field
from hashlib import sha256
from io import BytesIO
from typing import List, Optional, Tuple, Type, TypeVar, Union

from dataclasses_json import DataClassJsonMixin, config

from hdcore.alias import BinaryData, HashF, JacPoint, Octets, Point
from hdcore.ecc.curve import CURVES, Curve, secp256k1
from hdcore.ecc.curve_group import _double_mult
from hdcore.ecc.number_theory import mod_inv
from hdcore.ecc.rfc6979_nonce import challenge_, rfc6979_nonces_
from hdcore.ecc.wnaf import _mult
from hdcore.exceptions import (
    HDCoreRuntimeError,
    HDCoreValueError,
    InvalidInputLengthError,
    InvalidPointError,
    InvalidRecoveryIdError,
    PointAtInfinityError,
    ZeroRError,
    ZeroSError,
)
from hdcore.hashes import reduce_to_hlen
from hdcore.to_prv_key import PrvKey, int_from_prv_key
from hdcore.to_pub_key import Key, point_from_key
from hdcore.utils import (
    bytes_from_octets,
    bytesio_from_binarydata,
    hex_string,
    int_from_integer,
    int_repr,
)

log = logging.getLogger(__name__)

_DER_INTEGER = 0x02
_DER_SEQUENCE = 0x30


def _der_tlv(tag: int, value: bytes) -> bytes:
    # short-form length only: DER values here never exceed 127 bytes
    return bytes([tag, len(value)]) + value


def _der_integer(scalar: int) -> bytes:
    # one extra byte leaves room for the sign bit
    value = scalar.to_bytes(scalar.bit_length() // 8 + 1, byteorder="big")
    return _der_tlv(_DER_INTEGER, value)


def _read_der_length(stream: BytesIO) -> int:
    size = stream.read(1)
    if not size:
        raise InvalidInputLengthError("missing DER length")
    if not 0 < size[0] < 0x80:
        raise InvalidInputLengthError(f"invalid DER length: {size[0]}")
    return size[0]


def _read_der_integer(stream: BytesIO) -> int:
    tag = stream.read(1)
    if tag != bytes([_DER_INTEGER]):
        err_msg = f"invalid value header: {tag.hex()}"
        err_msg += f", instead of integer element {_DER_INTEGER:02x}"
        raise HDCoreValueError(err_msg)

    size = _read_der_length(stream)
    value = stream.read(size)
    if len(value) != size:
        raise InvalidInputLengthError("not enough bytes for scalar")
    # minimal encoding: a leading zero only in front of the sign bit
    if size > 1 and value[0] == 0 and value[1] < 0x80:
        raise HDCoreValueError("invalid 'highest bit set' padding")
    if value[0] & 0x80:
        raise HDCoreValueError("invalid negative scalar")
    return int.from_bytes(value, byteorder="big", signed=False)


_Sig = TypeVar("_Sig", bound="Sig")


@dataclass(frozen=True)
class Sig(DataClassJsonMixin):
    """ECDSA signature.

    Compact serialization is r || s, each scalar being n_size bytes,
    optionally followed by the recovery id byte;
    strict ASN.1 DER serialization (BIP66) is also available:

    [0x30] [data-size][0x02][r-size][r][0x02][s-size][s]
    """

    # scalar, 0 < r < ec.n (ec.n is the curve order)
    r: int = field(
        default=-1, metadata=config(encoder=hex_string, decoder=int_from_integer)
    )
    # scalar, 0 < s < ec.n
    s: int = field(
        default=-1, metadata=config(encoder=hex_string, decoder=int_from_integer)
    )
    ec: Curve = field(
        default=secp256k1,
        metadata=config(encoder=lambda v: v.name, decoder=lambda v: CURVES[v]),
    )
    recovery_id: Optional[int] = None
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    def _r_is_x_coordinate(self) -> bool:
        # r = x_R mod n for some valid x_R in 0..p-1
        for x_R in range(self.r, self.ec.p, self.ec.n):
            with contextlib.suppress(InvalidPointError):
                self.ec.y(x_R)
                return True
        return False

    def assert_valid(self) -> None:

        if not 0 < self.r < self.ec.n:
            raise HDCoreValueError(f"scalar r not in 1..n-1: {int_repr(self.r)}")
        if not self._r_is_x_coordinate():
            err_msg = "r is not (congruent to) a valid x-coordinate: "
            err_msg += int_repr(self.r)
            raise HDCoreValueError(err_msg)

        if not 0 < self.s < self.ec.n:
            raise HDCoreValueError(f"scalar s not in 1..n-1: {int_repr(self.s)}")

        if self.recovery_id is not None and self.recovery_id not in range(4):
            err_msg = f"invalid recovery id: {self.recovery_id}"
            raise InvalidRecoveryIdError(err_msg)

    def serialize(self, check_validity: bool = True) -> bytes:
        "Return the compact r || s serialization."

        if check_validity:
            self.assert_valid()

        n_size = self.ec.n_size
        r = self.r.to_bytes(n_size, byteorder="big", signed=False)
        return r + self.s.to_bytes(n_size, byteorder="big", signed=False)

    def serialize_recoverable(self, check_validity: bool = True) -> bytes:
        "Return the compact r || s || recovery_id serialization."

        if self.recovery_id is None:
            raise InvalidRecoveryIdError("missing recovery id")
        return self.serialize(check_validity) + bytes([self.recovery_id])

    @classmethod
    def parse(
        cls: Type[_Sig],
        data: Octets,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> _Sig:
        "Return a Sig from its compact (optionally recoverable) serialization."

        n_size = ec.n_size
        data = bytes_from_octets(data, (2 * n_size, 2 * n_size + 1))

        r = int.from_bytes(data[:n_size], byteorder="big", signed=False)
        s = int.from_bytes(data[n_size : 2 * n_size], byteorder="big", signed=False)
        recovery_id = data[2 * n_size] if len(data) > 2 * n_size else None
        return cls(r, s, ec, recovery_id, check_validity)

    def der_serialize(self, check_validity: bool = True) -> bytes:
        """Return the strict ASN.1 DER serialization (BIP66).

        SEQUENCE { INTEGER r, INTEGER s }: the recovery id is lost.
        """

        if check_validity:
            self.assert_valid()

        body = _der_integer(self.r) + _der_integer(self.s)
        return _der_tlv(_DER_SEQUENCE, body)

    @classmethod
    def der_parse(
        cls: Type[_Sig],
        data: BinaryData,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> _Sig:
        """Return a Sig from its strict ASN.1 DER serialization.

        Non-minimal integers, negative integers, long-form lengths,
        and trailing bytes inside the sequence are all rejected,
        as any of them would make the signature malleable.
        """

        stream = bytesio_from_binarydata(data)

        tag = stream.read(1)
        if tag != bytes([_DER_SEQUENCE]):
            err_msg = f"invalid compound header: {tag.hex()}"
            err_msg += f", instead of DER sequence tag {_DER_SEQUENCE:02x}"
            raise HDCoreValueError(err_msg)

        size = _read_der_length(stream)
        body = stream.read(size)
        if len(body) != size:
            raise InvalidInputLengthError("not enough bytes for DER sequence")

        body_stream = BytesIO(body)
        r = _read_der_integer(body_stream)
        s = _read_der_integer(body_stream)
        if body_stream.read(1):
            raise HDCoreValueError("invalid DER sequence length")

        return cls(r, s, ec, None, check_validity)


def gen_keys(
    prv_key: Optional[PrvKey] = None, ec: Curve = secp256k1
) -> Tuple[int, Point]:
    "Return a private/public (int, Point) key-pair."

    if prv_key is None:
        # q in the range [1, ec.n-1]
        q = 1 + secrets.randbelow(ec.n - 1)
    else:
        q = int_from_prv_key(prv_key, ec)

    QJ = _mult(q, ec.GJ, ec)
    Q = ec.aff_from_jac(QJ)
    return q, Q


def _sign_(c: int, q: int, nonce: int, lower_s: bool, ec: Curve) -> Sig:
    # SEC 1 v.2 section 4.1.3, steps 1 to 6,
    # with c in 0..n-1 and both q and nonce in 1..n-1;
    # c is an argument so that tests can cover all of its values

    x_K, y_K = ec.aff_from_jac(_mult(nonce, ec.GJ, ec))
    r = x_K % ec.n
    if r == 0:
        raise ZeroRError("failed to sign: r = 0")
    s = mod_inv(nonce, ec.n) * (c + r * q) % ec.n
    if s == 0:
        raise ZeroSError("failed to sign: s = 0")

    # bit 0: parity of y_K; bit 1: x_K >= n
    overflow = x_K // ec.n
    recovery_id = None if overflow > 1 else (overflow << 1) | (y_K & 1)

    # -K has the same r: negating s selects it
    if lower_s and s > ec.n // 2:
        s = ec.n - s
        if recovery_id is not None:
            recovery_id ^= 1

    return Sig(r, s, ec, recovery_id)


def sign_(
    msg_hash: Octets,
    prv_key: PrvKey,
    nonce: Optional[PrvKey] = None,
    lower_s: bool = True,
    ec: Curve = secp256k1,
    hf: HashF = sha256,
) -> Sig:
    """ECDSA signature of a hf digest.

    Without a nonce, RFC 6979 candidates are tried in turn
    until neither r nor s is zero.
    A nonce provided by the caller is used as is:
    ZeroRError or ZeroSError propagate.
    """

    c = challenge_(msg_hash, ec, hf)
    q = int_from_prv_key(prv_key, ec)

    if nonce is not None:
        return _sign_(c, q, int_from_prv_key(nonce, ec), lower_s, ec)

    candidates = rfc6979_nonces_(c, q, ec, hf)
    while True:
        try:
            return _sign_(c, q, next(candidates), lower_s, ec)
        except (ZeroRError, ZeroSError) as e:
            log.debug("%s: using the next RFC6979 nonce", e)


def sign(
    msg: Octets,
    prv_key: PrvKey,
    nonce: Optional[PrvKey] = None,
    lower_s: bool = True,
    ec: Curve = secp256k1,
    hf: HashF = sha256,
) -> Sig:
    """ECDSA signature (SEC 1 v.2 section 4.1.3) of the message hf(msg).

    Any combination of hash length and curve size is accepted:
    the digest is truncated to the leftmost nlen bits.
    The nonce is deterministic (RFC 6979), unless provided,
    and the signature is normalized to low-s by default.
    """

    return sign_(reduce_to_hlen(msg, hf), prv_key, nonce, lower_s, ec, hf)


def _assert_as_valid_(
    c: int, QJ: JacPoint, r: int, s: int, lower_s: bool, ec: Curve
) -> None:
    # SEC 1 v.2 section 4.1.4, steps 4 to 8

    if lower_s and s > ec.n // 2:
        raise HDCoreValueError("not a low s")

    s_inv = mod_inv(s, ec.n)
    # K = (c/s)*G + (r/s)*Q
    KJ = _double_mult(r * s_inv % ec.n, QJ, c * s_inv % ec.n, ec.GJ, ec)
    if KJ[2] == 0:
        raise HDCoreRuntimeError("invalid (INF) key")
    if ec.x_aff_from_jac(KJ) % ec.n != r:
        raise HDCoreRuntimeError("signature verification failed")


def _sig_from(sig: Union[Sig, Octets], ec: Optional[Curve]) -> Sig:
    if isinstance(sig, Sig):
        if ec is not None and sig.ec != ec:
            err_msg = f"curve mismatch: {sig.ec.name} instead of {ec.name}"
            raise HDCoreValueError(err_msg)
        sig.assert_valid()
        return sig
    return Sig.parse(sig, secp256k1 if ec is None else ec)


def assert_as_valid_(
    msg_hash: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = False,
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> None:
    """Raise an error if sig is not a valid signature of the digest.

    Serialized signatures are parsed on ec (secp256k1 by default);
    a Sig instance must have been made on ec, if ec is given.
    """

    sig = _sig_from(sig, ec)
    c = challenge_(msg_hash, sig.ec, hf)
    x_Q, y_Q = point_from_key(key, sig.ec)
    _assert_as_valid_(c, (x_Q, y_Q, 1), sig.r, sig.s, lower_s, sig.ec)


def assert_as_valid(
    msg: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = False,
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> None:
    "Raise an error if sig is not a valid signature of hf(msg)."

    assert_as_valid_(reduce_to_hlen(msg, hf), key, sig, lower_s, hf, ec)


def verify_(
    msg_hash: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = False,
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> bool:
    """Return True if sig is a valid ECDSA signature of the digest.

    If lower_s is set, high-s signatures are rejected.
    No error is ever raised: malformed inputs just return False.
    """

    try:
        assert_as_valid_(msg_hash, key, sig, lower_s, hf, ec)
    except Exception:  # pylint: disable=broad-except
        return False
    return True


def verify(
    msg: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = False,
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> bool:
    """ECDSA signature verification (SEC 1 v.2 section 4.1.4)."""

    return verify_(reduce_to_hlen(msg, hf), key, sig, lower_s, hf, ec)


def _recover_pub_key_(
    recovery_id: int, c: int, r: int, s: int, ec: Curve
) -> JacPoint:
    # SEC 1 v.2 section 4.1.6, steps 1.1 to 1.6 for j = recovery_id >> 1

    if recovery_id not in range(4):
        raise InvalidRecoveryIdError(f"invalid recovery id: {recovery_id}")

    x_K = r + (recovery_id >> 1) * ec.n
    if x_K >= ec.p:
        err_msg = f"invalid recovery id: {recovery_id}"
        err_msg += f" (x-coordinate {int_repr(x_K)} not in field)"
        raise InvalidRecoveryIdError(err_msg)
    y_K = ec.y_odd(x_K) if recovery_id & 1 else ec.y_even(x_K)

    # Q = (s/r)*K - (c/r)*G
    r_inv = mod_inv(r, ec.n)
    KJ = x_K, y_K, 1
    QJ = _double_mult(r_inv * s % ec.n, KJ, -r_inv * c % ec.n, ec.GJ, ec)
    if QJ[2] == 0:
        raise PointAtInfinityError("recovered key is the infinity point")
    _assert_as_valid_(c, QJ, r, s, False, ec)
    return QJ


def recover_pub_key_(
    msg_hash: Octets,
    sig: Union[Sig, Octets],
    recovery_id: Optional[int] = None,
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> Point:
    """Return the public key that sig verifies for, given the digest.

    The recovery id defaults to the one carried by the signature.
    SEC 1 v.2 section 4.1.6, see also
    https://crypto.stackexchange.com/questions/18105
    """

    sig = _sig_from(sig, ec)
    if recovery_id is None:
        recovery_id = sig.recovery_id
    if recovery_id is None:
        raise InvalidRecoveryIdError("missing recovery id")

    c = challenge_(msg_hash, sig.ec, hf)
    QJ = _recover_pub_key_(recovery_id, c, sig.r, sig.s, sig.ec)
    return sig.ec.aff_from_jac(QJ)


def recover_pub_key(
    msg: Octets,
    sig: Union[Sig, Octets],
    recovery_id: Optional[int] = None,
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> Point:
    "Return the public key that sig verifies for, given the message."

    return recover_pub_key_(reduce_to_hlen(msg, hf), sig, recovery_id, hf, ec)


def recover_pub_keys_(
    msg_hash: Octets,
    sig: Union[Sig, Octets],
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> List[Point]:
    "Return all the public keys (up to four) a signature verifies for."

    sig = _sig_from(sig, ec)
    c = challenge_(msg_hash, sig.ec, hf)

    keys: List[Point] = []
    for recovery_id in range(4):
        with contextlib.suppress(HDCoreValueError, HDCoreRuntimeError):
            QJ = _recover_pub_key_(recovery_id, c, sig.r, sig.s, sig.ec)
            keys.append(sig.ec.aff_from_jac(QJ))
    return keys


def recover_pub_keys(
    msg: Octets,
    sig: Union[Sig, Octets],
    hf: HashF = sha256,
    ec: Optional[Curve] = None,
) -> List[Point]:
    "Return all the public keys (up to four) a signature verifies for."

    return recover_pub_keys_(reduce_to_hlen(msg, hf), sig, hf, ec)
