#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Elliptic Curve Schnorr Signature Algorithm (ECSSA).

BIP340-Schnorr, https://github.com/bitcoin/bips/blob/master/bip-0340.mediawiki,
generalized to Schnorr schemes: a scheme is a (curve, hash function, tags)
profile, BIP340 being the secp256k1/SHA256 one.

Public keys are x-only: q and n-q are the same private key,
their public keys Q and -Q sharing the x-coordinate x_Q.
Signing negates q when needed, so that the key used has even y.

All hashes are tagged, TaggedHash(tag, x) = hf(hf(tag) || hf(tag) || x),
so that a signature is only valid for its own scheme.
The challenge commits to the public key,
c = TaggedHash(challenge_tag, x_K || x_Q || msg),
which rules out public key recovery from the signature.
A scheme may replace this challenge function,
e.g. with a Poseidon hash over the curve base field (poseidon_challenge).

Signatures are serialized as r || s,
a p_size bytes x-coordinate followed by an n_size bytes scalar:
64 bytes for the 256-bit curves.
"""

import contextlib
import secrets
from dataclasses import InitVar, dataclass, field
from hashlib import sha256
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple, Type, TypeVar, Union

from dataclasses_json import DataClassJsonMixin, config

from hdcore.alias import HashF, Integer, JacPoint, Octets, Point
from hdcore.bip32.bip32 import BIP32Key
from hdcore.ecc.curve import Curve, mult, secp256k1, secp256r1, stark
from hdcore.ecc.curve_group import _double_mult
from hdcore.ecc.poseidon import Poseidon
from hdcore.ecc.schnorr_nonce import BIP340_AUX_TAG, BIP340_NONCE_TAG, schnorr_nonce_
from hdcore.exceptions import HDCoreRuntimeError, HDCoreTypeError, HDCoreValueError
from hdcore.hashes import reduce_to_hlen, tagged_hash
from hdcore.to_prv_key import PrvKey, int_from_prv_key
from hdcore.to_pub_key import point_from_pub_key
from hdcore.utils import (
    bytes_from_octets,
    hex_string,
    int_from_bits,
    int_from_integer,
    int_repr,
)


# (x_K, x_Q, msg_hash) -> challenge, reduced mod n by the caller
ChallengeF = Callable[[int, int, bytes], int]


class SchnorrScheme:
    """Schnorr signature profile: curve, hash function, tags, and challenge.

    The challenge defaults to the tagged hash of x_K || x_Q || msg;
    any other function of (x_K, x_Q, msg_hash) can be used instead,
    e.g. an algebraic hash as poseidon_challenge.

    Schemes are compared by identity, as curves are:
    the shipped ones are listed in SCHEMES.
    """

    def __init__(
        self,
        name: str,
        ec: Curve,
        hf: HashF,
        challenge_tag: bytes,
        aux_tag: bytes,
        nonce_tag: bytes,
        challenge: Optional[ChallengeF] = None,
    ) -> None:
        self.name = name
        self.ec = ec
        self.hf = hf
        self.challenge_tag = challenge_tag
        self.aux_tag = aux_tag
        self.nonce_tag = nonce_tag
        self.challenge = self.tagged_challenge if challenge is None else challenge

    def tagged_challenge(self, x_K: int, x_Q: int, msg_hash: bytes) -> int:
        "Return the leftmost nlen bits of TaggedHash(challenge_tag, x_K||x_Q||msg)."

        ec = self.ec
        data = x_K.to_bytes(ec.p_size, "big") + x_Q.to_bytes(ec.p_size, "big")
        digest = tagged_hash(self.challenge_tag, data + msg_hash, self.hf)
        return int_from_bits(digest, ec.nlen)

    def __repr__(self) -> str:
        return f"SchnorrScheme({self.name!r})"


def poseidon_challenge(permutation: Poseidon) -> ChallengeF:
    """Return the Poseidon hash challenge function of a permutation.

    x_K, x_Q, and the message digest split in (p_size - 1)-byte chunks
    are absorbed as field elements:
    the permutation field should be the curve base field.
    """

    chunk_size = permutation.field.p_size - 1

    def challenge(x_K: int, x_Q: int, msg_hash: bytes) -> int:
        chunks = [
            int.from_bytes(msg_hash[i : i + chunk_size], "big")
            for i in range(0, len(msg_hash), chunk_size)
        ]
        return int(permutation.hash([x_K, x_Q] + chunks))

    return challenge


BIP340 = SchnorrScheme(
    "bip340",
    secp256k1,
    sha256,
    b"BIP0340/challenge",
    BIP340_AUX_TAG,
    BIP340_NONCE_TAG,
)

SCHNORR_P256 = SchnorrScheme(
    "schnorr_p256",
    secp256r1,
    sha256,
    b"HDCore/P256/challenge",
    b"HDCore/P256/aux",
    b"HDCore/P256/nonce",
)

SCHNORR_STARK = SchnorrScheme(
    "schnorr_stark",
    stark,
    sha256,
    b"HDCore/Stark/challenge",
    b"HDCore/Stark/aux",
    b"HDCore/Stark/nonce",
)

# read-only mapping: the schemes shipped with hdcore
SCHEMES: Mapping[str, SchnorrScheme] = MappingProxyType(
    {scheme.name: scheme for scheme in (BIP340, SCHNORR_P256, SCHNORR_STARK)}
)


_Sig = TypeVar("_Sig", bound="Sig")


@dataclass(frozen=True)
class Sig(DataClassJsonMixin):
    """Schnorr signature (r, s) of a given scheme.

    r is the x-coordinate of the nonce point K, in 0..p-1;
    s is a scalar in 0..n-1, zero included.
    """

    r: int = field(
        default=-1, metadata=config(encoder=hex_string, decoder=int_from_integer)
    )
    s: int = field(
        default=-1, metadata=config(encoder=hex_string, decoder=int_from_integer)
    )
    scheme: SchnorrScheme = field(
        default=BIP340,
        metadata=config(encoder=lambda v: v.name, decoder=lambda v: SCHEMES[v]),
    )
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    @property
    def ec(self) -> Curve:
        return self.scheme.ec

    def assert_valid(self) -> None:
        # raises if no curve point has x-coordinate r
        self.ec.y(self.r)
        if not 0 <= self.s < self.ec.n:
            raise HDCoreValueError(f"scalar s not in 0..n-1: {int_repr(self.s)}")

    def serialize(self, check_validity: bool = True) -> bytes:
        "Return the r || s serialization."

        if check_validity:
            self.assert_valid()
        ec = self.ec
        return self.r.to_bytes(ec.p_size, "big") + self.s.to_bytes(ec.n_size, "big")

    @classmethod
    def parse(
        cls: Type[_Sig],
        data: Octets,
        scheme: SchnorrScheme = BIP340,
        check_validity: bool = True,
    ) -> _Sig:
        "Return a Sig from its r || s serialization."

        ec = scheme.ec
        data = bytes_from_octets(data, ec.p_size + ec.n_size)
        r = int.from_bytes(data[: ec.p_size], "big")
        s = int.from_bytes(data[ec.p_size :], "big")
        return cls(r, s, scheme, check_validity)


# x-coordinate as int, x-only octets, SEC octets, BIP32 key, or point tuple
XOnlyPubKey = Union[Integer, Octets, BIP32Key, Point]


def point_from_xonly_pub_key(x_Q: XOnlyPubKey, ec: Curve = secp256k1) -> Point:
    """Return the even-y point of an x-only public key.

    Besides the plain x-coordinate (as int or p_size octets),
    any public key accepted by point_from_pub_key is supported:
    its y-coordinate is discarded.
    """

    if isinstance(x_Q, int):
        return x_Q, ec.y_even(x_Q)

    with contextlib.suppress(HDCoreValueError):
        x_Q = point_from_pub_key(x_Q, ec)[0]  # type: ignore
        return x_Q, ec.y_even(x_Q)

    if isinstance(x_Q, (str, bytes)):
        x_Q = int.from_bytes(bytes_from_octets(x_Q, ec.p_size), "big")
        return x_Q, ec.y_even(x_Q)

    raise HDCoreTypeError("not an x-only public key")


def gen_keys(
    prv_key: Optional[PrvKey] = None, scheme: SchnorrScheme = BIP340
) -> Tuple[int, int]:
    """Return a (q, x_Q) key pair.

    q is negated, if needed, so that q*G has even y.
    """

    ec = scheme.ec
    if prv_key is None:
        q = 1 + secrets.randbelow(ec.n - 1)
    else:
        q = int_from_prv_key(prv_key, ec)

    x_Q, y_Q = mult(q, ec.G, ec)
    return (ec.n - q if y_Q % 2 else q), x_Q


def challenge_(msg_hash: Octets, x_Q: int, x_K: int, scheme: SchnorrScheme) -> int:
    "Return the scheme challenge of (x_K, x_Q, msg) mod n."

    msg_hash = bytes_from_octets(msg_hash, scheme.hf().digest_size)
    return scheme.challenge(x_K, x_Q, msg_hash) % scheme.ec.n


def _sign_(c: int, q: int, nonce: int, r: int, scheme: SchnorrScheme) -> Sig:
    # c in 0..n-1, q and nonce in 1..n-1, all already adjusted for even y;
    # c is an argument so that tests can cover all of its values
    # s == 0 is valid: verification never inverts s
    return Sig(r, (nonce + c * q) % scheme.ec.n, scheme)


def sign_(
    msg_hash: Octets,
    prv_key: PrvKey,
    aux: Optional[Octets] = None,
    scheme: SchnorrScheme = BIP340,
) -> Sig:
    """Schnorr signature of a hf digest.

    The nonce comes from schnorr_nonce_ with the scheme tags;
    aux is its additional randomness, fresh random bytes by default.
    """

    k, x_K, q, x_Q = schnorr_nonce_(
        msg_hash,
        prv_key,
        aux,
        scheme.ec,
        scheme.hf,
        scheme.aux_tag,
        scheme.nonce_tag,
    )
    c = challenge_(msg_hash, x_Q, x_K, scheme)
    return _sign_(c, q, k, x_K, scheme)


def sign(
    msg: Octets,
    prv_key: PrvKey,
    aux: Optional[Octets] = None,
    scheme: SchnorrScheme = BIP340,
) -> Sig:
    """Schnorr signature of the message hf(msg), hf being the scheme hash.

    Digest and curve sizes need not match:
    the challenge keeps the leftmost nlen bits of the tagged hash.
    """

    return sign_(reduce_to_hlen(msg, scheme.hf), prv_key, aux, scheme)


def _assert_as_valid_(c: int, QJ: JacPoint, r: int, s: int, ec: Curve) -> None:
    # K = s*G - c*Q must have even y (so it is not INF) and x_K == r
    KJ = _double_mult(ec.n - c, QJ, s, ec.GJ, ec)
    if ec.y_aff_from_jac(KJ) % 2:
        raise HDCoreRuntimeError("y_K is odd")
    # x_K == X/Z^2, compared without inversion
    if KJ[0] != KJ[2] * KJ[2] * r % ec.p:
        raise HDCoreRuntimeError("signature verification failed")


def _sig_from(sig: Union[Sig, Octets], scheme: Optional[SchnorrScheme]) -> Sig:
    if isinstance(sig, Sig):
        if scheme is not None and sig.scheme != scheme:
            err_msg = f"scheme mismatch: {sig.scheme.name} instead of {scheme.name}"
            raise HDCoreValueError(err_msg)
        sig.assert_valid()
        return sig
    return Sig.parse(sig, BIP340 if scheme is None else scheme)


def assert_as_valid_(
    msg_hash: Octets,
    Q: XOnlyPubKey,
    sig: Union[Sig, Octets],
    scheme: Optional[SchnorrScheme] = None,
) -> None:
    """Raise an error if sig is not a valid signature of the digest.

    A Sig carries its own scheme, which must match scheme if provided;
    serialized signatures are parsed according to scheme (BIP340 if None).
    """

    sig = _sig_from(sig, scheme)
    x_Q, y_Q = point_from_xonly_pub_key(Q, sig.ec)
    c = challenge_(msg_hash, x_Q, sig.r, sig.scheme)
    _assert_as_valid_(c, (x_Q, y_Q, 1), sig.r, sig.s, sig.ec)


def assert_as_valid(
    msg: Octets,
    Q: XOnlyPubKey,
    sig: Union[Sig, Octets],
    scheme: Optional[SchnorrScheme] = None,
) -> None:
    if scheme is None:
        scheme = sig.scheme if isinstance(sig, Sig) else BIP340
    assert_as_valid_(reduce_to_hlen(msg, scheme.hf), Q, sig, scheme)


def verify_(
    msg_hash: Octets,
    Q: XOnlyPubKey,
    sig: Union[Sig, Octets],
    scheme: Optional[SchnorrScheme] = None,
) -> bool:
    "Return True if sig is a valid Schnorr signature of the digest."

    try:
        assert_as_valid_(msg_hash, Q, sig, scheme)
    except Exception:  # pylint: disable=broad-except
        return False
    return True


def verify(
    msg: Octets,
    Q: XOnlyPubKey,
    sig: Union[Sig, Octets],
    scheme: Optional[SchnorrScheme] = None,
) -> bool:
    "Return True if sig is a valid Schnorr signature of the message."

    try:
        assert_as_valid(msg, Q, sig, scheme)
    except Exception:  # pylint: disable=broad-except
        return False
    return True
