#!/usr/bin/env python3

# Copyright (C) The hdcore developers
#
# This file is part of hdcore. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdcore including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""BIP32 hierarchical deterministic keys, with SLIP-0010 master keys.

https://github.com/bitcoin/bips/blob/master/bip-0032.mediawiki
https://github.com/satoshilabs/slips/blob/master/slip-0010.md

A single seed determines a whole tree of key pairs:
backing up the seed backs up every key in the tree,
and extended public keys allow deriving the normal (non-hardened)
public children without any private key.

The master key HMAC key depends on the curve, as in SLIP-0010,
so that the same seed yields unrelated trees on different curves.

Extended keys are immutable:
derivation maps (ExtendedKey, path) to a new ExtendedKey.
Their 78 bytes serialization is

    version (4) || depth (1) || parent fingerprint (4) || index (4)
    || chain code (32) || 0x00 || prv_key, or compressed pub_key (33)
"""

import logging
from dataclasses import InitVar, dataclass, field
from typing import Any, Type, TypeVar, Union

import base58
from dataclasses_json import DataClassJsonMixin, config

from hdcore.alias import BinaryData, Octets, Point, String
from hdcore.bip32.der_path import (
    HARDENED,
    MAX_DEPTH,
    BIP32DerPath,
    indexes_from_bip32_path,
    int_from_index_str,
    str_from_index_int,
)
from hdcore.ecc.curve import CURVES, Curve, mult, secp256k1
from hdcore.ecc.sec_point import bytes_from_point, point_from_octets
from hdcore.exceptions import (
    HDCoreTypeError,
    HDCoreValueError,
    InvalidChildKeyError,
    InvalidInputLengthError,
    InvalidPathError,
    InvalidPrivateKeyError,
    InvalidSeedError,
    PublicDerivationUnavailableError,
)
from hdcore.hashes import hash160, hmac_sha512
from hdcore.network import (
    NETWORKS,
    SEED_KEYS,
    SLIP10_CURVES,
    XPRV_VERSIONS,
    XPUB_VERSIONS,
    xpub_version_from_xprv_version,
)
from hdcore.utils import bytes_from_octets, bytesio_from_binarydata, hex_string

log = logging.getLogger(__name__)

_ExtendedKey = TypeVar("_ExtendedKey", bound="ExtendedKey")
_REQUIRED_LENGTH = 78


def _hex_bytes() -> Any:
    return field(
        default=b"", metadata=config(encoder=lambda v: v.hex(), decoder=bytes.fromhex)
    )


@dataclass(frozen=True)
class ExtendedKey(DataClassJsonMixin):
    version: bytes = _hex_bytes()
    depth: int = -1
    parent_fingerprint: bytes = _hex_bytes()
    # an int, so that JSON shows it as path element (e.g. "44h")
    index: int = field(
        default=-1,
        metadata=config(encoder=str_from_index_int, decoder=int_from_index_str),
    )
    chain_code: bytes = _hex_bytes()
    # 0x00 || prv_key or compressed pub_key
    key: bytes = _hex_bytes()
    ec: Curve = field(
        default=secp256k1,
        metadata=config(encoder=lambda v: v.name, decoder=lambda v: CURVES[v]),
    )
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    @property
    def is_private(self) -> bool:
        return self.key[0] == 0

    @property
    def is_hardened(self) -> bool:
        return self.index >= HARDENED

    @property
    def is_root(self) -> bool:
        return (
            self.depth == 0
            and self.index == 0
            and self.parent_fingerprint == b"\x00" * 4
        )

    @property
    def prv_key(self) -> int:
        "Return the private key as int in 1..n-1."
        if not self.is_private:
            raise InvalidPrivateKeyError("not a private key")
        return int.from_bytes(self.key[1:], byteorder="big", signed=False)

    @property
    def prv_key_bytes(self) -> bytes:
        "Return the private key as n_size bytes."
        if not self.is_private:
            raise InvalidPrivateKeyError("not a private key")
        return self.key[1:]

    @property
    def pub_key(self) -> Point:
        "Return the public key as point tuple."
        if self.is_private:
            return mult(self.prv_key, self.ec.G, self.ec)
        return point_from_octets(self.key, self.ec)

    def pub_key_bytes(self, compressed: bool = True) -> bytes:
        "Return the SEC representation of the public key."
        if compressed and not self.is_private:
            return self.key
        return bytes_from_point(self.pub_key, self.ec, compressed)

    @property
    def identifier(self) -> bytes:
        "Return the HASH160 of the compressed public key."
        return hash160(self.pub_key_bytes())

    @property
    def fingerprint(self) -> bytes:
        "Return the first four bytes of the key identifier."
        return self.identifier[:4]

    def assert_valid(self) -> None:

        for name, size in (
            ("version", 4),
            ("parent_fingerprint", 4),
            ("chain_code", 32),
        ):
            value = getattr(self, name)
            if not isinstance(value, bytes):
                raise HDCoreTypeError(f"{name} is not an instance of bytes")
            if len(value) != size:
                err_msg = f"invalid {name.replace('_', ' ')} length: "
                err_msg += f"{len(value)} bytes instead of {size}"
                raise InvalidInputLengthError(err_msg)

        if not isinstance(self.depth, int):
            raise HDCoreTypeError("depth is not an instance of int")
        if not 0 <= self.depth <= MAX_DEPTH:
            raise HDCoreValueError(f"invalid depth: {self.depth}")

        if not isinstance(self.index, int):
            raise HDCoreTypeError("index is not an instance of int")
        if not 0 <= self.index <= 0xFFFFFFFF:
            raise HDCoreValueError(f"invalid index: {self.index}")

        if self.depth == 0:
            if self.parent_fingerprint != b"\x00" * 4:
                err_msg = "zero depth with non-zero parent fingerprint: "
                err_msg += f"0x{self.parent_fingerprint.hex()}"
                raise HDCoreValueError(err_msg)
            if self.index != 0:
                raise HDCoreValueError(f"zero depth with non-zero index: {self.index}")

        if not isinstance(self.key, bytes):
            raise HDCoreTypeError("key is not an instance of bytes")

        if self.version in XPRV_VERSIONS:
            if len(self.key) != self.ec.n_size + 1:
                err_msg = "invalid private key length: "
                err_msg += f"{len(self.key)} bytes instead of {self.ec.n_size + 1}"
                raise InvalidInputLengthError(err_msg)
            if self.key[0] != 0:
                err_msg = f"invalid private key prefix: 0x{self.key[:1].hex()}"
                raise InvalidPrivateKeyError(err_msg)
            q = int.from_bytes(self.key[1:], byteorder="big", signed=False)
            if not 0 < q < self.ec.n:
                err_msg = f"private key not in 1..n-1: '{hex_string(q)}'"
                raise InvalidPrivateKeyError(err_msg)
        elif self.version in XPUB_VERSIONS:
            if len(self.key) != self.ec.p_size + 1:
                err_msg = "invalid public key length: "
                err_msg += f"{len(self.key)} bytes instead of {self.ec.p_size + 1}"
                raise InvalidInputLengthError(err_msg)
            if self.key[0] not in (2, 3):
                err_msg = "invalid public key prefix not in (0x02, 0x03): "
                err_msg += f"0x{self.key[:1].hex()}"
                raise HDCoreValueError(err_msg)
            # raise InvalidPointError if not on curve
            point_from_octets(self.key, self.ec)
        else:
            err_msg = f"unknown extended key version: 0x{self.version.hex()}"
            raise HDCoreValueError(err_msg)

    def serialize(self, check_validity: bool = True) -> bytes:
        "Return the 78 bytes BIP32 serialization."

        if check_validity:
            self.assert_valid()
        return b"".join(
            [
                self.version,
                bytes([self.depth]),
                self.parent_fingerprint,
                self.index.to_bytes(4, "big"),
                self.chain_code,
                self.key,
            ]
        )

    def b58encode(self, check_validity: bool = True) -> str:
        "Return the Base58Check encoded serialization (e.g. 'xprv...')."
        return base58.b58encode_check(self.serialize(check_validity)).decode("ascii")

    @classmethod
    def parse(
        cls: Type[_ExtendedKey],
        xkey_bin: BinaryData,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> _ExtendedKey:
        "Return an ExtendedKey by parsing 78 bytes from binary data."

        data = bytesio_from_binarydata(xkey_bin).read(_REQUIRED_LENGTH)
        if len(data) != _REQUIRED_LENGTH:
            err_msg = f"invalid decoded length: {len(data)}"
            err_msg += f" instead of {_REQUIRED_LENGTH}"
            raise InvalidInputLengthError(err_msg)

        return cls(
            version=data[:4],
            depth=data[4],
            parent_fingerprint=data[5:9],
            index=int.from_bytes(data[9:13], "big"),
            chain_code=data[13:45],
            key=data[45:],
            ec=ec,
            check_validity=check_validity,
        )

    @classmethod
    def b58decode(
        cls: Type[_ExtendedKey],
        address: String,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> _ExtendedKey:
        "Return an ExtendedKey from its Base58Check encoding."

        if isinstance(address, str):
            address = address.strip()

        try:
            xkey_bin = base58.b58decode_check(address)
        except ValueError as e:
            raise HDCoreValueError(f"invalid base58 extended key: {e}") from e
        return cls.parse(xkey_bin, ec, check_validity)

    @classmethod
    def from_private_key(
        cls: Type[_ExtendedKey],
        prv_key: int,
        chain_code: Octets,
        ec: Curve = secp256k1,
        version: Octets = NETWORKS["mainnet"].bip32_prv,
    ) -> _ExtendedKey:
        "Return a root extended key from a private key and a chain code."

        if not 0 < prv_key < ec.n:
            err_msg = f"private key not in 1..n-1: '{hex_string(prv_key)}'"
            raise InvalidPrivateKeyError(err_msg)
        return cls(
            version=bytes_from_octets(version, 4),
            depth=0,
            parent_fingerprint=b"\x00" * 4,
            index=0,
            chain_code=bytes_from_octets(chain_code, 32),
            key=b"\x00" + prv_key.to_bytes(ec.n_size, byteorder="big", signed=False),
            ec=ec,
        )

    @classmethod
    def from_public_key(
        cls: Type[_ExtendedKey],
        pub_key: Point,
        chain_code: Octets,
        ec: Curve = secp256k1,
        version: Octets = NETWORKS["mainnet"].bip32_pub,
    ) -> _ExtendedKey:
        "Return a root extended key from a public key and a chain code."

        return cls(
            version=bytes_from_octets(version, 4),
            depth=0,
            parent_fingerprint=b"\x00" * 4,
            index=0,
            chain_code=bytes_from_octets(chain_code, 32),
            key=bytes_from_point(pub_key, ec),
            ec=ec,
        )


BIP32Key = Union[ExtendedKey, String]


def _extended_key(xkey: BIP32Key) -> ExtendedKey:
    if isinstance(xkey, ExtendedKey):
        return xkey
    return ExtendedKey.b58decode(xkey)


def master_key_from_seed(
    seed: Octets,
    version: Octets = NETWORKS["mainnet"].bip32_prv,
    ec: Curve = secp256k1,
) -> ExtendedKey:
    """Return BIP32 root master extended private key from seed.

    The seed must be 128 to 512 bits;
    the HMAC key depends on the curve (e.g. 'Bitcoin seed' for secp256k1).

    An invalid master key is rejected on secp256k1, as in BIP32;
    on the SLIP-0010 curves (e.g. secp256r1) the HMAC is re-run
    on its own output until a valid key is found.
    """

    seed = bytes_from_octets(seed)
    bitlength = len(seed) * 8
    if bitlength < 128:
        raise InvalidSeedError(f"too few bits for seed: {bitlength}")
    if bitlength > 512:
        raise InvalidSeedError(f"too many bits for seed: {bitlength}")

    version = bytes_from_octets(version, 4)
    if version not in XPRV_VERSIONS:
        raise HDCoreValueError(f"not a private key version: 0x{version.hex()}")

    try:
        hmac_key = SEED_KEYS[ec.name]  # type: ignore
    except KeyError as e:
        raise HDCoreValueError(f"no master key derivation for {ec.name}") from e

    hmac_ = hmac_sha512(hmac_key, seed)
    q = int.from_bytes(hmac_[:32], byteorder="big", signed=False)
    while not 0 < q < ec.n:
        if ec.name not in SLIP10_CURVES:
            raise InvalidSeedError("seed leading to an invalid master key")
        log.debug("invalid master key on %s: re-running the HMAC", ec.name)
        hmac_ = hmac_sha512(hmac_key, hmac_)
        q = int.from_bytes(hmac_[:32], byteorder="big", signed=False)

    return ExtendedKey.from_private_key(q, hmac_[32:], ec, version)


def rootxprv_from_seed(
    seed: Octets,
    version: Octets = NETWORKS["mainnet"].bip32_prv,
    ec: Curve = secp256k1,
) -> str:
    """Return BIP32 root master extended private key from seed."""
    return master_key_from_seed(seed, version, ec).b58encode()


def neuter(xkey: BIP32Key) -> ExtendedKey:
    """Return the extended public key of an extended private key.

    Depth, index, and chain code are unchanged:
    only the signing capability is removed.
    """

    xkey = _extended_key(xkey)
    if not xkey.is_private:
        err_msg = f"not a private key: {xkey.b58encode()}"
        raise HDCoreValueError(err_msg)

    return ExtendedKey(
        version=xpub_version_from_xprv_version(xkey.version),
        depth=xkey.depth,
        parent_fingerprint=xkey.parent_fingerprint,
        index=xkey.index,
        chain_code=xkey.chain_code,
        key=xkey.pub_key_bytes(),
        ec=xkey.ec,
    )


def xpub_from_xprv(xprv: BIP32Key) -> str:
    "Return the Base58Check extended public key of an extended private key."
    return neuter(xprv).b58encode()


def _child_key(xkey: ExtendedKey, offset: int) -> bytes:
    "Return the serialized child key, or empty bytes if invalid."

    ec = xkey.ec
    if offset >= ec.n:
        return b""
    if xkey.is_private:
        q = (xkey.prv_key + offset) % ec.n
        return b"\x00" + q.to_bytes(ec.n_size, "big") if q else b""
    Q = ec.add(xkey.pub_key, mult(offset, ec.G, ec))
    return b"" if Q[1] == 0 else bytes_from_point(Q, ec)


def _ckd(xkey: ExtendedKey, index: int) -> ExtendedKey:
    "Child key derivation at a single fixed index."

    ec = xkey.ec
    parent_pub_key = xkey.pub_key_bytes()
    if index >= HARDENED:
        if not xkey.is_private:
            err_msg = "hardened derivation from public key: "
            err_msg += str_from_index_int(index)
            raise PublicDerivationUnavailableError(err_msg)
        data = xkey.key
    else:
        data = parent_pub_key
    index_bytes = index.to_bytes(4, "big")
    hmac_ = hmac_sha512(xkey.chain_code, data + index_bytes)

    while True:
        key = _child_key(xkey, int.from_bytes(hmac_[:32], "big"))
        if key:
            break
        if ec.name not in SLIP10_CURVES:
            raise InvalidChildKeyError(f"invalid child key at index {index}")
        log.debug("invalid child key at index %s: re-running the HMAC", index)
        hmac_ = hmac_sha512(xkey.chain_code, b"\x01" + hmac_[32:] + index_bytes)

    return ExtendedKey(
        version=xkey.version,
        depth=xkey.depth + 1,
        parent_fingerprint=hash160(parent_pub_key)[:4],
        index=index,
        chain_code=hmac_[32:],
        key=key,
        ec=ec,
    )


def derive_child(
    xkey: BIP32Key, index: int, skip_invalid: bool = False
) -> ExtendedKey:
    """Derive the child extended key at the given index.

    Indexes greater than or equal to 0x80000000 are hardened
    and require a private parent key.

    If the derivation results in an invalid child key,
    InvalidChildKeyError is raised, unless skip_invalid is set:
    in this case the derivation proceeds with the next index,
    never crossing the normal/hardened boundary.
    """

    xkey = _extended_key(xkey)

    if not isinstance(index, int) or not 0 <= index <= 0xFFFFFFFF:
        raise InvalidPathError(f"invalid index: {index!r}")
    if xkey.depth >= MAX_DEPTH:
        raise InvalidPathError(f"depth greater than {MAX_DEPTH}: {xkey.depth + 1}")

    while True:
        try:
            return _ckd(xkey, index)
        except InvalidChildKeyError:
            if not skip_invalid or index + 1 in (HARDENED, 0x100000000):
                raise
            log.debug(
                "skipping invalid child key at index %s", str_from_index_int(index)
            )
            index += 1


def derive_path(
    xkey: BIP32Key, der_path: BIP32DerPath, skip_invalid: bool = False
) -> ExtendedKey:
    """Derive the extended key at the end of a derivation path.

    The path is anything accepted by indexes_from_bip32_path,
    e.g. "m/44h/0'/1H/0/10", a sequence of int, a single int,
    or the concatenation of 4-bytes indexes.
    Either the whole path is derived or an error is raised.
    """

    xkey = _extended_key(xkey)
    indexes = indexes_from_bip32_path(der_path)

    final_depth = xkey.depth + len(indexes)
    if final_depth > MAX_DEPTH:
        raise InvalidPathError(f"final depth greater than {MAX_DEPTH}: {final_depth}")

    for index in indexes:
        xkey = derive_child(xkey, index, skip_invalid)
    return xkey


def derive(xkey: BIP32Key, der_path: BIP32DerPath) -> str:
    "Return the Base58Check encoded key derived along the path."
    return derive_path(xkey, der_path).b58encode()


def derive_from_account(
    account_key: BIP32Key,
    branch: int,
    address_index: int,
    branches_0_1_only: bool = True,
    max_index: int = 0xFFFF,
) -> ExtendedKey:
    """Derive account_key/branch/address_index, both levels unhardened.

    The account key itself must be hardened.
    By default only the receive (0) and change (1) branches are allowed,
    and both branch and address index are capped at max_index.
    """

    account_key = _extended_key(account_key)

    if not account_key.is_hardened:
        raise InvalidPathError("unhardened account/master key")

    if branch >= HARDENED:
        raise InvalidPathError("invalid private derivation at branch level")
    if branch > max_index:
        raise InvalidPathError(f"too high branch: {branch}")
    if branches_0_1_only and branch not in (0, 1):
        raise InvalidPathError(f"invalid branch: {branch} not in (0, 1)")

    if address_index >= HARDENED:
        raise InvalidPathError("invalid private derivation at address index level")
    if address_index > max_index:
        raise InvalidPathError(f"too high address index: {address_index}")

    return derive_path(account_key, [branch, address_index])
