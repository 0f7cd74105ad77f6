# Copyright (C) 2018-2025 The fork-signer developers
#
# This file is part of fork-signer
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of fork-signer, including this file, may be copied, modified,
# propagated, or distributed except according to the terms contained in the
# LICENSE file.

"""BIP32 hierarchical deterministic keys.

Private derivation is used by the keystore to obtain signing keys; public
derivation lets change addresses be computed from the account xpub alone.
"""

from __future__ import annotations

import hashlib
import hmac
import struct

from forksigner.constants import (
    EXTENDED_KEY_SIZE,
    HARDENED_OFFSET,
    SECP256K1_ORDER,
    TPRV_VERSION,
    TPUB_VERSION,
    XPRV_VERSION,
    XPUB_VERSION,
)
from forksigner.errors import KeyDerivationError
from forksigner.keys import PrivateKey, PublicKey
from forksigner.utils import b58check_decode, b58check_encode, b_to_i, i_to_b32

_PUBLIC_VERSIONS = {XPRV_VERSION: XPUB_VERSION, TPRV_VERSION: TPUB_VERSION}


def parse_path(path: str) -> list[int]:
    """Parses "m/44'/2'/0'/0/1" (or a relative "0/1") into child indexes

    Raises
    ------
    KeyDerivationError
        if a component is not a valid (optionally hardened) index
    """
    parts = path.strip().split("/")
    if parts[0] == "m":
        parts = parts[1:]

    indexes = []
    for part in parts:
        hardened = part.endswith("'") or part.endswith("h")
        digits = part[:-1] if hardened else part
        if not digits.isdigit():
            raise KeyDerivationError(f"Invalid derivation path component {part!r} in {path!r}")
        index = int(digits)
        if index >= HARDENED_OFFSET:
            raise KeyDerivationError(f"Derivation index too large in {path!r}")
        indexes.append(index + HARDENED_OFFSET if hardened else index)
    return indexes


def get_account_path(path: str) -> str:
    """Truncates a full derivation path to the account level

    e.g. m/44'/2'/0'/0/0 -> m/44'/2'/0'
    """
    parse_path(path)
    children = path.strip().split("/")
    if len(children) < 4:
        raise KeyDerivationError(f"{path} path is too short")
    return "/".join(children[:4])


class HDPublicKey:
    """An extended public key: a public key plus the chain code

    Attributes
    ----------
    public_key : PublicKey
    chain_code : bytes
    depth : int
    parent_fingerprint : bytes
    child_number : int
    version : bytes
    """

    def __init__(
        self,
        public_key: PublicKey,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b"\x00\x00\x00\x00",
        child_number: int = 0,
        version: bytes = XPUB_VERSION,
    ) -> None:
        self.public_key = public_key
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_number = child_number
        self.version = version

    @classmethod
    def from_xpub(cls, xpub: str) -> HDPublicKey:
        """Parses a serialized extended public key (xpub, tpub, Ltub...)

        Raises
        ------
        KeyDerivationError
            if the string is not a valid extended public key
        """
        try:
            data = b58check_decode(xpub)
        except ValueError as e:
            raise KeyDerivationError(f"Invalid extended public key: {e}") from e
        if len(data) != EXTENDED_KEY_SIZE:
            raise KeyDerivationError("Invalid extended public key length")

        version, depth, fingerprint, child_number, chain_code, key = _unpack(data)
        try:
            public_key = PublicKey.from_bytes(key)
        except ValueError as e:
            raise KeyDerivationError("Invalid public key in xpub") from e
        return cls(public_key, chain_code, depth, fingerprint, child_number, version)

    def fingerprint(self) -> bytes:
        return self.public_key.to_hash160()[:4]

    def to_xpub(self) -> str:
        return b58check_encode(
            _pack(
                self.version,
                self.depth,
                self.parent_fingerprint,
                self.child_number,
                self.chain_code,
                self.public_key.to_bytes(),
            )
        )

    def derive(self, path: str) -> HDPublicKey:
        """Derives a non-hardened descendant, e.g. derive("0/5")"""
        key = self
        for index in parse_path(path):
            key = key._derive_child(index)
        return key

    def _derive_child(self, index: int) -> HDPublicKey:
        if index >= HARDENED_OFFSET:
            raise KeyDerivationError("Cannot derive a hardened child from a public key")

        data = self.public_key.to_bytes() + struct.pack(">I", index)
        digest = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        tweak, child_chain = digest[:32], digest[32:]

        if b_to_i(tweak) >= SECP256K1_ORDER:
            raise KeyDerivationError(f"Invalid child key at index {index}")
        try:
            child = self.public_key.key.add(tweak)
        except ValueError as e:
            raise KeyDerivationError(f"Invalid child key at index {index}") from e

        return HDPublicKey(
            PublicKey.from_bytes(child.format(compressed=True)),
            child_chain,
            self.depth + 1,
            self.fingerprint(),
            index,
            self.version,
        )


class HDPrivateKey:
    """An extended private key

    Attributes
    ----------
    private_key : PrivateKey
    chain_code : bytes
    depth : int
    parent_fingerprint : bytes
    child_number : int
    version : bytes
    """

    def __init__(
        self,
        private_key: PrivateKey,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b"\x00\x00\x00\x00",
        child_number: int = 0,
        version: bytes = XPRV_VERSION,
    ) -> None:
        self.private_key = private_key
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_number = child_number
        self.version = version

    @classmethod
    def from_seed(cls, seed: bytes, version: bytes = XPRV_VERSION) -> HDPrivateKey:
        """Creates the master key from a seed"""
        digest = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        try:
            private_key = PrivateKey.from_bytes(digest[:32])
        except ValueError as e:
            raise KeyDerivationError("Seed produces an invalid master key") from e
        return cls(private_key, digest[32:], version=version)

    @classmethod
    def from_xprv(cls, xprv: str) -> HDPrivateKey:
        """Parses a serialized extended private key

        Raises
        ------
        KeyDerivationError
            if the string is not a valid extended private key
        """
        try:
            data = b58check_decode(xprv)
        except ValueError as e:
            raise KeyDerivationError(f"Invalid extended private key: {e}") from e
        if len(data) != EXTENDED_KEY_SIZE:
            raise KeyDerivationError("Invalid extended private key length")

        version, depth, fingerprint, child_number, chain_code, key = _unpack(data)
        if key[0] != 0:
            raise KeyDerivationError("Extended key does not hold a private key")
        try:
            private_key = PrivateKey.from_bytes(key[1:])
        except ValueError as e:
            raise KeyDerivationError("Invalid private key in xprv") from e
        return cls(private_key, chain_code, depth, fingerprint, child_number, version)

    def to_xprv(self) -> str:
        return b58check_encode(
            _pack(
                self.version,
                self.depth,
                self.parent_fingerprint,
                self.child_number,
                self.chain_code,
                b"\x00" + self.private_key.to_bytes(),
            )
        )

    def to_public(self) -> HDPublicKey:
        """Returns the matching extended public key (neutered)"""
        return HDPublicKey(
            self.private_key.get_public_key(),
            self.chain_code,
            self.depth,
            self.parent_fingerprint,
            self.child_number,
            _PUBLIC_VERSIONS.get(self.version, XPUB_VERSION),
        )

    def to_xpub(self) -> str:
        return self.to_public().to_xpub()

    def derive(self, path: str) -> HDPrivateKey:
        """
        Derive child key from path notation (e.g., "m/44'/2'/0'/0/0")
        ' or h indicates hardened derivation
        """
        key = self
        for index in parse_path(path):
            key = key._derive_child(index)
        return key

    def _derive_child(self, index: int) -> HDPrivateKey:
        public_key = self.private_key.get_public_key()
        if index >= HARDENED_OFFSET:
            data = b"\x00" + self.private_key.to_bytes()
        else:
            data = public_key.to_bytes()
        data += struct.pack(">I", index)

        digest = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        tweak, child_chain = digest[:32], digest[32:]

        tweak_int = b_to_i(tweak)
        child_int = (b_to_i(self.private_key.to_bytes()) + tweak_int) % SECP256K1_ORDER
        if tweak_int >= SECP256K1_ORDER or child_int == 0:
            raise KeyDerivationError(f"Invalid child key at index {index}")

        return HDPrivateKey(
            PrivateKey.from_bytes(i_to_b32(child_int)),
            child_chain,
            self.depth + 1,
            public_key.to_hash160()[:4],
            index,
            self.version,
        )


def _pack(
    version: bytes,
    depth: int,
    fingerprint: bytes,
    child_number: int,
    chain_code: bytes,
    key: bytes,
) -> bytes:
    return (
        version
        + bytes([depth])
        + fingerprint
        + struct.pack(">I", child_number)
        + chain_code
        + key
    )


def _unpack(data: bytes) -> tuple:
    version = data[0:4]
    depth = data[4]
    fingerprint = data[5:9]
    (child_number,) = struct.unpack(">I", data[9:13])
    chain_code = data[13:45]
    key = data[45:78]
    return version, depth, fingerprint, child_number, chain_code, key

