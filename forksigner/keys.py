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

from __future__ import annotations

from typing import Optional

import coincurve  # type: ignore

from forksigner.constants import ForkNetwork
from forksigner.setup import get_network
from forksigner.utils import b58check_decode, b58check_encode, b_to_h, h_to_b, hash160


class PrivateKey:
    """Represents a secp256k1 private key.

    Attributes
    ----------
    key : coincurve.PrivateKey
        the libsecp256k1 key object

    Methods
    -------
    from_wif(wif)
        creates an object from a WIF of WIFC format (string)
    from_bytes()
        creates an object from raw 32 bytes
    to_wif(compressed=True)
        returns as WIFC (compressed) or WIF format (string)
    to_bytes()
        returns the key's raw bytes
    sign(digest)
        signs a 32 byte digest and returns the DER signature
    get_public_key()
        returns the corresponding PublicKey object
    """

    def __init__(
        self,
        wif: Optional[str] = None,
        b: Optional[bytes] = None,
        network: Optional[ForkNetwork] = None,
    ) -> None:
        """With no parameters a random key is created

        Parameters
        ----------
        wif : str, optional
            the key in WIF of WIFC format (default None)
        b : bytes, optional
            used to create a key from raw bytes
        network : ForkNetwork, optional
            the network the WIF must belong to (default: configured network)
        """

        if wif:
            self._from_wif(wif, network)
        elif b:
            self._from_bytes(b)
        else:
            self.key = coincurve.PrivateKey()

    def to_bytes(self) -> bytes:
        """Returns key's bytes"""

        return self.key.secret

    @classmethod
    def from_wif(cls, wif: str, network: Optional[ForkNetwork] = None) -> PrivateKey:
        """Creates key from WIFC or WIF format key"""

        return cls(wif=wif, network=network)

    @classmethod
    def from_bytes(cls, b: bytes) -> PrivateKey:
        """Creates a key directly from 32 raw bytes"""

        return cls(b=b)

    @classmethod
    def from_hex(cls, hex_str: str) -> PrivateKey:
        return cls(b=h_to_b(hex_str))

    def _from_bytes(self, b: bytes) -> None:
        if len(b) != 32:
            raise ValueError("Invalid key length: must be exactly 32 bytes.")
        # coincurve rejects zero and values not below the curve order
        self.key = coincurve.PrivateKey(b)

    def _from_wif(self, wif: str, network: Optional[ForkNetwork]) -> None:
        """Creates key from WIFC or WIF format key

        Check to_wif for the detailed process. From WIF is the reverse.

        Raises
        ------
        ValueError
            if the checksum is wrong or if the WIF/WIFC is not from the
            given network.
        """

        key_bytes = b58check_decode(wif)

        network = network or get_network()
        if key_bytes[:1] != network.wif_prefix:
            raise ValueError("Using the wrong network!")

        # strip the network prefix and the compressed flag if present
        key_bytes = key_bytes[1:]
        if len(key_bytes) == 33 and key_bytes[-1] == 0x01:
            key_bytes = key_bytes[:-1]
        self._from_bytes(key_bytes)

    def to_wif(self, compressed: bool = True, network: Optional[ForkNetwork] = None) -> str:
        """Returns key in WIFC or WIF string

        |  Pseudocode:
        |      network_prefix = (1 byte version number)
        |      data = network_prefix + (32 bytes number/key) [ + 0x01 if compressed ]
        |      wif = Base58CheckEncode( data )
        """

        network = network or get_network()
        data = network.wif_prefix + self.to_bytes()
        if compressed:
            data += b"\x01"
        return b58check_encode(data)

    def sign(self, digest: bytes) -> bytes:
        """Signs a 32 byte digest and returns the DER encoded signature

        libsecp256k1 derives the nonce deterministically (RFC6979) and
        always produces low S values (BIP62), so the same digest and key give
        the same signature. No low R grinding is done.
        """

        if len(digest) != 32:
            raise ValueError("Digest must be exactly 32 bytes.")
        return self.key.sign(digest, hasher=None)

    def get_public_key(self) -> PublicKey:
        """Returns the corresponding PublicKey"""

        return PublicKey.from_bytes(self.key.public_key.format(compressed=True))


class PublicKey:
    """Represents a secp256k1 public key.

    Attributes
    ----------
    key : coincurve.PublicKey
        the libsecp256k1 public key object

    Methods
    -------
    from_hex(hex_str)
        creates an object from a hex string in SEC format (classmethod)
    from_bytes(b)
        creates an object from SEC bytes (classmethod)
    to_bytes(compressed=True)
        returns the key in SEC format bytes
    to_hex(compressed=True)
        returns the key as hex string (in SEC format - compressed by default)
    to_hash160(compressed=True)
        returns the hash160 of the SEC serialization
    verify(signature, digest)
        checks a DER signature over a 32 byte digest
    """

    def __init__(self, hex_str: str) -> None:
        """
        Raises
        ------
        ValueError
            If the SEC encoding is invalid or not on the curve
        """
        self.key = coincurve.PublicKey(h_to_b(hex_str.strip()))

    @classmethod
    def from_hex(cls, hex_str: str) -> PublicKey:
        """Creates a public key from a hex string (SEC format)"""

        return cls(hex_str)

    @classmethod
    def from_bytes(cls, b: bytes) -> PublicKey:
        return cls(b_to_h(b))

    def to_bytes(self, compressed: bool = True) -> bytes:
        """Returns the key in SEC format"""

        return self.key.format(compressed=compressed)

    def to_hex(self, compressed: bool = True) -> str:
        """Returns public key as a hex string (SEC format - compressed by
        default)"""

        return b_to_h(self.to_bytes(compressed))

    def to_hash160(self, compressed: bool = True) -> bytes:
        """Returns the RIPEMD( SHA256( ) ) of the public key"""

        return hash160(self.to_bytes(compressed))

    def verify(self, signature: bytes, digest: bytes) -> bool:
        """Checks a DER signature (without sighash byte) over a digest"""

        try:
            return self.key.verify(signature, digest, hasher=None)
        except ValueError:
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return False
        return self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        return f"PublicKey({self.to_hex()})"
