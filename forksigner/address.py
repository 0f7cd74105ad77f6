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

from abc import ABC, abstractmethod
from typing import Optional

import bech32  # type: ignore

from forksigner.constants import (
    P2PKH_ADDRESS,
    P2SH_ADDRESS,
    P2WPKH_ADDRESS_V0,
    P2WSH_ADDRESS_V0,
    ForkNetwork,
)
from forksigner.errors import InvalidAddressError
from forksigner.keys import PublicKey
from forksigner.script import Script
from forksigner.setup import get_network
from forksigner.utils import b58check_decode, b58check_encode, b_to_h, hash160


def p2wpkh_program(public_key: PublicKey) -> Script:
    """The P2WPKH witness program OP_0 <20-byte-key-hash> of a key

    Used both as a native segwit scriptPubKey and as the redeem script of a
    nested P2SH-P2WPKH output.
    """
    return Script(["OP_0", b_to_h(public_key.to_hash160())])


def p2pkh_script(pubkey_hash: bytes) -> Script:
    """OP_DUP OP_HASH160 <20-byte-key-hash> OP_EQUALVERIFY OP_CHECKSIG"""
    return Script(
        ["OP_DUP", "OP_HASH160", b_to_h(pubkey_hash), "OP_EQUALVERIFY", "OP_CHECKSIG"]
    )


class BtcForkAddress:
    """Represents an address of a Bitcoin fork chain

    Base58check P2PKH/P2SH addresses use the version bytes of the chain;
    native segwit addresses use its bech32 human readable part.

    Attributes
    ----------
    network : ForkNetwork
        the chain the address belongs to
    address_type : str
        one of P2PKH_ADDRESS, P2SH_ADDRESS, P2WPKH_ADDRESS_V0, P2WSH_ADDRESS_V0
    payload : bytes
        the key hash, script hash or witness program

    Methods
    -------
    from_str(address, network)
        parses and validates an address string (classmethod)
    from_public_key(public_key, network, address_type)
        creates the address a key would own (classmethod)
    to_string()
        returns the address's string encoding
    script_pubkey()
        returns the locking script that pays to the address
    """

    def __init__(self, network: ForkNetwork, address_type: str, payload: bytes) -> None:
        self.network = network
        self.address_type = address_type
        self.payload = payload

    @classmethod
    def from_str(cls, address: str, network: Optional[ForkNetwork] = None) -> BtcForkAddress:
        """Decodes an address string

        Raises
        ------
        InvalidAddressError
            on a bad checksum, format, version byte or human readable part
        """
        network = network or get_network()
        address = address.strip()
        if not address:
            raise InvalidAddressError("Empty address")

        if network.segwit_hrp and address.lower().startswith(network.segwit_hrp + "1"):
            return cls._from_bech32(address, network)
        return cls._from_base58(address, network)

    @classmethod
    def _from_bech32(cls, address: str, network: ForkNetwork) -> BtcForkAddress:
        witver, witprog = bech32.decode(network.segwit_hrp, address)
        if witver is None or witprog is None:
            raise InvalidAddressError(f"Invalid bech32 address: {address}")
        if witver != 0:
            raise InvalidAddressError(f"Unsupported witness version: {witver}")

        program = bytes(witprog)
        if len(program) == 20:
            return cls(network, P2WPKH_ADDRESS_V0, program)
        return cls(network, P2WSH_ADDRESS_V0, program)

    @classmethod
    def _from_base58(cls, address: str, network: ForkNetwork) -> BtcForkAddress:
        try:
            data = b58check_decode(address)
        except ValueError as e:
            raise InvalidAddressError(f"Invalid address {address}: {e}") from e

        if len(data) != 21:
            raise InvalidAddressError(f"Invalid address length: {address}")

        prefix, payload = data[:1], data[1:]
        if prefix in network.p2pkh_prefixes:
            return cls(network, P2PKH_ADDRESS, payload)
        if prefix in network.p2sh_prefixes:
            return cls(network, P2SH_ADDRESS, payload)
        raise InvalidAddressError(
            f"Address {address} does not belong to {network.coin} (version 0x{prefix.hex()})"
        )

    @classmethod
    def from_public_key(
        cls,
        public_key: PublicKey,
        network: Optional[ForkNetwork] = None,
        address_type: str = P2PKH_ADDRESS,
    ) -> BtcForkAddress:
        """The address of the given type owned by `public_key`

        P2SH means nested segwit (P2SH-P2WPKH).
        """
        network = network or get_network()
        if address_type == P2PKH_ADDRESS:
            return cls(network, P2PKH_ADDRESS, public_key.to_hash160())
        if address_type == P2SH_ADDRESS:
            redeem_script = p2wpkh_program(public_key)
            return cls(network, P2SH_ADDRESS, hash160(redeem_script.to_bytes()))
        if address_type == P2WPKH_ADDRESS_V0:
            if not network.segwit_hrp:
                raise InvalidAddressError(f"{network.coin} has no segwit addresses")
            return cls(network, P2WPKH_ADDRESS_V0, public_key.to_hash160())
        raise InvalidAddressError(f"Cannot derive a {address_type} address from a key")

    def to_string(self) -> str:
        if self.address_type == P2PKH_ADDRESS:
            return b58check_encode(self.network.p2pkh_prefixes[0] + self.payload)
        if self.address_type == P2SH_ADDRESS:
            return b58check_encode(self.network.p2sh_prefixes[0] + self.payload)

        encoded = bech32.encode(self.network.segwit_hrp, 0, self.payload)
        if encoded is None:
            raise InvalidAddressError(f"Failed to encode {self.address_type} address")
        return encoded

    def script_pubkey(self) -> Script:
        """Returns the scriptPubKey (locking script) paying to the address"""
        if self.address_type == P2PKH_ADDRESS:
            return p2pkh_script(self.payload)
        if self.address_type == P2SH_ADDRESS:
            return Script(["OP_HASH160", b_to_h(self.payload), "OP_EQUAL"])
        return Script(["OP_0", b_to_h(self.payload)])

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"BtcForkAddress({self.network.coin}, {self.to_string()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BtcForkAddress):
            return False
        return (
            self.network.coin == other.network.coin
            and self.address_type == other.address_type
            and self.payload == other.payload
        )


class AddressScheme(ABC):
    """Turns the addresses of a chain into spendable output scripts"""

    @abstractmethod
    def script_for_address(self, address: str) -> Script:
        """The locking script of `address`"""

    @abstractmethod
    def script_for_pubkey_like(self, template_address: str, public_key: PublicKey) -> Script:
        """The locking script a key would own if its address had the same
        type as `template_address`"""


class BtcForkAddressScheme(AddressScheme):
    """AddressScheme for the base58check/bech32 address formats of Bitcoin
    forks. Bound to one network.
    """

    def __init__(self, network: Optional[ForkNetwork] = None) -> None:
        self.network = network or get_network()

    def script_for_address(self, address: str) -> Script:
        return BtcForkAddress.from_str(address, self.network).script_pubkey()

    def script_for_pubkey_like(self, template_address: str, public_key: PublicKey) -> Script:
        template = BtcForkAddress.from_str(template_address, self.network)
        if template.address_type == P2WSH_ADDRESS_V0:
            raise InvalidAddressError(
                f"Cannot build a key script like the P2WSH address {template_address}"
            )
        address = BtcForkAddress.from_public_key(
            public_key, self.network, template.address_type
        )
        return address.script_pubkey()
