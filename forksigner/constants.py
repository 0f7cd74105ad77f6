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

from typing import NamedTuple, Optional

class ForkNetwork(NamedTuple):
    """Chain parameters of a Bitcoin fork network

    The first entry of each prefix tuple is the one used when encoding;
    all of them are accepted when decoding.
    """

    coin: str
    p2pkh_prefixes: tuple
    p2sh_prefixes: tuple
    wif_prefix: bytes
    segwit_hrp: Optional[str] = None
    fork_id: Optional[int] = None

NETWORKS = {
    "BITCOIN": ForkNetwork("BITCOIN", (b"\x00",), (b"\x05",), b"\x80", "bc"),
    "BITCOIN-TESTNET": ForkNetwork(
        "BITCOIN-TESTNET", (b"\x6f",), (b"\xc4",), b"\xef", "tb"
    ),
    # Litecoin moved its P2SH prefix from '3' to 'M' (and '2' to 'Q' on
    # testnet); both are still seen in the wild
    "LITECOIN": ForkNetwork("LITECOIN", (b"\x30",), (b"\x32", b"\x05"), b"\xb0", "ltc"),
    "LITECOIN-TESTNET": ForkNetwork(
        "LITECOIN-TESTNET", (b"\x6f",), (b"\x3a", b"\xc4"), b"\xef", "tltc"
    ),
    "BITCOINCASH": ForkNetwork(
        "BITCOINCASH", (b"\x00",), (b"\x05",), b"\x80", None, 0
    ),
    "BITCOINCASH-TESTNET": ForkNetwork(
        "BITCOINCASH-TESTNET", (b"\x6f",), (b"\xc4",), b"\xef", None, 0
    ),
    "BITCOINSV": ForkNetwork("BITCOINSV", (b"\x00",), (b"\x05",), b"\x80", None, 0),
    "BITCOINGOLD": ForkNetwork(
        "BITCOINGOLD", (b"\x26",), (b"\x17",), b"\x80", "btg", 79
    ),
    "DOGECOIN": ForkNetwork("DOGECOIN", (b"\x1e",), (b"\x16",), b"\x9e"),
    "DASH": ForkNetwork("DASH", (b"\x4c",), (b"\x10",), b"\xcc"),
}

# Constants for address types
P2PKH_ADDRESS = "p2pkh"
P2SH_ADDRESS = "p2sh"
P2WPKH_ADDRESS_V0 = "p2wpkhv0"
P2WSH_ADDRESS_V0 = "p2wshv0"

# Constants related to transaction signature types
SIGHASH_ALL = 0x01
SIGHASH_FORKID = 0x40

DEFAULT_TX_SEQUENCE = b"\xff\xff\xff\xff"

# Transaction versions fixed by each signing strategy
LEGACY_TX_VERSION = 1
SEGWIT_TX_VERSION = 2

# Change below this value is left to miners
DUST = 546

# Output values are serialized as signed 64-bit integers
MAX_SATOSHI = 2**63 - 1

# BIP32
HARDENED_OFFSET = 0x80000000
EXTENDED_KEY_SIZE = 78
XPRV_VERSION = b"\x04\x88\xad\xe4"
XPUB_VERSION = b"\x04\x88\xb2\x1e"
TPRV_VERSION = b"\x04\x35\x83\x94"
TPUB_VERSION = b"\x04\x35\x87\xcf"

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
