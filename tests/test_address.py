# Copyright (C) 2018-2025 The fork-signer developers
#
# This file is part of fork-signer
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of fork-signer, including this file, may be copied,
# modified, propagated, or distributed except according to the terms contained
# in the LICENSE file.


import unittest

from forksigner.address import BtcForkAddress, BtcForkAddressScheme
from forksigner.constants import (
    P2PKH_ADDRESS,
    P2SH_ADDRESS,
    P2WPKH_ADDRESS_V0,
    P2WSH_ADDRESS_V0,
)
from forksigner.errors import InvalidAddressError
from forksigner.keys import PublicKey
from forksigner.script import Script
from forksigner.setup import get_network
from forksigner.utils import hash160


class TestBitcoinAddresses(unittest.TestCase):
    def setUp(self):
        self.network = get_network("BITCOIN")
        self.pub = PublicKey(
            "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
        )
        self.hash160c = "751e76e8199196d454941c45d1b3a323f1433bd6"
        self.addressc = "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"
        self.p2wpkh_address = "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"

    def test_p2pkh_from_public_key(self):
        addr = BtcForkAddress.from_public_key(self.pub, self.network)
        self.assertEqual(addr.to_string(), self.addressc)
        self.assertEqual(addr.payload.hex(), self.hash160c)

    def test_p2pkh_from_str(self):
        addr = BtcForkAddress.from_str(self.addressc, self.network)
        self.assertEqual(addr.address_type, P2PKH_ADDRESS)
        self.assertEqual(addr.script_pubkey().to_hex(), "76a914" + self.hash160c + "88ac")

    def test_p2wpkh(self):
        addr = BtcForkAddress.from_public_key(self.pub, self.network, P2WPKH_ADDRESS_V0)
        self.assertEqual(addr.to_string(), self.p2wpkh_address)
        parsed = BtcForkAddress.from_str(self.p2wpkh_address, self.network)
        self.assertEqual(parsed, addr)
        self.assertEqual(parsed.script_pubkey().to_hex(), "0014" + self.hash160c)

    def test_p2sh_p2wpkh(self):
        addr = BtcForkAddress.from_public_key(self.pub, self.network, P2SH_ADDRESS)
        redeem_script = bytes.fromhex("0014" + self.hash160c)
        self.assertEqual(addr.payload, hash160(redeem_script))
        self.assertTrue(addr.to_string().startswith("3"))
        self.assertEqual(BtcForkAddress.from_str(addr.to_string(), self.network), addr)

    def test_p2wsh(self):
        program = bytes(range(32))
        addr = BtcForkAddress(self.network, P2WSH_ADDRESS_V0, program)
        parsed = BtcForkAddress.from_str(addr.to_string(), self.network)
        self.assertEqual(parsed.address_type, P2WSH_ADDRESS_V0)
        self.assertEqual(parsed.script_pubkey().to_hex(), "0020" + program.hex())

    def test_invalid_addresses(self):
        for address in (
            "",
            "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMJ",
            "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t5",
            "mszYqVnqKoQx4jcTdJXxwKAissE3Jbrrc1",
            "notanaddress0",
        ):
            with self.assertRaises(InvalidAddressError):
                BtcForkAddress.from_str(address, self.network)

    def test_invalid_address_is_value_error(self):
        with self.assertRaises(ValueError):
            BtcForkAddress.from_str("1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMJ", self.network)


class TestLitecoinAddresses(unittest.TestCase):
    def test_p2sh_m_prefix(self):
        addr = BtcForkAddress.from_str(
            "M7xo1Mi1gULZSwgvu7VVEvrwMRqngmFkVd", get_network("LITECOIN")
        )
        self.assertEqual(addr.address_type, P2SH_ADDRESS)
        self.assertEqual(
            addr.script_pubkey().to_hex(),
            "a91400aff21f24bc08af58e41e4186d8492a10b84f9e87",
        )

    def test_legacy_p2sh_prefix_accepted(self):
        ltc = get_network("LITECOIN")
        addr = BtcForkAddress(get_network("BITCOIN"), P2SH_ADDRESS, b"\x11" * 20)
        parsed = BtcForkAddress.from_str(addr.to_string(), ltc)
        self.assertEqual(parsed.address_type, P2SH_ADDRESS)
        self.assertEqual(parsed.payload, b"\x11" * 20)
        # re-encoded with the current 'M' version byte
        self.assertTrue(parsed.to_string().startswith("M"))

    def test_testnet_p2pkh(self):
        network = get_network("LITECOIN-TESTNET")
        addr = BtcForkAddress.from_str("mszYqVnqKoQx4jcTdJXxwKAissE3Jbrrc1", network)
        self.assertEqual(addr.payload.hex(), "88d9931ea73d60eaf7e5671efc0552b912911f2a")
        self.assertEqual(addr.to_string(), "mszYqVnqKoQx4jcTdJXxwKAissE3Jbrrc1")

    def test_bech32_hrp(self):
        network = get_network("LITECOIN")
        pub = PublicKey(
            "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
        )
        addr = BtcForkAddress.from_public_key(pub, network, P2WPKH_ADDRESS_V0)
        self.assertTrue(addr.to_string().startswith("ltc1q"))
        self.assertEqual(BtcForkAddress.from_str(addr.to_string(), network), addr)
        with self.assertRaises(InvalidAddressError):
            BtcForkAddress.from_str(addr.to_string(), get_network("BITCOIN"))

    def test_no_segwit_on_bitcoin_cash(self):
        pub = PublicKey(
            "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
        )
        with self.assertRaises(InvalidAddressError):
            BtcForkAddress.from_public_key(
                pub, get_network("BITCOINCASH"), P2WPKH_ADDRESS_V0
            )


class TestBtcForkAddressScheme(unittest.TestCase):
    def setUp(self):
        self.scheme = BtcForkAddressScheme(get_network("LITECOIN-TESTNET"))
        self.pub = PublicKey(
            "0223078d2942df62c45621d209fab84ea9a7a23346201b7727b9b45a29c4e76f5e"
        )
        self.pkh = self.pub.to_hash160().hex()

    def test_script_for_address(self):
        self.assertEqual(
            self.scheme.script_for_address("mrU9pEmAx26HcbKVrABvgL7AwA5fjNFoDc").to_hex(),
            "76a9147821c0a3768aa9d1a37e16cf76002aef5373f1a888ac",
        )

    def test_script_like_p2pkh(self):
        script = self.scheme.script_for_pubkey_like(
            "mgBCJAsvzgT2qNNeXsoECg2uPKrUsZ76up", self.pub
        )
        self.assertEqual(script.to_hex(), "76a914" + self.pkh + "88ac")

    def test_script_like_p2sh(self):
        template = BtcForkAddress(
            get_network("LITECOIN-TESTNET"), P2SH_ADDRESS, b"\x22" * 20
        ).to_string()
        script = self.scheme.script_for_pubkey_like(template, self.pub)
        script_hash = hash160(bytes.fromhex("0014" + self.pkh)).hex()
        expected = Script(["OP_HASH160", script_hash, "OP_EQUAL"])
        self.assertEqual(script, expected)

    def test_script_like_p2wpkh(self):
        template = BtcForkAddress(
            get_network("LITECOIN-TESTNET"), P2WPKH_ADDRESS_V0, b"\x22" * 20
        ).to_string()
        script = self.scheme.script_for_pubkey_like(template, self.pub)
        self.assertEqual(script.to_hex(), "0014" + self.pkh)

    def test_script_like_p2wsh_rejected(self):
        template = BtcForkAddress(
            get_network("LITECOIN-TESTNET"), P2WSH_ADDRESS_V0, b"\x22" * 32
        ).to_string()
        with self.assertRaises(InvalidAddressError):
            self.scheme.script_for_pubkey_like(template, self.pub)


if __name__ == "__main__":
    unittest.main()
