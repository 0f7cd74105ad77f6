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

from forksigner.constants import HARDENED_OFFSET
from forksigner.errors import KeyDerivationError
from forksigner.hdwallet import HDPrivateKey, HDPublicKey, get_account_path, parse_path


# BIP32 test vector 1
SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
M_XPRV = (
    "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPGJxWUtg6"
    "LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"
)
M_XPUB = (
    "xpub661MyMwAqRbcFtXgS5sYJABqqG9YLmC4Q1Rdap9gSE8NqtwybGhePY2gZ29ESFjqJoCu1Rupj"
    "e8YtGqsefD265TMg7usUDFdp6W1EGMcet8"
)
M_0H_XPRV = (
    "xprv9uHRZZhk6KAJC1avXpDAp4MDc3sQKNxDiPvvkX8Br5ngLNv1TxvUxt4cV1rGL5hj6KCesnDYU"
    "hd7oWgT11eZG7XnxHrnYeSvkzY7d2bhkJ7"
)
M_0H_XPUB = (
    "xpub68Gmy5EdvgibQVfPdqkBBCHxA5htiqg55crXYuXoQRKfDBFA1WEjWgP6LHhwBZeNK1VTsfTFU"
    "HCdrfp1bgwQ9xv5ski8PX9rL2dZXvgGDnw"
)
M_0H_1_XPRV = (
    "xprv9wTYmMFdV23N2TdNG573QoEsfRrWKQgWeibmLntzniatZvR9BmLnvSxqu53Kw1UmYPxLgboyZ"
    "QaXwTCg8MSY3H2EU4pWcQDnRnrVA1xe8fs"
)
M_0H_1_XPUB = (
    "xpub6ASuArnXKPbfEwhqN6e3mwBcDTgzisQN1wXN9BJcM47sSikHjJf3UFHKkNAWbWMiGj7Wf5uMa"
    "sh7SyYq527Hqck2AxYysAA7xmALppuCkwQ"
)


class TestBip32Vector1(unittest.TestCase):
    def setUp(self):
        self.master = HDPrivateKey.from_seed(SEED)

    def test_master(self):
        self.assertEqual(self.master.to_xprv(), M_XPRV)
        self.assertEqual(self.master.to_xpub(), M_XPUB)

    def test_hardened_child(self):
        child = self.master.derive("m/0'")
        self.assertEqual(child.to_xprv(), M_0H_XPRV)
        self.assertEqual(child.to_xpub(), M_0H_XPUB)
        self.assertEqual(self.master.derive("m/0h").to_xprv(), M_0H_XPRV)

    def test_normal_grandchild(self):
        child = self.master.derive("m/0'/1")
        self.assertEqual(child.to_xprv(), M_0H_1_XPRV)
        self.assertEqual(child.to_xpub(), M_0H_1_XPUB)

    def test_relative_derivation(self):
        child = self.master.derive("m/0'").derive("1")
        self.assertEqual(child.to_xprv(), M_0H_1_XPRV)

    def test_public_derivation_matches_private(self):
        child = HDPublicKey.from_xpub(M_0H_XPUB).derive("1")
        self.assertEqual(child.to_xpub(), M_0H_1_XPUB)

    def test_xprv_round_trip(self):
        self.assertEqual(HDPrivateKey.from_xprv(M_0H_1_XPRV).to_xprv(), M_0H_1_XPRV)
        self.assertEqual(HDPublicKey.from_xpub(M_0H_1_XPUB).to_xpub(), M_0H_1_XPUB)

    def test_no_hardened_public_derivation(self):
        with self.assertRaises(KeyDerivationError):
            HDPublicKey.from_xpub(M_XPUB).derive("0'")

    def test_invalid_extended_keys(self):
        with self.assertRaises(KeyDerivationError):
            HDPublicKey.from_xpub(M_XPUB[:-1] + "9")
        with self.assertRaises(KeyDerivationError):
            HDPrivateKey.from_xprv(M_XPUB)
        with self.assertRaises(KeyDerivationError):
            HDPublicKey.from_xpub("xpub")


class TestPaths(unittest.TestCase):
    def test_parse_path(self):
        self.assertEqual(
            parse_path("m/44'/2h/0/5"),
            [44 + HARDENED_OFFSET, 2 + HARDENED_OFFSET, 0, 5],
        )
        self.assertEqual(parse_path("0/1"), [0, 1])
        self.assertEqual(parse_path("m"), [])

    def test_invalid_path(self):
        for path in ("m/x", "m/0/", "m/-1", "m/2147483648"):
            with self.assertRaises(KeyDerivationError):
                parse_path(path)

    def test_account_path(self):
        self.assertEqual(get_account_path("m/44'/2'/0'/0/0"), "m/44'/2'/0'")
        self.assertEqual(get_account_path("m/49'/2'/1'"), "m/49'/2'/1'")

    def test_account_path_too_short(self):
        with self.assertRaises(KeyDerivationError):
            get_account_path("m/44'/2'")


if __name__ == "__main__":
    unittest.main()
