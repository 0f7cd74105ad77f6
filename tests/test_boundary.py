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


import json
import threading
import unittest

from forksigner.address import BtcForkAddress, p2pkh_script
from forksigner.boundary import (
    clear_last_error,
    get_last_backtrace,
    get_last_error,
    landingpad,
    sign_tx_json,
    signer_for_request,
)
from forksigner.constants import P2SH_ADDRESS
from forksigner.errors import ForkSignerError, InsufficientFundsError
from forksigner.keystore import HdKeystore
from forksigner.models import SignTxRequest
from forksigner.setup import get_network
from forksigner.sign_strategy import ForkIdSignHasher, LegacySignHasher
from forksigner.transactions import Transaction


SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")


def fail(message):
    raise RuntimeError(message)


class TestLandingpad(unittest.TestCase):
    def setUp(self):
        clear_last_error()

    def test_success(self):
        self.assertEqual(landingpad(max, 1, 2), 2)
        self.assertIsNone(get_last_error())

    def test_failure(self):
        self.assertIsNone(landingpad(fail, "boom"))
        error = get_last_error()
        self.assertIsInstance(error, RuntimeError)
        self.assertEqual(str(error), "boom")
        self.assertIn("Traceback", get_last_backtrace())
        self.assertIn("boom", get_last_backtrace())

    def test_clear(self):
        landingpad(fail, "boom")
        clear_last_error()
        self.assertIsNone(get_last_error())
        self.assertIsNone(get_last_backtrace())

    def test_errors_per_thread(self):
        seen = {}

        def worker():
            landingpad(fail, "worker")
            seen["error"] = get_last_error()

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        self.assertEqual(str(seen["error"]), "worker")
        self.assertIsNone(get_last_error())


class TestSignTxJson(unittest.TestCase):
    def setUp(self):
        clear_last_error()
        self.keystore = HdKeystore.from_seed(SEED, testnet=True)
        self.keystore.add_account("LITECOIN-TESTNET", "m/44'/1'/0'/0/0")
        self.network = get_network("LITECOIN-TESTNET")

    def _request(self, amount, seg_wit=False):
        address_type = P2SH_ADDRESS if seg_wit else "p2pkh"
        public_key = (
            self.keystore.master_key.derive("m/44'/1'/0'/0/0").private_key.get_public_key()
        )
        address = BtcForkAddress.from_public_key(public_key, self.network, address_type)
        return json.dumps(
            {
                "coin": "LITECOIN-TESTNET",
                "segWit": seg_wit,
                "input": {
                    "to": "mrU9pEmAx26HcbKVrABvgL7AwA5fjNFoDc",
                    "amount": amount,
                    "fee": 10000,
                    "changeIdx": 0,
                    "unspents": [
                        {
                            "txHash": "a477af6b2667c29670467e4e0728b685ee07b240235771862318e29ddbe58458",
                            "vout": 0,
                            "amount": 1000000,
                            "address": address.to_string(),
                            "derivedPath": "0/0",
                        }
                    ],
                },
            }
        )

    def test_legacy(self):
        result = json.loads(sign_tx_json(self.keystore, self._request(500000)))
        self.assertEqual(set(result), {"signature", "txHash"})
        tx = Transaction.from_raw(result["signature"])
        self.assertEqual(tx.version, 1)
        self.assertEqual(result["txHash"], tx.get_hash().hex())
        self.assertEqual([o.amount for o in tx.outputs], [500000, 490000])

    def test_segwit(self):
        result = json.loads(sign_tx_json(self.keystore, self._request(500000, True)))
        tx = Transaction.from_raw(result["signature"])
        self.assertEqual(tx.version, 2)
        self.assertTrue(tx.has_segwit)

    def test_insufficient_funds(self):
        self.assertIsNone(landingpad(sign_tx_json, self.keystore, self._request(995000)))
        self.assertIsInstance(get_last_error(), InsufficientFundsError)

    def test_malformed_json(self):
        self.assertIsNone(landingpad(sign_tx_json, self.keystore, "{"))
        self.assertIsInstance(get_last_error(), ValueError)


class TestForkChainSegwitJson(unittest.TestCase):
    def setUp(self):
        clear_last_error()
        self.keystore = HdKeystore.from_seed(SEED)
        self.keystore.add_account("BITCOINGOLD", "m/49'/156'/0'/0/0")
        self.network = get_network("BITCOINGOLD")
        self.public_key = (
            self.keystore.master_key.derive("m/49'/156'/0'/0/0").private_key.get_public_key()
        )

    def _request(self, coin):
        address = BtcForkAddress.from_public_key(self.public_key, self.network, P2SH_ADDRESS)
        return json.dumps(
            {
                "coin": coin,
                "segWit": True,
                "input": {
                    "to": address.to_string(),
                    "amount": 400000,
                    "fee": 10000,
                    "unspents": [
                        {
                            "txHash": "e868b66e75376add2154acb558cf45ff7b723f255e2aca794da1548eb945ba8b",
                            "vout": 1,
                            "amount": 500000,
                            "address": address.to_string(),
                            "derivedPath": "0/0",
                        }
                    ],
                },
            }
        )

    def test_bitcoin_gold_signs_with_fork_id(self):
        result = json.loads(sign_tx_json(self.keystore, self._request("BITCOINGOLD")))
        tx = Transaction.from_raw(result["signature"])
        self.assertEqual(tx.version, 2)

        signature = bytes.fromhex(tx.witnesses[0].stack[0])
        self.assertEqual(signature[-1], 0x41)
        digest = tx.get_transaction_segwit_digest(
            0, p2pkh_script(self.public_key.to_hash160()), 500000, fork_id=79
        )
        self.assertTrue(self.public_key.verify(signature[:-1], digest))

    def test_segwit_rejected_without_segwit(self):
        self.keystore.add_account("BITCOINCASH", "m/49'/145'/0'/0/0")
        self.assertIsNone(landingpad(sign_tx_json, self.keystore, self._request("BITCOINCASH")))
        self.assertIsInstance(get_last_error(), ForkSignerError)


class TestSignerForRequest(unittest.TestCase):
    def _signer(self, coin, seg_wit=False):
        request = SignTxRequest.model_validate(
            {"coin": coin, "segWit": seg_wit, "input": {"to": "x", "amount": 1, "fee": 1}}
        )
        return signer_for_request(request)

    def test_selection(self):
        self.assertIsInstance(self._signer("LITECOIN").strategy.hasher, LegacySignHasher)
        self.assertEqual(self._signer("LITECOIN", True).strategy.tx_version, 2)
        hasher = self._signer("BITCOINCASH").strategy.hasher
        self.assertIsInstance(hasher, ForkIdSignHasher)
        self.assertEqual(hasher.fork_id, 0)
        self.assertEqual(self._signer("BITCOINGOLD").strategy.hasher.fork_id, 79)


if __name__ == "__main__":
    unittest.main()
