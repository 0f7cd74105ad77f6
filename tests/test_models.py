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
import unittest

from pydantic import ValidationError

from forksigner.models import BtcForkTxInput, SignedTxOutput, SignTxRequest, Utxo


UTXO_JSON = {
    "txHash": "a477af6b2667c29670467e4e0728b685ee07b240235771862318e29ddbe58458",
    "vout": 0,
    "amount": "1000000",
    "address": "mszYqVnqKoQx4jcTdJXxwKAissE3Jbrrc1",
    "scriptPubKey": "76a91488d9931ea73d60eaf7e5671efc0552b912911f2a88ac",
    "derivedPath": "0/0",
}


class TestUtxo(unittest.TestCase):
    def test_aliases(self):
        utxo = Utxo.model_validate(UTXO_JSON)
        self.assertEqual(utxo.tx_hash, UTXO_JSON["txHash"])
        self.assertEqual(utxo.amount, 1000000)
        self.assertEqual(utxo.derived_path, "0/0")
        self.assertEqual(utxo.sequence, 0)

    def test_field_names(self):
        utxo = Utxo(tx_hash="00" * 32, vout=1, amount=5, address="a", derived_path="0/1")
        self.assertEqual(utxo.script_pub_key, "")

    def test_frozen(self):
        utxo = Utxo.model_validate(UTXO_JSON)
        with self.assertRaises(ValidationError):
            utxo.amount = 1

    def test_amount_fits_int64(self):
        self.assertEqual(
            Utxo.model_validate({**UTXO_JSON, "amount": 2**63 - 1}).amount, 2**63 - 1
        )
        for amount in (2**63, str(2**64)):
            with self.assertRaises(ValidationError):
                Utxo.model_validate({**UTXO_JSON, "amount": amount})

    def test_invalid(self):
        for update in ({"vout": -1}, {"amount": "1.5btc"}, {"txHash": ""}):
            with self.assertRaises(ValidationError):
                Utxo.model_validate({**UTXO_JSON, **update})


class TestBtcForkTxInput(unittest.TestCase):
    def test_from_json(self):
        tx_input = BtcForkTxInput.model_validate_json(
            json.dumps(
                {
                    "to": "mrU9pEmAx26HcbKVrABvgL7AwA5fjNFoDc",
                    "amount": 500000,
                    "fee": "100000",
                    "changeIdx": 3,
                    "unspents": [UTXO_JSON, {**UTXO_JSON, "vout": 1}],
                }
            )
        )
        self.assertEqual(tx_input.fee, 100000)
        self.assertEqual(tx_input.change_idx, 3)
        self.assertIsNone(tx_input.change_address)
        self.assertEqual(tx_input.memo, "")
        self.assertEqual([u.vout for u in tx_input.unspents], [0, 1])
        self.assertEqual(tx_input.total_unspent(), 2000000)

    def test_amount_and_fee_fit_int64(self):
        for fields in ({"amount": 2**63, "fee": 1}, {"amount": 1, "fee": 2**63}):
            with self.assertRaises(ValidationError):
                BtcForkTxInput(to="x", **fields)

    def test_defaults(self):
        tx_input = BtcForkTxInput(to="x", amount=1, fee=1)
        self.assertEqual(tx_input.unspents, [])
        self.assertEqual(tx_input.change_idx, 0)
        self.assertEqual(tx_input.total_unspent(), 0)


class TestSignedTxOutput(unittest.TestCase):
    def test_txid(self):
        output = SignedTxOutput(signature="00", tx_hash="0102" + "00" * 30)
        self.assertEqual(output.txid, "00" * 30 + "0201")

    def test_dump_aliases(self):
        output = SignedTxOutput(signature="00", tx_hash="ab" * 32)
        self.assertEqual(
            json.loads(output.model_dump_json(by_alias=True)),
            {"signature": "00", "txHash": "ab" * 32},
        )


class TestSignTxRequest(unittest.TestCase):
    def test_request(self):
        request = SignTxRequest.model_validate(
            {
                "coin": "LITECOIN",
                "segWit": True,
                "input": {"to": "x", "amount": 1, "fee": 1, "unspents": [UTXO_JSON]},
            }
        )
        self.assertTrue(request.seg_wit)
        self.assertEqual(len(request.input.unspents), 1)
        self.assertFalse(
            SignTxRequest.model_validate(
                {"coin": "LITECOIN", "input": {"to": "x", "amount": 1, "fee": 1}}
            ).seg_wit
        )


if __name__ == "__main__":
    unittest.main()
