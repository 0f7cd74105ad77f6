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

"""
Builds the unsigned transaction of a transfer request and hands it to a
signing strategy.

Usage:
    signer = btc_fork_transaction(tx_input, "LITECOIN")
    output = keystore.sign_transaction(signer)
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from forksigner.address import AddressScheme, BtcForkAddressScheme
from forksigner.constants import DUST, MAX_SATOSHI
from forksigner.errors import (
    ForkSignerError,
    InsufficientFundsError,
    MalformedDerivationPathError,
)
from forksigner.hdwallet import HDPublicKey, get_account_path
from forksigner.keys import PrivateKey
from forksigner.models import BtcForkTxInput, SignedTxOutput
from forksigner.script import Script
from forksigner.setup import get_network
from forksigner.sign_strategy import (
    ForkIdSignHasher,
    LegacySignHasher,
    LegacySignStrategy,
    SegWitSignStrategy,
    SignStrategy,
)
from forksigner.transactions import Transaction, TxInput, TxOutput
from forksigner.utils import b_to_h


class ForkTransactionSigner:
    """Signs one transfer request on one chain

    Attributes
    ----------
    tx_input : BtcForkTxInput
        the request: destination, amount, fee, the UTXOs to spend and the
        change settings
    coin : str
        the coin symbol (a key of NETWORKS), also used for the keystore
        account lookup
    strategy : SignStrategy
        the signing strategy; it fixes the transaction version
    address_scheme : AddressScheme
        turns the chain's addresses into scripts

    Methods
    -------
    build_key_paths(account_path)
        the derivation path of the key of every UTXO, in UTXO order
    resolve_change_script(xpub)
        the locking script of the change output
    build_outputs(change_script)
        destination output and, above the dust limit, change output
    build_inputs()
        one unsigned input per UTXO
    sign(keys, change_script)
        builds, signs and serializes the transaction
    """

    def __init__(
        self,
        tx_input: BtcForkTxInput,
        coin: str,
        strategy: SignStrategy,
        address_scheme: Optional[AddressScheme] = None,
    ) -> None:
        self.tx_input = tx_input
        self.coin = coin
        self.network = get_network(coin)
        self.strategy = strategy
        self.address_scheme = address_scheme or BtcForkAddressScheme(self.network)

    def build_key_paths(self, account_path: str) -> list[str]:
        """Joins the account path with the "change/index" path of every UTXO

        Raises
        ------
        MalformedDerivationPathError
            if a UTXO's derived path does not have exactly two components
        """
        account_path = get_account_path(account_path)

        paths = []
        for utxo in self.tx_input.unspents:
            derived_path = utxo.derived_path.strip()
            components = derived_path.split("/")
            if len(components) != 2 or not all(c.strip() for c in components):
                raise MalformedDerivationPathError(
                    f"derived path must be x/x, got {utxo.derived_path!r}"
                )
            paths.append(f"{account_path}/{derived_path}")
        return paths

    def resolve_change_script(self, xpub: str) -> Script:
        """The explicit change address, or the address at 0/change_idx of the
        account xpub with the same type as the first UTXO's address"""
        change_address = (self.tx_input.change_address or "").strip()
        if change_address:
            return self.address_scheme.script_for_address(change_address)

        if not self.tx_input.unspents:
            raise ForkSignerError("Cannot infer a change address without unspents")

        change_path = f"0/{self.tx_input.change_idx}"
        public_key = HDPublicKey.from_xpub(xpub).derive(change_path).public_key
        logger.debug(f"Deriving change script at {change_path}")
        return self.address_scheme.script_for_pubkey_like(
            self.tx_input.unspents[0].address, public_key
        )

    def build_outputs(self, change_script: Script) -> list[TxOutput]:
        """
        Raises
        ------
        InsufficientFundsError
            if the UTXOs do not cover amount plus fee
        ForkSignerError
            if a value is negative or does not fit in a 64-bit output value
        """
        amount, fee = self.tx_input.amount, self.tx_input.fee
        if amount < 0 or fee < 0:
            raise ForkSignerError("Amount and fee must not be negative")

        total = self.tx_input.total_unspent()
        if max(total, amount + fee) > MAX_SATOSHI:
            raise ForkSignerError(f"Value exceeds the maximum of {MAX_SATOSHI} satoshis")
        if total < amount + fee:
            raise InsufficientFundsError(
                f"total amount {total} must be at least amount + fee ({amount + fee})"
            )

        outputs = [TxOutput(amount, self.address_scheme.script_for_address(self.tx_input.to))]

        change = total - amount - fee
        if change >= DUST:
            outputs.append(TxOutput(change, change_script))
        else:
            logger.debug(f"Change of {change} is below dust and is left as fee")
        return outputs

    def build_inputs(self) -> list[TxInput]:
        return [TxInput(utxo.tx_hash, utxo.vout) for utxo in self.tx_input.unspents]

    def sign(self, keys: Sequence[PrivateKey], change_script: Script) -> SignedTxOutput:
        """Signs with `keys[i]` the input that spends `unspents[i]`"""
        outputs = self.build_outputs(change_script)
        inputs = self.build_inputs()
        unsigned = Transaction(inputs, outputs, 0, self.strategy.tx_version)

        signed = self.strategy.sign_inputs(unsigned, self.tx_input.unspents, keys)
        logger.debug(
            f"Signed {self.coin} transaction with {len(inputs)} inputs "
            f"and {len(outputs)} outputs"
        )
        return SignedTxOutput(signature=signed.to_hex(), tx_hash=b_to_h(signed.get_hash()))


def btc_fork_transaction(tx_input: BtcForkTxInput, coin: str) -> ForkTransactionSigner:
    """Legacy P2PKH signing"""
    scheme = BtcForkAddressScheme(get_network(coin))
    strategy = LegacySignStrategy(LegacySignHasher(scheme))
    return ForkTransactionSigner(tx_input, coin, strategy, scheme)


def btc_fork_segwit_transaction(tx_input: BtcForkTxInput, coin: str) -> ForkTransactionSigner:
    """Nested segwit (P2SH-P2WPKH) signing; chains with a fork id hash it into
    the BIP143 digest"""
    network = get_network(coin)
    if network.segwit_hrp is None:
        raise ForkSignerError(f"{network.coin} does not support segwit")
    scheme = BtcForkAddressScheme(network)
    strategy = SegWitSignStrategy(fork_id=network.fork_id)
    return ForkTransactionSigner(tx_input, coin, strategy, scheme)


def btc_fork_id_transaction(tx_input: BtcForkTxInput, coin: str) -> ForkTransactionSigner:
    """Legacy signing with the replay protected digest of the chain's fork id"""
    network = get_network(coin)
    if network.fork_id is None:
        raise ForkSignerError(f"{network.coin} has no fork id")
    scheme = BtcForkAddressScheme(network)
    strategy = LegacySignStrategy(ForkIdSignHasher(scheme, network.fork_id))
    return ForkTransactionSigner(tx_input, coin, strategy, scheme)
