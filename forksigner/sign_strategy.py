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
Signing strategies: how the inputs of an unsigned transaction get their
signatures.

LegacySignStrategy puts `<sig> <pubkey>` in every scriptSig and delegates the
digest algorithm to a SignHasher (plain legacy or fork id). SegWitSignStrategy
spends nested P2SH-P2WPKH outputs with BIP143 digests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from loguru import logger

from forksigner.address import AddressScheme, p2pkh_script, p2wpkh_program
from forksigner.constants import (
    LEGACY_TX_VERSION,
    SEGWIT_TX_VERSION,
    SIGHASH_ALL,
    SIGHASH_FORKID,
)
from forksigner.errors import ForkSignerError
from forksigner.keys import PrivateKey
from forksigner.models import Utxo
from forksigner.script import Script
from forksigner.transactions import Transaction, TxInput, TxWitnessInput
from forksigner.utils import b_to_h


def sign_hash_and_pub_key(
    private_key: PrivateKey, digest: bytes, hash_type: int
) -> tuple[bytes, bytes]:
    """Signs `digest` and returns (DER signature + hash type byte,
    compressed public key)"""
    signature = private_key.sign(digest) + bytes([hash_type])
    return signature, private_key.get_public_key().to_bytes()


class SignHasher(ABC):
    """Computes the digest a legacy input signs and the hash type appended
    to its signature"""

    @abstractmethod
    def digest(self, tx: Transaction, index: int, utxo: Utxo) -> tuple[bytes, int]:
        pass


class LegacySignHasher(SignHasher):
    """Original transaction digest with SIGHASH_ALL"""

    def __init__(self, address_scheme: AddressScheme) -> None:
        self.address_scheme = address_scheme

    def digest(self, tx: Transaction, index: int, utxo: Utxo) -> tuple[bytes, int]:
        script = self.address_scheme.script_for_address(utxo.address)
        return tx.get_transaction_digest(index, script, SIGHASH_ALL), SIGHASH_ALL


class ForkIdSignHasher(SignHasher):
    """BIP143 digest with SIGHASH_FORKID, used by chains with replay
    protection (Bitcoin Cash, Bitcoin SV, Bitcoin Gold)

    The digest commits to the amount of the spent output and hashes the
    sighash type as (fork_id << 8) | 0x41; the signature carries 0x41.
    """

    def __init__(self, address_scheme: AddressScheme, fork_id: int) -> None:
        self.address_scheme = address_scheme
        self.fork_id = fork_id

    def digest(self, tx: Transaction, index: int, utxo: Utxo) -> tuple[bytes, int]:
        script = self.address_scheme.script_for_address(utxo.address)
        digest = tx.get_transaction_segwit_digest(
            index, script, utxo.amount, SIGHASH_ALL, fork_id=self.fork_id
        )
        return digest, SIGHASH_ALL | SIGHASH_FORKID


class SignStrategy(ABC):
    """Signs every input of an unsigned transaction

    `keys[i]` signs the input spending `unspents[i]`. The returned
    transaction is a new object; outpoints, sequences, outputs and lock time
    are those of the unsigned one.
    """

    tx_version: int

    @abstractmethod
    def sign_inputs(
        self,
        tx: Transaction,
        unspents: Sequence[Utxo],
        keys: Sequence[PrivateKey],
    ) -> Transaction:
        pass

    @staticmethod
    def _check_alignment(
        tx: Transaction, unspents: Sequence[Utxo], keys: Sequence[PrivateKey]
    ) -> None:
        if not len(keys) == len(unspents) == len(tx.inputs):
            raise ForkSignerError(
                f"Cannot sign {len(tx.inputs)} inputs with {len(unspents)} "
                f"unspents and {len(keys)} keys"
            )

    def _unsigned_copy(self, tx: Transaction) -> Transaction:
        unsigned = Transaction.copy(tx)
        unsigned.version = self.tx_version
        return unsigned

    @staticmethod
    def _with_script_sig(txin: TxInput, script_sig: Script) -> TxInput:
        return TxInput(txin.txid, txin.txout_index, script_sig, txin.sequence)


class LegacySignStrategy(SignStrategy):
    """scriptSig = <signature||hash type> <compressed public key>"""

    tx_version = LEGACY_TX_VERSION

    def __init__(self, hasher: SignHasher) -> None:
        self.hasher = hasher

    def sign_inputs(
        self,
        tx: Transaction,
        unspents: Sequence[Utxo],
        keys: Sequence[PrivateKey],
    ) -> Transaction:
        self._check_alignment(tx, unspents, keys)
        tx = self._unsigned_copy(tx)

        script_sigs = []
        for i, (utxo, key) in enumerate(zip(unspents, keys)):
            digest, hash_type = self.hasher.digest(tx, i, utxo)
            signature, public_key = sign_hash_and_pub_key(key, digest, hash_type)
            script_sigs.append(Script([b_to_h(signature), b_to_h(public_key)]))
            logger.debug(f"Signed legacy input {i} ({utxo.tx_hash}:{utxo.vout})")

        inputs = [
            self._with_script_sig(txin, script_sig)
            for txin, script_sig in zip(tx.inputs, script_sigs)
        ]
        return Transaction(
            inputs,
            tx.outputs,
            tx.locktime,
            self.tx_version,
        )


class SegWitSignStrategy(SignStrategy):
    """Spends nested segwit (P2SH-P2WPKH) outputs

    scriptSig = <OP_0 <key hash>>, witness = [signature||hash type, public key]
    """

    tx_version = SEGWIT_TX_VERSION

    def __init__(self, fork_id: Optional[int] = None) -> None:
        self.fork_id = fork_id

    def sign_inputs(
        self,
        tx: Transaction,
        unspents: Sequence[Utxo],
        keys: Sequence[PrivateKey],
    ) -> Transaction:
        self._check_alignment(tx, unspents, keys)
        tx = self._unsigned_copy(tx)

        hash_type = SIGHASH_ALL
        if self.fork_id is not None:
            hash_type |= SIGHASH_FORKID

        inputs = []
        witnesses = []
        for i, (txin, utxo, key) in enumerate(zip(tx.inputs, unspents, keys)):
            public_key = key.get_public_key()
            redeem_script = p2wpkh_program(public_key)
            # the scriptCode of a P2WPKH program is the P2PKH script of its key
            script_code = p2pkh_script(public_key.to_hash160())

            digest = tx.get_transaction_segwit_digest(
                i, script_code, utxo.amount, SIGHASH_ALL, fork_id=self.fork_id
            )
            signature, public_key_bytes = sign_hash_and_pub_key(key, digest, hash_type)

            inputs.append(self._with_script_sig(txin, Script([redeem_script.to_hex()])))
            witnesses.append(TxWitnessInput([b_to_h(signature), b_to_h(public_key_bytes)]))
            logger.debug(f"Signed segwit input {i} ({utxo.tx_hash}:{utxo.vout})")

        return Transaction(
            inputs,
            tx.outputs,
            tx.locktime,
            self.tx_version,
            has_segwit=True,
            witnesses=witnesses,
        )
