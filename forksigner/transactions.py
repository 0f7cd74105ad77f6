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

import struct
from typing import Optional, Tuple

from forksigner.constants import (
    DEFAULT_TX_SEQUENCE,
    LEGACY_TX_VERSION,
    SIGHASH_ALL,
    SIGHASH_FORKID,
)
from forksigner.errors import SerializationError
from forksigner.script import Script
from forksigner.utils import (
    b_to_h,
    encode_varint,
    h_to_b,
    hash256,
    parse_compact_size,
    prepend_compact_size,
)


class TxInput:
    """Represents a transaction input.

    A transaction input requires a transaction id of a UTXO and the index of
    that UTXO.

    Attributes
    ----------
    txid : str
        the transaction id as a hex string (little-endian as displayed by
        tools)
    txout_index : int
        the index of the UTXO that we want to spend
    script_sig : Script
        the script that satisfies the locking conditions (aka unlocking script)
    sequence : bytes
        the input sequence

    Methods
    -------
    to_bytes()
        serializes TxInput to bytes
    copy()
        creates a copy of the object (classmethod)
    from_raw()
        instantiates object from raw input bytes (staticmethod)

    Raises
    ------
    SerializationError
        if the txid is not 32 bytes of hex
    """

    def __init__(
        self,
        txid: str,
        txout_index: int,
        script_sig: Optional[Script] = None,
        sequence: bytes = DEFAULT_TX_SEQUENCE,
    ) -> None:
        """See TxInput description"""

        if len(h_to_b(txid)) != 32:
            raise SerializationError(f"Invalid transaction id: {txid!r}")
        if not 0 <= txout_index <= 0xFFFFFFFF:
            raise SerializationError(f"Invalid output index: {txout_index}")

        self.txid = txid
        self.txout_index = txout_index
        self.script_sig = script_sig if script_sig is not None else Script([])
        self.sequence = sequence

    def outpoint_bytes(self) -> bytes:
        """Serialized outpoint: txid in internal byte order and vout"""

        # the txid string is displayed in little-endian; reverse it back
        return h_to_b(self.txid)[::-1] + struct.pack("<I", self.txout_index)

    def to_bytes(self) -> bytes:
        """Serializes to bytes"""

        return (
            self.outpoint_bytes()
            + prepend_compact_size(self.script_sig.to_bytes())
            + self.sequence
        )

    def __str__(self):
        return str(
            {
                "txid": self.txid,
                "txout_index": self.txout_index,
                "script_sig": self.script_sig,
                "sequence": self.sequence.hex(),
            }
        )

    def __repr__(self):
        return self.__str__()

    @staticmethod
    def from_raw(txraw: bytes, cursor: int = 0) -> Tuple["TxInput", int]:
        """
        Imports a TxInput from a Transaction's raw bytes, returns the input
        and the cursor past it
        """
        txid, vout = struct.unpack_from("<32sI", txraw, cursor)
        cursor += 36

        script_size, size = parse_compact_size(txraw[cursor:])
        cursor += size
        if cursor + script_size + 4 > len(txraw):
            raise SerializationError("Truncated transaction input")
        script_sig = Script.from_raw(txraw[cursor : cursor + script_size])
        cursor += script_size

        sequence = txraw[cursor : cursor + 4]
        cursor += 4

        return TxInput(b_to_h(txid[::-1]), vout, script_sig, sequence), cursor

    @classmethod
    def copy(cls, txin: "TxInput") -> "TxInput":
        """Deep copy of TxInput"""

        return cls(
            txin.txid, txin.txout_index, Script.copy(txin.script_sig), txin.sequence
        )


class TxWitnessInput:
    """A list of the witness items required to satisfy the locking conditions
       of a segwit input (aka witness stack).

    Attributes
    ----------
    stack : list
        the witness items (hex str) list
    """

    def __init__(self, stack: list[str]) -> None:
        self.stack = stack

    def to_bytes(self) -> bytes:
        """Converts to bytes, including the item count"""
        stack_bytes = encode_varint(len(self.stack))
        for item in self.stack:
            stack_bytes += prepend_compact_size(h_to_b(item))
        return stack_bytes

    @classmethod
    def copy(cls, txwin: "TxWitnessInput") -> "TxWitnessInput":
        """Deep copy of TxWitnessInput"""

        return cls(list(txwin.stack))

    def __str__(self) -> str:
        return str({"witness_items": self.stack})

    def __repr__(self) -> str:
        return self.__str__()


class TxOutput:
    """Represents a transaction output

    Attributes
    ----------
    amount : int
        the value we want to send to this output in satoshis
    script_pubkey : Script
        the script that will lock this amount
    """

    def __init__(self, amount: int, script_pubkey: Script) -> None:
        """See TxOutput description"""

        if not isinstance(amount, int):
            raise TypeError("Amount needs to be in satoshis as an integer")

        self.amount = amount
        self.script_pubkey = script_pubkey

    def to_bytes(self) -> bytes:
        """Serializes to bytes"""

        # note struct uses little-endian by default
        amount_bytes = struct.pack("<q", self.amount)
        return amount_bytes + prepend_compact_size(self.script_pubkey.to_bytes())

    @staticmethod
    def from_raw(txraw: bytes, cursor: int = 0) -> Tuple["TxOutput", int]:
        """
        Imports a TxOutput from a Transaction's raw bytes, returns the output
        and the cursor past it
        """
        (amount,) = struct.unpack_from("<q", txraw, cursor)
        cursor += 8

        script_size, size = parse_compact_size(txraw[cursor:])
        cursor += size
        if cursor + script_size > len(txraw):
            raise SerializationError("Truncated transaction output")
        script_pubkey = Script.from_raw(txraw[cursor : cursor + script_size])
        cursor += script_size

        return TxOutput(amount, script_pubkey), cursor

    def __str__(self) -> str:
        return str({"amount": self.amount, "script_pubkey": self.script_pubkey})

    def __repr__(self) -> str:
        return self.__str__()

    @classmethod
    def copy(cls, txout: "TxOutput") -> "TxOutput":
        """Deep copy of TxOutput"""

        return cls(txout.amount, Script.copy(txout.script_pubkey))


class Transaction:
    """Represents a Bitcoin fork transaction

    Attributes
    ----------
    inputs : list (TxInput)
        A list of all the transaction inputs
    outputs : list (TxOutput)
        A list of all the transaction outputs
    locktime : int
        The transaction's locktime parameter
    version : int
        The transaction version
    has_segwit : bool
        Specifies a tx that includes segwit inputs
    witnesses : list (TxWitnessInput)
        The witness structure that corresponds to the inputs

    Methods
    -------
    to_bytes()
        Serializes Transaction to bytes
    to_hex()
        converts result of to_bytes to hexadecimal string
    from_raw()
        Instantiates a Transaction from serialized raw hexadacimal data
    get_hash()
        The double SHA-256 of the non-witness serialization (internal order)
    get_txid()
        The transaction id as displayed by block explorers
    copy()
        creates a copy of the object (classmethod)
    get_transaction_digest(txin_index, script, sighash)
        returns the legacy digest of an input that is to be signed
    get_transaction_segwit_digest(txin_index, script, amount, sighash, fork_id)
        returns the BIP143 digest of an input that is to be signed,
        optionally extended with a fork id
    """

    def __init__(
        self,
        inputs: Optional[list[TxInput]] = None,
        outputs: Optional[list[TxOutput]] = None,
        locktime: int = 0,
        version: int = LEGACY_TX_VERSION,
        has_segwit: bool = False,
        witnesses: Optional[list[TxWitnessInput]] = None,
    ) -> None:
        """See Transaction description"""

        self.inputs = inputs if inputs is not None else []
        self.outputs = outputs if outputs is not None else []
        self.witnesses = witnesses if witnesses is not None else []
        self.has_segwit = has_segwit
        self.locktime = locktime
        self.version = version

    def _to_bytes(self, include_witness: bool = True) -> bytes:
        """Serializes transaction to bytes following the consensus serialization

        Parameters
        ----------
        include_witness : bool
            Whether to include marker, flag and witness data
        """
        inputs_ser = b"".join(txin.to_bytes() for txin in self.inputs)
        outputs_ser = b"".join(txout.to_bytes() for txout in self.outputs)
        body = (
            encode_varint(len(self.inputs))
            + inputs_ser
            + encode_varint(len(self.outputs))
            + outputs_ser
        )

        version = struct.pack("<i", self.version)
        locktime = struct.pack("<I", self.locktime)

        if not include_witness or not self.has_segwit:
            return version + body + locktime

        # one witness per input; inputs without one get an empty stack
        witness_ser = b""
        for i in range(len(self.inputs)):
            if i < len(self.witnesses):
                witness_ser += self.witnesses[i].to_bytes()
            else:
                witness_ser += b"\x00"

        return version + b"\x00\x01" + body + witness_ser + locktime

    def to_bytes(self) -> bytes:
        return self._to_bytes(include_witness=self.has_segwit)

    def to_hex(self) -> str:
        """Serializes transaction to hex string"""
        return b_to_h(self.to_bytes())

    def get_hash(self) -> bytes:
        """Double SHA-256 of the serialization without witness data, in
        internal byte order"""
        return hash256(self._to_bytes(include_witness=False))

    def get_txid(self) -> str:
        """Calculates the transaction id (txid) in display byte order"""
        return b_to_h(self.get_hash()[::-1])

    @staticmethod
    def from_raw(rawtxhex: str) -> "Transaction":
        """
        Imports a Transaction from hexadecimal data.

        Raises
        ------
        SerializationError
            on malformed or truncated data
        """
        rawtx = h_to_b(rawtxhex)
        try:
            return Transaction._parse(rawtx)
        except (struct.error, IndexError, KeyError) as e:
            raise SerializationError(f"Malformed transaction: {e}") from e

    @staticmethod
    def _parse(rawtx: bytes) -> "Transaction":
        (version,) = struct.unpack_from("<i", rawtx, 0)
        cursor = 4

        has_segwit = rawtx[cursor] == 0x00 and rawtx[cursor + 1] == 0x01
        if has_segwit:
            cursor += 2

        n_inputs, size = parse_compact_size(rawtx[cursor:])
        cursor += size
        inputs = []
        for _ in range(n_inputs):
            txin, cursor = TxInput.from_raw(rawtx, cursor)
            inputs.append(txin)

        n_outputs, size = parse_compact_size(rawtx[cursor:])
        cursor += size
        outputs = []
        for _ in range(n_outputs):
            txout, cursor = TxOutput.from_raw(rawtx, cursor)
            outputs.append(txout)

        witnesses = []
        if has_segwit:
            for _ in range(n_inputs):
                n_items, size = parse_compact_size(rawtx[cursor:])
                cursor += size
                stack = []
                for _ in range(n_items):
                    item_size, size = parse_compact_size(rawtx[cursor:])
                    cursor += size
                    stack.append(b_to_h(rawtx[cursor : cursor + item_size]))
                    cursor += item_size
                witnesses.append(TxWitnessInput(stack))

        (locktime,) = struct.unpack_from("<I", rawtx, cursor)
        cursor += 4
        if cursor != len(rawtx):
            raise SerializationError("Trailing data after transaction")

        return Transaction(inputs, outputs, locktime, version, has_segwit, witnesses)

    def __str__(self) -> str:
        return str(
            {
                "inputs": self.inputs,
                "outputs": self.outputs,
                "has_segwit": self.has_segwit,
                "witnesses": self.witnesses,
                "locktime": self.locktime,
                "version": self.version,
            }
        )

    def __repr__(self) -> str:
        return self.__str__()

    @classmethod
    def copy(cls, tx: "Transaction") -> "Transaction":
        """Deep copy of Transaction"""

        ins = [TxInput.copy(txin) for txin in tx.inputs]
        outs = [TxOutput.copy(txout) for txout in tx.outputs]
        wits = [TxWitnessInput.copy(witness) for witness in tx.witnesses]
        return cls(ins, outs, tx.locktime, tx.version, tx.has_segwit, wits)

    def get_transaction_digest(
        self, txin_index: int, script: Script, sighash: int = SIGHASH_ALL
    ) -> bytes:
        """Returns the legacy transaction digest for signing an input.
        https://en.bitcoin.it/wiki/OP_CHECKSIG

        Only SIGHASH_ALL is produced by the signers, so the other sighash
        types are rejected.

        Attributes
        ----------
        txin_index : int
            The index of the input that we wish to sign
        script : Script
            The scriptPubKey of the UTXO that we want to spend
        sighash : int
            The type of the signature hash to be created
        """
        if sighash != SIGHASH_ALL:
            raise ValueError(f"Unsupported legacy sighash type: 0x{sighash:02x}")
        if not 0 <= txin_index < len(self.inputs):
            raise IndexError(f"Input index {txin_index} out of range")

        # clone transaction to modify without messing up the real transaction
        tmp_tx = Transaction.copy(self)

        # every scriptSig is emptied except the signed input's, which takes
        # the scriptPubKey of the UTXO it spends
        for txin in tmp_tx.inputs:
            txin.script_sig = Script([])
        tmp_tx.inputs[txin_index].script_sig = script

        # although sighash is appended to the signature as one byte it is
        # hashed as a 4 byte value
        tx_for_signing = tmp_tx._to_bytes(include_witness=False)
        tx_for_signing += struct.pack("<I", sighash)

        return hash256(tx_for_signing)

    def get_transaction_segwit_digest(
        self,
        txin_index: int,
        script: Script,
        amount: int,
        sighash: int = SIGHASH_ALL,
        fork_id: Optional[int] = None,
    ) -> bytes:
        """Returns the BIP143 digest of an input for signing.
        https://github.com/bitcoin/bips/blob/master/bip-0143.mediawiki

        Chains with replay protection (e.g. Bitcoin Cash, Bitcoin Gold) use
        the same algorithm for every input with SIGHASH_FORKID set and the
        fork id in the upper bytes of the hashed sighash type.

        Attributes
        ----------
        txin_index : int
            The index of the input that we wish to sign
        script : Script
            The scriptCode; for P2WPKH (and fork-id P2PKH) it is the P2PKH
            script of the key
        amount : int
            The amount of the UTXO to spend (in satoshis)
        sighash : int
            The type of the signature hash to be created
        fork_id : int, optional
            The chain's fork id; enables SIGHASH_FORKID when given
        """
        if sighash & 0x1F != SIGHASH_ALL or sighash & ~(0x1F | SIGHASH_FORKID):
            raise ValueError(f"Unsupported segwit sighash type: 0x{sighash:02x}")
        if not 0 <= txin_index < len(self.inputs):
            raise IndexError(f"Input index {txin_index} out of range")

        hash_type = sighash
        if fork_id is not None:
            hash_type = (fork_id << 8) | sighash | SIGHASH_FORKID

        hash_prevouts = hash256(
            b"".join(txin.outpoint_bytes() for txin in self.inputs)
        )
        hash_sequence = hash256(b"".join(txin.sequence for txin in self.inputs))
        hash_outputs = hash256(b"".join(txout.to_bytes() for txout in self.outputs))

        txin = self.inputs[txin_index]
        tx_for_signing = (
            struct.pack("<i", self.version)
            + hash_prevouts
            + hash_sequence
            + txin.outpoint_bytes()
            + prepend_compact_size(script.to_bytes())
            + struct.pack("<q", amount)
            + txin.sequence
            + hash_outputs
            + struct.pack("<I", self.locktime)
            + struct.pack("<I", hash_type)
        )

        return hash256(tx_for_signing)
