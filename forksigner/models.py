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
Request and result models of a signing call.

Field names are snake_case; the camelCase names used on the wire
(txHash, derivedPath, changeAddress...) are accepted as aliases.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from forksigner.constants import MAX_SATOSHI

_U32_MAX = 0xFFFFFFFF


def _to_satoshi(v: Any) -> Any:
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError as e:
            raise ValueError(f"Invalid satoshi amount: {v!r}") from e
    return v


class Utxo(BaseModel):
    tx_hash: str = Field(..., alias="txHash", min_length=1)
    vout: int = Field(..., ge=0, le=_U32_MAX)
    amount: int = Field(..., le=MAX_SATOSHI)
    address: str
    script_pub_key: str = Field(default="", alias="scriptPubKey")
    derived_path: str = Field(..., alias="derivedPath")
    sequence: int = 0

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        return _to_satoshi(v)

    model_config = {"frozen": True, "populate_by_name": True}


class BtcForkTxInput(BaseModel):
    """The intent of one signing call

    The order of `unspents` is the order of the transaction inputs and of
    the keys that sign them.
    """

    to: str
    amount: int = Field(..., le=MAX_SATOSHI)
    unspents: list[Utxo] = Field(default_factory=list)
    fee: int = Field(..., le=MAX_SATOSHI)
    change_idx: int = Field(default=0, alias="changeIdx", ge=0, le=_U32_MAX)
    change_address: Optional[str] = Field(default=None, alias="changeAddress")
    memo: str = ""

    @field_validator("amount", "fee", mode="before")
    @classmethod
    def validate_satoshi(cls, v: Any) -> Any:
        return _to_satoshi(v)

    def total_unspent(self) -> int:
        return sum(utxo.amount for utxo in self.unspents)

    model_config = {"frozen": True, "populate_by_name": True}


class SignedTxOutput(BaseModel):
    """A signed transaction

    `signature` is the hex serialization of the signed transaction and
    `tx_hash` the hex of its double SHA-256 in internal byte order.
    """

    signature: str
    tx_hash: str = Field(..., alias="txHash")

    @property
    def txid(self) -> str:
        """The identifier in the byte order block explorers display"""
        return bytes.fromhex(self.tx_hash)[::-1].hex()

    model_config = {"frozen": True, "populate_by_name": True}


class SignTxRequest(BaseModel):
    """The JSON signing request: {"coin", "segWit", "input"}"""

    coin: str = Field(..., min_length=1)
    seg_wit: bool = Field(default=False, alias="segWit")
    input: BtcForkTxInput

    model_config = {"frozen": True, "populate_by_name": True}
