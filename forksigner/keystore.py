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
from typing import Any, Optional, Sequence

from loguru import logger

from forksigner.constants import TPRV_VERSION, XPRV_VERSION
from forksigner.errors import AccountNotFoundError, KeyDerivationError
from forksigner.hdwallet import HDPrivateKey, get_account_path
from forksigner.keys import PrivateKey
from forksigner.models import SignedTxOutput
from forksigner.signer import ForkTransactionSigner


class Account:
    """A keystore account of one coin

    Attributes
    ----------
    coin : str
        the coin symbol, upper case
    derivation_path : str
        the path of the account's first address, e.g. m/44'/2'/0'/0/0
    extra : dict
        chain specific data; holds the account xpub under "xpub"
    """

    def __init__(self, coin: str, derivation_path: str, extra: Optional[dict[str, Any]] = None):
        self.coin = coin.upper()
        self.derivation_path = derivation_path
        self.extra = extra if extra is not None else {}

    def __repr__(self) -> str:
        return f"Account({self.coin}, {self.derivation_path})"


class ExtendedPubKeyStore:
    """Reads the account extended public key out of the account extra data"""

    def xpub(self, account_extra: dict[str, Any]) -> str:
        xpub = account_extra.get("xpub")
        if not xpub:
            raise KeyDerivationError("Account has no extended public key")
        return xpub


class Keystore(ABC):
    """Holds the accounts and derives their private keys

    Methods
    -------
    account(coin)
        the account of a coin, or None
    keys_at_paths(coin, paths)
        the private keys at the given paths, in the same order
    sign_transaction(signer)
        signs a transfer with the keys of the signer's coin account
    """

    pub_key_store = ExtendedPubKeyStore()

    @abstractmethod
    def account(self, coin: str) -> Optional[Account]:
        pass

    @abstractmethod
    def keys_at_paths(self, coin: str, paths: Sequence[str]) -> list[PrivateKey]:
        """Derives every key or raises; never returns a partial list"""

    def sign_transaction(self, signer: ForkTransactionSigner) -> SignedTxOutput:
        """
        Raises
        ------
        AccountNotFoundError
            if the keystore has no account for the signer's coin
        """
        coin = signer.coin.upper()
        account = self.account(coin)
        if account is None:
            raise AccountNotFoundError(f"account_not_found: {coin}")

        paths = signer.build_key_paths(account.derivation_path)
        # one batch keeps keys[i] aligned with unspents[i]
        keys = self.keys_at_paths(coin, paths)

        xpub = self.pub_key_store.xpub(account.extra)
        change_script = signer.resolve_change_script(xpub)
        return signer.sign(keys, change_script)


class HdKeystore(Keystore):
    """An in-memory keystore over a BIP32 master key

    Usage:
        keystore = HdKeystore.from_seed(seed)
        keystore.add_account("LITECOIN", "m/44'/2'/0'/0/0")
    """

    def __init__(self, master_key: HDPrivateKey) -> None:
        self.master_key = master_key
        self._accounts: dict[str, Account] = {}

    @classmethod
    def from_seed(cls, seed: bytes, testnet: bool = False) -> HdKeystore:
        version = TPRV_VERSION if testnet else XPRV_VERSION
        return cls(HDPrivateKey.from_seed(seed, version))

    @classmethod
    def from_xprv(cls, xprv: str) -> HdKeystore:
        return cls(HDPrivateKey.from_xprv(xprv))

    def add_account(self, coin: str, derivation_path: str) -> Account:
        """Registers the account of `coin`, recording its xpub"""
        account_path = get_account_path(derivation_path)
        xpub = self.master_key.derive(account_path).to_xpub()
        account = Account(coin, derivation_path, {"xpub": xpub})
        self._accounts[account.coin] = account
        logger.debug(f"Added {account.coin} account at {account_path}")
        return account

    def account(self, coin: str) -> Optional[Account]:
        return self._accounts.get(coin.upper())

    def keys_at_paths(self, coin: str, paths: Sequence[str]) -> list[PrivateKey]:
        if self.account(coin) is None:
            raise AccountNotFoundError(f"account_not_found: {coin.upper()}")
        return [self.master_key.derive(path).private_key for path in paths]
