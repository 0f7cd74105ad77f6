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

__version__ = "0.1.0"

from forksigner.setup import setup, get_network

from forksigner.errors import (
    ForkSignerError,
    AccountNotFoundError,
    MalformedDerivationPathError,
    InsufficientFundsError,
    InvalidAddressError,
    KeyDerivationError,
    SerializationError,
    UnsupportedCoinError,
)

from forksigner.keys import PrivateKey, PublicKey

from forksigner.address import AddressScheme, BtcForkAddress, BtcForkAddressScheme

from forksigner.models import Utxo, BtcForkTxInput, SignedTxOutput

from forksigner.sign_strategy import (
    SignStrategy,
    LegacySignStrategy,
    SegWitSignStrategy,
    SignHasher,
    LegacySignHasher,
    ForkIdSignHasher,
)

from forksigner.signer import (
    ForkTransactionSigner,
    btc_fork_transaction,
    btc_fork_segwit_transaction,
    btc_fork_id_transaction,
)

from forksigner.keystore import Account, Keystore, HdKeystore, ExtendedPubKeyStore

from forksigner.boundary import landingpad, get_last_error, sign_tx_json

__all__ = [
    'setup',
    'get_network',
    'ForkSignerError',
    'AccountNotFoundError',
    'MalformedDerivationPathError',
    'InsufficientFundsError',
    'InvalidAddressError',
    'KeyDerivationError',
    'SerializationError',
    'UnsupportedCoinError',
    'PrivateKey',
    'PublicKey',
    'AddressScheme',
    'BtcForkAddress',
    'BtcForkAddressScheme',
    'Utxo',
    'BtcForkTxInput',
    'SignedTxOutput',
    'SignStrategy',
    'LegacySignStrategy',
    'SegWitSignStrategy',
    'SignHasher',
    'LegacySignHasher',
    'ForkIdSignHasher',
    'ForkTransactionSigner',
    'btc_fork_transaction',
    'btc_fork_segwit_transaction',
    'btc_fork_id_transaction',
    'Account',
    'Keystore',
    'HdKeystore',
    'ExtendedPubKeyStore',
    'landingpad',
    'get_last_error',
    'sign_tx_json',
]
