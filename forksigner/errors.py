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


class ForkSignerError(Exception):
    """Base class of every failure raised while signing a transaction."""


class AccountNotFoundError(ForkSignerError):
    """The keystore holds no account for the requested coin."""


class MalformedDerivationPathError(ForkSignerError):
    """A UTXO derived path does not have exactly two components."""


class InsufficientFundsError(ForkSignerError):
    """The UTXOs do not cover amount plus fee."""


class InvalidAddressError(ForkSignerError, ValueError):
    """An address has a bad checksum, format, version byte or prefix."""


class KeyDerivationError(ForkSignerError):
    """A key could not be derived at the requested path."""


class SerializationError(ForkSignerError, ValueError):
    """Malformed hex, script or transaction data."""


class UnsupportedCoinError(ForkSignerError, ValueError):
    """The coin symbol is not in the network registry."""
