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

from typing import Optional

from forksigner.constants import NETWORKS, ForkNetwork
from forksigner.errors import UnsupportedCoinError

NETWORK = "BITCOIN-TESTNET"


def setup(coin: str = "BITCOIN-TESTNET") -> str:
    """Setup the default fork network used when none is given explicitly.

    Args:
        coin: The coin symbol of the network (e.g. LITECOIN, BITCOINCASH)
    """
    global NETWORK
    NETWORK = _normalize(coin)
    return NETWORK


def get_network(coin: Optional[str] = None) -> ForkNetwork:
    """Returns the parameters of `coin`, or of the configured default network"""
    if coin is None:
        return NETWORKS[NETWORK]
    return NETWORKS[_normalize(coin)]


def is_supported(coin: str) -> bool:
    return coin.upper() in NETWORKS


def _normalize(coin: str) -> str:
    symbol = coin.upper()
    if symbol not in NETWORKS:
        raise UnsupportedCoinError(f"Unsupported coin: {coin}")
    return symbol
