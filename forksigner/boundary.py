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
Entry points for hosts that cannot receive Python exceptions.

`landingpad` runs a call and turns any failure into a None return; the host
then reads the failure of its own thread with `get_last_error` and
`get_last_backtrace`:

    result = landingpad(sign_tx_json, keystore, request_json)
    if result is None:
        error = get_last_error()
"""

from __future__ import annotations

import threading
import traceback
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

from forksigner.keystore import Keystore
from forksigner.models import SignTxRequest
from forksigner.setup import get_network
from forksigner.signer import (
    ForkTransactionSigner,
    btc_fork_id_transaction,
    btc_fork_segwit_transaction,
    btc_fork_transaction,
)

T = TypeVar("T")

_state = threading.local()


def _notify_err(err: Exception) -> None:
    _state.last_error = err
    _state.last_backtrace = "".join(
        traceback.format_exception(type(err), err, err.__traceback__)
    )


def get_last_error() -> Optional[Exception]:
    """The last failure caught by landingpad on the calling thread"""
    return getattr(_state, "last_error", None)


def get_last_backtrace() -> Optional[str]:
    """The formatted traceback of the last failure on the calling thread"""
    return getattr(_state, "last_backtrace", None)


def clear_last_error() -> None:
    _state.last_error = None
    _state.last_backtrace = None


def landingpad(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
    """Calls fn; on failure records the error for the calling thread and
    returns None"""
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        _notify_err(e)
        logger.warning(f"{getattr(fn, '__name__', fn)} failed: {e}")
        return None


def signer_for_request(request: SignTxRequest) -> ForkTransactionSigner:
    """Segwit when requested, fork id signing on chains with a fork id,
    legacy otherwise"""
    if request.seg_wit:
        return btc_fork_segwit_transaction(request.input, request.coin)
    if get_network(request.coin).fork_id is not None:
        return btc_fork_id_transaction(request.input, request.coin)
    return btc_fork_transaction(request.input, request.coin)


def sign_tx_json(keystore: Keystore, request_json: str) -> str:
    """Signs a JSON request and returns {"signature": ..., "txHash": ...}"""
    request = SignTxRequest.model_validate_json(request_json)
    output = keystore.sign_transaction(signer_for_request(request))
    return output.model_dump_json(by_alias=True)
