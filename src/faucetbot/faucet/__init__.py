"""Faucet core: cooldown ledger, amount conversion, error taxonomy, dispatcher."""

from faucetbot.faucet.cooldown import CooldownLedger, ReserveResult, ReserveStatus
from faucetbot.faucet.dispatcher import DisbursementDispatcher, format_response
from faucetbot.faucet.errors import ErrorKind, FaucetError
from faucetbot.faucet.models import (
    AssetKind,
    CoinConfig,
    DisbursementRequest,
    DisbursementResult,
    DisbursementStatus,
    Network,
)

__all__ = [
    "AssetKind",
    "CoinConfig",
    "CooldownLedger",
    "DisbursementDispatcher",
    "DisbursementRequest",
    "DisbursementResult",
    "DisbursementStatus",
    "ErrorKind",
    "FaucetError",
    "Network",
    "ReserveResult",
    "ReserveStatus",
    "format_response",
]
