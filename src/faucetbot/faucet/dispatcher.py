"""Disbursement dispatcher.

Request lifecycle:
1. Validating     - resolve the coin code against configuration
2. CooldownCheck  - reserve a ledger slot for (user, coin)
3. Dispatching    - submit through the coin's settlement backend
4. Settled/Failed - commit or release the reservation
5. Responded      - shape a DisbursementResult / user-facing message
"""

import asyncio
import logging
import time
from decimal import Decimal
from typing import Callable, Hashable, Mapping, Optional

from faucetbot.backends.base import SettlementBackend
from faucetbot.faucet.cooldown import CooldownLedger, ReserveStatus
from faucetbot.faucet.errors import ErrorKind, FaucetError
from faucetbot.faucet.explorer import build_explorer_url
from faucetbot.faucet.models import (
    CoinConfig,
    DisbursementRequest,
    DisbursementResult,
    DisbursementStatus,
)

logger = logging.getLogger(__name__)

COIN_NOT_SUPPORTED = "Coin not supported!"
TRANSACTION_FAILED = "Transaction failed, retry later!"

FAILURE_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_ADDRESS: "Invalid address!",
    ErrorKind.INSUFFICIENT_FUNDS: "Faucet out of funds!",
    ErrorKind.PENDING_TRANSACTION: "Another transaction is still pending, retry in some minutes!",
}


def normalize_coin_code(code: str) -> str:
    """Strip all whitespace and upper-case a coin code (" e t h" -> "ETH")."""
    return "".join(code.split()).upper()


def format_amount(amount: Decimal) -> str:
    """Render an amount without exponent or trailing zeros."""
    return format(amount.normalize(), "f")


def format_wait(seconds: float) -> str:
    """Render remaining cooldown as '<h>h<m>m', truncated to whole minutes."""
    total = max(int(seconds), 0)
    hours = total // 3600
    minutes = (total % 3600) // 60
    return f"{hours}h{minutes}m"


def format_response(result: DisbursementResult) -> str:
    """Build the chat reply for a result."""
    if result.status == DisbursementStatus.SENT:
        return f"Sent {format_amount(result.amount)} {result.coin}! {result.explorer_url}"

    if result.status == DisbursementStatus.COOLDOWN:
        return (
            f"Please wait another {format_wait(result.wait_seconds or 0)} "
            f"before requesting new {result.coin}!"
        )

    if result.status == DisbursementStatus.UNSUPPORTED:
        return COIN_NOT_SUPPORTED

    return FAILURE_MESSAGES.get(result.error_kind, TRANSACTION_FAILED)


class DisbursementDispatcher:
    """Validates, rate-limits and routes faucet requests.

    Constructed once at startup and shared by every message handler. The
    only mutable state is the CooldownLedger, which synchronizes itself.
    """

    def __init__(
        self,
        coins: Mapping[str, CoinConfig],
        backends: Mapping[str, SettlementBackend],
        cooldown_hours: float = 24,
        ledger: Optional[CooldownLedger] = None,
        clock: Callable[[], float] = time.time,
        backend_timeout: Optional[float] = None,
    ):
        """Initialize dispatcher.

        Args:
            coins: Coin configs keyed by upper-case code
            backends: Settlement backend for each coin code
            cooldown_hours: Cooldown window per (user, coin)
            ledger: Cooldown ledger (a fresh one if omitted)
            clock: Returns the current time in seconds
            backend_timeout: Seconds before a backend call is abandoned
        """
        missing = set(coins) - set(backends)
        if missing:
            raise ValueError(f"No backend for coins: {', '.join(sorted(missing))}")

        self.coins = dict(coins)
        self.backends = dict(backends)
        self.cooldown_seconds = float(cooldown_hours) * 3600
        self.ledger = ledger if ledger is not None else CooldownLedger()
        self.clock = clock
        self.backend_timeout = backend_timeout

    async def handle(self, user_id: Hashable, coin_code: str, destination: str) -> str:
        """Process a request and return the chat reply."""
        result = await self.dispatch(DisbursementRequest(user_id, coin_code, destination))
        return format_response(result)

    async def dispatch(self, request: DisbursementRequest) -> DisbursementResult:
        """Process a faucet request end to end."""
        code = normalize_coin_code(request.coin_code)
        coin = self.coins.get(code)

        if coin is None:
            logger.info(f"User {request.user_id} requested unsupported coin {code!r}")
            return DisbursementResult(status=DisbursementStatus.UNSUPPORTED, coin=code)

        key = (request.user_id, coin.name)
        reservation = self.ledger.reserve(key, self.clock(), self.cooldown_seconds)

        if not reservation.reserved:
            if reservation.status == ReserveStatus.WAIT:
                wait = reservation.remaining_seconds
            else:
                # In flight; if it settles the full window applies
                wait = self.cooldown_seconds
            logger.info(
                f"User {request.user_id} rate limited for {coin.name} "
                f"({reservation.status.value}, {wait:.0f}s left)"
            )
            return DisbursementResult(
                status=DisbursementStatus.COOLDOWN,
                coin=coin.name,
                wait_seconds=wait,
            )

        destination = request.destination_address.strip()

        try:
            txid = await self._submit(coin, destination)
        except FaucetError as e:
            self.ledger.release(key)
            logger.error(
                f"Disbursement of {coin.name} to {destination} for user "
                f"{request.user_id} failed [{e.kind.value}]: {e.detail}"
            )
            return DisbursementResult(
                status=DisbursementStatus.FAILED,
                coin=coin.name,
                error_kind=e.kind,
                detail=e.detail,
            )
        except Exception as e:
            self.ledger.release(key)
            logger.exception(
                f"Unexpected error sending {coin.name} to {destination} "
                f"for user {request.user_id}: {e}"
            )
            return DisbursementResult(
                status=DisbursementStatus.FAILED,
                coin=coin.name,
                error_kind=ErrorKind.GENERIC,
                detail=f"{type(e).__name__}: {e}",
            )
        except BaseException:
            # Cancellation: free the slot and propagate
            self.ledger.release(key)
            raise

        self.ledger.commit(key, self.clock())

        explorer_url = build_explorer_url(coin.network, coin.name, txid, coin.explorer_url)
        logger.info(
            f"Sent {format_amount(coin.amount)} {coin.name} to {destination} "
            f"for user {request.user_id}: {txid}"
        )

        return DisbursementResult(
            status=DisbursementStatus.SENT,
            coin=coin.name,
            amount=coin.amount,
            txid=txid,
            explorer_url=explorer_url,
        )

    async def _submit(self, coin: CoinConfig, destination: str) -> str:
        backend = self.backends[coin.name]
        submission = backend.submit(destination, coin.amount)

        if self.backend_timeout is None:
            return await submission

        try:
            return await asyncio.wait_for(submission, timeout=self.backend_timeout)
        except asyncio.TimeoutError as e:
            raise FaucetError(
                ErrorKind.PROVIDER_UNAVAILABLE,
                f"{backend.name} backend timed out after {self.backend_timeout}s",
            ) from e
