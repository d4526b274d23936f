"""EVM settlement backends.

Uses web3.py (async) for gas estimation and raw-transaction submission and
eth_account for local signing. Supports native coin transfers and ERC-20
token transfers on any EVM network (Ethereum, Arbitrum).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Optional

import aiohttp
from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_account.signers.local import LocalAccount
from eth_utils import function_signature_to_4byte_selector
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3, WebSocketProvider
from web3.exceptions import ProviderConnectionError

from faucetbot.backends.base import SettlementBackend
from faucetbot.faucet.amounts import to_base_units
from faucetbot.faucet.errors import (
    GAS_ESTIMATION_ERRORS,
    SUBMISSION_ERRORS,
    ErrorKind,
    FaucetError,
    classify_exception,
)

logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18
TRANSFER_SIGNATURE = "transfer(address,uint256)"

UNAVAILABLE_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientConnectionError,
    ProviderConnectionError,
)


def parse_address(value: str) -> str:
    """Parse a user-supplied address into checksum form.

    Raises:
        FaucetError: INVALID_ADDRESS if the string is not an EVM address
    """
    if not value or not Web3.is_address(value):
        raise FaucetError(ErrorKind.INVALID_ADDRESS, f"Invalid EVM address: {value!r}")
    return Web3.to_checksum_address(value)


def encode_transfer(destination: str, amount: int) -> bytes:
    """ABI-encode an ERC-20 transfer(address,uint256) call."""
    try:
        selector = function_signature_to_4byte_selector(TRANSFER_SIGNATURE)
        return selector + encode(["address", "uint256"], [destination, amount])
    except EncodingError as e:
        raise FaucetError(ErrorKind.ENCODING_ERROR, f"Couldn't encode ABI: {e}") from e


class EvmClient:
    """Signs and submits transactions from the faucet account on one network.

    One client is shared by every backend on the same network so that nonce
    allocation for the funding account is serialized.
    """

    def __init__(
        self,
        endpoint: str,
        account: LocalAccount,
        timeout: float = 30.0,
        web3: Optional[AsyncWeb3] = None,
    ):
        """Initialize client.

        Args:
            endpoint: http(s) or ws(s) JSON-RPC endpoint
            account: Faucet signing account
            timeout: HTTP request timeout in seconds
            web3: Pre-built AsyncWeb3 instance (tests)
        """
        self.endpoint = endpoint
        self.account = account
        self.timeout = timeout
        self._web3 = web3
        self._nonce_lock = asyncio.Lock()

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def is_websocket(self) -> bool:
        return self.endpoint.startswith(("ws://", "wss://"))

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncWeb3]:
        """Yield a connected AsyncWeb3.

        HTTP providers are created once and reused; websocket providers are
        opened per call.
        """
        if self._web3 is not None:
            yield self._web3
            return

        if self.is_websocket:
            async with AsyncWeb3(WebSocketProvider(self.endpoint)) as w3:
                yield w3
            return

        self._web3 = AsyncWeb3(
            AsyncHTTPProvider(
                self.endpoint,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=self.timeout)},
            )
        )
        yield self._web3

    async def transact(self, call: dict[str, Any]) -> str:
        """Estimate gas for `call`, then sign and submit it.

        Args:
            call: Transaction fields without gas/nonce/fee ("to", "value", "data")

        Returns:
            0x-prefixed transaction hash
        """
        try:
            async with self.connect() as w3:
                return await self._transact(w3, call)
        except FaucetError:
            raise
        except Exception as e:
            raise classify_exception(e, SUBMISSION_ERRORS, unavailable=UNAVAILABLE_ERRORS) from e

    async def _transact(self, w3: AsyncWeb3, call: dict[str, Any]) -> str:
        try:
            gas = await w3.eth.estimate_gas({"from": self.address, **call})
        except Exception as e:
            logger.warning(f"Couldn't estimate gas on {self.endpoint}: {e}")
            raise classify_exception(
                e, GAS_ESTIMATION_ERRORS, unavailable=UNAVAILABLE_ERRORS
            ) from e

        async with self._nonce_lock:
            tx = {
                **call,
                "gas": gas,
                "gasPrice": await w3.eth.gas_price,
                "nonce": await w3.eth.get_transaction_count(self.address, "pending"),
                "chainId": await w3.eth.chain_id,
            }
            signed = self.account.sign_transaction(tx)
            tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)

        return "0x" + bytes(tx_hash).hex().removeprefix("0x")


class NativeEvmBackend(SettlementBackend):
    """Transfers the network's native coin (ETH, Arbitrum ETH)."""

    name = "evm-native"

    def __init__(self, client: EvmClient):
        self.client = client

    async def submit(self, destination: str, amount: Decimal) -> str:
        to_address = parse_address(destination)
        value = to_base_units(amount, NATIVE_DECIMALS)

        txid = await self.client.transact({"to": to_address, "value": value})
        logger.info(f"Sent {value} wei to {to_address}: {txid}")
        return txid


class Erc20Backend(SettlementBackend):
    """Transfers an ERC-20 token via transfer(address,uint256)."""

    name = "erc20"

    def __init__(self, client: EvmClient, contract: str, decimals: int):
        self.client = client
        self.contract = contract
        self.decimals = decimals

    async def submit(self, destination: str, amount: Decimal) -> str:
        contract = parse_address(self.contract)
        to_address = parse_address(destination)
        token_amount = to_base_units(amount, self.decimals)

        data = encode_transfer(to_address, token_amount)

        txid = await self.client.transact({"to": contract, "value": 0, "data": data})
        logger.info(f"Sent {token_amount} units of {contract} to {to_address}: {txid}")
        return txid
