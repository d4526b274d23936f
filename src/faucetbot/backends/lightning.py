"""Lightning (LND) on-chain send backend.

Uses the LND REST API: POST /v1/transactions, authenticated with the
admin macaroon in the Grpc-Metadata-macaroon header.
"""

import logging
import ssl
from decimal import Decimal
from typing import Optional, Union

import httpx
from pydantic import BaseModel, Field, ValidationError, field_serializer

from faucetbot.backends.base import SettlementBackend
from faucetbot.faucet.amounts import to_base_units
from faucetbot.faucet.errors import (
    LIGHTNING_ERRORS,
    ErrorKind,
    FaucetError,
    classify_error_text,
)

logger = logging.getLogger(__name__)

SEND_COINS_ENDPOINT = "/v1/transactions"
MACAROON_HEADER = "Grpc-Metadata-macaroon"
SATOSHI_DECIMALS = 8


def tls_verify(cert_path: Optional[str]) -> Union[bool, ssl.SSLContext]:
    """Build the httpx `verify` value for an LND node.

    LND serves a self-signed tls.cert. With a path, only that certificate is
    trusted; without one, verification is disabled.
    """
    if not cert_path:
        return False
    return ssl.create_default_context(cafile=cert_path)


class SendCoinsRequest(BaseModel):
    """Body of an LND SendCoins call."""

    addr: str
    amount: int  # satoshis
    target_conf: int = 0
    sat_per_vbyte: int = 0
    send_all: bool = False
    label: str = ""
    min_confs: int = 0
    spend_unconfirmed: bool = False

    @field_serializer("amount")
    def _amount_as_string(self, amount: int) -> str:
        # LND encodes int64 fields as JSON strings
        return str(amount)


class SendCoinsResponse(BaseModel):
    txid: str = Field(min_length=1)


class LightningBackend(SettlementBackend):
    """On-chain send through an LND node."""

    name = "lightning"

    def __init__(
        self,
        url: str,
        macaroon: str,
        verify: Union[bool, ssl.SSLContext] = False,
        timeout: float = 30.0,
        label: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize backend.

        Args:
            url: Node REST base URL, e.g. https://localhost:8080
            macaroon: Hex-encoded admin macaroon
            verify: SSL context trusting the node's tls.cert (see tls_verify), or False
                to accept its self-signed certificate
            timeout: HTTP timeout in seconds
            label: Label attached to every transaction
            transport: Custom httpx transport (tests)
        """
        self.url = url.rstrip("/")
        self.macaroon = macaroon
        self.verify = verify
        self.timeout = timeout
        self.label = label
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={MACAROON_HEADER: self.macaroon},
            verify=self.verify,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def submit(self, destination: str, amount: Decimal) -> str:
        """Send coins on-chain from the node wallet."""
        request = SendCoinsRequest(
            addr=destination,
            amount=to_base_units(amount, SATOSHI_DECIMALS),
            label=self.label,
        )

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.url}{SEND_COINS_ENDPOINT}",
                    json=request.model_dump(),
                )
        except httpx.TransportError as e:
            raise FaucetError(
                ErrorKind.PROVIDER_UNAVAILABLE,
                f"Couldn't reach Lightning node at {self.url}: {e!r}",
            ) from e

        body = response.text

        try:
            message = SendCoinsResponse.model_validate_json(body)
        except ValidationError:
            logger.debug(f"LND send failed ({response.status_code}): {body}")
            raise FaucetError(classify_error_text(body, LIGHTNING_ERRORS), body)

        logger.info(f"LND sent {request.amount} sats to {destination}: {message.txid}")
        return message.txid
