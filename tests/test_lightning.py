"""Tests for the LND backend."""

import json
from decimal import Decimal

import httpx
import pytest

from faucetbot.backends.lightning import LightningBackend, SendCoinsRequest
from faucetbot.faucet.errors import ErrorKind, FaucetError

ADDRESS = "tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx"


def make_backend(handler, **kwargs) -> LightningBackend:
    return LightningBackend(
        "https://lnd.local:8080/",
        "0201036c6e64",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestSendCoinsRequest:
    """Tests for the request body."""

    def test_amount_serialized_as_string(self):
        body = SendCoinsRequest(addr=ADDRESS, amount=50000).model_dump()

        assert body == {
            "addr": ADDRESS,
            "amount": "50000",
            "target_conf": 0,
            "sat_per_vbyte": 0,
            "send_all": False,
            "label": "",
            "min_confs": 0,
            "spend_unconfirmed": False,
        }


class TestLightningBackend:
    """Tests for LightningBackend.submit."""

    @pytest.mark.asyncio
    async def test_submit_success(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json={"txid": "f00d"})

        backend = make_backend(handler, label="faucet")
        txid = await backend.submit(ADDRESS, Decimal("0.0005"))

        request = captured["request"]
        body = json.loads(request.content)

        assert txid == "f00d"
        assert request.method == "POST"
        assert str(request.url) == "https://lnd.local:8080/v1/transactions"
        assert request.headers["Grpc-Metadata-macaroon"] == "0201036c6e64"
        assert body["addr"] == ADDRESS
        assert body["amount"] == "50000"
        assert body["label"] == "faucet"
        assert body["send_all"] is False
        assert body["spend_unconfirmed"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "message,kind",
        [
            ("address tb1qxyz is not valid for this network", ErrorKind.INVALID_ADDRESS),
            ("invalid address", ErrorKind.INVALID_ADDRESS),
            ("insufficient funds available to construct transaction", ErrorKind.INSUFFICIENT_FUNDS),
            ("wallet is locked", ErrorKind.GENERIC),
        ],
    )
    async def test_error_bodies(self, message, kind):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"code": 2, "message": message, "details": []})

        with pytest.raises(FaucetError) as exc_info:
            await make_backend(handler).submit(ADDRESS, Decimal("0.0005"))

        assert exc_info.value.kind == kind
        assert message in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_empty_txid_is_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"txid": ""})

        with pytest.raises(FaucetError) as exc_info:
            await make_backend(handler).submit(ADDRESS, Decimal("0.0005"))

        assert exc_info.value.kind == ErrorKind.GENERIC

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(FaucetError) as exc_info:
            await make_backend(handler).submit(ADDRESS, Decimal("0.0005"))

        assert exc_info.value.kind == ErrorKind.GENERIC
        assert exc_info.value.detail == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_node_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FaucetError) as exc_info:
            await make_backend(handler).submit(ADDRESS, Decimal("0.0005"))

        assert exc_info.value.kind == ErrorKind.PROVIDER_UNAVAILABLE
