"""Pytest configuration and fixtures."""

import asyncio
import os
from decimal import Decimal
from typing import Optional

import pytest

# Set test environment
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["DEBUG"] = "true"

from faucetbot.backends.base import SettlementBackend
from faucetbot.faucet.models import AssetKind, CoinConfig, Network


class FakeBackend(SettlementBackend):
    """Settlement backend that records calls and returns a canned txid."""

    name = "fake"

    def __init__(
        self,
        txid: str = "abc123",
        error: Optional[BaseException] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.txid = txid
        self.error = error
        self.gate = gate
        self.calls: list[tuple[str, Decimal]] = []

    async def submit(self, destination: str, amount: Decimal) -> str:
        self.calls.append((destination, amount))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.txid


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def btc_coin() -> CoinConfig:
    return CoinConfig(
        name="BTC",
        network=Network.LIGHTNING,
        asset_kind=AssetKind.NATIVE,
        amount=Decimal("0.0005"),
        decimals=8,
        endpoint="btc",
    )


@pytest.fixture
def eth_coin() -> CoinConfig:
    return CoinConfig(
        name="ETH",
        network=Network.ETHEREUM,
        asset_kind=AssetKind.NATIVE,
        amount=Decimal("0.01"),
        decimals=18,
        endpoint="ethereum",
    )


@pytest.fixture
def usdc_coin() -> CoinConfig:
    return CoinConfig(
        name="USDC",
        network=Network.ETHEREUM,
        asset_kind=AssetKind.TOKEN,
        amount=Decimal("10"),
        decimals=6,
        endpoint="ethereum",
        contract="0x" + "cd" * 20,
    )
