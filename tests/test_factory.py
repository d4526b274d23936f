"""Tests for backend selection."""

import ssl
from unittest.mock import MagicMock, patch

import pytest
from eth_account import Account

from faucetbot.backends import (
    Erc20Backend,
    LightningBackend,
    NativeEvmBackend,
    build_backends,
    select_backend,
)
from faucetbot.backends.evm import EvmClient
from faucetbot.config import Settings
from faucetbot.credentials import FaucetCredentials
from faucetbot.faucet.errors import ConfigurationError

ACCOUNT = Account.from_key("0x" + "11" * 32)


class TestSelectBackend:
    """Tests for select_backend."""

    @pytest.fixture
    def lightning(self):
        return {"btc": LightningBackend("https://localhost:8080", "00")}

    @pytest.fixture
    def evm_clients(self):
        return {"ethereum": EvmClient("https://rpc.example", ACCOUNT)}

    def test_lightning(self, btc_coin, lightning, evm_clients):
        assert select_backend(btc_coin, lightning, evm_clients) is lightning["btc"]

    def test_native(self, eth_coin, lightning, evm_clients):
        backend = select_backend(eth_coin, lightning, evm_clients)

        assert isinstance(backend, NativeEvmBackend)
        assert backend.client is evm_clients["ethereum"]

    def test_token(self, usdc_coin, lightning, evm_clients):
        backend = select_backend(usdc_coin, lightning, evm_clients)

        assert isinstance(backend, Erc20Backend)
        assert backend.decimals == 6
        assert backend.contract == usdc_coin.contract

    def test_unknown_node(self, btc_coin, evm_clients):
        with pytest.raises(ConfigurationError):
            select_backend(btc_coin, {}, evm_clients)

    def test_missing_provider(self, eth_coin, lightning):
        with pytest.raises(ConfigurationError):
            select_backend(eth_coin, lightning, {})


class TestBuildBackends:
    """Tests for build_backends."""

    def test_build_backends(self):
        settings = Settings(
            _env_file=None,
            lightning_nodes={"btc": {"url": "https://localhost:8080", "macaroon_path": "x"}},
            providers={"ethereum": "https://rpc.example"},
            coins={
                "BTC": {"amount": "0.0005", "network": "lightning", "decimals": 8, "node": "btc"},
                "ETH": {"amount": "0.01", "network": "ethereum", "decimals": 18},
                "USDC": {
                    "amount": "10",
                    "network": "ethereum",
                    "asset_kind": "token",
                    "decimals": 6,
                    "contract": "0x" + "cd" * 20,
                },
            },
        )
        credentials = FaucetCredentials(macaroons={"btc": "0201"}, evm_account=ACCOUNT)

        backends = build_backends(settings, credentials)

        assert isinstance(backends["BTC"], LightningBackend)
        assert backends["BTC"].macaroon == "0201"
        assert isinstance(backends["ETH"], NativeEvmBackend)
        assert isinstance(backends["USDC"], Erc20Backend)
        # Same network shares one client
        assert backends["ETH"].client is backends["USDC"].client

    def _lightning_settings(self, **node):
        return Settings(
            _env_file=None,
            lightning_nodes={
                "btc": {"url": "https://localhost:8080", "macaroon_path": "x", **node}
            },
            coins={
                "BTC": {"amount": "0.0005", "network": "lightning", "decimals": 8, "node": "btc"},
            },
        )

    def test_tls_cert_builds_ssl_context(self):
        """A configured tls.cert is trusted through an SSLContext, not a path."""
        settings = self._lightning_settings(tls_cert_path="/lnd/tls.cert")
        credentials = FaucetCredentials(macaroons={"btc": "0201"}, evm_account=None)
        context = MagicMock(spec=ssl.SSLContext)

        with patch(
            "faucetbot.backends.lightning.ssl.create_default_context", return_value=context
        ) as create_context:
            backends = build_backends(settings, credentials)

        create_context.assert_called_once_with(cafile="/lnd/tls.cert")
        assert backends["BTC"].verify is context

    def test_no_tls_cert_disables_verification(self):
        settings = self._lightning_settings()
        credentials = FaucetCredentials(macaroons={"btc": "0201"}, evm_account=None)

        backends = build_backends(settings, credentials)

        assert backends["BTC"].verify is False
