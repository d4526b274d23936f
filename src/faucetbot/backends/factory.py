"""Factory for creating settlement backends from configuration.

Selection is driven by explicit per-coin configuration:
- network LIGHTNING               -> LightningBackend for the coin's node
- EVM network, asset_kind NATIVE  -> NativeEvmBackend
- EVM network, asset_kind TOKEN   -> Erc20Backend
"""

import logging
from typing import Mapping

from faucetbot.backends.base import SettlementBackend
from faucetbot.backends.evm import Erc20Backend, EvmClient, NativeEvmBackend
from faucetbot.backends.lightning import LightningBackend, tls_verify
from faucetbot.faucet.errors import ConfigurationError
from faucetbot.faucet.models import AssetKind, CoinConfig, Network

logger = logging.getLogger(__name__)


def select_backend(
    coin: CoinConfig,
    lightning: Mapping[str, LightningBackend],
    evm_clients: Mapping[str, EvmClient],
) -> SettlementBackend:
    """Pick the backend for a coin.

    Args:
        coin: Coin configuration
        lightning: Lightning backends keyed by node name
        evm_clients: EVM clients keyed by provider network name

    Raises:
        ConfigurationError: If the coin's endpoint is not available
    """
    if coin.network == Network.LIGHTNING:
        if coin.endpoint not in lightning:
            raise ConfigurationError(f"{coin.name}: unknown Lightning node '{coin.endpoint}'")
        return lightning[coin.endpoint]

    if coin.endpoint not in evm_clients:
        raise ConfigurationError(f"{coin.name}: no provider for '{coin.endpoint}'")
    client = evm_clients[coin.endpoint]

    if coin.asset_kind == AssetKind.NATIVE:
        return NativeEvmBackend(client)

    if not coin.contract:
        raise ConfigurationError(f"{coin.name}: token coins require a contract address")
    return Erc20Backend(client, contract=coin.contract, decimals=coin.decimals)


def build_backends(settings, credentials) -> dict[str, SettlementBackend]:
    """Create one backend per configured coin.

    Args:
        settings: Loaded Settings
        credentials: FaucetCredentials (macaroons and EVM account)

    Returns:
        Backends keyed by coin code
    """
    coins = settings.coin_configs()

    lightning: dict[str, LightningBackend] = {}
    for node_name, node in settings.lightning_nodes.items():
        if node_name not in credentials.macaroons:
            continue
        lightning[node_name] = LightningBackend(
            url=node.url,
            macaroon=credentials.macaroons[node_name],
            verify=tls_verify(node.tls_cert_path),
            timeout=settings.backend_timeout_seconds,
            label=settings.lightning_label,
        )

    evm_clients: dict[str, EvmClient] = {}
    if credentials.evm_account is not None:
        for network_name, endpoint in settings.providers.items():
            evm_clients[network_name] = EvmClient(
                endpoint,
                credentials.evm_account,
                timeout=settings.backend_timeout_seconds,
            )

    backends = {}
    for code, coin in coins.items():
        backends[code] = select_backend(coin, lightning, evm_clients)
        logger.info(f"{code}: {backends[code].name} backend on {coin.network.value}")

    return backends
