"""Block explorer links for submitted transactions."""

from typing import Optional

from faucetbot.faucet.models import Network

# (network, coin) entries take precedence over (network, None)
EXPLORER_TEMPLATES: dict[tuple[Network, Optional[str]], str] = {
    (Network.LIGHTNING, "BTC"): "https://www.blockchain.com/btc-testnet/tx/{txid}",
    (Network.LIGHTNING, "LTC"): "https://blockexplorer.one/litecoin/testnet/tx/{txid}",
    (Network.ETHEREUM, None): "https://sepolia.etherscan.io/tx/{txid}",
    (Network.ARBITRUM, None): "https://sepolia.arbiscan.io/tx/{txid}",
}


def explorer_template(network: Network, coin: str) -> Optional[str]:
    """Look up the URL template for a coin, or None if unmapped."""
    coin = coin.upper()
    return EXPLORER_TEMPLATES.get((network, coin)) or EXPLORER_TEMPLATES.get((network, None))


def build_explorer_url(
    network: Network,
    coin: str,
    txid: str,
    template: Optional[str] = None,
) -> str:
    """Build the explorer URL for a transaction.

    Args:
        network: Network the transaction was sent on
        coin: Coin code
        txid: Transaction id / hash
        template: Optional per-coin override containing "{txid}"

    Raises:
        KeyError: If no template exists for (network, coin). Configuration
            validation rejects such coins at startup.
    """
    template = template or explorer_template(network, coin)
    if template is None:
        raise KeyError(f"No explorer configured for {coin} on {network.value}")
    return template.format(txid=txid)
